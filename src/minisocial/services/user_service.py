# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

from __future__ import annotations

import logging
import re
from typing import List, Optional

from bson import ObjectId
from bson.errors import InvalidId
from pymongo.database import Database
from pymongo.errors import DuplicateKeyError

from minisocial.auth.passwords import hash_password, needs_rehash, verify_password
from minisocial.errors import DuplicateRegistration, InvalidCredentials, UserNotFound
from minisocial.infra.store import posts, users
from minisocial.models import Post, Privacy, User

logger = logging.getLogger(__name__)

# Usernames appear as a single path segment in /profile/{username}
USERNAME_RE = re.compile(r"^[A-Za-z0-9_.-]+$")
MAX_AGE = 150


def normalize_email(email: str) -> str:
    return str(email or "").strip().lower()


def _parse_age(age) -> Optional[int]:
    if age is None or str(age).strip() == "":
        return None
    try:
        value = int(str(age).strip())
    except ValueError:
        raise ValueError(f"Age must be a number, got '{age}'") from None
    if value < 0:
        raise ValueError("Age cannot be negative")
    if value > MAX_AGE:
        raise ValueError(f"Age cannot be greater than {MAX_AGE}")
    return value


def get_user_by_email(db: Database, email: str) -> Optional[User]:
    doc = users(db).find_one({"email": normalize_email(email)})
    return User.from_doc(doc) if doc else None


def get_user_by_username(db: Database, username: str) -> Optional[User]:
    u = str(username or "").strip()
    if not u:
        return None
    doc = users(db).find_one({"username": u})
    return User.from_doc(doc) if doc else None


def get_user_by_id(db: Database, user_id) -> Optional[User]:
    try:
        oid = ObjectId(str(user_id))
    except (InvalidId, TypeError):
        return None
    doc = users(db).find_one({"_id": oid})
    return User.from_doc(doc) if doc else None


def require_user_by_email(db: Database, email: str) -> User:
    u = get_user_by_email(db, email)
    if not u:
        raise UserNotFound("User not found")
    return u


def register_user(
    db: Database,
    *,
    name: str,
    username: str,
    email: str,
    age,
    password: str,
) -> User:
    """Create a new account.

    Fails with DuplicateRegistration when the email (or the username, which the
    public profile route resolves by) is already in use. Nothing is written in
    that case.
    """
    email_n = normalize_email(email)
    username_n = str(username or "").strip()
    if not email_n:
        raise ValueError("Email cannot be empty")
    if not username_n:
        raise ValueError("Username cannot be empty")
    if not USERNAME_RE.fullmatch(username_n) or username_n in {".", ".."}:
        raise ValueError("Username may only contain letters, digits, '.', '_' and '-'")

    if users(db).find_one({"email": email_n}):
        raise DuplicateRegistration("User already registered")
    if users(db).find_one({"username": username_n}):
        raise DuplicateRegistration("Username already taken")

    doc = {
        "name": str(name or "").strip(),
        "username": username_n,
        "email": email_n,
        "age": _parse_age(age),
        "password": hash_password(password),
        "privacy": Privacy.PUBLIC.value,
        "posts": [],
    }
    try:
        res = users(db).insert_one(doc)
    except DuplicateKeyError:
        raise DuplicateRegistration("User already registered") from None
    doc["_id"] = res.inserted_id
    logger.info("Registered user %s (%s)", username_n, res.inserted_id)
    return User.from_doc(doc)


def authenticate(db: Database, email: str, password: str) -> User:
    u = get_user_by_email(db, email)
    if not u:
        logger.warning("Login failed: no user for %s", normalize_email(email))
        raise UserNotFound("User not found")
    if not verify_password(u.password, password):
        logger.warning("Login failed: bad password for %s", u.email)
        raise InvalidCredentials("Invalid credentials")
    if needs_rehash(u.password):
        # hashed under older argon2 parameters
        users(db).update_one({"_id": u.id}, {"$set": {"password": hash_password(password)}})
        logger.info("Upgraded password hash for %s", u.email)
        return require_user_by_email(db, u.email)
    return u


def set_privacy(db: Database, email: str, privacy: str) -> User:
    """Overwrite the privacy setting of the account identified by email."""
    value = Privacy.parse(privacy)
    u = require_user_by_email(db, email)
    users(db).update_one({"_id": u.id}, {"$set": {"privacy": value.value}})
    logger.info("User %s privacy -> %s", u.username, value.value)
    return require_user_by_email(db, email)


def list_user_posts(db: Database, user: User) -> List[Post]:
    """Populate the user's posts, keeping the order of the user's post list."""
    if not user.posts:
        return []
    by_id = {d["_id"]: Post.from_doc(d) for d in posts(db).find({"_id": {"$in": list(user.posts)}})}
    return [by_id[pid] for pid in user.posts if pid in by_id]
