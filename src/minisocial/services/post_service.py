# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

from __future__ import annotations

import logging
from datetime import datetime, timezone

from bson import ObjectId
from bson.errors import InvalidId
from pymongo.database import Database

from minisocial.errors import NotPostOwner, PostNotFound, PostNotVisible
from minisocial.infra.store import posts, users
from minisocial.models import Post
from minisocial.services.user_service import get_user_by_id, require_user_by_email

logger = logging.getLogger(__name__)


def _oid(value) -> ObjectId:
    try:
        return ObjectId(str(value))
    except (InvalidId, TypeError):
        raise PostNotFound(f"Post '{value}' not found") from None


def _clean_content(content: str) -> str:
    text = str(content or "").strip()
    if not text:
        raise ValueError("Post content cannot be empty")
    return text


def get_post(db: Database, post_id) -> Post:
    doc = posts(db).find_one({"_id": _oid(post_id)})
    if not doc:
        raise PostNotFound(f"Post '{post_id}' not found")
    return Post.from_doc(doc)


def create_post(db: Database, email: str, content: str) -> Post:
    """Create a post for the user identified by email and append it to their post list.

    These are two separate writes (insert, then push); a failure between them
    leaves an orphan post that no profile lists.
    """
    text = _clean_content(content)
    u = require_user_by_email(db, email)
    doc = {
        "user": u.id,
        "content": text,
        "likes": [],
        "created_at": datetime.now(timezone.utc),
    }
    res = posts(db).insert_one(doc)
    users(db).update_one({"_id": u.id}, {"$push": {"posts": res.inserted_id}})
    doc["_id"] = res.inserted_id
    return Post.from_doc(doc)


def check_owner(post: Post, acting_user_id: str) -> None:
    if str(post.user) != str(acting_user_id):
        logger.warning("User %s refused edit of post %s (owner %s)", acting_user_id, post.id, post.user)
        raise NotPostOwner("You can only edit your own posts")


def get_post_for_edit(db: Database, post_id, acting_user_id: str, *, enforce_owner: bool = True) -> Post:
    post = get_post(db, post_id)
    if enforce_owner:
        check_owner(post, acting_user_id)
    return post


def update_post(
    db: Database,
    post_id,
    content: str,
    acting_user_id: str,
    *,
    enforce_owner: bool = True,
) -> Post:
    """Overwrite a post's content.

    With enforce_owner=False any authenticated caller may overwrite any post.
    """
    text = _clean_content(content)
    post = get_post_for_edit(db, post_id, acting_user_id, enforce_owner=enforce_owner)
    posts(db).update_one({"_id": post.id}, {"$set": {"content": text}})
    return get_post(db, post.id)


def toggle_like(db: Database, post_id, user_id: str) -> bool:
    """Like the post if user_id has not liked it yet, otherwise unlike it.

    Returns True when the post ends up liked. Posts of private profiles can
    only be liked by their owner.
    """
    post = get_post(db, post_id)
    uid = ObjectId(str(user_id))
    owner = get_user_by_id(db, post.user)
    if owner is not None and not owner.is_public and owner.id != uid:
        logger.warning("User %s refused like on private post %s", user_id, post.id)
        raise PostNotVisible("This post is private")

    if post.is_liked_by(user_id):
        posts(db).update_one({"_id": post.id}, {"$pull": {"likes": uid}})
        return False
    posts(db).update_one({"_id": post.id}, {"$addToSet": {"likes": uid}})
    return True
