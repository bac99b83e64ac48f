# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Salted one-way password hashing for account records.

Stored hashes carry their own argon2 parameters, so records hashed under older
settings still verify; ``needs_rehash`` tells the login flow when to upgrade them.
"""

from __future__ import annotations

from argon2 import PasswordHasher
from argon2.exceptions import InvalidHashError, VerificationError

_HASHER = PasswordHasher()


def hash_password(plain: str, *, hasher: PasswordHasher = _HASHER) -> str:
    if not plain:
        raise ValueError("Password cannot be empty")
    return hasher.hash(plain)


def verify_password(stored_hash: str, candidate: str) -> bool:
    """True only when candidate matches stored_hash; malformed hashes never match."""
    if not stored_hash or not candidate:
        return False
    try:
        return _HASHER.verify(stored_hash, candidate)
    except (VerificationError, InvalidHashError):
        return False


def needs_rehash(stored_hash: str) -> bool:
    try:
        return _HASHER.check_needs_rehash(stored_hash)
    except InvalidHashError:
        return False
