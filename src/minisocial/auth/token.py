# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from itsdangerous import BadSignature, URLSafeTimedSerializer

COOKIE_NAME = "token"


@dataclass(frozen=True)
class Identity:
    email: str
    user_id: str


def _serializer(secret: str, salt: str) -> URLSafeTimedSerializer:
    if not secret:
        raise RuntimeError("Token secret is not configured")
    return URLSafeTimedSerializer(secret_key=secret, salt=salt)


def sign_token(email: str, user_id: str, *, secret: str, salt: str) -> str:
    return _serializer(secret, salt).dumps({"email": email, "userid": str(user_id)})


def verify_token(token: str, *, secret: str, salt: str, max_age: int) -> Optional[Identity]:
    """Return the identity carried by token, or None if it is empty, tampered or expired."""
    if not token:
        return None
    s = _serializer(secret, salt)
    try:
        data = s.loads(token, max_age=max_age)
    except BadSignature:
        # SignatureExpired and BadTimeSignature are both BadSignature subclasses
        return None
    if not isinstance(data, dict):
        return None
    email = str(data.get("email") or "").strip()
    user_id = str(data.get("userid") or "").strip()
    if not email or not user_id:
        return None
    return Identity(email=email, user_id=user_id)
