# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

from __future__ import annotations

import os
from dataclasses import dataclass

from pymongo.uri_parser import parse_uri

DEFAULT_MONGODB_URI = "mongodb://localhost:27017/miniproject1"
DEFAULT_DB_NAME = "miniproject1"


def _env_bool(name: str, default: str) -> bool:
    return os.getenv(name, default).lower() in {"1", "true", "yes", "y"}


def _db_name_from_uri(uri: str) -> str:
    try:
        return parse_uri(uri).get("database") or DEFAULT_DB_NAME
    except Exception:
        return DEFAULT_DB_NAME


@dataclass(frozen=True)
class Settings:
    """Process-wide configuration, built once at startup."""

    secret_key: str
    mongodb_uri: str = DEFAULT_MONGODB_URI
    db_name: str = DEFAULT_DB_NAME
    token_salt: str = "minisocial.token.v1"
    token_max_age: int = 28800  # 8 hours
    cookie_secure: bool = False
    enforce_post_ownership: bool = True
    mongo_timeout_ms: int = 5000
    host: str = "0.0.0.0"
    port: int = 3000
    reload: bool = False
    log_level: str = "INFO"

    @classmethod
    def from_env(cls) -> "Settings":
        secret = os.getenv("SECRET_KEY") or os.getenv("MINISOCIAL_SECRET_KEY")
        if not secret:
            raise RuntimeError("Missing SECRET_KEY (or MINISOCIAL_SECRET_KEY) in environment")
        uri = os.getenv("MONGODB_URI") or DEFAULT_MONGODB_URI
        return cls(
            secret_key=secret,
            mongodb_uri=uri,
            db_name=os.getenv("MINISOCIAL_DB_NAME") or _db_name_from_uri(uri),
            token_salt=os.getenv("MINISOCIAL_TOKEN_SALT", "minisocial.token.v1"),
            token_max_age=int(os.getenv("MINISOCIAL_TOKEN_MAX_AGE", "28800")),
            cookie_secure=_env_bool("MINISOCIAL_COOKIE_SECURE", "false"),
            enforce_post_ownership=_env_bool("MINISOCIAL_ENFORCE_POST_OWNERSHIP", "true"),
            mongo_timeout_ms=int(os.getenv("MINISOCIAL_MONGO_TIMEOUT_MS", "5000")),
            host=os.getenv("HOST", "0.0.0.0"),
            port=int(os.getenv("PORT", "3000")),
            reload=_env_bool("MINISOCIAL_RELOAD", "false"),
            log_level=os.getenv("MINISOCIAL_LOG_LEVEL", "INFO").upper(),
        )

    def cookie_settings(self) -> dict:
        return {"httponly": True, "samesite": "lax", "secure": self.cookie_secure}
