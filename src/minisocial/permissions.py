# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

from __future__ import annotations

from typing import Optional

from fastapi import HTTPException, Request
from pymongo.database import Database

from minisocial.auth.token import COOKIE_NAME, Identity, verify_token
from minisocial.config import Settings
from minisocial.flash import flash


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_db(request: Request) -> Database:
    return request.app.state.db


def load_identity_from_request(request: Request) -> Optional[Identity]:
    settings = get_settings(request)
    token = request.cookies.get(COOKIE_NAME, "")
    return verify_token(
        token,
        secret=settings.secret_key,
        salt=settings.token_salt,
        max_age=settings.token_max_age,
    )


def current_identity_optional(request: Request) -> Optional[Identity]:
    ident = getattr(request.state, "user", None)
    if ident is not None:
        return ident
    return load_identity_from_request(request)


def require_user(request: Request) -> Identity:
    ident = load_identity_from_request(request)
    if ident:
        request.state.user = ident
        return ident
    if request.cookies.get(COOKIE_NAME):
        flash(request, "error", "Session expired")
    else:
        flash(request, "error", "Please log in")
    raise HTTPException(status_code=303, headers={"Location": "/login"})
