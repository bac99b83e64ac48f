# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

from __future__ import annotations

from pathlib import Path
from typing import Optional
from urllib.parse import quote

from fastapi import Depends, FastAPI, Form, HTTPException, Request
from fastapi.responses import HTMLResponse, PlainTextResponse, RedirectResponse
from fastapi.staticfiles import StaticFiles
from fastapi.templating import Jinja2Templates
from pymongo.database import Database
from starlette.middleware.sessions import SessionMiddleware

from minisocial.auth.token import COOKIE_NAME, Identity, sign_token
from minisocial.config import Settings
from minisocial.errors import PostNotFound, SocialError
from minisocial.flash import flash, pop_flashes
from minisocial.infra.store import connect, ensure_indexes
from minisocial.models import User
from minisocial.permissions import current_identity_optional, get_db, get_settings, require_user
from minisocial.services import post_service, user_service

BASE_DIR = Path(__file__).resolve().parent

templates = Jinja2Templates(directory=str(BASE_DIR / "templates"))


def _render(request: Request, template_name: str, ctx: Optional[dict] = None, status_code: int = 200):
    """TemplateResponse wrapper injecting flash notices and the current identity."""
    base_ctx = {
        "flashes": pop_flashes(request),
        "current_user": getattr(request.state, "user", None),
    }
    merged = {**base_ctx, **(ctx or {})}
    return templates.TemplateResponse(request, template_name, merged, status_code=status_code)


def _redirect(url: str) -> RedirectResponse:
    return RedirectResponse(url=url, status_code=303)


def _login_redirect(settings: Settings, user: User) -> RedirectResponse:
    token = sign_token(user.email, str(user.id), secret=settings.secret_key, salt=settings.token_salt)
    resp = _redirect("/profile")
    resp.set_cookie(COOKIE_NAME, token, max_age=settings.token_max_age, **settings.cookie_settings())
    return resp


def _current_user(db: Database, ident: Identity) -> User:
    u = user_service.get_user_by_email(db, ident.email)
    if not u:
        raise HTTPException(status_code=303, headers={"Location": "/login"})
    return u


def create_app(settings: Optional[Settings] = None, db: Optional[Database] = None) -> FastAPI:
    settings = settings or Settings.from_env()
    if db is None:
        db = connect(settings)
    ensure_indexes(db)

    app = FastAPI(title="minisocial")
    app.state.settings = settings
    app.state.db = db

    @app.middleware("http")
    async def _auth_middleware(request: Request, call_next):
        request.state.user = current_identity_optional(request)
        return await call_next(request)

    app.add_middleware(
        SessionMiddleware,
        secret_key=settings.secret_key,
        same_site="lax",
        https_only=settings.cookie_secure,
    )
    app.mount("/static", StaticFiles(directory=str(BASE_DIR / "static")), name="static")

    # ------------------ Public routes ------------------

    @app.get("/", response_class=HTMLResponse)
    def index(request: Request):
        return _render(request, "index.html")

    @app.get("/login", response_class=HTMLResponse)
    def login_get(request: Request):
        return _render(request, "login.html")

    @app.get("/register", response_class=HTMLResponse)
    def register_get(request: Request):
        return _render(request, "register.html")

    @app.post("/register")
    def register_post(
        request: Request,
        name: str = Form(""),
        username: str = Form(""),
        email: str = Form(""),
        age: str = Form(""),
        password: str = Form(""),
        db: Database = Depends(get_db),
        settings: Settings = Depends(get_settings),
    ):
        try:
            u = user_service.register_user(
                db, name=name, username=username, email=email, age=age, password=password
            )
        except ValueError as e:
            flash(request, "error", str(e))
            return _redirect("/register")
        flash(request, "success", "Successfully registered!")
        return _login_redirect(settings, u)

    @app.post("/login")
    def login_post(
        request: Request,
        email: str = Form(""),
        password: str = Form(""),
        db: Database = Depends(get_db),
        settings: Settings = Depends(get_settings),
    ):
        try:
            u = user_service.authenticate(db, email, password)
        except SocialError as e:
            flash(request, "error", str(e))
            return _redirect("/login")
        flash(request, "success", "Successfully logged in!")
        return _login_redirect(settings, u)

    @app.get("/logout")
    def logout(request: Request, settings: Settings = Depends(get_settings)):
        resp = _redirect("/login")
        resp.set_cookie(COOKIE_NAME, "", **settings.cookie_settings())
        flash(request, "success", "Logged out!")
        return resp

    # ------------------ Profile ------------------

    @app.get("/profile", response_class=HTMLResponse)
    def profile(request: Request, ident: Identity = Depends(require_user), db: Database = Depends(get_db)):
        u = _current_user(db, ident)
        return _render(request, "profile.html", {"user": u, "posts": user_service.list_user_posts(db, u)})

    @app.post("/profile/privacy")
    def profile_privacy(
        request: Request,
        privacy: str = Form(""),
        ident: Identity = Depends(require_user),
        db: Database = Depends(get_db),
    ):
        try:
            user_service.set_privacy(db, ident.email, privacy)
        except ValueError as e:
            flash(request, "error", str(e))
            return _redirect("/profile")
        flash(request, "success", "Privacy setting updated!")
        return _redirect("/profile")

    @app.get("/profile/{username}", response_class=HTMLResponse)
    def profile_public(
        request: Request,
        username: str,
        ident: Identity = Depends(require_user),
        db: Database = Depends(get_db),
    ):
        profile_user = user_service.get_user_by_username(db, username)
        if not profile_user:
            return PlainTextResponse("User not found", status_code=404)
        is_owner = ident.user_id == str(profile_user.id)
        can_view = profile_user.is_public or is_owner
        return _render(
            request,
            "profile_public.html",
            {
                "profile_user": profile_user,
                "posts": user_service.list_user_posts(db, profile_user),
                "can_view": can_view,
                "is_owner": is_owner,
                "viewer": ident,
            },
        )

    # ------------------ Posts ------------------

    @app.post("/post")
    def create_post(
        request: Request,
        content: str = Form(""),
        ident: Identity = Depends(require_user),
        db: Database = Depends(get_db),
    ):
        try:
            post_service.create_post(db, ident.email, content)
        except ValueError as e:
            flash(request, "error", str(e))
            return _redirect("/profile")
        flash(request, "success", "Post created!")
        return _redirect("/profile")

    @app.get("/edit/{post_id}", response_class=HTMLResponse)
    def edit_post(
        request: Request,
        post_id: str,
        ident: Identity = Depends(require_user),
        db: Database = Depends(get_db),
        settings: Settings = Depends(get_settings),
    ):
        try:
            post = post_service.get_post_for_edit(
                db, post_id, ident.user_id, enforce_owner=settings.enforce_post_ownership
            )
        except PostNotFound:
            raise HTTPException(status_code=404, detail="Post not found")
        except SocialError as e:
            flash(request, "error", str(e))
            return _redirect("/profile")
        owner = user_service.get_user_by_id(db, post.user)
        return _render(request, "edit.html", {"post": post, "owner": owner})

    @app.post("/update/{post_id}")
    def update_post(
        request: Request,
        post_id: str,
        content: str = Form(""),
        ident: Identity = Depends(require_user),
        db: Database = Depends(get_db),
        settings: Settings = Depends(get_settings),
    ):
        try:
            post_service.update_post(
                db, post_id, content, ident.user_id, enforce_owner=settings.enforce_post_ownership
            )
        except PostNotFound:
            raise HTTPException(status_code=404, detail="Post not found")
        except ValueError as e:
            flash(request, "error", str(e))
            return _redirect("/profile")
        flash(request, "success", "Post updated!")
        return _redirect("/profile")

    @app.get("/like/{post_id}")
    def like_post(
        request: Request,
        post_id: str,
        username: str = "",
        ident: Identity = Depends(require_user),
        db: Database = Depends(get_db),
    ):
        # Liking from someone's profile page returns there
        target = f"/profile/{quote(username, safe='')}" if username else "/profile"
        try:
            post_service.toggle_like(db, post_id, ident.user_id)
        except PostNotFound:
            raise HTTPException(status_code=404, detail="Post not found")
        except SocialError as e:
            flash(request, "error", str(e))
        return _redirect(target)

    return app
