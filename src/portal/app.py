# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

from fastapi import Depends, FastAPI, Request
from fastapi.responses import FileResponse, HTMLResponse, RedirectResponse
from fastapi.templating import Jinja2Templates
from starlette.concurrency import run_in_threadpool
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.formparsers import MultiPartException

from portal.auth.session import COOKIE_NAME, SessionCodec
from portal.auth.store import CredentialStore, StoreError
from portal.config import PortalConfig
from portal.permissions import RequestContext, cookie_settings, require_user, session_context

logger = logging.getLogger(__name__)

BASE_DIR = Path(__file__).resolve().parent
STYLE_PATH = BASE_DIR / "static" / "style.css"

INVALID_CREDENTIALS = "Invalid username/password"
INTERNAL_ERROR = "internal server error"

RENDER_ERROR_PAGE = (
    "<!DOCTYPE html><html><head><title>Error</title></head>"
    "<body><h1>Internal server error</h1></body></html>"
)


def create_app(config: PortalConfig, *, templates_dir: Optional[Path] = None) -> FastAPI:
    """Build the web app around an already-loaded config.

    The credential store is expected to be bootstrapped by the caller.
    """
    app = FastAPI()
    app.state.config = config

    store = CredentialStore(config.db_name)
    codec = SessionCodec(config.session_key)
    templates = Jinja2Templates(directory=str(templates_dir or BASE_DIR / "templates"))

    @app.middleware("http")
    async def _auth_middleware(request: Request, call_next):
        ctx = RequestContext(codec.decode(request.cookies.get(COOKIE_NAME)))
        request.state.session = ctx
        response = await call_next(request)
        if ctx.changed:
            if ctx.identity:
                response.set_cookie(COOKIE_NAME, codec.encode(ctx.identity), **cookie_settings())
            else:
                response.delete_cookie(COOKIE_NAME, path="/")
        return response

    def _render(request: Request, template_name: str, ctx: dict):
        """TemplateResponse wrapper; any render failure only fails this request."""
        try:
            return templates.TemplateResponse(request, template_name, ctx)
        except Exception:
            logger.exception("Could not render template %s", template_name)
            return HTMLResponse(RENDER_ERROR_PAGE, status_code=500)

    def _login_page(request: Request, error: str = ""):
        return _render(request, "login.html", {"error": error} if error else {})

    # ------------------ Routes ------------------

    @app.get("/", response_class=HTMLResponse)
    def home(request: Request, user=Depends(require_user)):
        return _render(request, "home.html", {"username": user.username})

    @app.get("/style")
    def style():
        return FileResponse(STYLE_PATH, media_type="text/css")

    @app.get("/login", response_class=HTMLResponse)
    def login_get(request: Request):
        return _login_page(request)

    @app.post("/login")
    async def login_post(request: Request, ctx: RequestContext = Depends(session_context)):
        try:
            form = await request.form()
        except (StarletteHTTPException, MultiPartException) as e:
            logger.warning("Could not parse login form: %s", e)
            return _login_page(request, INTERNAL_ERROR)

        username = form.get("username")
        password = form.get("password")
        if not isinstance(username, str) or not isinstance(password, str):
            return _login_page(request, INVALID_CREDENTIALS)

        try:
            found = await run_in_threadpool(store.verify, username, password)
        except StoreError:
            return _login_page(request, INTERNAL_ERROR)

        if found is None:
            logger.info("Failed login for %r", username)
            return _login_page(request, INVALID_CREDENTIALS)

        logger.info("User %r logged in", found)
        ctx.login(found)
        return RedirectResponse(url="/", status_code=302)

    @app.get("/logout")
    def logout(ctx: RequestContext = Depends(session_context)):
        ctx.logout()
        return RedirectResponse(url="/login", status_code=302)

    return app
