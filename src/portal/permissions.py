# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

from __future__ import annotations

import os
from typing import Optional

from fastapi import HTTPException, Request

from portal.auth.session import SessionData


class RequestContext:
    """Per-request identity slot shared by the auth middleware and handlers."""

    def __init__(self, identity: Optional[SessionData] = None):
        self._identity = identity
        self.changed = False

    @property
    def identity(self) -> Optional[SessionData]:
        return self._identity

    @identity.setter
    def identity(self, value: Optional[SessionData]) -> None:
        self._identity = value
        self.changed = True

    def login(self, username: str) -> None:
        self.identity = SessionData(username=username)

    def logout(self) -> None:
        self.identity = None


def session_context(request: Request) -> RequestContext:
    ctx = getattr(request.state, "session", None)
    if ctx is None:
        # only reachable when the auth middleware is not installed
        ctx = RequestContext()
        request.state.session = ctx
    return ctx


def current_user_optional(request: Request) -> Optional[SessionData]:
    return session_context(request).identity


def require_user(request: Request) -> SessionData:
    u = current_user_optional(request)
    if u:
        return u
    raise HTTPException(status_code=302, headers={"Location": "/login"})


def cookie_settings() -> dict:
    secure = os.getenv("PORTAL_COOKIE_SECURE", "false").lower() in {"1", "true", "yes", "y"}
    return {"httponly": True, "samesite": "lax", "secure": secure, "path": "/"}
