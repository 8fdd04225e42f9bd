"""Middleware: pre-handler gates over the request and working response.

A middleware is an object with ``process(request, response)`` or a plain
callable of the same shape, returning an ``Outcome`` (or a bool).

Built-in middleware:
    AuthMiddleware -- Redirect anonymous requests to the login page
    SessionMiddleware -- Signed cookie sessions (itsdangerous)
"""

from perch.middleware.auth import AuthConfig, AuthMiddleware, current_user_id, login, logout
from perch.middleware.protocol import Middleware, Outcome, invoke
from perch.middleware.sessions import (
    SessionConfig,
    SessionMiddleware,
    get_session,
    regenerate_session,
)

__all__ = [
    "AuthConfig",
    "AuthMiddleware",
    "Middleware",
    "Outcome",
    "SessionConfig",
    "SessionMiddleware",
    "current_user_id",
    "get_session",
    "invoke",
    "login",
    "logout",
    "regenerate_session",
]
