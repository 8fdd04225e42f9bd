"""Authentication middleware: session-based login gate.

Requests whose session carries no user id are redirected to the login
page, with the requested URL passed along so the login handler can send
the user back afterwards. The URL passed along includes the app's
``base_path``; ``login_url`` is used as given. Requires
``SessionMiddleware`` to run first.

Usage::

    app.add_middleware(SessionMiddleware(SessionConfig(secret_key="...")))
    app.register_middleware("auth", AuthMiddleware())

    router.group("/admin", ["auth"], "Admin", lambda r: r.get("/", "AdminController@index"))

    # In the login action, after checking the password:
    login(self.request, user.id)
"""

from dataclasses import dataclass
from typing import Any
from urllib.parse import quote

from perch.http.request import Request
from perch.http.response import Response
from perch.middleware.protocol import Outcome
from perch.middleware.sessions import get_session, regenerate_session


@dataclass(frozen=True, slots=True)
class AuthConfig:
    """Authentication middleware configuration."""

    login_url: str = "/login"
    session_key: str = "user_id"
    redirect_param: str = "redirect"


_DEFAULT_CONFIG = AuthConfig()


def current_user_id(request: Request, config: AuthConfig = _DEFAULT_CONFIG) -> Any:
    """The logged-in user id, or ``None``."""
    return get_session(request).get(config.session_key)


def login(request: Request, user_id: Any, config: AuthConfig = _DEFAULT_CONFIG) -> None:
    """Start an authenticated session for *user_id*.

    The session is regenerated first so a pre-login session id cannot be
    reused after authentication.
    """
    session = regenerate_session(request)
    session[config.session_key] = user_id


def logout(request: Request) -> None:
    regenerate_session(request)


class AuthMiddleware:
    """Redirect anonymous requests to the login page and halt."""

    __slots__ = ("_config",)

    def __init__(self, config: AuthConfig | None = None) -> None:
        self._config = config or _DEFAULT_CONFIG

    def process(self, request: Request, response: Response) -> Outcome:
        if current_user_id(request, self._config) is not None:
            return Outcome.CONTINUE
        target = quote(request.full_url, safe="")
        response.redirect(f"{self._config.login_url}?{self._config.redirect_param}={target}")
        return Outcome.HALT
