"""Session middleware: signed cookie sessions.

Session data is serialized as JSON and signed with ``itsdangerous``.
The session dict lives on ``request.state`` and is written back to the
response through a response hook, so changes made by the handler (a
login, a flash message) are persisted even though middleware itself
only runs before the handler.
"""

from dataclasses import dataclass
from typing import Any

from itsdangerous import BadData, URLSafeTimedSerializer

from perch.errors import ConfigurationError
from perch.http.request import Request
from perch.http.response import Response
from perch.middleware.protocol import Outcome

SESSION_STATE_KEY = "session"


def get_session(request: Request) -> dict[str, Any]:
    """Return the session dict for *request*.

    Raises ``LookupError`` if ``SessionMiddleware`` did not run.
    """
    session = request.state.get(SESSION_STATE_KEY)
    if session is None:
        msg = (
            "No active session. Ensure SessionMiddleware is added "
            "to the app before accessing the session."
        )
        raise LookupError(msg)
    return session


def regenerate_session(request: Request) -> dict[str, Any]:
    """Drop everything in the session and return the (now empty) dict.

    Call on login and logout to prevent session fixation.
    """
    session = get_session(request)
    session.clear()
    return session


@dataclass(frozen=True, slots=True)
class SessionConfig:
    """Session middleware configuration.

    ``secret_key`` is required. Sessions are signed, not encrypted.
    """

    secret_key: str
    cookie_name: str = "perch_session"
    max_age: int = 86400  # 24 hours
    path: str = "/"
    domain: str | None = None
    secure: bool = False
    httponly: bool = True
    samesite: str = "Lax"


class SessionMiddleware:
    """Signed cookie session middleware.

    Usage::

        app.add_middleware(SessionMiddleware(SessionConfig(secret_key="...")))

        # In a controller action:
        session = get_session(self.request)
        session["visits"] = session.get("visits", 0) + 1
    """

    __slots__ = ("_config", "_serializer")

    def __init__(self, config: SessionConfig) -> None:
        if not config.secret_key:
            msg = "SessionConfig.secret_key must not be empty."
            raise ConfigurationError(msg)
        self._config = config
        self._serializer = URLSafeTimedSerializer(config.secret_key, salt="perch.session")

    @property
    def config(self) -> SessionConfig:
        return self._config

    def load(self, request: Request) -> dict[str, Any]:
        """Verify and decode the session cookie. Bad or expired cookies yield ``{}``."""
        value = request.cookies.get(self._config.cookie_name)
        if not value:
            return {}
        try:
            data = self._serializer.loads(value, max_age=self._config.max_age)
        except BadData:
            return {}
        return data if isinstance(data, dict) else {}

    def save(self, response: Response, session: dict[str, Any]) -> None:
        cfg = self._config
        response.set_cookie(
            cfg.cookie_name,
            self._serializer.dumps(session),
            path=cfg.path,
            domain=cfg.domain,
            secure=cfg.secure,
            httponly=cfg.httponly,
            max_age=cfg.max_age,
            samesite=cfg.samesite,
        )

    def process(self, request: Request, response: Response) -> Outcome:
        session = self.load(request)
        request.state[SESSION_STATE_KEY] = session
        # Re-sign on every response to slide the expiry window.
        request.on_response(lambda final: self.save(final, session))
        return Outcome.CONTINUE
