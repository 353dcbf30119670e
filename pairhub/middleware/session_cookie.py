from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

from pairhub.core.config import settings


class SessionCookieMiddleware(BaseHTTPMiddleware):
    """Re-issue the session cookie whenever a request touched the session.

    The store pushes ``expires`` forward on every read; the browser has to see
    a fresh ``Max-Age`` too or it drops the cookie first.
    """

    def __init__(self, app, cookie_name: str | None = None) -> None:
        super().__init__(app)
        self.cookie_name = cookie_name or settings.session_cookie_name

    def _already_set(self, response: Response) -> bool:
        prefix = f"{self.cookie_name}=".encode("latin-1")
        return any(
            key == b"set-cookie" and value.startswith(prefix)
            for key, value in response.headers.raw
        )

    async def dispatch(self, request: Request, call_next):
        response = await call_next(request)

        refresh = getattr(request.state, "refresh_session_cookie", None)
        # Login and logout write the cookie themselves
        if refresh is not None and not self._already_set(response):
            refresh(response)
        return response
