"""Cross-origin policy: allow-listed browser origins only, with credentials."""

import logging
from collections.abc import Iterable
from dataclasses import dataclass

from starlette.datastructures import Headers
from starlette.responses import JSONResponse
from starlette.types import ASGIApp, Receive, Scope, Send

logger = logging.getLogger(__name__)

CORS_REJECTED_DETAIL = "CORS not allowed for this origin"


@dataclass(frozen=True)
class OriginPolicy:
    """Decides whether a request's Origin header may proceed."""

    allowed_origins: frozenset[str]
    require_origin: bool = False

    @classmethod
    def from_origins(cls, origins: Iterable[str], require_origin: bool = False) -> "OriginPolicy":
        return cls(
            allowed_origins=frozenset(o.rstrip("/") for o in origins),
            require_origin=require_origin,
        )

    def is_allowed(self, origin: str | None) -> bool:
        # Non-browser clients (curl, mobile apps) send no Origin header.
        if not origin:
            return not self.require_origin
        return origin in self.allowed_origins


class OriginGateMiddleware:
    """
    Reject requests whose Origin is not allowed with 403 before they reach
    CORSMiddleware or any route. Allowed requests pass through untouched;
    CORSMiddleware adds the credential headers and answers preflights.
    """

    def __init__(self, app: ASGIApp, policy: OriginPolicy) -> None:
        self.app = app
        self.policy = policy

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return
        origin = Headers(scope=scope).get("origin")
        if self.policy.is_allowed(origin):
            await self.app(scope, receive, send)
            return
        logger.warning("Blocked CORS request from: %s", origin or "<no origin>")
        response = JSONResponse({"detail": CORS_REJECTED_DETAIL}, status_code=403)
        await response(scope, receive, send)
