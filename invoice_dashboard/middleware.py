"""
Authorization gate for dashboard routes.

Every request the route matcher selects is checked before it reaches a
handler, so protected pages never start rendering for anonymous users:

- anonymous users asking for /dashboard are sent to the login page;
- signed-in users asking for the login page are sent to /dashboard.
"""

import logging
import re
from enum import Enum
from urllib.parse import urlencode

from fastapi.responses import RedirectResponse
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request

logger = logging.getLogger(__name__)

LOGIN_PATH = "/login"
DASHBOARD_PATH = "/dashboard"

# Skip API routes, static assets and images
ROUTE_MATCHER = re.compile(r"^/(?!api|static|.*\.png$).*$")


class GateDecision(str, Enum):
    ALLOW = "allow"
    DENY = "deny"
    REDIRECT = "redirect"


def is_protected(path: str) -> bool:
    return path.startswith(DASHBOARD_PATH)


def authorize(logged_in: bool, path: str) -> GateDecision:
    if is_protected(path):
        return GateDecision.ALLOW if logged_in else GateDecision.DENY
    if path == LOGIN_PATH and logged_in:
        return GateDecision.REDIRECT
    return GateDecision.ALLOW


def matches_route(path: str) -> bool:
    return ROUTE_MATCHER.match(path) is not None


class AuthorizationMiddleware(BaseHTTPMiddleware):
    """Applies ``authorize`` to matched requests. Needs SessionMiddleware outside it."""

    async def dispatch(self, request: Request, call_next):
        path = request.url.path
        # Asset-looking paths under /dashboard still need a session
        if not matches_route(path) and not is_protected(path):
            return await call_next(request)

        logged_in = bool(request.session.get("user"))
        decision = authorize(logged_in, path)

        if decision is GateDecision.DENY:
            logger.info("Denied anonymous request for %s", path)
            callback = urlencode({"callbackUrl": str(request.url.path)})
            return RedirectResponse(f"{LOGIN_PATH}?{callback}", status_code=303)
        if decision is GateDecision.REDIRECT:
            return RedirectResponse(DASHBOARD_PATH, status_code=303)
        return await call_next(request)
