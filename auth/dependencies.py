"""
FastAPI dependency functions for owner identity.

Use in routes with Depends() to receive the typed request context. Routes
may return plain values or Response objects, so the cookie for a freshly
minted owner is staged on `request.state` and written by `apply_owner_cookie`
from an HTTP middleware.
"""

from fastapi import Request, Response

from .config import COOKIE_MAX_AGE, COOKIE_NAME
from .schemas import RequestContext
from .service import issue_token, resolve_owner


def get_request_context(request: Request) -> RequestContext:
    """
    Dependency that resolves the owner of the request.

    Expects the storage backend on `request.app.state.storage`.
    """
    ctx = resolve_owner(request.cookies.get(COOKIE_NAME), request.app.state.storage)
    if not ctx.cookie_existed:
        request.state.owner_cookie = issue_token(ctx.owner_id)
    return ctx


def apply_owner_cookie(request: Request, response: Response) -> Response:
    """Attach the staged owner cookie, if any, to the outgoing response."""
    token = getattr(request.state, "owner_cookie", None)
    if token:
        response.set_cookie(COOKIE_NAME, token, max_age=COOKIE_MAX_AGE, httponly=True)
    return response
