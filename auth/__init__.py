"""
Auth package for the Shortener Platform HTTP layer.

Identifies the owner of each request through a signed cookie and exposes it
as a typed `RequestContext` that handlers pass explicitly to the manager.
"""

from .schemas import RequestContext
from .dependencies import apply_owner_cookie, get_request_context

__all__ = ["RequestContext", "apply_owner_cookie", "get_request_context"]
