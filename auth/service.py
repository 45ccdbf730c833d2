"""
Core owner-identity logic.

A request carries its owner id in a signed cookie. A missing or tampered
cookie results in a freshly minted owner id; the caller is expected to send
the new cookie back.
"""

import logging
from typing import Optional

from shortener_platform.storage.base import BaseStorage

from .config import SECRET_KEY
from .schemas import RequestContext
from .utils import sign, unsign

logger = logging.getLogger(__name__)


def issue_token(owner_id: str, secret: str = SECRET_KEY) -> str:
    """Return the cookie value for `owner_id`."""
    return sign(owner_id, secret)


def resolve_owner(token: Optional[str], storage: BaseStorage, secret: str = SECRET_KEY) -> RequestContext:
    """
    Resolve the request owner from a cookie value.

    Args:
        token (Optional[str]): Raw cookie value, if any.
        storage (BaseStorage): Used to mint a new owner id when needed.

    Returns:
        RequestContext: `cookie_existed` is False when a new id was minted.
    """
    if token:
        owner_id = unsign(token, secret)
        if owner_id:
            return RequestContext(owner_id=owner_id, cookie_existed=True)
        logger.info("Rejected tampered owner cookie")
    return RequestContext(owner_id=storage.generate_new_owner_id(), cookie_existed=False)
