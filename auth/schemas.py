"""
Pydantic schemas for the auth module.
"""

from pydantic import BaseModel


class RequestContext(BaseModel):
    """Owner of the current request."""
    owner_id: str
    cookie_existed: bool
