"""
Postboard Backend — Identity & Token Schemas
==============================================

What:  Pydantic models for the authenticated principal and login results.
Who:   Produced by the credential service and the auth middleware; consumed by
       every handler that needs to know who is calling.
"""

from pydantic import BaseModel, ConfigDict, Field


class Identity(BaseModel):
    """
    The authenticated principal carried by a valid bearer token.

    Handlers receive Optional[Identity]; None means the request is anonymous.
    """

    model_config = ConfigDict(frozen=True)

    user_id: str = Field(description="String form of the user's UUID")
    email: str


class AuthData(BaseModel):
    """Result of a successful login."""

    token: str
    user_id: str
