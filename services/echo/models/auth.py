"""
Pydantic models related to authentication.
"""

from typing import Literal, Union

from pydantic import BaseModel, ConfigDict


class AuthSuccess(BaseModel):
    """Accepted credentials."""

    model_config = ConfigDict(frozen=True)

    scheme: Literal["basic", "bearer"]
    principal: str
    authenticated: bool = True


class AuthChallenge(BaseModel):
    """Rejected or missing credentials; `challenge` is the WWW-Authenticate value."""

    model_config = ConfigDict(frozen=True)

    challenge: str
    reason: Literal["missing", "malformed", "mismatch"]


AuthResult = Union[AuthSuccess, AuthChallenge]
