"""
Request capture models.

RawRequest is what the server hands over; RequestSnapshot is what gets echoed.
"""

from typing import Dict, List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field

from ..core.headers import HeaderMultiMap


class RawRequest(BaseModel):
    """
    Request metadata exactly as received, before any parsing.

    This model decouples the capture pipeline from FastAPI's Request object.
    """

    model_config = ConfigDict(frozen=True)

    method: str
    raw_path: bytes
    query_string: bytes = b""
    client_host: Optional[str] = None
    headers: List[Tuple[bytes, bytes]] = Field(default_factory=list)


class RequestSnapshot(BaseModel):
    """Immutable record of one request's method, URL, origin, args and headers."""

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    method: str
    url: str
    origin: str
    args: Dict[str, str] = Field(default_factory=dict)
    headers: HeaderMultiMap = Field(default_factory=HeaderMultiMap)
