"""
Data model definitions package.

Aggregates Pydantic models for use in other modules.
"""

from .auth import AuthChallenge, AuthResult, AuthSuccess
from .payload import BodyPayload, FilesBody, FormBody, JsonBody, NoBody
from .snapshot import RawRequest, RequestSnapshot

__all__ = [
    "AuthChallenge",
    "AuthResult",
    "AuthSuccess",
    "BodyPayload",
    "FilesBody",
    "FormBody",
    "JsonBody",
    "NoBody",
    "RawRequest",
    "RequestSnapshot",
]
