"""
Decoded body models.

Exactly one of these is produced per request, since the body stream can
only be consumed once.
"""

from typing import Any, Dict, Literal, Union

from pydantic import BaseModel, ConfigDict, Field


class NoBody(BaseModel):
    """Empty body, or a content type no decoder handles."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["none"] = "none"


class JsonBody(BaseModel):
    """Parsed JSON value plus its canonical compact text."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["json"] = "json"
    value: Any = None
    data: str = ""


class FormBody(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["form"] = "form"
    fields: Dict[str, str] = Field(default_factory=dict)


class FilesBody(BaseModel):
    """Multipart parts keyed by field name, contents as UTF-8 text."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["files"] = "files"
    files: Dict[str, str] = Field(default_factory=dict)


BodyPayload = Union[NoBody, JsonBody, FormBody, FilesBody]
