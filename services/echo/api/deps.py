"""
Dependency Injection for Echo API.

Manage request handler dependencies using FastAPI Depends.
"""

from typing import Annotated

from fastapi import Depends, Request

from ..config import EchoConfig
from ..core.assembler import ResponseAssembler
from ..core.body_decoder import parse_content_type
from ..core.capture import capture_snapshot
from ..models import RawRequest, RequestSnapshot


# ==========================================
# 1. Service Accessors
# ==========================================


def get_config(request: Request) -> EchoConfig:
    return request.app.state.config


def get_assembler(request: Request) -> ResponseAssembler:
    return request.app.state.assembler


# Service Dependency Type Aliases
ConfigDep = Annotated[EchoConfig, Depends(get_config)]
AssemblerDep = Annotated[ResponseAssembler, Depends(get_assembler)]


# ==========================================
# 2. Logic Dependencies (Capture)
# ==========================================


def build_raw_request(request: Request) -> RawRequest:
    """
    Copy the request metadata out of the ASGI scope, untouched.
    """
    scope = request.scope
    raw_path = scope.get("raw_path") or scope["path"].encode("utf-8")
    return RawRequest(
        method=scope["method"],
        # raw_path never carries the query; some test transports include it.
        raw_path=raw_path.split(b"?", 1)[0],
        query_string=scope.get("query_string", b""),
        client_host=request.client.host if request.client else None,
        headers=[(bytes(name), bytes(value)) for name, value in scope.get("headers", [])],
    )


async def capture_request_snapshot(request: Request) -> RequestSnapshot:
    """
    Capture the snapshot echoed by every route.

    Raises:
        ExtractionError: 400 when the request metadata cannot be captured
    """
    return capture_snapshot(build_raw_request(request))


def get_media_type(request: Request) -> str:
    media_type, _ = parse_content_type(request.headers.get("content-type"))
    return media_type


# Logic Dependency Type Aliases
SnapshotDep = Annotated[RequestSnapshot, Depends(capture_request_snapshot)]
MediaTypeDep = Annotated[str, Depends(get_media_type)]
