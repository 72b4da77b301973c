"""
HTTP Echo - request diagnostic server

Reflects each request's method, URL, origin, query arguments and headers
back as JSON, optionally decoding the body or checking credentials. Used to
test HTTP clients, proxies and middleware.
"""

import logging
from typing import Optional

from fastapi import APIRouter, FastAPI, Request

from .api.deps import AssemblerDep, ConfigDep, MediaTypeDep, SnapshotDep
from .config import EchoConfig, load_config
from .core.assembler import EchoJSONResponse, ResponseAssembler
from .core.auth import validate_basic, validate_bearer
from .core.body_decoder import FORM, MULTIPART, decode_body, is_json_media_type
from .core.exceptions import AuthChallengeError, UnsupportedMediaTypeError
from .core.logging_config import setup_logging
from .exceptions import register_exception_handlers
from .middleware import access_log_middleware
from .models import AuthChallenge, NoBody

logger = logging.getLogger("echo.main")

router = APIRouter()


# ===========================================
# Endpoint definitions.
# ===========================================


@router.get("/health")
async def health_check():
    """Health check endpoint."""
    return {"status": "healthy"}


@router.get("/get", response_class=EchoJSONResponse)
@router.post("/post", response_class=EchoJSONResponse)
@router.put("/put", response_class=EchoJSONResponse)
@router.patch("/patch", response_class=EchoJSONResponse)
@router.delete("/delete", response_class=EchoJSONResponse)
async def echo_request(snapshot: SnapshotDep, assembler: AssemblerDep):
    """Echo the request without reading its body."""
    return EchoJSONResponse(assembler.common(snapshot))


@router.post("/post/json", response_class=EchoJSONResponse)
async def post_json(
    request: Request, snapshot: SnapshotDep, assembler: AssemblerDep, media_type: MediaTypeDep
):
    """
    Echo a JSON body as `json` (parsed) and `data` (canonical text).

    The body stream can only be consumed once, so the raw text is not echoed
    separately. A non-JSON content type leaves the body unread.
    """
    payload = NoBody()
    if is_json_media_type(media_type):
        payload = await decode_body(request.headers.get("content-type"), request.stream())
    return EchoJSONResponse(assembler.json_body(snapshot, payload))


@router.post("/post/form", response_class=EchoJSONResponse)
async def post_form(
    request: Request, snapshot: SnapshotDep, assembler: AssemblerDep, media_type: MediaTypeDep
):
    if media_type != FORM:
        raise UnsupportedMediaTypeError(FORM, media_type)
    payload = await decode_body(request.headers.get("content-type"), request.stream())
    return EchoJSONResponse(assembler.form(snapshot, payload))


@router.post("/post/file", response_class=EchoJSONResponse)
async def post_file(
    request: Request, snapshot: SnapshotDep, assembler: AssemblerDep, media_type: MediaTypeDep
):
    """Echo every multipart part as name -> UTF-8 content."""
    if media_type != MULTIPART:
        raise UnsupportedMediaTypeError(MULTIPART, media_type)
    payload = await decode_body(request.headers.get("content-type"), request.stream())
    return EchoJSONResponse(assembler.files(snapshot, payload))


@router.get("/basic-auth/{user}/{passwd}", response_class=EchoJSONResponse)
async def basic_auth(
    user: str,
    passwd: str,
    snapshot: SnapshotDep,
    assembler: AssemblerDep,
    echo_config: ConfigDep,
):
    """
    Check Basic credentials against BASIC_AUTH_PASSWORD.

    `user` and `passwd` only shape the URL; neither is compared with the
    credentials. The echoed user is the one from the Authorization header.
    """
    logger.debug("Basic auth route", extra={"path_user": user, "path_passwd_len": len(passwd)})
    result = validate_basic(
        snapshot.headers.get("authorization"),
        echo_config.BASIC_AUTH_PASSWORD,
        echo_config.basic_challenge,
    )
    if isinstance(result, AuthChallenge):
        raise AuthChallengeError(result.challenge, result.reason)
    return EchoJSONResponse(assembler.basic_auth(snapshot, result))


@router.get("/bearer", response_class=EchoJSONResponse)
async def bearer(snapshot: SnapshotDep, assembler: AssemblerDep):
    result = validate_bearer(snapshot.headers.get("authorization"))
    return EchoJSONResponse(assembler.bearer(snapshot, result))


# ===========================================
# App assembly.
# ===========================================


def create_app(echo_config: Optional[EchoConfig] = None) -> FastAPI:
    """
    Build the echo application around an injected configuration.

    The config is read-only and shared by every request through app.state.
    """
    echo_config = echo_config or EchoConfig()

    app = FastAPI(title="HTTP Echo", version="1.0.0", root_path=echo_config.root_path)
    app.state.config = echo_config
    app.state.assembler = ResponseAssembler(echo_config.HEADER_LAYOUT)

    app.middleware("http")(access_log_middleware)
    register_exception_handlers(app)
    app.include_router(router)
    return app


config = load_config()
setup_logging(config.LOG_CONFIG_PATH, config.LOG_LEVEL)
app = create_app(config)


def run() -> None:
    """Serve the module-level app on BIND_ADDR; uvicorn exits nonzero if binding fails."""
    import uvicorn

    host, port = config.host_port()
    logger.info(
        f"Starting HTTP Echo on {host}:{port}",
        extra={"header_layout": config.HEADER_LAYOUT},
    )
    uvicorn.run(app, host=host, port=port, log_config=None)


if __name__ == "__main__":
    run()
