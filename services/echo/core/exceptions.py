"""
Custom exception classes.

Represent the ways a single echo request can fail. None of them outlive
the request that raised them.
"""

import logging
from fastapi import Request, status
from fastapi.responses import JSONResponse
from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException

logger = logging.getLogger(__name__)


class EchoRequestError(Exception):
    """Base exception class for echo request handling."""

    status_code = status.HTTP_400_BAD_REQUEST
    message = "Bad Request"

    def __init__(self, detail: str):
        self.detail = detail
        super().__init__(detail)


class ExtractionError(EchoRequestError):
    """Raised when request metadata (method, headers) cannot be captured."""

    def __init__(self, component: str, detail: str):
        self.component = component
        super().__init__(f"Invalid {component}: {detail}")


class DecodeError(EchoRequestError):
    """Raised when a request body does not match its declared content type."""

    def __init__(self, content_type: str, detail: str):
        self.content_type = content_type
        super().__init__(f"Failed to decode {content_type} body: {detail}")


class UnsupportedMediaTypeError(EchoRequestError):
    """Raised when a route receives a body type it does not decode."""

    status_code = status.HTTP_415_UNSUPPORTED_MEDIA_TYPE
    message = "Unsupported Media Type"

    def __init__(self, expected: str, received: str):
        self.expected = expected
        self.received = received
        super().__init__(f"Expected {expected}, got {received or 'no content type'}")


class AuthChallengeError(Exception):
    """Raised when credentials are missing or rejected; carries the challenge."""

    def __init__(self, challenge: str, reason: str):
        self.challenge = challenge
        self.reason = reason
        super().__init__(f"Authentication required ({reason})")


# ===========================================
# Exception Handlers
# ===========================================


async def echo_request_error_handler(request: Request, exc: EchoRequestError):
    """
    Handler for request-local capture and decode failures.
    """
    logger.warning(
        f"Rejected {request.method} {request.url.path}: {exc.detail}",
        extra={"error_type": type(exc).__name__, "status": exc.status_code},
    )
    return JSONResponse(
        status_code=exc.status_code,
        content={"message": exc.message, "detail": exc.detail},
    )


async def auth_challenge_handler(request: Request, exc: AuthChallengeError):
    """
    Handler for authentication challenges (expected protocol outcome, not a fault).
    """
    logger.info(
        f"Challenge issued for {request.url.path}",
        extra={"reason": exc.reason},
    )
    return JSONResponse(
        status_code=status.HTTP_401_UNAUTHORIZED,
        content={"message": "Unauthorized"},
        headers={"WWW-Authenticate": exc.challenge},
    )


async def global_exception_handler(request: Request, exc: Exception):
    """
    Catch-all handler for unhandled exceptions.
    """
    error_detail = str(exc)
    logger.error(
        f"Global exception handler caught: {exc}",
        exc_info=True,
        extra={
            "path": request.url.path,
            "method": request.method,
        },
    )

    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"message": "Internal Server Error", "detail": error_detail},
    )


async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    """
    Handler for HTTPException.
    """
    return JSONResponse(
        status_code=exc.status_code, content={"message": exc.detail}, headers=exc.headers
    )


async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """
    Handler for validation errors.
    """
    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content={"message": "Validation Error", "detail": str(exc.errors())},
    )
