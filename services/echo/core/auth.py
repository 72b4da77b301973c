"""
Authentication and security module.

Validates Basic and Bearer credentials taken from the Authorization header.
Every request is judged on its own: no sessions, retry counts or lockouts.
"""

import base64
import binascii
import hmac
import logging
from typing import Optional, Tuple

from ..models.auth import AuthChallenge, AuthResult, AuthSuccess
from .exceptions import ExtractionError

logger = logging.getLogger("echo.auth")


def split_authorization(header: Optional[str]) -> Optional[Tuple[str, str]]:
    """
    Split an Authorization header into (lower-cased scheme, credentials).

    A bare scheme ("Bearer") yields empty credentials; servers strip the
    trailing space of "Bearer ".
    """
    if header is None:
        return None
    scheme, _, credentials = header.strip().partition(" ")
    if not scheme:
        return None
    return scheme.lower(), credentials.strip()


def parse_basic_credentials(header: Optional[str]) -> Optional[Tuple[str, str]]:
    """
    Extract (identifier, password) from "Basic <base64(id:password)>".

    Returns:
        The pair, or None when the header is absent or cannot be decoded
    """
    parts = split_authorization(header)
    if parts is None or parts[0] != "basic":
        return None
    try:
        decoded = base64.b64decode(parts[1], validate=True).decode("utf-8")
    except (binascii.Error, UnicodeDecodeError):
        return None
    identifier, sep, password = decoded.partition(":")
    if not sep:
        return None
    return identifier, password


def validate_basic(header: Optional[str], expected_password: str, challenge: str) -> AuthResult:
    """
    Check Basic credentials against the expected password.

    Args:
        header: Authorization header value (None when absent)
        expected_password: the only password accepted
        challenge: WWW-Authenticate value returned on rejection

    Returns:
        AuthSuccess with the identifier as principal, or AuthChallenge
    """
    if header is None:
        return AuthChallenge(challenge=challenge, reason="missing")

    credentials = parse_basic_credentials(header)
    if credentials is None:
        return AuthChallenge(challenge=challenge, reason="malformed")

    identifier, password = credentials
    if not hmac.compare_digest(password.encode("utf-8"), expected_password.encode("utf-8")):
        logger.info("Basic auth rejected", extra={"user": identifier})
        return AuthChallenge(challenge=challenge, reason="mismatch")

    return AuthSuccess(scheme="basic", principal=identifier)


def validate_bearer(header: Optional[str]) -> AuthSuccess:
    """
    Accept any Bearer token, including an empty one.

    Raises:
        ExtractionError: when the header is missing or uses another scheme
    """
    parts = split_authorization(header)
    if parts is None:
        raise ExtractionError("Authorization header", "header is missing")
    scheme, token = parts
    if scheme != "bearer":
        raise ExtractionError("Authorization header", "expected a Bearer token")

    logger.info(f"Bearer token received: {token}", extra={"token": token})
    return AuthSuccess(scheme="bearer", principal=token)
