"""
Request snapshot capture.

Builds a RequestSnapshot from a RawRequest through an ordered pipeline of
parsing steps. Each step reads the raw request and returns one component of
the snapshot, or raises ExtractionError and stops the pipeline.
"""

import logging
import re
from typing import Callable, Dict, List, Tuple
from urllib.parse import parse_qsl

from ..models.snapshot import RawRequest, RequestSnapshot
from .exceptions import ExtractionError
from .headers import HeaderMultiMap

logger = logging.getLogger("echo.capture")

# RFC 9110 token characters.
_METHOD_TOKEN = re.compile(r"^[!#$%&'*+\-.^_`|~0-9A-Za-z]+$")

UNKNOWN_ORIGIN = "unknown"


def parse_urlencoded(text: str) -> Dict[str, str]:
    """
    Parse "a=1&b=2" into a dict.

    `+` is a space, blank values are kept, and a repeated key keeps its
    last value. Bad percent-escapes decode to U+FFFD instead of failing.
    """
    return dict(parse_qsl(text, keep_blank_values=True, encoding="utf-8", errors="replace"))


def capture_method(raw: RawRequest) -> str:
    if not _METHOD_TOKEN.match(raw.method):
        raise ExtractionError("method", f"{raw.method!r} is not an HTTP token")
    return raw.method


def capture_url(raw: RawRequest) -> str:
    """Request target as sent: raw path, plus the raw query when present."""
    url = raw.raw_path.decode("utf-8", errors="replace")
    if raw.query_string:
        url = f"{url}?{raw.query_string.decode('utf-8', errors='replace')}"
    return url


def capture_origin(raw: RawRequest) -> str:
    return raw.client_host or UNKNOWN_ORIGIN


def capture_args(raw: RawRequest) -> Dict[str, str]:
    return parse_urlencoded(raw.query_string.decode("utf-8", errors="replace"))


def capture_headers(raw: RawRequest) -> HeaderMultiMap:
    return HeaderMultiMap.from_raw(raw.headers)


# Evaluation order of the pipeline.
CAPTURE_STEPS: List[Tuple[str, Callable[[RawRequest], object]]] = [
    ("method", capture_method),
    ("url", capture_url),
    ("origin", capture_origin),
    ("args", capture_args),
    ("headers", capture_headers),
]


def capture_snapshot(raw: RawRequest) -> RequestSnapshot:
    """
    Run every capture step in order and build the snapshot.

    Raises:
        ExtractionError: from the first step that cannot parse its component
    """
    components = {name: step(raw) for name, step in CAPTURE_STEPS}
    snapshot = RequestSnapshot(**components)
    logger.debug(
        "Captured request snapshot",
        extra={
            "method": snapshot.method,
            "url": snapshot.url,
            "header_lines": len(snapshot.headers),
        },
    )
    return snapshot
