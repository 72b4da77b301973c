"""
Body decoding by declared content type.

decode_body() looks only at the Content-Type header and produces exactly one
BodyPayload variant. JSON and multipart are strict: bad syntax, bad UTF-8 or
an unnamed part raise DecodeError. Form bodies decode as leniently as query
strings do.
"""

import json
import logging
import math
from typing import AsyncIterable, Dict, Optional, Tuple

from python_multipart.exceptions import MultipartParseError
from python_multipart.multipart import MultipartParser, parse_options_header

from ..models.payload import BodyPayload, FilesBody, FormBody, JsonBody, NoBody
from .capture import parse_urlencoded
from .exceptions import DecodeError

logger = logging.getLogger("echo.body_decoder")

JSON = "application/json"
FORM = "application/x-www-form-urlencoded"
MULTIPART = "multipart/form-data"


def parse_content_type(content_type: Optional[str]) -> Tuple[str, Dict[bytes, bytes]]:
    """Return the lower-cased media type and its parameters."""
    if not content_type:
        return "", {}
    media_type, params = parse_options_header(content_type)
    return media_type.decode("latin-1").strip().lower(), params


def is_json_media_type(media_type: str) -> bool:
    """application/json, or any application/*+json type."""
    main, _, sub = media_type.partition("/")
    return main == "application" and (sub == "json" or sub.endswith("+json"))


def canonical_json(value) -> str:
    """Compact, key-sorted JSON text; identical values give identical text."""
    return json.dumps(
        value, separators=(",", ":"), sort_keys=True, ensure_ascii=False, allow_nan=False
    )


def _reject_constant(name: str):
    raise ValueError(f"{name} is not valid JSON")


def _parse_finite_float(text: str) -> float:
    value = float(text)
    if not math.isfinite(value):
        raise ValueError(f"number {text} is out of range")
    return value


def decode_json(body: bytes) -> BodyPayload:
    if not body:
        return NoBody()
    try:
        value = json.loads(
            body.decode("utf-8"),
            parse_constant=_reject_constant,
            parse_float=_parse_finite_float,
        )
        data = canonical_json(value)
    except ValueError as e:
        # UnicodeDecodeError and JSONDecodeError are both ValueErrors.
        raise DecodeError(JSON, str(e)) from e
    except RecursionError as e:
        raise DecodeError(JSON, "nesting is too deep") from e
    return JsonBody(value=value, data=data)


def decode_form(body: bytes) -> FormBody:
    return FormBody(fields=parse_urlencoded(body.decode("utf-8", errors="replace")))


class _MultipartCollector:
    """
    Callback target for python-multipart's MultipartParser.

    Collects each part's name and content, strictly decoding both as UTF-8.
    """

    def __init__(self):
        self.files: Dict[str, str] = {}
        self.finished = False
        self._header_field = b""
        self._header_value = b""
        self._disposition: Optional[bytes] = None
        self._name: Optional[str] = None
        self._data = bytearray()

    def callbacks(self):
        return {
            "on_part_begin": self.on_part_begin,
            "on_part_data": self.on_part_data,
            "on_part_end": self.on_part_end,
            "on_header_field": self.on_header_field,
            "on_header_value": self.on_header_value,
            "on_header_end": self.on_header_end,
            "on_headers_finished": self.on_headers_finished,
            "on_end": self.on_end,
        }

    def on_part_begin(self) -> None:
        self._disposition = None
        self._name = None
        self._data = bytearray()

    def on_header_field(self, data: bytes, start: int, end: int) -> None:
        self._header_field += data[start:end]

    def on_header_value(self, data: bytes, start: int, end: int) -> None:
        self._header_value += data[start:end]

    def on_header_end(self) -> None:
        if self._header_field.lower() == b"content-disposition":
            self._disposition = self._header_value
        self._header_field = b""
        self._header_value = b""

    def on_headers_finished(self) -> None:
        _, options = parse_options_header(self._disposition)
        name = options.get(b"name")
        if name is None:
            raise DecodeError(MULTIPART, "part has no name in Content-Disposition")
        try:
            self._name = name.decode("utf-8")
        except UnicodeDecodeError as e:
            raise DecodeError(MULTIPART, "part name is not valid UTF-8") from e

    def on_part_data(self, data: bytes, start: int, end: int) -> None:
        self._data += data[start:end]

    def on_part_end(self) -> None:
        try:
            content = bytes(self._data).decode("utf-8")
        except UnicodeDecodeError as e:
            raise DecodeError(MULTIPART, f"part {self._name!r} is not valid UTF-8") from e
        self.files[self._name] = content

    def on_end(self) -> None:
        self.finished = True


async def decode_multipart(chunks: AsyncIterable[bytes], params: Dict[bytes, bytes]) -> FilesBody:
    """
    Decode a multipart/form-data stream part by part as chunks arrive.

    Raises:
        DecodeError: missing boundary, malformed or truncated body, unnamed
            part, or non-UTF-8 content
    """
    boundary = params.get(b"boundary")
    if not boundary:
        raise DecodeError(MULTIPART, "missing boundary parameter")

    collector = _MultipartCollector()
    parser = MultipartParser(boundary, collector.callbacks())
    try:
        async for chunk in chunks:
            if chunk:
                parser.write(chunk)
        parser.finalize()
    except MultipartParseError as e:
        raise DecodeError(MULTIPART, str(e)) from e

    if not collector.finished:
        raise DecodeError(MULTIPART, "body ended before the closing boundary")
    return FilesBody(files=collector.files)


async def _read_all(chunks: AsyncIterable[bytes]) -> bytes:
    body = bytearray()
    async for chunk in chunks:
        body += chunk
    return bytes(body)


async def decode_body(content_type: Optional[str], chunks: AsyncIterable[bytes]) -> BodyPayload:
    """
    Decode a request body according to its declared content type.

    Returns:
        JsonBody, FormBody or FilesBody for the matching media type;
        NoBody for an empty JSON body or any other media type
    """
    media_type, params = parse_content_type(content_type)

    if is_json_media_type(media_type):
        payload = decode_json(await _read_all(chunks))
    elif media_type == FORM:
        payload = decode_form(await _read_all(chunks))
    elif media_type == MULTIPART:
        payload = await decode_multipart(chunks, params)
    else:
        payload = NoBody()

    logger.debug(
        "Decoded request body",
        extra={"media_type": media_type or None, "payload_kind": payload.kind},
    )
    return payload
