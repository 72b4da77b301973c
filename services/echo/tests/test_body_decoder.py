"""
Where: services/echo/tests/test_body_decoder.py
What: Unit tests for content-type driven body decoding.
Why: JSON and multipart must fail loudly; form bodies decode like query strings.
"""

import pytest

from services.echo.core.body_decoder import (
    canonical_json,
    decode_body,
    is_json_media_type,
    parse_content_type,
)
from services.echo.core.exceptions import DecodeError
from services.echo.models import FilesBody, FormBody, JsonBody, NoBody

BOUNDARY = b"echo-boundary"
MULTIPART_TYPE = "multipart/form-data; boundary=echo-boundary"


async def _chunks(*parts: bytes):
    for part in parts:
        yield part


def _multipart(*parts) -> bytes:
    body = b""
    for headers, content in parts:
        body += b"--" + BOUNDARY + b"\r\n" + headers + b"\r\n\r\n" + content + b"\r\n"
    return body + b"--" + BOUNDARY + b"--\r\n"


def _field(name: bytes, content: bytes, filename: bytes = b""):
    disposition = b'Content-Disposition: form-data; name="' + name + b'"'
    if filename:
        disposition += b'; filename="' + filename + b'"'
    return disposition, content


# ----------------------------------------------------------------------
# Content type parsing
# ----------------------------------------------------------------------


def test_parse_content_type_lowercases_and_keeps_params():
    media_type, params = parse_content_type("Multipart/Form-Data; boundary=AbC")

    assert media_type == "multipart/form-data"
    assert params[b"boundary"] == b"AbC"


def test_parse_content_type_missing():
    assert parse_content_type(None) == ("", {})


@pytest.mark.parametrize(
    "media_type, expected",
    [
        ("application/json", True),
        ("application/vnd.api+json", True),
        ("text/json", False),
        ("application/jsonp", False),
        ("", False),
    ],
)
def test_is_json_media_type(media_type, expected):
    assert is_json_media_type(media_type) is expected


# ----------------------------------------------------------------------
# JSON
# ----------------------------------------------------------------------


@pytest.mark.asyncio
async def test_json_body_yields_value_and_canonical_data():
    payload = await decode_body("application/json", _chunks(b'{"x": 1}'))

    assert isinstance(payload, JsonBody)
    assert payload.value == {"x": 1}
    assert payload.data == '{"x":1}'


@pytest.mark.asyncio
async def test_json_body_spread_over_chunks():
    payload = await decode_body("application/json; charset=utf-8", _chunks(b'{"a":', b" [1, 2]}"))

    assert payload.value == {"a": [1, 2]}


@pytest.mark.asyncio
async def test_empty_json_body_is_no_body():
    payload = await decode_body("application/json", _chunks())

    assert isinstance(payload, NoBody)


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "body",
    [b"{invalid", b"NaN", b'{"x": Infinity}', b'"\xff"', b'{"x": 1e400}', b"[-1e400]"],
)
async def test_malformed_json_raises_decode_error(body):
    with pytest.raises(DecodeError) as exc_info:
        await decode_body("application/json", _chunks(body))

    assert exc_info.value.content_type == "application/json"


@pytest.mark.asyncio
async def test_large_finite_number_is_kept():
    payload = await decode_body("application/json", _chunks(b'{"x": 1e300}'))

    assert payload.value == {"x": 1e300}


@pytest.mark.asyncio
async def test_deeply_nested_json_raises_decode_error():
    body = b"[" * 100000 + b"]" * 100000

    with pytest.raises(DecodeError, match="too deep"):
        await decode_body("application/json", _chunks(body))


def test_canonical_json_is_compact_sorted_and_unescaped():
    assert canonical_json({"b": 1, "a": ["é", None, True]}) == '{"a":["é",null,true],"b":1}'


# ----------------------------------------------------------------------
# Form
# ----------------------------------------------------------------------


@pytest.mark.asyncio
async def test_form_body_last_value_wins():
    payload = await decode_body(
        "application/x-www-form-urlencoded", _chunks(b"k=v&k2=v2&k=again&sp=a+b%21")
    )

    assert isinstance(payload, FormBody)
    assert payload.fields == {"k": "again", "k2": "v2", "sp": "a b!"}


# ----------------------------------------------------------------------
# Multipart
# ----------------------------------------------------------------------


@pytest.mark.asyncio
async def test_multipart_parts_become_files_map():
    body = _multipart(_field(b"file", b"abc", b"a.txt"), _field(b"note", b"hello"))

    payload = await decode_body(MULTIPART_TYPE, _chunks(body))

    assert isinstance(payload, FilesBody)
    assert payload.files == {"file": "abc", "note": "hello"}


@pytest.mark.asyncio
async def test_multipart_decodes_across_small_chunks():
    body = _multipart(_field(b"file", "ünïcode".encode("utf-8")))
    pieces = [body[i : i + 3] for i in range(0, len(body), 3)]

    payload = await decode_body(MULTIPART_TYPE, _chunks(*pieces))

    assert payload.files == {"file": "ünïcode"}


@pytest.mark.asyncio
async def test_multipart_repeated_name_keeps_last_part():
    body = _multipart(_field(b"file", b"first"), _field(b"file", b"second"))

    payload = await decode_body(MULTIPART_TYPE, _chunks(body))

    assert payload.files == {"file": "second"}


@pytest.mark.asyncio
async def test_multipart_non_utf8_content_raises():
    body = _multipart(_field(b"file", b"\xff\xfe\xfd"))

    with pytest.raises(DecodeError, match="not valid UTF-8"):
        await decode_body(MULTIPART_TYPE, _chunks(body))


@pytest.mark.asyncio
async def test_multipart_part_without_name_raises():
    body = _multipart((b'Content-Disposition: form-data; filename="a.txt"', b"abc"))

    with pytest.raises(DecodeError, match="no name"):
        await decode_body(MULTIPART_TYPE, _chunks(body))


@pytest.mark.asyncio
async def test_multipart_without_boundary_raises():
    with pytest.raises(DecodeError, match="boundary"):
        await decode_body("multipart/form-data", _chunks(b"--x--\r\n"))


@pytest.mark.asyncio
async def test_truncated_multipart_raises():
    body = _multipart(_field(b"file", b"abc"))
    truncated = body[: body.index(b"--" + BOUNDARY + b"--")]

    with pytest.raises(DecodeError):
        await decode_body(MULTIPART_TYPE, _chunks(truncated))


# ----------------------------------------------------------------------
# Other content types
# ----------------------------------------------------------------------


@pytest.mark.asyncio
@pytest.mark.parametrize("content_type", [None, "text/plain", "application/octet-stream"])
async def test_other_content_types_are_no_body(content_type):
    payload = await decode_body(content_type, _chunks(b"anything"))

    assert isinstance(payload, NoBody)
