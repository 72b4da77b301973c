"""
Response assembly.

Combines a RequestSnapshot with an optional decoded body or auth result into
the fixed field set of a route, then renders it to JSON bytes. The header
object is emitted by HeaderMultiMap's own routine; every other value goes
through `json`.
"""

import json
from typing import Any, List, Literal, Tuple

from starlette.responses import Response

from ..models.auth import AuthSuccess
from ..models.payload import BodyPayload, FilesBody, FormBody, JsonBody
from ..models.snapshot import RequestSnapshot
from .headers import HeaderMultiMap, emit_pairs

HeaderLayout = Literal["pairs", "lists"]


class EchoDocument:
    """Ordered, read-only list of top-level response fields."""

    __slots__ = ("_fields", "_header_layout")

    def __init__(self, fields: List[Tuple[str, Any]], header_layout: HeaderLayout = "pairs"):
        self._fields = tuple(fields)
        self._header_layout = header_layout

    @property
    def fields(self) -> Tuple[Tuple[str, Any], ...]:
        return self._fields

    def keys(self) -> List[str]:
        return [name for name, _ in self._fields]

    def __getitem__(self, name: str) -> Any:
        for key, value in self._fields:
            if key == name:
                return value
        raise KeyError(name)

    def _render_value(self, value: Any) -> str:
        if isinstance(value, HeaderMultiMap):
            if self._header_layout == "lists":
                return json.dumps(
                    value.to_lists(), ensure_ascii=False, separators=(",", ":"), allow_nan=False
                )
            return emit_pairs(value.pairs())
        return json.dumps(value, ensure_ascii=False, separators=(",", ":"), allow_nan=False)

    def render(self) -> bytes:
        members = (
            f"{json.dumps(name)}:{self._render_value(value)}" for name, value in self._fields
        )
        return ("{" + ",".join(members) + "}").encode("utf-8")


class EchoJSONResponse(Response):
    """JSON response whose body is an EchoDocument."""

    media_type = "application/json"

    def render(self, content: Any) -> bytes:
        if isinstance(content, EchoDocument):
            return content.render()
        return super().render(content)


class ResponseAssembler:
    """Builds the per-route EchoDocument; one method per response schema."""

    def __init__(self, header_layout: HeaderLayout = "pairs"):
        self.header_layout = header_layout

    def _document(self, snapshot: RequestSnapshot, *extra: Tuple[str, Any]) -> EchoDocument:
        fields = [
            ("method", snapshot.method),
            ("args", dict(snapshot.args)),
            ("headers", snapshot.headers),
            ("url", snapshot.url),
            ("origin", snapshot.origin),
        ]
        fields.extend(extra)
        return EchoDocument(fields, self.header_layout)

    def common(self, snapshot: RequestSnapshot) -> EchoDocument:
        return self._document(snapshot)

    def json_body(self, snapshot: RequestSnapshot, payload: BodyPayload) -> EchoDocument:
        """`json` is null and `data` empty unless the body decoded as JSON."""
        if isinstance(payload, JsonBody):
            return self._document(snapshot, ("json", payload.value), ("data", payload.data))
        return self._document(snapshot, ("json", None), ("data", ""))

    def form(self, snapshot: RequestSnapshot, payload: FormBody) -> EchoDocument:
        return self._document(snapshot, ("form", dict(payload.fields)))

    def files(self, snapshot: RequestSnapshot, payload: FilesBody) -> EchoDocument:
        return self._document(snapshot, ("files", dict(payload.files)))

    def basic_auth(self, snapshot: RequestSnapshot, result: AuthSuccess) -> EchoDocument:
        return self._document(
            snapshot, ("authenticated", result.authenticated), ("user", result.principal)
        )

    def bearer(self, snapshot: RequestSnapshot, result: AuthSuccess) -> EchoDocument:
        return self._document(
            snapshot, ("authenticated", result.authenticated), ("token", result.principal)
        )
