"""
Ordered header multimap.

HTTP allows a header name to repeat (Set-Cookie, Via, X-Forwarded-For ...).
HeaderMultiMap keeps every value, grouped under the first occurrence of each
case-insensitive name, and knows how to emit itself as JSON without relying
on any serializer's duplicate-key behavior.
"""

import json
from typing import Dict, Iterable, Iterator, List, Tuple

HeaderPair = Tuple[str, str]


class HeaderMultiMap:
    """
    Immutable ordered multimap of header names to values.

    Names are matched case-insensitively. The casing of the first occurrence
    is kept for output. Distinct names keep the order in which they first
    appeared; values keep arrival order within a name.
    """

    __slots__ = ("_names", "_values")

    def __init__(self, pairs: Iterable[HeaderPair] = ()):
        names: Dict[str, str] = {}
        values: Dict[str, List[str]] = {}
        for name, value in pairs:
            key = name.lower()
            if key not in names:
                names[key] = name
                values[key] = []
            values[key].append(value)
        self._names = names
        self._values = values

    @classmethod
    def from_raw(cls, raw: Iterable[Tuple[bytes, bytes]]) -> "HeaderMultiMap":
        """Build from ASGI header byte pairs; latin-1 decoding never fails."""
        return cls((name.decode("latin-1"), value.decode("latin-1")) for name, value in raw)

    def pairs(self) -> Iterator[HeaderPair]:
        """Yield every (name, value), grouped by first occurrence of the name."""
        for key, name in self._names.items():
            for value in self._values[key]:
                yield name, value

    def get_list(self, name: str) -> List[str]:
        return list(self._values.get(name.lower(), ()))

    def get(self, name: str, default=None):
        values = self._values.get(name.lower())
        return values[0] if values else default

    def to_lists(self) -> Dict[str, List[str]]:
        return {name: list(self._values[key]) for key, name in self._names.items()}

    def names(self) -> List[str]:
        return list(self._names.values())

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and name.lower() in self._names

    def __len__(self) -> int:
        """Total number of header lines, not distinct names."""
        return sum(len(values) for values in self._values.values())

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, HeaderMultiMap):
            return NotImplemented
        return list(self.pairs()) == list(other.pairs())

    def __hash__(self) -> int:
        return hash(tuple(self.pairs()))

    def __repr__(self) -> str:
        return f"HeaderMultiMap({list(self.pairs())!r})"


def emit_pairs(pairs: Iterable[Tuple[str, str]]) -> str:
    """
    Emit a JSON object text from key/value pairs, keeping repeated keys.

    A name sent twice comes out as two members with the same key. RFC 8259
    only says names SHOULD be unique; most parsers keep the last member, so
    clients that need every value must read the object as a pair list.
    """
    members = (
        f"{json.dumps(name, ensure_ascii=False)}:{json.dumps(value, ensure_ascii=False)}"
        for name, value in pairs
    )
    return "{" + ",".join(members) + "}"
