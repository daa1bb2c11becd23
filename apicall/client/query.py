from __future__ import annotations

from typing import Any, Mapping, Sequence
from urllib.parse import quote

# Deliberately narrower than the standard URL query set, which leaves `&`, `=`
# and `+` literal. Escaping them keeps a key or value from splitting a pair.
_QUERY_SAFE = "-._~!$'()*,;:@/?"


def build_unencoded_query(fields: Mapping[str, Any]) -> str:
    """Join `key=value` pairs with `&`, without any percent-encoding.

    Values are rendered with `str()`. A value containing `&` or `=` is written
    as-is and will be misread by the receiver; this permissive form is kept
    for servers that expect it.
    """

    return "&".join(f"{key}={value}" for key, value in fields.items())


def build_encoded_query(fields: Sequence[Mapping[str, Any]]) -> str:
    """Percent-encode every pair of every mapping and join them with `&`."""

    pairs = []
    for mapping in fields:
        for key, value in mapping.items():
            pairs.append(f"{_encode(key)}={_encode(value)}")
    return "&".join(pairs)


def _encode(value: Any) -> str:
    return quote(str(value), safe=_QUERY_SAFE)
