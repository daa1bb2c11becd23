from __future__ import annotations

import json
from dataclasses import fields, is_dataclass
from datetime import date, datetime
from enum import Enum
from pathlib import Path
from typing import Any, Mapping

REDACTED = "<redacted>"
_SENSITIVE_HEADERS = frozenset({"authorization", "proxy-authorization", "cookie"})


def to_jsonable(obj: Any) -> Any:
    """
    Convert payload objects to JSON-serializable equivalents for logging.

    Security considerations:
    - bytes are summarized as `<N bytes>`; raw file data never reaches a log.
    - does NOT execute or import anything dynamically.

    """
    if obj is None or isinstance(obj, (str, int, float, bool)):
        return obj

    if isinstance(obj, Enum):
        return to_jsonable(obj.value)

    # datetime/date -> ISO 8601
    if isinstance(obj, (datetime, date)):
        return obj.isoformat()

    if isinstance(obj, Path):
        return str(obj)

    if isinstance(obj, (bytes, bytearray, memoryview)):
        return f"<{len(bytes(obj))} bytes>"

    # pydantic models
    dump = getattr(obj, "model_dump", None)
    if callable(dump):
        return to_jsonable(dump())

    # dataclasses (shallow walk so bytes fields are summarized, not copied)
    if is_dataclass(obj) and not isinstance(obj, type):
        return {f.name: to_jsonable(getattr(obj, f.name)) for f in fields(obj)}

    if isinstance(obj, Mapping):
        return {str(k): to_jsonable(v) for k, v in obj.items()}

    if isinstance(obj, (list, tuple, set, frozenset)):
        return [to_jsonable(x) for x in obj]

    # fallback: string representation
    return str(obj)


def redact_headers(headers: Mapping[str, str]) -> dict:
    """Copy of `headers` with credential-bearing values replaced."""

    return {k: (REDACTED if k.lower() in _SENSITIVE_HEADERS else v) for k, v in headers.items()}


def pretty(obj: Any) -> str:
    """Indented JSON for debug output."""

    return json.dumps(to_jsonable(obj), indent=2, sort_keys=True, ensure_ascii=False)
