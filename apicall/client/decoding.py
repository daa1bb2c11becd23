from __future__ import annotations

import json
from functools import lru_cache
from typing import Any, Type, TypeVar

from pydantic import PydanticSchemaGenerationError, TypeAdapter, ValidationError

from apicall.client.errors import DecodeError

T = TypeVar("T")


def encode_json(value: Any) -> bytes:
    """Serialize a JSON payload (pretty-printed, UTF-8)."""

    return json.dumps(value, indent=2, ensure_ascii=False).encode("utf-8")


def decode_json(body: bytes) -> Any:
    """Parse a JSON body.

    Raises:
      ValueError: body is not UTF-8 JSON.
    """

    return json.loads(body.decode("utf-8", errors="strict"))


def snake_to_camel(key: str) -> str:
    """`first_name` -> `firstName`.

    Leading and trailing underscores are kept. Words after the first are
    capitalized with the rest lowercased; the first word is lowercased.
    """

    if "_" not in key:
        return key

    stripped = key.strip("_")
    if not stripped:
        return key
    lead = key[: len(key) - len(key.lstrip("_"))]
    trail = key[len(key.rstrip("_")) :]

    words = [w for w in stripped.split("_") if w]
    camel = words[0].lower() + "".join(w[:1].upper() + w[1:].lower() for w in words[1:])
    return lead + camel + trail


def convert_from_snake_case(obj: Any) -> Any:
    """Recursively rename dict keys from snake_case to camelCase."""

    if isinstance(obj, dict):
        return {
            (snake_to_camel(k) if isinstance(k, str) else k): convert_from_snake_case(v)
            for k, v in obj.items()
        }
    if isinstance(obj, list):
        return [convert_from_snake_case(x) for x in obj]
    return obj


def decode_as(result_type: Type[T], data: Any, *, camel_case: bool = True) -> T:
    """Validate already-parsed JSON into `result_type`.

    `result_type` is anything pydantic can build an adapter for (models,
    builtins, `List[Model]`, ...).
    """

    if camel_case:
        data = convert_from_snake_case(data)
    try:
        return _adapter_for(result_type).validate_python(data)
    except ValidationError as e:
        raise DecodeError(f"response does not match {_type_name(result_type)}: {e}") from e


@lru_cache(maxsize=256)
def _cached_adapter(result_type: Any) -> TypeAdapter:
    return TypeAdapter(result_type)


def _adapter_for(result_type: Any) -> TypeAdapter:
    """Adapter for `result_type`, built once per hashable type."""

    try:
        hash(result_type)
    except TypeError:
        build = TypeAdapter
    else:
        build = _cached_adapter
    try:
        return build(result_type)
    except PydanticSchemaGenerationError as e:
        raise DecodeError(f"cannot decode into {_type_name(result_type)}: {e}") from e


def decode_body(result_type: Type[T], body: bytes, *, camel_case: bool = True) -> T:
    """Parse and validate a raw body into `result_type`."""

    try:
        data = decode_json(body)
    except ValueError as e:
        raise DecodeError(f"response body is not valid JSON: {e}") from e
    return decode_as(result_type, data, camel_case=camel_case)


def _type_name(tp: Any) -> str:
    return getattr(tp, "__name__", None) or str(tp)
