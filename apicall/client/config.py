from __future__ import annotations

import os
from dataclasses import dataclass, field
from dataclasses import replace as _dc_replace
from types import MappingProxyType
from typing import Any, Dict, Mapping, Optional, Type

from apicall.client.models import ErrorModel


def _env_int(name: str, default: int) -> int:
    """Read an integer environment variable, falling back on bad input."""

    raw = os.environ.get(name, "").strip()
    if not raw:
        return int(default)
    try:
        return int(raw)
    except Exception:
        return int(default)


def _env_bool(name: str, default: bool) -> bool:
    raw = os.environ.get(name, "").strip()
    if not raw:
        return default
    return raw in {"1", "true", "TRUE", "yes", "YES"}


def log_level_from_env(default: str = "INFO") -> str:
    """Logger level name from `APICALL_LOG_LEVEL`; unknown names give `default`."""

    raw = os.environ.get("APICALL_LOG_LEVEL", "").strip().upper()
    if raw in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
        return raw
    return default


def _parse_headers(raw: str) -> Dict[str, str]:
    """Parse `Name=value;Other=value` into a dict.

    Entries without `=` are ignored.
    """

    out: Dict[str, str] = {}
    for entry in (raw or "").split(";"):
        entry = entry.strip()
        if not entry or "=" not in entry:
            continue
        name, value = entry.split("=", 1)
        name = name.strip()
        if name:
            out[name] = value.strip()
    return out


def _frozen(headers: Optional[Mapping[str, str]]) -> Mapping[str, str]:
    return MappingProxyType(dict(headers or {}))


@dataclass(frozen=True, slots=True)
class ClientConfig:
    """Per-client configuration.

    Immutable: a client built from a config reads it without locking. To
    change settings, derive a new config with `replace()` and build a new
    client.

    Security notes:
    - Default headers may carry credentials; they are redacted in debug logs.

    """

    base_url: str = ""
    headers: Mapping[str, str] = field(default_factory=lambda: _frozen(None))
    form_url_encoded: bool = False
    multipart_form_data: bool = False
    debug: bool = False
    timeout_sec: int = 60
    reachability_host: str = "1.1.1.1"
    reachability_port: int = 53
    error_model: Type[ErrorModel] = ErrorModel

    def __post_init__(self) -> None:
        if not isinstance(self.headers, MappingProxyType):
            object.__setattr__(self, "headers", _frozen(self.headers))

    @classmethod
    def from_env(cls, **overrides: Any) -> "ClientConfig":
        """Build a config from `APICALL_*` environment variables.

        Keyword arguments win over the environment.
        """

        values: Dict[str, Any] = dict(
            base_url=os.environ.get("APICALL_BASE_URL", "").strip(),
            headers=_parse_headers(os.environ.get("APICALL_HEADERS", "")),
            form_url_encoded=_env_bool("APICALL_FORM_URL_ENCODED", False),
            multipart_form_data=_env_bool("APICALL_MULTIPART", False),
            debug=_env_bool("APICALL_DEBUG", False),
            timeout_sec=_env_int("APICALL_TIMEOUT_SEC", 60),
            reachability_host=os.environ.get("APICALL_REACHABILITY_HOST", "").strip()
            or "1.1.1.1",
            reachability_port=_env_int("APICALL_REACHABILITY_PORT", 53),
        )
        values.update(overrides)
        return cls(**values)

    def replace(self, **changes: Any) -> "ClientConfig":
        return _dc_replace(self, **changes)

    def resolve_url(self, path: str, base_url: Optional[str] = None) -> str:
        """Plain concatenation of base URL and path (no joining rules)."""

        return (base_url if base_url is not None else self.base_url) + path
