from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Mapping, Optional, Sequence, Tuple, Type, TypeVar, Union
from urllib.parse import urlsplit

from pydantic import ValidationError

from apicall.client.config import ClientConfig, log_level_from_env
from apicall.client.decoding import decode_as, decode_json, encode_json
from apicall.client.errors import (
    DecodeError,
    InvalidResponse,
    NoConnectivity,
    RequestFailed,
)
from apicall.client.multipart import (
    FieldDescriptor,
    FileField,
    encode_multipart,
    fields_from_params,
    multipart_content_type,
    new_boundary,
)
from apicall.client.query import build_encoded_query, build_unencoded_query
from apicall.client.reachability import Reachability, SocketReachability
from apicall.client.transport import HttpResponse, Transport, UrllibTransport
from apicall.utils.json_safe import pretty, redact_headers

log = logging.getLogger("apicall.client")
log.setLevel(log_level_from_env())

T = TypeVar("T")

JSON_CONTENT_TYPE = "application/json"
FORM_CONTENT_TYPE = "application/x-www-form-urlencoded"


class HttpMethod(str, Enum):
    """HTTP verbs accepted by the client."""

    GET = "GET"
    POST = "POST"
    PUT = "PUT"
    PATCH = "PATCH"
    DELETE = "DELETE"
    HEAD = "HEAD"
    OPTIONS = "OPTIONS"


@dataclass(frozen=True, slots=True)
class JsonPayload:
    value: Any


@dataclass(frozen=True, slots=True)
class FormPayload:
    """URL-encoded form body.

    By default the legacy unescaped `key=value&...` form is sent; set
    `percent_encode` to escape keys and values.
    """

    fields: Mapping[str, Any]
    percent_encode: bool = False


@dataclass(frozen=True, slots=True)
class MultipartPayload:
    """Ordered multipart fields. `boundary` is generated when not given."""

    fields: Sequence[FieldDescriptor] = field(default_factory=tuple)
    boundary: Optional[str] = None


Payload = Union[JsonPayload, FormPayload, MultipartPayload]


def encode_payload(payload: Optional[Payload]) -> Tuple[Optional[bytes], str]:
    """Return `(body, content_type)` for a payload.

    No payload means no body, still sent as `application/json`.
    """

    if payload is None:
        return None, JSON_CONTENT_TYPE
    if isinstance(payload, MultipartPayload):
        boundary = payload.boundary or new_boundary()
        return encode_multipart(payload.fields, boundary), multipart_content_type(boundary)
    if isinstance(payload, FormPayload):
        if payload.percent_encode:
            query = build_encoded_query([payload.fields])
        else:
            query = build_unencoded_query(payload.fields)
        return query.encode("utf-8"), FORM_CONTENT_TYPE
    return encode_json(payload.value), JSON_CONTENT_TYPE


def _method_name(method: Union[HttpMethod, str]) -> str:
    if isinstance(method, HttpMethod):
        return method.value
    return HttpMethod(method.upper()).value


def _redact_url(url: str) -> str:
    """Host and path only; query strings may carry secrets."""

    try:
        parsed = urlsplit(url)
    except ValueError:
        return "url"
    if parsed.netloc:
        return parsed.netloc + parsed.path
    return parsed.path or "url"


def _failure_message(resp: HttpResponse, limit: int = 200) -> Optional[str]:
    text = resp.text.strip()
    if not text:
        return None
    return text[:limit]


class ApiClient:
    """Request helper: encode a payload, send it, decode the result.

    A client holds an immutable `ClientConfig` and is safe to share between
    threads. Each call is a one-shot request; nothing is retried.

    Security notes:
    - Authorization headers are redacted in debug logs.
    - File bytes are never logged.

    """

    def __init__(
        self,
        config: Optional[ClientConfig] = None,
        *,
        transport: Optional[Transport] = None,
        reachability: Optional[Reachability] = None,
    ):
        self.config = config if config is not None else ClientConfig.from_env()
        self.transport = (
            transport if transport is not None else UrllibTransport(self.config.timeout_sec)
        )
        self.reachability = (
            reachability
            if reachability is not None
            else SocketReachability(self.config.reachability_host, self.config.reachability_port)
        )

    def with_config(self, **changes: Any) -> "ApiClient":
        """New client with a modified config, sharing transport and reachability check."""

        return ApiClient(
            self.config.replace(**changes),
            transport=self.transport,
            reachability=self.reachability,
        )

    def request_api(
        self,
        result_type: Type[T],
        method: Union[HttpMethod, str],
        path: str,
        *,
        payload: Union[Payload, Mapping[str, Any], None] = None,
        base_url: Optional[str] = None,
        camel_case: bool = True,
    ) -> T:
        """Send a JSON, form or multipart request and decode the response.

        A bare mapping as `payload` is sent as multipart or URL-encoded form
        when the config says so, JSON otherwise.

        Raises:
          NoConnectivity, TransportError, InvalidResponse, RequestFailed, DecodeError
        """

        self._require_connectivity()

        payload = self._coerce_payload(payload)
        body, content_type = encode_payload(payload)
        headers: Dict[str, str] = dict(self.config.headers)
        headers["Content-Type"] = content_type

        url = self.config.resolve_url(path, base_url)
        resp = self._send(_method_name(method), url, headers, body, payload)
        status = self._check_response(resp)

        if status < 200:
            log.warning("api_request_failed", extra={"status_code": status})
            raise RequestFailed(status)

        try:
            data = decode_json(resp.body_bytes)
        except ValueError as e:
            if 200 <= status < 300:
                raise DecodeError(f"response body is not valid JSON: {e}") from e
            log.warning("api_request_failed", extra={"status_code": status})
            raise RequestFailed(status, _failure_message(resp)) from e

        return decode_as(result_type, data, camel_case=camel_case)

    def upload_data(
        self,
        result_type: Type[T],
        method: Union[HttpMethod, str],
        path: str,
        data: bytes,
        *,
        field_name: str,
        params: Optional[Mapping[str, str]] = None,
        bearer_token: Optional[str] = None,
        filename: str = "imagename.png",
        mime_type: str = "image/jpeg",
        base_url: Optional[str] = None,
        camel_case: bool = True,
        boundary: Optional[str] = None,
    ) -> T:
        """Upload raw bytes (typically an image) as a multipart file part.

        Text params go first, in mapping order, followed by the file part.
        Non-2xx responses are read as the configured error model and raised
        as `RequestFailed` carrying its first message.

        Raises:
          NoConnectivity, TransportError, InvalidResponse, RequestFailed, DecodeError
        """

        self._require_connectivity()

        fields = fields_from_params(params)
        fields.append(FileField(name=field_name, filename=filename, mime_type=mime_type, data=data))
        payload = MultipartPayload(fields=tuple(fields), boundary=boundary)
        body, content_type = encode_payload(payload)

        headers: Dict[str, str] = dict(self.config.headers)
        headers["Content-Type"] = content_type
        if bearer_token is not None:
            headers["Authorization"] = f"Bearer {bearer_token}"
            headers["Accept"] = JSON_CONTENT_TYPE

        url = self.config.resolve_url(path, base_url)
        resp = self._send(_method_name(method), url, headers, body, payload)
        status = self._check_response(resp)

        if 200 <= status < 300:
            try:
                parsed = decode_json(resp.body_bytes)
            except ValueError as e:
                raise DecodeError(f"response body is not valid JSON: {e}") from e
            return decode_as(result_type, parsed, camel_case=camel_case)

        log.warning("api_upload_failed", extra={"status_code": status})
        try:
            err = self.config.error_model.model_validate(decode_json(resp.body_bytes))
        except (ValueError, ValidationError) as e:
            raise RequestFailed(status) from e
        raise RequestFailed(status, err.first_message())

    def _require_connectivity(self) -> None:
        if not self.reachability.is_connected():
            log.warning("api_no_connectivity")
            raise NoConnectivity()

    def _coerce_payload(self, payload: Union[Payload, Mapping[str, Any], None]) -> Optional[Payload]:
        if payload is None or isinstance(payload, (JsonPayload, FormPayload, MultipartPayload)):
            return payload
        if isinstance(payload, Mapping):
            if self.config.multipart_form_data:
                return MultipartPayload(fields=tuple(fields_from_params(payload)))
            if self.config.form_url_encoded:
                return FormPayload(fields=payload)
        return JsonPayload(payload)

    def _send(
        self,
        method: str,
        url: str,
        headers: Mapping[str, str],
        body: Optional[bytes],
        payload: Optional[Payload],
    ) -> HttpResponse:
        start = time.monotonic()
        resp = self.transport.send(method, url, headers, body)
        dur_ms = int((time.monotonic() - start) * 1000)

        log.info(
            "api_request",
            extra={
                "method": method,
                "url": _redact_url(url),
                "status_code": getattr(resp, "status", None),
                "duration_ms": dur_ms,
            },
        )
        if self.config.debug:
            self._log_exchange(url, headers, payload, resp)
        return resp

    # Logged at INFO: the exchange is switched on per client by `config.debug`.
    def _log_exchange(
        self,
        url: str,
        headers: Mapping[str, str],
        payload: Optional[Payload],
        resp: Any,
    ) -> None:
        log.info("----------Request----------\n%s", url)
        log.info("----------Headers----------\n%s", pretty(redact_headers(headers)))
        if payload is not None:
            params = payload.value if isinstance(payload, JsonPayload) else payload.fields
            log.info("----------Parameters----------\n%s", pretty(params))
        body = getattr(resp, "body_bytes", b"")
        try:
            rendered = pretty(decode_json(body))
        except (ValueError, AttributeError):
            rendered = "json data malformed"
        log.info("----------RESPONSE----------\n%s", rendered)

    @staticmethod
    def _check_response(resp: Any) -> int:
        if not isinstance(resp, HttpResponse):
            raise InvalidResponse()
        status = resp.status
        if isinstance(status, bool) or not isinstance(status, int) or not 100 <= status <= 599:
            raise InvalidResponse(f"Invalid response status: {status!r}")
        return status
