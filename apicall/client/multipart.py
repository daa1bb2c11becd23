from __future__ import annotations

import uuid
from dataclasses import dataclass
from typing import Any, List, Mapping, Optional, Sequence, Union

CRLF = "\r\n"


@dataclass(frozen=True, slots=True)
class TextField:
    """An inline form field.

    Security notes:
    - `name` and `value` are written verbatim. Quotes or CR/LF in them corrupt
      the body; callers must not pass untrusted values unchecked.
    """

    name: str
    value: str


@dataclass(frozen=True, slots=True)
class FileField:
    """A binary file attachment.

    `data` may be empty; the part is still emitted with an empty payload.

    Security notes:
    - The bytes are copied verbatim into the body and never logged.
    """

    name: str
    filename: str
    mime_type: str
    data: bytes

    def __repr__(self) -> str:
        return (
            f"FileField(name={self.name!r}, filename={self.filename!r}, "
            f"mime_type={self.mime_type!r}, data=<{len(self.data)} bytes>)"
        )


FieldDescriptor = Union[TextField, FileField]


def new_boundary() -> str:
    """Return a fresh boundary token (`Boundary-<UUID>`)."""

    return "Boundary-" + str(uuid.uuid4()).upper()


def multipart_content_type(boundary: str) -> str:
    """Content-Type header value for a body encoded with `boundary`."""

    return f"multipart/form-data; boundary={boundary}"


def encode_multipart(fields: Sequence[FieldDescriptor], boundary: str) -> bytes:
    """Encode `fields` as a multipart/form-data body.

    Parts are written in input order. The closing delimiter is always
    terminated with CRLF, so an empty field list yields `--{boundary}--\\r\\n`.

    Security notes:
    - The boundary is not checked against field content. A boundary that
      occurs inside a value or file payload silently produces a corrupt body.
    - No escaping is applied to names, filenames, values or MIME types.

    Time/Space: O(total field size).
    """

    parts: List[bytes] = []

    for field in fields:
        parts.append(f"--{boundary}{CRLF}".encode("utf-8"))
        if isinstance(field, FileField):
            parts.append(
                f'Content-Disposition: form-data; name="{field.name}"; '
                f'filename="{field.filename}"{CRLF}'.encode("utf-8")
            )
            parts.append(f"Content-Type: {field.mime_type}{CRLF}{CRLF}".encode("utf-8"))
            parts.append(bytes(field.data))
            parts.append(CRLF.encode("utf-8"))
        else:
            parts.append(
                f'Content-Disposition: form-data; name="{field.name}"{CRLF}{CRLF}'.encode("utf-8")
            )
            parts.append(f"{field.value}{CRLF}".encode("utf-8"))

    parts.append(f"--{boundary}--{CRLF}".encode("utf-8"))
    return b"".join(parts)


def fields_from_params(params: Optional[Mapping[str, Any]]) -> List[FieldDescriptor]:
    """Turn a flat str->str mapping into TextFields, preserving mapping order."""

    if not params:
        return []
    return [TextField(name=str(k), value=str(v)) for k, v in params.items()]
