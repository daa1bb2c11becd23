"""HTTP request helper.

Builds JSON, URL-encoded and multipart/form-data requests, sends them through
a pluggable transport and decodes responses into typed results.

Security notes
- Treat server responses as untrusted input.
- Avoid printing or logging raw file bytes.
- Multipart names, filenames and values are not escaped; do not feed them
  unchecked user input containing quotes or CR/LF.
"""

from .config import ClientConfig  # noqa: F401
from .decoding import convert_from_snake_case, decode_body, snake_to_camel  # noqa: F401
from .errors import (  # noqa: F401
    ApiCallError,
    DecodeError,
    InvalidResponse,
    NoConnectivity,
    RequestFailed,
    TransportError,
)
from .http import (  # noqa: F401
    ApiClient,
    FormPayload,
    HttpMethod,
    JsonPayload,
    MultipartPayload,
    encode_payload,
)
from .models import ErrorItem, ErrorModel  # noqa: F401
from .multipart import (  # noqa: F401
    FieldDescriptor,
    FileField,
    TextField,
    encode_multipart,
    multipart_content_type,
    new_boundary,
)
from .query import build_encoded_query, build_unencoded_query  # noqa: F401
from .reachability import SocketReachability, StaticReachability  # noqa: F401
from .transport import HttpResponse, UrllibTransport  # noqa: F401
