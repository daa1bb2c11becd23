from __future__ import annotations

import hashlib
from typing import Dict, List, Mapping, Optional

import pytest
from fastapi import FastAPI
from fastapi.responses import JSONResponse, PlainTextResponse
from fastapi.testclient import TestClient
from pydantic import BaseModel
from starlette.datastructures import UploadFile
from starlette.requests import Request

from apicall.client import (
    ApiClient,
    ClientConfig,
    FileField,
    FormPayload,
    HttpResponse,
    MultipartPayload,
    RequestFailed,
    StaticReachability,
    TextField,
)


class AppTransport:
    """Routes client requests into an in-process ASGI app."""

    def __init__(self, client: TestClient):
        self.client = client

    def send(
        self, method: str, url: str, headers: Mapping[str, str], body: Optional[bytes]
    ) -> HttpResponse:
        r = self.client.request(method, url, headers=dict(headers), content=body)
        return HttpResponse(status=r.status_code, headers=dict(r.headers), body_bytes=r.content)


class PartOut(BaseModel):
    name: str
    value: Optional[str] = None
    fileName: Optional[str] = None
    contentType: Optional[str] = None
    sizeBytes: Optional[int] = None
    sha256: Optional[str] = None


class FormOut(BaseModel):
    parts: List[PartOut]
    authorization: Optional[str] = None


class RawOut(BaseModel):
    contentType: str
    raw: str
    parsed: Dict[str, str]


def _build_app() -> FastAPI:
    app = FastAPI()

    @app.post("/upload")
    async def upload(request: Request):
        form = await request.form()
        parts = []
        for key, value in form.multi_items():
            if isinstance(value, UploadFile):
                data = await value.read()
                parts.append(
                    {
                        "name": key,
                        "file_name": value.filename,
                        "content_type": value.content_type,
                        "size_bytes": len(data),
                        "sha256": hashlib.sha256(data).hexdigest(),
                    }
                )
            else:
                parts.append({"name": key, "value": value})
        return {"parts": parts, "authorization": request.headers.get("authorization")}

    @app.post("/form")
    async def form_echo(request: Request):
        raw = (await request.body()).decode("utf-8")
        form = await request.form()
        return {
            "content_type": request.headers.get("content-type"),
            "raw": raw,
            "parsed": {k: str(v) for k, v in form.items()},
        }

    @app.post("/reject")
    async def reject():
        return JSONResponse({"errors": [{"message": "unsupported image"}]}, status_code=415)

    @app.get("/broken")
    async def broken():
        return PlainTextResponse("upstream exploded", status_code=502)

    return app


@pytest.fixture
def api() -> ApiClient:
    test_client = TestClient(_build_app())
    return ApiClient(
        ClientConfig(base_url="http://testserver"),
        transport=AppTransport(test_client),
        reachability=StaticReachability(True),
    )


def test_multipart_body_is_parsed_by_server(api):
    data = bytes(range(256)) * 4
    payload = MultipartPayload(
        fields=(
            TextField("caption", "hello world"),
            FileField("image", "pic.png", "image/png", data),
            TextField("album", "7"),
        )
    )

    out = api.request_api(FormOut, "POST", "/upload", payload=payload)

    assert [p.name for p in out.parts] == ["caption", "image", "album"]
    caption, image, album = out.parts
    assert caption.value == "hello world"
    assert album.value == "7"
    assert image.fileName == "pic.png"
    assert image.contentType == "image/png"
    assert image.sizeBytes == len(data)
    assert image.sha256 == hashlib.sha256(data).hexdigest()


def test_empty_file_part_is_parsed_by_server(api):
    payload = MultipartPayload(fields=(FileField("f", "empty.bin", "application/octet-stream", b""),))

    out = api.request_api(FormOut, "POST", "/upload", payload=payload)

    [part] = out.parts
    assert part.sizeBytes == 0
    assert part.fileName == "empty.bin"


def test_upload_data_roundtrip_with_bearer_token(api):
    image = b"\xff\xd8\xff\xe0" + b"\x00" * 100

    out = api.upload_data(
        FormOut,
        "POST",
        "/upload",
        image,
        field_name="photo",
        params={"user_id": "42"},
        bearer_token="secret-token",
    )

    assert out.authorization == "Bearer secret-token"
    user, photo = out.parts
    assert user.name == "user_id"
    assert user.value == "42"
    assert photo.name == "photo"
    assert photo.fileName == "imagename.png"
    assert photo.contentType == "image/jpeg"
    assert photo.sha256 == hashlib.sha256(image).hexdigest()


def test_upload_rejection_surfaces_server_message(api):
    with pytest.raises(RequestFailed) as excinfo:
        api.upload_data(FormOut, "POST", "/reject", b"gif89a", field_name="image")

    assert excinfo.value.status == 415
    assert excinfo.value.message == "unsupported image"


def test_form_bodies_as_seen_by_server(api):
    plain = api.request_api(RawOut, "POST", "/form", payload=FormPayload({"a": "1", "b": "two"}))
    encoded = api.request_api(
        RawOut, "POST", "/form", payload=FormPayload({"q": "a b&c"}, percent_encode=True)
    )

    assert plain.contentType == "application/x-www-form-urlencoded"
    assert plain.raw == "a=1&b=two"
    assert plain.parsed == {"a": "1", "b": "two"}
    assert encoded.raw == "q=a%20b%26c"
    assert encoded.parsed == {"q": "a b&c"}


def test_plain_text_error_becomes_request_failed(api):
    with pytest.raises(RequestFailed) as excinfo:
        api.request_api(FormOut, "GET", "/broken")

    assert excinfo.value.status == 502
    assert excinfo.value.message == "upstream exploded"
