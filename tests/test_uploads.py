import base64
import os

import pytest

from conftest import ADMIN_HEADERS
from govivid.shared.errors import BadRequest, PayloadTooLarge
from govivid.uploads.handler import (
    UploadHandler,
    choose_extension,
    sanitize_filename,
    split_data_url,
)

PNG_BYTES = b"\x89PNG\r\n\x1a\n" + b"\x00" * 32


def encode(data: bytes) -> str:
    return base64.b64encode(data).decode()


@pytest.mark.parametrize(
    "filename, mime_type, expected",
    [
        ("Photo.JPG", None, "jpg"),
        ("logo.webp", "image/png", "webp"),
        (None, "image/jpeg", "jpeg"),
        ("", "image/svg+xml", "svg"),
        (None, None, "png"),
        ("noext", "image/gif", "gif"),
        ("script.exe", "image/png", "png"),
        (None, "image/tiff", "png"),
    ],
)
def test_choose_extension(filename, mime_type, expected):
    assert choose_extension(filename, mime_type) == expected


def test_sanitize_filename():
    assert sanitize_filename("My Logo (final).PNG") == "my-logo--final-.png"


def test_split_data_url():
    assert split_data_url("data:image/webp;base64,AAAA") == ("image/webp", "AAAA")
    assert split_data_url("AAAA") == (None, "AAAA")


def test_decode_validation_order(tmp_path):
    handler = UploadHandler(str(tmp_path))

    with pytest.raises(BadRequest, match="required"):
        handler.decode("")
    # MIME type is checked before the payload is decoded
    with pytest.raises(BadRequest, match="Only image"):
        handler.decode("!!!", mime_type="text/plain")
    with pytest.raises(BadRequest, match="Invalid"):
        handler.decode("!!!!")


def test_decode_rejects_oversized_payload(tmp_path):
    handler = UploadHandler(str(tmp_path), max_bytes=10)
    with pytest.raises(PayloadTooLarge):
        handler.decode(encode(b"x" * 11))
    assert handler.decode(encode(b"x" * 10))[0] == b"x" * 10


def test_upload_without_mime_type_defaults_to_png(client, settings):
    response = client.post("/api/uploads", json={"data": "aGVsbG8="}, headers=ADMIN_HEADERS)

    assert response.status_code == 200
    body = response.json()
    assert body["ok"] is True
    assert body["filename"].endswith(".png")
    assert body["url"] == f"/uploads/{body['filename']}"
    with open(os.path.join(settings.upload_dir, body["filename"]), "rb") as f:
        assert f.read() == b"hello"


def test_uploaded_file_is_served(client):
    response = client.post(
        "/api/uploads",
        json={"data": "data:image/png;base64," + encode(PNG_BYTES), "filename": "Hero Shot.png"},
        headers=ADMIN_HEADERS,
    )
    url = response.json()["url"]

    served = client.get(url)
    assert served.status_code == 200
    assert served.content == PNG_BYTES


def test_missing_upload_returns_404(client):
    assert client.get("/uploads/does-not-exist.png").status_code == 404


def test_upload_uses_filename_extension(client):
    response = client.post(
        "/api/uploads",
        json={"data": encode(PNG_BYTES), "filename": "team.JPEG", "mimeType": "image/jpeg"},
        headers=ADMIN_HEADERS,
    )
    assert response.status_code == 200
    assert response.json()["filename"].endswith(".jpeg")


def test_oversized_upload_returns_413_and_writes_nothing(client, settings):
    payload = encode(b"\x00" * (5 * 1024 * 1024 + 1))

    response = client.post("/api/uploads", json={"data": payload, "mimeType": "image/png"}, headers=ADMIN_HEADERS)

    assert response.status_code == 413
    assert os.listdir(settings.upload_dir) == []


@pytest.mark.parametrize(
    "body",
    [
        {},
        {"data": ""},
        {"data": 12345},
        {"data": encode(b"plain text"), "mimeType": "text/plain"},
        {"data": "%%%%"},
        {"data": "aGVs!!bG8=#"},
    ],
)
def test_invalid_uploads_return_400(client, settings, body):
    response = client.post("/api/uploads", json=body, headers=ADMIN_HEADERS)

    assert response.status_code == 400
    assert os.listdir(settings.upload_dir) == []


def test_upload_requires_admin_secret(client, settings):
    response = client.post("/api/uploads", json={"data": "aGVsbG8="})

    assert response.status_code == 401
    assert os.listdir(settings.upload_dir) == []


def test_write_failure_returns_500(client, monkeypatch):
    def broken_open(*args, **kwargs):
        raise PermissionError("read-only filesystem")

    monkeypatch.setattr("govivid.uploads.handler.aiofiles.open", broken_open)

    response = client.post("/api/uploads", json={"data": "aGVsbG8="}, headers=ADMIN_HEADERS)

    assert response.status_code == 500
    assert response.json()["error"] == "Failed to save image"


def test_decode_accepts_urlsafe_and_unpadded_base64(tmp_path):
    handler = UploadHandler(str(tmp_path))
    assert handler.decode("aGVsbG8")[0] == b"hello"
    assert handler.decode(base64.urlsafe_b64encode(b"\xfb\xff\xfe").decode())[0] == b"\xfb\xff\xfe"


def test_decode_rejects_characters_outside_alphabet(tmp_path):
    handler = UploadHandler(str(tmp_path))
    with pytest.raises(BadRequest, match="Invalid"):
        handler.decode("aGVs!!bG8=#")
