import os
import re

from conftest import make_client, make_settings

PNG_BYTES = (
    b"\x89PNG\r\n\x1a\n\x00\x00\x00\rIHDR\x00\x00\x00\x01\x00\x00\x00\x01"
    b"\x08\x06\x00\x00\x00\x1f\x15\xc4\x89\x00\x00\x00\rIDATx\x9cc\xf8\x0f"
    b"\x00\x00\x01\x01\x00\x05\x18\xd8N\x00\x00\x00\x00IEND\xaeB`\x82"
)


def stored_files(settings):
    return os.listdir(settings.upload_dir)


def test_png_upload_is_stored_and_served(client, settings):
    response = client.post("/api/upload/icon", files={"icon": ("logo.png", PNG_BYTES, "image/png")})

    assert response.status_code == 200
    body = response.json()
    assert body["success"] is True
    assert re.fullmatch(r"icon-\d+-\d+\.png", body["filename"])
    assert body["url"] == f"/uploads/{body['filename']}"

    fetched = client.get(body["url"])
    assert fetched.status_code == 200
    assert fetched.content == PNG_BYTES


def test_extension_is_case_insensitive(client):
    response = client.post("/api/upload/icon", files={"icon": ("LOGO.PNG", PNG_BYTES, "image/png")})

    assert response.status_code == 200
    assert response.json()["filename"].endswith(".png")


def test_disallowed_extension_is_rejected(client, settings):
    response = client.post(
        "/api/upload/icon",
        files={"icon": ("setup.exe", b"MZ\x90\x00", "application/octet-stream")},
    )

    assert response.status_code == 400
    assert "Only these file types are allowed" in response.json()["error"]
    assert stored_files(settings) == []


def test_extension_and_mime_type_must_both_match(client, settings):
    disguised = client.post("/api/upload/icon", files={"icon": ("logo.png", b"text", "text/plain")})
    renamed = client.post("/api/upload/icon", files={"icon": ("logo.exe", PNG_BYTES, "image/png")})

    assert disguised.status_code == 400
    assert renamed.status_code == 400
    assert stored_files(settings) == []


def test_oversize_file_is_rejected(tmp_path):
    settings = make_settings(tmp_path, max_file_size=16)

    with make_client(settings) as client:
        response = client.post("/api/upload/icon", files={"icon": ("logo.png", PNG_BYTES, "image/png")})

    assert response.status_code == 400
    assert "File too large" in response.json()["error"]
    assert stored_files(settings) == []


def test_file_at_the_limit_is_accepted(tmp_path):
    settings = make_settings(tmp_path, max_file_size=len(PNG_BYTES))

    with make_client(settings) as client:
        response = client.post("/api/upload/icon", files={"icon": ("logo.png", PNG_BYTES, "image/png")})

    assert response.status_code == 200


def test_allowed_mime_types_are_configurable(tmp_path):
    settings = make_settings(tmp_path, allowed_file_types="image/png")

    with make_client(settings) as client:
        gif = client.post("/api/upload/icon", files={"icon": ("logo.gif", b"GIF89a", "image/gif")})
        png = client.post("/api/upload/icon", files={"icon": ("logo.png", PNG_BYTES, "image/png")})

    assert gif.status_code == 400
    assert gif.json()["error"] == "Only these file types are allowed: image/png"
    assert png.status_code == 200


def test_missing_file_is_rejected(client):
    response = client.post("/api/upload/icon", files={"avatar": ("logo.png", PNG_BYTES, "image/png")})

    assert response.status_code == 400
    assert response.json()["error"] == "No file uploaded"
