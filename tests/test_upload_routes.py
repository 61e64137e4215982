"""
Tests for the upload API

Tests cover:
- Multipart upload (single and multiple fields)
- Base64 upload
- Sub-directory header handling
- Structured error responses
- Static serving of stored files
- Request ID and security headers
"""

import re

from fastapi import status

from conftest import PNG_BYTES, data_uri, sha256_hex, stored_files

DATED = r"\d{4}/\d{2}/\d{2}"


# ===== Multipart Upload Tests =====

class TestMultipartUpload:
    """Tests for POST /v1/upload"""

    def test_single_file(self, client, storage_root):
        response = client.post(
            "/v1/upload",
            files={"file": ("dot.png", PNG_BYTES, "image/png")},
        )

        assert response.status_code == status.HTTP_200_OK
        body = response.json()
        assert len(body) == 1
        item = body[0]
        digest = sha256_hex(PNG_BYTES)
        assert item["hash"] == digest
        assert item["name"] == f"{digest}.png"
        assert item["extension"] == ".png"
        assert item["size"] == len(PNG_BYTES)
        assert item["original_name"] == "dot.png"
        assert re.fullmatch(rf"/resource/static/project1/default/{DATED}/{digest}\.png", item["public_path"])
        assert "absolute_path" not in item
        assert "relative_path" not in item
        assert [p.name for p in stored_files(storage_root)] == [f"{digest}.png"]

    def test_multiple_files(self, client):
        response = client.post(
            "/v1/upload",
            files=[
                ("file", ("a.txt", b"alpha", "text/plain")),
                ("files", ("b.txt", b"bravo", "text/plain")),
                ("files", ("c.txt", b"charlie", "text/plain")),
            ],
        )

        assert response.status_code == status.HTTP_200_OK
        assert [item["original_name"] for item in response.json()] == ["a.txt", "b.txt", "c.txt"]

    def test_sub_directory_header(self, client):
        response = client.post(
            "/v1/upload",
            files={"file": ("a.txt", b"alpha", "text/plain")},
            headers={"SubDirectory": "tenant-a"},
        )

        assert response.status_code == status.HTTP_200_OK
        assert re.match(rf"/resource/static/project1/tenant-a/{DATED}/", response.json()[0]["public_path"])

    def test_rooted_sub_directory_header_keeps_project(self, client, storage_root):
        response = client.post(
            "/v1/upload",
            files={"file": ("a.txt", b"alpha", "text/plain")},
            headers={"SubDirectory": "/tenant-a"},
        )

        assert response.status_code == status.HTTP_200_OK
        assert response.json()[0]["public_path"].startswith("/resource/static/project1/tenant-a/")
        stored = stored_files(storage_root)
        assert len(stored) == 1
        assert stored[0].relative_to(storage_root).parts[:2] == ("project1", "tenant-a")

    def test_slash_only_header_uses_default(self, client):
        response = client.post(
            "/v1/upload",
            files={"file": ("a.txt", b"alpha", "text/plain")},
            headers={"SubDirectory": "/"},
        )

        assert response.status_code == status.HTTP_200_OK
        assert re.match(rf"/resource/static/project1/default/{DATED}/", response.json()[0]["public_path"])

    def test_same_content_twice(self, client, storage_root):
        first = client.post("/v1/upload", files={"file": ("a.txt", b"same", "text/plain")})
        second = client.post("/v1/upload", files={"file": ("a.txt", b"same", "text/plain")})

        assert first.json() == second.json()
        assert len(stored_files(storage_root)) == 1

    def test_missing_file_field(self, client, storage_root):
        response = client.post("/v1/upload", data={"comment": "no file here"})

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        body = response.json()
        assert body["error"] is True
        assert body["error_type"] == "invalid_payload"
        assert stored_files(storage_root) == []

    def test_sub_directory_traversal_rejected(self, client, storage_root):
        response = client.post(
            "/v1/upload",
            files={"file": ("a.txt", b"alpha", "text/plain")},
            headers={"SubDirectory": "../../../etc"},
        )

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.json()["error_type"] == "path_resolution_failure"
        assert stored_files(storage_root.parent) == []


# ===== Base64 Upload Tests =====

class TestBase64Upload:
    """Tests for POST /v1/upload/base64"""

    def test_images(self, client, storage_root):
        response = client.post(
            "/v1/upload/base64",
            json=[data_uri(PNG_BYTES, "png"), None, data_uri(b"gif bytes", "gif")],
        )

        assert response.status_code == status.HTTP_200_OK
        body = response.json()
        assert [item["extension"] for item in body] == [".png", ".gif"]
        assert body[0]["hash"] == sha256_hex(PNG_BYTES)
        assert body[1]["original_name"] == ""
        assert len(stored_files(storage_root)) == 2

    def test_invalid_entry_aborts(self, client):
        response = client.post(
            "/v1/upload/base64",
            json=[data_uri(b"first"), "plain text", data_uri(b"third")],
        )

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        body = response.json()
        assert body["error_type"] == "invalid_payload"
        assert "base64" in body["message"]

    def test_body_must_be_list(self, client):
        response = client.post("/v1/upload/base64", json={"image": data_uri(PNG_BYTES)})

        assert response.status_code == 422
        assert response.json()["error"] is True


# ===== Static Serving Tests =====

class TestStaticServing:
    """Stored files are reachable at their public path"""

    def test_fetch_uploaded_file(self, client):
        uploaded = client.post("/v1/upload", files={"file": ("dot.png", PNG_BYTES, "image/png")}).json()[0]

        response = client.get(uploaded["public_path"])

        assert response.status_code == status.HTTP_200_OK
        assert response.content == PNG_BYTES
        assert response.headers["X-Content-Type-Options"] == "nosniff"
        assert "sandbox" in response.headers["Content-Security-Policy"]

    def test_unknown_file(self, client):
        response = client.get("/resource/static/nope.png")

        assert response.status_code == status.HTTP_404_NOT_FOUND


# ===== Misc =====

class TestAppPlumbing:
    """Health, request id and headers"""

    def test_health(self, client):
        response = client.get("/health")

        assert response.status_code == status.HTTP_200_OK
        assert response.json() == {"status": "ok"}

    def test_request_id_echoed(self, client):
        response = client.get("/health", headers={"X-Request-ID": "req-42"})

        assert response.headers["X-Request-ID"] == "req-42"

    def test_request_id_generated(self, client):
        response = client.get("/health")

        assert response.headers["X-Request-ID"]
        assert response.headers["X-Frame-Options"] == "DENY"
