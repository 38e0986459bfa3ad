"""
Tests for the HTTP service.

The adapter dependency is overridden with one wired to FakeMux, so
requests run the real routes, adapter and pipeline.
"""

import pytest
from fastapi.testclient import TestClient

from mux_storage.adapter import MuxStorage
from mux_storage.api.dependencies import get_storage
from mux_storage.config.settings import Settings, get_settings
from mux_storage.main import create_app


@pytest.fixture
def app(fake_mux):
    app = create_app()
    app.dependency_overrides[get_storage] = lambda: MuxStorage(
        token_id="id", token_secret="secret", transport=fake_mux.transport
    )
    yield app
    app.dependency_overrides.clear()


@pytest.fixture
def client(app):
    with TestClient(app) as client:
        yield client


class TestHealth:

    def test_reports_missing_credentials(self, app):
        """Health stays 200 but names the missing Mux secrets."""
        app.dependency_overrides[get_settings] = lambda: Settings(
            _env_file=None, mux_token_id="", mux_token_secret=""
        )
        with TestClient(app) as client:
            response = client.get("/health")

        assert response.status_code == 200
        assert response.json()["status"] == "degraded"
        assert response.json()["details"]["missing_config"] == ["MUX_TOKEN_ID", "MUX_TOKEN_SECRET"]

    def test_ok_when_configured(self, app):
        """Health is ok once both secrets are set."""
        app.dependency_overrides[get_settings] = lambda: Settings(
            _env_file=None, mux_token_id="id", mux_token_secret="secret"
        )
        with TestClient(app) as client:
            response = client.get("/health")

        assert response.json()["status"] == "ok"


class TestSaveMedia:

    def test_video_upload_returns_manifest(self, client, fake_mux):
        """An uploaded video comes back as a manifest reference."""
        response = client.post(
            "/api/v1/media",
            files={"file": ("v.mp4", b"\x00\x00\x00\x18ftypmp42video-bytes", "video/mp4")},
        )

        assert response.status_code == 201
        assert response.json() == {"url": "https://vigue.me/api/muxManifest/a1"}
        assert fake_mux.put_request.content == b"\x00\x00\x00\x18ftypmp42video-bytes"

    def test_thumbnail_upload_makes_no_remote_calls(self, client, fake_mux):
        """An uploaded image is mapped without calling Mux."""
        response = client.post(
            "/api/v1/media",
            files={"file": ("abc123_thumb.jpg", b"\xff\xd8\xff", "image/jpeg")},
            data={"target_dir": "2024/01"},
        )

        assert response.status_code == 201
        assert response.json() == {"url": "https://vigue.me/api/muxThumbnail/abc123"}
        assert fake_mux.requests == []

    @pytest.mark.parametrize("filename", [".", ".."])
    def test_dot_filename_falls_back_to_default_name(self, client, fake_mux, filename):
        """A filename that names a directory is spooled under a default name."""
        response = client.post(
            "/api/v1/media",
            files={"file": (filename, b"video-bytes", "video/mp4")},
        )

        assert response.status_code == 201
        assert response.json() == {"url": "https://vigue.me/api/muxManifest/a1"}
        assert fake_mux.put_request.content == b"video-bytes"

    def test_asset_not_ready_is_503(self, client, fake_mux):
        """An asset Mux has not attached yet answers 503."""
        fake_mux.asset_ids = [None]

        response = client.post("/api/v1/media", files={"file": ("v.mp4", b"data", "video/mp4")})

        assert response.status_code == 503

    def test_failed_transfer_is_502(self, client, fake_mux):
        """A rejected PUT answers 502 and skips the lookup."""
        fake_mux.put_status = 500

        response = client.post("/api/v1/media", files={"file": ("v.mp4", b"data", "video/mp4")})

        assert response.status_code == 502
        assert fake_mux.calls == ["POST /video/v1/uploads", "PUT upload"]

    def test_rejected_session_is_502(self, client, fake_mux):
        """A rejected session answers 502."""
        fake_mux.create_status = 401

        response = client.post("/api/v1/media", files={"file": ("v.mp4", b"data", "video/mp4")})

        assert response.status_code == 502

    def test_unconfigured_storage_is_503(self, app):
        """Without credentials there is no adapter to save with."""
        app.dependency_overrides.pop(get_storage)
        app.dependency_overrides[get_settings] = lambda: Settings(
            _env_file=None, mux_token_id="", mux_token_secret=""
        )
        with TestClient(app) as client:
            response = client.post("/api/v1/media", files={"file": ("v.mp4", b"data", "video/mp4")})

        assert response.status_code == 503


class TestStubEndpoints:

    def test_delete_always_succeeds(self, client):
        """DELETE always reports success."""
        response = client.delete("/api/v1/media/abc123_thumb.jpg")
        assert response.json() == {"deleted": True}

    def test_exists_always_false(self, client):
        """The exists check always answers false."""
        response = client.get("/api/v1/media/abc123_thumb.jpg/exists")
        assert response.json() == {"exists": False}

    def test_content_is_never_served(self, client):
        """Stored content is never served back."""
        response = client.get("/content/media/2024/01/v.mp4")
        assert response.status_code == 404
