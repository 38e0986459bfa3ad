"""
Shared test doubles.

FakeMux plays both sides of a direct upload over httpx.MockTransport:
the Mux API (create and retrieve upload) and the one-time upload URL.
Tests exercise the real httpx code paths and only the network is fake.
"""

import json
from typing import Optional

import httpx
import pytest

from mux_storage.config.settings import get_settings

MUX_HOST = "api.mux.com"


class FakeMux:
    """Records every request and answers like Mux would."""

    def __init__(self) -> None:
        self.requests: list[httpx.Request] = []
        self.upload_id = "s1"
        self.upload_url = "https://u"
        # One entry per retrieval call; the last one repeats.
        self.asset_ids: list[Optional[str]] = ["a1"]
        self.pending_status = "waiting"
        self.create_status = 201
        self.retrieve_status = 200
        self.put_status = 200
        self.create_payload: Optional[dict] = None
        self.put_request: Optional[httpx.Request] = None

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)

    @property
    def calls(self) -> list[str]:
        """Requests as 'METHOD path' (API) or 'PUT upload' (upload target)."""
        return [
            f"{r.method} {r.url.path}" if r.url.host == MUX_HOST else f"{r.method} upload"
            for r in self.requests
        ]

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)

        if request.url.host != MUX_HOST:
            if request.method == "PUT":
                self.put_request = request
                return httpx.Response(self.put_status)
            return httpx.Response(404)

        if request.method == "POST" and request.url.path == "/video/v1/uploads":
            self.create_payload = json.loads(request.content)
            if self.create_status >= 400:
                return httpx.Response(
                    self.create_status,
                    json={"error": {"type": "invalid_parameters", "messages": ["rejected"]}},
                )
            return httpx.Response(
                self.create_status,
                json={"data": {
                    "id": self.upload_id,
                    "url": self.upload_url,
                    "status": "waiting",
                    "timeout": 3600,
                }},
            )

        if request.method == "GET" and request.url.path == f"/video/v1/uploads/{self.upload_id}":
            if self.retrieve_status >= 400:
                return httpx.Response(self.retrieve_status, json={"error": {"type": "not_found"}})

            asset_id = self.asset_ids.pop(0) if len(self.asset_ids) > 1 else self.asset_ids[0]
            data = {"id": self.upload_id, "status": "asset_created" if asset_id else self.pending_status}
            if asset_id:
                data["asset_id"] = asset_id
            return httpx.Response(200, json={"data": data})

        return httpx.Response(404, json={"error": {"type": "not_found"}})


@pytest.fixture
def fake_mux() -> FakeMux:
    return FakeMux()


@pytest.fixture
def video_file(tmp_path):
    """A small local 'video' spanning several chunks."""
    path = tmp_path / "v.mp4"
    path.write_bytes(b"\x00\x00\x00\x18ftypmp42" + bytes(range(256)) * 40)
    return path


@pytest.fixture(autouse=True)
def clean_environment(monkeypatch):
    """Keep the host's ENCODING_TIER and cached settings out of tests."""
    monkeypatch.delenv("ENCODING_TIER", raising=False)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()
