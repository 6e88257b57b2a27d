import asyncio
import io
import random
import time
from datetime import datetime, timezone

import pytest

from scanboard.services.feed import next_data_point, wait_for_tick
from scanboard.services.uploads import UploadError, UploadStorage


def test_upload_and_download(client):
    r = client.post("/api/upload", files={"file": ("report.txt", b"hello scan", "text/plain")})
    assert r.status_code == 200, r.text
    body = r.json()
    assert body["filename"].endswith("-report.txt")
    prefix = body["filename"].split("-", 1)[0]
    assert prefix.isdigit()

    download = client.get(f"/api/download/{body['filename']}")
    assert download.status_code == 200
    assert download.content == b"hello scan"


def test_upload_too_large(make_client, tmp_path):
    client = make_client(auth_enabled=False, max_upload_bytes=4)
    r = client.post("/api/upload", files={"file": ("big.bin", b"0123456789", "application/octet-stream")})
    assert r.status_code == 413
    assert r.json() == {"status": "failure", "data": "File too large"}
    uploads = tmp_path / "uploads"
    assert not uploads.exists() or list(uploads.iterdir()) == []


def test_download_missing_file(client):
    r = client.get("/api/download/missing.txt")
    assert r.status_code == 404
    assert r.json() == {"status": "failure", "data": "File not found"}


def test_storage_refuses_names_outside_directory(tmp_path):
    storage = UploadStorage(tmp_path / "uploads", max_bytes=1024)
    (tmp_path / "secret.txt").write_text("nope")
    assert storage.resolve("../secret.txt") is None
    assert storage.resolve("a/b.txt") is None
    assert storage.resolve("..") is None
    assert storage.resolve("") is None


def test_storage_strips_client_directories(tmp_path):
    storage = UploadStorage(tmp_path / "uploads", max_bytes=1024)
    name, path = storage.save("C:\\Users\\me\\scan.json", io.BytesIO(b"{}"))
    assert name.endswith("-scan.json")
    assert path.parent == tmp_path / "uploads"
    assert storage.resolve(name) == path.resolve()


def test_storage_requires_a_name(tmp_path):
    storage = UploadStorage(tmp_path / "uploads", max_bytes=1024)
    with pytest.raises(UploadError) as exc:
        storage.save("", io.BytesIO(b"x"))
    assert exc.value.status_code == 400


def test_next_data_point_shape():
    now = datetime(2024, 1, 1, tzinfo=timezone.utc)
    point = next_data_point(now=now, rng=random.Random(7))
    assert point["id"] == int(now.timestamp() * 1000)
    assert 0 <= point["value"] <= 100
    assert point["timestamp"] == now.isoformat()


def test_latest_data(client):
    body = client.get("/api/latest-data").json()
    assert set(body) == {"id", "value", "timestamp"}


def test_websocket_feed_pushes_points(client):
    with client.websocket_connect("/ws/feed") as ws:
        first = ws.receive_json()
        second = ws.receive_json()
    assert set(first) == {"id", "value", "timestamp"}
    assert second["id"] >= first["id"]


class _FailingStream:
    def __init__(self, first: bytes):
        self._first = first
        self._reads = 0

    def read(self, size=-1):
        self._reads += 1
        if self._reads == 1:
            return self._first
        raise OSError("connection reset")


def test_storage_removes_partial_file_when_stream_fails(tmp_path):
    storage = UploadStorage(tmp_path / "uploads", max_bytes=1024 * 1024 * 8)
    with pytest.raises(OSError):
        storage.save("scan.json", _FailingStream(b"partial"))
    assert list((tmp_path / "uploads").iterdir()) == []


class _ChattyWebSocket:
    async def receive(self):
        await asyncio.sleep(0)
        return {"type": "websocket.receive", "text": "ping"}


class _LeavingWebSocket:
    async def receive(self):
        return {"type": "websocket.disconnect", "code": 1000}


def test_tick_waits_full_interval_despite_client_messages():
    interval = 0.05
    started = time.monotonic()
    disconnected = asyncio.run(wait_for_tick(_ChattyWebSocket(), interval))
    assert disconnected is False
    assert time.monotonic() - started >= interval * 0.9


def test_tick_ends_early_on_disconnect():
    started = time.monotonic()
    assert asyncio.run(wait_for_tick(_LeavingWebSocket(), 5.0)) is True
    assert time.monotonic() - started < 1.0
