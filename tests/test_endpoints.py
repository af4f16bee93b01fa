"""Tests for the HTTP surface."""

import pytest
from fastapi.testclient import TestClient

from main import create_app


def _new(client, size, filename="file.txt", dcount=None):
    headers = {"X-Filesize": str(size), "X-Filename": filename}
    if dcount is not None:
        headers["X-Dcount"] = dcount
    return client.post("/new", headers=headers)


def _chunk(client, file_id, index, data):
    return client.post(
        "/data",
        content=data,
        headers={"X-File-ID": file_id, "X-Block-ID": str(index)},
    )


def test_health(client):
    response = client.get("/api/health")
    assert response.status_code == 200
    assert response.json()["status"] == "ok"


def test_index_page(client):
    response = client.get("/")
    assert response.status_code == 200
    assert "text/html" in response.headers["content-type"]
    assert "24 hours" in response.text


def test_static_assets_served(client):
    response = client.get("/static/upload.js")
    assert response.status_code == 200


def test_example_scenario(client, context):
    response = _new(client, 12, "greeting.txt", "2")
    assert response.status_code == 200
    file_id = response.headers["X-File-ID"]
    assert response.json() == {"id": file_id, "filename": "greeting.txt", "size": 12, "downloads": 2}

    response = _chunk(client, file_id, 1, b"world!")
    assert response.status_code == 200
    assert response.json() == {"done": False}
    assert "X-Done" not in response.headers
    assert context.storage.path_for(file_id).read_bytes() == b""

    response = _chunk(client, file_id, 0, b"hello ")
    assert response.status_code == 200
    assert response.headers["X-Done"] == "y"
    assert response.json() == {"done": True}
    assert context.storage.path_for(file_id).read_bytes() == b"hello world!"

    for _ in range(2):
        response = client.get(f"/{file_id}")
        assert response.status_code == 200
        assert response.content == b"hello world!"
        assert 'filename="greeting.txt"' in response.headers["Content-Disposition"]
        assert response.headers["Content-Length"] == "12"

    assert file_id not in context.registry
    assert client.get(f"/{file_id}").status_code == 404


def test_new_without_size_fails(client, context):
    response = client.post("/new", headers={"X-Filename": "a.txt"})
    assert response.status_code == 500
    assert len(context.registry) == 0


def test_new_with_bad_allowance_defaults_to_one(client):
    response = _new(client, 4, dcount="abc")
    assert response.json()["downloads"] == 1


def test_percent_encoded_filename_is_decoded(client, context):
    response = _new(client, 1, filename="r%C3%A9sum%C3%A9.pdf")
    file_id = response.headers["X-File-ID"]
    assert context.registry.lookup(file_id).filename == "résumé.pdf"


def test_data_for_unknown_upload(client):
    response = _chunk(client, "nosuchid", 0, b"data")
    assert response.status_code == 404


def test_data_without_block_id_fails(client):
    file_id = _new(client, 4).headers["X-File-ID"]
    response = client.post("/data", content=b"data", headers={"X-File-ID": file_id})
    assert response.status_code == 500


def test_data_after_completion_is_rejected(client):
    file_id = _new(client, 4).headers["X-File-ID"]
    assert _chunk(client, file_id, 0, b"data").headers["X-Done"] == "y"

    assert _chunk(client, file_id, 1, b"more").status_code == 404


def test_download_while_uploading_is_not_found(client):
    file_id = _new(client, 8).headers["X-File-ID"]
    _chunk(client, file_id, 0, b"half")

    assert client.get(f"/{file_id}").status_code == 404


def test_not_found_page_for_browsers(client):
    response = client.get("/nosuchid", headers={"Accept": "text/html"})
    assert response.status_code == 404
    assert "text/html" in response.headers["content-type"]
    assert "File not found" in response.text


def test_not_found_json_for_clients(client):
    response = client.get("/nosuchid")
    assert response.status_code == 404
    assert response.json()["detail"] == "File not found or expired"


@pytest.mark.parametrize("agent", ["facebookexternalhit/1.1", "Mozilla/5.0 (compatible; Discordbot/2.0)"])
def test_link_preview_agents_are_filtered(client, context, agent):
    file_id = _new(client, 4).headers["X-File-ID"]
    _chunk(client, file_id, 0, b"data")

    response = client.get(f"/{file_id}", headers={"User-Agent": agent.lower()})

    assert response.status_code == 403
    assert context.registry.lookup(file_id).downloads_remaining == 1


def test_filter_can_be_disabled(context):
    with TestClient(create_app(context, ua_filter="")) as client:
        response = client.get("/api/health", headers={"User-Agent": "facebookexternalhit"})
    assert response.status_code == 200


def test_startup_removes_leftover_files(context):
    context.storage.path_for("leftover").write_bytes(b"old")

    with TestClient(create_app(context)):
        assert not context.storage.exists("leftover")


def test_control_characters_in_filename_are_dropped(client, context):
    file_id = _new(client, 4, filename="a%0D%0AX-Evil: 1", dcount="2").headers["X-File-ID"]
    assert context.registry.lookup(file_id).filename == "aX-Evil: 1"
    _chunk(client, file_id, 0, b"data")

    for _ in range(2):
        response = client.get(f"/{file_id}")
        assert response.status_code == 200
        assert response.content == b"data"
        assert "X-Evil" not in response.headers
        assert "\r" not in response.headers["Content-Disposition"]

    assert file_id not in context.registry
    assert not context.storage.exists(file_id)


def test_content_disposition_strips_control_characters():
    from api.download.controllers.download_controller import _content_disposition

    header = _content_disposition("a\r\nb\x00.txt")

    assert header.startswith('attachment; filename="ab.txt"')
    assert "%0D" not in header


def test_sink_close_failure_answers_500(client, context):
    file_id = _new(client, 4).headers["X-File-ID"]
    session = context.sessions.get(file_id)
    session.sink._handle = CloseFailsHandle()

    response = _chunk(client, file_id, 0, b"data")

    assert response.status_code == 500
    assert file_id not in context.registry
    assert not context.storage.exists(file_id)


class CloseFailsHandle:
    """Accepts writes, then fails to flush on close."""

    async def write(self, data):
        pass

    async def close(self):
        raise OSError("Input/output error")
