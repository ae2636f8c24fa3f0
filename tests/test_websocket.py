"""
WebSocket channel tests (Starlette TestClient).
"""
import pytest
from starlette.testclient import TestClient

from uigen.main import create_app


@pytest.fixture
def client(test_settings):
    with TestClient(create_app(test_settings)) as test_client:
        yield test_client


def receive_until(ws, message_type):
    received = []
    while True:
        message = ws.receive_json()
        received.append(message)
        if message["type"] in (message_type, "error"):
            return received


class TestWebSocket:
    def test_welcome(self, client):
        with client.websocket_connect("/ws") as ws:
            assert ws.receive_json() == {"type": "welcome", "message": "Connected to UIGen Vue WebSocket server"}

    def test_ping(self, client):
        with client.websocket_connect("/ws") as ws:
            ws.receive_json()
            ws.send_json({"type": "ping"})
            reply = ws.receive_json()
            assert reply["type"] == "pong"
            assert isinstance(reply["timestamp"], int)

    def test_invalid_messages(self, client):
        with client.websocket_connect("/ws") as ws:
            ws.receive_json()
            ws.send_text("{not json")
            assert ws.receive_json() == {"type": "error", "message": "Invalid message format"}
            ws.send_text("[1, 2]")
            assert ws.receive_json() == {"type": "error", "message": "Invalid message format"}
            ws.send_json({"type": "dance"})
            assert ws.receive_json() == {"type": "error", "message": "Unknown message type: dance"}

    def test_subscribe_requires_project(self, client):
        with client.websocket_connect("/ws") as ws:
            ws.receive_json()
            ws.send_json({"type": "subscribe"})
            assert ws.receive_json()["type"] == "error"

    def test_chat_streams_chunks(self, client):
        with client.websocket_connect("/ws") as ws:
            ws.receive_json()
            ws.send_json({"type": "chat", "message": "hello"})
            received = receive_until(ws, "chat_complete")

        chunks, complete = received[:-1], received[-1]
        assert complete["type"] == "chat_complete"
        assert all(c["type"] == "chat_chunk" for c in chunks)
        assert "".join(c["content"] for c in chunks) == complete["content"]
        assert complete["content"].startswith("Hello! I'm the mock AI assistant.")
        assert complete["usage"]["totalTokens"] > 0

    def test_chat_requires_messages(self, client):
        with client.websocket_connect("/ws") as ws:
            ws.receive_json()
            ws.send_json({"type": "chat"})
            assert ws.receive_json()["type"] == "error"
            ws.send_json({"type": "chat", "messages": [{"role": "nobody", "content": "x"}]})
            assert ws.receive_json() == {"type": "error", "message": "Invalid chat messages"}

    def test_preview(self, client):
        project = client.post("/api/v1/projects", json={"name": "Preview"}).json()
        client.post(f"/api/v1/projects/{project['id']}/files", json={"name": "App.vue", "content": "<template/>"})

        with client.websocket_connect("/ws") as ws:
            ws.receive_json()
            ws.send_json({"type": "preview", "projectId": project["id"]})
            reply = ws.receive_json()
            assert reply["type"] == "preview_response"
            assert reply["projectId"] == project["id"]
            assert [f["name"] for f in reply["files"]] == ["App.vue"]

            ws.send_json({"type": "preview", "projectId": "missing"})
            assert ws.receive_json() == {"type": "error", "message": "Project not found"}

    def test_subscribers_receive_file_changes(self, client):
        project = client.post("/api/v1/projects", json={"name": "Live"}).json()

        with client.websocket_connect("/ws") as ws:
            ws.receive_json()
            ws.send_json({"type": "subscribe", "projectId": project["id"]})
            assert ws.receive_json() == {"type": "subscribed", "projectId": project["id"]}

            created = client.post(
                f"/api/v1/projects/{project['id']}/files", json={"name": "App.vue", "content": "a"}
            ).json()
            notice = ws.receive_json()
            assert notice["type"] == "files_changed"
            assert notice["action"] == "created"
            assert notice["projectId"] == project["id"]
            assert notice["file"]["id"] == created["id"]

            client.delete(f"/api/v1/files/{created['id']}")
            notice = ws.receive_json()
            assert notice["action"] == "deleted"
            assert notice["fileId"] == created["id"]

