# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false

"""
Realtime channel over /ws, driven through the full app lifespan so
HTTP mutations and sockets share one event loop.
"""

import time

import pytest
from fastapi.testclient import TestClient

from devtrack.core.dependencies import get_relay
from main import app


def wait_ready(client):
    for _ in range(100):
        if client.get("/health/ready").status_code == 200:
            return
        time.sleep(0.02)
    raise AssertionError("store never became ready")


def register(client, name, email):
    r = client.post("/api/auth/register", json={"name": name, "email": email, "password": "secret123"})
    assert r.status_code == 201, r.text
    body = r.json()
    return body["user"]["id"], {"Authorization": f"Bearer {body['token']}"}


def join(ws, project_id):
    ws.send_json({"event": "join_project", "data": project_id})
    assert ws.receive_json() == {"event": "joined_project", "data": project_id}


@pytest.fixture
def live():
    with TestClient(app) as client:
        wait_ready(client)
        yield client


@pytest.fixture
def project(live):
    owner_id, headers = register(live, "Alice", "alice@example.com")
    r = live.post("/api/projects", json={"title": "Sprint"}, headers=headers)
    assert r.status_code == 201
    return {"id": r.json()["id"], "owner": owner_id, "headers": headers}


class TestLifecycle:
    def test_ready_after_startup(self, live):
        assert live.get("/health/ready").json() == {"status": "ok", "database": "connected"}

    def test_disconnect_releases_channel(self, live):
        before = get_relay().channel_count
        with live.websocket_connect("/ws") as ws:
            join(ws, "P1")
            assert get_relay().channel_count == before + 1
            assert live.get("/health").json()["realtimeConnections"] == before + 1
        assert get_relay().channel_count == before
        assert get_relay().members_of("P1") == set()


class TestDomainEvents:
    def test_ticket_lifecycle_events(self, live, project):
        pid, headers = project["id"], project["headers"]
        with live.websocket_connect("/ws") as ws:
            join(ws, pid)

            created = live.post("/api/tickets", json={
                "projectId": pid, "title": "Fix login", "description": "500 on submit",
            }, headers=headers).json()
            frame = ws.receive_json()
            assert frame["event"] == "ticket_created"
            assert frame["data"]["ticketId"] == created["id"]
            assert frame["data"]["projectId"] == pid
            assert frame["data"]["actor"] == project["owner"]
            assert frame["data"]["ticket"]["title"] == "Fix login"

            live.put(f"/api/tickets/{created['id']}", json={"status": "Done"}, headers=headers)
            frame = ws.receive_json()
            assert frame["event"] == "ticket_updated"
            assert frame["data"]["ticketId"] == created["id"]
            assert frame["data"]["changes"] == ["status"]
            assert frame["data"]["ticket"]["status"] == "Done"

            comment = live.post(
                f"/api/tickets/{created['id']}/comments", json={"text": "shipped"}, headers=headers,
            ).json()
            frame = ws.receive_json()
            assert frame["event"] == "comment_added"
            assert frame["data"]["comment"]["id"] == comment["id"]

            live.delete(f"/api/tickets/{created['id']}", headers=headers)
            frame = ws.receive_json()
            assert frame == {
                "event": "ticket_deleted",
                "data": {"ticketId": created["id"], "projectId": pid, "actor": project["owner"]},
            }

    def test_failed_mutation_emits_nothing(self, live, project):
        pid, headers = project["id"], project["headers"]
        with live.websocket_connect("/ws") as ws:
            join(ws, pid)
            r = live.post("/api/tickets", json={
                "projectId": pid, "title": "T", "description": "D", "assignee": "ghost",
            }, headers=headers)
            assert r.status_code == 404
            # The next frame is the ack for a fresh join, not a ticket event.
            join(ws, "another-room")


class TestChat:
    def test_send_message_reaches_room(self, live):
        with live.websocket_connect("/ws") as alice, live.websocket_connect("/ws") as bob:
            join(alice, "P1")
            join(bob, "P1")
            message = {"projectId": "P1", "message": "standup in 5", "sender": "Alice"}
            alice.send_json({"event": "send_message", "data": message})
            assert alice.receive_json() == {"event": "receive_message", "data": message}
            assert bob.receive_json() == {"event": "receive_message", "data": message}

    def test_left_channel_misses_messages(self, live):
        with live.websocket_connect("/ws") as alice, live.websocket_connect("/ws") as bob:
            join(alice, "P1")
            join(bob, "P1")
            bob.send_json({"event": "leave_project", "data": "P1"})
            join(bob, "P2")

            alice.send_json({"event": "send_message", "data": {"projectId": "P1", "message": "hi"}})
            assert alice.receive_json()["event"] == "receive_message"
            join(bob, "P3")

    def test_malformed_frames_get_error_and_connection_survives(self, live):
        with live.websocket_connect("/ws") as ws:
            ws.send_text("not json")
            assert ws.receive_json()["event"] == "error"
            ws.send_json({"data": "P1"})
            assert ws.receive_json()["event"] == "error"
            ws.send_json({"event": "join_project"})
            assert ws.receive_json()["event"] == "error"
            ws.send_json({"event": "send_message", "data": {"message": "no room"}})
            assert ws.receive_json()["event"] == "error"
            ws.send_json({"event": "dance"})
            assert ws.receive_json()["event"] == "error"
            join(ws, "P1")
