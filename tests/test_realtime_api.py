"""
End-to-end tests through the FastAPI app: WebSocket handshake and frames,
fanout endpoints, triage endpoints and health.
"""

import pytest
from fastapi import WebSocketDisconnect

from tests.conftest import RecordingTransport, wait_until


def connect(client, token):
    return client.websocket_connect(f"/ws?token={token}")


class TestHandshake:

    @pytest.mark.parametrize("url", ["/ws", "/ws?token=", "/ws?token=stolen"])
    def test_bad_token_is_rejected(self, client, app, url):
        with pytest.raises(WebSocketDisconnect) as exc:
            with client.websocket_connect(url):
                pass

        assert exc.value.code == 1008
        assert app.state.room_registry.session_count() == 0

    def test_connected_frame_lists_default_rooms(self, client):
        with connect(client, "admin-token") as ws:
            frame = ws.receive_json()

        assert frame["event"] == "connected"
        assert frame["data"]["sessionId"]
        assert frame["data"]["rooms"] == ["admin", "admins", "user-admin-1"]

    def test_disconnect_leaves_all_rooms(self, client, app):
        registry = app.state.room_registry

        with connect(client, "mod-token") as ws:
            session_id = ws.receive_json()["data"]["sessionId"]
            ws.send_json({"event": "join-request", "data": "r1"})
            ws.receive_json()
            assert session_id in registry.members_of("admins")

        assert wait_until(lambda: registry.session_count() == 0)
        assert registry.members_of("admins") == set()
        assert registry.members_of("request-r1") == set()


class TestFrames:

    def test_join_request_then_status_update(self, client):
        with connect(client, "alice-token") as ws:
            ws.receive_json()
            ws.send_json({"event": "join-request", "data": {"requestId": "r1"}})
            assert ws.receive_json() == {"event": "joined", "data": {"room": "request-r1"}}

            response = client.post("/notifications/requests/r1/status", json={"status": "IN_PROGRESS"})
            assert response.status_code == 200
            assert response.json() == {"delivered": 1}

            frame = ws.receive_json()
            assert frame["event"] == "request-status-updated"
            assert frame["data"]["requestId"] == "r1"
            assert frame["data"]["status"] == "IN_PROGRESS"

    def test_private_message_is_stored_and_delivered(self, client, message_store):
        with connect(client, "bob-token") as bob, connect(client, "alice-token") as alice:
            bob.receive_json()
            alice.receive_json()

            alice.send_json({"event": "private-message", "data": {"to": "bob", "message": "Hi Bob"}})
            frame = bob.receive_json()

        assert frame["event"] == "private-message"
        assert frame["data"]["from"] == "alice"
        assert frame["data"]["message"] == "Hi Bob"
        assert frame["data"]["type"] == "text"
        assert frame["data"]["timestamp"]

        stored = message_store.messages[0]
        assert (stored.sender_id, stored.receiver_id, stored.content) == ("alice", "bob", "Hi Bob")

    def test_typing_is_not_echoed_to_sender(self, client):
        with connect(client, "alice-token") as alice, connect(client, "bob-token") as bob:
            alice.receive_json()
            bob.receive_json()
            for ws in (alice, bob):
                ws.send_json({"event": "join-chat", "data": "c1"})
                assert ws.receive_json()["event"] == "joined"

            alice.send_json({"event": "typing", "data": {"chatId": "c1", "isTyping": True}})
            assert bob.receive_json() == {"event": "user-typing", "data": {"userId": "alice", "isTyping": True}}

            # Had alice received her own typing event, it would arrive before this ack
            alice.send_json({"event": "join-request", "data": "r2"})
            assert alice.receive_json() == {"event": "joined", "data": {"room": "request-r2"}}

    def test_invalid_frames_get_an_error_and_keep_the_socket_open(self, client):
        with connect(client, "alice-token") as ws:
            ws.receive_json()

            ws.send_text("not json")
            assert ws.receive_json() == {"event": "error", "data": {"message": "Invalid frame"}}

            ws.send_json({"event": "join-request", "data": {}})
            assert ws.receive_json() == {"event": "error", "data": {"message": "Invalid join-request payload"}}

            ws.send_json({"event": "private-message", "data": {"to": "bob"}})
            assert ws.receive_json() == {"event": "error", "data": {"message": "Invalid private-message payload"}}

            # Unknown events are ignored
            ws.send_json({"event": "dance", "data": 1})
            ws.send_json({"event": "join-chat", "data": "c9"})
            assert ws.receive_json() == {"event": "joined", "data": {"room": "chat-c9"}}


class TestNotificationEndpoints:

    def test_notify_user(self, client, app):
        transport = RecordingTransport()
        app.state.room_registry.register("s1", "u1", "RESIDENT", transport)

        response = client.post("/notifications/users/u1", json={"title": "Approved", "message": "See you at 9"})

        assert response.json() == {"delivered": 1}
        event = transport.messages[0]
        assert event["event"] == "notification"
        assert event["data"]["title"] == "Approved"
        assert event["data"]["type"] == "GENERAL"

    def test_offline_user_is_not_an_error(self, client):
        response = client.post("/notifications/users/nobody", json={"title": "t", "message": "m"})
        assert response.status_code == 200
        assert response.json() == {"delivered": 0}

    def test_admin_broadcast_skips_residents(self, client, app):
        admin, resident = RecordingTransport(), RecordingTransport()
        app.state.room_registry.register("a", "admin-1", "ADMIN", admin)
        app.state.room_registry.register("r", "u1", "RESIDENT", resident)

        response = client.post("/notifications/admins", json={"event": "donation-received", "payload": {"amount": 50}})

        assert response.json() == {"delivered": 1}
        assert admin.messages == [{"event": "donation-received", "data": {"amount": 50}}]
        assert resident.messages == []

    def test_status_with_details_changed_emits_both_events(self, client, app):
        watcher = RecordingTransport()
        registry = app.state.room_registry
        registry.register("s1", "u1", "VOLUNTEER", watcher)
        registry.join_request("s1", "r5")

        client.post("/notifications/requests/r5/status", json={"status": "RESOLVED", "details_changed": True})

        assert [m["event"] for m in watcher.messages] == ["request-status-updated", "request-updated"]

    def test_request_created(self, client, app):
        moderator = RecordingTransport()
        app.state.room_registry.register("m", "mod-1", "MODERATOR", moderator)

        response = client.post("/notifications/requests/r7/created", json={
            "title": "Need insulin",
            "category": "MEDICAL",
            "priority": "URGENT",
            "created_at": "2026-10-18T08:30:00+00:00",
        })

        assert response.json() == {"delivered": 1}
        data = moderator.messages[0]["data"]
        assert moderator.messages[0]["event"] == "new-request"
        assert data["requestId"] == "r7"
        assert data["priority"] == "URGENT"
        assert data["createdAt"] == "2026-10-18T08:30:00+00:00"


class TestRoomViews:

    def test_room_members(self, client, app):
        app.state.room_registry.register("s1", "u1", "ADMIN")

        response = client.get("/realtime/rooms/admins")

        assert response.json() == {"room": "admins", "member_count": 1, "session_ids": ["s1"]}

    def test_session_view(self, client, app):
        app.state.room_registry.register("s1", "u1", "RESIDENT")

        body = client.get("/realtime/sessions/s1").json()

        assert body["user_id"] == "u1"
        assert body["rooms"] == ["resident", "user-u1"]

    def test_unknown_session_is_404(self, client):
        assert client.get("/realtime/sessions/missing").status_code == 404


class TestTriageEndpoints:

    def test_prioritize_falls_back(self, client):
        response = client.post("/triage/prioritize", json={
            "title": "Medical emergency",
            "description": "grandfather collapsed, not breathing",
            "category": "MEDICAL",
        })

        assert response.status_code == 200
        body = response.json()
        assert body["priority"] == "URGENT"
        assert body["score"] <= 0.99
        assert body["suggested_category"] == "MEDICAL"

    def test_predict_resources_falls_back(self, client):
        response = client.post("/triage/predict-resources", json={"disaster_type": "FLOOD", "affected_population": 100})

        body = response.json()
        assert response.status_code == 200
        assert body["quantities"]["water"] == 500
        assert body["note"]

    def test_chat_falls_back(self, client):
        response = client.post("/triage/chat", json={"message": "Salamat po!"})

        assert response.status_code == 200
        assert response.json()["confidence"] == 0.95

    def test_validation_error(self, client):
        response = client.post("/triage/predict-resources", json={"disaster_type": "FLOOD", "affected_population": -5})
        assert response.status_code == 422


class TestHealth:

    def test_health(self, client):
        body = client.get("/health").json()
        assert body["status"] == "healthy"
        assert body["live_sessions"] == 0

    def test_classifier_outcomes(self, client):
        client.post("/triage/chat", json={"message": "hello"})

        body = client.get("/health/classifier").json()

        assert body["enabled"] is True
        assert body["outcomes"] == {"chat": {"external": 0, "fallback": 1}}
