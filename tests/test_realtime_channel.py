"""
Tests for RealtimeChannel frame handling, driven without a socket.
"""

import asyncio

import pytest

from triage_hub.models.realtime import PrivateMessageIn, TypingIn
from triage_hub.services.realtime import RealtimeChannel

from tests.conftest import RecordingTransport


@pytest.fixture
def channel(registry, dispatcher, message_store):
    return RealtimeChannel(registry, dispatcher, message_store)


def connect(registry, session_id, user_id, role="RESIDENT"):
    transport = RecordingTransport()
    return registry.register(session_id, user_id, role, transport), transport


def events(transport):
    return [message["event"] for message in transport.messages]


def test_typing_with_numeric_chat_id(registry, channel):
    first, first_frames = connect(registry, "s1", "u1")
    second, second_frames = connect(registry, "s2", "u2")

    async def scenario():
        await channel.handle(first, {"event": "join-chat", "data": 5})
        await channel.handle(second, {"event": "join-chat", "data": {"chatId": 5}})
        await channel.handle(first, {"event": "typing", "data": {"chatId": 5, "isTyping": True}})

    asyncio.run(scenario())

    assert events(first_frames) == ["joined"]
    assert second_frames.messages[-1] == {"event": "user-typing", "data": {"userId": "u1", "isTyping": True}}


def test_private_message_to_numeric_user_id(registry, channel, message_store):
    sender, sender_frames = connect(registry, "s1", "u1")
    _, receiver_frames = connect(registry, "s2", 7)

    asyncio.run(channel.handle(sender, {"event": "private-message", "data": {"to": 7, "message": "On my way"}}))

    assert sender_frames.messages == []
    assert receiver_frames.messages[0]["event"] == "private-message"
    assert receiver_frames.messages[0]["data"]["from"] == "u1"
    assert message_store.messages[0].receiver_id == "7"


def test_store_failure_is_reported_to_sender(registry, channel, message_store, monkeypatch):
    sender, sender_frames = connect(registry, "s1", "u1")
    _, receiver_frames = connect(registry, "s2", "u2")

    def broken_save(*args, **kwargs):
        raise RuntimeError("firestore unavailable")

    monkeypatch.setattr(message_store, "save_message", broken_save)

    asyncio.run(channel.handle(sender, {"event": "private-message", "data": {"to": "u2", "message": "hi"}}))

    assert sender_frames.messages == [{"event": "error", "data": {"message": "Failed to send message"}}]
    assert receiver_frames.messages == []


@pytest.mark.parametrize("value", [True, 1.5, None, [], ""])
def test_id_fields_reject_non_ids(value):
    with pytest.raises(ValueError):
        TypingIn.model_validate({"chatId": value, "isTyping": True})
    with pytest.raises(ValueError):
        PrivateMessageIn.model_validate({"to": value, "message": "hi"})


def test_id_fields_are_normalized():
    assert TypingIn.model_validate({"chatId": 12, "isTyping": False}).chatId == "12"
    assert PrivateMessageIn.model_validate({"to": " bob ", "message": "hi"}).to == "bob"
