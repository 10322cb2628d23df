"""Tests for the conversation history endpoints."""

from datetime import datetime, timedelta, timezone

from sqlmodel import Session

from tests.conftest import test_engine
from beyond_mask.models.conversation import Message

T0 = datetime(2025, 3, 1, 12, 0, tzinfo=timezone.utc)


def _seed_messages(conversation_id, messages):
    """Insert (role, content, offset_seconds) turns directly into the test DB."""
    with Session(test_engine) as session:
        for role, content, offset in messages:
            session.add(Message(
                conversation_id=conversation_id,
                role=role,
                content=content,
                created_at=T0 + timedelta(seconds=offset),
            ))
            session.commit()


def test_history_unknown_conversation_is_empty(client):
    response = client.post("/api/conversation/history", json={"conversationId": "nobody"})
    assert response.status_code == 200
    assert response.json() == {"messages": [], "conversationId": "nobody", "count": 0}


def test_history_missing_conversation_id(client):
    response = client.post("/api/conversation/history", json={"userId": "u1"})
    assert response.status_code == 400
    assert response.json() == {"error": "Missing conversation ID"}


def test_history_ordered_by_timestamp_not_insertion(client):
    _seed_messages("c1", [
        ("assistant", "third", 20),
        ("user", "first", 0),
        ("user", "fourth", 30),
        ("assistant", "second", 10),
    ])
    _seed_messages("other", [("user", "elsewhere", 5)])

    response = client.post("/api/conversation/history", json={"conversationId": "c1", "userId": "u1"})
    assert response.status_code == 200
    data = response.json()
    assert data["count"] == 4
    assert [m["content"] for m in data["messages"]] == ["first", "second", "third", "fourth"]
    assert data["messages"][0]["role"] == "user"
    assert set(data["messages"][0]) == {"id", "role", "content", "timestamp"}


def test_history_ties_broken_by_insertion_id(client):
    _seed_messages("c2", [("user", "a", 0), ("assistant", "b", 0), ("user", "c", 0)])

    data = client.post("/api/conversation/history", json={"conversationId": "c2"}).json()
    assert [m["content"] for m in data["messages"]] == ["a", "b", "c"]


def test_chat_then_history_round_trip(client):
    client.post("/api/chat", json={"message": "hello", "conversationId": "c3"})

    data = client.post("/api/conversation/history", json={"conversationId": "c3"}).json()
    assert [(m["role"], m["content"]) for m in data["messages"]] == [
        ("user", "hello"),
        ("assistant", "Hi there"),
    ]


def test_export_conversation(client):
    _seed_messages("c4", [("user", "hello", 0), ("assistant", "hi there", 1)])

    response = client.get("/api/conversation/c4/export")
    assert response.status_code == 200
    assert response.headers["content-disposition"].startswith('attachment; filename="chat-')
    data = response.json()
    assert data["conversationId"] == "c4"
    assert data["messages"] == [
        {"role": "user", "content": "hello"},
        {"role": "assistant", "content": "hi there"},
    ]
    assert "timestamp" in data


def test_history_timestamps_are_utc(client):
    _seed_messages("c5", [("user", "hello", 0)])

    data = client.post("/api/conversation/history", json={"conversationId": "c5"}).json()
    timestamp = datetime.fromisoformat(data["messages"][0]["timestamp"])
    assert timestamp == T0
    assert timestamp.utcoffset() == timedelta(0)


def test_history_lone_surrogate_rejected(client):
    response = client.post(
        "/api/conversation/history",
        content=b'{"conversationId": "c\\ud800"}',
        headers={"Content-Type": "application/json"},
    )
    assert response.status_code == 400
    assert "error" in response.json()
