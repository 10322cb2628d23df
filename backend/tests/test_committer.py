"""Tests for atomic exchange persistence."""

from datetime import datetime, timezone
from unittest.mock import patch

import pytest
from sqlalchemy.exc import IntegrityError, OperationalError
from sqlmodel import Session, select

from tests.conftest import test_engine
from beyond_mask.models.conversation import Conversation, Message
from beyond_mask.services.committer import commit_exchange


def _messages(conversation_id):
    with Session(test_engine) as session:
        return session.exec(
            select(Message).where(Message.conversation_id == conversation_id).order_by(Message.id)
        ).all()


def test_commit_appends_user_then_assistant():
    received = datetime(2025, 1, 1, tzinfo=timezone.utc)
    assert commit_exchange("c1", "hello", "Hi there", user_created_at=received) is True

    rows = _messages("c1")
    assert [(r.role, r.content) for r in rows] == [("user", "hello"), ("assistant", "Hi there")]
    assert rows[0].id < rows[1].id
    assert rows[0].created_at <= rows[1].created_at


def test_existing_conversation_is_touched_not_duplicated():
    commit_exchange("c1", "first message", "reply", user_id="u1")
    with Session(test_engine) as session:
        before = session.get(Conversation, "c1").updated_at

    commit_exchange("c1", "second message", "reply")

    with Session(test_engine) as session:
        conv = session.get(Conversation, "c1")
        assert conv.title == "first message"
        assert conv.user_id == "u1"
        assert conv.updated_at >= before
        assert len(session.exec(select(Conversation)).all()) == 1


def test_title_is_truncated():
    commit_exchange("c1", "x" * 200, "reply")
    with Session(test_engine) as session:
        assert len(session.get(Conversation, "c1").title) == 80


def test_failed_assistant_insert_rolls_back_user_turn():
    # NULL content violates NOT NULL on the assistant row only
    assert commit_exchange("c1", "hello", None) is False

    assert _messages("c1") == []
    with Session(test_engine) as session:
        assert session.get(Conversation, "c1") is None


def test_rollback_failure_is_swallowed():
    def broken_rollback(self):
        raise OperationalError("ROLLBACK", {}, Exception("connection lost"))

    with patch("sqlmodel.Session.rollback", broken_rollback):
        assert commit_exchange("c1", "hello", None) is False


def test_invalid_role_rejected_by_store():
    with Session(test_engine) as session:
        session.add(Message(conversation_id="c1", role="system", content="nope"))
        with pytest.raises(IntegrityError):
            session.commit()


def test_unencodable_text_is_not_fatal():
    assert commit_exchange("c1", "hi \ud800", "reply") is False
    assert _messages("c1") == []
