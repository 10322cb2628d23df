"""Conversation and message models for chat history persistence."""

from datetime import datetime, timezone
from enum import Enum
from typing import Optional

from sqlalchemy import CheckConstraint
from sqlmodel import Field, SQLModel


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def as_utc(value: datetime) -> datetime:
    """SQLite hands datetimes back naive; every stored timestamp is UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


class Role(str, Enum):
    USER = "user"
    ASSISTANT = "assistant"


class Conversation(SQLModel, table=True):
    # Caller-generated opaque id; the row is created with the first exchange.
    id: str = Field(primary_key=True)
    user_id: Optional[str] = Field(default=None, index=True)  # convention only, no FK
    title: str = Field(default="New Chat")
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)


class Message(SQLModel, table=True):
    __table_args__ = (
        CheckConstraint("role IN ('user', 'assistant')", name="ck_message_role"),
    )

    id: Optional[int] = Field(default=None, primary_key=True)
    # Not a foreign key: history may be read for ids that have no conversation row.
    conversation_id: str = Field(index=True)
    role: str  # "user" | "assistant"
    content: str
    created_at: datetime = Field(default_factory=utcnow)
