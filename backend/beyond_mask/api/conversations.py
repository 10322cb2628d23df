"""REST API for reading conversation history."""

import logging
from datetime import datetime, timezone

from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field, field_validator
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session

from beyond_mask.api.validators import ensure_utf8
from beyond_mask.core.database import get_session
from beyond_mask.models.conversation import as_utc
from beyond_mask.services.history import fetch_messages

router = APIRouter()
logger = logging.getLogger(__name__)


class HistoryRequest(BaseModel):
    conversation_id: str = Field(default="", alias="conversationId")
    user_id: str | None = Field(default=None, alias="userId")

    @field_validator("conversation_id", "user_id")
    @classmethod
    def check_utf8(cls, value):
        return ensure_utf8(value)


@router.post("/history")
async def conversation_history(body: HistoryRequest, session: Session = Depends(get_session)):
    if not body.conversation_id.strip():
        raise HTTPException(status_code=400, detail="Missing conversation ID")

    # userId is informational only; conversation ids are trusted caller input.
    logger.debug(f"History requested for conversation {body.conversation_id} by user {body.user_id}")

    try:
        messages = fetch_messages(session, body.conversation_id)
    except SQLAlchemyError:
        logger.exception(f"Error fetching history for conversation {body.conversation_id}")
        raise HTTPException(status_code=500, detail="Failed to fetch conversation history")

    return {
        "messages": [
            {
                "id": m.id,
                "role": m.role,
                "content": m.content,
                "timestamp": as_utc(m.created_at).isoformat(),
            }
            for m in messages
        ],
        "conversationId": body.conversation_id,
        "count": len(messages),
    }


@router.get("/{conversation_id}/export")
async def export_conversation(conversation_id: str, session: Session = Depends(get_session)):
    """Download a conversation as a JSON file."""
    try:
        messages = fetch_messages(session, conversation_id)
    except SQLAlchemyError:
        logger.exception(f"Error exporting conversation {conversation_id}")
        raise HTTPException(status_code=500, detail="Failed to export conversation")

    now = datetime.now(timezone.utc)
    return JSONResponse(
        content={
            "timestamp": now.isoformat(),
            "conversationId": conversation_id,
            "messages": [{"role": m.role, "content": m.content} for m in messages],
        },
        headers={"Content-Disposition": f'attachment; filename="chat-{now.strftime("%Y-%m-%d")}.json"'},
    )
