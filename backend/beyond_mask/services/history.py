"""Conversation assembly: prior turns plus the instruction block for a completion."""

import logging
from dataclasses import dataclass, field

from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session, select

from beyond_mask.core import database
from beyond_mask.models.conversation import Message
from beyond_mask.services.language.base import BaseScriptClassifier, ScriptTag
from beyond_mask.services.llm.base import Turn
from beyond_mask.services.prompts import LANGUAGE_INSTRUCTIONS, SYSTEM_INSTRUCTION

logger = logging.getLogger(__name__)


@dataclass
class AssembledPrompt:
    system_instruction: str
    history: list[Turn] = field(default_factory=list)
    script: ScriptTag | None = None


def fetch_messages(session: Session, conversation_id: str) -> list[Message]:
    """All turns of a conversation, oldest first; insertion id breaks timestamp ties."""
    return list(
        session.exec(
            select(Message)
            .where(Message.conversation_id == conversation_id)
            .order_by(Message.created_at, Message.id)  # type: ignore
        ).all()
    )


def load_history(conversation_id: str) -> list[Turn]:
    """Load prior turns, degrading to an empty history if the store is unreachable."""
    try:
        with database.session_scope() as session:
            messages = fetch_messages(session, conversation_id)
    except (SQLAlchemyError, UnicodeError):
        logger.exception(f"History read failed for conversation {conversation_id}, continuing without context")
        return []

    logger.debug(f"Loaded {len(messages)} turns for conversation {conversation_id}")
    return [Turn(role=m.role, content=m.content) for m in messages]


def build_system_instruction(script: ScriptTag | None) -> str:
    if script is None:
        return SYSTEM_INSTRUCTION
    return f"{SYSTEM_INSTRUCTION}\n\n{LANGUAGE_INSTRUCTIONS[script]}"


def assemble(
    conversation_id: str, user_content: str, classifier: BaseScriptClassifier
) -> AssembledPrompt:
    script = classifier.classify(user_content)
    return AssembledPrompt(
        system_instruction=build_system_instruction(script),
        history=load_history(conversation_id),
        script=script,
    )
