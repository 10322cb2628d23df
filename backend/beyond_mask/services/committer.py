"""Atomic persistence of one exchange (user turn + assistant turn)."""

import logging
from datetime import datetime

from sqlalchemy.exc import SQLAlchemyError

from beyond_mask.core import database
from beyond_mask.models.conversation import Conversation, Message, Role, utcnow

logger = logging.getLogger(__name__)

TITLE_LENGTH = 80


def commit_exchange(
    conversation_id: str,
    user_content: str,
    assistant_content: str,
    *,
    user_id: str | None = None,
    user_created_at: datetime | None = None,
) -> bool:
    """Append the user turn and the assistant turn in a single transaction.

    Returns True when both rows were committed. On any store failure the
    transaction is rolled back, the failure is logged and False is returned;
    store errors are never raised to the caller.
    """
    now = utcnow()
    try:
        with database.session_scope() as session:
            try:
                conv = session.get(Conversation, conversation_id)
                if conv is None:
                    conv = Conversation(
                        id=conversation_id,
                        user_id=user_id,
                        title=user_content[:TITLE_LENGTH],
                    )
                else:
                    conv.updated_at = now
                session.add(conv)

                session.add(Message(
                    conversation_id=conversation_id,
                    role=Role.USER.value,
                    content=user_content,
                    created_at=user_created_at or now,
                ))
                # Flush so the user turn gets the lower id.
                session.flush()
                session.add(Message(
                    conversation_id=conversation_id,
                    role=Role.ASSISTANT.value,
                    content=assistant_content,
                    created_at=now,
                ))
                session.commit()
            except (SQLAlchemyError, UnicodeError):
                try:
                    session.rollback()
                except SQLAlchemyError:
                    logger.exception(f"Rollback failed for conversation {conversation_id}")
                raise
    except (SQLAlchemyError, UnicodeError):
        # UnicodeError: the driver refuses text it cannot encode (lone surrogates).
        logger.exception(f"Failed to persist exchange for conversation {conversation_id}")
        return False

    logger.debug(f"Persisted exchange for conversation {conversation_id}")
    return True
