"""Chat endpoint: one request is one exchange."""

import logging

from fastapi import APIRouter, Depends, HTTPException, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field, field_validator

from beyond_mask.api.validators import ensure_utf8
from beyond_mask.services.exchange import ChatExchange
from beyond_mask.services.language import get_script_classifier
from beyond_mask.services.llm.base import BaseLLMProvider, CompletionError

router = APIRouter()
logger = logging.getLogger(__name__)


class ChatRequest(BaseModel):
    message: str = ""
    conversation_id: str = Field(default="", alias="conversationId")
    user_id: str | None = Field(default=None, alias="userId")

    @field_validator("message", "conversation_id", "user_id")
    @classmethod
    def check_utf8(cls, value):
        return ensure_utf8(value)


def get_provider(request: Request) -> BaseLLMProvider:
    """The process-wide provider created in the app lifespan."""
    return request.app.state.llm_provider


@router.post("")
async def chat(body: ChatRequest, provider: BaseLLMProvider = Depends(get_provider)):
    if not body.conversation_id.strip():
        raise HTTPException(status_code=400, detail="Missing conversation ID")
    if not body.message.strip():
        raise HTTPException(status_code=400, detail="Message must not be empty")

    exchange = ChatExchange(provider, get_script_classifier())
    try:
        result = await exchange.run(body.conversation_id, body.message, user_id=body.user_id)
    except CompletionError as e:
        return JSONResponse(status_code=e.status_code, content={"error": e.public_message})

    if not result.persisted:
        logger.warning(f"Returning reply for conversation {result.conversation_id} without persisting it")

    response = {"message": result.message, "conversationId": result.conversation_id}
    if result.language:
        response["language"] = result.language
    return response
