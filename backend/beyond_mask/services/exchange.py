"""One chat exchange: load history, call the provider, persist the result.

Provider failures are fatal to the exchange. Store failures never are: a
failed history read continues with an empty history and a failed commit still
returns the generated reply.
"""

import asyncio
import logging
import weakref
from dataclasses import dataclass
from enum import Enum

from tenacity import AsyncRetrying, retry_if_exception_type, stop_after_attempt, wait_exponential

from beyond_mask.core.config import settings
from beyond_mask.models.conversation import utcnow
from beyond_mask.services.committer import commit_exchange
from beyond_mask.services.history import AssembledPrompt, assemble
from beyond_mask.services.language.base import BaseScriptClassifier
from beyond_mask.services.llm.base import BaseLLMProvider, CompletionError, RateLimited, Unavailable

logger = logging.getLogger(__name__)


class ExchangeState(str, Enum):
    START = "start"
    HISTORY_LOADED = "history_loaded"
    COMPLETION_REQUESTED = "completion_requested"
    COMPLETION_RECEIVED = "completion_received"
    PERSIST_ATTEMPTED = "persist_attempted"
    DONE = "done"
    FAILED = "failed"


@dataclass
class ExchangeResult:
    message: str
    conversation_id: str
    language: str | None
    persisted: bool
    state: ExchangeState = ExchangeState.DONE


class ConversationLocks:
    """Per-conversation asyncio locks so exchanges on one id run one at a time.

    Locks are held weakly: once no exchange references a lock it is dropped.
    Only serializes within a single worker process.
    """

    def __init__(self) -> None:
        self._locks: weakref.WeakValueDictionary[str, asyncio.Lock] = weakref.WeakValueDictionary()

    def get(self, conversation_id: str) -> asyncio.Lock:
        lock = self._locks.get(conversation_id)
        if lock is None:
            lock = asyncio.Lock()
            self._locks[conversation_id] = lock
        return lock

    def __len__(self) -> int:
        return len(self._locks)


conversation_locks = ConversationLocks()


class ChatExchange:
    def __init__(
        self,
        provider: BaseLLMProvider,
        classifier: BaseScriptClassifier,
        locks: ConversationLocks | None = None,
    ):
        self.provider = provider
        self.classifier = classifier
        self.locks = locks or conversation_locks
        self.state = ExchangeState.START

    def _retrying(self) -> AsyncRetrying:
        return AsyncRetrying(
            stop=stop_after_attempt(settings.completion_max_attempts),
            wait=wait_exponential(
                multiplier=1,
                min=settings.completion_retry_min_wait,
                max=settings.completion_retry_max_wait,
            ),
            retry=retry_if_exception_type((RateLimited, Unavailable)),
            reraise=True,
        )

    async def _complete(self, prompt: AssembledPrompt, user_content: str) -> str:
        # Nothing is written before the reply arrives, so retrying is safe.
        async for attempt in self._retrying():
            with attempt:
                n = attempt.retry_state.attempt_number
                if n > 1:
                    logger.warning(f"Retrying completion (attempt {n}/{settings.completion_max_attempts})")
                return await self.provider.complete(
                    prompt.system_instruction, prompt.history, user_content
                )
        raise RuntimeError("completion retry loop exited without a result")

    def _check_reply_script(self, prompt: AssembledPrompt, reply: str) -> None:
        if prompt.script is None:
            return
        reply_script = self.classifier.classify(reply)
        if reply_script is not None and reply_script != prompt.script:
            logger.warning(
                f"Reply script mismatch: requested {prompt.script.value}, got {reply_script.value}"
            )

    async def run(
        self, conversation_id: str, user_content: str, user_id: str | None = None
    ) -> ExchangeResult:
        async with self.locks.get(conversation_id):
            # Taken under the lock so serialized exchanges never interleave by timestamp.
            received_at = utcnow()
            prompt = assemble(conversation_id, user_content, self.classifier)
            self.state = ExchangeState.HISTORY_LOADED

            self.state = ExchangeState.COMPLETION_REQUESTED
            try:
                reply = await self._complete(prompt, user_content)
            except CompletionError as e:
                self.state = ExchangeState.FAILED
                logger.error(f"Completion failed for conversation {conversation_id}: {type(e).__name__}: {e}")
                raise
            self.state = ExchangeState.COMPLETION_RECEIVED

            self._check_reply_script(prompt, reply)

            persisted = commit_exchange(
                conversation_id,
                user_content,
                reply,
                user_id=user_id,
                user_created_at=received_at,
            )
            self.state = ExchangeState.PERSIST_ATTEMPTED

        self.state = ExchangeState.DONE
        return ExchangeResult(
            message=reply,
            conversation_id=conversation_id,
            language=prompt.script.language if prompt.script else None,
            persisted=persisted,
            state=self.state,
        )
