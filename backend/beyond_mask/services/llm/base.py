"""Abstract completion provider interface. All providers must implement this."""

from abc import ABC, abstractmethod
from dataclasses import dataclass

# Returned instead of failing when the provider answered without any text.
NO_RESPONSE = "No response available"


@dataclass(frozen=True)
class Turn:
    role: str  # "user" | "assistant"
    content: str


class CompletionError(Exception):
    """Base class for provider failures. Fatal to the exchange."""

    status_code = 502
    public_message = "Failed to get response"

    def __init__(self, message: str = "", *, provider_code: int | None = None):
        super().__init__(message or self.public_message)
        self.provider_code = provider_code


class RateLimited(CompletionError):
    status_code = 429
    public_message = "The assistant is receiving too many requests, please try again shortly"


class AuthError(CompletionError):
    status_code = 502
    public_message = "The assistant is not configured correctly"


class Unavailable(CompletionError):
    status_code = 503
    public_message = "The assistant is temporarily unavailable"


class Malformed(CompletionError):
    status_code = 502
    public_message = "The assistant returned an invalid response"


class BaseLLMProvider(ABC):
    @abstractmethod
    async def complete(
        self, system_instruction: str, history: list[Turn], user_content: str
    ) -> str:
        """Generate the assistant reply for ``user_content`` given prior turns.

        Returns the generated text, or ``NO_RESPONSE`` when the provider
        produced no text block. Raises a ``CompletionError`` subclass on
        failure. Implementations must not retry.
        """
        ...

    async def aclose(self) -> None:
        """Release network resources held by the provider. Called on shutdown."""
        return None
