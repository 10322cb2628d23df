"""Google Gemini completion provider."""

import logging

import httpx
from google import genai
from google.genai import errors, types

from beyond_mask.core.config import settings
from beyond_mask.services.llm.base import (
    NO_RESPONSE,
    AuthError,
    BaseLLMProvider,
    CompletionError,
    Malformed,
    RateLimited,
    Turn,
    Unavailable,
)

logger = logging.getLogger(__name__)


def _to_contents(history: list[Turn], user_content: str) -> list[types.Content]:
    contents = []
    for turn in history:
        role = "model" if turn.role == "assistant" else "user"
        contents.append(types.Content(role=role, parts=[types.Part(text=turn.content)]))
    contents.append(types.Content(role="user", parts=[types.Part(text=user_content)]))
    return contents


def _first_text(response: types.GenerateContentResponse) -> str:
    """Return the first non-empty text part of the response, or NO_RESPONSE."""
    for candidate in response.candidates or []:
        if not candidate.content or not candidate.content.parts:
            continue
        for part in candidate.content.parts:
            if part.text:
                return part.text
    return NO_RESPONSE


def _map_api_error(exc: errors.APIError) -> CompletionError:
    code = exc.code or 0
    if code == 429:
        return RateLimited(str(exc), provider_code=code)
    if code in (401, 403):
        return AuthError(str(exc), provider_code=code)
    if code >= 500:
        return Unavailable(str(exc), provider_code=code)
    return Malformed(str(exc), provider_code=code)


class GeminiProvider(BaseLLMProvider):
    def __init__(self, client: genai.Client | None = None):
        self._api_key = settings.gemini_api_key
        self._client = client
        self.model = settings.llm_model
        self.max_output_tokens = settings.llm_max_output_tokens

    @property
    def client(self) -> genai.Client:
        if self._client is None:
            if not self._api_key:
                raise AuthError("Gemini API key not configured")
            self._client = genai.Client(api_key=self._api_key)
        return self._client

    async def aclose(self) -> None:
        if self._client is None:
            return
        client, self._client = self._client, None
        await client.aio.aclose()
        client.close()

    async def complete(
        self, system_instruction: str, history: list[Turn], user_content: str
    ) -> str:
        config = types.GenerateContentConfig(
            system_instruction=system_instruction,
            max_output_tokens=self.max_output_tokens,
        )
        contents = _to_contents(history, user_content)

        logger.info(
            f"LLM call: model={self.model} history_turns={len(history)} "
            f"user_chars={len(user_content)}"
        )

        try:
            response = await self.client.aio.models.generate_content(
                model=self.model,
                contents=contents,
                config=config,
            )
        except errors.APIError as e:
            raise _map_api_error(e) from e
        except httpx.TransportError as e:
            raise Unavailable(f"Transport error talking to Gemini: {e}") from e
        except ValueError as e:
            # Raised by the SDK when the response body cannot be parsed.
            raise Malformed(f"Could not parse Gemini response: {e}") from e

        usage = response.usage_metadata
        if usage:
            logger.debug(
                f"LLM usage: prompt={usage.prompt_token_count} "
                f"response={usage.candidates_token_count} total={usage.total_token_count}"
            )

        text = _first_text(response)
        if text == NO_RESPONSE:
            logger.info("LLM response carried no text part")
        return text
