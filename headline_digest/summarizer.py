from __future__ import annotations

import logging
from typing import Any, Optional

from openai import APIConnectionError, APITimeoutError, OpenAI, RateLimitError

from .config import DEFAULT_OPENAI_MODEL
from .errors import DecodeError, DigestError, TransportError
from .models import PromptPayload

logger = logging.getLogger(__name__)


class SummaryError(DigestError):
    """Raised when summarization fails."""


class SummaryConnectionError(SummaryError, TransportError):
    """Raised when summarization fails due to upstream connection issues."""


class SummaryRateLimitError(SummaryError, TransportError):
    """Raised when summarization fails due to rate limits."""


class SummaryDecodeError(SummaryError, DecodeError):
    """Raised when the completion has no message content."""


class Summarizer:
    def __init__(
        self,
        api_key: str,
        model: str = DEFAULT_OPENAI_MODEL,
        client: Optional[Any] = None,
        temperature: float = 1,
    ):
        if not model or not model.strip():
            raise ValueError("OpenAI model must be provided.")
        self._client = client or OpenAI(api_key=api_key)
        self._model = model.strip()
        self._temperature = temperature

    @property
    def model(self) -> str:
        return self._model

    def close(self) -> None:
        close = getattr(self._client, "close", None)
        if callable(close):
            close()

    def summarize(self, payload: PromptPayload) -> str:
        logger.info("Summarization request: model=%s chars=%s", self._model, len(payload.user_prompt))
        try:
            response = self._client.chat.completions.create(
                model=self._model,
                messages=[
                    {"role": "system", "content": payload.system_prompt},
                    {"role": "user", "content": payload.user_prompt},
                ],
                temperature=self._temperature,
            )
        except RateLimitError as exc:
            raise SummaryRateLimitError(f"OpenAI rate limit: {exc}") from exc
        except (APIConnectionError, APITimeoutError) as exc:
            raise SummaryConnectionError(f"OpenAI connection failed: {exc}") from exc
        except Exception as exc:  # noqa: BLE001
            raise SummaryError(f"OpenAI API call failed (status={_extract_status_code(exc)}): {exc}") from exc

        choices = getattr(response, "choices", None)
        if not choices:
            raise SummaryDecodeError("OpenAI response has no choices.")
        message = getattr(choices[0], "message", None)
        content: Optional[str] = getattr(message, "content", None)
        if not isinstance(content, str) or not content:
            raise SummaryDecodeError("OpenAI returned empty content.")
        logger.info("Summary generated (%s chars)", len(content))
        return content


def _extract_status_code(exc: Exception) -> Optional[int]:
    status_code = getattr(exc, "status_code", None)
    if isinstance(status_code, int):
        return status_code
    response = getattr(exc, "response", None)
    if response is not None:
        code = getattr(response, "status_code", None)
        if isinstance(code, int):
            return code
    return None
