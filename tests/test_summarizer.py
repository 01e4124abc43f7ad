from __future__ import annotations

import httpx
import pytest
from openai import APIConnectionError

from headline_digest.errors import TransportError
from headline_digest.models import PromptPayload
from headline_digest.summarizer import Summarizer, SummaryConnectionError, SummaryDecodeError, SummaryError

PAYLOAD = PromptPayload(system_prompt="You are a news bot.", user_prompt="- A\n  - x\n\n\n")


def test_summarize_sends_system_and_user_messages(openai_factory) -> None:
    fake = openai_factory(content="what people are saying")
    s = Summarizer(api_key="dummy", client=fake)
    assert s.summarize(PAYLOAD) == "what people are saying"

    call = fake.calls[0]
    assert call["model"] == "gpt-4o"
    assert call["temperature"] == 1
    assert call["messages"] == [
        {"role": "system", "content": "You are a news bot."},
        {"role": "user", "content": "- A\n  - x\n\n\n"},
    ]


def test_summarize_does_not_retry(openai_factory) -> None:
    fake = openai_factory(error=RuntimeError("503 Service Unavailable"))
    s = Summarizer(api_key="dummy", client=fake)
    with pytest.raises(SummaryError):
        s.summarize(PAYLOAD)
    assert len(fake.calls) == 1


def test_summarize_maps_connection_errors(openai_factory) -> None:
    request = httpx.Request("POST", "https://api.openai.com/v1/chat/completions")
    s = Summarizer(api_key="dummy", client=openai_factory(error=APIConnectionError(request=request)))
    with pytest.raises(SummaryConnectionError) as excinfo:
        s.summarize(PAYLOAD)
    assert isinstance(excinfo.value, TransportError)


def test_summarize_rejects_missing_choices(openai_factory) -> None:
    s = Summarizer(api_key="dummy", client=openai_factory(choices=False))
    with pytest.raises(SummaryDecodeError):
        s.summarize(PAYLOAD)


def test_summarize_rejects_empty_content(openai_factory) -> None:
    s = Summarizer(api_key="dummy", client=openai_factory(content=None))
    with pytest.raises(SummaryDecodeError):
        s.summarize(PAYLOAD)


def test_summarizer_requires_model(openai_factory) -> None:
    with pytest.raises(ValueError):
        Summarizer(api_key="dummy", model=" ", client=openai_factory())
