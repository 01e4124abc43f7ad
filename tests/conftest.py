from __future__ import annotations

from typing import Any, List

import pytest


class FakeOpenAI:
    def __init__(self, content: Any = "dummy", choices: bool = True, error: Exception | None = None):
        self.calls: List[dict] = []
        self._content = content
        self._choices = choices
        self._error = error
        self.chat = self.Chat(self)

    class Chat:
        def __init__(self, outer: "FakeOpenAI"):
            self.completions = outer.Completions(outer)

    class Completions:
        def __init__(self, outer: "FakeOpenAI"):
            self._outer = outer

        def create(self, **kwargs):
            outer = self._outer
            outer.calls.append(kwargs)
            if outer._error is not None:
                raise outer._error

            class Choice:
                def __init__(self):
                    self.message = type("msg", (), {"content": outer._content})

            class Response:
                def __init__(self):
                    self.choices = [Choice()] if outer._choices else []

            return Response()


@pytest.fixture
def openai_factory():
    return FakeOpenAI
