from __future__ import annotations

from typing import Iterator, List

from .config import DISCORD_MESSAGE_LIMIT


def iter_chunks(text: str, max_len: int = DISCORD_MESSAGE_LIMIT) -> Iterator[str]:
    """Yield consecutive slices of at most ``max_len`` characters.

    Splits may fall mid-word; joining the slices gives back ``text``.
    """
    if max_len <= 0:
        raise ValueError("max_len must be positive")
    for start in range(0, len(text), max_len):
        yield text[start : start + max_len]


def split_text(text: str, max_len: int = DISCORD_MESSAGE_LIMIT) -> List[str]:
    return list(iter_chunks(text, max_len))
