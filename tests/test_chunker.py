from __future__ import annotations

import pytest

from headline_digest.chunker import iter_chunks, split_text


@pytest.mark.parametrize(
    ("text", "max_len"),
    [
        ("", 2000),
        ("short", 2000),
        ("a" * 2000, 2000),
        ("a" * 2001, 2000),
        ("The quick brown fox jumps over the lazy dog", 5),
        ("日本語のテキストも同じように分割される", 4),
    ],
)
def test_split_text_round_trips_and_respects_limit(text: str, max_len: int) -> None:
    chunks = split_text(text, max_len)
    assert "".join(chunks) == text
    assert all(0 < len(chunk) <= max_len for chunk in chunks)


def test_split_text_empty_input_yields_no_chunks() -> None:
    assert split_text("", 10) == []


def test_split_text_splits_mid_word() -> None:
    assert split_text("abcdefgh", 3) == ["abc", "def", "gh"]


def test_split_text_uses_discord_limit_by_default() -> None:
    chunks = split_text("x" * 4500)
    assert [len(c) for c in chunks] == [2000, 2000, 500]


def test_iter_chunks_is_restartable() -> None:
    text = "lorem ipsum dolor sit amet"
    assert list(iter_chunks(text, 7)) == list(iter_chunks(text, 7))


def test_split_text_rejects_non_positive_limit() -> None:
    with pytest.raises(ValueError):
        split_text("abc", 0)
