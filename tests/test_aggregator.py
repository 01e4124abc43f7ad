from __future__ import annotations

from headline_digest.aggregator import build_prompt, group_by_source, render_headlines
from headline_digest.models import Headline


def test_group_by_source_keeps_first_seen_order() -> None:
    items = [Headline("x", "B"), Headline("y", "A"), Headline("z", "B")]
    groups = group_by_source(items)
    assert list(groups) == ["B", "A"]
    assert [h.title for h in groups["B"]] == ["x", "z"]
    assert [h.title for h in groups["A"]] == ["y"]


def test_render_headlines_format() -> None:
    items = [Headline("x", "A"), Headline("y", "B"), Headline("z", "A")]
    rendered = render_headlines(group_by_source(items))
    assert rendered == "- A\n  - x\n  - z\n- B\n  - y\n\n\n"


def test_build_prompt_keeps_duplicate_titles() -> None:
    items = [Headline("same", "A"), Headline("same", "A"), Headline("same", "B")]
    payload = build_prompt(items, system_prompt="  be brief  ")
    assert payload.system_prompt == "be brief"
    assert payload.user_prompt.count("  - same\n") == 3


def test_build_prompt_with_no_items() -> None:
    payload = build_prompt([], system_prompt="sys")
    assert payload.user_prompt == "\n\n"
