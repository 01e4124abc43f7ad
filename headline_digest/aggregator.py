from __future__ import annotations

import logging
from typing import Dict, Iterable, List

from .config import DEFAULT_SYSTEM_PROMPT
from .models import Headline, PromptPayload

logger = logging.getLogger(__name__)


def group_by_source(items: Iterable[Headline]) -> Dict[str, List[Headline]]:
    """Group headlines by source, keeping the order in which sources first appear."""
    groups: Dict[str, List[Headline]] = {}
    for item in items:
        groups.setdefault(item.source, []).append(item)
    return groups


def render_headlines(groups: Dict[str, List[Headline]]) -> str:
    lines: List[str] = []
    for source, headlines in groups.items():
        lines.append(f"- {source}\n")
        for headline in headlines:
            lines.append(f"  - {headline.title}\n")
    lines.append("\n\n")
    return "".join(lines)


def build_prompt(items: Iterable[Headline], system_prompt: str = DEFAULT_SYSTEM_PROMPT) -> PromptPayload:
    groups = group_by_source(items)
    user_prompt = render_headlines(groups)
    logger.info("Prompt built: sources=%s size=%s", len(groups), len(user_prompt))
    return PromptPayload(system_prompt=system_prompt.strip(), user_prompt=user_prompt)
