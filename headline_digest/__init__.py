"""Headline digest: collect, summarize and post news headlines to Discord."""

__all__ = [
    "config",
    "models",
    "errors",
    "token_store",
    "sources",
    "aggregator",
    "summarizer",
    "chunker",
    "discord_client",
    "orchestrator",
]
