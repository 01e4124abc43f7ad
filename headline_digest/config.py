from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Tuple

# --------------------------------
# Settings

REDDIT_AUTH_URL = "https://www.reddit.com/api/v1/access_token"
REDDIT_BASE_URL = "https://oauth.reddit.com"
HACKERNEWS_URL = "https://news.ycombinator.com/"
FOURCHAN_BASE_URL = "https://boards.4chan.org"
DISCORD_API_BASE_URL = "https://discord.com/api/v10"

# Reddit listing size per subreddit
REDDIT_LISTING_LIMIT = 20

SUBREDDITS = (
    "wallstreetbets",
    "investmentclub",
    "stockmarkets",
    "investing",
    "cryptocurrency",
    "cscareerquestions",
    "worldnews",
    "stocks",
)

# Number of Hacker News front pages to scrape
HACKERNEWS_PAGES = 5

FOURCHAN_BOARDS = ("biz", "g")

# Discord rejects messages longer than this
DISCORD_MESSAGE_LIMIT = 2000

# Pause between two Discord sends (seconds)
DELIVERY_INTERVAL_SECONDS = 0.5

DEFAULT_CHANNEL_NAMES = ("arrakis-terminal", "money-talk", "arrakeen")

# Discord channel type for GUILD_TEXT
DISCORD_TEXT_CHANNEL = 0

DEFAULT_AUTH_FILE = "auth.json"

DEFAULT_OPENAI_MODEL = "gpt-4o"

DEFAULT_USER_AGENT = "headline-digest/0.1.0"

DEFAULT_SYSTEM_PROMPT = (
    "You are a news aggregator bot. Given a list of sources, and a list of posts from each source, "
    "provide a nuanced summary of what's being posted. Be thorough, but be careful! "
    "The messages can't be too long (2000 character limit!). "
    "Details matter, no matter how noisy/inappropriate (don't forget 4chan!). Be specific! "
    "Focus on _all_ the topics being talked about, not the fact that the chatter exists. "
    "The user already knows what you're being given--there's no need to restate or provide context. "
    "Do not segregate, do not organize. Write as if you are speaking with a friend on what you've seen."
)
# --------------------------------


@dataclass
class Settings:
    reddit_client_id: str
    reddit_client_secret: str
    openai_api_key: str
    discord_bot_token: str
    openai_model: str = DEFAULT_OPENAI_MODEL
    summary_system_prompt: str = DEFAULT_SYSTEM_PROMPT
    channel_names: Tuple[str, ...] = DEFAULT_CHANNEL_NAMES
    auth_file: str = DEFAULT_AUTH_FILE
    user_agent: str = DEFAULT_USER_AGENT
    subreddits: Tuple[str, ...] = SUBREDDITS
    hackernews_pages: int = HACKERNEWS_PAGES
    fourchan_boards: Tuple[str, ...] = FOURCHAN_BOARDS

    @staticmethod
    def from_env() -> "Settings":
        def require(name: str) -> str:
            value = os.getenv(name)
            if value is None or not value.strip():
                raise ValueError(f"Environment variable {name} is required.")
            return value.strip()

        def optional_with_default(name: str, default: str) -> str:
            value = os.getenv(name)
            if value is None or not value.strip():
                return default
            return value.strip()

        def require_any(*names: str) -> str:
            for name in names:
                value = os.getenv(name)
                if value is not None and value.strip():
                    return value.strip()
            raise ValueError(f"Environment variable {names[0]} is required.")

        return Settings(
            reddit_client_id=require("REDDIT_CLIENT_ID"),
            reddit_client_secret=require("REDDIT_CLIENT_SECRET"),
            openai_api_key=require("OPENAI_API_KEY"),
            discord_bot_token=require_any("DISCORD_BOT_TOKEN", "ARRAKIS_TERMINAL_TOKEN"),
            openai_model=optional_with_default("OPENAI_MODEL", DEFAULT_OPENAI_MODEL),
            summary_system_prompt=optional_with_default("SUMMARY_SYSTEM_PROMPT", DEFAULT_SYSTEM_PROMPT),
            channel_names=parse_channel_names(os.getenv("DISCORD_CHANNEL_NAMES")),
            auth_file=optional_with_default("AUTH_FILE", DEFAULT_AUTH_FILE),
            user_agent=optional_with_default("HTTP_USER_AGENT", DEFAULT_USER_AGENT),
        )


def parse_channel_names(raw: str | None) -> Tuple[str, ...]:
    """Parse a comma separated allow-list; blank input keeps the defaults."""
    if raw is None or not raw.strip():
        return DEFAULT_CHANNEL_NAMES
    names = [name.strip() for name in raw.split(",")]
    return tuple(name for name in names if name)
