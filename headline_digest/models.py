from __future__ import annotations

from dataclasses import dataclass, field
from enum import IntEnum
from typing import List, Optional


class Integration(IntEnum):
    REDDIT = 0


@dataclass
class Credential:
    api: str
    access_token: str
    token_type: str
    expires_at: int

    def is_expired(self, now: float) -> bool:
        return self.expires_at <= now

    def to_dict(self) -> dict:
        return {
            "api": self.api,
            "access_token": self.access_token,
            "token_type": self.token_type,
            "expires_at": self.expires_at,
        }


@dataclass(frozen=True)
class TokenGrant:
    access_token: str
    token_type: str
    expires_in: int
    scope: str = ""


@dataclass(frozen=True)
class Headline:
    title: str
    source: str  # e.g., "news.ycombinator.com", "www.reddit.com/r/stocks"
    body: Optional[str] = None

    def __post_init__(self) -> None:
        if not self.title:
            raise ValueError("Headline title must not be empty.")
        if not self.source:
            raise ValueError("Headline source must not be empty.")


@dataclass(frozen=True)
class PromptPayload:
    system_prompt: str
    user_prompt: str


@dataclass(frozen=True)
class DiscordGuild:
    id: str
    name: str = ""


@dataclass(frozen=True)
class DiscordChannel:
    id: str
    type: int
    name: str = ""
    guild_id: Optional[str] = None


@dataclass(frozen=True)
class DeliveryTarget:
    channel_id: str
    guild_id: Optional[str]
    name: str
    eligible: bool = True


@dataclass
class DeliveryResult:
    channel_id: str
    chunk_index: int
    ok: bool
    status_code: Optional[int] = None
    error: Optional[str] = None


@dataclass
class RunReport:
    targets: List[DeliveryTarget] = field(default_factory=list)
    headline_count: int = 0
    chunks: List[str] = field(default_factory=list)
    deliveries: List[DeliveryResult] = field(default_factory=list)

    def failed_deliveries(self) -> List[DeliveryResult]:
        return [d for d in self.deliveries if not d.ok]
