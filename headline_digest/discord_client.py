from __future__ import annotations

import logging
import time
from typing import Callable, Collection, List, Optional, Sequence

import httpx

from .config import DELIVERY_INTERVAL_SECONDS, DISCORD_API_BASE_URL, DISCORD_TEXT_CHANNEL
from .errors import DecodeError, DigestError, TransportError
from .models import DeliveryResult, DeliveryTarget, DiscordChannel, DiscordGuild

logger = logging.getLogger(__name__)


class DiscordError(DigestError):
    """Raised when Discord operations fail."""


class DiscordConnectionError(DiscordError, TransportError):
    """Raised when Discord is unreachable (network/timeout)."""


class DiscordApiError(DiscordError, TransportError):
    """Raised when Discord returns an error response."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class DiscordDecodeError(DiscordError, DecodeError):
    """Raised when Discord returns an unexpected body."""


class DiscordClient:
    def __init__(
        self,
        token: str,
        base_url: str = DISCORD_API_BASE_URL,
        *,
        transport: httpx.BaseTransport | None = None,
    ):
        self._client = httpx.Client(
            base_url=base_url,
            headers={"Authorization": f"Bot {token}"},
            timeout=20.0,
            transport=transport,
        )

    def close(self) -> None:
        self._client.close()

    def list_guilds(self) -> List[DiscordGuild]:
        raw = self._request("GET", "/users/@me/guilds").json()
        if not isinstance(raw, list):
            raise DiscordDecodeError("Guild listing is not a list.")
        try:
            return [DiscordGuild(id=str(g["id"]), name=str(g.get("name") or "")) for g in raw]
        except (KeyError, TypeError, AttributeError) as exc:
            raise DiscordDecodeError(f"Malformed guild entry: {exc}") from exc

    def list_channels(self, guild_id: str) -> List[DiscordChannel]:
        raw = self._request("GET", f"/guilds/{guild_id}/channels").json()
        if not isinstance(raw, list):
            raise DiscordDecodeError(f"Channel listing for guild {guild_id} is not a list.")
        try:
            return [
                DiscordChannel(
                    id=str(c["id"]),
                    type=int(c["type"]),
                    name=str(c.get("name") or ""),
                    guild_id=c.get("guild_id") or guild_id,
                )
                for c in raw
            ]
        except (KeyError, TypeError, ValueError, AttributeError) as exc:
            raise DiscordDecodeError(f"Malformed channel entry in guild {guild_id}: {exc}") from exc

    def send_message(self, channel_id: str, content: str) -> httpx.Response:
        return self._request("POST", f"/channels/{channel_id}/messages", json={"content": content})

    def _request(self, method: str, path: str, **kwargs) -> httpx.Response:
        try:
            response = self._client.request(method, path, **kwargs)
            response.raise_for_status()
            return response
        except httpx.RequestError as exc:
            raise DiscordConnectionError(f"Discord request failed {method} {path}: {exc}") from exc
        except httpx.HTTPStatusError as exc:
            raise DiscordApiError(
                f"Discord request returned error: {exc}", status_code=exc.response.status_code
            ) from exc


def is_eligible(channel: DiscordChannel, allowed_names: Collection[str]) -> bool:
    return channel.type == DISCORD_TEXT_CHANNEL and channel.name in allowed_names


def resolve_targets(discord: DiscordClient, allowed_names: Collection[str]) -> List[DeliveryTarget]:
    """List every text channel named in ``allowed_names`` across the bot's guilds.

    A failure for any guild aborts the whole resolution.
    """
    guilds = discord.list_guilds()
    logger.info("Guild IDs: %s", [g.id for g in guilds])

    targets: List[DeliveryTarget] = []
    for guild in guilds:
        for channel in discord.list_channels(guild.id):
            if not is_eligible(channel, allowed_names):
                continue
            targets.append(
                DeliveryTarget(channel_id=channel.id, guild_id=guild.id, name=channel.name, eligible=True)
            )
    logger.info("Resolved %s target channel(s): %s", len(targets), [f"{t.guild_id}/{t.name}" for t in targets])
    return targets


def dispatch(
    discord: DiscordClient,
    targets: Sequence[DeliveryTarget],
    chunks: Sequence[str],
    *,
    interval: float = DELIVERY_INTERVAL_SECONDS,
    sleep: Callable[[float], None] = time.sleep,
) -> List[DeliveryResult]:
    """Send every chunk, in order, to every eligible target.

    Failed sends are logged and recorded; the remaining sends still go out.
    ``interval`` seconds are slept after every attempt.
    """
    results: List[DeliveryResult] = []
    for target in targets:
        if not target.eligible:
            continue
        for idx, chunk in enumerate(chunks):
            logger.info("Sending split %s of %s to channel %s", idx + 1, len(chunks), target.channel_id)
            try:
                response = discord.send_message(target.channel_id, chunk)
                logger.info("Discord response status=%s", response.status_code)
                results.append(DeliveryResult(target.channel_id, idx, ok=True, status_code=response.status_code))
            except DiscordApiError as exc:
                logger.error("Delivery to channel %s failed (status=%s): %s", target.channel_id, exc.status_code, exc)
                results.append(
                    DeliveryResult(target.channel_id, idx, ok=False, status_code=exc.status_code, error=str(exc))
                )
            except DiscordError as exc:
                logger.error("Delivery to channel %s failed: %s", target.channel_id, exc)
                results.append(DeliveryResult(target.channel_id, idx, ok=False, error=str(exc)))
            sleep(interval)
    return results
