from __future__ import annotations

import logging
import time
from contextlib import contextmanager
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable, Iterator, List, Optional, Protocol

import httpx

from . import config
from .aggregator import build_prompt
from .chunker import split_text
from .discord_client import DiscordClient, dispatch, resolve_targets
from .errors import DigestError
from .models import Headline, Integration, RunReport
from .sources import FourChanSource, HackerNewsSource, RedditSource
from .summarizer import Summarizer
from .token_store import RedditAuthClient, TokenStore

logger = logging.getLogger(__name__)


class HeadlineSource(Protocol):
    def fetch(self) -> List[Headline]: ...


@dataclass
class RunContext:
    http: httpx.Client
    token_store: TokenStore
    discord: DiscordClient
    summarizer: Summarizer
    sources: List[HeadlineSource] = field(default_factory=list)


def build_sources(settings: config.Settings, http: httpx.Client, token_store: TokenStore) -> List[HeadlineSource]:
    sources: List[HeadlineSource] = []
    if settings.hackernews_pages > 0:
        sources.append(HackerNewsSource(http, settings.hackernews_pages))
    if settings.subreddits:
        sources.append(RedditSource(http, token_store, settings.subreddits, user_agent=settings.user_agent))
    for board in settings.fourchan_boards:
        sources.append(FourChanSource(http, board))
    return sources


@contextmanager
def open_run_context(
    settings: config.Settings,
    *,
    transport: httpx.BaseTransport | None = None,
    openai_client: Optional[Any] = None,
    clock: Callable[[], float] = time.time,
) -> Iterator[RunContext]:
    http = httpx.Client(
        headers={"User-Agent": settings.user_agent},
        timeout=20.0,
        follow_redirects=True,
        transport=transport,
    )
    discord: Optional[DiscordClient] = None
    summarizer: Optional[Summarizer] = None
    try:
        reddit_auth = RedditAuthClient(
            http,
            settings.reddit_client_id,
            settings.reddit_client_secret,
            user_agent=settings.user_agent,
        )
        token_store = TokenStore.load(
            Path(settings.auth_file),
            {Integration.REDDIT: reddit_auth.exchange},
            clock=clock,
        )
        discord = DiscordClient(settings.discord_bot_token, transport=transport)
        summarizer = Summarizer(
            api_key=settings.openai_api_key,
            model=settings.openai_model,
            client=openai_client,
        )
        yield RunContext(
            http=http,
            token_store=token_store,
            discord=discord,
            summarizer=summarizer,
            sources=build_sources(settings, http, token_store),
        )
    finally:
        if summarizer is not None:
            summarizer.close()
        if discord is not None:
            discord.close()
        http.close()


def collect_headlines(context: RunContext) -> List[Headline]:
    context.token_store.refresh_all()
    context.token_store.persist()

    headlines: List[Headline] = []
    for source in context.sources:
        headlines.extend(source.fetch())
    logger.info("Collected %s headlines from %s source(s)", len(headlines), len(context.sources))
    return headlines


def run_pipeline(
    context: RunContext,
    settings: config.Settings,
    *,
    sleep: Callable[[float], None] = time.sleep,
) -> RunReport:
    logger.info("Sending headline digest (model=%s)", context.summarizer.model)
    targets = resolve_targets(context.discord, settings.channel_names)

    headlines = collect_headlines(context)
    payload = build_prompt(headlines, settings.summary_system_prompt)
    summary = context.summarizer.summarize(payload)
    chunks = split_text(summary, config.DISCORD_MESSAGE_LIMIT)
    logger.info("Split count: %s", len(chunks))

    deliveries = dispatch(
        context.discord,
        targets,
        chunks,
        interval=config.DELIVERY_INTERVAL_SECONDS,
        sleep=sleep,
    )
    report = RunReport(
        targets=targets,
        headline_count=len(headlines),
        chunks=chunks,
        deliveries=deliveries,
    )
    _log_run_counts(report)
    return report


def run(settings: config.Settings) -> RunReport:
    try:
        with open_run_context(settings) as context:
            return run_pipeline(context, settings)
    except DigestError as exc:
        logger.error("Run aborted (%s): %s", type(exc).__name__, exc)
        raise


def _log_run_counts(report: RunReport) -> None:
    failed = len(report.failed_deliveries())
    logger.info(
        "Run completed. Targets=%s Headlines=%s Chunks=%s Sent=%s Failed=%s",
        len(report.targets),
        report.headline_count,
        len(report.chunks),
        len(report.deliveries) - failed,
        failed,
    )
