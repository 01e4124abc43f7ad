from __future__ import annotations

import logging
import re
from typing import Iterator, List, Optional, Sequence

import httpx
from lxml import etree, html

from .config import (
    FOURCHAN_BASE_URL,
    HACKERNEWS_PAGES,
    HACKERNEWS_URL,
    REDDIT_BASE_URL,
    REDDIT_LISTING_LIMIT,
)
from .errors import DecodeError, DigestError, TransportError
from .models import Headline, Integration
from .token_store import TokenStore

logger = logging.getLogger(__name__)

HACKERNEWS_SOURCE = "news.ycombinator.com"
TITLE_SPAN_CLASS = "titleline"

_TEASER_RE = re.compile(r'"teaser":"(.*?)"')
# Character set stripped from both ends of each teaser match.
_TEASER_TRIM = '"teaser":"'


class SourceError(DigestError):
    """Raised when a headline source fails."""


class SourceConnectionError(SourceError, TransportError):
    """Raised when a source is unreachable or returns an error status."""


class SourceDecodeError(SourceError, DecodeError):
    """Raised when a source returns an unexpected body."""


def _get(client: httpx.Client, url: str, **kwargs) -> httpx.Response:
    try:
        response = client.get(url, **kwargs)
        response.raise_for_status()
    except httpx.RequestError as exc:
        raise SourceConnectionError(f"Request to {url} failed: {exc}") from exc
    except httpx.HTTPStatusError as exc:
        raise SourceConnectionError(f"Request to {url} returned error: {exc}") from exc
    return response


class RedditSource:
    def __init__(
        self,
        client: httpx.Client,
        token_store: TokenStore,
        subreddits: Sequence[str],
        *,
        limit: int = REDDIT_LISTING_LIMIT,
        user_agent: str,
        base_url: str = REDDIT_BASE_URL,
    ):
        self._client = client
        self._token_store = token_store
        self._subreddits = list(subreddits)
        self._limit = limit
        self._user_agent = user_agent
        self._base_url = base_url.rstrip("/")

    def fetch(self) -> List[Headline]:
        headlines: List[Headline] = []
        for subreddit in self._subreddits:
            logger.info("Getting headlines for subreddit: %s", subreddit)
            token = self._token_store.get_valid(Integration.REDDIT)
            response = _get(
                self._client,
                f"{self._base_url}/r/{subreddit}/hot",
                params={"limit": self._limit, "raw_json": 1},
                headers={
                    "Authorization": f"bearer {token.access_token}",
                    "User-Agent": self._user_agent,
                },
            )
            try:
                titles = parse_listing_titles(response.json())
            except ValueError as exc:
                raise SourceDecodeError(f"Malformed listing for r/{subreddit}: {exc}") from exc
            source = f"www.reddit.com/r/{subreddit}"
            headlines.extend(Headline(title=title, source=source) for title in titles)
        logger.info("Reddit headline count: %s", len(headlines))
        return headlines


def parse_listing_titles(raw: object) -> List[str]:
    """Decode ``{data: {children: [{data: {title}}]}}`` into post titles."""
    if not isinstance(raw, dict) or not isinstance(raw.get("data"), dict):
        raise ValueError("listing has no data object")
    children = raw["data"].get("children")
    if not isinstance(children, list):
        raise ValueError("listing has no children list")
    titles: List[str] = []
    for idx, child in enumerate(children):
        post = child.get("data") if isinstance(child, dict) else None
        if not isinstance(post, dict):
            raise ValueError(f"child {idx} has no data object")
        title = post.get("title")
        if not isinstance(title, str) or not title:
            raise ValueError(f"child {idx} has no title")
        titles.append(title)
    return titles


class HackerNewsSource:
    def __init__(
        self,
        client: httpx.Client,
        pages: int = HACKERNEWS_PAGES,
        *,
        url: str = HACKERNEWS_URL,
    ):
        self._client = client
        self._pages = pages
        self._url = url

    def fetch(self) -> List[Headline]:
        headlines: List[Headline] = []
        for page in range(1, self._pages + 1):
            logger.info("Getting hackernews headlines for page: %s", page)
            response = _get(self._client, self._url, params={"p": page})
            try:
                root = html.fromstring(response.content)
            except (etree.ParserError, ValueError) as exc:
                raise SourceDecodeError(f"Failed to parse hackernews page {page}: {exc}") from exc
            headlines.extend(Headline(title=title, source=HACKERNEWS_SOURCE) for title in iter_title_spans(root))
        logger.info("Hackernews headline count: %s", len(headlines))
        return headlines


def iter_title_spans(node: html.HtmlElement) -> Iterator[str]:
    """Walk the tree depth-first and yield the link text of each title span."""
    if node.tag == "span" and node.get("class") == TITLE_SPAN_CLASS:
        title = _first_anchor_text(node)
        if title:
            yield title
        else:
            logger.debug("Title span without link text skipped")
    for child in node:
        if isinstance(child.tag, str):
            yield from iter_title_spans(child)


def _first_anchor_text(span: html.HtmlElement) -> Optional[str]:
    for child in span:
        if child.tag == "a":
            return child.text
    return None


class FourChanSource:
    def __init__(
        self,
        client: httpx.Client,
        board: str,
        *,
        base_url: str = FOURCHAN_BASE_URL,
    ):
        self._client = client
        self._board = board
        self._base_url = base_url.rstrip("/")

    @property
    def source(self) -> str:
        return f"boards.4chan.org/{self._board}"

    def fetch(self) -> List[Headline]:
        response = _get(self._client, f"{self._base_url}/{self._board}/catalog")
        headlines = [Headline(title=title, source=self.source) for title in extract_teasers(response.text)]
        logger.info("/%s/ headline count: %s", self._board, len(headlines))
        return headlines


def extract_teasers(body: str) -> List[str]:
    """Return trimmed ``"teaser":"..."`` matches from a raw catalog body.

    Trimming strips any of the characters in ``"teaser":"`` from both ends of
    the whole match, so teasers that start or end with one of those letters
    lose them too.
    """
    teasers: List[str] = []
    for match in _TEASER_RE.finditer(body):
        title = match.group(0).strip(_TEASER_TRIM)
        if title:
            teasers.append(title)
    return teasers
