from __future__ import annotations

import json
import logging
import time
from pathlib import Path
from typing import Callable, Dict, Mapping, Optional

import httpx

from .config import REDDIT_AUTH_URL
from .errors import DecodeError, DigestError, TransportError
from .models import Credential, Integration, TokenGrant

logger = logging.getLogger(__name__)

Refresher = Callable[[], TokenGrant]


class TokenStoreError(DigestError):
    """Raised when the credential file cannot be written."""


class TokenRefreshError(DigestError):
    """Raised when a token exchange fails."""


class TokenRefreshConnectionError(TokenRefreshError, TransportError):
    """Raised when the token endpoint is unreachable or returns an error status."""


class TokenRefreshDecodeError(TokenRefreshError, DecodeError):
    """Raised when the token endpoint returns an unexpected body."""


API_NAMES: Dict[Integration, str] = {
    Integration.REDDIT: "reddit",
}


class RedditAuthClient:
    """Client-credentials exchange against the Reddit token endpoint."""

    def __init__(
        self,
        client: httpx.Client,
        client_id: str,
        client_secret: str,
        *,
        user_agent: str,
        url: str = REDDIT_AUTH_URL,
    ):
        self._client = client
        self._auth = (client_id, client_secret)
        self._user_agent = user_agent
        self._url = url

    def exchange(self) -> TokenGrant:
        logger.info("Requesting Reddit access token")
        try:
            response = self._client.post(
                self._url,
                auth=self._auth,
                content="grant_type=client_credentials&scope=read",
                headers={
                    "Content-Type": "application/x-www-form-urlencoded",
                    "Accept": "application/json",
                    "User-Agent": self._user_agent,
                },
            )
            response.raise_for_status()
        except httpx.RequestError as exc:
            raise TokenRefreshConnectionError(f"Reddit token request failed: {exc}") from exc
        except httpx.HTTPStatusError as exc:
            raise TokenRefreshConnectionError(f"Reddit token request returned error: {exc}") from exc

        try:
            grant = parse_token_grant(response.json())
        except ValueError as exc:
            raise TokenRefreshDecodeError(f"Malformed Reddit token response: {exc}") from exc
        logger.info("Refreshed Reddit auth: token_type=%s expires_in=%s", grant.token_type, grant.expires_in)
        return grant


def parse_token_grant(raw: object) -> TokenGrant:
    if not isinstance(raw, dict):
        raise ValueError("token response is not an object")
    access_token = raw.get("access_token")
    expires_in = raw.get("expires_in")
    if not isinstance(access_token, str) or not access_token:
        raise ValueError("access_token is missing")
    if not isinstance(expires_in, int) or isinstance(expires_in, bool):
        raise ValueError("expires_in is missing or not an integer")
    if expires_in <= 0:
        raise ValueError(f"expires_in must be positive, got {expires_in}")
    return TokenGrant(
        access_token=access_token,
        token_type=str(raw.get("token_type") or "bearer"),
        expires_in=expires_in,
        scope=str(raw.get("scope") or ""),
    )


class TokenStore:
    """Expiring credentials keyed by integration, backed by a JSON file.

    The file maps the integer value of each integration to a record of
    ``{api, access_token, token_type, expires_at}``. A missing or unreadable
    file is treated as an empty set so the next refresh rewrites it.
    """

    def __init__(
        self,
        path: Path,
        refreshers: Mapping[Integration, Refresher],
        credentials: Optional[Dict[Integration, Credential]] = None,
        clock: Callable[[], float] = time.time,
    ):
        self._path = Path(path)
        self._refreshers = dict(refreshers)
        self._credentials: Dict[Integration, Credential] = dict(credentials or {})
        self._clock = clock

    @classmethod
    def load(
        cls,
        path: Path | str,
        refreshers: Mapping[Integration, Refresher],
        clock: Callable[[], float] = time.time,
    ) -> "TokenStore":
        return cls(Path(path), refreshers, read_credentials(Path(path)), clock)

    @property
    def credentials(self) -> Dict[Integration, Credential]:
        return dict(self._credentials)

    def get_valid(self, integration: Integration) -> Credential:
        now = self._clock()
        current = self._credentials.get(integration)
        if current is not None and not current.is_expired(now):
            return current

        refresher = self._refreshers.get(integration)
        if refresher is None:
            raise TokenRefreshError(f"No refresher registered for integration {integration.name}")
        logger.info("Refreshing %s token", API_NAMES.get(integration, integration.name))
        grant = refresher()
        refreshed = Credential(
            api=API_NAMES.get(integration, integration.name.lower()),
            access_token=grant.access_token,
            token_type=grant.token_type,
            expires_at=int(now) + grant.expires_in,
        )
        if refreshed.is_expired(now):
            raise TokenRefreshDecodeError(
                f"Refreshed {refreshed.api} token is already expired (expires_at={refreshed.expires_at})"
            )
        self._credentials[integration] = refreshed
        return refreshed

    def refresh_all(self) -> None:
        for integration in self._refreshers:
            self.get_valid(integration)

    def persist(self) -> None:
        payload = {str(int(key)): cred.to_dict() for key, cred in self._credentials.items()}
        try:
            self._path.write_text(json.dumps(payload), encoding="utf-8")
        except OSError as exc:
            raise TokenStoreError(f"Failed to write {self._path}: {exc}") from exc
        logger.info("Persisted %s credential(s) to %s", len(payload), self._path)


def read_credentials(path: Path) -> Dict[Integration, Credential]:
    try:
        contents = path.read_text(encoding="utf-8")
    except OSError as exc:
        logger.warning("Failed to open %s: %s; refreshing all tokens", path, exc)
        return {}

    try:
        raw = json.loads(contents)
        return _decode_credentials(raw)
    except (ValueError, TypeError, KeyError) as exc:
        logger.warning("Error reading %s: %s; refreshing all tokens", path, exc)
        return {}


def _decode_credentials(raw: object) -> Dict[Integration, Credential]:
    if not isinstance(raw, dict):
        raise ValueError("credential file is not an object")
    credentials: Dict[Integration, Credential] = {}
    for key, entry in raw.items():
        integration = Integration(int(key))
        if not isinstance(entry, dict):
            raise ValueError(f"credential {key} is not an object")
        credentials[integration] = Credential(
            api=str(entry["api"]),
            access_token=str(entry["access_token"]),
            token_type=str(entry["token_type"]),
            expires_at=int(entry["expires_at"]),
        )
    return credentials
