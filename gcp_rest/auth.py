"""
Bearer token providers.

The clients only consume tokens; acquiring them is delegated to a provider
object exposing ``async def token() -> str``. Providers are shared by every
request in flight on a Client, so they must be safe to call concurrently.
"""

import asyncio
from typing import Optional, Protocol, Sequence, runtime_checkable

import google.auth
import google.auth.exceptions
import google.auth.transport.requests
from google.oauth2 import service_account

from gcp_rest.config import Config
from gcp_rest.errors import TransportError
from gcp_rest.logging import get_logger, log_info

logger = get_logger(__name__)


@runtime_checkable
class TokenProvider(Protocol):
    """Anything that can hand out a bearer token."""

    async def token(self) -> str: ...


class StaticTokenProvider:
    """Always returns the same token (tests, emulators, pre-minted tokens)."""

    def __init__(self, token: str):
        self._token = token

    async def token(self) -> str:
        return self._token


class GoogleAuthTokenProvider:
    """Token provider backed by google-auth credentials.

    Uses a service account key file when one is given, otherwise Application
    Default Credentials. Refreshes run in a worker thread and are serialized
    so concurrent requests trigger at most one refresh.
    """

    def __init__(
        self,
        credentials=None,
        credentials_path: Optional[str] = None,
        scopes: Sequence[str] = Config.AUTH_SCOPES,
    ):
        self._scopes = list(scopes)
        self._credentials = credentials
        self._credentials_path = credentials_path
        self._lock = asyncio.Lock()

    def _load_credentials(self):
        """Load credentials from the key file or from the environment."""
        try:
            if self._credentials_path:
                log_info(
                    "Loading service account credentials",
                    credentials_path=self._credentials_path,
                )
                return service_account.Credentials.from_service_account_file(
                    self._credentials_path, scopes=self._scopes
                )
            credentials, _ = google.auth.default(scopes=self._scopes)
            return credentials
        except (OSError, ValueError, google.auth.exceptions.GoogleAuthError) as e:
            raise TransportError("Could not load Google credentials", e) from e

    def _refresh(self) -> None:
        """Blocking refresh, run via asyncio.to_thread."""
        if self._credentials is None:
            self._credentials = self._load_credentials()
        try:
            self._credentials.refresh(google.auth.transport.requests.Request())
        except google.auth.exceptions.GoogleAuthError as e:
            raise TransportError("Failed to refresh access token", e) from e
        logger.debug("Access token refreshed")

    async def token(self) -> str:
        """Return a valid access token, refreshing it first when expired."""
        async with self._lock:
            if self._credentials is None or not self._credentials.valid:
                await asyncio.to_thread(self._refresh)
            return self._credentials.token
