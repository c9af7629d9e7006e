"""
Client shared by every resource handle.
"""

from typing import Any, Optional, Type, TypeVar

import aiohttp
from pydantic import BaseModel

from gcp_rest.auth import GoogleAuthTokenProvider, StaticTokenProvider, TokenProvider
from gcp_rest.config import Config
from gcp_rest.http import build_request, execute
from gcp_rest.logging import get_logger, log_info
from gcp_rest.pubsub.subscription import Subscription
from gcp_rest.pubsub.topic import Topic
from gcp_rest.storage.object import Object

logger = get_logger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)


class Client:
    """
    Holds the HTTP session, project id and token provider used by all handles.

    Several clients (e.g. for different projects) can live side by side;
    nothing here is global. Use it as an async context manager, or call
    close(), to release a session the client created itself. An injected
    session is left open for its owner.
    """

    def __init__(
        self,
        project_id: str,
        token_provider: TokenProvider,
        session: Optional[aiohttp.ClientSession] = None,
        pubsub_root: Optional[str] = None,
        storage_root: Optional[str] = None,
        request_timeout: Optional[float] = None,
    ):
        """
        Initialize the client.

        Args:
            project_id: GCP project ID used to build topic and subscription names
            token_provider: Source of bearer tokens, shared by concurrent requests
            session: Optional aiohttp session; one is created on first use otherwise
            pubsub_root: Pub/Sub REST root, defaults to Config.get_pubsub_root()
            storage_root: Storage JSON API root, defaults to Config.get_storage_root()
            request_timeout: Default total timeout in seconds, None for no timeout
        """
        if not project_id:
            raise ValueError("project_id must be set")
        self.project_id = project_id
        self.token_provider = token_provider
        self.pubsub_root = (pubsub_root or Config.get_pubsub_root()).rstrip("/")
        self.storage_root = (storage_root or Config.get_storage_root()).rstrip("/")
        self.request_timeout = request_timeout
        self._session = session
        self._owns_session = session is None

    @classmethod
    def from_config(
        cls,
        project_id: Optional[str] = None,
        session: Optional[aiohttp.ClientSession] = None,
    ) -> "Client":
        """
        Build a client from environment configuration.

        Emulators get a static token; otherwise credentials come from
        GOOGLE_APPLICATION_CREDENTIALS or Application Default Credentials.
        """
        project_id = project_id or Config.GCP_PROJECT_ID
        if not project_id:
            raise ValueError(
                "GCP_PROJECT_ID must be set in environment or passed to Client.from_config"
            )

        if Config.is_emulator():
            token_provider: TokenProvider = StaticTokenProvider("emulator")
            log_info(
                "Created client (emulator mode)",
                project_id=project_id,
                pubsub_emulator=Config.PUBSUB_EMULATOR_HOST,
                storage_emulator=Config.STORAGE_EMULATOR_HOST,
            )
        else:
            token_provider = GoogleAuthTokenProvider(
                credentials_path=Config.GOOGLE_APPLICATION_CREDENTIALS
            )
            log_info("Created client (production mode)", project_id=project_id)

        return cls(
            project_id,
            token_provider,
            session=session,
            request_timeout=Config.get_request_timeout(),
        )

    @property
    def session(self) -> aiohttp.ClientSession:
        """The shared HTTP session, created lazily inside the running event loop."""
        if self._session is None or self._session.closed:
            # No session-wide timeout; pulls and callers set their own
            self._session = aiohttp.ClientSession(
                timeout=aiohttp.ClientTimeout(total=None)
            )
            self._owns_session = True
        return self._session

    async def close(self) -> None:
        """Close the HTTP session if this client created it."""
        if not self._owns_session or self._session is None:
            return
        if not self._session.closed:
            await self._session.close()
        self._session = None

    async def __aenter__(self) -> "Client":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()

    def pubsub_url(self, path: str) -> str:
        return f"{self.pubsub_root}/{path}"

    def storage_url(self, path: str) -> str:
        return f"{self.storage_root}/{path}"

    def topic_path(self, topic: str) -> str:
        """Full topic name; names that are already full paths are kept as-is."""
        if topic.startswith("projects/"):
            return topic
        return f"projects/{self.project_id}/topics/{topic}"

    def subscription_path(self, subscription: str) -> str:
        """Full subscription name; names that are already full paths are kept as-is."""
        if subscription.startswith("projects/"):
            return subscription
        return f"projects/{self.project_id}/subscriptions/{subscription}"

    def topic(self, name: str) -> Topic:
        """Get a bound handle for a topic (no request is made)."""
        return Topic(name=self.topic_path(name)).bind(self)

    def subscription(
        self,
        name: str,
        topic: Optional[str] = None,
        ack_deadline_seconds: Optional[int] = None,
    ) -> Subscription:
        """Get a bound handle for a subscription (no request is made)."""
        subscription = Subscription(
            name=self.subscription_path(name),
            topic=self.topic_path(topic) if topic else None,
        )
        if ack_deadline_seconds:
            subscription.ack_deadline_seconds = ack_deadline_seconds
        return subscription.bind(self)

    def object(self, bucket: str, name: str) -> Object:
        """Get a bound handle for a storage object (no request is made)."""
        return Object(bucket=bucket, name=name).bind(self)

    async def request(
        self,
        method: str,
        uri: str,
        body: Any = None,
        result_type: Optional[Type[ModelT]] = None,
        resource: str = "",
        timeout: Optional[float] = None,
        long_poll: bool = False,
    ) -> Optional[ModelT]:
        """Build an authenticated request and execute it (see gcp_rest.http)."""
        request = await build_request(self, method, uri, body)
        return await execute(
            self,
            request,
            result_type=result_type,
            resource=resource,
            timeout=timeout,
            long_poll=long_poll,
        )
