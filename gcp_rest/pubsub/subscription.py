"""
Pub/Sub subscription handle and the pull/acknowledge cycle.

A pulled message stays DELIVERED until it is acknowledged, its deadline is
extended with modify_ack_deadline(), or the deadline passes and it becomes
EXPIRED (eligible for redelivery with a higher delivery attempt). Delivery is
at-least-once: callers must tolerate duplicates.
"""

from typing import Iterable, List, Optional, Tuple, Type, TypeVar, Union

from pydantic import Field

from gcp_rest.config import Config
from gcp_rest.errors import NotFoundError, SerializationError
from gcp_rest.logging import get_logger, log_debug, log_info, log_warning
from gcp_rest.models.messages import ReceivedMessage
from gcp_rest.models.pubsub import (
    AcknowledgeRequest,
    CreateSubscriptionRequest,
    ModifyAckDeadlineRequest,
    PullRequest,
    PullResponse,
    SubscriptionResource,
)
from gcp_rest.resource import Resource

logger = get_logger(__name__)

T = TypeVar("T")

# Service-side bounds for ackDeadlineSeconds
MAX_ACK_DEADLINE_SECONDS = 600

AckTarget = Union[ReceivedMessage, str]


def _split_targets(
    targets: Iterable[AckTarget],
) -> Tuple[List[str], List[ReceivedMessage]]:
    """Collect unique ack ids (first-seen order) and the message objects among targets."""
    # pydantic models and strings are themselves iterable
    if isinstance(targets, (ReceivedMessage, str)):
        targets = [targets]
    ack_ids: List[str] = []
    received: List[ReceivedMessage] = []
    seen = set()
    for target in targets:
        if isinstance(target, ReceivedMessage):
            received.append(target)
            ack_id = target.ack_id
        else:
            ack_id = target
        if ack_id not in seen:
            seen.add(ack_id)
            ack_ids.append(ack_id)
    return ack_ids, received


class Subscription(Resource):
    """A Pub/Sub subscription, identified by its full name."""

    name: str
    topic: Optional[str] = None
    ack_deadline_seconds: int = Field(
        default_factory=lambda: Config.PUBSUB_ACK_DEADLINE_SECONDS
    )

    def _uri(self, suffix: str = "") -> str:
        return self._require_client().pubsub_url(self.name) + suffix

    async def create(self) -> SubscriptionResource:
        """Create this subscription on self.topic."""
        client = self._require_client()
        if not self.topic:
            raise ValueError(f"Subscription {self.name} has no topic to attach to")
        body = CreateSubscriptionRequest(
            topic=self.topic, ack_deadline_seconds=self.ack_deadline_seconds
        )
        resource = await client.request(
            "PUT", self._uri(), body, SubscriptionResource, resource=self.name
        )
        log_info(
            f"Created subscription: {self.name}",
            subscription=self.name,
            topic=self.topic,
        )
        return resource

    async def get(self) -> SubscriptionResource:
        """Fetch the subscription and refresh the local topic and ack deadline."""
        client = self._require_client()
        resource = await client.request(
            "GET", self._uri(), result_type=SubscriptionResource, resource=self.name
        )
        self.topic = resource.topic
        if resource.ack_deadline_seconds:
            self.ack_deadline_seconds = resource.ack_deadline_seconds
        return resource

    async def pull(
        self,
        max_messages: Optional[int] = None,
        return_immediately: bool = False,
        timeout: Optional[float] = None,
    ) -> List[ReceivedMessage]:
        """
        Pull undelivered messages.

        Args:
            max_messages: Upper bound on returned messages (defaults to PUBSUB_MAX_MESSAGES)
            return_immediately: Ask the service not to wait for messages
            timeout: Seconds to wait for this long-poll only. None waits as long as
                the service holds the pull open; the client default timeout
                does not apply here

        Returns:
            Received messages, each stamped with its local ack deadline.
            An empty subscription yields an empty list.
        """
        client = self._require_client()
        body = PullRequest(
            max_messages=max_messages or Config.PUBSUB_MAX_MESSAGES,
            return_immediately=True if return_immediately else None,
        )
        response = await client.request(
            "POST",
            self._uri(":pull"),
            body,
            PullResponse,
            resource=self.name,
            timeout=timeout,
            long_poll=True,
        )

        received = response.received_messages
        for message in received:
            message.track_deadline(self.ack_deadline_seconds)

        log_debug(
            f"Pulled {len(received)} message(s) from {self.name}",
            subscription=self.name,
            count=len(received),
        )
        return received

    async def get_messages(
        self,
        message_type: Type[T],
        max_messages: Optional[int] = None,
        return_immediately: bool = False,
        timeout: Optional[float] = None,
    ) -> List[Tuple[Union[T, SerializationError], ReceivedMessage]]:
        """
        Pull and decode messages into message_type.

        A payload that does not decode is returned as its SerializationError so
        one bad message does not hide the rest. It is not acknowledged; ack or
        nack it explicitly.
        """
        results: List[Tuple[Union[T, SerializationError], ReceivedMessage]] = []
        for received in await self.pull(max_messages, return_immediately, timeout):
            try:
                payload: Union[T, SerializationError] = received.decode_as(message_type)
            except SerializationError as e:
                log_warning(
                    f"Could not decode message {received.message.message_id}: {e}",
                    subscription=self.name,
                    message_id=received.message.message_id,
                )
                payload = e
            results.append((payload, received))
        return results

    async def acknowledge(self, messages: Iterable[AckTarget]) -> None:
        """
        Acknowledge messages (ReceivedMessage objects or raw ack ids).

        Acknowledging an id twice, or one whose deadline already passed, is
        harmless: a 404 from the service is treated as already done.
        """
        client = self._require_client()
        ack_ids, received = _split_targets(messages)
        if not ack_ids:
            return

        try:
            await client.request(
                "POST",
                self._uri(":acknowledge"),
                AcknowledgeRequest(ack_ids=ack_ids),
                resource=self.name,
            )
        except NotFoundError:
            log_debug(
                f"Acknowledge on {self.name} returned 404, treating as already acknowledged",
                subscription=self.name,
                count=len(ack_ids),
            )

        for message in received:
            message.mark_acknowledged()

    async def modify_ack_deadline(
        self, messages: Iterable[AckTarget], ack_deadline_seconds: int
    ) -> None:
        """
        Extend (or with 0, drop) the ack deadline of delivered messages.

        Raises:
            ValueError: If ack_deadline_seconds is outside 0..600
            NotBoundError: If the handle is not bound, checked before the range
        """
        client = self._require_client()
        if not 0 <= ack_deadline_seconds <= MAX_ACK_DEADLINE_SECONDS:
            raise ValueError(
                f"ack_deadline_seconds must be between 0 and "
                f"{MAX_ACK_DEADLINE_SECONDS}, got {ack_deadline_seconds}"
            )
        ack_ids, received = _split_targets(messages)
        if not ack_ids:
            return

        await client.request(
            "POST",
            self._uri(":modifyAckDeadline"),
            ModifyAckDeadlineRequest(
                ack_ids=ack_ids, ack_deadline_seconds=ack_deadline_seconds
            ),
            resource=self.name,
        )
        for message in received:
            message.track_deadline(ack_deadline_seconds)

    async def nack(self, messages: Iterable[AckTarget]) -> None:
        """Make messages immediately eligible for redelivery."""
        await self.modify_ack_deadline(messages, 0)

    async def destroy(self) -> None:
        """Delete the subscription. The handle is unbound only once the delete succeeded."""
        client = self._require_client()
        await client.request("DELETE", self._uri(), resource=self.name)
        self._consume()
        log_info(f"Deleted subscription: {self.name}", subscription=self.name)
