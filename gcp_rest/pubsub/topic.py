"""
Pub/Sub topic handle: create, publish, subscribe, destroy.
"""

from typing import Any, Dict, List, Optional

from gcp_rest.config import Config
from gcp_rest.logging import get_logger, log_debug, log_info
from gcp_rest.models.messages import EncodedMessage
from gcp_rest.models.pubsub import (
    CreateSubscriptionRequest,
    PublishRequest,
    PublishResponse,
    SubscriptionResource,
    TopicResource,
)
from gcp_rest.pubsub.subscription import Subscription
from gcp_rest.resource import Resource

logger = get_logger(__name__)


class Topic(Resource):
    """A Pub/Sub topic, identified by its full name (projects/{project}/topics/{topic})."""

    name: str

    def _uri(self, suffix: str = "") -> str:
        return self._require_client().pubsub_url(self.name) + suffix

    async def create(self) -> TopicResource:
        """Create the topic."""
        client = self._require_client()
        resource = await client.request(
            "PUT", self._uri(), {}, TopicResource, resource=self.name
        )
        log_info(f"Created topic: {self.name}", topic=self.name)
        return resource

    async def publish(
        self,
        *messages: Any,
        attributes: Optional[Dict[str, str]] = None,
        ordering_key: Optional[str] = None,
    ) -> List[str]:
        """
        Publish one or more messages in a single request.

        Messages are passed either as separate arguments or as one list or
        tuple, so publish(a, b) and publish([a, b]) send the same batch. A
        JSON array payload therefore has to be wrapped: publish([[1, 2]]).

        Args:
            *messages: EncodedMessage, JsonMessage, bytes, str, dict or pydantic model
            attributes: Attributes applied to messages that are not already envelopes
            ordering_key: Ordering key applied to messages that are not already envelopes

        Returns:
            Message IDs assigned by the service, in publish order

        Raises:
            SerializationError: If a payload cannot be encoded
        """
        client = self._require_client()
        if len(messages) == 1 and isinstance(messages[0], (list, tuple)):
            messages = tuple(messages[0])
        if not messages:
            raise ValueError("publish() needs at least one message")

        body = PublishRequest(
            messages=[
                EncodedMessage.coerce(message, attributes, ordering_key)
                for message in messages
            ]
        )
        response = await client.request(
            "POST", self._uri(":publish"), body, PublishResponse, resource=self.name
        )
        log_debug(
            f"Published {len(response.message_ids)} message(s) to {self.name}",
            topic=self.name,
            message_ids=response.message_ids,
        )
        return response.message_ids

    async def subscribe(
        self,
        name: str,
        ack_deadline_seconds: Optional[int] = None,
        enable_message_ordering: Optional[bool] = None,
    ) -> Subscription:
        """
        Create a subscription attached to this topic.

        Returns:
            Bound Subscription handle reflecting the service's ack deadline
        """
        client = self._require_client()
        subscription = client.subscription(name)
        body = CreateSubscriptionRequest(
            topic=self.name,
            ack_deadline_seconds=ack_deadline_seconds
            or Config.PUBSUB_ACK_DEADLINE_SECONDS,
            enable_message_ordering=enable_message_ordering,
        )
        resource = await client.request(
            "PUT",
            client.pubsub_url(subscription.name),
            body,
            SubscriptionResource,
            resource=subscription.name,
        )
        subscription.topic = resource.topic
        if resource.ack_deadline_seconds:
            subscription.ack_deadline_seconds = resource.ack_deadline_seconds
        log_info(
            f"Created subscription {subscription.name} on {self.name}",
            topic=self.name,
            subscription=subscription.name,
        )
        return subscription

    async def destroy(self) -> None:
        """Delete the topic. The handle is unbound only once the delete succeeded."""
        client = self._require_client()
        await client.request("DELETE", self._uri(), resource=self.name)
        self._consume()
        log_info(f"Deleted topic: {self.name}", topic=self.name)
