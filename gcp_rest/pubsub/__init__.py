"""
Google Cloud Pub/Sub REST handles: topics, subscriptions and message envelopes.
"""

from gcp_rest.models.messages import (
    DeliveryState,
    EncodedMessage,
    FromPubSubMessage,
    JsonMessage,
    PubsubMessage,
    ReceivedMessage,
)
from gcp_rest.pubsub.subscription import Subscription
from gcp_rest.pubsub.topic import Topic

__all__ = [
    "DeliveryState",
    "EncodedMessage",
    "FromPubSubMessage",
    "JsonMessage",
    "PubsubMessage",
    "ReceivedMessage",
    "Subscription",
    "Topic",
]
