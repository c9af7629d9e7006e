"""
Async REST clients for Google Cloud Pub/Sub and Cloud Storage.
"""

from gcp_rest.auth import GoogleAuthTokenProvider, StaticTokenProvider, TokenProvider
from gcp_rest.client import Client
from gcp_rest.errors import (
    GcpRestError,
    NotBoundError,
    NotFoundError,
    RemoteServiceError,
    SerializationError,
    TransportError,
)
from gcp_rest.models.messages import (
    DeliveryState,
    EncodedMessage,
    FromPubSubMessage,
    JsonMessage,
    PubsubMessage,
    ReceivedMessage,
)
from gcp_rest.models.storage import ObjectResource
from gcp_rest.pubsub import Subscription, Topic
from gcp_rest.storage import Object

__all__ = [
    "Client",
    "TokenProvider",
    "StaticTokenProvider",
    "GoogleAuthTokenProvider",
    "GcpRestError",
    "NotBoundError",
    "NotFoundError",
    "RemoteServiceError",
    "SerializationError",
    "TransportError",
    "DeliveryState",
    "EncodedMessage",
    "FromPubSubMessage",
    "JsonMessage",
    "PubsubMessage",
    "ReceivedMessage",
    "ObjectResource",
    "Object",
    "Subscription",
    "Topic",
]
