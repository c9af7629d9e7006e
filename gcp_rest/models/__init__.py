"""
Wire records for the Pub/Sub and Storage REST APIs.
"""

from .messages import (
    DeliveryState,
    EncodedMessage,
    FromPubSubMessage,
    JsonMessage,
    PubsubMessage,
    ReceivedMessage,
)
from .pubsub import (
    AcknowledgeRequest,
    CreateSubscriptionRequest,
    ModifyAckDeadlineRequest,
    PublishRequest,
    PublishResponse,
    PullRequest,
    PullResponse,
    SubscriptionResource,
    TopicResource,
)
from .storage import (
    ObjectAccessControl,
    ObjectCustomerEncryption,
    ObjectOwner,
    ObjectResource,
    ProjectTeam,
)

__all__ = [
    "DeliveryState",
    "EncodedMessage",
    "FromPubSubMessage",
    "JsonMessage",
    "PubsubMessage",
    "ReceivedMessage",
    "AcknowledgeRequest",
    "CreateSubscriptionRequest",
    "ModifyAckDeadlineRequest",
    "PublishRequest",
    "PublishResponse",
    "PullRequest",
    "PullResponse",
    "SubscriptionResource",
    "TopicResource",
    "ObjectAccessControl",
    "ObjectCustomerEncryption",
    "ObjectOwner",
    "ObjectResource",
    "ProjectTeam",
]
