"""
Pub/Sub REST request and response records.
"""

from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from gcp_rest.models.messages import EncodedMessage, ReceivedMessage


class PubSubModel(BaseModel):
    """Base model using the camelCase field names of the REST API."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class TopicResource(PubSubModel):
    name: str
    labels: Optional[Dict[str, str]] = None
    kms_key_name: Optional[str] = None
    message_retention_duration: Optional[str] = None


class SubscriptionResource(PubSubModel):
    name: str
    topic: str
    ack_deadline_seconds: Optional[int] = None
    retain_acked_messages: Optional[bool] = None
    message_retention_duration: Optional[str] = None
    labels: Optional[Dict[str, str]] = None
    enable_message_ordering: Optional[bool] = None
    filter: Optional[str] = None


class CreateSubscriptionRequest(PubSubModel):
    topic: str
    ack_deadline_seconds: Optional[int] = None
    enable_message_ordering: Optional[bool] = None


class PublishRequest(PubSubModel):
    messages: List[EncodedMessage]


class PublishResponse(PubSubModel):
    message_ids: List[str] = Field(default_factory=list)


class PullRequest(PubSubModel):
    max_messages: int
    # Deprecated by the service but still honoured; omitted unless set
    return_immediately: Optional[bool] = None


class PullResponse(PubSubModel):
    received_messages: List[ReceivedMessage] = Field(default_factory=list)


class AcknowledgeRequest(PubSubModel):
    ack_ids: List[str]


class ModifyAckDeadlineRequest(PubSubModel):
    ack_ids: List[str]
    ack_deadline_seconds: int
