"""
Pub/Sub message envelopes.

Message data travels base64 encoded inside JSON. EncodedMessage is what we
publish, PubsubMessage is what the service hands back, and ReceivedMessage
wraps it with the ack identifier plus the local view of its ack deadline.
"""

import base64
import binascii
import json
from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import Any, Dict, Optional, Protocol, Type, TypeVar, runtime_checkable

from pydantic import BaseModel, ConfigDict, PrivateAttr, ValidationError
from pydantic.alias_generators import to_camel

from gcp_rest.errors import SerializationError

T = TypeVar("T")


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class DeliveryState(str, Enum):
    """Where a single delivery attempt stands."""

    DELIVERED = "delivered"
    ACKNOWLEDGED = "acknowledged"
    EXPIRED = "expired"


class EncodedMessage(BaseModel):
    """Outbound message envelope."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    data: str = ""
    attributes: Optional[Dict[str, str]] = None
    ordering_key: Optional[str] = None

    @classmethod
    def from_bytes(
        cls,
        payload: bytes,
        attributes: Optional[Dict[str, str]] = None,
        ordering_key: Optional[str] = None,
    ) -> "EncodedMessage":
        """Wrap raw bytes."""
        return cls(
            data=base64.b64encode(payload).decode("ascii"),
            attributes=attributes,
            ordering_key=ordering_key,
        )

    @classmethod
    def from_json(
        cls,
        payload: Any,
        attributes: Optional[Dict[str, str]] = None,
        ordering_key: Optional[str] = None,
    ) -> "EncodedMessage":
        """
        Wrap a JSON payload (dict, list or pydantic model).

        Raises:
            SerializationError: If the payload cannot be represented as JSON
        """
        try:
            if isinstance(payload, BaseModel):
                encoded = payload.model_dump_json().encode("utf-8")
            else:
                encoded = json.dumps(payload).encode("utf-8")
        except (TypeError, ValueError) as e:
            raise SerializationError(
                f"Failed to serialize message payload of type {type(payload).__name__}: {e}"
            ) from e
        return cls.from_bytes(encoded, attributes=attributes, ordering_key=ordering_key)

    @classmethod
    def coerce(
        cls,
        message: Any,
        attributes: Optional[Dict[str, str]] = None,
        ordering_key: Optional[str] = None,
    ) -> "EncodedMessage":
        """Turn whatever the caller handed to publish() into an envelope."""
        if isinstance(message, EncodedMessage):
            return message
        if isinstance(message, JsonMessage):
            return message.to_pubsub_message(attributes, ordering_key)
        if isinstance(message, (bytes, bytearray)):
            return cls.from_bytes(bytes(message), attributes, ordering_key)
        if isinstance(message, str):
            return cls.from_bytes(message.encode("utf-8"), attributes, ordering_key)
        return cls.from_json(message, attributes, ordering_key)

    def decode(self) -> bytes:
        """
        Return the raw payload bytes.

        Raises:
            SerializationError: If data is not valid base64
        """
        try:
            return base64.b64decode(self.data, validate=True)
        except (binascii.Error, ValueError) as e:
            raise SerializationError(f"Message data is not valid base64: {e}") from e

    def decode_json(self) -> Any:
        """
        Return the payload parsed as JSON.

        Raises:
            SerializationError: If data is not base64 encoded JSON
        """
        raw = self.decode()
        try:
            return json.loads(raw.decode("utf-8"))
        except (UnicodeDecodeError, json.JSONDecodeError) as e:
            raise SerializationError(
                f"Failed to parse JSON from message data: {e}"
            ) from e


class PubsubMessage(EncodedMessage):
    """Message as returned by the service."""

    message_id: str = ""
    publish_time: Optional[datetime] = None


@runtime_checkable
class FromPubSubMessage(Protocol):
    """Payload types that can be built from a message envelope."""

    @classmethod
    def from_pubsub_message(cls, message: PubsubMessage) -> Any: ...


class JsonMessage(BaseModel):
    """
    Base class for JSON message bodies.

    Subclass it with your own fields to publish and pull typed payloads:

        class OrderPlaced(JsonMessage):
            order_id: str

        await topic.publish(OrderPlaced(order_id="42"))
        pairs = await subscription.get_messages(OrderPlaced)
    """

    @classmethod
    def from_pubsub_message(cls, message: PubsubMessage):
        raw = message.decode()
        try:
            return cls.model_validate_json(raw)
        except ValidationError as e:
            raise SerializationError(
                f"Message {message.message_id} is not a valid {cls.__name__}: {e}",
                body=raw.decode("utf-8", errors="replace"),
            ) from e

    def to_pubsub_message(
        self,
        attributes: Optional[Dict[str, str]] = None,
        ordering_key: Optional[str] = None,
    ) -> EncodedMessage:
        return EncodedMessage.from_bytes(
            self.model_dump_json().encode("utf-8"),
            attributes=attributes,
            ordering_key=ordering_key,
        )


class ReceivedMessage(BaseModel):
    """A pulled message plus its acknowledgement bookkeeping."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    ack_id: str
    message: PubsubMessage
    delivery_attempt: int = 0

    _ack_deadline: Optional[datetime] = PrivateAttr(default=None)
    _acknowledged: bool = PrivateAttr(default=False)

    @property
    def ack_deadline(self) -> Optional[datetime]:
        return self._ack_deadline

    def track_deadline(self, seconds: int, now: Optional[datetime] = None) -> None:
        """Set the ack deadline to now + seconds."""
        self._ack_deadline = (now or _utcnow()) + timedelta(seconds=seconds)

    def mark_acknowledged(self) -> None:
        self._acknowledged = True

    def state(self, now: Optional[datetime] = None) -> DeliveryState:
        if self._acknowledged:
            return DeliveryState.ACKNOWLEDGED
        if self._ack_deadline is not None and (now or _utcnow()) >= self._ack_deadline:
            return DeliveryState.EXPIRED
        return DeliveryState.DELIVERED

    def decode_as(self, message_type: Type[T]) -> T:
        """
        Build a typed payload from this message.

        Raises:
            SerializationError: If the payload does not fit message_type
            TypeError: If message_type has no from_pubsub_message classmethod
        """
        if not isinstance(message_type, FromPubSubMessage):
            raise TypeError(
                f"{getattr(message_type, '__name__', message_type)!r} does not "
                f"implement from_pubsub_message"
            )
        try:
            return message_type.from_pubsub_message(self.message)
        except SerializationError:
            raise
        except (TypeError, ValueError) as e:
            raise SerializationError(
                f"Message {self.message.message_id} could not be decoded as "
                f"{message_type.__name__}: {e}"
            ) from e
