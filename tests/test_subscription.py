"""Tests for the subscription pull/acknowledge cycle."""

from __future__ import annotations

import base64
import json

import pytest

from gcp_rest.auth import StaticTokenProvider
from gcp_rest.client import Client
from gcp_rest.errors import (
    NotBoundError,
    NotFoundError,
    RemoteServiceError,
    SerializationError,
    TransportError,
)
from gcp_rest.models.messages import DeliveryState, JsonMessage, ReceivedMessage
from gcp_rest.pubsub.subscription import Subscription
from tests.conftest import PUBSUB_ROOT, FakeSession, received_message

SUB_URL = f"{PUBSUB_ROOT}/projects/test-project/subscriptions/orders-worker"


class OrderPlaced(JsonMessage):
    order_id: str


def _json_data(payload: object) -> str:
    return base64.b64encode(json.dumps(payload).encode()).decode()


@pytest.fixture
def subscription(client: Client) -> Subscription:
    return client.subscription("orders-worker", ack_deadline_seconds=30)


class TestPull:
    @pytest.mark.asyncio
    async def test_pull_request_shape(
        self, subscription: Subscription, session: FakeSession
    ) -> None:
        session.queue(200, {"receivedMessages": [received_message("ack-1")]})
        messages = await subscription.pull(max_messages=5)

        assert session.last.method == "POST"
        assert session.last.url == f"{SUB_URL}:pull"
        assert session.last.json == {"maxMessages": 5}
        assert [m.ack_id for m in messages] == ["ack-1"]

    @pytest.mark.asyncio
    async def test_empty_subscription_returns_empty_list(
        self, subscription: Subscription, session: FakeSession
    ) -> None:
        session.queue(200, {})
        assert await subscription.pull() == []

    @pytest.mark.asyncio
    async def test_default_max_messages_and_return_immediately(
        self, subscription: Subscription, session: FakeSession
    ) -> None:
        session.queue(200, {})
        await subscription.pull(return_immediately=True)
        assert session.last.json == {"maxMessages": 100, "returnImmediately": True}

    @pytest.mark.asyncio
    async def test_messages_get_ack_deadline(
        self, subscription: Subscription, session: FakeSession
    ) -> None:
        session.queue(200, {"receivedMessages": [received_message("ack-1")]})
        (message,) = await subscription.pull()
        assert message.ack_deadline is not None
        assert message.state() is DeliveryState.DELIVERED

    @pytest.mark.asyncio
    async def test_timeout_applies_to_pull_only(
        self, subscription: Subscription, session: FakeSession
    ) -> None:
        session.queue(200, {})
        await subscription.pull(timeout=20)
        assert session.last.timeout.total == 20

        session.queue(200, {})
        await subscription.acknowledge(["ack-1"])
        assert session.last.timeout is None

    @pytest.mark.asyncio
    async def test_client_default_timeout_does_not_cut_long_poll(
        self, session: FakeSession
    ) -> None:
        client = Client(
            "test-project",
            StaticTokenProvider("test-token"),
            session=session,
            pubsub_root=PUBSUB_ROOT,
            request_timeout=5,
        )
        subscription = client.subscription("orders-worker")

        session.queue(200, {})
        await subscription.pull()
        assert session.last.timeout.total is None

        session.queue(200, {})
        await subscription.acknowledge(["ack-1"])
        assert session.last.timeout.total == 5

    @pytest.mark.asyncio
    async def test_pull_errors_propagate(
        self, subscription: Subscription, session: FakeSession
    ) -> None:
        session.queue(404)
        with pytest.raises(NotFoundError) as exc_info:
            await subscription.pull()
        assert exc_info.value.resource == subscription.name

    @pytest.mark.asyncio
    async def test_redelivery_reports_attempt(
        self, subscription: Subscription, session: FakeSession
    ) -> None:
        session.queue(200, {"receivedMessages": [received_message("ack-2", attempt=2)]})
        (message,) = await subscription.pull()
        assert message.delivery_attempt == 2


class TestGetMessages:
    @pytest.mark.asyncio
    async def test_decodes_and_keeps_bad_payloads(
        self, subscription: Subscription, session: FakeSession
    ) -> None:
        session.queue(
            200,
            {
                "receivedMessages": [
                    received_message("ack-1", data=_json_data({"order_id": "42"})),
                    received_message("ack-2", data=_json_data({"nope": True})),
                ]
            },
        )
        results = await subscription.get_messages(OrderPlaced)

        (first, first_received), (second, second_received) = results
        assert first == OrderPlaced(order_id="42")
        assert first_received.ack_id == "ack-1"
        assert isinstance(second, SerializationError)
        assert second_received.ack_id == "ack-2"


class TestAcknowledge:
    @pytest.mark.asyncio
    async def test_acknowledge_request(
        self, subscription: Subscription, session: FakeSession
    ) -> None:
        session.queue(200, {"receivedMessages": [received_message("ack-1")]})
        messages = await subscription.pull()

        session.queue(200, {})
        await subscription.acknowledge(messages)

        assert session.last.url == f"{SUB_URL}:acknowledge"
        assert session.last.json == {"ackIds": ["ack-1"]}
        assert messages[0].state() is DeliveryState.ACKNOWLEDGED

    @pytest.mark.asyncio
    async def test_single_message_and_duplicate_ids(
        self, subscription: Subscription, session: FakeSession
    ) -> None:
        message = ReceivedMessage.model_validate(received_message("ack-1"))
        session.queue(200, {})
        await subscription.acknowledge(message)
        assert session.last.json == {"ackIds": ["ack-1"]}

        session.queue(200, {})
        await subscription.acknowledge(["ack-2", "ack-3", "ack-2"])
        assert session.last.json == {"ackIds": ["ack-2", "ack-3"]}

    @pytest.mark.asyncio
    async def test_acknowledge_twice_is_idempotent(
        self, subscription: Subscription, session: FakeSession
    ) -> None:
        message = ReceivedMessage.model_validate(received_message("ack-1"))
        session.queue(200, {})
        session.queue(404, {"error": {"code": 404, "status": "NOT_FOUND"}})

        await subscription.acknowledge([message])
        await subscription.acknowledge([message])

        assert len(session.requests) == 2
        assert message.state() is DeliveryState.ACKNOWLEDGED

    @pytest.mark.asyncio
    async def test_empty_acknowledge_makes_no_request(
        self, subscription: Subscription, session: FakeSession
    ) -> None:
        await subscription.acknowledge([])
        assert session.requests == []

    @pytest.mark.asyncio
    async def test_other_errors_are_not_swallowed(
        self, subscription: Subscription, session: FakeSession
    ) -> None:
        message = ReceivedMessage.model_validate(received_message("ack-1"))
        session.queue(500, "internal")
        with pytest.raises(RemoteServiceError):
            await subscription.acknowledge([message])
        assert message.state() is DeliveryState.DELIVERED

    @pytest.mark.asyncio
    async def test_transport_errors_are_not_swallowed(
        self, subscription: Subscription, session: FakeSession
    ) -> None:
        session.queue_error(ConnectionResetError("reset"))
        with pytest.raises(TransportError):
            await subscription.acknowledge(["ack-1"])


class TestModifyAckDeadline:
    @pytest.mark.asyncio
    async def test_extend_deadline(
        self, subscription: Subscription, session: FakeSession
    ) -> None:
        message = ReceivedMessage.model_validate(received_message("ack-1"))
        message.track_deadline(1)
        before = message.ack_deadline

        session.queue(200, {})
        await subscription.modify_ack_deadline([message], 120)

        assert session.last.url == f"{SUB_URL}:modifyAckDeadline"
        assert session.last.json == {"ackIds": ["ack-1"], "ackDeadlineSeconds": 120}
        assert message.ack_deadline > before

    @pytest.mark.asyncio
    async def test_nack_expires_immediately(
        self, subscription: Subscription, session: FakeSession
    ) -> None:
        message = ReceivedMessage.model_validate(received_message("ack-1"))
        message.track_deadline(60)

        session.queue(200, {})
        await subscription.nack([message])

        assert session.last.json == {"ackIds": ["ack-1"], "ackDeadlineSeconds": 0}
        assert message.state() is DeliveryState.EXPIRED

    @pytest.mark.asyncio
    @pytest.mark.parametrize("seconds", [-1, 601])
    async def test_out_of_range_deadline(
        self, subscription: Subscription, session: FakeSession, seconds: int
    ) -> None:
        with pytest.raises(ValueError):
            await subscription.modify_ack_deadline(["ack-1"], seconds)
        assert session.requests == []


class TestSubscriptionLifecycle:
    @pytest.mark.asyncio
    async def test_create(self, client: Client, session: FakeSession) -> None:
        subscription = client.subscription("s1", topic="t1", ack_deadline_seconds=20)
        session.queue(
            200,
            {
                "name": "projects/test-project/subscriptions/s1",
                "topic": "projects/test-project/topics/t1",
                "ackDeadlineSeconds": 20,
            },
        )
        resource = await subscription.create()

        assert session.last.method == "PUT"
        assert session.last.json == {
            "topic": "projects/test-project/topics/t1",
            "ackDeadlineSeconds": 20,
        }
        assert resource.ack_deadline_seconds == 20

    @pytest.mark.asyncio
    async def test_create_without_topic(self, subscription: Subscription) -> None:
        with pytest.raises(ValueError):
            await subscription.create()

    @pytest.mark.asyncio
    async def test_get_refreshes_deadline(
        self, subscription: Subscription, session: FakeSession
    ) -> None:
        session.queue(
            200,
            {
                "name": subscription.name,
                "topic": "projects/test-project/topics/orders",
                "ackDeadlineSeconds": 45,
            },
        )
        await subscription.get()
        assert session.last.method == "GET"
        assert session.last.data is None
        assert subscription.ack_deadline_seconds == 45
        assert subscription.topic == "projects/test-project/topics/orders"

    @pytest.mark.asyncio
    async def test_destroy_unbinds(
        self, subscription: Subscription, session: FakeSession
    ) -> None:
        session.queue(200, {})
        await subscription.destroy()
        assert session.last.method == "DELETE"
        assert not subscription.is_bound
        with pytest.raises(NotBoundError):
            await subscription.pull()

    @pytest.mark.asyncio
    async def test_failed_destroy_keeps_handle(
        self, subscription: Subscription, session: FakeSession
    ) -> None:
        session.queue(503, "unavailable")
        with pytest.raises(RemoteServiceError):
            await subscription.destroy()
        assert subscription.is_bound


class TestUnboundSubscription:
    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "call",
        [
            lambda s: s.pull(),
            lambda s: s.acknowledge(["a"]),
            lambda s: s.modify_ack_deadline(["a"], 10),
            lambda s: s.get(),
            lambda s: s.destroy(),
        ],
    )
    async def test_fails_before_any_request(
        self, session: FakeSession, call
    ) -> None:
        subscription = Subscription.model_validate(
            {"name": "projects/p/subscriptions/s", "ackDeadlineSeconds": 10}
        )
        with pytest.raises(NotBoundError):
            await call(subscription)
        assert session.requests == []

    @pytest.mark.asyncio
    async def test_unbound_is_reported_before_bad_deadline(
        self, session: FakeSession
    ) -> None:
        subscription = Subscription.model_validate(
            {"name": "projects/p/subscriptions/s"}
        )
        with pytest.raises(NotBoundError):
            await subscription.modify_ack_deadline(["a"], 1000)
        assert session.requests == []
