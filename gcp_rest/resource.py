"""
Base class for resource handles (topics, subscriptions, objects).
"""

from typing import TYPE_CHECKING, Any

from pydantic import BaseModel, ConfigDict, PrivateAttr
from pydantic.alias_generators import to_camel

from gcp_rest.errors import NotBoundError

if TYPE_CHECKING:
    from gcp_rest.client import Client


class Resource(BaseModel):
    """
    Identity of a remote resource plus the Client used to act on it.

    The client reference is private and never serialized, so a handle built
    with model_validate() (e.g. from a stored JSON document) starts unbound.
    Client factories always return bound handles.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    _client: Any = PrivateAttr(default=None)

    def bind(self, client: "Client"):
        """Attach a client and return the handle."""
        self._client = client
        return self

    @property
    def is_bound(self) -> bool:
        return self._client is not None

    def _require_client(self) -> "Client":
        """Return the bound client or fail before any request is made."""
        if self._client is None:
            raise NotBoundError(repr(self))
        return self._client

    def _consume(self) -> None:
        """Detach the client once the remote resource is gone."""
        self._client = None
