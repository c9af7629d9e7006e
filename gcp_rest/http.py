"""
Authenticated request building and execution.

build_request() turns (method, uri, body) into a PreparedRequest carrying a
bearer token; execute() sends it over the Client's shared aiohttp session
and classifies the outcome into a decoded model or a typed error.
"""

import asyncio
import json
import time
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Dict, Optional, Type, TypeVar

import aiohttp
from pydantic import BaseModel, ValidationError

from gcp_rest.errors import (
    NotFoundError,
    RemoteServiceError,
    SerializationError,
    TransportError,
)
from gcp_rest.logging import get_logger, log_debug, log_warning

if TYPE_CHECKING:
    from gcp_rest.client import Client

logger = get_logger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)

JSON_CONTENT_TYPE = "application/json"


@dataclass
class PreparedRequest:
    """A fully formed HTTP request, ready to be sent."""

    method: str
    url: str
    headers: Dict[str, str] = field(default_factory=dict)
    data: Optional[bytes] = None


def encode_body(body: Any) -> bytes:
    """Serialize a request body to JSON bytes.

    Raises:
        SerializationError: If the body cannot be represented as JSON
    """
    try:
        if isinstance(body, BaseModel):
            return body.model_dump_json(by_alias=True, exclude_none=True).encode(
                "utf-8"
            )
        return json.dumps(body).encode("utf-8")
    except (TypeError, ValueError) as e:
        raise SerializationError(
            f"Failed to serialize request body of type {type(body).__name__}: {e}"
        ) from e


def decode_body(text: str, result_type: Type[ModelT]) -> ModelT:
    """Decode a JSON response body into result_type.

    Raises:
        SerializationError: If the body is not JSON or does not match the schema
    """
    if not text.strip():
        raise SerializationError(
            f"Empty response body, expected {result_type.__name__}", body=text
        )
    try:
        return result_type.model_validate_json(text)
    except ValidationError as e:
        raise SerializationError(
            f"Malformed {result_type.__name__} response: {e}", body=text
        ) from e


def _error_status(text: str) -> str:
    """Pull the canonical status (e.g. INVALID_ARGUMENT) out of a Google error body."""
    try:
        payload = json.loads(text)
    except ValueError:
        return ""
    if isinstance(payload, dict) and isinstance(payload.get("error"), dict):
        status = payload["error"].get("status")
        return status if isinstance(status, str) else ""
    return ""


async def build_request(
    client: "Client", method: str, uri: str, body: Any = None
) -> PreparedRequest:
    """
    Build an authenticated request.

    Args:
        client: Client supplying the token provider
        method: HTTP method (GET, POST, PUT, DELETE)
        uri: Absolute request URI
        body: Optional JSON-serializable body (dict, list or pydantic model)

    Returns:
        PreparedRequest with Authorization and, when a body is sent, Content-Type headers

    Raises:
        SerializationError: If the body cannot be serialized
    """
    # Encode before asking for a token so a bad body never costs a refresh
    data = encode_body(body) if body is not None else None

    token = await client.token_provider.token()
    headers = {"Authorization": f"Bearer {token}"}
    if data:
        headers["Content-Type"] = JSON_CONTENT_TYPE

    return PreparedRequest(method=method.upper(), url=uri, headers=headers, data=data)


async def execute(
    client: "Client",
    request: PreparedRequest,
    result_type: Optional[Type[ModelT]] = None,
    resource: str = "",
    timeout: Optional[float] = None,
    long_poll: bool = False,
) -> Optional[ModelT]:
    """
    Perform a request and classify the response.

    Args:
        client: Client owning the HTTP session
        request: Request produced by build_request()
        result_type: Pydantic model for a successful body, None to ignore the body
        resource: Resource name reported by NotFoundError
        timeout: Total timeout in seconds for this request only
        long_poll: Ignore the client default timeout; only an explicit timeout applies

    Returns:
        Decoded result_type instance, or None when result_type is None

    Raises:
        TransportError: Connection, TLS or timeout failure
        NotFoundError: HTTP 404
        RemoteServiceError: Any other non-2xx status
        SerializationError: 2xx response that does not decode into result_type
    """
    kwargs: Dict[str, Any] = {"headers": request.headers}
    if request.data is not None:
        kwargs["data"] = request.data
    if timeout is None and not long_poll:
        timeout = client.request_timeout
    if timeout is not None or long_poll:
        # total=None also overrides any timeout set on an injected session
        kwargs["timeout"] = aiohttp.ClientTimeout(total=timeout)

    started = time.monotonic()
    try:
        async with client.session.request(
            request.method, request.url, **kwargs
        ) as response:
            status = response.status
            raw = await response.read()
    except (aiohttp.ClientError, asyncio.TimeoutError, OSError) as e:
        log_warning(
            f"Transport failure on {request.method} {request.url}: {e!r}",
            method=request.method,
            url=request.url,
        )
        raise TransportError(f"{request.method} {request.url} failed", e) from e

    text = raw.decode("utf-8", errors="replace")
    log_debug(
        f"{request.method} {request.url} -> {status}",
        method=request.method,
        url=request.url,
        status=status,
        elapsed_ms=round((time.monotonic() - started) * 1000, 1),
    )

    if status == 404:
        raise NotFoundError(resource or request.url, text)

    if not 200 <= status < 300:
        log_warning(
            f"Remote service error {status} on {request.method} {request.url}",
            method=request.method,
            url=request.url,
            status=status,
        )
        raise RemoteServiceError(status, text, _error_status(text))

    if result_type is None:
        return None
    return decode_body(text, result_type)
