"""
Cloud Storage object handle: metadata, copy, destroy.
"""

from typing import Any

from gcp_rest.logging import get_logger, log_info
from gcp_rest.models.storage import ObjectResource
from gcp_rest.resource import Resource

logger = get_logger(__name__)


class Object(Resource):
    """A storage object, identified by bucket and object name.

    Names are appended to the URL verbatim; pass identifiers that are already
    valid path segments.
    """

    bucket: str
    name: str

    @property
    def path(self) -> str:
        return f"b/{self.bucket}/o/{self.name}"

    @property
    def gs_uri(self) -> str:
        return f"gs://{self.bucket}/{self.name}"

    async def metadata(self) -> ObjectResource:
        """Fetch the object's metadata."""
        client = self._require_client()
        return await client.request(
            "GET",
            client.storage_url(self.path),
            result_type=ObjectResource,
            resource=self.gs_uri,
        )

    async def copy(self, destination: "Object", data: Any = None) -> ObjectResource:
        """
        Copy this object to destination.

        Args:
            destination: Target bucket/name; it only supplies identity and may be unbound
            data: Optional object metadata to apply to the copy (dict or pydantic model)

        Returns:
            ObjectResource describing the new destination object

        Raises:
            NotFoundError: If the source object (or destination bucket) does not exist
        """
        client = self._require_client()
        uri = client.storage_url(f"{self.path}/copyTo/{destination.path}")
        resource = await client.request(
            "POST", uri, data, ObjectResource, resource=self.gs_uri
        )
        log_info(
            f"Copied {self.gs_uri} to {destination.gs_uri}",
            bucket=self.bucket,
            destination_bucket=destination.bucket,
        )
        return resource

    async def destroy(self) -> None:
        """
        Delete the object.

        The handle is unbound only after the service confirmed the delete; a
        failed call (including NotFoundError) leaves it bound.
        """
        client = self._require_client()
        await client.request(
            "DELETE", client.storage_url(self.path), resource=self.gs_uri
        )
        self._consume()
        log_info(f"Deleted {self.gs_uri}", bucket=self.bucket)
