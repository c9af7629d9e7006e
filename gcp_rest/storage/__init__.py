"""
Google Cloud Storage REST handles.
"""

from gcp_rest.models.storage import (
    ObjectAccessControl,
    ObjectCustomerEncryption,
    ObjectOwner,
    ObjectResource,
    ProjectTeam,
)
from gcp_rest.storage.object import Object

__all__ = [
    "Object",
    "ObjectAccessControl",
    "ObjectCustomerEncryption",
    "ObjectOwner",
    "ObjectResource",
    "ProjectTeam",
]
