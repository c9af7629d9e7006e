"""
Cloud Storage object metadata records.

These are read-only projections of what the JSON API returns. Only bucket
and name are guaranteed; the service omits fields that do not apply.
"""

from datetime import datetime
from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class StorageModel(BaseModel):
    """Base model using the camelCase field names of the JSON API."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class ProjectTeam(StorageModel):
    project_number: Optional[str] = None
    team: Optional[str] = None


class ObjectOwner(StorageModel):
    entity: Optional[str] = None
    entity_id: Optional[str] = None


class ObjectCustomerEncryption(StorageModel):
    encryption_algorithm: Optional[str] = None
    key_sha256: Optional[str] = None


class ObjectAccessControl(StorageModel):
    kind: Optional[str] = None
    id: Optional[str] = None
    self_link: Optional[str] = None
    bucket: Optional[str] = None
    object: Optional[str] = None
    # int64 values arrive as JSON strings
    generation: Optional[int] = None
    entity: Optional[str] = None
    role: Optional[str] = None
    email: Optional[str] = None
    entity_id: Optional[str] = None
    domain: Optional[str] = None
    project_team: Optional[ProjectTeam] = None
    etag: Optional[str] = None


class ObjectResource(StorageModel):
    bucket: str
    name: str
    kind: Optional[str] = None
    id: Optional[str] = None
    self_link: Optional[str] = None
    generation: Optional[int] = None
    metageneration: Optional[int] = None
    content_type: Optional[str] = None
    time_created: Optional[datetime] = None
    updated: Optional[datetime] = None
    time_deleted: Optional[datetime] = None
    temporary_hold: Optional[bool] = None
    event_based_hold: Optional[bool] = None
    retention_expiration_time: Optional[datetime] = None
    storage_class: Optional[str] = None
    time_storage_class_updated: Optional[datetime] = None
    size: Optional[int] = None
    md5_hash: Optional[str] = None
    media_link: Optional[str] = None
    content_encoding: Optional[str] = None
    content_disposition: Optional[str] = None
    content_language: Optional[str] = None
    cache_control: Optional[str] = None
    metadata: Optional[Dict[str, str]] = None
    acl: Optional[List[ObjectAccessControl]] = None
    owner: Optional[ObjectOwner] = None
    # to_camel would turn this into crc32C
    crc32c: Optional[str] = Field(default=None, alias="crc32c")
    component_count: Optional[int] = None
    etag: Optional[str] = None
    customer_encryption: Optional[ObjectCustomerEncryption] = None
    kms_key_name: Optional[str] = None
