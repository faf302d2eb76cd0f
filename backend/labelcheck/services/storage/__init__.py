from .object_store import (
    ObjectStore,
    LocalObjectStore,
    S3ObjectStore,
    StoredObject,
    UploadUrl,
    build_object_store,
    build_object_key,
    content_type_for
)

__all__ = [
    "ObjectStore",
    "LocalObjectStore",
    "S3ObjectStore",
    "StoredObject",
    "UploadUrl",
    "build_object_store",
    "build_object_key",
    "content_type_for",
]
