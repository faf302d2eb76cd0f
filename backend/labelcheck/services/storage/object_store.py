"""
Panel Object Store

Uploaded label panels live in an object store; the database only keeps
the blob URL. Two backends share one interface:

- LocalObjectStore: files under LOCAL_STORAGE_PATH (development, tests)
- S3ObjectStore: an S3 bucket through boto3, with pre-signed PUT URLs
  for direct browser uploads

Keys are namespaced as <owner_id>/<epoch_millis>_<sanitized_file_name>.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path
from typing import BinaryIO, Optional, Union
from urllib.parse import urlparse
from urllib.request import url2pathname
import logging
import re
import shutil
import time

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from labelcheck.exceptions.check_exceptions import StorageException

logger = logging.getLogger(__name__)


MIME_TYPES = {
    "jpg": "image/jpeg",
    "jpeg": "image/jpeg",
    "png": "image/png",
    "gif": "image/gif",
    "webp": "image/webp",
    "pdf": "application/pdf",
}


def content_type_for(file_name: str) -> str:
    ext = file_name.lower().rsplit(".", 1)[-1] if "." in file_name else ""
    return MIME_TYPES.get(ext, "application/octet-stream")


def build_object_key(owner_id: str, file_name: str, now_ms: Optional[int] = None) -> str:
    """
    Examples:
        build_object_key("u1", "front label.png", 1700000000000)
        → "u1/1700000000000_front_label.png"
    """
    timestamp = now_ms if now_ms is not None else int(time.time() * 1000)
    sanitized = re.sub(r"[^a-zA-Z0-9.-]", "_", file_name)
    return f"{owner_id}/{timestamp}_{sanitized}"


@dataclass
class StoredObject:
    data: bytes
    content_type: str


@dataclass
class UploadUrl:
    sas_url: str
    blob_url: str
    blob_name: str
    content_type: str


class ObjectStore(ABC):

    @abstractmethod
    def put(self, data: Union[bytes, BinaryIO], key: str, content_type: str) -> str:
        """Store bytes or a readable stream under key; return the blob URL"""

    @abstractmethod
    def get(self, blob_url: str) -> StoredObject:
        """Fetch the object behind a blob URL"""

    @abstractmethod
    def upload_url(self, key: str, ttl_seconds: int, content_type: str) -> UploadUrl:
        """Short-lived create+write URL for a direct client upload"""


class LocalObjectStore(ObjectStore):
    """
    Filesystem store. Blob URLs are file:// URIs of the stored files.
    The "pre-signed" URL is the same URI: anyone who can reach the
    filesystem can write there, so this is only meant for local use.
    """

    def __init__(self, root: Union[str, Path]):
        self.root = Path(root).resolve()
        self.root.mkdir(parents=True, exist_ok=True)

    def _path_for(self, key: str) -> Path:
        path = (self.root / key).resolve()
        if self.root not in path.parents:
            raise StorageException(f"Object key escapes the storage root: {key}")
        return path

    def _path_from_url(self, blob_url: str) -> Path:
        parsed = urlparse(blob_url)
        if parsed.scheme != "file":
            raise StorageException(f"Not a local blob URL: {blob_url}")
        # as_uri() percent-encodes spaces and non-ASCII characters
        path = Path(url2pathname(parsed.path)).resolve()
        if self.root not in path.parents:
            raise StorageException(f"Blob URL outside the storage root: {blob_url}")
        return path

    def put(self, data: Union[bytes, BinaryIO], key: str, content_type: str) -> str:
        path = self._path_for(key)
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            with open(path, "wb") as f:
                if isinstance(data, (bytes, bytearray)):
                    f.write(data)
                else:
                    shutil.copyfileobj(data, f)
        except OSError as e:
            raise StorageException(f"Failed to write {key}: {e}")

        logger.info(f"Stored {key} ({content_type}) locally")
        return path.as_uri()

    def get(self, blob_url: str) -> StoredObject:
        path = self._path_from_url(blob_url)
        try:
            data = path.read_bytes()
        except OSError as e:
            raise StorageException(f"Failed to read {blob_url}: {e}")

        return StoredObject(data=data, content_type=content_type_for(path.name))

    def upload_url(self, key: str, ttl_seconds: int, content_type: str) -> UploadUrl:
        path = self._path_for(key)
        path.parent.mkdir(parents=True, exist_ok=True)
        uri = path.as_uri()
        return UploadUrl(sas_url=uri, blob_url=uri, blob_name=key, content_type=content_type)


class S3ObjectStore(ObjectStore):
    """
    S3 bucket store. Blob URLs are virtual-hosted style HTTPS URLs; the
    object key is the URL path.
    """

    def __init__(self, bucket_name: str, region_name: str = "us-east-1", endpoint_url: Optional[str] = None, client=None):
        if not bucket_name:
            raise StorageException("S3_BUCKET_NAME is not configured")

        self.bucket_name = bucket_name
        self.region_name = region_name
        self.endpoint_url = endpoint_url
        self.client = client or boto3.client("s3", region_name=region_name, endpoint_url=endpoint_url)

    def _url_for(self, key: str) -> str:
        if self.endpoint_url:
            return f"{self.endpoint_url.rstrip('/')}/{self.bucket_name}/{key}"
        return f"https://{self.bucket_name}.s3.{self.region_name}.amazonaws.com/{key}"

    def _key_from_url(self, blob_url: str) -> str:
        path = urlparse(blob_url).path.lstrip("/")
        # Path-style URLs (custom endpoints) carry the bucket as first segment
        if self.endpoint_url and path.startswith(f"{self.bucket_name}/"):
            path = path[len(self.bucket_name) + 1:]
        return path

    def put(self, data: Union[bytes, BinaryIO], key: str, content_type: str) -> str:
        try:
            if isinstance(data, (bytes, bytearray)):
                self.client.put_object(Bucket=self.bucket_name, Key=key, Body=data, ContentType=content_type)
            else:
                # upload_fileobj streams in parts, memory stays bounded
                self.client.upload_fileobj(data, self.bucket_name, key, ExtraArgs={"ContentType": content_type})
        except (BotoCoreError, ClientError) as e:
            raise StorageException(f"Failed to upload {key}: {e}")

        logger.info(f"Stored {key} ({content_type}) in s3://{self.bucket_name}")
        return self._url_for(key)

    def get(self, blob_url: str) -> StoredObject:
        key = self._key_from_url(blob_url)
        try:
            response = self.client.get_object(Bucket=self.bucket_name, Key=key)
            data = response["Body"].read()
        except (BotoCoreError, ClientError) as e:
            raise StorageException(f"Failed to download {key}: {e}")

        return StoredObject(data=data, content_type=response.get("ContentType") or content_type_for(key))

    def upload_url(self, key: str, ttl_seconds: int, content_type: str) -> UploadUrl:
        try:
            sas_url = self.client.generate_presigned_url(
                "put_object",
                Params={"Bucket": self.bucket_name, "Key": key, "ContentType": content_type},
                ExpiresIn=ttl_seconds,
            )
        except (BotoCoreError, ClientError) as e:
            raise StorageException(f"Failed to sign upload URL for {key}: {e}")

        return UploadUrl(sas_url=sas_url, blob_url=self._url_for(key), blob_name=key, content_type=content_type)


def build_object_store(settings) -> ObjectStore:

    backend = (settings.STORAGE_BACKEND or "local").strip().lower()
    if backend == "local":
        return LocalObjectStore(settings.LOCAL_STORAGE_PATH)
    if backend == "s3":
        return S3ObjectStore(
            bucket_name=settings.S3_BUCKET_NAME,
            region_name=settings.S3_REGION_NAME,
            endpoint_url=settings.S3_ENDPOINT_URL,
        )

    raise ValueError(f"Unknown storage backend: {settings.STORAGE_BACKEND}. Use 'local' or 's3'.")
