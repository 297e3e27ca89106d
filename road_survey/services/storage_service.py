import base64
import binascii
import logging
import re
import time
import uuid
from dataclasses import dataclass
from pathlib import Path

import boto3
from botocore.exceptions import BotoCoreError, ClientError
from fastapi import Request

from road_survey.utils.exceptions import UpstreamFailure, UploadFailed, ValidationError

logger = logging.getLogger(__name__)

CAPTURE_FOLDER = "road_damage"
PROFILE_FOLDER = "profile_photos"

_DATA_URI = re.compile(r"^data:(?P<content_type>[\w/+.-]+)?(;[\w=-]+)*;base64,(?P<data>.*)$", re.DOTALL)

_EXTENSIONS = {
    "image/jpeg": ".jpg",
    "image/jpg": ".jpg",
    "image/png": ".png",
    "image/webp": ".webp",
    "image/gif": ".gif",
    "image/heic": ".heic",
}
_ALLOWED_SUFFIXES = set(_EXTENSIONS.values()) | {".jpeg"}
_UNSAFE_KEY_CHARS = re.compile(r"[^A-Za-z0-9_-]")


@dataclass(frozen=True)
class BlobRef:
    id: str
    url: str


def _join_path(*segments: str) -> str:
    cleaned = [segment.strip("/") for segment in segments if segment and segment.strip("/")]
    return "/".join(cleaned)


def extension_for(content_type: str | None, default: str = ".jpg") -> str:
    return _EXTENSIONS.get((content_type or "").lower(), default)


def decode_image_data(image_data: str, max_bytes: int | None = None) -> tuple[bytes, str]:
    """Decode a base64 data URI (or bare base64 text) into bytes and a content type."""
    content_type = "image/jpeg"
    encoded = image_data.strip()
    match = _DATA_URI.match(encoded)
    if match:
        content_type = match.group("content_type") or content_type
        encoded = match.group("data")

    try:
        payload = base64.b64decode("".join(encoded.split()), validate=True)
    except (binascii.Error, ValueError) as exc:
        raise ValidationError("Invalid image data") from exc
    if not payload:
        raise ValidationError("Invalid image data")
    if max_bytes is not None and len(payload) > max_bytes:
        raise ValidationError("Image too large")
    return payload, content_type


def capture_filename(content_type: str | None) -> str:
    return f"photo_{int(time.time() * 1000)}_{uuid.uuid4().hex[:8]}{extension_for(content_type)}"


def profile_filename(surveyor_id: str, original_name: str | None, content_type: str | None) -> str:
    """Object name for a profile photo; only image extensions and key-safe id characters survive."""
    extension = Path(original_name or "").suffix.lower()
    if extension not in _ALLOWED_SUFFIXES:
        extension = extension_for(content_type)
    safe_id = _UNSAFE_KEY_CHARS.sub("_", surveyor_id.strip()) or "surveyor"
    return f"{safe_id}_{uuid.uuid4().hex[:8]}{extension}"


class BlobStorage:
    """S3-compatible object store (DigitalOcean Spaces, AWS S3, MinIO)."""

    def __init__(self, client, bucket: str, cdn_url: str, base_path: str = "") -> None:
        self.client = client
        self.bucket = bucket
        self.cdn_url = cdn_url.rstrip("/")
        self.base_path = base_path.strip("/")

    @classmethod
    def from_settings(cls, settings) -> "BlobStorage":
        session = boto3.session.Session()
        client = session.client(
            "s3",
            region_name=settings.SPACES_REGION,
            endpoint_url=settings.SPACES_ENDPOINT,
            aws_access_key_id=settings.SPACES_KEY,
            aws_secret_access_key=settings.SPACES_SECRET,
        )
        return cls(client, settings.SPACES_NAME, settings.SPACES_CDN_URL, settings.SPACES_BASE_PATH)

    def build_key(self, folder: str, filename: str) -> str:
        return _join_path(self.base_path, folder, filename)

    def url_for(self, key: str) -> str:
        return f"{self.cdn_url}/{key}"

    def upload(self, payload: bytes, folder: str, filename: str, content_type: str | None = None) -> BlobRef:
        key = self.build_key(folder, filename)
        extra_args = {"ACL": "public-read"}
        if content_type:
            extra_args["ContentType"] = content_type

        try:
            self.client.put_object(
                Bucket=self.bucket,
                Key=key,
                Body=payload,
                **extra_args
            )
        except (BotoCoreError, ClientError) as exc:
            raise UploadFailed(f"Upload of {key} failed: {exc}") from exc

        logger.info("Uploaded blob %s (%s bytes)", key, len(payload))
        return BlobRef(id=key, url=self.url_for(key))

    def delete(self, blob_id: str) -> None:
        try:
            self.client.delete_object(Bucket=self.bucket, Key=blob_id)
        except (BotoCoreError, ClientError) as exc:
            raise UpstreamFailure(f"Delete of {blob_id} failed: {exc}") from exc
        logger.info("Deleted blob %s", blob_id)


def get_blob_storage(request: Request) -> BlobStorage:
    return request.app.state.blob_storage
