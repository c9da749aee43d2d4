"""
Image hosting: Cloudinary in production and an in-memory double for tests.
"""

from __future__ import annotations

import base64
import logging
import os
import uuid
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Protocol

import cloudinary
import cloudinary.exceptions
import cloudinary.uploader

logger = logging.getLogger(__name__)

ALLOWED_IMAGE_TYPES = ("jpeg", "jpg", "png", "gif", "webp")


class MediaError(Exception):
    """The media host rejected or failed a request."""


class InvalidImageError(ValueError):
    """An uploaded file is not an acceptable image."""


@dataclass
class UploadedImage:
    """An image file read from a multipart request."""

    filename: str
    content_type: str
    data: bytes

    @property
    def extension(self) -> str:
        return os.path.splitext(self.filename)[1].lower().lstrip(".")

    def as_data_uri(self) -> str:
        b64 = base64.b64encode(self.data).decode("ascii")
        return f"data:{self.content_type};base64,{b64}"


def file_too_large(max_bytes: int) -> InvalidImageError:
    return InvalidImageError(f"File too large, the limit is {max_bytes // (1024 * 1024)}MB")


def validate_image(image: UploadedImage, max_bytes: int) -> None:
    subtype = image.content_type.lower().split("/")[-1] if image.content_type else ""
    if (
        image.extension not in ALLOWED_IMAGE_TYPES
        or not image.content_type.lower().startswith("image/")
        or subtype not in ALLOWED_IMAGE_TYPES
    ):
        raise InvalidImageError("Only image files are allowed!")
    if len(image.data) > max_bytes:
        raise file_too_large(max_bytes)
    if not image.data:
        raise InvalidImageError("Uploaded file is empty")


class MediaClient(Protocol):
    """Operations the API needs from the media host."""

    def upload(self, image: UploadedImage, folder: str) -> Dict[str, str]:
        ...

    def destroy(self, public_id: str) -> None:
        ...


@dataclass
class InMemoryMediaClient:
    """Test double for media hosting."""

    base_url: str = "https://media.example.test"
    assets: Dict[str, UploadedImage] = field(default_factory=dict)
    destroyed: List[str] = field(default_factory=list)

    def upload(self, image: UploadedImage, folder: str) -> Dict[str, str]:
        public_id = f"{folder}/{uuid.uuid4().hex}"
        self.assets[public_id] = image
        return {
            "url": f"{self.base_url}/{public_id}.{image.extension or 'bin'}",
            "public_id": public_id,
        }

    def destroy(self, public_id: str) -> None:
        self.assets.pop(public_id, None)
        self.destroyed.append(public_id)


@dataclass
class CloudinaryMediaClient:
    """Cloudinary-backed media host."""

    cloud_name: str
    api_key: str
    api_secret: str

    def __post_init__(self):
        cloudinary.config(
            cloud_name=self.cloud_name,
            api_key=self.api_key,
            api_secret=self.api_secret,
            secure=True,
        )

    def upload(self, image: UploadedImage, folder: str) -> Dict[str, str]:
        try:
            result = cloudinary.uploader.upload(
                image.as_data_uri(),
                folder=folder,
                resource_type="auto",
                transformation=[
                    {"quality": "auto:good"},
                    {"fetch_format": "auto"},
                ],
            )
        except cloudinary.exceptions.Error as exc:
            raise MediaError(f"Error uploading to Cloudinary: {exc}") from exc
        return {"url": result["secure_url"], "public_id": result["public_id"]}

    def destroy(self, public_id: str) -> None:
        try:
            cloudinary.uploader.destroy(public_id)
        except cloudinary.exceptions.Error as exc:
            raise MediaError(f"Error deleting from Cloudinary: {exc}") from exc


def upload_image(
    media: MediaClient, image: UploadedImage, folder: str, max_bytes: int
) -> Dict[str, str]:
    validate_image(image, max_bytes)
    asset = media.upload(image, folder)
    logger.info("Uploaded %s to %s", image.filename, asset["public_id"])
    return asset


def discard_asset(media: MediaClient, asset: Optional[dict]) -> bool:
    """Best-effort removal of a hosted image; failures are only logged."""
    public_id = (asset or {}).get("public_id")
    if not public_id:
        return False
    try:
        media.destroy(public_id)
    except MediaError:
        logger.exception("Error deleting %s from the media host", public_id)
        return False
    return True
