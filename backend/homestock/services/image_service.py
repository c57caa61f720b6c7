"""
HomeStock Backend — Image Attachment Service (Cloudinary)
===========================================================

What:  Uploads stock images to Cloudinary and removes them again.
Why:   Images are stored on a media host; the database only keeps the URL.
How:   Validates the payload (content type, size), then calls the Cloudinary
       SDK with this service's own credentials. SDK calls are blocking, so
       they run in Starlette's threadpool to keep the event loop free.
Who:   Built once in the app lifespan; used by StockService.

Public id derivation (used for deletion):
    https://res.cloudinary.com/demo/image/upload/v1712/homestock/abc123.jpg
                                                           └──┬──┘
    filename without extension ─────────────────────────────── abc123
    public id ──────────────────────────────────── homestock/abc123

Failure policy:
    - upload: any media-host failure raises UploadError; the caller fails
      the whole create/update.
    - delete: raises ImageCleanupError; callers log it and carry on.
"""

import io
import logging
from dataclasses import dataclass
from pathlib import PurePosixPath
from typing import Any, Dict, Optional
from urllib.parse import urlparse

import cloudinary.api
import cloudinary.exceptions
import cloudinary.uploader
from fastapi import Request
from starlette.concurrency import run_in_threadpool

from homestock.config import Settings
from homestock.exceptions import ImageCleanupError, UploadError, ValidationError

logger = logging.getLogger(__name__)


@dataclass
class ImagePayload:
    """Raw image bytes read from a multipart upload."""
    content: bytes
    filename: str = "image"
    content_type: Optional[str] = None

    @property
    def size(self) -> int:
        return len(self.content)


class ImageService:
    """
    Cloudinary-backed image storage for stock items.

    Args:
        cloud_name, api_key, api_secret: Cloudinary credential triple
        folder:         Folder every upload is placed in ("homestock")
        max_size:       Largest accepted payload in bytes
    """

    def __init__(
        self,
        cloud_name: str,
        api_key: str,
        api_secret: str,
        folder: str = "homestock",
        max_size: int = 10_485_760,
    ):
        self.folder = folder
        self.max_size = max_size
        # Passed with every call instead of cloudinary.config(), so the
        # process-wide SDK configuration is never touched
        self._credentials: Dict[str, str] = {
            "cloud_name": cloud_name,
            "api_key": api_key,
            "api_secret": api_secret,
        }

    @classmethod
    def from_settings(cls, settings: Settings) -> "ImageService":
        return cls(
            cloud_name=settings.cloudinary_cloud_name,
            api_key=settings.cloudinary_api_key,
            api_secret=settings.cloudinary_api_secret,
            folder=settings.image_folder,
            max_size=settings.max_image_size,
        )

    def validate(self, payload: ImagePayload) -> None:
        """
        Reject payloads the media host would refuse anyway.

        Raises:
            ValidationError: empty file, non-image content type, or too large.
        """
        if payload.size == 0:
            raise ValidationError(detail="image: The uploaded file is empty", field="image")

        if payload.content_type and not payload.content_type.startswith("image/"):
            raise ValidationError(
                detail=f"image: Content type '{payload.content_type}' is not an image",
                field="image",
                context={"content_type": payload.content_type},
            )

        self.check_size(payload.size)

    def check_size(self, size: int) -> None:
        """
        Raises:
            ValidationError: size is above max_size.
        """
        if size > self.max_size:
            max_mb = self.max_size / (1024 * 1024)
            raise ValidationError(
                detail=f"image: File size exceeds maximum of {max_mb:.0f}MB",
                field="image",
                context={"max_size": self.max_size, "actual_size": size},
            )

    async def upload(self, payload: Optional[ImagePayload]) -> Optional[str]:
        """
        Store an image in the configured folder and return its secure URL.

        Returns None when no payload was supplied (images are optional).

        Raises:
            ValidationError: payload is not an acceptable image
            UploadError: Cloudinary unreachable or rejected the upload
        """
        if payload is None:
            return None

        self.validate(payload)

        try:
            result: Dict[str, Any] = await run_in_threadpool(
                cloudinary.uploader.upload,
                io.BytesIO(payload.content),
                folder=self.folder,
                resource_type="image",
                **self._credentials,
            )
        except cloudinary.exceptions.Error as e:
            logger.error("Cloudinary rejected upload of %s: %s", payload.filename, str(e))
            raise UploadError(detail=str(e), context={"filename": payload.filename})
        except Exception as e:
            logger.error(
                "Cloudinary upload of %s failed: %s", payload.filename, str(e), exc_info=True
            )
            raise UploadError(
                detail="The image host could not be reached. Please try again.",
                context={"filename": payload.filename, "error_type": type(e).__name__},
            )

        url = result.get("secure_url")
        if not url:
            raise UploadError(
                detail="The image host did not return a URL for the upload",
                context={"filename": payload.filename},
            )

        logger.info("Image uploaded: %s (%d bytes) -> %s", payload.filename, payload.size, url)
        return url

    def public_id_from_url(self, url: str) -> str:
        """
        Derive the Cloudinary public id from a stored image URL.

        Takes the last path component up to its first dot and prefixes the
        folder: ".../homestock/abc123.jpg" → "homestock/abc123".
        """
        filename = PurePosixPath(urlparse(url).path).name
        stem = filename.split(".")[0]
        if not stem:
            raise ValueError(f"Cannot derive an image id from URL '{url}'")
        return f"{self.folder}/{stem}"

    async def delete(self, url: str) -> None:
        """
        Remove a previously uploaded image, identified by its URL.

        A "not found" answer means there is nothing left to remove and is
        only logged.

        Raises:
            ImageCleanupError: id could not be derived or Cloudinary failed.
        """
        try:
            public_id = self.public_id_from_url(url)
        except ValueError as e:
            raise ImageCleanupError(public_id="", detail=str(e), context={"url": url})

        try:
            result: Dict[str, Any] = await run_in_threadpool(
                cloudinary.uploader.destroy,
                public_id,
                invalidate=True,
                **self._credentials,
            )
        except Exception as e:
            raise ImageCleanupError(
                public_id=public_id,
                detail=str(e) or type(e).__name__,
                context={"url": url},
            )

        outcome = result.get("result")
        if outcome == "ok":
            logger.info("Image deleted: %s", public_id)
        elif outcome == "not found":
            logger.warning("Image %s was already gone from the media host", public_id)
        else:
            raise ImageCleanupError(
                public_id=public_id,
                detail=f"Unexpected response from the image host: {outcome!r}",
                context={"url": url},
            )

    async def health_check(self) -> bool:
        """Lightweight connectivity test via the Admin API ping."""
        try:
            await run_in_threadpool(cloudinary.api.ping, **self._credentials)
            return True
        except Exception as e:
            logger.warning("Cloudinary health check failed: %s", str(e))
            return False


# ── Dependency ────────────────────────────────────────────────────────────
def get_image_service(request: Request) -> ImageService:
    """FastAPI dependency: the ImageService built by the app lifespan."""
    return request.app.state.image_service
