"""
Email Builder Backend — Cloudinary Upload Client
=================================================

What:  MediaUploader implementation backed by the Cloudinary upload API.
How:   Validates the extension locally, then runs the (blocking) SDK upload
       call in a worker thread so the event loop keeps serving requests.
       Credentials are passed with every call; the SDK's global
       configuration is never touched.
Who:   Built once by the application lifespan from Settings and published
       on `app.state.media_uploader`.

Error Mapping:
    Local extension check fails       → UnsupportedFormatError (400), no SDK call
    Host rejects the file format      → UnsupportedFormatError (400)
    Anything else from the SDK/network → UploadError (500)
"""

import asyncio
import logging
import time
from typing import BinaryIO

import cloudinary.uploader
from cloudinary.exceptions import BadRequest
from cloudinary.exceptions import Error as CloudinaryError

from emailbuilder.exceptions import UnsupportedFormatError, UploadError
from emailbuilder.schemas.upload import UploadedImage
from emailbuilder.services.media_base import MediaUploader

logger = logging.getLogger(__name__)


class CloudinaryUploader(MediaUploader):
    """
    Uploads images into a single Cloudinary folder.

    Attributes:
        cloud_name: Cloudinary account name
        folder:     Destination folder for every upload (default "email-images")
    """

    def __init__(
        self,
        cloud_name: str,
        api_key: str,
        api_secret: str,
        folder: str = "email-images",
    ):
        self.cloud_name = cloud_name
        self._api_key = api_key
        self._api_secret = api_secret
        self.folder = folder

        logger.info(
            "CloudinaryUploader initialized (cloud=%s, folder=%s, configured=%s)",
            cloud_name or "-",
            folder,
            self.is_configured,
        )

    @classmethod
    def from_settings(cls, settings) -> "CloudinaryUploader":
        return cls(
            cloud_name=settings.cloudinary_cloud_name,
            api_key=settings.cloudinary_api_key,
            api_secret=settings.cloudinary_api_secret,
            folder=settings.upload_folder,
        )

    @property
    def is_configured(self) -> bool:
        return bool(self.cloud_name and self._api_key and self._api_secret)

    def _upload_options(self, filename: str) -> dict:
        return {
            "folder": self.folder,
            "allowed_formats": list(self.ALLOWED_FORMATS),
            "resource_type": "image",
            "filename": filename,
            "cloud_name": self.cloud_name,
            "api_key": self._api_key,
            "api_secret": self._api_secret,
        }

    async def upload(self, file: BinaryIO, filename: str) -> UploadedImage:
        extension = self.validate_format(filename)

        start_time = time.perf_counter()
        try:
            result = await asyncio.to_thread(
                cloudinary.uploader.upload,
                file,
                **self._upload_options(filename),
            )
        except BadRequest as e:
            # Cloudinary reports "Image file format xyz not allowed" as a 400
            if "format" in str(e).lower():
                logger.warning("Cloudinary rejected image format for %s: %s", filename, str(e))
                raise UnsupportedFormatError(
                    extension,
                    self.ALLOWED_FORMATS,
                    context={"host_error": str(e)},
                ) from e
            raise self._upload_failed(filename, e) from e
        except (CloudinaryError, OSError, ValueError) as e:
            raise self._upload_failed(filename, e) from e

        duration_ms = (time.perf_counter() - start_time) * 1000
        url = result.get("secure_url") or result.get("url")
        if not url:
            raise UploadError(context={"reason": "no url in upload response"})

        logger.info(
            "Image uploaded in %.0fms: %s (public_id=%s)",
            duration_ms,
            url,
            result.get("public_id"),
        )
        return UploadedImage(url=url, public_id=result.get("public_id"))

    def _upload_failed(self, filename: str, error: Exception) -> UploadError:
        logger.error(
            "Cloudinary upload failed for %s: %s: %s",
            filename,
            type(error).__name__,
            str(error),
        )
        return UploadError(
            context={"filename": filename, "error_type": type(error).__name__},
        )
