"""
Email Builder Backend — Abstract Media Upload Interface
========================================================

What:  Contract for clients that push an uploaded image to a media host
       and return its public URL.
How:   Concrete implementations inherit from MediaUploader and implement
       upload(). The format allow-list check is shared.
Who:   Called by POST /api/upload-image.

Implementations:
    - CloudinaryUploader: Cloudinary upload API (default)
    - Tests provide an in-memory fake through the same interface
"""

from abc import ABC, abstractmethod
from pathlib import Path
from typing import BinaryIO, Optional, Tuple

from emailbuilder.exceptions import UnsupportedFormatError
from emailbuilder.schemas.upload import UploadedImage


class MediaUploader(ABC):
    """
    Abstract interface for hosted image uploads.

    Contract:
        - Only ALLOWED_FORMATS are accepted; anything else raises
          UnsupportedFormatError before the host is contacted
        - Every image lands in one fixed logical folder
        - Host failures are wrapped in UploadError
        - No local copy of the file is kept after upload() returns
    """

    ALLOWED_FORMATS: Tuple[str, ...] = ("jpg", "png", "jpeg", "gif")

    def validate_format(self, filename: Optional[str]) -> str:
        """
        Check the filename extension against ALLOWED_FORMATS.

        Returns:
            The normalized extension without the dot (e.g. "png").

        Raises:
            UnsupportedFormatError: extension missing or not allowed.
        """
        extension = Path(filename or "").suffix.lower().lstrip(".")
        if extension not in self.ALLOWED_FORMATS:
            raise UnsupportedFormatError(extension, self.ALLOWED_FORMATS)
        return extension

    @property
    @abstractmethod
    def is_configured(self) -> bool:
        """True when credentials for the host are present."""
        ...

    @abstractmethod
    async def upload(self, file: BinaryIO, filename: str) -> UploadedImage:
        """
        Store the image remotely.

        Args:
            file:     Readable binary stream of the uploaded image.
            filename: Client-supplied filename; only its extension is used.

        Returns:
            UploadedImage with a durable, publicly reachable URL.

        Raises:
            UnsupportedFormatError: format outside the allow-list.
            UploadError: host unreachable, credentials or quota rejected.
        """
        ...
