"""
Blob storage for event images
"""

import io
import logging
import os
import uuid

from PIL import Image, UnidentifiedImageError

from eventrsvp.core.config import settings
from eventrsvp.services.errors import RsvpError

logger = logging.getLogger(__name__)

# Pillow format name -> MIME type
IMAGE_FORMATS = {
    "JPEG": "image/jpeg",
    "PNG": "image/png",
    "WEBP": "image/webp",
    "GIF": "image/gif",
}

EXTENSIONS = {
    "image/jpeg": ".jpg",
    "image/png": ".png",
    "image/webp": ".webp",
    "image/gif": ".gif",
}


class InvalidUpload(RsvpError):
    """Invalid file"""

    error_code = "INVALID_UPLOAD"


class StorageService:
    """Local filesystem store serving files under ``/uploads``"""

    def __init__(self, root: str = None, max_size: int = None, allowed_types=None):
        self.root = root or settings.UPLOAD_DIR
        self.max_size = max_size or settings.MAX_UPLOAD_SIZE
        self.allowed_types = list(allowed_types or settings.ALLOWED_IMAGE_TYPES)

    def validate_image(self, data: bytes, content_type: str) -> None:
        """Reject before anything touches disk"""
        if not data:
            raise InvalidUpload("No file provided")
        if content_type not in self.allowed_types:
            raise InvalidUpload("Invalid file type")
        if len(data) > self.max_size:
            raise InvalidUpload("File too large")

        try:
            with Image.open(io.BytesIO(data)) as img:
                detected = IMAGE_FORMATS.get(img.format)
                img.verify()
        except (UnidentifiedImageError, OSError, SyntaxError):
            raise InvalidUpload("File is not a valid image")

        if detected != content_type:
            raise InvalidUpload("File content does not match its type")

    def store_image(self, data: bytes, content_type: str) -> str:
        """Save an event image and return its public path"""
        self.validate_image(data, content_type)

        stored_name = f"{uuid.uuid4()}{EXTENSIONS.get(content_type, '')}"

        upload_dir = os.path.join(self.root, "events")
        os.makedirs(upload_dir, exist_ok=True)
        with open(os.path.join(upload_dir, stored_name), "wb") as f:
            f.write(data)

        logger.info(f"Stored event image {stored_name} ({len(data)} bytes)")
        return f"/uploads/events/{stored_name}"


def get_storage() -> StorageService:
    return StorageService()
