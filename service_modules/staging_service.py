"""
Staging Service - holds picked images on disk until a form is submitted.

A staged image is a pending local reference (file:// URI). It becomes a
remote URL only when the write gateway uploads it.
"""
import os
import uuid
import logging
from pathlib import Path

from .exceptions import ValidationError
from .upload_helper import ALLOWED_IMAGE_EXTENSIONS, MAX_IMAGE_SIZE

logger = logging.getLogger("fitmaker_admin")

STAGING_DIR = os.getenv("STAGING_DIR", os.path.join(os.path.dirname(os.path.dirname(__file__)), "db", "staging"))


def allowed_file(filename: str) -> bool:
    return '.' in filename and filename.rsplit('.', 1)[1].lower() in ALLOWED_IMAGE_EXTENSIONS


class StagingService:
    def __init__(self, directory: str = None):
        self.directory = directory or STAGING_DIR

    def stage(self, content: bytes, filename: str) -> str:
        """Store one image and return its local reference."""
        if not filename or not allowed_file(filename):
            raise ValidationError(f"Invalid file type. Allowed: {', '.join(sorted(ALLOWED_IMAGE_EXTENSIONS))}")
        if len(content) > MAX_IMAGE_SIZE:
            raise ValidationError(f"File too large. Maximum: {MAX_IMAGE_SIZE // (1024*1024)}MB")

        os.makedirs(self.directory, exist_ok=True)
        ext = filename.rsplit('.', 1)[1].lower()
        path = Path(self.directory, f"{uuid.uuid4().hex}.{ext}").resolve()
        path.write_bytes(content)

        logger.info(f"Staged image {filename} -> {path.name}")
        return path.as_uri()


# Singleton instance
staging_service = StagingService()


def get_staging_service() -> StagingService:
    """Dependency injection helper."""
    return staging_service
