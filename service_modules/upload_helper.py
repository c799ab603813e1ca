"""
Upload Helper - resolves local image references to durable URLs.
Uses Cloudinary in production, local filesystem in development.
"""
import asyncio
import os
import io
import uuid
import logging
from typing import Tuple
from urllib.parse import urlparse, unquote

import cloudinary
import cloudinary.uploader
from PIL import Image, UnidentifiedImageError

from .exceptions import UploadError

logger = logging.getLogger("fitmaker_admin")

ALLOWED_IMAGE_EXTENSIONS = {'png', 'jpg', 'jpeg', 'webp', 'gif'}
MAX_IMAGE_SIZE = 5 * 1024 * 1024   # 5MB
DEFAULT_FOLDER = os.environ.get("CLOUDINARY_FOLDER", "fitmaker_blogs")
PUBLIC_BASE_URL = os.environ.get("PUBLIC_BASE_URL", "http://localhost:9007")
UPLOAD_ROOT = os.path.join(os.path.dirname(os.path.dirname(__file__)), 'static', 'uploads')


def is_remote_url(reference) -> bool:
    """Already-uploaded media is addressed by an http(s) URL."""
    return isinstance(reference, str) and reference.startswith(("http://", "https://"))


def local_path(reference: str) -> str:
    """Filesystem path behind a pending local reference (file:// URI or plain path)."""
    if reference.startswith("file://"):
        return unquote(urlparse(reference).path)
    if "://" in reference:
        raise UploadError(f"Cannot read image from {reference.split('://', 1)[0]}:// reference",
                          title="Upload Failed")
    return reference


def _is_cloudinary_ready() -> bool:
    """Check if Cloudinary is configured."""
    cloud_name = os.environ.get("CLOUDINARY_CLOUD_NAME")
    api_key = os.environ.get("CLOUDINARY_API_KEY")
    api_secret = os.environ.get("CLOUDINARY_API_SECRET")
    if all([cloud_name, api_key, api_secret]):
        cloudinary.config(
            cloud_name=cloud_name,
            api_key=api_key,
            api_secret=api_secret,
            secure=True
        )
        return True
    return False


def _optimize_image(content: bytes, max_size: tuple = (1600, 1600)) -> Tuple[bytes, str]:
    """Optimize image with Pillow. Returns (bytes, extension)."""
    try:
        img = Image.open(io.BytesIO(content))
    except UnidentifiedImageError:
        raise UploadError("Selected file is not a valid image.", title="Upload Failed")

    if img.mode in ('RGBA', 'P'):
        img = img.convert('RGB')

    img.thumbnail(max_size, Image.Resampling.LANCZOS)

    buf = io.BytesIO()
    img.save(buf, format='JPEG', quality=85, optimize=True)
    return buf.getvalue(), 'jpg'


class MediaUploader:
    """Turns a pending local reference into a remote URL."""

    def __init__(self, folder: str = None):
        self.folder = folder or DEFAULT_FOLDER

    async def upload(self, reference: str, folder: str = None) -> str:
        if is_remote_url(reference):
            return reference

        path = local_path(reference)
        # File, Pillow and network work run off the event loop
        return await asyncio.to_thread(self._upload_file, path, folder or self.folder)

    def _upload_file(self, path: str, folder: str) -> str:
        try:
            with open(path, 'rb') as f:
                content = f.read()
        except OSError as e:
            logger.error(f"Could not read image {path}: {e}")
            raise UploadError("Could not read the selected image.", title="Upload Failed")

        optimized, ext = _optimize_image(content)
        filename = f"{uuid.uuid4().hex}.{ext}"

        if _is_cloudinary_ready():
            return self._upload_cloudinary(optimized, folder, filename)
        return self._save_local(optimized, folder, filename)

    def _upload_cloudinary(self, content: bytes, folder: str, filename: str) -> str:
        """Signed upload (timestamp + API secret) to Cloudinary; returns the secure URL."""
        try:
            result = cloudinary.uploader.upload(
                content,
                folder=folder,
                public_id=os.path.splitext(filename)[0],
                resource_type="image"
            )
        except Exception as e:
            logger.error(f"Cloudinary upload failed: {e}")
            raise UploadError("Failed to upload image. Please try again.", title="Upload Failed")

        url = result.get("secure_url")
        if not url:
            message = (result.get("error") or {}).get("message", "Failed to upload image")
            logger.error(f"Cloudinary upload error: {result}")
            raise UploadError(message, title="Upload Failed")

        logger.info(f"Cloudinary upload: {folder}/{filename}")
        return url

    def _save_local(self, content: bytes, folder: str, filename: str) -> str:
        """Save to local filesystem and return an absolute URL served from /static."""
        base_dir = os.path.join(UPLOAD_ROOT, folder)
        try:
            os.makedirs(base_dir, exist_ok=True)
            with open(os.path.join(base_dir, filename), 'wb') as f:
                f.write(content)
        except OSError as e:
            logger.error(f"Local upload failed: {e}")
            raise UploadError("Failed to upload image. Please try again.", title="Upload Failed")

        return f"{PUBLIC_BASE_URL}/static/uploads/{folder}/{filename}"


# Singleton instance
media_uploader = MediaUploader()


def get_media_uploader() -> MediaUploader:
    """Dependency injection helper."""
    return media_uploader
