"""
Media upload utilities: validation of uploaded files and transfer to
Cloudinary, which hands back a public URL and an opaque public id used later
for deletion.
"""
import logging
import secrets
import time
from typing import Optional, Tuple

import cloudinary
import cloudinary.uploader
from cloudinary.exceptions import Error as CloudinaryError
from django.conf import settings
from PIL import Image

logger = logging.getLogger(__name__)

MAX_IMAGE_SIZE = 5 * 1024 * 1024  # 5MB in bytes
MAX_MESSAGE_FILE_SIZE = 10 * 1024 * 1024  # 10MB in bytes
ALLOWED_IMAGE_FORMATS = {'JPEG', 'PNG', 'GIF', 'WEBP'}
ALLOWED_IMAGE_TYPES = {'image/jpeg', 'image/jpg', 'image/png', 'image/gif', 'image/webp'}
ALLOWED_MESSAGE_FILE_TYPES = {
    'image/jpeg',
    'image/jpg',
    'image/png',
    'image/gif',
    'application/pdf',
    'application/msword',
    'application/vnd.openxmlformats-officedocument.wordprocessingml.document',
    'text/plain',
}

MESSAGE_FOLDER = 'job-kit/messages'
AVATAR_FOLDER = 'job-kit/avatars'
LOGO_FOLDER = 'job-kit/logos'


class StorageError(Exception):
    """Raised when the media host is unavailable or rejects an upload."""


def is_configured() -> bool:
    return bool(settings.CLOUDINARY_CLOUD_NAME and settings.CLOUDINARY_API_KEY and settings.CLOUDINARY_API_SECRET)


def _configure():
    if not is_configured():
        raise StorageError('Media storage is not configured.')
    cloudinary.config(
        cloud_name=settings.CLOUDINARY_CLOUD_NAME,
        api_key=settings.CLOUDINARY_API_KEY,
        api_secret=settings.CLOUDINARY_API_SECRET,
        secure=True,
    )


def validate_upload(file_obj, allowed_types, max_size) -> Tuple[bool, Optional[str]]:
    """
    Validate an uploaded file's size and declared content type.

    Returns:
        Tuple of (is_valid, error_message)
    """
    if getattr(file_obj, 'size', 0) > max_size:
        size_mb = max_size // (1024 * 1024)
        return False, f"File {file_obj.name} is too large. Max size is {size_mb}MB."
    content_type = (getattr(file_obj, 'content_type', '') or '').lower()
    if content_type not in allowed_types:
        return False, f"File type {content_type or 'unknown'} is not allowed."
    return True, None


def validate_image_file(file_obj, max_size: int = MAX_IMAGE_SIZE) -> Tuple[bool, Optional[str]]:
    """
    Validate an uploaded image: size, declared type, and that Pillow can
    actually decode it.

    Returns:
        Tuple of (is_valid, error_message)
    """
    ok, error = validate_upload(file_obj, ALLOWED_IMAGE_TYPES, max_size)
    if not ok:
        return ok, error

    try:
        img = Image.open(file_obj)
        img.verify()
        if img.format not in ALLOWED_IMAGE_FORMATS:
            return False, f"Invalid image format. Allowed formats: {', '.join(sorted(ALLOWED_IMAGE_FORMATS))}"
    except (OSError, SyntaxError, ValueError) as e:
        logger.warning(f"Image validation failed: {e}")
        return False, "Invalid or corrupted image file"
    finally:
        file_obj.seek(0)
    return True, None


def _public_id_for(owner_id):
    return f"{owner_id}_{int(time.time() * 1000)}_{secrets.token_hex(4)}"


def upload_file(file_obj, folder, owner_id, *, resource_type='auto', transformation=None) -> dict:
    """Upload ``file_obj`` and return the client-facing description of it."""
    _configure()
    options = {
        'folder': folder,
        'public_id': _public_id_for(owner_id),
        'resource_type': resource_type,
        'use_filename': True,
        'unique_filename': True,
    }
    if transformation:
        options['transformation'] = transformation
    try:
        result = cloudinary.uploader.upload(file_obj, **options)
    except CloudinaryError as exc:
        logger.error('Cloudinary upload of %s failed: %s', getattr(file_obj, 'name', '?'), exc)
        raise StorageError(f"Failed to upload {getattr(file_obj, 'name', 'file')}") from exc

    return {
        'name': file_obj.name,
        'size': file_obj.size,
        'type': getattr(file_obj, 'content_type', ''),
        'url': result.get('secure_url') or result.get('url'),
        'public_id': result.get('public_id'),
    }


def upload_image(file_obj, folder, owner_id) -> dict:
    return upload_file(
        file_obj,
        folder,
        owner_id,
        resource_type='image',
        transformation=[{'width': 400, 'height': 400, 'crop': 'fill', 'gravity': 'auto'}],
    )


def delete_media(public_id) -> bool:
    """Destroy one hosted asset; returns True when the host confirmed deletion."""
    _configure()
    try:
        result = cloudinary.uploader.destroy(public_id)
    except CloudinaryError as exc:
        logger.error('Cloudinary delete of %s failed: %s', public_id, exc)
        return False
    if result.get('result') != 'ok':
        # raw uploads (pdf/docx) live under a different resource type
        try:
            result = cloudinary.uploader.destroy(public_id, resource_type='raw')
        except CloudinaryError as exc:
            logger.error('Cloudinary raw delete of %s failed: %s', public_id, exc)
            return False
    return result.get('result') == 'ok'
