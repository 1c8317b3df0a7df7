# courtinvite/utils/validators.py
"""
Input validation utilities for guest-supplied data.
"""

import base64
import binascii
import re
from typing import Optional, Tuple

from courtinvite.constants.rsvp import MAX_DISPLAY_NAME_LENGTH
from courtinvite.core.errors import InvalidImageError, InvalidNameError

MAX_PROOF_IMAGE_BYTES = 5 * 1024 * 1024

ALLOWED_IMAGE_TYPES = {
    "jpg": "image/jpeg",
    "jpeg": "image/jpeg",
    "png": "image/png",
    "webp": "image/webp",
    "gif": "image/gif",
    "heic": "image/heic",
}

_DATA_URL_RE = re.compile(r"^data:(?P<mime>[\w/+.-]+);base64,(?P<data>.*)$", re.DOTALL)


def validate_display_name(name: Optional[str]) -> str:
    """
    Trim and validate a participant display name.

    Raises:
        InvalidNameError: If the name is blank or longer than 80 characters
    """
    cleaned = (name or "").strip()
    if not cleaned:
        raise InvalidNameError("Name is required")
    if len(cleaned) > MAX_DISPLAY_NAME_LENGTH:
        raise InvalidNameError(
            f"Name must be {MAX_DISPLAY_NAME_LENGTH} characters or fewer"
        )
    return cleaned


def clean_phone(phone: Optional[str]) -> Optional[str]:
    if phone is None:
        return None
    phone = phone.strip()
    return phone or None


def decode_base64_image(file_data: str, file_name: str) -> Tuple[bytes, str, str]:
    """
    Decode a base64 image upload.

    Accepts raw base64 or a data URL. The file extension decides the stored
    content type; a data URL's declared type is only used when the name has
    no usable extension.

    Returns:
        Tuple of (raw bytes, content type, extension)

    Raises:
        InvalidImageError: If the payload is not valid base64, is empty, too
                           large, or not an allowed image type
    """
    declared_mime = None
    match = _DATA_URL_RE.match(file_data.strip())
    if match:
        declared_mime = match.group("mime").lower()
        file_data = match.group("data")

    ext = file_name.rsplit(".", 1)[-1].lower() if "." in file_name else ""
    if ext not in ALLOWED_IMAGE_TYPES and declared_mime:
        ext = next(
            (key for key, mime in ALLOWED_IMAGE_TYPES.items() if mime == declared_mime),
            "",
        )
    if ext not in ALLOWED_IMAGE_TYPES:
        raise InvalidImageError("Unsupported image type")

    try:
        body = base64.b64decode(file_data, validate=True)
    except (binascii.Error, ValueError):
        raise InvalidImageError("Image data is not valid base64")

    if not body:
        raise InvalidImageError("Image is empty")
    if len(body) > MAX_PROOF_IMAGE_BYTES:
        raise InvalidImageError("Image must be 5 MB or smaller")

    if ext == "jpeg":
        ext = "jpg"
    return body, ALLOWED_IMAGE_TYPES[ext], ext
