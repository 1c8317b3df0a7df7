import base64

import pytest

from courtinvite.core.errors import InvalidImageError, InvalidNameError
from courtinvite.utils.validators import (
    MAX_PROOF_IMAGE_BYTES,
    clean_phone,
    decode_base64_image,
    validate_display_name,
)

JPEG_BYTES = b"\xff\xd8\xff\xe0" + b"\x00" * 12


def test_display_name_is_trimmed():
    assert validate_display_name("  Sam Lee ") == "Sam Lee"


def test_display_name_at_limit_is_accepted():
    assert validate_display_name("x" * 80) == "x" * 80


@pytest.mark.parametrize("name", [None, "", "   ", "x" * 81])
def test_invalid_display_names(name):
    with pytest.raises(InvalidNameError):
        validate_display_name(name)


def test_blank_phone_becomes_none():
    assert clean_phone("   ") is None
    assert clean_phone(None) is None
    assert clean_phone(" 9123 4567 ") == "9123 4567"


def test_decode_raw_base64_jpeg():
    body, content_type, ext = decode_base64_image(base64.b64encode(JPEG_BYTES).decode(), "IMG_001.JPEG")

    assert body == JPEG_BYTES
    assert content_type == "image/jpeg"
    assert ext == "jpg"


def test_data_url_type_used_when_name_has_no_extension():
    data_url = "data:image/webp;base64," + base64.b64encode(JPEG_BYTES).decode()

    _, content_type, ext = decode_base64_image(data_url, "screenshot")

    assert content_type == "image/webp"
    assert ext == "webp"


def test_unsupported_type_is_rejected():
    with pytest.raises(InvalidImageError):
        decode_base64_image(base64.b64encode(b"%PDF-1.7").decode(), "receipt.pdf")


def test_invalid_base64_is_rejected():
    with pytest.raises(InvalidImageError):
        decode_base64_image("not base64!", "receipt.png")


def test_oversized_image_is_rejected():
    too_big = base64.b64encode(b"\x00" * (MAX_PROOF_IMAGE_BYTES + 1)).decode()
    with pytest.raises(InvalidImageError):
        decode_base64_image(too_big, "receipt.png")
