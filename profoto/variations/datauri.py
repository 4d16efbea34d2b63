"""
Helpers for moving images between the browser and the generator as data URIs.
"""
import base64
import binascii
import re
from dataclasses import dataclass

from ..errors import ValidationError

# Mime subtypes accepted for source images
SUPPORTED_SUBTYPES = ("png", "jpeg", "jpg", "webp")

DATA_URI_PREFIX = re.compile(r"^data:image/(png|jpeg|jpg|webp);base64,")

# Raw base64 without a prefix is assumed to be a JPEG
DEFAULT_MIME_TYPE = "image/jpeg"
OUTPUT_MIME_TYPE = "image/png"


@dataclass(frozen=True)
class SourceImage:
    """A decoded input image, shared read-only by every call of a batch."""
    data: bytes
    mime_type: str = DEFAULT_MIME_TYPE


def strip_data_uri(value: str) -> str:
    """Remove a leading ``data:image/...;base64,`` prefix. Already-stripped input is returned as is."""
    return DATA_URI_PREFIX.sub("", value, count=1)


def mime_type_of(value: str) -> str:
    match = DATA_URI_PREFIX.match(value)
    if not match:
        return DEFAULT_MIME_TYPE
    subtype = match.group(1)
    # image/jpg is not a registered type, the model expects image/jpeg
    if subtype == "jpg":
        subtype = "jpeg"
    return f"image/{subtype}"


def decode_source_image(value: str) -> SourceImage:
    """
    Normalize a data URI (or bare base64) into raw bytes plus a mime type.

    Raises:
        ValidationError: if the value is empty, declares an unsupported type
            or is not valid base64
    """
    if not value or not value.strip():
        raise ValidationError("please upload a product image first")

    value = value.strip()
    if value.startswith("data:") and not DATA_URI_PREFIX.match(value):
        raise ValidationError(
            f"unsupported image type, use one of: {', '.join(SUPPORTED_SUBTYPES)}"
        )

    try:
        data = base64.b64decode(strip_data_uri(value), validate=True)
    except (binascii.Error, ValueError) as e:
        raise ValidationError(f"image is not valid base64 data: {e}") from e

    if not data:
        raise ValidationError("please upload a product image first")

    return SourceImage(data=data, mime_type=mime_type_of(value))


def encode_data_uri(data: bytes, mime_type: str = OUTPUT_MIME_TYPE) -> str:
    return f"data:{mime_type};base64,{base64.b64encode(data).decode('ascii')}"
