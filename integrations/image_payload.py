"""
Image Payload — uploaded image → inline Gemini part.

Pipeline:
  1. Size check (default 4 MiB cap) before anything else
  2. MIME type check (png / jpeg / webp)
  3. Pixel cap from the header, then Pillow decode to make sure the bytes
     really are an image (decompression bombs rejected)
  4. Base64 encode for the request + 128px JPEG thumbnail for history

Every failure raises ImageProcessingError; generation is never attempted
with a bad image.
"""

import base64
import io
import mimetypes
import os
import warnings
from typing import Iterable, Optional

import structlog
from PIL import Image, UnidentifiedImageError

from core.errors import ImageProcessingError
from core.models import ImagePayload

logger = structlog.get_logger()

MAX_IMAGE_BYTES = 4 * 1024 * 1024
ACCEPTED_TYPES = ("image/png", "image/jpeg", "image/webp")
PREVIEW_SIZE = (128, 128)
# Decoded size cap, checked from the header before any pixels are loaded
MAX_IMAGE_PIXELS = 40_000_000

# Pillow format name → MIME type
_PIL_FORMATS = {"PNG": "image/png", "JPEG": "image/jpeg", "WEBP": "image/webp"}


def _make_preview(img: Image.Image) -> str:
    thumb = img.convert("RGB")
    thumb.thumbnail(PREVIEW_SIZE)
    buf = io.BytesIO()
    thumb.save(buf, "JPEG", quality=70)
    return "data:image/jpeg;base64," + base64.b64encode(buf.getvalue()).decode("ascii")


def load_image_payload(
    data: bytes,
    mime_type: Optional[str] = None,
    max_bytes: int = MAX_IMAGE_BYTES,
    accepted_types: Iterable[str] = ACCEPTED_TYPES,
    max_pixels: int = MAX_IMAGE_PIXELS,
) -> ImagePayload:
    """
    Validate raw image bytes and build the inline payload.

    If mime_type is omitted it is taken from the decoded image format.
    Images over max_pixels are rejected before decoding.
    """
    accepted = tuple(accepted_types)
    if len(data) > max_bytes:
        raise ImageProcessingError(
            f"File is too large ({len(data)} bytes). Please select an image under "
            f"{max_bytes // (1024 * 1024)}MB."
        )
    if not data:
        raise ImageProcessingError("Image file is empty.")
    if mime_type and mime_type not in accepted:
        raise ImageProcessingError(f"Unsupported image type {mime_type!r}. Accepted: {', '.join(accepted)}")

    try:
        # Pillow only warns between its limit and 2x the limit; treat that as a bomb too
        with warnings.catch_warnings():
            warnings.simplefilter("error", Image.DecompressionBombWarning)
            with Image.open(io.BytesIO(data)) as probe:
                width, height = probe.size
                if width * height > max_pixels:
                    raise ImageProcessingError(
                        f"Image dimensions are too large ({width}x{height}). "
                        "Please select a smaller image."
                    )
                probe.verify()
            # verify() leaves the image unusable, reopen for the thumbnail
            with Image.open(io.BytesIO(data)) as img:
                detected = _PIL_FORMATS.get(img.format or "")
                preview = _make_preview(img)
    except (
        UnidentifiedImageError,
        Image.DecompressionBombError,
        Image.DecompressionBombWarning,
        OSError,
        SyntaxError,
        ValueError,
    ) as e:
        logger.warning("image.unreadable", error=str(e))
        raise ImageProcessingError("Failed to process image. Please try another file.") from e

    resolved = mime_type or detected
    if resolved not in accepted:
        raise ImageProcessingError(f"Unsupported image type {resolved!r}. Accepted: {', '.join(accepted)}")

    logger.info("image.loaded", mime_type=resolved, size=len(data))
    return ImagePayload(
        mime_type=resolved,
        data=base64.b64encode(data).decode("ascii"),
        preview=preview,
    )


def load_image_file(
    path: str,
    max_bytes: int = MAX_IMAGE_BYTES,
    accepted_types: Iterable[str] = ACCEPTED_TYPES,
) -> ImagePayload:
    """Read an image from disk (CLI uploads)."""
    try:
        size = os.path.getsize(path)
    except OSError as e:
        raise ImageProcessingError(f"Cannot read image {path}: {e}") from e
    if size > max_bytes:
        raise ImageProcessingError(
            f"File is too large ({size} bytes). Please select an image under "
            f"{max_bytes // (1024 * 1024)}MB."
        )
    with open(path, "rb") as f:
        data = f.read()
    guessed, _ = mimetypes.guess_type(path)
    return load_image_payload(data, guessed, max_bytes=max_bytes, accepted_types=accepted_types)


def decode_image_data(payload: ImagePayload) -> bytes:
    """Raw bytes back out of a payload (for the Gemini inline part)."""
    try:
        return base64.b64decode(payload.data, validate=True)
    except (ValueError, TypeError) as e:
        raise ImageProcessingError("Image data is not valid base64.") from e
