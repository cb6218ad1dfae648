"""Screenshot encoding for the scan report."""

from __future__ import annotations

import base64
import io

from PIL import Image

SCREENSHOT_MAX_WIDTH = 1920
DEFAULT_JPEG_QUALITY = 70


def optimize_png_to_jpeg(
    png_bytes: bytes,
    *,
    max_width: int = SCREENSHOT_MAX_WIDTH,
    quality: int = DEFAULT_JPEG_QUALITY,
) -> tuple[bytes, int, int]:
    """Re-encode a PNG capture as an RGB JPEG no wider than *max_width*.

    Returns the JPEG bytes with the final width and height.
    """
    with Image.open(io.BytesIO(png_bytes)) as source:
        picture = source.convert("RGB")
    if picture.width > max_width:
        picture.thumbnail((max_width, picture.height), Image.Resampling.LANCZOS)

    out = io.BytesIO()
    picture.save(out, "JPEG", quality=quality, optimize=True)
    return out.getvalue(), picture.width, picture.height


def png_to_base64_jpeg(png_bytes: bytes, *, quality: int = DEFAULT_JPEG_QUALITY) -> str:
    """Base64 of the JPEG re-encoding, without a ``data:`` prefix."""
    encoded, _, _ = optimize_png_to_jpeg(png_bytes, quality=quality)
    return base64.b64encode(encoded).decode("ascii")
