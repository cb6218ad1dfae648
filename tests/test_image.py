"""Tests for cookiecare.utils.image: screenshot conversion."""

from __future__ import annotations

import base64
import io

from PIL import Image

from cookiecare.utils import image


def _png(width: int = 320, height: int = 200, mode: str = "RGB") -> bytes:
    img = Image.new(mode, (width, height), (0, 128, 255, 200) if mode == "RGBA" else (0, 128, 255))
    buf = io.BytesIO()
    img.save(buf, format="PNG")
    return buf.getvalue()


class TestOptimizePngToJpeg:
    """Tests for optimize_png_to_jpeg()."""

    def test_jpeg_output(self) -> None:
        jpeg, w, h = image.optimize_png_to_jpeg(_png())
        assert jpeg[:2] == b"\xff\xd8"
        assert (w, h) == (320, 200)

    def test_wide_capture_downscaled(self) -> None:
        _, w, h = image.optimize_png_to_jpeg(_png(3840, 2160))
        assert (w, h) == (1920, 1080)

    def test_transparency_flattened(self) -> None:
        jpeg, _, _ = image.optimize_png_to_jpeg(_png(mode="RGBA"))
        assert Image.open(io.BytesIO(jpeg)).mode == "RGB"


class TestPngToBase64Jpeg:
    """Tests for png_to_base64_jpeg()."""

    def test_bare_base64(self) -> None:
        encoded = image.png_to_base64_jpeg(_png())
        assert not encoded.startswith("data:")
        assert base64.b64decode(encoded)[:2] == b"\xff\xd8"

    def test_quality_affects_size(self) -> None:
        noisy = Image.effect_noise((256, 256), 64).convert("RGB")
        buf = io.BytesIO()
        noisy.save(buf, format="PNG")
        low = image.png_to_base64_jpeg(buf.getvalue(), quality=10)
        high = image.png_to_base64_jpeg(buf.getvalue(), quality=90)
        assert len(low) < len(high)
