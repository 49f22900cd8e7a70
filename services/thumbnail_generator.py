"""Preview generator for analysis images.

Provides a small OOP wrapper around Pillow to create a preview of an
uploaded image. The preview fits within 320x320 pixels and is returned
as a PNG data URL, ready to be stored on a case as `imagePreviewUrl`.

Public class: `ThumbnailGenerator`

Example:
    tg = ThumbnailGenerator(max_size=(320, 320))
    preview_url = tg.create_preview_url(raw_bytes, "image/jpeg")
"""
from __future__ import annotations

import base64
import io
import logging
from typing import Tuple

from PIL import Image


class ThumbnailGenerator:
    """Generate preview thumbnails from raw image bytes.

    Args:
        max_size: Maximum width and height for the thumbnail. Defaults to (320, 320).
        background: Optional background color used when converting images with alpha to RGB.
            If None, images with alpha are flattened against white.
    """

    def __init__(self, max_size: Tuple[int, int] = (320, 320), background: Tuple[int, int, int] | None = None):
        self.max_size = max_size
        self.background = background or (255, 255, 255)

    def create_thumbnail(self, raw: bytes) -> bytes:
        """Return PNG bytes of a thumbnail of `raw`.

        Raises:
            ValueError: If the bytes cannot be opened as an image.
        """
        try:
            src = Image.open(io.BytesIO(raw))
            src.load()
        except Exception as exc:
            raise ValueError("Bytes are not a supported image format") from exc

        src = src.convert("RGBA")
        src.thumbnail(self.max_size, Image.LANCZOS)

        # Flatten alpha against the background color
        background = Image.new("RGB", src.size, self.background)
        background.paste(src, mask=src.split()[3])

        out_io = io.BytesIO()
        background.save(out_io, format="PNG", optimize=True)
        return out_io.getvalue()

    def create_preview_url(self, raw: bytes, mime_type: str = "image/jpeg") -> str:
        """Return a PNG thumbnail data URL, or the original bytes as a data URL
        when Pillow cannot decode them (e.g. HEIC)."""
        try:
            png = self.create_thumbnail(raw)
        except ValueError as exc:
            logging.error("Preview generation failed, keeping original image: %s", exc)
            return f"data:{mime_type};base64,{base64.b64encode(raw).decode('utf-8')}"
        return f"data:image/png;base64,{base64.b64encode(png).decode('utf-8')}"
