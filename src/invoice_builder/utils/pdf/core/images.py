"""
Decode raster images (logo, payment QR) into RGB samples ready for a PDF image XObject.
"""

from __future__ import annotations

import io
import zlib
from dataclasses import dataclass

from PIL import Image, UnidentifiedImageError

from invoice_builder.errors import LogoImageError


@dataclass(frozen=True)
class EmbeddedImage:
    width: int
    height: int
    data: bytes  # Flate-compressed 8-bit RGB samples

    @property
    def aspect(self) -> float:
        """Height per unit of width."""
        return self.height / self.width

    def height_for(self, render_width: float) -> float:
        return render_width * self.aspect


def load_image(raw: bytes) -> EmbeddedImage:
    """Transparent pixels are flattened onto white. Raises LogoImageError for unreadable data."""
    if not raw:
        raise LogoImageError("Empty image data")
    try:
        with Image.open(io.BytesIO(raw)) as img:
            img.load()
            if img.mode in ("RGBA", "LA", "P"):
                rgba = img.convert("RGBA")
                rgb = Image.new("RGB", rgba.size, (255, 255, 255))
                rgb.paste(rgba, mask=rgba.split()[3])
            else:
                rgb = img.convert("RGB")
    except (UnidentifiedImageError, Image.DecompressionBombError, OSError, ValueError, SyntaxError) as exc:
        raise LogoImageError(f"Cannot decode image: {exc}") from exc
    width, height = rgb.size
    if width <= 0 or height <= 0:
        raise LogoImageError("Image has no pixels")
    return EmbeddedImage(width=width, height=height, data=zlib.compress(rgb.tobytes()))
