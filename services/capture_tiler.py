"""
Splits tall full-page screenshots into bounded-height tiles.

Vision models downscale or reject very tall images, so a long menu page
is cut into horizontal bands, top to bottom, each no taller than the
configured limit. Width is never changed and bands never overlap.
"""
import asyncio
import io
import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import List, Optional

from PIL import Image

from config import settings
from services.browser_service import PageCapture

logger = logging.getLogger(__name__)

# Thread pool for image slicing (CPU-bound)
_tile_executor = ThreadPoolExecutor(max_workers=2, thread_name_prefix="tiler_")


@dataclass
class ImageTile:
    """One horizontal band of a capture, encoded as PNG."""
    png: bytes
    top: int
    width: int
    height: int


def split_tall_png(png: bytes, target_height: int) -> List[ImageTile]:
    """
    Cut a PNG into bands of ``target_height`` pixels.

    The last band holds the remainder. An image no taller than the
    target is returned as-is in a single tile.
    """
    if target_height <= 0:
        raise ValueError("target_height must be positive")

    with Image.open(io.BytesIO(png)) as img:
        width, height = img.size

        if height <= target_height:
            return [ImageTile(png=png, top=0, width=width, height=height)]

        img.load()
        tiles = []
        top = 0
        while top < height:
            band_height = min(target_height, height - top)
            band = img.crop((0, top, width, top + band_height))

            buffer = io.BytesIO()
            band.save(buffer, format="PNG")
            tiles.append(ImageTile(png=buffer.getvalue(), top=top, width=width, height=band_height))

            top += band_height

    return tiles


class CaptureTiler:
    """Async wrapper running the slicing off the event loop."""

    def __init__(self, max_height: Optional[int] = None):
        self.max_height = max_height or settings.tile_max_height

    async def split(self, capture: PageCapture) -> List[ImageTile]:
        loop = asyncio.get_running_loop()
        tiles = await loop.run_in_executor(
            _tile_executor, split_tall_png, capture.png, self.max_height
        )
        logger.info(
            f"[TILER] {capture.width}x{capture.height}px -> {len(tiles)} tile(s) "
            f"of at most {self.max_height}px"
        )
        return tiles
