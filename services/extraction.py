"""
Menu extraction pipeline.

Pipeline:
1. Render the page in a fresh browser and capture it (MenuPageNavigator)
2. Cut the capture into tiles (CaptureTiler)
3. Ask the vision model to read all tiles in one call (MenuVisionClient)
4. Normalize and deduplicate the answer (result_normalizer)

A request either produces a full ExtractionResult or raises; weak pages
and sloppy model output only shrink the item list.
"""
import logging
import time
from typing import Optional

from config import Settings, settings as default_settings
from models import ExtractionMeta, ExtractionRequest, ExtractionResult
from services.browser_service import MenuPageNavigator
from services.capture_tiler import CaptureTiler
from services.result_normalizer import normalize_response
from services.vision_client import MenuVisionClient, VisionInference

logger = logging.getLogger(__name__)


class MenuExtractionService:
    """Runs one URL through capture, tiling, inference and normalization."""

    def __init__(
        self,
        config: Optional[Settings] = None,
        navigator: Optional[MenuPageNavigator] = None,
        tiler: Optional[CaptureTiler] = None,
        vision: Optional[VisionInference] = None,
    ):
        config = config or default_settings
        self._navigator = navigator or MenuPageNavigator(config)
        self._tiler = tiler or CaptureTiler(config.tile_max_height)
        self._vision = vision or MenuVisionClient(config)

    async def extract(self, request: ExtractionRequest) -> ExtractionResult:
        """
        Extract menu items from ``request.url``.

        Raises:
            ExtractionError: browser setup, screenshot or inference failed
        """
        logger.info(f"[EXTRACT] Starting: {request.url} ({request.engine.value}, {request.model})")
        started = time.monotonic()

        capture = await self._navigator.capture(request)
        tiles = await self._tiler.split(capture)
        content = await self._vision.parse_images([tile.png for tile in tiles], request.model)
        items = normalize_response(content)

        logger.info(
            f"[EXTRACT] Done: {request.url} -> {len(items)} item(s) "
            f"from {len(tiles)} tile(s) in {time.monotonic() - started:.1f}s"
        )

        return ExtractionResult(
            items=items,
            meta=ExtractionMeta(
                chunks=len(tiles),
                engine=request.engine.value,
                model=request.model,
            ),
        )


# Global service instance
extraction_service = MenuExtractionService()
