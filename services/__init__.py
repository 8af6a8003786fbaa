from .exceptions import (
    ExtractionError,
    BrowserSetupError,
    CaptureError,
    InferenceError,
)
from .browser_service import (
    BrowserPage,
    MenuPageNavigator,
    PageCapture,
    PlaywrightPage,
    StepOutcome,
    is_content_sufficient,
    open_playwright_page,
)
from .capture_tiler import CaptureTiler, ImageTile, split_tall_png
from .vision_client import MenuVisionClient, VisionInference
from .result_normalizer import (
    dedup_items,
    normalize_record,
    normalize_records,
    normalize_response,
    parse_items_payload,
)
from .extraction import MenuExtractionService, extraction_service

__all__ = [
    # Errors
    "ExtractionError",
    "BrowserSetupError",
    "CaptureError",
    "InferenceError",
    # Page rendering
    "BrowserPage",
    "MenuPageNavigator",
    "PageCapture",
    "PlaywrightPage",
    "StepOutcome",
    "is_content_sufficient",
    "open_playwright_page",
    # Tiling
    "CaptureTiler",
    "ImageTile",
    "split_tall_png",
    # Inference
    "MenuVisionClient",
    "VisionInference",
    # Normalization
    "dedup_items",
    "normalize_record",
    "normalize_records",
    "normalize_response",
    "parse_items_payload",
    # Pipeline
    "MenuExtractionService",
    "extraction_service",
]
