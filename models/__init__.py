from .schemas import (
    BrowserEngine,
    ExtractionRequest,
    CanonicalItem,
    ExtractionMeta,
    ExtractionResult,
    ErrorResponse,
    parse_geo,
)

__all__ = [
    "BrowserEngine",
    "ExtractionRequest",
    "CanonicalItem",
    "ExtractionMeta",
    "ExtractionResult",
    "ErrorResponse",
    "parse_geo",
]
