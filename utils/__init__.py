from .http_client import HttpClient, JsonResponse, http_client
from .text_utils import (
    CURRENCY_SYMBOLS,
    ParsedPrice,
    currency_from_text,
    extract_price,
    parse_price,
)

__all__ = [
    "HttpClient",
    "JsonResponse",
    "http_client",
    "CURRENCY_SYMBOLS",
    "ParsedPrice",
    "currency_from_text",
    "extract_price",
    "parse_price",
]
