"""
Data models for the menu extraction service.
"""
import math
from enum import Enum
from typing import List, Optional, Tuple
from urllib.parse import urlparse

from pydantic import BaseModel, ConfigDict, Field, field_validator

from config import settings


class BrowserEngine(str, Enum):
    """Browser engine used to render the page."""
    CHROMIUM = "chromium"
    FIREFOX = "firefox"
    WEBKIT = "webkit"


def parse_geo(value: str) -> Tuple[float, float]:
    """
    Parse a "lat,lon" string into a coordinate pair.

    Raises ValueError for anything that is not two finite numbers.
    """
    parts = [p.strip() for p in value.split(",")]
    if len(parts) != 2:
        raise ValueError("geo must look like 'lat,lon'")

    lat, lon = float(parts[0]), float(parts[1])
    if not (math.isfinite(lat) and math.isfinite(lon)):
        raise ValueError("geo coordinates must be finite numbers")
    if not (-90 <= lat <= 90 and -180 <= lon <= 180):
        raise ValueError("geo coordinates out of range")

    return lat, lon


class ExtractionRequest(BaseModel):
    """Input of one extraction run."""
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    url: str
    model: str = Field(default_factory=lambda: settings.default_model)
    engine: BrowserEngine = BrowserEngine.CHROMIUM
    geo: Optional[str] = None
    headless: bool = True
    timeout_ms: int = Field(
        default_factory=lambda: settings.navigation_timeout_ms,
        alias="timeoutMs",
        gt=0,
    )

    @field_validator("url")
    @classmethod
    def _normalize_url(cls, value: str) -> str:
        value = value.strip()
        if "://" in value and not value.startswith(("http://", "https://")):
            raise ValueError("only http and https urls are supported")
        if not value.startswith(("http://", "https://")):
            value = f"https://{value}"
        if not urlparse(value).netloc:
            raise ValueError("url must include a host")
        return value

    @field_validator("geo")
    @classmethod
    def _check_geo(cls, value: Optional[str]) -> Optional[str]:
        if value is None or not value.strip():
            return None
        parse_geo(value)
        return value.strip()

    @property
    def coordinates(self) -> Optional[Tuple[float, float]]:
        """Parsed (lat, lon) or None."""
        return parse_geo(self.geo) if self.geo else None


class CanonicalItem(BaseModel):
    """Validated, normalized menu line item."""
    model_config = ConfigDict(frozen=True)

    item: str
    size: str = ""
    price: float
    description: str = ""
    currency: str = ""

    @property
    def dedup_key(self) -> Tuple[str, str, float]:
        return (self.item.lower(), self.size.lower(), self.price)


class ExtractionMeta(BaseModel):
    """Observability data attached to a result."""
    chunks: int  # number of image tiles sent to inference
    engine: str
    model: str


class ExtractionResult(BaseModel):
    """Terminal output of one extraction run."""
    items: List[CanonicalItem] = Field(default_factory=list)
    meta: ExtractionMeta


class ErrorResponse(BaseModel):
    """Single error shape returned by the HTTP layer."""
    error: str
    message: str
