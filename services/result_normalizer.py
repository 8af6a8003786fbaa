"""
Turns raw vision-model output into canonical, deduplicated menu items.

The model is not trusted: malformed JSON becomes an empty list, records
without a name or a readable price are dropped, and repeated items (the
same section seen on two adjacent tiles) are collapsed.
"""
import json
import logging
import re
from typing import Any, Dict, Iterable, List, Optional

from models import CanonicalItem
from utils.text_utils import currency_from_text, extract_price

logger = logging.getLogger(__name__)


def _strip_code_fence(content: str) -> str:
    content = content.strip()
    if content.startswith("```"):
        content = re.sub(r"```\w*\n?", "", content).strip()
    return content


def parse_items_payload(content: Optional[str]) -> List[Any]:
    """Return the ``items`` list of a JSON answer, or [] if there is none."""
    if not content:
        return []

    try:
        data = json.loads(_strip_code_fence(content))
    except (ValueError, TypeError):
        logger.warning(f"[NORMALIZE] Unparseable model output: {content[:100]!r}")
        return []

    items = data.get("items") if isinstance(data, dict) else None
    if not isinstance(items, list):
        logger.warning("[NORMALIZE] Model output has no items list")
        return []

    return items


def _text(value: Any) -> str:
    if value is None:
        return ""
    return value.strip() if isinstance(value, str) else str(value).strip()


def normalize_record(raw: Dict[str, Any]) -> Optional[CanonicalItem]:
    """
    Coerce one raw record; None if it lacks a name or a price.
    """
    item = _text(raw.get("item"))
    if not item:
        return None

    price = extract_price(raw.get("price"))
    if price is None:
        return None

    currency = _text(raw.get("currency")).upper()
    if not currency:
        currency = currency_from_text(_text(raw.get("price_symbol")))

    return CanonicalItem(
        item=item,
        size=_text(raw.get("size")),
        price=price,
        description=_text(raw.get("description")),
        currency=currency,
    )


def dedup_items(items: Iterable[CanonicalItem]) -> List[CanonicalItem]:
    """Keep the first item per (name, size, price), case-insensitive on text."""
    seen = set()
    unique = []
    for item in items:
        key = item.dedup_key
        if key in seen:
            continue
        seen.add(key)
        unique.append(item)
    return unique


def normalize_records(rows: Iterable[Any]) -> List[CanonicalItem]:
    items = []
    for raw in rows:
        if not isinstance(raw, dict):
            continue
        item = normalize_record(raw)
        if item is not None:
            items.append(item)
    return dedup_items(items)


def normalize_response(content: Optional[str]) -> List[CanonicalItem]:
    """Full pipeline: model answer text -> canonical items."""
    rows = parse_items_payload(content)
    items = normalize_records(rows)
    logger.info(f"[NORMALIZE] {len(rows)} raw record(s) -> {len(items)} item(s)")
    return items
