"""Card catalog loading: turns raw catalog records into immutable Card values."""

import json
import logging
import re
from pathlib import Path
from typing import Any, Iterable

from council.rules import CARD_TYPE_ALIASES, CardType
from council.state import Card

logger = logging.getLogger(__name__)

DEFAULT_CATALOG_PATH = Path(__file__).parent / "data" / "cards.json"

# Catalog record field names
FIELD_NAME = "Card Name"
FIELD_TYPE = "Type"
FIELD_SUBTYPE = "Subtype"
FIELD_FACTIONS = "Factions"
FIELD_DEPARTMENTS = "Departments"
FIELD_TAGS = "Tags"
FIELD_POWER = "Power Value"
FIELD_EFFECT = "Effect"

_LEADING_INT = re.compile(r"^\s*([+-]?\d+)")


class CatalogError(ValueError):
    """The catalog file or one of its records is malformed."""


class SetupError(ValueError):
    """The catalog cannot seat a full table (not enough Councilmember cards)."""


def parse_int(value: Any, default: int) -> int:
    """Leading integer of value ("3 votes" -> 3), or default when there is none."""
    if isinstance(value, bool):
        return default
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value)
    if isinstance(value, str):
        m = _LEADING_INT.match(value)
        if m:
            return int(m.group(1))
    return default


def normalize_tags(value: Any) -> frozenset[str]:
    """Accept "A, B" or ["A", " B"]; return the set of trimmed, non-empty names."""
    if isinstance(value, str):
        parts: Iterable[Any] = value.split(",")
    elif isinstance(value, (list, tuple, set, frozenset)):
        parts = value
    else:
        return frozenset()
    return frozenset(str(p).strip() for p in parts if str(p).strip())


def parse_card_type(value: Any) -> CardType:
    text = str(value or "").strip()
    if text in CARD_TYPE_ALIASES:
        return CARD_TYPE_ALIASES[text]
    try:
        return CardType(text)
    except ValueError:
        raise CatalogError(f"Unknown card type {text!r}") from None


def card_from_record(record: dict[str, Any], instance_id: str) -> Card:
    """Build a Card from one catalog record."""
    name = str(record.get(FIELD_NAME) or "").strip()
    if not name:
        raise CatalogError(f"Record {instance_id} has no {FIELD_NAME!r}")
    return Card(
        instance_id=instance_id,
        name=name,
        type=parse_card_type(record.get(FIELD_TYPE)),
        subtype=str(record.get(FIELD_SUBTYPE) or "").strip(),
        factions=normalize_tags(record.get(FIELD_FACTIONS)),
        departments=normalize_tags(record.get(FIELD_DEPARTMENTS)),
        tag_cost=max(0, parse_int(record.get(FIELD_TAGS), 0)),
        power_value=max(0, parse_int(record.get(FIELD_POWER), 0)),
        effect_text=str(record.get(FIELD_EFFECT) or ""),
    )


def build_catalog(records: list[dict[str, Any]]) -> list[Card]:
    """
    Convert catalog records to cards in catalog order.
    Named records with a missing or unknown type are skipped with a warning; a missing name is an error.
    """
    if not isinstance(records, list):
        raise CatalogError("Card catalog must be a list of records")
    cards: list[Card] = []
    for i, record in enumerate(records):
        if not isinstance(record, dict):
            raise CatalogError(f"Record {i} is not an object")
        try:
            cards.append(card_from_record(record, instance_id=f"card_{i}"))
        except CatalogError as e:
            if record.get(FIELD_NAME):
                logger.warning("Skipping catalog record %d: %s", i, e)
                continue
            raise
    return cards


def load_catalog(path: str | Path | None = None) -> list[Card]:
    """Load and build the catalog from a JSON file (bundled sample when path is None)."""
    catalog_path = Path(path) if path else DEFAULT_CATALOG_PATH
    try:
        with open(catalog_path, "r", encoding="utf-8") as f:
            records = json.load(f)
    except FileNotFoundError:
        raise CatalogError(f"Card catalog not found: {catalog_path}") from None
    except json.JSONDecodeError as e:
        raise CatalogError(f"Card catalog is not valid JSON: {e}") from None
    cards = build_catalog(records)
    logger.info("Loaded %d cards from %s", len(cards), catalog_path)
    return cards
