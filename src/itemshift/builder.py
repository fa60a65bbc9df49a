"""
Item Builder

Creates a single item from a name and a few optional fields, with
suggestions for the label, image, type and weight derived from the name.
"""

import logging
import re
from dataclasses import dataclass
from typing import Optional, Union

from .model import Item

logger = logging.getLogger(__name__)

FALLBACK_WEIGHT = 25
LEADING_INTEGER_RE = re.compile(r"[+-]?[0-9]+")

# First match wins, checked against the lowercased name
TYPE_KEYWORDS = (
    ("weapon", ("weapon", "gun", "rifle", "pistol")),
    ("ammo", ("ammo", "bullet", "round")),
    ("drug", ("drug", "pill", "medicine")),
    ("food", ("food", "burger", "pizza", "sandwich")),
    ("drink", ("drink", "water", "soda", "beer")),
)

TYPE_WEIGHTS = {
    "weapon": 2000,
    "ammo": 1,
    "food": 100,
    "drink": 100,
    "drug": 5,
}


@dataclass
class ItemSuggestion:
    """Field values suggested for an item name."""
    label: str
    image: str
    type: str
    weight: int


def suggest_label(name: str) -> str:
    """`combat_PISTOL` -> `Combat Pistol`."""
    return " ".join(word[:1].upper() + word[1:].lower() for word in name.split("_"))


def suggest_type(name: str) -> str:
    lowered = name.lower()
    for item_type, keywords in TYPE_KEYWORDS:
        if any(keyword in lowered for keyword in keywords):
            return item_type
    return "item"


def suggest_weight(item_type: str) -> int:
    return TYPE_WEIGHTS.get(item_type, FALLBACK_WEIGHT)


def suggest_item(name: str) -> ItemSuggestion:
    """Suggest label, image, type and weight from an item name."""
    name = name.strip()
    item_type = suggest_type(name)
    return ItemSuggestion(
        label=suggest_label(name),
        image=f"{name}.png",
        type=item_type,
        weight=suggest_weight(item_type),
    )


def parse_weight(value: Union[str, int, None]) -> int:
    """Leading integer of value, or the fallback weight when there is none (or it is 0)."""
    if isinstance(value, int) and not isinstance(value, bool):
        return value or FALLBACK_WEIGHT
    match = LEADING_INTEGER_RE.match(str(value or "").strip())
    if match is None:
        return FALLBACK_WEIGHT
    return int(match.group(0)) or FALLBACK_WEIGHT


def build_item(name: str,
               label: str,
               image: str,
               weight: Union[str, int, None] = None,
               item_type: str = "item",
               unique: bool = False,
               useable: bool = False,
               description: Optional[str] = None) -> Item:
    """
    Build an item from explicit field values.

    Raises:
        ValueError: if name, label or image is missing
    """
    name = (name or "").strip()
    label = (label or "").strip()
    image = (image or "").strip()
    missing = [field for field, value in (("name", name), ("label", label), ("image", image)) if not value]
    if missing:
        raise ValueError(f"Missing required fields: {', '.join(missing)}")

    item = Item(
        key=name,
        name=name,
        label=label,
        weight=parse_weight(weight),
        type=item_type or "item",
        image=image,
        unique=unique,
        useable=useable,
        should_close=True,
        description=(description or "").strip() or None,
    )
    logger.debug(f"Built item {item.key!r} ({item.type}, weight {item.weight})")
    return item
