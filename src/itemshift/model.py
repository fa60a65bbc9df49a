"""
Item Model

The canonical record that every dialect parser fills in and every output
format reads. Unset optional fields stay None; output defaults are applied
in one place by Item.resolved().
"""

import re
from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Union

Scalar = Union[str, int, float, bool, None]

# Fixed schema, by the property names used in item tables
FIXED_FIELDS = (
    "name",
    "label",
    "weight",
    "type",
    "image",
    "unique",
    "useable",
    "shouldClose",
    "description",
    "ammotype",
    "combinable",
)

# Property names that differ from the dataclass attribute
ATTRIBUTE_NAMES = {"shouldClose": "should_close"}

DEFAULT_WEIGHT = 0
DEFAULT_TYPE = "item"
DEFAULT_IMAGE = "default.png"


@dataclass
class ResolvedItem:
    """Fixed fields of an item with output defaults applied."""
    key: str
    name: str
    label: str
    weight: Scalar
    type: Scalar
    image: Scalar
    unique: Scalar
    useable: Scalar
    should_close: Scalar
    description: Scalar = None
    ammotype: Scalar = None
    combinable: Scalar = None
    extra: Dict[str, Scalar] = field(default_factory=dict)


@dataclass
class Item:
    """
    One game item.

    `extra` holds every property outside the fixed schema, in the order the
    properties were first seen. Serializers iterate it as-is.
    """
    key: Optional[str]
    name: Optional[Scalar] = None
    label: Optional[Scalar] = None
    weight: Optional[Scalar] = None
    type: Optional[Scalar] = None
    image: Optional[Scalar] = None
    unique: Optional[Scalar] = None
    useable: Optional[Scalar] = None
    should_close: Optional[Scalar] = None
    description: Optional[Scalar] = None
    ammotype: Optional[Scalar] = None
    combinable: Optional[Scalar] = None
    extra: Dict[str, Scalar] = field(default_factory=dict)

    def __repr__(self):
        return f"Item({self.key!r}, {len(self.extra)} extra)"

    def set_field(self, prop: str, value: Scalar) -> None:
        """
        Assign a property by its table name.

        Known names go to the typed attribute, `key` re-keys the record and
        anything else lands in `extra`.
        """
        if prop == "key":
            self.key = None if value is None else str(value)
        elif prop in FIXED_FIELDS:
            setattr(self, ATTRIBUTE_NAMES.get(prop, prop), value)
        else:
            self.extra[prop] = value

    def get_field(self, prop: str) -> Scalar:
        """Read a property by its table name (None when unset)."""
        if prop == "key":
            return self.key
        if prop in FIXED_FIELDS:
            return getattr(self, ATTRIBUTE_NAMES.get(prop, prop))
        return self.extra.get(prop)

    def resolved(self) -> ResolvedItem:
        """Return the fixed fields with output defaults applied."""
        return ResolvedItem(
            key=self.key,
            name=self.name or self.key,
            label=self.label or self.name or self.key,
            weight=self.weight or DEFAULT_WEIGHT,
            type=self.type or DEFAULT_TYPE,
            image=self.image or DEFAULT_IMAGE,
            unique=self.unique or False,
            useable=self.useable or False,
            # explicit false survives, only "unset" becomes true
            should_close=True if self.should_close is None else self.should_close,
            description=self.description,
            ammotype=self.ammotype,
            combinable=self.combinable,
            extra=self.extra,
        )

    def to_dict(self) -> Dict[str, Any]:
        """Set properties by table name, fixed fields first, then extras."""
        data: Dict[str, Any] = {"key": self.key}
        for prop in FIXED_FIELDS:
            value = self.get_field(prop)
            if value is not None:
                data[prop] = value
        data.update(self.extra)
        return data


def format_label(key: str) -> str:
    """Turn an item key into a display label: `combat_pistol` -> `Combat Pistol`."""
    return re.sub(r"\b\w", lambda m: m.group(0).upper(), key.replace("_", " "))
