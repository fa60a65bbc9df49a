"""
Data Output Formats

JSON and CSV encoders. Both are batch encoders like the Lua formats: the
JSON encoder writes the entries of the `Items` object for one batch (the
object braces live in the header and footer), so batches can be joined
with a comma and the result is the same document json.dumps would write
with indent=2.
"""

import csv
import io
import json
from typing import Any, Dict, Iterable

from ..model import Item
from .escaping import text_cell

JSON_INDENT = 2
JSON_HEADER = '{\n  "Items": {'
JSON_FOOTER = "\n  }\n}"
JSON_SEPARATOR = ","

CSV_COLUMNS = (
    "key",
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
)
CSV_HEADER = ",".join(CSV_COLUMNS) + "\n"


def json_object(item: Item) -> Dict[str, Any]:
    """The JSON object written for one item."""
    r = item.resolved()
    data = {
        "name": r.name,
        "label": r.label,
        "weight": r.weight,
        "type": r.type,
        "image": r.image,
        "unique": r.unique,
        "useable": r.useable,
        "shouldClose": r.should_close,
    }
    if r.description:
        data["description"] = r.description
    if r.ammotype:
        data["ammotype"] = r.ammotype
    if r.combinable:
        data["combinable"] = r.combinable
    for prop, value in r.extra.items():
        # Fixed names win over an extra of the same name
        data.setdefault(prop, value)
    return data


def encode_json(items: Iterable[Item]) -> str:
    # Later duplicates overwrite earlier ones but keep the first position
    objects: Dict[str, Dict[str, Any]] = {}
    for item in items:
        if item.key:
            objects[item.key] = json_object(item)

    entries = []
    for key, data in objects.items():
        body = json.dumps(data, indent=JSON_INDENT, ensure_ascii=False)
        body = body.replace("\n", "\n    ")
        entries.append(f"\n    {json.dumps(key, ensure_ascii=False)}: {body}")
    return JSON_SEPARATOR.join(entries)


def encode_csv(items: Iterable[Item]) -> str:
    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator="\n")
    for item in items:
        if not item.key:
            continue
        r = item.resolved()
        writer.writerow([
            r.key,
            text_cell(r.name),
            text_cell(r.label),
            text_cell(r.weight),
            text_cell(r.type),
            text_cell(r.image),
            text_cell(r.unique),
            text_cell(r.useable),
            text_cell(r.should_close),
            text_cell(r.description),
            text_cell(r.ammotype),
        ])
    return buffer.getvalue()
