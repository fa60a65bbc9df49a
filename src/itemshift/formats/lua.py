"""
Lua Output Formats

Encoders for the three Lua-flavoured outputs:

- original: one `['key'] = { ... },` block per item
- compact: one pipe-delimited line per item, loaded by the preamble routine
- minimal: one `add_item(...)` call per item

Each encoder takes a batch of items and returns that batch's text. Items
without a key are skipped. Headers are string.Template text with a
`$namespace` placeholder for the shared table name.
"""

from typing import Iterable, List

from ..model import Item
from .escaping import escape_lua_string, lua_key, lua_literal, lua_text, lua_value

COMPACT_SEPARATOR = " | "
EXTRAS_SEPARATOR = ";"

TABLE_HEADER = """\
${namespace} = ${namespace} or {}
${namespace}.Items = {
"""

TABLE_FOOTER = "}"

# Wire format of the compact output. The loader below is emitted verbatim;
# columns are key, label, weight, type, image, unique, useable, description,
# ammotype and an optional `k=v;k=v` extras column.
COMPACT_HEADER = """\
-- Compact items loader: one line per item using pipes (|).
${namespace} = ${namespace} or {}
${namespace}.Items = ${namespace}.Items or {}

local function trim(s) return (s:gsub("^%s+",""):gsub("%s+$","")) end
local function tobool(s)
  s = s and s:lower()
  if s == "true" then return true end
  if s == "false" then return false end
  return nil
end
local function tonum(s)
  local n = tonumber(s)
  return n or s
end
local function parse_extras(s)
  local t = {}
  if not s or s == "" then return t end
  for pair in s:gmatch("[^;]+") do
    local k,v = pair:match("^%s*([^=]+)%s*=%s*(.+)%s*$")
    if k then
      v = trim(v)
      local bv = tobool(v)
      if bv ~= nil then
        t[k] = bv
      elseif v:match("^%d+$") then
        t[k] = tonumber(v)
      else
        t[k] = v
      end
    end
  end
  return t
end

local function add_compact_line(line)
  local cols = {}
  for part in line:gmatch("[^|]+") do cols[#cols+1] = trim(part) end
  if #cols < 8 then return end
  local key, label, weight, itype, image, unique, useable, desc = cols[1], cols[2], tonum(cols[3]), cols[4], cols[5], tobool(cols[6]), tobool(cols[7]), cols[8]
  local ammotype = cols[9] and cols[9] ~= "" and cols[9] or nil
  local extras = parse_extras(cols[10])

  local item = {
    name        = key,
    label       = label,
    weight      = type(weight)=="number" and weight or tonumber(weight) or 0,
    type        = itype,
    image       = image,
    unique      = unique == true,
    useable     = useable == true,
    shouldClose = (extras.shouldClose ~= nil) and extras.shouldClose or true,
    combinable  = extras.combinable or nil,
    description = desc,
    ammotype    = ammotype,
  }

  for k,v in pairs(extras) do
    if k ~= "shouldClose" and k ~= "combinable" then
      item[k] = v
    end
  end

  ${namespace}.Items[key] = item
end

local function load_compact_block(block)
  for raw in block:gmatch("[^\\r\\n]+") do
    local line = trim(raw)
    if line ~= "" and not line:match("^%-%-") and not line:match("^#") then
      add_compact_line(line)
    end
  end
end

-- Converted items data:
"""

MINIMAL_HEADER = """\
-- Optimized items format - ultra compact
${namespace} = ${namespace} or {}
${namespace}.Items = ${namespace}.Items or {}

local function add_item(k, l, w, t, i, u, us, d)
  ${namespace}.Items[k] = {
    name = k, label = l, weight = w, type = t, image = i,
    unique = u, useable = us, shouldClose = true, description = d
  }
end

-- Items:
"""


def _keyed(items: Iterable[Item]) -> Iterable[Item]:
    return (item for item in items if item.key)


def encode_table(items: Iterable[Item]) -> str:
    lines: List[str] = []
    for item in _keyed(items):
        r = item.resolved()
        lines.append(f"    ['{escape_lua_string(r.key)}'] = {{")
        lines.append(f"        name = '{lua_text(r.name)}',")
        lines.append(f"        label = '{lua_text(r.label)}',")
        lines.append(f"        weight = {lua_literal(r.weight)},")
        lines.append(f"        type = '{lua_text(r.type)}',")
        lines.append(f"        image = '{lua_text(r.image)}',")
        lines.append(f"        unique = {lua_literal(r.unique)},")
        lines.append(f"        useable = {lua_literal(r.useable)},")
        lines.append(f"        shouldClose = {lua_literal(r.should_close)},")
        if r.description:
            lines.append(f"        description = '{lua_text(r.description)}',")
        if r.ammotype:
            lines.append(f"        ammotype = '{lua_text(r.ammotype)}',")
        if r.combinable:
            lines.append(f"        combinable = {lua_literal(r.combinable)},")
        for prop, value in r.extra.items():
            lines.append(f"        {lua_key(prop)} = {lua_value(value)},")
        lines.append("    },")
    return "".join(f"{line}\n" for line in lines)


def compact_extras(item: Item) -> List[str]:
    """The `k=v` pairs of an item's extras column, in output order."""
    extras = []
    if item.should_close is not None and item.should_close is not True:
        extras.append(f"shouldClose={lua_literal(item.should_close)}")
    if item.combinable:
        extras.append(f"combinable={lua_literal(item.combinable)}")
    for prop, value in item.extra.items():
        if isinstance(value, str):
            extras.append(f"{prop}={escape_lua_string(value)}")
        else:
            extras.append(f"{prop}={lua_literal(value)}")
    return extras


def encode_compact(items: Iterable[Item]) -> str:
    rows = []
    for item in _keyed(items):
        r = item.resolved()
        columns = [
            escape_lua_string(r.key),
            lua_text(r.label),
            lua_literal(r.weight),
            lua_text(r.type),
            lua_text(r.image),
            lua_literal(r.unique),
            lua_literal(r.useable),
            lua_text(r.description),
            lua_text(r.ammotype),
        ]
        extras = compact_extras(item)
        if extras:
            columns.append(EXTRAS_SEPARATOR.join(extras))
        rows.append(COMPACT_SEPARATOR.join(columns))
    return "".join(f"{row}\n" for row in rows)


def encode_minimal(items: Iterable[Item]) -> str:
    rows = []
    for item in _keyed(items):
        r = item.resolved()
        rows.append(
            f"add_item('{escape_lua_string(r.key)}', '{lua_text(r.label)}', "
            f"{lua_literal(r.weight)}, '{lua_text(r.type)}', '{lua_text(r.image)}', "
            f"{lua_literal(r.unique)}, {lua_literal(r.useable)}, '{lua_text(r.description)}')"
        )
    return "".join(f"{row}\n" for row in rows)
