"""Schema property mapper - fixed property paths to typed output values."""

import logging
import math
import re
from functools import lru_cache
from typing import Any, Dict, Iterable, List, Tuple, Union

from docprops.models.schema import PropertySchemaEntry, PropertyType
from docprops.models.tree import MISSING, TEXT_KEY

logger = logging.getLogger(__name__)

PathSegment = Union[str, int]

_SEGMENT_RE = re.compile(r"([^.\[\]]+)|\[(\d+)\]")

_INTEGER_RE = re.compile(r"[+-]?\d+")
_DECIMAL_RE = re.compile(r"[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?")
_BINARY_RE = re.compile(r"0b[01]+", re.IGNORECASE)
_OCTAL_RE = re.compile(r"0o[0-7]+", re.IGNORECASE)
_HEX_RE = re.compile(r"0x[0-9a-f]+", re.IGNORECASE)
_INFINITY_RE = re.compile(r"([+-]?)Infinity")


@lru_cache(maxsize=256)
def parse_path(path: str) -> Tuple[PathSegment, ...]:
    """Split ``a.b[0].c`` into ``("a", "b", 0, "c")``."""
    segments: List[PathSegment] = []
    for match in _SEGMENT_RE.finditer(path):
        name, index = match.groups()
        segments.append(int(index) if index is not None else name)
    return tuple(segments)


def lookup_path(tree: Any, path: str) -> Any:
    """Walk ``path`` through ``tree``.

    Returns:
        The value found, or MISSING when any segment does not resolve.
    """
    current = tree
    for segment in parse_path(path):
        if isinstance(segment, int):
            if not isinstance(current, list) or segment >= len(current):
                return MISSING
            current = current[segment]
        else:
            if not isinstance(current, dict) or segment not in current:
                return MISSING
            current = current[segment]
    return current


def to_number(value: Any) -> Union[int, float]:
    """Coerce a decoded value to a number.

    Blank text is 0, integers stay ``int``, decimal and exponent notation
    give ``float``, 0x/0o/0b literals are honored and anything else is NaN.
    """
    if isinstance(value, bool):
        return int(value)
    if isinstance(value, (int, float)):
        return value
    if value is None:
        return 0
    if isinstance(value, list):
        return to_number(value[0]) if len(value) == 1 else (0 if not value else math.nan)
    if isinstance(value, dict):
        text = value.get(TEXT_KEY)
        return to_number(text) if isinstance(text, str) else math.nan

    text = str(value).strip()
    if not text:
        return 0
    if _INTEGER_RE.fullmatch(text):
        return int(text)
    if _DECIMAL_RE.fullmatch(text):
        return float(text)
    if _HEX_RE.fullmatch(text):
        return int(text[2:], 16)
    if _OCTAL_RE.fullmatch(text):
        return int(text[2:], 8)
    if _BINARY_RE.fullmatch(text):
        return int(text[2:], 2)

    infinity = _INFINITY_RE.fullmatch(text)
    if infinity:
        return -math.inf if infinity.group(1) == "-" else math.inf
    return math.nan


def to_text(value: Any) -> str:
    """Coerce a decoded value to text; sequences join with commas."""
    if value is None:
        return ""
    if isinstance(value, str):
        return value
    if isinstance(value, list):
        return ",".join(to_text(item) for item in value)
    if isinstance(value, dict):
        return to_text(value.get(TEXT_KEY))
    return str(value)


def set_nested(data: Dict[str, Any], dotted_key: str, value: Any) -> None:
    """Place ``value`` at ``dotted_key``, creating intermediate mappings."""
    *parents, leaf = dotted_key.split(".")
    current = data
    for part in parents:
        child = current.get(part)
        if not isinstance(child, dict):
            child = {}
            current[part] = child
        current = child
    current[leaf] = value


def map_schema_properties(
    tree: Any,
    entries: Iterable[PropertySchemaEntry],
) -> Dict[str, Any]:
    """Extract the properties described by ``entries`` from a decoded tree.

    Missing paths are skipped. Empty string values are dropped; number
    values are always stored, NaN included.

    Args:
        tree: Decoded XML tree.
        entries: Schema entries for the archive member the tree came from.

    Returns:
        New partial result mapping.
    """
    data: Dict[str, Any] = {}

    for entry in entries:
        raw = lookup_path(tree, entry.path)
        if raw is MISSING:
            continue

        if entry.type == PropertyType.NUMBER:
            value: Any = to_number(raw)
        else:
            value = to_text(raw)
            if not value:
                continue

        set_nested(data, entry.name, value)

    logger.debug(f"Mapped {len(data)} schema properties")
    return data
