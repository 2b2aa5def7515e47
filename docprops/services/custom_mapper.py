"""Custom property mapper - user-defined properties from docProps/custom.xml."""

import logging
from typing import Any, Dict, List, Optional

from docprops.models.properties import CustomProperty, kind_for_tag
from docprops.models.tree import ATTRIBUTES_KEY, TEXT_KEY

logger = logging.getLogger(__name__)


def _split_words(name: str) -> List[str]:
    """Split a property name into words.

    A non-alphanumeric character ends the current word. An uppercase letter
    starts a new word after a lowercase letter or digit, and inside a run of
    capitals it starts a new word when followed by a lowercase letter
    (``HTTPServer`` -> ``HTTP``, ``Server``). Digits stay with the word before.
    """
    words: List[str] = []
    current = ""

    for index, char in enumerate(name):
        if not char.isalnum():
            if current:
                words.append(current)
                current = ""
            continue

        if current and char.isupper():
            prev = current[-1]
            following = name[index + 1] if index + 1 < len(name) else ""
            if not prev.isupper() or following.islower():
                words.append(current)
                current = ""

        current += char

    if current:
        words.append(current)
    return words


def normalize_property_name(name: str) -> str:
    """Turn a declared property name into a camelCase key.

    ``"Document Owner"`` -> ``documentOwner``, ``"invoice_ID"`` -> ``invoiceId``.
    """
    words = _split_words(name)
    if not words:
        return ""
    head, *rest = words
    return head.lower() + "".join(word[:1].upper() + word[1:].lower() for word in rest)


def _find_local(node: Any, local_name: str) -> Optional[Any]:
    """Child of ``node`` whose name, ignoring any prefix, is ``local_name``."""
    if not isinstance(node, dict):
        return None
    for key, value in node.items():
        if key.rsplit(":", 1)[-1] == local_name:
            return value
    return None


def read_custom_properties(tree: Any) -> List[CustomProperty]:
    """Discover the custom properties in a decoded custom.xml tree.

    Returns an empty list when the document declares none. Properties without
    a name, without a value element, or whose name has no word characters are
    skipped.
    """
    root = _find_local(tree, "Properties")
    elements = _find_local(root, "property")
    if not isinstance(elements, list) or not elements:
        return []

    properties: List[CustomProperty] = []

    for element in elements:
        if not isinstance(element, dict):
            logger.warning("Skipping custom property without attributes or value")
            continue

        name = element.get(ATTRIBUTES_KEY, {}).get("name")
        if not name:
            logger.warning("Skipping custom property without a name")
            continue

        value_type = next((k for k in element if k not in (ATTRIBUTES_KEY, TEXT_KEY)), None)
        if value_type is None or not element[value_type]:
            logger.warning(f"Skipping custom property '{name}': no value element")
            continue

        key = normalize_property_name(name)
        if not key:
            logger.warning(f"Skipping custom property '{name}': name has no word characters")
            continue

        properties.append(
            CustomProperty(
                name=name,
                key=key,
                kind=kind_for_tag(value_type),
                value_type=value_type,
                value=element[value_type][0],
            )
        )

    return properties


def map_custom_properties(tree: Any) -> Dict[str, Any]:
    """Map custom properties to ``{normalized name: raw value}``.

    Later properties overwrite earlier ones whose names normalize alike.
    """
    return {prop.key: prop.value for prop in read_custom_properties(tree)}
