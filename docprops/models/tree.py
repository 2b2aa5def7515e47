"""Generic XML tree representation shared by the decoder and the mappers.

A decoded document is a recursive union:

- ``str``: an element that carries only text (``""`` when empty)
- ``dict``: an element with attributes and/or children; attributes live under
  ``ATTRIBUTES_KEY``, text under ``TEXT_KEY``, each child name maps to a list
- ``list``: every child element, in document order, even when it occurs once

The top level is ``{root_name: root_node}``.
"""

from typing import Any, Dict, List, Union

ATTRIBUTES_KEY = "$"
TEXT_KEY = "_"

XmlNode = Union[str, Dict[str, Any], List[Any]]


class _Missing:
    """Sentinel for a path that does not resolve."""

    _instance = None

    def __new__(cls) -> "_Missing":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __bool__(self) -> bool:
        return False

    def __repr__(self) -> str:
        return "MISSING"


MISSING = _Missing()
