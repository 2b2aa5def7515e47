"""XML tree decoder - turns an entry's bytes into a generic XmlNode tree."""

import io
import logging
from typing import Any, Dict, List, Optional, Tuple
from xml.etree.ElementTree import Element

from defusedxml import DefusedXmlException
from defusedxml import ElementTree as DefusedET

from docprops.core.exceptions import XmlDecodeError
from docprops.models.tree import ATTRIBUTES_KEY, TEXT_KEY, XmlNode

logger = logging.getLogger(__name__)

XML_NAMESPACE = "http://www.w3.org/XML/1998/namespace"

# Namespace URI -> prefix bindings visible at one element
Scope = Dict[str, str]


def _qualify(name: str, scope: Scope) -> str:
    """Map a Clark-notation name back to the prefix bound in ``scope``."""
    if not name.startswith("{"):
        return name
    uri, local = name[1:].split("}", 1)
    prefix = scope.get(uri, "")
    return f"{prefix}:{local}" if prefix else local


def _convert(element: Element, scopes: Dict[Element, Scope]) -> XmlNode:
    scope = scopes[element]
    attributes = {_qualify(k, scope): str(v) for k, v in element.attrib.items()}
    children = list(element)
    text = (element.text or "") + "".join(child.tail or "" for child in children)

    if not text.strip():
        text = ""

    if not attributes and not children:
        return text

    node: Dict[str, Any] = {}
    if attributes:
        node[ATTRIBUTES_KEY] = attributes
    if text:
        node[TEXT_KEY] = text
    for child in children:
        node.setdefault(_qualify(child.tag, scopes[child]), []).append(_convert(child, scopes))
    return node


def _parse(data: bytes) -> Tuple[Optional[Element], Dict[Element, Scope]]:
    """Parse ``data``, recording the namespace bindings in scope at each element."""
    scopes: Dict[Element, Scope] = {}
    stack: List[Scope] = [{XML_NAMESPACE: "xml"}]
    pending: List[Tuple[str, str]] = []
    root: Optional[Element] = None

    events = ("start-ns", "start", "end")
    for event, payload in DefusedET.iterparse(io.BytesIO(data), events=events):
        if event == "start-ns":
            pending.append(payload)
        elif event == "start":
            scope = stack[-1]
            if pending:
                scope = dict(scope)
                for prefix, uri in pending:
                    scope[uri] = prefix
                pending = []
            stack.append(scope)
            scopes[payload] = scope
        else:
            stack.pop()
            root = payload

    return root, scopes


def decode_xml(data: bytes, entry_name: Optional[str] = None) -> Dict[str, XmlNode]:
    """Decode XML bytes into ``{root_name: root_node}``.

    Args:
        data: Complete XML document.
        entry_name: Archive member the bytes came from, used in error messages.

    Returns:
        The decoded tree.

    Raises:
        XmlDecodeError: Malformed XML, DTD entities/external references, or
            nesting too deep to convert.
    """
    try:
        root, scopes = _parse(data)
    except (DefusedET.ParseError, DefusedXmlException, ValueError) as e:
        raise XmlDecodeError(str(e) or type(e).__name__, entry_name) from e

    if root is None:
        raise XmlDecodeError("no root element", entry_name)

    try:
        return {_qualify(root.tag, scopes[root]): _convert(root, scopes)}
    except RecursionError as e:
        raise XmlDecodeError("elements nested too deeply", entry_name) from e
