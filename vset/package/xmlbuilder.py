"""Render xml2js-shaped dictionaries as pretty-printed XML text.

The object shape mirrors what the package manifest template uses:

* a dictionary with exactly one key describes the document root;
* ``$`` holds an element's attributes and ``_`` its text content;
* every other key names a child element, and a list value produces one
  child element per item.
"""

from __future__ import annotations

import xml.etree.ElementTree as ET
from typing import Any, Mapping

XML_DECLARATION = '<?xml version="1.0" encoding="utf-8"?>'
ATTRIBUTES_KEY = "$"
TEXT_KEY = "_"


def build_xml(document: Mapping[str, Any], *, indent: str = "    ") -> str:
    """Return ``document`` as XML text preceded by the UTF-8 declaration."""

    if len(document) != 1:
        raise ValueError(f"XML document must have exactly one root element (got {len(document)})")
    (tag, value), = document.items()
    root = ET.Element(tag)
    _populate(root, value)
    ET.indent(root, space=indent)
    body = ET.tostring(root, encoding="unicode")
    return f"{XML_DECLARATION}\n{body}"


def _populate(element: ET.Element, value: Any) -> None:
    if value is None:
        return
    if not isinstance(value, Mapping):
        element.text = _text(value)
        return
    for key, child in value.items():
        if key == ATTRIBUTES_KEY:
            for name, attr in (child or {}).items():
                element.set(name, _text(attr))
        elif key == TEXT_KEY:
            element.text = _text(child)
        else:
            items = child if isinstance(child, list) else [child]
            for item in items:
                _populate(ET.SubElement(element, key), item)


def _text(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)
