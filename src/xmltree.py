import re
import xml.etree.ElementTree as ET
from typing import Any, Dict, Set

from errors import ReportSyntaxError

#Element text that sits next to attributes or child elements
TEXT_KEY = "_"

#xsi:type, xsi:nil and other schema-instance attributes are dropped
XSI_NAMESPACE = "{http://www.w3.org/2001/XMLSchema-instance}"


def _local_name(name) -> str:
    local = name.split("}")[-1] if isinstance(name, str) else str(name)
    return local.strip().lower()


def _clean_text(text) -> str:
    if not text:
        return ""
    return re.sub(r"\s+", " ", text).strip()


def _element_text(element) -> str:
    parts = [element.text or ""]
    for child in element:
        parts.append(child.tail or "")
    return _clean_text(" ".join(parts))


def _add_child(node: Dict[str, Any], key: str, value: Any, child_keys: Set[str]) -> None:
    if key not in child_keys:
        # a child replaces an attribute of the same name
        child_keys.add(key)
        node[key] = value
        return
    existing = node[key]
    if isinstance(existing, list):
        existing.append(value)
    else:
        node[key] = [existing, value]


def _element_to_node(element) -> Any:
    node: Dict[str, Any] = {}
    for attr_name, attr_value in element.attrib.items():
        if attr_name.startswith(XSI_NAMESPACE):
            continue
        key = _local_name(attr_name)
        if key:
            node[key] = _clean_text(attr_value)

    child_keys: Set[str] = set()
    for child in element:
        if not isinstance(child.tag, str):
            continue
        key = _local_name(child.tag)
        if not key:
            continue
        _add_child(node, key, _element_to_node(child), child_keys)

    text = _element_text(element)
    if not node:
        return text
    if text:
        node[TEXT_KEY] = text
    return node


def parse_xml_tree(xml_bytes) -> Dict[str, Any]:
    """Parse an XML upload into nested dicts keyed by lower-cased tag name.

    Attributes share the mapping of their element, repeated tags become lists
    and the root element itself is unwrapped. Anything that is not well-formed
    UTF-8 XML raises ReportSyntaxError.
    """
    if isinstance(xml_bytes, str):
        text = xml_bytes
    else:
        try:
            text = bytes(xml_bytes or b"").decode("utf-8-sig")
        except UnicodeDecodeError as e:
            raise ReportSyntaxError(f"Invalid UTF-8 encoding: {e}") from e
    if not text.strip():
        raise ReportSyntaxError("XML document is empty")

    try:
        root_element = ET.fromstring(text)
    except ET.ParseError as e:
        raise ReportSyntaxError(str(e)) from e

    try:
        tree = _element_to_node(root_element)
    except RecursionError as e:
        raise ReportSyntaxError("XML document is nested too deeply") from e

    if isinstance(tree, dict):
        return tree
    return {TEXT_KEY: tree} if tree else {}
