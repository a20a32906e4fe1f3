"""Well-formedness checks for generated or uploaded text.

XML is parsed with lxml; these checks catch syntax errors and missing WSDL
sections, not schema violations.
"""

from __future__ import annotations

import json
from typing import Any, List, Optional, Tuple

from lxml import etree

from grid_protocol.models import ValidationResult
from grid_protocol.protocols.wsdl import WSDL11_NAMESPACE

WSDL11_SECTIONS = ["definitions", "types", "message", "portType", "binding", "service"]
WSDL20_SECTIONS = ["description", "types", "interface", "binding", "service"]


def _parse_xml(content: Any) -> Tuple[Optional[etree._Element], List[str]]:
    if not isinstance(content, str) or not content.strip():
        return None, ["No XML content provided"]
    # Bytes, so documents carrying an encoding declaration are accepted.
    parser = etree.XMLParser(resolve_entities=False, no_network=True)
    try:
        return etree.fromstring(content.encode("utf-8"), parser), []
    except etree.XMLSyntaxError as e:
        return None, [f"Invalid XML: {e}"]


def validate_xml(content: Any) -> ValidationResult:
    _, errors = _parse_xml(content)
    return ValidationResult.from_errors(errors)


def validate_json(content: Any) -> ValidationResult:
    if not isinstance(content, str):
        return ValidationResult.from_errors(["No JSON content provided"])
    try:
        json.loads(content)
    except (ValueError, RecursionError) as e:
        return ValidationResult.from_errors([f"Invalid JSON: {e}"])
    return ValidationResult.from_errors([])


def validate_wsdl(content: Any) -> ValidationResult:
    """Well-formed XML plus every section its WSDL version requires."""
    root, errors = _parse_xml(content)
    if root is None:
        return ValidationResult.from_errors(errors)

    present = {
        etree.QName(element).localname
        for element in root.iter()
        if isinstance(element.tag, str)
    }
    sections = WSDL11_SECTIONS if etree.QName(root).namespace == WSDL11_NAMESPACE else WSDL20_SECTIONS
    missing = [s for s in sections if s not in present]
    if missing:
        return ValidationResult.from_errors([f"Missing required WSDL elements: {', '.join(missing)}"])
    return ValidationResult.from_errors([])


def check_output(text: str, kind: str) -> ValidationResult:
    """Well-formedness check matching a format key's output."""
    kind = kind.lower()
    if kind == "wsdl":
        return validate_wsdl(text)
    if kind == "jsonrpc":
        return validate_json(text)
    return validate_xml(text)
