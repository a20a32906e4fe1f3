from __future__ import annotations

import html
import logging
import re
from typing import Any, List

from grid_protocol.models import GridRow, ParseResult, ValidationResult
from grid_protocol.protocols.base import WireProtocol, render_template

logger = logging.getLogger(__name__)

# Unlike WSDL, blank occurrence cells fall back to the XSD default of "1".
DEFAULT_OCCURS = "1"

_ROOT_ELEMENT_RE = re.compile(r'<xsd:element name="([^"]+)">')
_TARGET_NAMESPACE_RE = re.compile(r'targetNamespace="([^"]+)"')
_SEQUENCE_RE = re.compile(r"<xsd:sequence>(.*?)</xsd:sequence>", re.DOTALL)
_ELEMENT_RE = re.compile(r'<xsd:element\s+name="([^"]+)"\s+type="([^"]+)"([^>]*)>')
_MIN_OCCURS_RE = re.compile(r'minOccurs="([^"]*)"')
_MAX_OCCURS_RE = re.compile(r'maxOccurs="([^"]*)"')


class XSDParseError(Exception):
    """Raised inside parse_input when a mandatory part of the schema is missing."""


def _qualified(type_name: str) -> str:
    return type_name if ":" in type_name else f"xsd:{type_name}"


class XSDProtocol(WireProtocol):
    """Single-level XML Schema: one root element wrapping a sequence of fields."""

    @property
    def version(self) -> str:
        return "1.0"

    def get_protocol_name(self) -> str:
        return "XSD"

    def get_supported_features(self) -> List[str]:
        return ["SchemaGeneration", "SchemaParsing"]

    def validate_structure(self, data: Any) -> ValidationResult:
        doc, errors = self._document_or_errors(data)
        if doc is None:
            return ValidationResult.from_errors(errors)

        if not doc.root_name.strip():
            errors.append("Root element name is required for XSD.")
        if not doc.target_namespace.strip():
            errors.append("Target namespace is required for XSD.")

        for index, row in enumerate(doc.grid_data, start=1):
            has_name = bool(row.name.strip())
            has_type = bool(row.type.strip())
            if has_name and not has_type:
                errors.append(f"Row {index}: Type is required for element '{row.name}'.")
            if has_type and not has_name:
                errors.append(f"Row {index}: Name is required if a type is specified.")

        return ValidationResult.from_errors(errors)

    def generate_output(self, data: Any) -> str:
        validation = self.validate_structure(data)
        if not validation.is_valid:
            return f"Error generating XSD: {', '.join(validation.errors)}"

        doc = self._document_or_errors(data)[0]
        elements = [
            {
                "name": row.name,
                "type": _qualified(row.type),
                "min_occurs": row.min_occurs or DEFAULT_OCCURS,
                "max_occurs": row.max_occurs or DEFAULT_OCCURS,
            }
            for row in doc.grid_data
            if row.name and row.type
        ]
        logger.debug(f"Generating XSD for '{doc.root_name}' with {len(elements)} element(s)")

        return render_template(
            "xsd.xml.j2",
            root_name=doc.root_name,
            target_namespace=doc.target_namespace,
            elements=elements,
        )

    def parse_input(self, text: Any) -> ParseResult:
        result = ParseResult()
        if not isinstance(text, str):
            result.error = "Failed to parse XSD: no input provided."
            return result
        if not text.strip():
            return result

        logger.debug("XSD parsing is pattern based and does not validate the schema")
        try:
            root_match = _ROOT_ELEMENT_RE.search(text)
            if not root_match:
                raise XSDParseError("Could not find root <xsd:element> name.")
            result.root_name = html.unescape(root_match.group(1))

            ns_match = _TARGET_NAMESPACE_RE.search(text)
            if not ns_match:
                raise XSDParseError("Could not find targetNamespace.")
            result.target_namespace = html.unescape(ns_match.group(1))

            sequence_match = _SEQUENCE_RE.search(text)
            if sequence_match:
                for index, m in enumerate(_ELEMENT_RE.finditer(sequence_match.group(1))):
                    rest = m.group(3)
                    min_match = _MIN_OCCURS_RE.search(rest)
                    max_match = _MAX_OCCURS_RE.search(rest)
                    result.grid_data.append(GridRow(
                        id=index,
                        name=html.unescape(m.group(1)),
                        type=html.unescape(m.group(2)).replace("xsd:", "", 1),
                        min_occurs=min_match.group(1) if min_match else DEFAULT_OCCURS,
                        max_occurs=max_match.group(1) if max_match else DEFAULT_OCCURS,
                    ))
        except XSDParseError as e:
            result.error = f"Failed to parse XSD: {e}"
            logger.warning(result.error)

        return result
