"""WSDL 1.1 / 2.0 service descriptions generated from and parsed into the grid."""

from __future__ import annotations

import html
import logging
import re
from typing import Any, Dict, List, Mapping, Optional, Set

from grid_protocol.models import GridRow, ParseResult, SchemaDocument, ValidationResult
from grid_protocol.protocols.base import WireProtocol, render_template

logger = logging.getLogger(__name__)

SUPPORTED_VERSIONS = ["1.1", "2.0"]
DEFAULT_VERSION = "2.0"

WSDL11_NAMESPACE = "http://schemas.xmlsoap.org/wsdl/"
WSDL20_NAMESPACE = "http://www.w3.org/ns/wsdl"

COMPLEX_TYPE = "complexType"

# Built-in XSD types accepted without a prefix.
XSD_PRIMITIVES = {
    "string", "int", "integer", "boolean", "decimal", "float", "double",
    "dateTime", "date", "time", "hexBinary", "base64Binary", "anyURI",
    "QName", "normalizedString", "token", "language", "NMTOKEN", "Name",
    "NCName", "ID", "IDREF", "IDREFS", "ENTITY", "ENTITIES", "NOTATION",
}

# Defaults for blank grid cells; "1" is the XSD default and is left implicit.
DEFAULT_MIN_OCCURS = "0"
DEFAULT_MAX_OCCURS = "1"
DEFAULT_TYPE = "xsd:string"

_SERVICE_RE = re.compile(r"<service\s+name=[\"']([^\"']*)[\"']")
_TARGET_NAMESPACE_RE = re.compile(r"targetNamespace=[\"']([^\"']*)[\"']")
_COMPLEX_TYPE_RE = re.compile(
    r"<xsd:complexType\s+name=[\"']([^\"']*)[\"']\s*>(.*?)</xsd:complexType>",
    re.DOTALL,
)
_ELEMENT_TAG_RE = re.compile(r"<xsd:element\b([^>]*?)/?>")
_ATTRIBUTE_RE = re.compile(r"([\w:]+)\s*=\s*[\"']([^\"']*)[\"']")


def _attributes(attr_text: str) -> Dict[str, str]:
    return {m.group(1): html.unescape(m.group(2)) for m in _ATTRIBUTE_RE.finditer(attr_text)}


def _explicit_occurs(value: str, default: str) -> Optional[str]:
    """None when the attribute would equal the XSD default of "1"."""
    value = value or default
    return None if value == "1" else value


def _element_descriptor(row: GridRow) -> Dict[str, Optional[str]]:
    return {
        "name": row.name,
        "type": row.type or DEFAULT_TYPE,
        "min_occurs": _explicit_occurs(row.min_occurs, DEFAULT_MIN_OCCURS),
        "max_occurs": _explicit_occurs(row.max_occurs, DEFAULT_MAX_OCCURS),
    }


class WSDLProtocol(WireProtocol):
    """Grid <-> WSDL converter.

    The configured version ("1.1" or "2.0") selects the document layout:
    1.1 emits <definitions> with message/portType and a SOAP 1.1 binding,
    2.0 emits <description> with an interface and a wsoap binding.
    """

    def __init__(self, config: Optional[Mapping[str, Any]] = None) -> None:
        super().__init__(config)
        self._version = str(self._config.get("version") or DEFAULT_VERSION)

    @property
    def version(self) -> str:
        return self._version

    def get_protocol_name(self) -> str:
        return "WSDL"

    def get_supported_features(self) -> List[str]:
        port_type_feature = "PortTypeDefinition" if self._version == "1.1" else "InterfaceDefinition"
        return [
            "ServiceDefinition",
            port_type_feature,
            "BindingDefinition",
            "MessageDefinition",
            "TypesDefinition",
            "ComplexTypeDefinition",
            "SimpleTypeDefinition",
            "ElementDeclaration",
            "AttributeDeclaration",
        ]

    # -- type system -------------------------------------------------------

    def is_valid_wsdl_type(self, type_name: Optional[str]) -> bool:
        if not type_name or not isinstance(type_name, str):
            return False
        return (
            type_name in XSD_PRIMITIVES
            or type_name.startswith("xsd:")
            or type_name.startswith("tns:")
            or self.is_complex_type_reference(type_name)
        )

    def is_complex_type_reference(self, type_name: Optional[str]) -> bool:
        """tns:-prefixed names and bare non-primitive names refer to complex types."""
        if not type_name or not isinstance(type_name, str):
            return False
        if type_name.startswith("tns:"):
            return True
        return ":" not in type_name and type_name not in XSD_PRIMITIVES

    def complex_type_exists(self, type_name: str, data: Any) -> bool:
        doc = SchemaDocument.coerce(data)
        if doc is None:
            return False
        wanted = type_name[len("tns:"):] if type_name.startswith("tns:") else type_name
        return any(r.name == wanted and r.type == COMPLEX_TYPE for r in doc.grid_data)

    # -- validation --------------------------------------------------------

    def validate_structure(self, data: Any) -> ValidationResult:
        doc, errors = self._document_or_errors(data)
        if doc is None:
            return ValidationResult.from_errors(errors)

        if not doc.root_name:
            errors.append("Root name is required")
        if not doc.target_namespace:
            errors.append("Target namespace is required for WSDL")
        if self._version not in SUPPORTED_VERSIONS:
            errors.append(
                f"Unsupported WSDL version: {self._version}. "
                f"Supported versions: {', '.join(SUPPORTED_VERSIONS)}"
            )

        for index, row in enumerate(doc.grid_data, start=1):
            if row.name and not row.type:
                errors.append(f"Row {index}: Type is required when name is specified")
            if not row.type:
                continue
            if not self.is_valid_wsdl_type(row.type):
                errors.append(f"Row {index}: Invalid WSDL type '{row.type}'")
            elif row.type != COMPLEX_TYPE and self.is_complex_type_reference(row.type):
                if not self.complex_type_exists(row.type, doc):
                    errors.append(f"Row {index}: Referenced complex type '{row.type}' not found")

        return ValidationResult.from_errors(errors)

    def validate_against_schema(self, wsdl_content: Any) -> ValidationResult:
        """Check that WSDL text carries the sections its version requires."""
        text = wsdl_content if isinstance(wsdl_content, str) else ""
        errors: List[str] = []

        if "<definitions" not in text and "<description" not in text:
            errors.append("Missing root element: definitions or description")
        if "<types>" not in text:
            errors.append("Missing types section")
        if self._version == "1.1" and "<message" not in text:
            errors.append("Missing message section for WSDL 1.1")
        if self._version == "1.1" and "<portType" not in text:
            errors.append("Missing portType section for WSDL 1.1")
        if "<service" not in text:
            errors.append("Missing service section")

        return ValidationResult.from_errors(errors)

    # -- generation --------------------------------------------------------

    def generate_output(self, data: Any) -> str:
        doc = SchemaDocument.coerce(data) or SchemaDocument()
        filled_rows = doc.filled_rows()

        complex_type_rows = [r for r in filled_rows if r.type == COMPLEX_TYPE]
        element_rows = [r for r in filled_rows if r.type != COMPLEX_TYPE]

        complex_types = []
        for ct_row in complex_type_rows:
            children = [r for r in filled_rows if r.structure == ct_row.name and r.name]
            complex_types.append({
                "name": ct_row.name,
                "elements": [_element_descriptor(c) for c in children],
            })

        # The root element wraps the top-level rows in an anonymous complex type.
        has_root = bool(element_rows or complex_type_rows)
        root_elements = [
            _element_descriptor(r) for r in element_rows if r.name and not r.structure
        ]

        logger.debug(
            f"Generating WSDL {self._version} for '{doc.root_name}': "
            f"{len(complex_type_rows)} complex type(s), {len(element_rows)} element row(s)"
        )

        return render_template(
            "wsdl.xml.j2",
            wsdl11=self._version == "1.1",
            root_name=doc.root_name,
            target_namespace=doc.target_namespace,
            complex_types=complex_types,
            has_root=has_root,
            root_elements=root_elements,
        )

    # -- parsing -----------------------------------------------------------

    def detect_version(self, text: str) -> str:
        if f'xmlns="{WSDL11_NAMESPACE}"' in text:
            return "1.1"
        if f'xmlns="{WSDL20_NAMESPACE}"' in text:
            return "2.0"
        return self._version

    def parse_input(self, text: Any) -> ParseResult:
        result = ParseResult(version=self._version)
        if not isinstance(text, str):
            result.error = "No WSDL content provided"
            return result
        if not text.strip():
            return result

        result.version = self.detect_version(text)

        service_match = _SERVICE_RE.search(text)
        service_name = html.unescape(service_match.group(1)) if service_match else ""

        ns_match = _TARGET_NAMESPACE_RE.search(text)
        if ns_match:
            result.target_namespace = html.unescape(ns_match.group(1))

        complex_blocks = list(_COMPLEX_TYPE_RE.finditer(text))
        remainder = _COMPLEX_TYPE_RE.sub("", text)

        declarations = [_attributes(m.group(1)) for m in _ELEMENT_TAG_RE.finditer(remainder)]
        result.root_name = self._root_name(service_name, text, {d.get("name") for d in declarations})

        complex_rows: List[GridRow] = []
        top_level_rows: List[GridRow] = []

        for block in complex_blocks:
            type_name, body = html.unescape(block.group(1)), block.group(2)
            children = [_attributes(m.group(1)) for m in _ELEMENT_TAG_RE.finditer(body)]
            complex_rows.append(GridRow(
                name=type_name,
                type=COMPLEX_TYPE,
                min_occurs="1",
                max_occurs="1",
            ))
            complex_rows.extend(self._row_from_declaration(c, type_name) for c in children if "type" in c)

        for decl in declarations:
            if decl.get("name") == result.root_name or "type" not in decl or "name" not in decl:
                continue
            top_level_rows.append(self._row_from_declaration(decl, ""))

        result.grid_data = complex_rows + top_level_rows
        for index, row in enumerate(result.grid_data):
            row.id = index

        if not (result.root_name or result.target_namespace or result.grid_data):
            result.error = "No WSDL definitions found in input"
            logger.warning("WSDL input did not contain a service, namespace or elements")
        else:
            logger.debug(
                f"Parsed WSDL {result.version} '{result.root_name}' with {len(result.grid_data)} row(s)"
            )
        return result

    @staticmethod
    def _root_name(service_name: str, text: str, declared_names: Set[Optional[str]]) -> str:
        """Generated documents name the service "<root>Service" and the binding "<root>Binding"."""
        if service_name in declared_names or not service_name.endswith("Service"):
            return service_name
        stripped = service_name[: -len("Service")]
        if not stripped:
            return service_name
        binding_re = re.compile(r"<binding\s+name=[\"']" + re.escape(stripped) + r"Binding[\"']")
        if stripped in declared_names or binding_re.search(text):
            return stripped
        return service_name

    @staticmethod
    def _row_from_declaration(decl: Dict[str, str], structure: str) -> GridRow:
        return GridRow(
            name=decl.get("name", ""),
            type=decl.get("type", ""),
            min_occurs=decl.get("minOccurs", "1"),
            max_occurs=decl.get("maxOccurs", "1"),
            structure=structure,
        )
