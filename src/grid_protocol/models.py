from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional


class ProtocolKind(Enum):
    WSDL = "wsdl"
    SOAP = "soap"
    JSONRPC = "jsonrpc"
    XSD = "xsd"
    SAP = "sap"


def _text(value: Any) -> str:
    """Coerce a grid cell to a string; None becomes empty."""
    if value is None:
        return ""
    if isinstance(value, str):
        return value
    return str(value)


def _pick(data: Mapping[str, Any], camel: str, snake: str) -> Any:
    if camel in data:
        return data[camel]
    return data.get(snake)


@dataclass
class GridRow:
    """One row of the tabular schema model."""

    id: int = 0
    structure: str = ""
    field: str = ""
    name: str = ""
    type: str = ""
    min_occurs: str = ""
    max_occurs: str = ""

    @classmethod
    def from_dict(cls, data: Any, index: int = 0) -> GridRow:
        if isinstance(data, GridRow):
            return data
        if not isinstance(data, Mapping):
            return cls(id=index)
        row_id = data.get("id")
        return cls(
            id=row_id if isinstance(row_id, int) else index,
            structure=_text(data.get("structure")),
            field=_text(data.get("field")),
            name=_text(data.get("name")),
            type=_text(data.get("type")),
            min_occurs=_text(_pick(data, "minOccurs", "min_occurs")),
            max_occurs=_text(_pick(data, "maxOccurs", "max_occurs")),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "type": self.type,
            "minOccurs": self.min_occurs,
            "maxOccurs": self.max_occurs,
            "structure": self.structure,
            "field": self.field,
        }


def is_empty_row(row: GridRow) -> bool:
    """A row with no name, type, field or structure carries no schema content."""
    return not (row.name or row.type or row.field or row.structure)


@dataclass
class SchemaDocument:
    root_name: str = ""
    target_namespace: str = ""
    xml_namespace: str = ""
    grid_data: List[GridRow] = field(default_factory=list)
    message_type: str = ""

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> SchemaDocument:
        raw_rows = _pick(data, "gridData", "grid_data")
        rows: List[GridRow] = []
        if isinstance(raw_rows, (list, tuple)):
            rows = [GridRow.from_dict(r, i) for i, r in enumerate(raw_rows)]
        return cls(
            root_name=_text(_pick(data, "rootName", "root_name")),
            target_namespace=_text(_pick(data, "targetNamespace", "target_namespace")),
            xml_namespace=_text(_pick(data, "xmlNamespace", "xml_namespace")),
            grid_data=rows,
            message_type=_text(_pick(data, "messageType", "message_type")),
        )

    @classmethod
    def coerce(cls, data: Any) -> Optional[SchemaDocument]:
        """Normalize caller input into a SchemaDocument.

        Returns None when the input is neither a document nor a mapping.
        """
        if data is None:
            return cls()
        if isinstance(data, SchemaDocument):
            return data
        if isinstance(data, Mapping):
            return cls.from_dict(data)
        return None

    def filled_rows(self) -> List[GridRow]:
        return [r for r in self.grid_data if not is_empty_row(r)]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "rootName": self.root_name,
            "targetNamespace": self.target_namespace,
            "xmlNamespace": self.xml_namespace,
            "gridData": [r.to_dict() for r in self.grid_data],
            "messageType": self.message_type,
        }


@dataclass
class ValidationResult:
    is_valid: bool
    errors: List[str] = field(default_factory=list)

    @classmethod
    def from_errors(cls, errors: List[str]) -> ValidationResult:
        return cls(is_valid=not errors, errors=list(errors))


@dataclass
class ParseResult:
    root_name: str = ""
    target_namespace: str = ""
    grid_data: List[GridRow] = field(default_factory=list)
    error: Optional[str] = None
    version: Optional[str] = None

    def to_document(self) -> SchemaDocument:
        return SchemaDocument(
            root_name=self.root_name,
            target_namespace=self.target_namespace,
            grid_data=list(self.grid_data),
        )

    def to_dict(self) -> Dict[str, Any]:
        result: Dict[str, Any] = {
            "rootName": self.root_name,
            "targetNamespace": self.target_namespace,
            "gridData": [r.to_dict() for r in self.grid_data],
            "error": self.error,
        }
        if self.version is not None:
            result["version"] = self.version
        return result


@dataclass(frozen=True)
class ProtocolDescriptor:
    name: str
    version: Optional[str]
    supported_features: List[str] = field(default_factory=list)
