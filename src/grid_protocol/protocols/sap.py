"""SAP IDoc XML generation.

The grid's root name is the IDoc type (e.g. ORDERS05). Output is a single
IDoc with the EDI_DC40 control record followed by one data segment whose
fields are the named grid rows. Parsing IDoc XML back into a grid is not
supported.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Mapping, Optional, Tuple

from grid_protocol.models import ParseResult, ValidationResult
from grid_protocol.protocols.base import WireProtocol, render_template

logger = logging.getLogger(__name__)

CONTROL_RECORD_SEGMENT = "EDI_DC40"

# Partner fields of the control record; overridable through config["control_record"].
DEFAULT_PARTNER_FIELDS: Dict[str, str] = {
    "SNDPOR": "SNDPOR",
    "SNDPRT": "LS",
    "SNDPRN": "SNDPRN",
    "RCVPOR": "RCVPOR",
    "RCVPRT": "LS",
    "RCVPRN": "RCVPRN",
}

NOT_IMPLEMENTED_MESSAGE = "SAP IDoc parsing is not yet implemented."


def data_segment_name(idoc_type: str) -> str:
    """ORDERS05 -> E1ORDERS: drop the two-digit version suffix and prefix E1."""
    return f"E1{idoc_type[:max(0, len(idoc_type) - 2)]}"


class SAPProtocol(WireProtocol):

    def __init__(self, config: Optional[Mapping[str, Any]] = None) -> None:
        super().__init__(config)
        partner_fields = dict(DEFAULT_PARTNER_FIELDS)
        overrides = self._config.get("control_record") or {}
        if isinstance(overrides, Mapping):
            for key, value in overrides.items():
                field_name = str(key).upper()
                if field_name in partner_fields:
                    partner_fields[field_name] = str(value)
        self._partner_fields = partner_fields

    def get_protocol_name(self) -> str:
        return "SAP"

    def get_supported_features(self) -> List[str]:
        return ["IDocXMLGeneration"]

    def validate_structure(self, data: Any) -> ValidationResult:
        doc, errors = self._document_or_errors(data)
        if doc is None:
            return ValidationResult.from_errors(errors)
        if not doc.root_name.strip():
            errors.append("IDoc Type (e.g., ORDERS05) is required in the Root Name field.")
        return ValidationResult.from_errors(errors)

    def control_record(self, idoc_type: str, message_type: str = "") -> List[Tuple[str, str]]:
        record = [
            ("TABNAM", CONTROL_RECORD_SEGMENT),
            ("IDOCTYP", idoc_type or "IDOCTYP_UNKNOWN"),
            ("MESTYP", message_type or "MESTYP_UNKNOWN"),
        ]
        record.extend(self._partner_fields.items())
        return record

    def generate_output(self, data: Any) -> str:
        validation = self.validate_structure(data)
        if not validation.is_valid:
            return f"Error generating IDoc: {', '.join(validation.errors)}"

        doc = self._document_or_errors(data)[0]
        idoc_type = doc.root_name
        fields = [
            {"tag": row.name.upper(), "value": row.type}
            for row in doc.grid_data
            if row.name
        ]
        logger.debug(f"Generating IDoc {idoc_type} with {len(fields)} field(s)")

        return render_template(
            "idoc.xml.j2",
            idoc_type=idoc_type,
            control_segment=CONTROL_RECORD_SEGMENT,
            control_record=self.control_record(idoc_type, doc.message_type),
            segment=data_segment_name(idoc_type),
            fields=fields,
        )

    def parse_input(self, text: Any) -> ParseResult:
        logger.warning(NOT_IMPLEMENTED_MESSAGE)
        return ParseResult(error=NOT_IMPLEMENTED_MESSAGE)
