from __future__ import annotations

import json
import logging
from typing import Any, Dict, List, Mapping, Optional

from grid_protocol.models import GridRow, ParseResult, ValidationResult
from grid_protocol.protocols.base import WireProtocol

logger = logging.getLogger(__name__)

INVALID_REQUEST_CODE = -32600


class JsonRpcInputError(Exception):
    """Raised when decoded JSON is not a JSON-RPC request."""


class JSONRPCProtocol(WireProtocol):
    """Grid <-> sample JSON-RPC request envelope.

    The grid's root name is the RPC method and each named row becomes a
    parameter whose value is the row's type, used as a placeholder.
    """

    def __init__(self, config: Optional[Mapping[str, Any]] = None) -> None:
        super().__init__(config)
        self._version = str(self._config.get("version") or "2.0")

    @property
    def version(self) -> str:
        return self._version

    def get_protocol_name(self) -> str:
        return "JSON-RPC"

    def get_supported_features(self) -> List[str]:
        return ["Request", "Notification", "BatchProcessing"]

    def validate_structure(self, data: Any) -> ValidationResult:
        doc, errors = self._document_or_errors(data)
        if doc is None:
            return ValidationResult.from_errors(errors)

        if not doc.root_name.strip():
            errors.append("Method name (Root Name) is required and must be a non-empty string.")

        for index, row in enumerate(doc.grid_data, start=1):
            if row.type.strip() and not row.name.strip():
                errors.append(f"Row {index}: Parameter name is required if a type is specified.")

        return ValidationResult.from_errors(errors)

    def generate_output(self, data: Any) -> str:
        doc, _ = self._document_or_errors(data)
        if doc is None or not doc.root_name.strip():
            return json.dumps({
                "jsonrpc": "2.0",
                "error": {
                    "code": INVALID_REQUEST_CODE,
                    "message": "Invalid Request: Method name (Root Name) is required.",
                },
                "id": None,
            }, indent=2)

        params: Dict[str, str] = {}
        for row in doc.grid_data:
            if row.name:
                params[row.name] = row.type or "any"

        return json.dumps({
            "jsonrpc": self._version,
            "method": doc.root_name,
            "params": params,
            "id": 1,
        }, indent=2)

    def parse_input(self, text: Any) -> ParseResult:
        result = ParseResult()
        if not isinstance(text, str):
            result.error = "Failed to parse input. No JSON-RPC content provided."
            return result
        if not text.strip():
            return result

        try:
            payload = json.loads(text)
            if not isinstance(payload, dict) or not payload.get("method"):
                raise JsonRpcInputError('Invalid JSON-RPC input: The "method" property is missing.')

            method = payload["method"]
            result.root_name = method if isinstance(method, str) else json.dumps(method)

            # Positional (array) params carry no names and are not mapped.
            params = payload.get("params")
            if isinstance(params, dict):
                for index, (key, value) in enumerate(params.items()):
                    result.grid_data.append(GridRow(
                        id=index,
                        name=key,
                        type=value if isinstance(value, str) else json.dumps(value),
                    ))
        except (ValueError, RecursionError) as e:
            # ValueError also covers the int digit limit; deep nesting raises RecursionError.
            logger.warning(f"Failed to parse JSON-RPC input: {e}")
            result = ParseResult(error="Failed to parse input. Please ensure it is valid JSON.")
        except JsonRpcInputError as e:
            logger.warning(f"Failed to parse JSON-RPC input: {e}")
            result.error = str(e)

        return result
