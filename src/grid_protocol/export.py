from __future__ import annotations

import os
from pathlib import Path
from typing import Dict, Optional, Tuple

from grid_protocol.models import ProtocolKind

# Format key -> (default file name, media type)
OUTPUT_DEFAULTS: Dict[ProtocolKind, Tuple[str, str]] = {
    ProtocolKind.WSDL: ("service.wsdl", "application/wsdl+xml"),
    ProtocolKind.SOAP: ("soap-message.xml", "application/soap+xml"),
    ProtocolKind.JSONRPC: ("service.json", "application/json"),
    ProtocolKind.XSD: ("schema.xsd", "application/xml"),
    ProtocolKind.SAP: ("idoc.xml", "application/xml"),
}


def _defaults(kind: str) -> Tuple[str, str]:
    return OUTPUT_DEFAULTS[ProtocolKind(kind.lower())]


def output_file_name(kind: str) -> str:
    return _defaults(kind)[0]


def media_type(kind: str) -> str:
    return _defaults(kind)[1]


def write_output(
    text: str,
    kind: str,
    output_dir: str,
    file_name: Optional[str] = None,
) -> str:
    """Write generated text into output_dir and return the file path."""
    os.makedirs(output_dir, exist_ok=True)
    file_path = os.path.join(output_dir, file_name or output_file_name(kind))
    Path(file_path).write_text(text, encoding="utf-8")
    return file_path
