"""Best-effort format detection for uploaded schema content."""

from __future__ import annotations

from typing import Optional

from grid_protocol.models import ProtocolKind
from grid_protocol.protocols.wsdl import WSDL11_NAMESPACE, WSDL20_NAMESPACE

_SAP_MARKERS = ("RFC", "IDOC", "BAPI", "EDI_DC40")


class ProtocolDetector:

    @staticmethod
    def detect_protocol(content: Optional[str]) -> Optional[str]:
        """Guess the format key from the text itself.

        Checks run from most to least specific; WSDL documents also embed an
        XSD schema and SOAP namespaces, so they are tested first.
        """
        if not content or not isinstance(content, str):
            return None

        if "<definitions" in content and f'xmlns="{WSDL11_NAMESPACE}"' in content:
            return ProtocolKind.WSDL.value
        if "<description" in content and f'xmlns="{WSDL20_NAMESPACE}"' in content:
            return ProtocolKind.WSDL.value
        if "<soap:Envelope" in content or "xmlns:soap=" in content:
            return ProtocolKind.SOAP.value
        if '"jsonrpc"' in content and ('"method"' in content or '"result"' in content):
            return ProtocolKind.JSONRPC.value
        if "<xs:schema" in content or "<xsd:schema" in content:
            return ProtocolKind.XSD.value
        if any(marker in content for marker in _SAP_MARKERS):
            return ProtocolKind.SAP.value
        return None

    @staticmethod
    def detect_from_extension(filename: Optional[str]) -> Optional[str]:
        if not filename or not isinstance(filename, str):
            return None

        lowered = filename.lower()
        if lowered.endswith(".wsdl"):
            return ProtocolKind.WSDL.value
        if lowered.endswith(".xsd"):
            return ProtocolKind.XSD.value
        if lowered.endswith(".json"):
            return ProtocolKind.JSONRPC.value
        if lowered.endswith(".xml") and "soap" in lowered:
            return ProtocolKind.SOAP.value
        if lowered.endswith(".rfc") or lowered.endswith(".idoc"):
            return ProtocolKind.SAP.value
        return None

    @classmethod
    def detect(cls, content: Optional[str], filename: Optional[str] = None) -> Optional[str]:
        """Content wins over the file name when both give an answer."""
        return cls.detect_protocol(content) or cls.detect_from_extension(filename)
