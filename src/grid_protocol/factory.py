from __future__ import annotations

import logging
from typing import Any, Dict, List, Mapping, Optional, Type

from grid_protocol.models import ProtocolKind
from grid_protocol.protocols.base import WireProtocol
from grid_protocol.protocols.jsonrpc import JSONRPCProtocol
from grid_protocol.protocols.sap import SAPProtocol
from grid_protocol.protocols.wsdl import WSDLProtocol
from grid_protocol.protocols.xsd import XSDProtocol

logger = logging.getLogger(__name__)


class ProtocolError(Exception):
    """Base class for protocol selection failures."""


class ProtocolNotImplementedError(ProtocolError, NotImplementedError):
    """Raised for a registered format that has no converter yet."""


class UnsupportedProtocolError(ProtocolError, ValueError):
    """Raised for a format name that is not registered at all."""


# Registry order is the order reported by get_supported_protocols().
# A None entry is a known format without an implementation.
_REGISTRY: Dict[ProtocolKind, Optional[Type[WireProtocol]]] = {
    ProtocolKind.WSDL: WSDLProtocol,
    ProtocolKind.SOAP: None,
    ProtocolKind.JSONRPC: JSONRPCProtocol,
    ProtocolKind.XSD: XSDProtocol,
    ProtocolKind.SAP: SAPProtocol,
}


def _lookup(protocol_type: Any) -> Optional[ProtocolKind]:
    if not isinstance(protocol_type, str):
        return None
    try:
        return ProtocolKind(protocol_type.lower())
    except ValueError:
        return None


class ProtocolFactory:
    """Resolves a case-insensitive format name to a protocol instance."""

    @staticmethod
    def create_protocol(
        protocol_type: str,
        config: Optional[Mapping[str, Any]] = None,
    ) -> WireProtocol:
        if protocol_type is None:
            raise UnsupportedProtocolError("Unsupported protocol type: protocol type is required")

        kind = _lookup(protocol_type)
        if kind is None or kind not in _REGISTRY:
            raise UnsupportedProtocolError(f"Unsupported protocol type: {protocol_type}")

        protocol_cls = _REGISTRY[kind]
        if protocol_cls is None:
            raise ProtocolNotImplementedError(f"{kind.value.upper()} protocol not yet implemented")

        logger.debug(f"Creating {protocol_cls.__name__} for '{protocol_type}'")
        return protocol_cls(config)

    @staticmethod
    def get_supported_protocols() -> List[str]:
        return [kind.value for kind in _REGISTRY]

    @staticmethod
    def is_protocol_supported(protocol_type: Any) -> bool:
        kind = _lookup(protocol_type)
        return kind is not None and kind in _REGISTRY
