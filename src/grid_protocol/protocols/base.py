"""Contract shared by every wire-format converter."""

from __future__ import annotations

import copy
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional

from jinja2 import Environment, FileSystemLoader, select_autoescape

from grid_protocol.models import ParseResult, ProtocolDescriptor, SchemaDocument, ValidationResult


def _get_template_env() -> Environment:
    template_dir = Path(__file__).parent.parent / "templates"
    return Environment(
        loader=FileSystemLoader(str(template_dir)),
        autoescape=select_autoescape(["xml.j2"]),
        keep_trailing_newline=True,
        trim_blocks=True,
        lstrip_blocks=True,
    )


_TEMPLATE_ENV = _get_template_env()


def render_template(name: str, **context: Any) -> str:
    """Render one of the package's XML templates."""
    template = _TEMPLATE_ENV.get_template(name)
    return template.render(**context)


class WireProtocol(ABC):
    """A converter between the grid model and one wire format.

    Instances are configured once at construction and never mutated
    afterwards, so a single instance can serve concurrent callers.
    """

    def __init__(self, config: Optional[Mapping[str, Any]] = None) -> None:
        self._config: Dict[str, Any] = dict(config or {})

    @property
    def config(self) -> Dict[str, Any]:
        return copy.deepcopy(self._config)

    @property
    def version(self) -> Optional[str]:
        return None

    @property
    def descriptor(self) -> ProtocolDescriptor:
        return ProtocolDescriptor(
            name=self.get_protocol_name(),
            version=self.version,
            supported_features=self.get_supported_features(),
        )

    @abstractmethod
    def get_protocol_name(self) -> str:
        ...

    @abstractmethod
    def get_supported_features(self) -> List[str]:
        ...

    @abstractmethod
    def validate_structure(self, data: Any) -> ValidationResult:
        """Check a schema document; never raises."""

    @abstractmethod
    def generate_output(self, data: Any) -> str:
        """Render a schema document as wire-format text; never raises."""

    @abstractmethod
    def parse_input(self, text: Any) -> ParseResult:
        """Recover a grid from wire-format text; never raises."""

    def _document_or_errors(self, data: Any):
        """Coerce input into a document, or return the errors explaining why not."""
        doc = SchemaDocument.coerce(data)
        if doc is None:
            return None, [f"Schema document must be a mapping, got {type(data).__name__}"]
        return doc, []
