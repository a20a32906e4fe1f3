from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional

from grid_protocol.detector import ProtocolDetector
from grid_protocol.export import write_output
from grid_protocol.factory import ProtocolError, ProtocolFactory
from grid_protocol.protocols.base import WireProtocol
from grid_protocol.wellformed import check_output

logger = logging.getLogger(__name__)


def _load_document(doc_path: str) -> Any:
    """Read a schema document (rootName, targetNamespace, gridData, ...) from JSON."""
    return json.loads(Path(doc_path).read_text(encoding="utf-8"))


def _create(format_name: str, wsdl_version: Optional[str]) -> WireProtocol:
    config: Dict[str, Any] = {}
    if wsdl_version:
        config["version"] = wsdl_version
    try:
        return ProtocolFactory.create_protocol(format_name, config)
    except ProtocolError as e:
        print(f"FATAL: {e}", file=sys.stderr)
        sys.exit(2)


def run_validate(doc_path: str, format_name: str, wsdl_version: Optional[str] = None) -> bool:
    protocol = _create(format_name, wsdl_version)
    result = protocol.validate_structure(_load_document(doc_path))
    if result.is_valid:
        print(f"{doc_path}: valid {protocol.get_protocol_name()} document")
    for error in result.errors:
        print(f"  {error}")
    return result.is_valid


def run_generate(
    doc_path: str,
    format_name: str,
    wsdl_version: Optional[str] = None,
    output: Optional[str] = None,
    output_dir: Optional[str] = None,
) -> str:
    """Generate wire-format text; returns the written path or the text itself."""
    protocol = _create(format_name, wsdl_version)
    document = _load_document(doc_path)

    validation = protocol.validate_structure(document)
    for error in validation.errors:
        logger.warning(f"{doc_path}: {error}")

    text = protocol.generate_output(document)
    if validation.is_valid:
        for error in check_output(text, format_name).errors:
            logger.warning(f"Generated {protocol.get_protocol_name()} is not well-formed: {error}")

    if output:
        Path(output).write_text(text, encoding="utf-8")
        print(f"  Generated {protocol.get_protocol_name()}: {output}")
        return output
    if output_dir:
        file_path = write_output(text, format_name, output_dir)
        print(f"  Generated {protocol.get_protocol_name()}: {file_path}")
        return file_path
    print(text)
    return text


def run_parse(
    input_path: str,
    format_name: Optional[str] = None,
    output: Optional[str] = None,
) -> Dict[str, Any]:
    text = Path(input_path).read_text(encoding="utf-8")
    if not format_name:
        format_name = ProtocolDetector.detect(text, input_path)
        if format_name is None:
            print(f"Could not detect the format of {input_path}", file=sys.stderr)
            sys.exit(1)
        logger.info(f"Detected format '{format_name}' for {input_path}")

    protocol = _create(format_name, None)
    result = protocol.parse_input(text).to_dict()
    rendered = json.dumps(result, indent=2)
    if output:
        Path(output).write_text(rendered, encoding="utf-8")
    else:
        print(rendered)
    return result


def run_detect(input_path: str) -> Optional[str]:
    text = Path(input_path).read_text(encoding="utf-8")
    detected = ProtocolDetector.detect(text, input_path)
    print(detected if detected else f"Could not detect the format of {input_path}")
    return detected


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Convert grid schema documents to and from WSDL, XSD, JSON-RPC and SAP IDoc",
    )
    parser.add_argument(
        "--log-level",
        default="WARNING",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging verbosity",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    sub.add_parser("formats", help="List registered formats")

    validate = sub.add_parser("validate", help="Validate a grid document for a format")
    validate.add_argument("document", help="Grid document (JSON)")
    validate.add_argument("--format", required=True, help="Target format, e.g. wsdl")
    validate.add_argument("--wsdl-version", choices=["1.1", "2.0"], help="WSDL version")

    generate = sub.add_parser("generate", help="Generate wire-format text from a grid document")
    generate.add_argument("document", help="Grid document (JSON)")
    generate.add_argument("--format", required=True, help="Target format, e.g. wsdl")
    generate.add_argument("--wsdl-version", choices=["1.1", "2.0"], help="WSDL version")
    target = generate.add_mutually_exclusive_group()
    target.add_argument("--output", help="Output file path")
    target.add_argument("--output-dir", help="Directory for an output file with the format's default name")

    parse = sub.add_parser("parse", help="Parse wire-format text into a grid document")
    parse.add_argument("input", help="WSDL, XSD or JSON-RPC file")
    parse.add_argument("--format", help="Source format; detected when omitted")
    parse.add_argument("--output", help="Write the grid JSON here instead of stdout")

    detect = sub.add_parser("detect", help="Detect the format of a file")
    detect.add_argument("input", help="File to inspect")

    return parser


def main(argv: Optional[List[str]] = None) -> None:
    args = _build_parser().parse_args(argv)
    logging.basicConfig(level=getattr(logging, args.log_level), format="%(levelname)s %(name)s: %(message)s")

    if args.command == "formats":
        for name in ProtocolFactory.get_supported_protocols():
            print(name)
    elif args.command == "validate":
        if not run_validate(args.document, args.format, args.wsdl_version):
            sys.exit(1)
    elif args.command == "generate":
        run_generate(args.document, args.format, args.wsdl_version, args.output, args.output_dir)
    elif args.command == "parse":
        result = run_parse(args.input, args.format, args.output)
        if result.get("error"):
            sys.exit(1)
    elif args.command == "detect":
        if run_detect(args.input) is None:
            sys.exit(1)
