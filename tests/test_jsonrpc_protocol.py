import json
import sys

import pytest

from grid_protocol.protocols.jsonrpc import JSONRPCProtocol


class TestIdentity:
    def test_name_and_features(self):
        protocol = JSONRPCProtocol()
        assert protocol.get_protocol_name() == "JSON-RPC"
        assert protocol.get_supported_features() == ["Request", "Notification", "BatchProcessing"]
        assert protocol.version == "2.0"


class TestGenerateOutput:
    def test_request_envelope(self):
        data = {
            "rootName": "subtract",
            "gridData": [
                {"name": "minuend", "type": "number"},
                {"name": "subtrahend", "type": "number"},
            ],
        }
        result = json.loads(JSONRPCProtocol().generate_output(data))
        assert result == {
            "jsonrpc": "2.0",
            "method": "subtract",
            "params": {"minuend": "number", "subtrahend": "number"},
            "id": 1,
        }

    def test_untyped_rows_fall_back_to_any(self):
        data = {"rootName": "notify", "gridData": [{"name": "payload"}, {"name": "", "type": ""}]}
        result = json.loads(JSONRPCProtocol().generate_output(data))
        assert result["params"] == {"payload": "any"}

    def test_empty_grid(self):
        result = json.loads(JSONRPCProtocol().generate_output({"rootName": "get_time", "gridData": []}))
        assert result["params"] == {}

    def test_missing_method_returns_error_envelope(self):
        for data in [{"rootName": ""}, {"gridData": [{"name": "param", "type": "string"}]}, None]:
            result = json.loads(JSONRPCProtocol().generate_output(data))
            assert result["error"]["code"] == -32600
            assert "Method name (Root Name) is required" in result["error"]["message"]
            assert result["id"] is None


class TestValidateStructure:
    def test_valid(self):
        result = JSONRPCProtocol().validate_structure(
            {"rootName": "myMethod", "gridData": [{"name": "param1", "type": "string"}]}
        )
        assert result.is_valid
        assert result.errors == []

    def test_missing_method(self):
        result = JSONRPCProtocol().validate_structure({"gridData": [{"name": "param1", "type": "string"}]})
        assert not result.is_valid
        assert "Method name (Root Name) is required" in result.errors[0]

    def test_type_without_name(self):
        result = JSONRPCProtocol().validate_structure({"rootName": "myMethod", "gridData": [{"type": "string"}]})
        assert result.errors == ["Row 1: Parameter name is required if a type is specified."]

    def test_name_without_type_is_allowed(self):
        assert JSONRPCProtocol().validate_structure({"rootName": "m", "gridData": [{"name": "p"}]}).is_valid


class TestParseInput:
    def test_named_params(self):
        text = json.dumps({"jsonrpc": "2.0", "method": "update", "params": {"name": "string", "age": "number"}, "id": 10})
        result = JSONRPCProtocol().parse_input(text)
        assert result.error is None
        assert result.root_name == "update"
        assert [(r.id, r.name, r.type) for r in result.grid_data] == [(0, "name", "string"), (1, "age", "number")]

    def test_non_string_values_kept_as_json(self):
        text = json.dumps({"method": "m", "params": {"count": 3, "flag": True, "tags": ["a"]}})
        result = JSONRPCProtocol().parse_input(text)
        assert [r.type for r in result.grid_data] == ["3", "true", '["a"]']

    def test_array_params_ignored(self):
        result = JSONRPCProtocol().parse_input('{"jsonrpc": "2.0", "method": "sum", "params": [1, 2]}')
        assert result.error is None
        assert result.root_name == "sum"
        assert result.grid_data == []

    def test_invalid_json(self):
        result = JSONRPCProtocol().parse_input('{"jsonrpc": "2.0", "method": "foo"')
        assert result.error == "Failed to parse input. Please ensure it is valid JSON."

    @pytest.mark.skipif(not hasattr(sys, "get_int_max_str_digits"), reason="no integer digit limit")
    def test_oversized_integer_literal(self):
        text = '{"method": "m", "params": {"a": ' + "1" * 5000 + "}}"
        result = JSONRPCProtocol().parse_input(text)
        assert result.error == "Failed to parse input. Please ensure it is valid JSON."
        assert result.root_name == ""
        assert result.grid_data == []

    def test_deeply_nested_input(self):
        result = JSONRPCProtocol().parse_input("[" * 100000 + "]" * 100000)
        assert result.error == "Failed to parse input. Please ensure it is valid JSON."

    def test_missing_method(self):
        result = JSONRPCProtocol().parse_input('{"hello": "world"}')
        assert 'The "method" property is missing' in result.error

    def test_non_object_payload(self):
        result = JSONRPCProtocol().parse_input("[1, 2, 3]")
        assert 'The "method" property is missing' in result.error

    def test_empty_input(self):
        result = JSONRPCProtocol().parse_input("")
        assert result.root_name == ""
        assert result.grid_data == []
        assert result.error is None

    def test_null_input(self):
        result = JSONRPCProtocol().parse_input(None)
        assert result.grid_data == []
        assert result.error is not None

    def test_round_trip(self):
        protocol = JSONRPCProtocol()
        data = {"rootName": "subtract", "gridData": [{"name": "minuend", "type": "number"}]}
        result = protocol.parse_input(protocol.generate_output(data))
        assert result.root_name == "subtract"
        assert [(r.name, r.type) for r in result.grid_data] == [("minuend", "number")]
