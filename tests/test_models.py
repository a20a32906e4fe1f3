from grid_protocol.models import (
    GridRow,
    ParseResult,
    ProtocolDescriptor,
    SchemaDocument,
    ValidationResult,
    is_empty_row,
)


class TestGridRow:
    def test_from_camel_case(self):
        row = GridRow.from_dict({"id": 7, "name": "age", "type": "xsd:int", "minOccurs": "0", "maxOccurs": "1"})
        assert row == GridRow(id=7, name="age", type="xsd:int", min_occurs="0", max_occurs="1")

    def test_from_snake_case(self):
        row = GridRow.from_dict({"name": "age", "min_occurs": "0", "max_occurs": "unbounded"}, index=3)
        assert row.id == 3
        assert row.min_occurs == "0"
        assert row.max_occurs == "unbounded"

    def test_cells_coerced_to_text(self):
        row = GridRow.from_dict({"id": "x", "name": None, "type": 5}, index=2)
        assert row.id == 2
        assert row.name == ""
        assert row.type == "5"

    def test_non_mapping_row(self):
        assert GridRow.from_dict("garbage", index=4) == GridRow(id=4)

    def test_to_dict_uses_camel_case(self):
        data = GridRow(id=1, name="n", type="t", min_occurs="0").to_dict()
        assert data["minOccurs"] == "0"
        assert data["maxOccurs"] == ""
        assert "min_occurs" not in data

    def test_is_empty_row(self):
        assert is_empty_row(GridRow(id=1, min_occurs="0"))
        assert not is_empty_row(GridRow(structure="Address"))


class TestSchemaDocument:
    def test_from_dict(self):
        doc = SchemaDocument.from_dict({
            "rootName": "Order",
            "targetNamespace": "http://example.com",
            "gridData": [{"name": "a"}, {"name": "b"}],
        })
        assert doc.root_name == "Order"
        assert [r.id for r in doc.grid_data] == [0, 1]

    def test_missing_grid_is_empty(self):
        assert SchemaDocument.from_dict({"rootName": "Order", "gridData": None}).grid_data == []

    def test_coerce(self):
        assert SchemaDocument.coerce(None) == SchemaDocument()
        doc = SchemaDocument(root_name="x")
        assert SchemaDocument.coerce(doc) is doc
        assert SchemaDocument.coerce({"root_name": "y"}).root_name == "y"
        assert SchemaDocument.coerce("not a document") is None
        assert SchemaDocument.coerce([1, 2]) is None

    def test_filled_rows(self):
        doc = SchemaDocument.from_dict({"gridData": [{"name": "a"}, {}, {"type": "t"}]})
        assert [r.id for r in doc.filled_rows()] == [0, 2]

    def test_to_dict(self):
        data = SchemaDocument(root_name="Order", grid_data=[GridRow(name="a")]).to_dict()
        assert data["rootName"] == "Order"
        assert data["gridData"][0]["name"] == "a"


class TestResults:
    def test_validation_result_from_errors(self):
        assert ValidationResult.from_errors([]) == ValidationResult(is_valid=True, errors=[])
        assert not ValidationResult.from_errors(["boom"]).is_valid

    def test_parse_result_to_dict(self):
        data = ParseResult(root_name="r", error="bad").to_dict()
        assert data == {"rootName": "r", "targetNamespace": "", "gridData": [], "error": "bad"}
        assert ParseResult(version="1.1").to_dict()["version"] == "1.1"

    def test_parse_result_to_document(self):
        result = ParseResult(root_name="r", target_namespace="ns", grid_data=[GridRow(name="a")])
        doc = result.to_document()
        assert doc.root_name == "r"
        assert doc.grid_data == result.grid_data
        assert doc.grid_data is not result.grid_data

    def test_descriptor(self):
        descriptor = ProtocolDescriptor("XSD", "1.0", ["SchemaGeneration"])
        assert descriptor.name == "XSD"
        assert descriptor.version == "1.0"
