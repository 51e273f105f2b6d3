from pathlib import Path

import pytest

from spec_tools.shared.document import (
    Components,
    Operation,
    SpecificationDocument,
    SpecificationFile,
    iter_operations,
    iter_path_operations,
    operation_parameter_names,
    operation_schema_names,
    ref_name,
    referenced_schema_names,
    schema_ref,
)


def _json_body(schema):
    return {"content": {"application/json": {"schema": schema}}}


@pytest.fixture
def pet_mapping():
    return {
        "openapi": "3.0.3",
        "info": {"title": "Pets", "version": "2.1.0"},
        "x-internal": True,
        "externalDocs": {"url": "https://example.com"},
        "tags": [{"name": "Pets"}, {"description": "no name"}],
        "paths": {
            "/pets": {
                "parameters": [{"$ref": "#/components/parameters/Limit"}],
                "get": {"tags": ["Pets"], "operationId": "listPets"},
                "post": {"tags": ["Pets"]},
                "summary": "Pets collection",
            },
            "/health": {"get": {}},
        },
        "components": {
            "schemas": {"Pet": {"type": "object"}},
            "parameters": {"Limit": {"name": "limit", "in": "query"}},
            "responses": {"NotFound": {"description": "missing"}},
        },
    }


class TestSpecificationDocument:
    def test_from_mapping(self, pet_mapping):
        document = SpecificationDocument.from_mapping(pet_mapping)
        assert document.openapi == "3.0.3"
        assert document.title == "Pets"
        assert document.version == "2.1.0"
        assert document.extensions == {"x-internal": True}
        assert document.extra == {"externalDocs": {"url": "https://example.com"}}
        assert document.components.extra == {"responses": {"NotFound": {"description": "missing"}}}
        assert document.tag_names() == ["Pets"]
        assert document.operation_count() == 3

    def test_missing_openapi(self):
        document = SpecificationDocument.from_mapping({"paths": {}})
        assert document.openapi == ""
        assert document.title is None

    def test_to_mapping_round_trips(self, pet_mapping):
        mapping = SpecificationDocument.from_mapping(pet_mapping).to_mapping()
        assert mapping == pet_mapping

    def test_to_mapping_key_order(self, pet_mapping):
        mapping = SpecificationDocument.from_mapping(pet_mapping).to_mapping()
        assert list(mapping) == ["openapi", "info", "x-internal", "tags", "paths", "components", "externalDocs"]

    def test_to_mapping_omits_empty_sections(self):
        mapping = SpecificationDocument(openapi="3.1.0").to_mapping()
        assert mapping == {"openapi": "3.1.0"}

    def test_clone_has_independent_collections(self, pet_mapping):
        original = SpecificationDocument.from_mapping(pet_mapping)
        copy = original.clone()
        copy.paths.clear()
        copy.components.schemas["Extra"] = {}
        copy.tags.append({"name": "Other"})

        assert len(original.paths) == 2
        assert "Extra" not in original.components.schemas
        assert original.tag_names() == ["Pets"]


class TestComponents:
    def test_is_empty(self):
        assert Components().is_empty()
        assert not Components(parameters={"Limit": {}}).is_empty()

    def test_security_schemes_key(self):
        components = Components.from_mapping({"securitySchemes": {"bearer": {"type": "http"}}})
        assert components.security_schemes == {"bearer": {"type": "http"}}
        assert components.to_mapping() == {"securitySchemes": {"bearer": {"type": "http"}}}

    def test_non_mapping_input(self):
        assert Components.from_mapping(None).is_empty()


class TestOperations:
    def test_iter_operations_skips_non_methods(self, pet_mapping):
        document = SpecificationDocument.from_mapping(pet_mapping)
        operations = list(iter_operations(document))
        assert [(op.path, op.method) for op in operations] == [
            ("/pets", "get"),
            ("/pets", "post"),
            ("/health", "get"),
        ]

    def test_operation_properties(self):
        op = Operation("/pets", "get", {"tags": ["Pets", "Public"], "operationId": "listPets"}, {})
        assert op.tags == ["Pets", "Public"]
        assert op.operation_id == "listPets"

    def test_operation_without_tags(self):
        op = Operation("/health", "get", {}, {})
        assert op.tags == []
        assert op.operation_id is None

    def test_method_is_lowercased(self):
        operations = list(iter_path_operations("/pets", {"GET": {}}))
        assert operations[0].method == "get"

    def test_non_mapping_path_item(self):
        assert list(iter_path_operations("/pets", None)) == []


class TestReferences:
    def test_ref_name(self):
        assert ref_name({"$ref": "#/components/schemas/Pet"}) == "Pet"
        assert ref_name({"$ref": "#/components/parameters/Limit"}) is None
        assert ref_name({"$ref": "#/components/parameters/Limit"}, "#/components/parameters/") == "Limit"
        assert ref_name("Pet") is None

    def test_schema_ref(self):
        assert schema_ref("Pet") == {"$ref": "#/components/schemas/Pet"}

    def test_referenced_schema_names(self):
        schema = {
            "type": "array",
            "items": schema_ref("Pet"),
            "allOf": [schema_ref("Base"), {"type": "object"}, schema_ref("Audit")],
        }
        assert referenced_schema_names(schema) == ["Pet", "Base", "Audit"]

    def test_referenced_schema_names_does_not_follow_properties(self):
        schema = {"type": "object", "properties": {"owner": schema_ref("Owner")}}
        assert referenced_schema_names(schema) == []

    def test_operation_schema_names(self):
        operation = {
            "requestBody": _json_body(schema_ref("NewPet")),
            "responses": {
                "200": _json_body({"type": "array", "items": schema_ref("Pet")}),
                "201": _json_body(schema_ref("Pet")),
                "404": {"description": "missing"},
            },
        }
        assert operation_schema_names(operation) == ["NewPet", "Pet"]

    def test_operation_parameter_names(self):
        op = Operation(
            "/pets/{id}",
            "get",
            {"parameters": [{"$ref": "#/components/parameters/Expand"}, {"name": "inline"}]},
            {"parameters": [{"$ref": "#/components/parameters/PetId"}, {"$ref": "#/components/parameters/Expand"}]},
        )
        assert operation_parameter_names(op) == ["PetId", "Expand"]


class TestSpecificationFile:
    def test_counts(self, pet_mapping):
        spec_file = SpecificationFile(
            path=Path("specs/api_Pets.yaml"),
            content="",
            document=SpecificationDocument.from_mapping(pet_mapping),
            part_name="Pets",
        )
        assert spec_file.file_name == "api_Pets.yaml"
        assert spec_file.stem == "api_Pets"
        assert spec_file.path_count == 2
        assert spec_file.schema_count == 1
        assert spec_file.parameter_count == 1
        assert spec_file.operation_count == 3
        assert spec_file.tag_names() == ["Pets"]
        assert not spec_file.is_common

    def test_unparsed_file(self):
        spec_file = SpecificationFile(Path("api_Bad.yaml"), "::", None, parse_error="Invalid YAML")
        assert spec_file.path_count == 0
        assert spec_file.operation_count == 0
        assert spec_file.tag_names() == []

    @pytest.mark.parametrize("part_name,expected", [("Common", True), ("common", True), ("Users", False), (None, False)])
    def test_is_common(self, part_name, expected):
        spec_file = SpecificationFile(Path("api.yaml"), "", None, part_name=part_name)
        assert spec_file.is_common is expected
