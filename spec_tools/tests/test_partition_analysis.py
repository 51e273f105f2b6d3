import json

import pytest
import yaml

from spec_tools.partition.analysis import (
    REASON_BY_DOMAIN,
    REASON_BY_PATH_SEGMENT,
    REASON_BY_TAG,
    analyze,
    format_report,
    main,
    recommend_strategy,
)
from spec_tools.partition.grouping import SplitStrategy
from spec_tools.shared.document import SpecificationDocument, schema_ref


def responds_with(schema, tags=None):
    definition = {
        "responses": {"200": {"description": "OK", "content": {"application/json": {"schema": schema}}}}
    }
    if tags:
        definition["tags"] = tags
    return definition


@pytest.fixture
def store_mapping():
    return {
        "openapi": "3.0.3",
        "info": {"title": "Store", "version": "1.0.0"},
        "paths": {
            "/pets": {
                "get": responds_with({"type": "array", "items": schema_ref("Pet")}, ["Pets"]),
                "post": responds_with(schema_ref("Pet"), ["pets"]),
            },
            "/pets/{id}": {"get": responds_with(schema_ref("Pet"), ["Pets"])},
            "/orders": {
                "get": responds_with({"type": "array", "items": schema_ref("Pet")}, ["Orders"]),
                "post": responds_with(schema_ref("Order"), ["Orders"]),
            },
            "/health": {"get": {"responses": {"200": {"description": "OK"}}}},
        },
        "components": {"schemas": {"Pet": {"type": "object"}, "Order": {"type": "object"}}},
    }


class TestRecommendStrategy:
    def test_mostly_tagged(self):
        assert recommend_strategy(10, 9, [9, 1]) == (SplitStrategy.BY_TAG, REASON_BY_TAG)

    def test_exactly_eighty_percent_is_not_enough(self):
        strategy, _ = recommend_strategy(10, 8, [5, 5])
        assert strategy is SplitStrategy.BY_PATH_SEGMENT

    def test_balanced_segments(self):
        assert recommend_strategy(12, 0, [4, 4, 4]) == (SplitStrategy.BY_PATH_SEGMENT, REASON_BY_PATH_SEGMENT)

    @pytest.mark.parametrize(
        "counts",
        [
            [10],
            [9, 1],
            [1] * 10,
        ],
    )
    def test_falls_back_to_domain(self, counts):
        assert recommend_strategy(sum(counts), 0, counts) == (SplitStrategy.BY_DOMAIN, REASON_BY_DOMAIN)

    def test_balance_bounds_are_inclusive(self):
        # mean 4.0: 0.3x is 1.2 and 3x is 12
        strategy, _ = recommend_strategy(8, 0, [6, 2])
        assert strategy is SplitStrategy.BY_PATH_SEGMENT

    def test_no_operations(self):
        assert recommend_strategy(0, 0, [])[0] is SplitStrategy.BY_DOMAIN


class TestAnalyze:
    def test_counts(self, store_mapping):
        analysis = analyze(SpecificationDocument.from_mapping(store_mapping), "specs/store.yaml")

        assert analysis.total_paths == 4
        assert analysis.total_operations == 6
        assert analysis.total_schemas == 2
        assert analysis.total_parameters == 0
        assert analysis.total_lines == 0

    def test_tags_are_case_insensitive(self, store_mapping):
        analysis = analyze(SpecificationDocument.from_mapping(store_mapping), "store.yaml")

        assert list(analysis.tags) == ["Pets", "Orders"]
        assert analysis.tags["Pets"].operation_count == 3
        assert analysis.tags["Pets"].paths == ("/pets", "/pets/{id}")

    def test_path_segments(self, store_mapping):
        analysis = analyze(SpecificationDocument.from_mapping(store_mapping), "store.yaml")

        pets = analysis.path_segments["pets"]
        assert pets.path_count == 2
        assert pets.operation_count == 3
        assert analysis.path_segments["health"].operation_count == 1

    def test_recommends_by_tag(self, store_mapping):
        analysis = analyze(SpecificationDocument.from_mapping(store_mapping), "store.yaml")
        assert analysis.recommended_strategy is SplitStrategy.BY_TAG
        assert analysis.recommended_reason == REASON_BY_TAG

    def test_shared_schemas(self, store_mapping):
        analysis = analyze(SpecificationDocument.from_mapping(store_mapping), "store.yaml")

        assert len(analysis.shared_schemas) == 1
        assert analysis.shared_schemas[0].name == "Pet"
        assert analysis.shared_schemas[0].groups == ("Orders", "Pets")

    def test_suggested_splits(self, store_mapping):
        analysis = analyze(SpecificationDocument.from_mapping(store_mapping), "specs/store.yaml")

        assert [s.file_name for s in analysis.suggested_splits] == [
            "store_Orders.yaml",
            "store_Pets.yaml",
            "store_Untagged.yaml",
        ]
        orders = analysis.suggested_splits[0]
        assert orders.description == "Contains 2 operation(s) for Orders"
        assert orders.part_name == "Orders"
        assert orders.estimated_operations == 2
        assert orders.estimated_lines == 100

    def test_recommends_by_path_segment(self):
        document = SpecificationDocument.from_mapping({
            "paths": {
                "/v1/users": {"get": {}, "post": {}},
                "/v1/orders": {"get": {}},
                "/v1/orders/{id}": {"delete": {}},
            }
        })
        analysis = analyze(document, "api.json")

        assert analysis.recommended_strategy is SplitStrategy.BY_PATH_SEGMENT
        assert [s.file_name for s in analysis.suggested_splits] == ["api_Orders.json", "api_Users.json"]

    def test_recommends_by_domain(self):
        document = SpecificationDocument.from_mapping({
            "paths": {
                "/users": {"get": {"tags": ["Users"]}, "post": {}},
                "/users/{id}": {"get": {}},
            }
        })
        assert analyze(document, "api.yaml").recommended_strategy is SplitStrategy.BY_DOMAIN

    def test_document_is_not_modified(self, store_mapping):
        document = SpecificationDocument.from_mapping(store_mapping)
        before = document.to_mapping()
        analyze(document, "store.yaml")
        assert document.to_mapping() == before


class TestShouldSplit:
    def test_small_specification(self, store_mapping):
        analysis = analyze(SpecificationDocument.from_mapping(store_mapping), "store.yaml", "openapi: 3.0.3\n")
        assert not analysis.should_split

    def test_many_lines(self, store_mapping):
        content = "\n".join(["# line"] * 501)
        analysis = analyze(SpecificationDocument.from_mapping(store_mapping), "store.yaml", content)
        assert analysis.total_lines == 501
        assert analysis.should_split

    def test_many_operations(self):
        paths = {f"/items{i}": {"get": {"tags": ["Items"]}} for i in range(16)}
        analysis = analyze(SpecificationDocument.from_mapping({"paths": paths}), "api.yaml")
        assert analysis.should_split

    def test_many_schemas(self):
        schemas = {f"Schema{i}": {"type": "object"} for i in range(21)}
        document = SpecificationDocument.from_mapping({"components": {"schemas": schemas}})
        assert analyze(document, "api.yaml").should_split


class TestReport:
    def test_to_json(self, store_mapping):
        analysis = analyze(SpecificationDocument.from_mapping(store_mapping), "store.yaml")
        data = json.loads(analysis.to_json())

        assert data["recommended_strategy"] == "ByTag"
        assert data["should_split"] is False
        assert data["tags"]["Pets"]["operation_count"] == 3
        assert data["shared_schemas"] == [{"name": "Pet", "groups": ["Orders", "Pets"]}]

    def test_format_report(self, store_mapping):
        report = format_report(analyze(SpecificationDocument.from_mapping(store_mapping), "store.yaml"))

        assert "Operations: 6" in report
        assert "Shared schemas:" in report
        assert "Recommended strategy: ByTag" in report
        assert "Split recommended: no" in report
        assert "store_Pets.yaml" in report


class TestMain:
    def test_report(self, tmp_path, store_mapping, capsys):
        path = tmp_path / "store.yaml"
        path.write_text(yaml.safe_dump(store_mapping, sort_keys=False))

        assert main(["-s", str(path)]) == 0
        assert "Recommended strategy: ByTag" in capsys.readouterr().out

    def test_json(self, tmp_path, store_mapping, capsys):
        path = tmp_path / "store.json"
        path.write_text(json.dumps(store_mapping))

        assert main(["-s", str(path), "--json"]) == 0
        data = json.loads(capsys.readouterr().out)
        assert data["total_operations"] == 6
        assert data["total_lines"] > 0

    def test_missing_file(self, tmp_path, capsys):
        assert main(["-s", str(tmp_path / "missing.yaml")]) == 1
        assert "Error:" in capsys.readouterr().out
