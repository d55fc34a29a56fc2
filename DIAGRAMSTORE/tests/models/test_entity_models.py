"""Tests for entity models, patches and timestamp handling."""

from datetime import datetime, timedelta, timezone

import pytest
from pydantic import ValidationError as PydanticValidationError

from DIAGRAMSTORE.models import (
    AreaPatch,
    ConfigPatch,
    CustomTypePatch,
    DBRelationship,
    DBTable,
    DependencyPatch,
    Diagram,
    DiagramFilter,
    DiagramIncludeOptions,
    DiagramPatch,
    RelationshipPatch,
    TablePatch,
    determine_cardinalities,
    to_wire_datetime,
)


def test_documents_use_camel_case_keys():
    table = DBTable(id="t1", name="users", schema_name="public", is_view=True)

    document = table.to_document()

    assert document["schema"] == "public"
    assert document["isView"] is True
    assert document["isMaterializedView"] is False
    assert "schema_name" not in document


def test_documents_accept_camel_and_snake_input():
    by_alias = DBTable.model_validate({"id": "t1", "name": "users", "isView": True})
    by_name = DBTable.model_validate({"id": "t1", "name": "users", "is_view": True})

    assert by_alias.is_view and by_name.is_view


def test_unknown_keys_are_kept():
    table = DBTable.model_validate({"id": "t1", "name": "users", "parentAreaId": "a1"})

    assert table.to_document()["parentAreaId"] == "a1"


def test_naive_timestamps_are_utc():
    table = DBTable(id="t1", name="users", created_at=datetime(2024, 5, 6, 7, 8, 9))

    assert table.created_at == datetime(2024, 5, 6, 7, 8, 9, tzinfo=timezone.utc)


def test_aware_timestamps_are_converted_to_utc():
    plus_two = timezone(timedelta(hours=2))
    table = DBTable(id="t1", name="users", created_at=datetime(2024, 5, 6, 9, 8, 9, tzinfo=plus_two))

    assert table.created_at == datetime(2024, 5, 6, 7, 8, 9, tzinfo=timezone.utc)
    assert table.created_at.utcoffset() == timedelta(0)


def test_to_wire_datetime():
    assert to_wire_datetime(datetime(2024, 1, 2, 3, 4, 5, 678, tzinfo=timezone.utc)) == "2024-01-02 03:04:05"
    assert len(to_wire_datetime(None)) == len("2024-01-02 03:04:05")


@pytest.mark.parametrize(
    "relationship_type,expected",
    [
        ("one_to_one", ("one", "one")),
        ("one_to_many", ("one", "many")),
        ("many_to_one", ("many", "one")),
        ("many_to_many", ("many", "many")),
        (None, ("one", "one")),
        ("unknown", ("one", "one")),
    ],
)
def test_determine_cardinalities(relationship_type, expected):
    assert determine_cardinalities(relationship_type) == expected


def test_relationship_defaults_to_one_to_one():
    relationship = DBRelationship(id="r1", source_table_id="t1", target_table_id="t2")

    assert (relationship.source_cardinality, relationship.target_cardinality) == ("one", "one")


def test_diagram_record_excludes_children():
    diagram = Diagram(
        id="d1",
        name="Shop",
        database_type="postgresql",
        tables=[DBTable(id="t1", name="users")],
    )

    assert "tables" not in diagram.record()
    document = diagram.to_document()
    assert [t["id"] for t in document["tables"]] == ["t1"]
    assert "customTypes" not in document


def test_filter_distinguishes_null_from_empty():
    assert DiagramFilter(diagram_id="d1").to_document()["tableIds"] is None
    assert DiagramFilter(diagram_id="d1", table_ids=[]).to_document()["tableIds"] == []


def test_include_options():
    options = DiagramIncludeOptions(include_tables=True, include_custom_types=True)

    assert options.any()
    assert options.to_query_params() == {"includeTables": "true", "includeCustomTypes": "true"}
    assert not DiagramIncludeOptions().any()
    assert DiagramIncludeOptions().to_query_params() == {}
    assert all(DiagramIncludeOptions.everything().model_dump().values())


def test_patch_keeps_only_supplied_attributes():
    patch = TablePatch.model_validate({"name": "people", "comment": None})

    assert patch.to_attributes() == {"name": "people", "comment": None}
    assert TablePatch().is_empty()


def test_patch_rejects_unknown_attributes():
    with pytest.raises(PydanticValidationError):
        TablePatch.model_validate({"nickname": "x"})


ALL_PATCHES = [DiagramPatch, TablePatch, RelationshipPatch, DependencyPatch, AreaPatch, CustomTypePatch, ConfigPatch]


@pytest.mark.parametrize(
    "patch_model, attribute",
    [
        (DiagramPatch, "databaseType"),
        (TablePatch, "isView"),
        (RelationshipPatch, "targetTableId"),
        (DependencyPatch, "dependentTableId"),
        (AreaPatch, "width"),
        (CustomTypePatch, "type"),
        (ConfigPatch, "defaultDiagramId"),
    ],
)
def test_patch_rejects_clearing_required_attributes(patch_model, attribute):
    with pytest.raises(PydanticValidationError, match=f"{attribute} cannot be null"):
        patch_model.model_validate({attribute: None})


def test_patch_allows_clearing_optional_attributes():
    assert DiagramPatch.model_validate({"databaseEdition": None}).to_attributes() == {"databaseEdition": None}
    assert TablePatch.model_validate({"schema": None, "order": None}).to_attributes() == {
        "schema": None,
        "order": None,
    }
    assert RelationshipPatch.model_validate({"name": None}).to_attributes() == {"name": None}


@pytest.mark.parametrize("patch_model", ALL_PATCHES, ids=lambda m: m.__name__)
def test_non_nullable_names_are_patch_fields(patch_model):
    assert patch_model.non_nullable
    assert set(patch_model.non_nullable) <= set(patch_model.model_fields)
