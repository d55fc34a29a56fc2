"""Tests for the embedded store's migration runner."""

import pytest

from DIAGRAMSTORE.storage.embedded import EmbeddedStore
from DIAGRAMSTORE.storage.embedded.migrations import (
    LATEST_VERSION,
    MIGRATIONS,
    CollectionSchema,
    DataTransform,
    MigrationRunner,
    MigrationStep,
)
from DIAGRAMSTORE.utils.error_handling import MigrationError, StorageError


@pytest.fixture
def store(tmp_path):
    store = EmbeddedStore(str(tmp_path / "diagrams.db"))
    store.connect()
    yield store
    store.close()


def test_registry_versions():
    assert LATEST_VERSION == len(MIGRATIONS) == 12
    assert MIGRATIONS[-1].clears == ("config",)
    assert all(step.description for step in MIGRATIONS)


def test_step_must_do_something():
    with pytest.raises(ValueError):
        MigrationStep(description="empty")


def test_fresh_store_reaches_latest(store):
    runner = MigrationRunner(store)

    assert len(runner.pending()) == LATEST_VERSION
    assert runner.run() == LATEST_VERSION
    assert store.get_version() == LATEST_VERSION
    assert runner.pending() == []
    assert "idx_db_tables_isMaterializedView" in store.index_names("db_tables")
    assert "idx_db_custom_types_type" in store.index_names("db_custom_types")
    assert store.index_names("diagram_filters") == []
    assert store.collections()["diagram_filters"].key_path == "diagramId"


def test_shape_change_drops_undeclared_indexes(store):
    MigrationRunner(store, MIGRATIONS[:1]).run()
    assert "idx_diagrams_databaseType" in store.index_names("diagrams")

    store.apply_shape((CollectionSchema(name="diagrams", indexes=("name",)),))

    assert store.index_names("diagrams") == ["idx_diagrams_name"]


def test_legacy_data_is_upgraded(store):
    MigrationRunner(store, MIGRATIONS[:1]).run()
    assert store.get_version() == 1

    store.add("diagrams", {"id": "d1", "name": "Legacy", "databaseType": "mysql"})
    store.add(
        "db_tables",
        {
            "id": "t1",
            "diagramId": "d1",
            "name": "users",
            "fields": [
                {"id": "f1", "name": "email", "type": "character varying", "nullable": "false"},
                {"id": "f2", "name": "id", "type": "bigint", "nullable": "true"},
            ],
        },
    )
    store.add(
        "db_relationships",
        {"id": "r1", "diagramId": "d1", "sourceTableId": "t1", "targetTableId": "t1", "type": "one_to_many"},
    )
    store.add("config", {"id": 1, "defaultDiagramId": "d1"})

    assert MigrationRunner(store).run() == LATEST_VERSION

    table = store.get("db_tables", "t1")
    assert table["fields"][0]["type"] == {"id": "character_varying", "name": "character varying"}
    assert table["fields"][1]["type"] == {"id": "bigint", "name": "bigint"}
    assert [field["nullable"] for field in table["fields"]] == [False, True]

    relationship = store.get("db_relationships", "r1")
    assert relationship["sourceCardinality"] == "one"
    assert relationship["targetCardinality"] == "many"
    assert "type" not in relationship

    assert store.all("config") == []
    assert store.get("diagrams", "d1")["name"] == "Legacy"


def test_rerun_is_a_noop(store):
    runner = MigrationRunner(store)
    runner.run()
    store.add("diagrams", {"id": "d1", "name": "Shop", "databaseType": "postgresql"})

    assert runner.run() == LATEST_VERSION
    assert store.count("diagrams") == 1


def test_failing_step_leaves_previous_version(store):
    def explode(document):
        raise RuntimeError("bad document")

    migrations = list(MIGRATIONS[:1]) + [
        MigrationStep(
            description="Rename diagrams",
            transforms=(
                DataTransform("diagrams", lambda doc: {**doc, "name": doc["name"].upper()}),
                DataTransform("diagrams", explode),
            ),
        )
    ]
    MigrationRunner(store, migrations[:1]).run()
    store.add("diagrams", {"id": "d1", "name": "shop", "databaseType": "postgresql"})

    with pytest.raises(MigrationError) as exc_info:
        MigrationRunner(store, migrations).run()

    assert exc_info.value.version == 2
    assert exc_info.value.description == "Rename diagrams"
    assert isinstance(exc_info.value.cause, RuntimeError)
    assert store.get_version() == 1
    assert store.get("diagrams", "d1")["name"] == "shop"


def test_store_newer_than_code_is_rejected(store):
    MigrationRunner(store).run()

    with pytest.raises(StorageError):
        MigrationRunner(store, MIGRATIONS[:3]).run()
