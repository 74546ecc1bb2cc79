"""
Todo API - Migration Tests
==========================

What:  Applies alembic revision 001 to a scratch SQLite file and compares
       the resulting schema with the ORM metadata, so the two cannot drift
       apart unnoticed.
"""

import importlib.util
from pathlib import Path

import pytest
from alembic.migration import MigrationContext
from alembic.operations import Operations
from sqlalchemy import create_engine, inspect

import todo_api.models  # noqa: F401
from todo_api.database import Base

MIGRATION = (
    Path(__file__).resolve().parent.parent
    / "alembic"
    / "versions"
    / "001_create_todo_tables.py"
)


def _load_migration():
    spec = importlib.util.spec_from_file_location("todo_migration_001", MIGRATION)
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)
    return module


@pytest.fixture
def migrated(tmp_path):
    engine = create_engine(f"sqlite:///{tmp_path / 'migrated.db'}")
    with engine.begin() as conn:
        with Operations.context(MigrationContext.configure(conn)):
            _load_migration().upgrade()
    yield inspect(engine)
    engine.dispose()


def test_same_tables(migrated):
    assert set(migrated.get_table_names()) == set(Base.metadata.tables)


@pytest.mark.parametrize("table_name", sorted(Base.metadata.tables))
def test_same_columns_and_nullability(migrated, table_name):
    table = Base.metadata.tables[table_name]

    reflected = {c["name"]: c["nullable"] for c in migrated.get_columns(table_name)}

    assert reflected == {c.name: c.nullable for c in table.columns}


@pytest.mark.parametrize("table_name", sorted(Base.metadata.tables))
def test_same_server_defaults(migrated, table_name):
    table = Base.metadata.tables[table_name]

    reflected = {
        c["name"] for c in migrated.get_columns(table_name) if c["default"] is not None
    }

    assert reflected == {c.name for c in table.columns if c.server_default is not None}
    assert "created_at" in reflected


@pytest.mark.parametrize("table_name", sorted(Base.metadata.tables))
def test_same_indexes(migrated, table_name):
    table = Base.metadata.tables[table_name]

    reflected = {(i["name"], bool(i["unique"])) for i in migrated.get_indexes(table_name)}

    assert reflected == {(str(i.name), bool(i.unique)) for i in table.indexes}
