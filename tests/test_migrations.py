"""
Migration tests: the initial revision builds a database the services can use.
"""

import importlib.util
from pathlib import Path

import pytest
from alembic.migration import MigrationContext
from alembic.operations import Operations
from sqlalchemy import create_engine, text
from sqlalchemy.orm import Session

from erp_ledger.services import sequence_service
from erp_ledger.services.account_service import DEFAULT_CHART_OF_ACCOUNTS

REVISION_PATH = (
    Path(__file__).resolve().parents[1] / "migrations" / "versions" / "a1b2c3d4e5f6_initial_ledger_schema.py"
)


def _load_revision():
    spec = importlib.util.spec_from_file_location("initial_ledger_schema", REVISION_PATH)
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)
    return module


@pytest.fixture
def migrated():
    engine = create_engine("sqlite://")
    revision = _load_revision()
    with engine.connect() as connection:
        with Operations.context(MigrationContext.configure(connection)):
            revision.upgrade()
        yield connection
    engine.dispose()


class TestInitialRevision:

    def test_seeds_chart_of_accounts(self, migrated):
        count = migrated.execute(text("SELECT COUNT(*) FROM accounts")).scalar()
        assert count == len(DEFAULT_CHART_OF_ACCOUNTS)

    def test_seeds_a_counter_for_every_prefix(self, migrated):
        rows = migrated.execute(text("SELECT prefix, last_value FROM document_sequences")).all()
        assert {prefix for prefix, _ in rows} == set(sequence_service.KNOWN_PREFIXES)
        assert all(last_value == 0 for _, last_value in rows)

    def test_first_document_ids_start_at_one(self, migrated):
        session = Session(bind=migrated)
        try:
            assert sequence_service.next_document_id(session, sequence_service.ORDER) == "DH001"
            assert sequence_service.next_document_id(session, sequence_service.ORDER) == "DH002"
        finally:
            session.close()
