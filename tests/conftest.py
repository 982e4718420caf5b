"""Shared pytest fixtures for finport tests."""

import io
import os
import tempfile
from pathlib import Path

import openpyxl
import pytest

from finport.database.factories import create_sqlite_database
from finport.domain.account import AccountService
from finport.domain.category import CategoryService
from finport.domain.statement_import import StatementImportService
from finport.logging_setup import reset_logging

OWNER_ID = "user-1"


@pytest.fixture(autouse=True)
def _reset_logging():
    """Undo logging configuration done by CLI invocations."""
    yield
    reset_logging()


@pytest.fixture
def temp_db():
    """Create a temporary database for testing."""
    fd, db_path = tempfile.mkstemp(suffix=".db")
    os.close(fd)

    db = create_sqlite_database(database_path=db_path)
    # Store the path for tests that need it
    db.database_path = db_path
    db.connect()
    db.initialize_schema()

    yield db

    db.disconnect()
    if os.path.exists(db_path):
        os.unlink(db_path)


@pytest.fixture
def owner_id():
    """Owner id used by most tests."""
    return OWNER_ID


@pytest.fixture
def account_service(temp_db):
    """Create an AccountService with a temporary database."""
    return AccountService(temp_db)


@pytest.fixture
def category_service(temp_db):
    """Create a CategoryService with a temporary database."""
    return CategoryService(temp_db)


@pytest.fixture
def import_service(temp_db):
    """Create a StatementImportService with a temporary database."""
    return StatementImportService(temp_db)


@pytest.fixture
def sample_account(account_service, owner_id):
    """Create a sample account for testing."""
    account_id = account_service.create_account(owner_id, name="Conta Corrente", bank_name="Test Bank")
    return account_service.get_account(owner_id, account_id)


@pytest.fixture
def sample_category(category_service, owner_id):
    """Create a default category for imports."""
    category_id = category_service.create_category(owner_id, name="Outros")
    return category_service.get_category(owner_id, category_id)


@pytest.fixture
def cli_runner():
    """Create a Click CLI test runner."""
    from click.testing import CliRunner

    return CliRunner()


@pytest.fixture
def fixtures_dir():
    """Return the path to the test fixtures directory."""
    return Path(__file__).parent / "fixtures"


@pytest.fixture
def make_xlsx():
    """Build an in-memory xlsx payload from a list of rows."""

    def _make(rows, sheet_title="Extrato"):
        workbook = openpyxl.Workbook()
        sheet = workbook.active
        sheet.title = sheet_title
        for row in rows:
            sheet.append(list(row))
        buffer = io.BytesIO()
        workbook.save(buffer)
        return buffer.getvalue()

    return _make
