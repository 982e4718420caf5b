"""Tests for the statement import service."""

from datetime import date, datetime
from decimal import Decimal

import pytest
from sqlalchemy.exc import OperationalError

from finport.database.sqlalchemy_db import SQLAlchemyDatabase
from finport.domain.entities import ColumnMapping, ImportStatus, TransactionKind
from finport.domain.errors import (
    EmptyFileError,
    FileTooLargeError,
    NotFoundError,
    PersistenceError,
    UnsupportedFormatError,
    ValidationError,
)
from finport.domain.file_validation import MAX_FILE_SIZE


@pytest.fixture
def br_payload(fixtures_dir):
    return (fixtures_dir / "extrato_br.csv").read_bytes()


@pytest.fixture
def us_payload(fixtures_dir):
    return (fixtures_dir / "statement_us.csv").read_bytes()


def run_import(service, owner_id, account, category, payload, file_name="extrato_br.csv", **kwargs):
    return service.import_file(
        owner_id=owner_id,
        file_name=file_name,
        payload=payload,
        account_id=account.id,
        default_category_id=category.id,
        **kwargs,
    )


def test_preview_csv(import_service, br_payload):
    """Preview shows headers, suggestion, row count and the first rows."""
    preview = import_service.preview("extrato_br.csv", br_payload, limit=2)

    assert preview.headers == ("Data", "Descrição", "Valor")
    assert preview.suggested_mapping == ColumnMapping(date="Data", description="Descrição", amount="Valor")
    assert preview.total_rows == 7
    assert len(preview.rows) == 2
    assert preview.rows[0]["Descrição"] == "Padaria São João"


def test_preview_does_not_write(import_service, temp_db, owner_id, br_payload):
    """Previewing creates no log and no transactions."""
    import_service.preview("extrato_br.csv", br_payload)

    assert temp_db.list_import_logs(owner_id) == []
    assert temp_db.list_transactions(owner_id) == []


def test_import_brazilian_statement(import_service, temp_db, owner_id, sample_account, sample_category, br_payload):
    """Readable rows are imported and unreadable ones dropped."""
    result = run_import(import_service, owner_id, sample_account, sample_category, br_payload)

    assert result.imported == 4
    assert result.skipped == 0
    assert result.dropped == 3

    stored = {t.description: t for t in temp_db.list_transactions(owner_id)}
    assert set(stored) == {"Padaria São João", "Salário", "Conta de Luz", "Mercado Pão de Açúcar"}
    assert stored["Padaria São João"].kind == TransactionKind.INCOME
    assert stored["Padaria São João"].amount == Decimal("15.90")
    assert stored["Padaria São João"].date == date(2026, 1, 31)
    assert stored["Salário"].kind == TransactionKind.EXPENSE
    assert stored["Salário"].amount == Decimal("5000.00")
    assert stored["Conta de Luz"].amount == Decimal("120.35")
    assert stored["Mercado Pão de Açúcar"].amount == Decimal("1234.56")
    assert all(t.account_id == sample_account.id for t in stored.values())
    assert all(t.category_id == sample_category.id for t in stored.values())
    assert all(t.import_log_id == result.log_id for t in stored.values())

    log = temp_db.get_import_log(result.log_id)
    assert log.status == ImportStatus.COMPLETED
    assert log.total_rows == 7
    assert log.imported_rows == 4
    assert log.skipped_rows == 0


def test_reimport_skips_everything(import_service, temp_db, owner_id, sample_account, sample_category, br_payload):
    """Importing the same file twice stores nothing new."""
    run_import(import_service, owner_id, sample_account, sample_category, br_payload)

    result = run_import(import_service, owner_id, sample_account, sample_category, br_payload)

    assert result.imported == 0
    assert result.skipped == 4
    assert len(temp_db.list_transactions(owner_id)) == 4
    assert temp_db.get_import_log(result.log_id).status == ImportStatus.COMPLETED


def test_repeated_rows_in_one_file(import_service, temp_db, owner_id, sample_account, sample_category):
    """A row appearing twice in one file is imported once."""
    payload = (
        "Data;Descrição;Valor\n"
        "10/02/2026;Farmácia;32,10\n"
        "10/02/2026;FARMÁCIA ;32,10\n"
    ).encode("utf-8")

    result = run_import(import_service, owner_id, sample_account, sample_category, payload, "dup.csv")

    assert result.imported == 1
    assert result.skipped == 1


def test_import_xlsx_with_native_cells(import_service, temp_db, owner_id, sample_account, sample_category, make_xlsx):
    """Spreadsheet serials, datetimes and numbers are read natively."""
    payload = make_xlsx(
        [
            ("Data", "Histórico", "Valor"),
            (46053, "Padaria", -15.9),
            (datetime(2026, 2, 1, 23, 59), "Aluguel", 1500),
            ("05/02/2026", "Mercado", "1.234,56"),
        ]
    )

    result = run_import(import_service, owner_id, sample_account, sample_category, payload, "extrato.xlsx")

    assert result.imported == 3
    stored = {t.description: t for t in temp_db.list_transactions(owner_id)}
    assert stored["Padaria"].date == date(2026, 1, 31)
    assert stored["Padaria"].kind == TransactionKind.INCOME
    assert stored["Aluguel"].date == date(2026, 2, 1)
    assert stored["Aluguel"].amount == Decimal("1500.00")
    assert stored["Mercado"].amount == Decimal("1234.56")


def test_import_xlsx_named_xls(import_service, temp_db, owner_id, sample_account, sample_category, make_xlsx):
    """Zip workbooks downloaded with a legacy extension still import."""
    payload = make_xlsx([("Data", "Histórico", "Valor"), (46053, "Padaria", -15.9)])

    result = run_import(import_service, owner_id, sample_account, sample_category, payload, "extrato.xls")

    assert result.imported == 1
    [txn] = temp_db.list_transactions(owner_id)
    assert txn.date == date(2026, 1, 31)


def test_category_column_resolves_by_name(
    import_service, temp_db, owner_id, category_service, sample_account, sample_category, us_payload
):
    """Known category names are used; unknown ones fall back to the default."""
    food_id = category_service.create_category(owner_id, "food")

    result = run_import(import_service, owner_id, sample_account, sample_category, us_payload, "statement_us.csv")

    assert result.imported == 3
    stored = {t.description: t for t in temp_db.list_transactions(owner_id)}
    assert stored["Coffee Shop"].category_id == food_id
    assert stored["Bookstore"].category_id == sample_category.id
    assert stored["Paycheck"].category_id == sample_category.id
    assert stored["Paycheck"].kind == TransactionKind.INCOME
    assert stored["Paycheck"].amount == Decimal("2500.00")
    assert stored["Bookstore"].amount == Decimal("1234.56")


def test_mapping_override(import_service, temp_db, owner_id, sample_account, sample_category):
    """Explicit columns win over the suggestion."""
    payload = (
        "Data;Descrição;Memo;Valor\n"
        "10/02/2026;PIX 123;Aluguel fevereiro;1.500,00\n"
    ).encode("utf-8")

    run_import(
        import_service,
        owner_id,
        sample_account,
        sample_category,
        payload,
        "override.csv",
        mapping=ColumnMapping(description="Memo"),
    )

    assert [t.description for t in temp_db.list_transactions(owner_id)] == ["Aluguel fevereiro"]


def test_unmapped_required_column(import_service, temp_db, owner_id, sample_account, sample_category):
    """A file without a recognisable amount column fails before logging."""
    payload = "Data;Descrição;Coluna\n10/02/2026;Farmácia;32,10\n".encode("utf-8")

    with pytest.raises(ValidationError):
        run_import(import_service, owner_id, sample_account, sample_category, payload, "bad.csv")

    assert temp_db.list_import_logs(owner_id) == []


def test_unknown_override_column(import_service, temp_db, owner_id, sample_account, sample_category, br_payload):
    """An override naming a missing column is rejected."""
    with pytest.raises(ValidationError):
        run_import(
            import_service,
            owner_id,
            sample_account,
            sample_category,
            br_payload,
            mapping=ColumnMapping(amount="Montante"),
        )

    assert temp_db.list_import_logs(owner_id) == []


def test_oversized_file_rejected(import_service, temp_db, owner_id, sample_account, sample_category):
    """Files above the size ceiling never reach parsing or logging."""
    payload = b"x" * (MAX_FILE_SIZE + 1)

    with pytest.raises(FileTooLargeError):
        run_import(import_service, owner_id, sample_account, sample_category, payload, "big.csv")

    assert temp_db.list_import_logs(owner_id) == []


def test_unsupported_extension_rejected(import_service, owner_id, sample_account, sample_category, br_payload):
    """Only spreadsheet and CSV extensions are accepted."""
    with pytest.raises(UnsupportedFormatError):
        run_import(import_service, owner_id, sample_account, sample_category, br_payload, "extrato.pdf")


def test_header_only_file_rejected(import_service, temp_db, owner_id, sample_account, sample_category):
    """A file with no data rows is an empty file."""
    with pytest.raises(EmptyFileError):
        run_import(import_service, owner_id, sample_account, sample_category, b"Data;Descricao;Valor\n", "empty.csv")

    assert temp_db.list_import_logs(owner_id) == []


def test_all_rows_unreadable(import_service, temp_db, owner_id, sample_account, sample_category):
    """A batch with nothing to import still completes with zero counts."""
    payload = "Data;Descrição;Valor\nontem;Farmácia;abc\n".encode("utf-8")

    result = run_import(import_service, owner_id, sample_account, sample_category, payload, "junk.csv")

    assert result.imported == 0
    assert result.skipped == 0
    assert result.dropped == 1
    assert temp_db.get_import_log(result.log_id).status == ImportStatus.COMPLETED


def test_unknown_account(import_service, temp_db, owner_id, sample_category, br_payload):
    """Importing into an account the owner does not have fails without a log."""
    with pytest.raises(NotFoundError):
        import_service.import_file(
            owner_id=owner_id,
            file_name="extrato_br.csv",
            payload=br_payload,
            account_id=999,
            default_category_id=sample_category.id,
        )

    assert temp_db.list_import_logs(owner_id) == []


def test_other_owners_account(import_service, temp_db, sample_account, sample_category, br_payload):
    """Accounts and categories of another owner are not found."""
    with pytest.raises(NotFoundError):
        run_import(import_service, "user-2", sample_account, sample_category, br_payload)


def test_persistence_failure_marks_log_failed(
    import_service, temp_db, owner_id, sample_account, sample_category, br_payload, monkeypatch
):
    """A storage failure mid-batch fails the log and leaves no rows."""
    calls = {"count": 0}
    original = SQLAlchemyDatabase._count_fingerprints

    def failing_count(self, session, owner, fingerprints):
        calls["count"] += 1
        if calls["count"] == 2:
            raise OperationalError("SELECT count(*)", {}, Exception("disk I/O error"))
        return original(self, session, owner, fingerprints)

    monkeypatch.setattr(SQLAlchemyDatabase, "_count_fingerprints", failing_count)

    with pytest.raises(PersistenceError):
        run_import(import_service, owner_id, sample_account, sample_category, br_payload)

    monkeypatch.undo()
    assert temp_db.list_transactions(owner_id) == []
    [log] = temp_db.list_import_logs(owner_id)
    assert log.status == ImportStatus.FAILED
    assert "disk I/O error" in log.error_message
    assert log.imported_rows == 0


def test_concurrent_duplicates_are_skipped(
    import_service, temp_db, owner_id, sample_account, sample_category, br_payload, monkeypatch
):
    """Rows another import stored after the duplicate check count as skipped."""
    run_import(import_service, owner_id, sample_account, sample_category, br_payload)
    # Simulate a check that ran before the other import committed
    monkeypatch.setattr(temp_db, "find_fingerprints", lambda owner, fingerprints: set())

    result = run_import(import_service, owner_id, sample_account, sample_category, br_payload)

    assert result.imported == 0
    assert result.skipped == 4
    assert len(temp_db.list_transactions(owner_id)) == 4
    log = temp_db.get_import_log(result.log_id)
    assert log.status == ImportStatus.COMPLETED
    assert log.skipped_rows == 4


def test_history_newest_first(import_service, owner_id, sample_account, sample_category, br_payload, us_payload):
    """History returns the owner's logs newest first."""
    first = run_import(import_service, owner_id, sample_account, sample_category, br_payload)
    second = run_import(import_service, owner_id, sample_account, sample_category, us_payload, "statement_us.csv")

    logs = import_service.history(owner_id)

    assert [log.id for log in logs] == [second.log_id, first.log_id]
    assert import_service.history("user-2") == []


def test_bank_source_kept_on_log(import_service, temp_db, owner_id, sample_account, sample_category, br_payload):
    """The bank label is stored on the log."""
    result = run_import(import_service, owner_id, sample_account, sample_category, br_payload, bank_source="Nubank")

    assert temp_db.get_import_log(result.log_id).bank_source == "Nubank"


def test_import_logs_progress(import_service, owner_id, sample_account, sample_category, br_payload, caplog):
    """Start and completion are logged at INFO."""
    with caplog.at_level("INFO", logger="finport"):
        run_import(import_service, owner_id, sample_account, sample_category, br_payload)

    messages = [record.getMessage() for record in caplog.records]
    assert any("started" in message for message in messages)
    assert any("completed: 4 imported, 0 skipped" in message for message in messages)
