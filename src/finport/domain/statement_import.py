"""Bank statement import service.

Runs an uploaded file through validation, parsing, column mapping and row
normalization, then commits the surviving rows as one audited batch.

Every committed batch has an import log. The log is created in PROCESSING
before anything is written and is finalized exactly once: COMPLETED with
imported/skipped counts, or FAILED with the error text. A failure is always
recorded on the log before it propagates to the caller.
"""

from typing import Optional

from finport.database.base import Database
from finport.domain.account import AccountService
from finport.domain.category import CategoryService
from finport.domain.column_mapping import suggest_mapping, validate_mapping
from finport.domain.dedup import Deduplicator
from finport.domain.entities import (
    ColumnMapping,
    ImportBatch,
    ImportLog,
    ImportPreview,
    ImportResult,
    NewTransactionRecord,
    NormalizedTransaction,
    RawTable,
)
from finport.domain.file_validation import validate_upload
from finport.domain.normalizer import normalize_rows
from finport.domain.tabular import parse_table
from finport.logging_setup import get_logger

logger = get_logger(__name__)

PREVIEW_ROWS = 100
HISTORY_LIMIT = 20


class StatementImportService:
    """Service for previewing and importing bank statement files."""

    def __init__(self, db: Database):
        """Initialize statement import service.

        Args:
            db: Database instance
        """
        self.db = db
        self.account_service = AccountService(db)
        self.category_service = CategoryService(db)
        self.deduplicator = Deduplicator(db)

    def load_table(
        self, file_name: str, payload: bytes, content_type: Optional[str] = None
    ) -> RawTable:
        """Validate and decode an upload.

        Raises:
            ValidationError: If the file is too large or not tabular
            ParseError: If the payload is unreadable or has no data rows
        """
        file_format = validate_upload(file_name, len(payload), content_type)
        return parse_table(payload, file_format, file_name)

    def preview(
        self,
        file_name: str,
        payload: bytes,
        content_type: Optional[str] = None,
        limit: int = PREVIEW_ROWS,
    ) -> ImportPreview:
        """Describe an upload without importing it.

        Returns:
            Headers, suggested mapping, data row count and the first rows
        """
        table = self.load_table(file_name, payload, content_type)
        return ImportPreview(
            file_name=file_name,
            headers=table.headers,
            suggested_mapping=suggest_mapping(table.headers),
            total_rows=len(table.rows),
            rows=table.rows[: max(limit, 0)],
        )

    def prepare_batch(
        self,
        owner_id: str,
        file_name: str,
        table: RawTable,
        mapping: ColumnMapping,
        account_id: int,
        default_category_id: int,
        bank_source: Optional[str] = None,
    ) -> ImportBatch:
        """Normalize a parsed table into a batch.

        Raises:
            MappingError: If the mapping is incomplete or names unknown columns
        """
        validate_mapping(mapping, table.headers)
        transactions = normalize_rows(table.rows, mapping)
        return ImportBatch(
            owner_id=owner_id,
            file_name=file_name,
            account_id=account_id,
            default_category_id=default_category_id,
            transactions=tuple(transactions),
            source_row_count=len(table.rows),
            bank_source=bank_source,
        )

    def import_file(
        self,
        owner_id: str,
        file_name: str,
        payload: bytes,
        account_id: int,
        default_category_id: int,
        mapping: Optional[ColumnMapping] = None,
        content_type: Optional[str] = None,
        bank_source: Optional[str] = None,
    ) -> ImportResult:
        """Run the whole pipeline for one uploaded file.

        Args:
            owner_id: Authenticated owner the rows belong to
            file_name: Declared file name
            payload: File contents
            account_id: Account receiving the transactions
            default_category_id: Category for rows without their own
            mapping: Column overrides; unset columns use the suggestion
            content_type: Declared MIME type (advisory)
            bank_source: Optional label of the issuing bank

        Returns:
            ImportResult with imported, skipped and dropped counts

        Raises:
            ValidationError, ParseError: Before any log is created
            NotFoundError: If the account or category is not the owner's
            Exception: Any persistence failure, after the log is marked FAILED
        """
        table = self.load_table(file_name, payload, content_type)
        effective = suggest_mapping(table.headers)
        if mapping is not None:
            effective = effective.merged_with(mapping)

        batch = self.prepare_batch(
            owner_id=owner_id,
            file_name=file_name,
            table=table,
            mapping=effective,
            account_id=account_id,
            default_category_id=default_category_id,
            bank_source=bank_source,
        )
        return self.commit(batch)

    def commit(self, batch: ImportBatch) -> ImportResult:
        """Persist a batch under a new import log.

        Raises:
            NotFoundError: If the account or default category is not the owner's
            Exception: Whatever failed during persistence, re-raised after the
                log has been marked FAILED
        """
        self.account_service.require_account(batch.owner_id, batch.account_id)
        self.category_service.require_category(batch.owner_id, batch.default_category_id)

        log_id = self.db.create_import_log(
            owner_id=batch.owner_id,
            file_name=batch.file_name,
            total_rows=batch.total_rows,
            bank_source=batch.bank_source,
        )
        log = ImportLog(
            id=log_id,
            owner_id=batch.owner_id,
            file_name=batch.file_name,
            total_rows=batch.total_rows,
            bank_source=batch.bank_source,
        )
        logger.info(
            "Import %d started: %s (%d rows, %d normalized)",
            log_id,
            batch.file_name,
            batch.total_rows,
            len(batch.transactions),
        )

        try:
            dedup = self.deduplicator.partition(batch.owner_id, batch.transactions)
            records = self._build_records(batch, dedup.new, log_id)
            inserted = self.db.insert_many(batch.owner_id, records)

            rejected = len(records) - inserted
            if rejected:
                logger.warning(
                    "Import %d: %d rows were inserted concurrently by another import",
                    log_id,
                    rejected,
                )
            finished = log.complete(imported=inserted, skipped=len(dedup.duplicates) + rejected)
            self.db.update_import_log(
                log_id,
                finished.status,
                imported_rows=finished.imported_rows,
                skipped_rows=finished.skipped_rows,
            )
        except Exception as exc:
            self._record_failure(log, exc)
            raise

        logger.info(
            "Import %d completed: %d imported, %d skipped",
            log_id,
            finished.imported_rows,
            finished.skipped_rows,
        )
        return ImportResult(
            imported=finished.imported_rows,
            skipped=finished.skipped_rows,
            log_id=log_id,
            dropped=batch.total_rows - len(batch.transactions),
        )

    def history(self, owner_id: str, limit: int = HISTORY_LIMIT) -> list[ImportLog]:
        """Return the owner's import logs, newest first."""
        return self.db.list_import_logs(owner_id, limit=limit)

    def _build_records(
        self,
        batch: ImportBatch,
        transactions: tuple[NormalizedTransaction, ...],
        log_id: int,
    ) -> list[NewTransactionRecord]:
        """Attach account, category and log to each new transaction."""
        names: dict[str, int] = {}
        if any(txn.category_name for txn in transactions):
            names = self.category_service.name_index(batch.owner_id)

        records = []
        for txn in transactions:
            category_id = batch.default_category_id
            if txn.category_name:
                category_id = names.get(txn.category_name.strip().lower(), category_id)
            records.append(
                NewTransactionRecord(
                    transaction=txn,
                    account_id=batch.account_id,
                    category_id=category_id,
                    import_log_id=log_id,
                )
            )
        return records

    def _record_failure(self, log: ImportLog, exc: Exception) -> None:
        """Mark the log FAILED; a failure to do so is logged, not raised."""
        message = str(exc) or type(exc).__name__
        logger.exception("Import %d failed: %s", log.id, message)
        failed = log.fail(message)
        try:
            self.db.update_import_log(
                log.id,
                failed.status,
                error_message=failed.error_message,
            )
        except Exception:
            logger.exception("Could not record failure on import log %d", log.id)
