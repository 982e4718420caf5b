"""Domain model entities for finport.

These are pure data classes representing the import pipeline's concepts,
independent of database schema. The storage layer converts its rows into
these entities through the mappers module.
"""

from dataclasses import dataclass, field, replace
from datetime import datetime, date, UTC
from decimal import Decimal
from enum import Enum
from typing import Optional, Union

from finport.domain.errors import InvalidTransitionError


Cell = Union[str, int, float, datetime, date, None]


class FileFormat(str, Enum):
    """Tabular container formats accepted for upload."""

    XLSX = "xlsx"
    XLS = "xls"
    CSV = "csv"


class TransactionKind(str, Enum):
    """Direction of money for a transaction."""

    INCOME = "INCOME"
    EXPENSE = "EXPENSE"


class ImportStatus(str, Enum):
    """Lifecycle status of an import log."""

    PROCESSING = "PROCESSING"
    COMPLETED = "COMPLETED"
    FAILED = "FAILED"


@dataclass(frozen=True)
class Account:
    """Bank account domain entity."""

    id: int
    owner_id: str
    name: str
    bank_name: str
    created_at: datetime


@dataclass(frozen=True)
class Category:
    """Transaction category domain entity."""

    id: int
    owner_id: str
    name: str
    created_at: datetime


@dataclass(frozen=True)
class RawTable:
    """Decoded contents of the first sheet of an uploaded file.

    ``headers`` keeps the column order of the file. Each row maps a header to
    its cell; cells keep the native type the container reported.
    """

    headers: tuple[str, ...]
    rows: tuple[dict[str, Cell], ...]


@dataclass(frozen=True)
class ColumnMapping:
    """Association between file headers and transaction fields."""

    date: Optional[str] = None
    description: Optional[str] = None
    amount: Optional[str] = None
    category: Optional[str] = None
    kind: Optional[str] = None

    @property
    def is_complete(self) -> bool:
        return all((self.date, self.description, self.amount))

    def required_missing(self) -> list[str]:
        """Return names of required fields without a mapped column."""
        return [
            name
            for name in ("date", "description", "amount")
            if not getattr(self, name)
        ]

    def missing_from(self, headers: tuple[str, ...] | list[str]) -> list[str]:
        """Return mapped columns that are not among ``headers``."""
        known = set(headers)
        mapped = (self.date, self.description, self.amount, self.category, self.kind)
        return [column for column in mapped if column and column not in known]

    def merged_with(self, override: "ColumnMapping") -> "ColumnMapping":
        """Return this mapping with every column set in ``override`` replaced."""
        return ColumnMapping(
            date=override.date or self.date,
            description=override.description or self.description,
            amount=override.amount or self.amount,
            category=override.category or self.category,
            kind=override.kind or self.kind,
        )


@dataclass(frozen=True)
class NormalizedTransaction:
    """One raw row after date, amount and kind normalization."""

    date: date
    description: str
    amount: Decimal
    kind: TransactionKind
    fingerprint: str
    category_name: Optional[str] = None


@dataclass(frozen=True)
class ImportBatch:
    """All normalized rows from one file, ready to be committed together."""

    owner_id: str
    file_name: str
    account_id: int
    default_category_id: int
    transactions: tuple[NormalizedTransaction, ...]
    source_row_count: Optional[int] = None
    bank_source: Optional[str] = None

    @property
    def total_rows(self) -> int:
        if self.source_row_count is None:
            return len(self.transactions)
        return self.source_row_count


@dataclass(frozen=True)
class NewTransactionRecord:
    """Normalized transaction resolved against an account and category."""

    transaction: NormalizedTransaction
    account_id: int
    category_id: int
    import_log_id: Optional[int] = None


@dataclass(frozen=True)
class StoredTransaction:
    """Persisted transaction domain entity."""

    id: int
    owner_id: str
    account_id: int
    category_id: Optional[int]
    date: date
    amount: Decimal
    kind: TransactionKind
    description: str
    fingerprint: str
    import_log_id: Optional[int]
    created_at: datetime


@dataclass(frozen=True)
class ImportLog:
    """Audit record for one import batch.

    A log starts in PROCESSING and moves exactly once, to COMPLETED or
    FAILED. Use :meth:`complete` and :meth:`fail` to derive the terminal
    state; both refuse to act on a log that has already finished.
    """

    id: int
    owner_id: str
    file_name: str
    total_rows: int
    status: ImportStatus = ImportStatus.PROCESSING
    imported_rows: int = 0
    skipped_rows: int = 0
    bank_source: Optional[str] = None
    error_message: Optional[str] = None
    created_at: datetime = field(default_factory=lambda: datetime.now(UTC))
    finished_at: Optional[datetime] = None

    @property
    def is_finished(self) -> bool:
        return self.status is not ImportStatus.PROCESSING

    def _ensure_processing(self) -> None:
        if self.is_finished:
            raise InvalidTransitionError(
                f"Import log {self.id} is already {self.status.value} and cannot change"
            )

    def complete(self, imported: int, skipped: int) -> "ImportLog":
        """Return the COMPLETED version of this log."""
        self._ensure_processing()
        return replace(
            self,
            status=ImportStatus.COMPLETED,
            imported_rows=imported,
            skipped_rows=skipped,
            finished_at=datetime.now(UTC),
        )

    def fail(self, message: str) -> "ImportLog":
        """Return the FAILED version of this log."""
        self._ensure_processing()
        return replace(
            self,
            status=ImportStatus.FAILED,
            error_message=message,
            finished_at=datetime.now(UTC),
        )


@dataclass(frozen=True)
class DedupResult:
    """Batch partitioned into rows to insert and rows already known."""

    new: tuple[NormalizedTransaction, ...]
    duplicates: tuple[NormalizedTransaction, ...]


@dataclass(frozen=True)
class ImportPreview:
    """What an upload looks like before the user confirms the import."""

    file_name: str
    headers: tuple[str, ...]
    suggested_mapping: ColumnMapping
    total_rows: int
    rows: tuple[dict[str, Cell], ...]


@dataclass(frozen=True)
class ImportResult:
    """Outcome of a committed import batch."""

    imported: int
    skipped: int
    log_id: int
    dropped: int = 0
