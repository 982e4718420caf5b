"""Abstract database interface."""

from abc import ABC, abstractmethod
from typing import Iterable, Optional, Sequence

# Import entities directly so the database layer never pulls in services
from finport.domain.entities import (
    Account,
    Category,
    ImportLog,
    ImportStatus,
    NewTransactionRecord,
    StoredTransaction,
)


class Database(ABC):
    """Abstract database interface for finport.

    Every read and write is scoped to an owner id supplied by the caller;
    the database never authenticates.
    """

    @abstractmethod
    def connect(self) -> None:
        """Connect to the database."""
        pass

    @abstractmethod
    def disconnect(self) -> None:
        """Disconnect from the database."""
        pass

    @abstractmethod
    def initialize_schema(self) -> None:
        """Initialize database schema (create tables)."""
        pass

    # Account operations
    @abstractmethod
    def create_account(self, owner_id: str, name: str, bank_name: str) -> int:
        """Create a new account. Returns account ID."""
        pass

    @abstractmethod
    def get_account(self, owner_id: str, account_id: int) -> Optional[Account]:
        """Get an owner's account by ID."""
        pass

    @abstractmethod
    def list_accounts(self, owner_id: str) -> list[Account]:
        """List an owner's accounts."""
        pass

    # Category operations
    @abstractmethod
    def create_category(self, owner_id: str, name: str) -> int:
        """Create a category. Returns category ID."""
        pass

    @abstractmethod
    def get_category(self, owner_id: str, category_id: int) -> Optional[Category]:
        """Get an owner's category by ID."""
        pass

    @abstractmethod
    def list_categories(self, owner_id: str) -> list[Category]:
        """List an owner's categories."""
        pass

    # Transaction operations
    @abstractmethod
    def find_fingerprints(self, owner_id: str, fingerprints: Iterable[str]) -> set[str]:
        """Return the subset of ``fingerprints`` already stored for the owner."""
        pass

    @abstractmethod
    def insert_many(self, owner_id: str, records: Sequence[NewTransactionRecord]) -> int:
        """Insert records as one unit. Returns the number actually inserted.

        Records whose fingerprint already exists for the owner are skipped by
        the store, so the result may be lower than ``len(records)``. Any
        other failure rolls back the whole batch.
        """
        pass

    @abstractmethod
    def list_transactions(
        self, owner_id: str, account_id: Optional[int] = None
    ) -> list[StoredTransaction]:
        """List an owner's transactions, optionally for one account."""
        pass

    # Import log operations
    @abstractmethod
    def create_import_log(
        self,
        owner_id: str,
        file_name: str,
        total_rows: int,
        bank_source: Optional[str] = None,
    ) -> int:
        """Create an import log in PROCESSING. Returns log ID."""
        pass

    @abstractmethod
    def update_import_log(
        self,
        log_id: int,
        status: ImportStatus,
        imported_rows: Optional[int] = None,
        skipped_rows: Optional[int] = None,
        error_message: Optional[str] = None,
    ) -> None:
        """Move a PROCESSING import log to a terminal status.

        Raises:
            NotFoundError: If the log does not exist
            ConflictError: If the log already left PROCESSING
        """
        pass

    @abstractmethod
    def get_import_log(self, log_id: int) -> Optional[ImportLog]:
        """Get import log by ID."""
        pass

    @abstractmethod
    def list_import_logs(self, owner_id: str, limit: int = 20) -> list[ImportLog]:
        """List an owner's import logs, newest first."""
        pass
