"""Mapper functions to convert between domain models and SQLAlchemy models.

This layer isolates the conversion logic, so the import pipeline never sees
ORM instances.
"""

from finport.domain import entities as domain
from finport.database.models import (
    Account as ORMAccount,
    Category as ORMCategory,
    ImportLog as ORMImportLog,
    Transaction as ORMTransaction,
)


def account_to_domain(orm_account: ORMAccount) -> domain.Account:
    """Convert SQLAlchemy Account model to domain Account entity."""
    return domain.Account(
        id=orm_account.id,
        owner_id=orm_account.owner_id,
        name=orm_account.name,
        bank_name=orm_account.bank_name,
        created_at=orm_account.created_at,
    )


def category_to_domain(orm_category: ORMCategory) -> domain.Category:
    """Convert SQLAlchemy Category model to domain Category entity."""
    return domain.Category(
        id=orm_category.id,
        owner_id=orm_category.owner_id,
        name=orm_category.name,
        created_at=orm_category.created_at,
    )


def transaction_to_domain(orm_transaction: ORMTransaction) -> domain.StoredTransaction:
    """Convert SQLAlchemy Transaction model to domain StoredTransaction entity."""
    return domain.StoredTransaction(
        id=orm_transaction.id,
        owner_id=orm_transaction.owner_id,
        account_id=orm_transaction.account_id,
        category_id=orm_transaction.category_id,
        date=orm_transaction.date,
        amount=orm_transaction.amount,
        kind=domain.TransactionKind(orm_transaction.kind),
        description=orm_transaction.description,
        fingerprint=orm_transaction.fingerprint,
        import_log_id=orm_transaction.import_log_id,
        created_at=orm_transaction.created_at,
    )


def import_log_to_domain(orm_log: ORMImportLog) -> domain.ImportLog:
    """Convert SQLAlchemy ImportLog model to domain ImportLog entity."""
    return domain.ImportLog(
        id=orm_log.id,
        owner_id=orm_log.owner_id,
        file_name=orm_log.file_name,
        bank_source=orm_log.bank_source,
        total_rows=orm_log.total_rows,
        imported_rows=orm_log.imported_rows,
        skipped_rows=orm_log.skipped_rows,
        status=domain.ImportStatus(orm_log.status),
        error_message=orm_log.error_message,
        created_at=orm_log.created_at,
        finished_at=orm_log.finished_at,
    )


def record_to_row(owner_id: str, record: domain.NewTransactionRecord) -> dict:
    """Convert a NewTransactionRecord into insert parameters."""
    txn = record.transaction
    return {
        "owner_id": owner_id,
        "account_id": record.account_id,
        "category_id": record.category_id,
        "import_log_id": record.import_log_id,
        "date": txn.date,
        "amount": txn.amount,
        "kind": txn.kind.value,
        "description": txn.description,
        "fingerprint": txn.fingerprint,
    }
