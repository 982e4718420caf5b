"""Row normalization: raw table rows into NormalizedTransaction values.

Rows whose required cells are blank or whose date or amount cannot be read
are dropped without raising; the number of dropped rows is the difference
between the input and output lengths.
"""

from typing import Iterable, Mapping, Optional

from finport.domain.entities import (
    Cell,
    ColumnMapping,
    NormalizedTransaction,
    TransactionKind,
)
from finport.utils.amount_parser import parse_amount_cell
from finport.utils.date_parser import parse_date_cell
from finport.utils.fingerprint import compute_fingerprint

INCOME_MARKERS = frozenset(
    {"c", "cr", "credit", "crédito", "credito", "receita", "entrada", "income"}
)
EXPENSE_MARKERS = frozenset(
    {"d", "db", "debit", "débito", "debito", "despesa", "saída", "saida", "expense"}
)


def kind_for_sign(is_negative: bool) -> TransactionKind:
    """Map the written sign of an amount to a transaction kind.

    Statements handled here list money leaving the account as positive
    values, so a negative amount is income and anything else an expense.
    """
    return TransactionKind.INCOME if is_negative else TransactionKind.EXPENSE


def kind_from_marker(value: Cell) -> Optional[TransactionKind]:
    """Read an explicit credit/debit marker, or None if unrecognised."""
    if not isinstance(value, str):
        return None
    marker = value.strip().lower()
    if marker in INCOME_MARKERS:
        return TransactionKind.INCOME
    if marker in EXPENSE_MARKERS:
        return TransactionKind.EXPENSE
    return None


def _is_blank(value: Cell) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def normalize_row(
    row: Mapping[str, Cell], mapping: ColumnMapping
) -> Optional[NormalizedTransaction]:
    """Normalize one raw row.

    Args:
        row: Raw row keyed by header
        mapping: Complete column mapping

    Returns:
        NormalizedTransaction, or None when the row must be dropped
    """
    date_cell = row.get(mapping.date) if mapping.date else None
    description_cell = row.get(mapping.description) if mapping.description else None
    amount_cell = row.get(mapping.amount) if mapping.amount else None

    if _is_blank(date_cell) or _is_blank(description_cell) or _is_blank(amount_cell):
        return None

    description = str(description_cell).strip()

    try:
        txn_date = parse_date_cell(date_cell)
        amount = parse_amount_cell(amount_cell)
    except ValueError:
        return None

    kind = None
    if mapping.kind:
        kind = kind_from_marker(row.get(mapping.kind))
    if kind is None:
        kind = kind_for_sign(amount.is_negative)

    category_name = None
    if mapping.category:
        category_cell = row.get(mapping.category)
        if not _is_blank(category_cell):
            category_name = str(category_cell).strip()

    return NormalizedTransaction(
        date=txn_date,
        description=description,
        amount=amount.magnitude,
        kind=kind,
        fingerprint=compute_fingerprint(txn_date, amount.magnitude, description),
        category_name=category_name,
    )


def normalize_rows(
    rows: Iterable[Mapping[str, Cell]], mapping: ColumnMapping
) -> list[NormalizedTransaction]:
    """Normalize rows in order, dropping the ones that cannot be used."""
    normalized = []
    for row in rows:
        transaction = normalize_row(row, mapping)
        if transaction is not None:
            normalized.append(transaction)
    return normalized
