"""Content fingerprints used to recognise previously imported transactions."""

import hashlib
from datetime import date
from decimal import Decimal


def fingerprint_key(txn_date: date, amount: Decimal, description: str) -> str:
    """Return the canonical text that a fingerprint hashes."""
    return f"{txn_date.isoformat()}|{amount:.2f}|{description.strip().lower()}"


def compute_fingerprint(txn_date: date, amount: Decimal, description: str) -> str:
    """Return the SHA-256 hex digest identifying a transaction's content.

    Two rows with the same date, amount and description (ignoring case and
    surrounding whitespace) always produce the same fingerprint.
    """
    key = fingerprint_key(txn_date, amount, description)
    return hashlib.sha256(key.encode("utf-8")).hexdigest()
