"""Partitioning of a normalized batch into new and already-imported rows."""

from typing import Sequence

from finport.database.base import Database
from finport.domain.entities import DedupResult, NormalizedTransaction


class Deduplicator:
    """Read-only fingerprint check against an owner's stored transactions.

    The check is an optimisation; the store's (owner, fingerprint) unique
    constraint is what keeps concurrent imports from double-inserting.
    """

    def __init__(self, db: Database):
        self.db = db

    def partition(
        self, owner_id: str, transactions: Sequence[NormalizedTransaction]
    ) -> DedupResult:
        """Split ``transactions`` into new and duplicate rows, keeping order.

        A row is a duplicate when its fingerprint is already stored for the
        owner or appeared earlier in the same batch.
        """
        if not transactions:
            return DedupResult(new=(), duplicates=())

        existing = self.db.find_fingerprints(
            owner_id, [txn.fingerprint for txn in transactions]
        )
        seen = set(existing)
        new: list[NormalizedTransaction] = []
        duplicates: list[NormalizedTransaction] = []
        for txn in transactions:
            if txn.fingerprint in seen:
                duplicates.append(txn)
            else:
                seen.add(txn.fingerprint)
                new.append(txn)
        return DedupResult(new=tuple(new), duplicates=tuple(duplicates))
