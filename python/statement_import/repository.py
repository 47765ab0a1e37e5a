"""
Transaction Repository Module

Storage boundary used for duplicate lookups and for saving reviewed
imports. The in-memory implementation backs tests and small scripts.
"""

import logging
from abc import ABC, abstractmethod

from .models import Transaction

logger = logging.getLogger(__name__)


class TransactionRepository(ABC):
    """Abstract transaction store."""

    @abstractmethod
    def find_potential_duplicates(self, candidate: Transaction) -> list[Transaction]:
        """Return stored transactions that look like the candidate."""
        pass

    @abstractmethod
    def create(self, transaction: Transaction) -> Transaction:
        """Persist a transaction. Returns the stored record."""
        pass


def description_similarity(s1: str, s2: str) -> float:
    """Jaccard index over lower-cased words.

    Args:
        s1: First description
        s2: Second description

    Returns:
        Similarity score between 0 and 1
    """
    if not s1 or not s2:
        return 0.0

    words1 = set(s1.lower().split())
    words2 = set(s2.lower().split())

    if not words1 or not words2:
        return 0.0

    intersection = len(words1 & words2)
    union = len(words1 | words2)

    return intersection / union if union > 0 else 0.0


class InMemoryTransactionRepository(TransactionRepository):
    """List-backed repository.

    A stored transaction is a potential duplicate of a candidate when both
    fall on the same calendar day in the same currency, their amounts differ
    by at most ``amount_tolerance`` minor units, and they share either the
    card or a near-identical description.
    """

    SIMILARITY_THRESHOLD = 0.8

    def __init__(self, transactions: list[Transaction] | None = None, amount_tolerance: int = 1):
        self._transactions: list[Transaction] = list(transactions or [])
        self.amount_tolerance = amount_tolerance

    def __len__(self) -> int:
        return len(self._transactions)

    def all(self) -> list[Transaction]:
        return list(self._transactions)

    def create(self, transaction: Transaction) -> Transaction:
        self._transactions.append(transaction)
        logger.debug(f"Stored transaction {transaction.id} ({transaction.date})")
        return transaction

    def find_potential_duplicates(self, candidate: Transaction) -> list[Transaction]:
        return [
            existing for existing in self._transactions
            if existing.id != candidate.id and self._matches(candidate, existing)
        ]

    def _matches(self, candidate: Transaction, existing: Transaction) -> bool:
        if existing.calendar_date != candidate.calendar_date:
            return False

        if existing.currency != candidate.currency:
            return False

        if abs(existing.amount - candidate.amount) > self.amount_tolerance:
            return False

        if existing.card == candidate.card:
            return True

        similarity = description_similarity(existing.description, candidate.description)
        return similarity >= self.SIMILARITY_THRESHOLD
