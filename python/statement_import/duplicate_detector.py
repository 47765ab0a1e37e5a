"""
Duplicate Detector Module

Asks the repository whether a freshly built transaction already exists and
flags it. How "already exists" is decided belongs to the repository.
"""

import logging

from .models import Transaction
from .repository import TransactionRepository

logger = logging.getLogger(__name__)


class DuplicateDetector:
    """Flags transactions the repository already knows about."""

    def __init__(self, repository: TransactionRepository | None = None):
        self.repository = repository

    def check(self, transaction: Transaction) -> bool:
        """Look up potential duplicates and set ``is_duplicate``.

        Repository errors propagate to the caller.

        Args:
            transaction: Fully built transaction

        Returns:
            True when the repository returned any match
        """
        if self.repository is None:
            return False

        matches = self.repository.find_potential_duplicates(transaction)
        if matches:
            transaction.is_duplicate = True
            logger.debug(
                f"Transaction on {transaction.date} ({transaction.amount}) matches "
                f"{len(matches)} stored record(s)"
            )
        return transaction.is_duplicate
