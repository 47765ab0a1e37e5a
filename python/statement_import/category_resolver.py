"""
Category Resolver Module

Guesses a spending category from description and comment text when the
statement has no category column of its own.
"""

import logging
import re

logger = logging.getLogger(__name__)

DEFAULT_CATEGORY = "Other"

# category -> regexes over lower-cased "description comment" text
CATEGORY_PATTERNS: dict[str, list[str]] = {
    "Food & Dining": [
        r"\bcafe", r"\bcoffee", r"\brestaurant", r"\bpizza", r"\bburger", r"\bfood\b",
        r"\bdining\b", r"starbucks", r"mcdonald", r"\bkfc\b", r"\bsubway\b",
        r"\bgrocer", r"supermarket", r"кафе", r"ресторан", r"їжа", r"продукти",
    ],
    "Transportation": [
        r"\buber\b", r"\btaxi\b", r"\bbus\b", r"\bmetro\b", r"\bparking\b", r"\bfuel\b",
        r"\bgas station\b", r"\bpetrol\b", r"\btransport", r"\brailway", r"\bairport",
        r"автобус", r"таксі", r"паливо",
    ],
    "Shopping": [
        r"amazon", r"\bshop", r"\bstore\b", r"\bretail", r"\bmall\b", r"\bmarket\b",
        r"\bpurchase", r"магазин", r"покупка", r"торгов",
    ],
    "Bills & Utilities": [
        r"\belectric", r"\bgas bill\b", r"\bwater\b", r"\binternet\b", r"\bphone\b",
        r"\butilit", r"\bbill\b", r"телефон", r"інтернет", r"комунальн",
    ],
    "Healthcare": [
        r"pharmacy", r"hospital", r"\bdoctor", r"\bmedical", r"\bhealth", r"\bclinic",
        r"аптека", r"лікар", r"медицин",
    ],
    "Entertainment": [
        r"\bcinema", r"\bmovie", r"netflix", r"spotify", r"\bgame", r"entertainment",
        r"кіно", r"розваги",
    ],
    "Income": [
        r"\bsalary", r"\bwage", r"\bpayment received\b", r"\btransfer from\b", r"\bdeposit",
        r"\brefund", r"зарплата", r"переказ", r"депозит",
    ],
}


class CategoryResolver:
    """Pattern-table category lookup."""

    def __init__(
        self,
        extra_patterns: dict[str, list[str]] | None = None,
        default_category: str = DEFAULT_CATEGORY,
    ):
        """Initialize the resolver.

        Args:
            extra_patterns: Additional regexes per category, merged after the built-in ones
            default_category: Category used for ties and unmatched text
        """
        self.default_category = default_category

        merged: dict[str, list[str]] = {name: list(p) for name, p in CATEGORY_PATTERNS.items()}
        for name, patterns in (extra_patterns or {}).items():
            merged.setdefault(name, []).extend(patterns)

        self._patterns: dict[str, list[re.Pattern]] = {
            name: [re.compile(p, re.IGNORECASE) for p in patterns]
            for name, patterns in merged.items()
        }

    @property
    def categories(self) -> list[str]:
        return [*self._patterns, self.default_category]

    def match_counts(self, text: str) -> dict[str, int]:
        """Number of matching patterns per category (only categories with hits)."""
        text = (text or "").lower()
        counts = {}
        for name, patterns in self._patterns.items():
            hits = sum(1 for pattern in patterns if pattern.search(text))
            if hits:
                counts[name] = hits
        return counts

    def resolve(self, description: str, comment: str | None = None) -> str:
        """Pick the category with the most matching patterns.

        Args:
            description: Cleaned description
            comment: Optional comment

        Returns:
            Category name; the default when nothing matches or the best count is tied
        """
        counts = self.match_counts(f"{description or ''} {comment or ''}")
        if not counts:
            return self.default_category

        best = max(counts.values())
        leaders = [name for name, hits in counts.items() if hits == best]
        if len(leaders) > 1:
            logger.debug(f"Category tie between {leaders}, using {self.default_category}")
            return self.default_category

        return leaders[0]
