"""
Column Classifier Module

Scores header labels against per-field keyword tables and picks the most
likely column for each transaction field. New locales and banks are added
by editing the tables, not the code.
"""

import logging
import re

from .models import FIELD_NAMES, ColumnAnalysis

logger = logging.getLogger(__name__)

# field -> [(token, weight)]. Exact field names weigh 1.0, generic words less.
FIELD_KEYWORDS: dict[str, list[tuple[str, float]]] = {
    "date": [
        ("дата", 1.0), ("date", 1.0), ("datum", 1.0), ("fecha", 1.0), ("data", 0.9),
        ("posted", 0.6), ("posting", 0.6), ("час", 0.6), ("время", 0.6), ("time", 0.5),
        ("день", 0.5), ("day", 0.4), ("when", 0.4),
    ],
    "amount": [
        ("сума", 1.0), ("сумма", 1.0), ("amount", 1.0), ("betrag", 1.0),
        ("montant", 1.0), ("importe", 1.0), ("kwota", 1.0), ("sum", 0.8),
        ("value", 0.6), ("total", 0.6), ("ціна", 0.6), ("цена", 0.6), ("price", 0.6),
        ("дебет", 0.5), ("кредит", 0.5), ("debit", 0.5), ("credit", 0.5),
        ("баланс", 0.3), ("balance", 0.3),
    ],
    "description": [
        ("опис", 1.0), ("описание", 1.0), ("description", 1.0), ("beschreibung", 1.0),
        ("призначення", 0.9), ("назначение", 0.9), ("деталі", 0.8), ("детали", 0.8),
        ("details", 0.8), ("narrative", 0.8), ("memo", 0.7), ("merchant", 0.7),
        ("payee", 0.7), ("particulars", 0.7), ("назва", 0.5), ("название", 0.5),
        ("операці", 0.5), ("операци", 0.5), ("reference", 0.4), ("name", 0.4),
    ],
    "card": [
        ("картка", 1.0), ("карта", 1.0), ("card", 1.0), ("карт", 0.9),
        ("рахунок", 0.8), ("счет", 0.8), ("account", 0.8), ("konto", 0.8),
        ("cuenta", 0.8), ("iban", 0.6),
    ],
    "category": [
        ("категорія", 1.0), ("категория", 1.0), ("category", 1.0), ("kategorie", 1.0),
        ("categoría", 1.0), ("mcc", 0.7), ("група", 0.5), ("группа", 0.5),
        ("group", 0.5), ("тип", 0.5), ("type", 0.5),
    ],
    "comment": [
        ("коментар", 1.0), ("комментарий", 1.0), ("comment", 1.0), ("примітк", 0.9),
        ("примечан", 0.9), ("notes", 0.8), ("note", 0.8), ("remark", 0.8),
        ("заметк", 0.8), ("memo", 0.5),
    ],
}

# field -> [(pattern, boost)] for corroborating label shapes
FIELD_BOOSTS: dict[str, list[tuple[re.Pattern, float]]] = {
    "date": [
        (re.compile(r"\d{1,2}[./-]\d{1,2}[./-]\d{2,4}|\d{4}-\d{2}-\d{2}"), 0.3),
        (re.compile(r"dd|mm|yyyy|дд|мм|рррр|гггг"), 0.2),
    ],
    "amount": [
        (re.compile(r"[₴$€£₪]|\b(uah|usd|eur|gbp|ils|pln)\b|грн"), 0.2),
    ],
    "description": [
        (re.compile(r"merchant|торгов"), 0.1),
    ],
    "card": [
        (re.compile(r"\*{2,}\s*\d{2,4}|\d{4}\s*\*{2,}|\d{2,6}x{4,}\d{2,4}"), 0.6),
    ],
    "category": [
        (re.compile(r"\bmcc\b"), 0.2),
    ],
    "comment": [
        (re.compile(r"додатков|дополнительн|additional"), 0.1),
    ],
}

# field -> [(pattern, penalty)] for labels that belong to another field
FIELD_EXCLUSIONS: dict[str, list[tuple[re.Pattern, float]]] = {
    "date": [
        (re.compile(r"сума|сумма|amount|balance|баланс"), 0.6),
    ],
    "amount": [
        (re.compile(r"дата|date|опис|description"), 0.6),
        (re.compile(r"курс|rate|комісі|комисси|commission|fee|залишок|остаток"), 0.5),
    ],
    "description": [
        (re.compile(r"сума|сумма|amount|дата|date|баланс|balance|total"), 1.0),
        (re.compile(r"картк|карта|card|категор|category"), 1.0),
    ],
    "card": [
        (re.compile(r"сума|сумма|amount|дата|date"), 0.6),
    ],
    "category": [
        (re.compile(r"опис|description|сума|сумма|amount"), 0.6),
    ],
    "comment": [
        (re.compile(r"сума|сумма|amount|дата|date"), 1.0),
    ],
}

THRESHOLDS = {
    "date": 0.4,
    "amount": 0.4,
    "description": 0.3,
    "card": 0.4,
    "category": 0.4,
    "comment": 0.3,
}

# Substring search used when scoring found only one of date/amount
FALLBACK_KEYWORDS = {
    "date": ["date", "дата", "datum", "fecha", "data"],
    "amount": ["amount", "сума", "сумма", "balance", "betrag", "montant"],
    "description": ["description", "опис", "описание", "details", "narrative"],
}


def score(label: str, field_name: str) -> float:
    """Score how well a header label fits a transaction field.

    Args:
        label: Header cell text
        field_name: One of FIELD_NAMES

    Returns:
        Score in [0, 1]
    """
    text = (label or "").strip().lower()
    if not text:
        return 0.0

    base = 0.0
    for token, weight in FIELD_KEYWORDS.get(field_name, []):
        if text == token:
            base = max(base, weight)
        elif token in text:
            base = max(base, weight * 0.9)

    for pattern, boost in FIELD_BOOSTS.get(field_name, []):
        if pattern.search(text):
            base += boost

    for pattern, penalty in FIELD_EXCLUSIONS.get(field_name, []):
        if pattern.search(text):
            base -= penalty

    return round(min(max(base, 0.0), 1.0), 4)


class ColumnClassifier:
    """Assigns header columns to transaction fields."""

    def __init__(self, thresholds: dict[str, float] | None = None):
        self.thresholds = {**THRESHOLDS, **(thresholds or {})}

    def analyze(self, labels: list[str]) -> list[ColumnAnalysis]:
        """Score every label against every field."""
        analyses = []
        for index, label in enumerate(labels):
            analysis = ColumnAnalysis(index=index, raw_label=label)
            for field_name in FIELD_NAMES:
                setattr(analysis, f"{field_name}_score", score(label, field_name))
            analyses.append(analysis)
        return analyses

    def classify(self, labels: list[str]) -> dict[str, int | None]:
        """Pick a column index for each field.

        Fields are assigned in FIELD_NAMES order. For each one the unused
        column with the highest score wins if it clears the field's
        threshold; equal scores go to the leftmost column.

        Args:
            labels: Cleaned header labels

        Returns:
            Mapping of field name to column index (None when undetected)
        """
        analyses = self.analyze(labels)
        used: set[int] = set()
        assigned: dict[str, int | None] = {}

        for field_name in FIELD_NAMES:
            ranked = sorted(analyses, key=lambda a: a.score_for(field_name), reverse=True)
            assigned[field_name] = None
            for analysis in ranked:
                if analysis.index in used:
                    continue
                if analysis.score_for(field_name) > self.thresholds[field_name]:
                    assigned[field_name] = analysis.index
                    used.add(analysis.index)
                break

        logger.debug(f"Scored columns {labels}: {assigned}")
        return assigned

    def apply_fallbacks(
        self, labels: list[str], assigned: dict[str, int | None]
    ) -> dict[str, int | None]:
        """Fill a missing date/amount/description column by plain keyword search.

        Only used when scoring found at least one of date and amount.
        Description finally falls back to the first column nobody claimed.
        """
        result = dict(assigned)
        used = {index for index in result.values() if index is not None}

        for field_name in ("date", "amount", "description"):
            if result.get(field_name) is not None:
                continue
            index = self._find_by_keyword(labels, FALLBACK_KEYWORDS[field_name], used)
            if index is not None:
                logger.info(f"Keyword fallback mapped {field_name} to column '{labels[index]}'")
                result[field_name] = index
                used.add(index)

        if result.get("description") is None:
            for index, label in enumerate(labels):
                if index not in used and label:
                    result["description"] = index
                    break

        return result

    @staticmethod
    def _find_by_keyword(labels: list[str], keywords: list[str], used: set[int]) -> int | None:
        for index, label in enumerate(labels):
            if index in used:
                continue
            lower = label.lower()
            if any(keyword in lower for keyword in keywords):
                return index
        return None
