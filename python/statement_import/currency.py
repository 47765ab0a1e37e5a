"""
Currency Module

Currency registry, document-level currency detection and conversion of
amounts into a currency's smallest unit.
"""

import logging
import re
from dataclasses import dataclass, field
from decimal import ROUND_HALF_UP, Decimal

logger = logging.getLogger(__name__)


@dataclass
class CurrencyInfo:
    """A currency the importer knows how to recognise."""

    code: str
    symbol: str = ""
    name: str = ""
    fraction_digits: int = 2
    names: list[str] = field(default_factory=list)

    def __post_init__(self) -> None:
        self.code = self.code.upper()
        if not self.symbol:
            self.symbol = self.code
        if not self.name:
            self.name = self.code

    def to_dict(self) -> dict:
        return {
            "code": self.code,
            "symbol": self.symbol,
            "name": self.name,
            "fraction_digits": self.fraction_digits,
            "names": self.names,
        }


BUILTIN_CURRENCIES = [
    CurrencyInfo("UAH", "₴", "Ukrainian Hryvnia", 2,
                 ["UAH", "Hryvnia", "Гривна", "Гривень", "грн", "Ukrainian Hryvnia"]),
    CurrencyInfo("USD", "$", "US Dollar", 2, ["USD", "Dollar", "Dollars", "US Dollar"]),
    CurrencyInfo("EUR", "€", "Euro", 2, ["EUR", "Euro", "Euros"]),
    CurrencyInfo("GBP", "£", "British Pound", 2,
                 ["GBP", "Pound", "Pounds", "British Pound", "Sterling"]),
    CurrencyInfo("ILS", "₪", "Israeli New Shekel", 2,
                 ["ILS", "Shekel", "Shekels", "Israeli Shekel", "New Shekel"]),
]

# ISO 4217 codes that may be registered on sight -> minor-unit digits.
# Codes that double as English words (ALL, TOP, TRY, ...) are left out.
KNOWN_ISO_CODES = {
    "CHF": 2, "CAD": 2, "AUD": 2, "NZD": 2, "JPY": 0, "CNY": 2, "SEK": 2,
    "NOK": 2, "DKK": 2, "PLN": 2, "CZK": 2, "HUF": 2, "RON": 2, "BGN": 2,
    "MDL": 2, "GEL": 2, "KZT": 2, "AZN": 2, "BYN": 2, "RUB": 2, "INR": 2,
    "KRW": 0, "SGD": 2, "HKD": 2, "MXN": 2, "BRL": 2, "ZAR": 2, "AED": 2,
    "SAR": 2, "THB": 2, "BHD": 3, "KWD": 3, "OMR": 3, "JOD": 3,
    "VND": 0, "ISK": 0,
}
ISO_CODE_TOKEN = re.compile(r"(?<![A-Z])([A-Z]{3})(?![A-Z])")

# Ukrainian statements rarely spell out the currency
LOCALE_KEYWORDS = ["виписка", "картк", "приват", "mono", "ощад", "укр"]
LOCALE_CURRENCY = "UAH"


def _word_pattern(text: str, flags: int = re.IGNORECASE) -> re.Pattern:
    return re.compile(rf"(?<!\w){re.escape(text)}(?!\w)", flags)


def _word_start_pattern(text: str) -> re.Pattern:
    return re.compile(rf"(?<!\w){re.escape(text)}", re.IGNORECASE)


class CurrencyRegistry:
    """Lookup table of supported currencies.

    Each importer gets its own instance so dynamic registrations in one
    import never leak into another.
    """

    def __init__(self, currencies: list[CurrencyInfo] | None = None):
        self._currencies: dict[str, CurrencyInfo] = {}
        for info in BUILTIN_CURRENCIES if currencies is None else currencies:
            self.add(CurrencyInfo(info.code, info.symbol, info.name,
                                  info.fraction_digits, list(info.names)))

    def add(self, currency: CurrencyInfo | str) -> CurrencyInfo:
        """Register a currency, by record or bare code.

        Bare codes get their minor-unit digits from the ISO table (2 when
        unknown). Re-adding a known code keeps the existing record.
        """
        if isinstance(currency, str):
            code = currency.upper()
            currency = CurrencyInfo(code, fraction_digits=KNOWN_ISO_CODES.get(code, 2),
                                    names=[code])
        if currency.code not in self._currencies:
            self._currencies[currency.code] = currency
        return self._currencies[currency.code]

    def add_many(self, records: list[dict]) -> None:
        """Register currencies from settings records (code, symbol, name, ...)."""
        for record in records:
            self.add(CurrencyInfo(
                code=record["code"],
                symbol=record.get("symbol", ""),
                name=record.get("name", ""),
                fraction_digits=int(record.get("fraction_digits", 2)),
                names=list(record.get("names", [])),
            ))

    def lookup(self, code: str) -> CurrencyInfo | None:
        return self._currencies.get((code or "").upper())

    def is_supported(self, code: str) -> bool:
        return self.lookup(code) is not None

    def fraction_digits(self, code: str) -> int:
        info = self.lookup(code)
        return info.fraction_digits if info else KNOWN_ISO_CODES.get((code or "").upper(), 2)

    @property
    def currencies(self) -> list[CurrencyInfo]:
        return list(self._currencies.values())

    def detect_from_text(self, text: str) -> str | None:
        """Find a registered currency in free text.

        Symbols are checked first, then upper-case codes and finally names;
        codes and names must stand as whole words.

        Args:
            text: Any text (document content, file name)

        Returns:
            Currency code or None
        """
        if not text:
            return None

        for info in self._currencies.values():
            if info.symbol != info.code and info.symbol in text:
                return info.code

        for info in self._currencies.values():
            if _word_pattern(info.code, flags=0).search(text):
                return info.code

        for info in self._currencies.values():
            if any(_word_pattern(name).search(text) for name in info.names if name):
                return info.code

        return None

    def scan(self, text: str) -> str | None:
        """Looser pass: codes in any case, names as word prefixes ("гривні")."""
        text = text or ""
        for info in self._currencies.values():
            if _word_pattern(info.code).search(text):
                return info.code
            if info.symbol != info.code and info.symbol in text:
                return info.code
            if any(_word_start_pattern(name[:-1]).search(text)
                   for name in info.names if len(name) > 3):
                return info.code
        return None


def find_iso_code(text: str) -> str | None:
    """First standalone upper-case ISO 4217 code from KNOWN_ISO_CODES in the text."""
    for match in ISO_CODE_TOKEN.finditer(text or ""):
        if match.group(1) in KNOWN_ISO_CODES:
            return match.group(1)
    return None


class CurrencyDetector:
    """Works out the one currency a statement is written in."""

    def __init__(self, registry: CurrencyRegistry, default_currency: str = "UAH"):
        self.registry = registry
        self.default_currency = default_currency

    def _from_text(self, text: str) -> str | None:
        code = self.registry.detect_from_text(text) or find_iso_code(text)
        if code and not self.registry.is_supported(code):
            logger.warning(f"Registering newly seen currency {code}")
            self.registry.add(code)
        return code

    def detect(self, content: str, file_name: str = "") -> str:
        """Detect the document currency.

        Order: document text, file name, loose registry scan, locale
        keywords, then the configured default.

        Args:
            content: All cell text of the document joined together
            file_name: Original file name

        Returns:
            Currency code
        """
        code = self._from_text(content)
        if code:
            return code

        code = self._from_text(re.sub(r"[_\-.]", " ", file_name or ""))
        if code:
            return code

        code = self.registry.scan(content)
        if code:
            return code

        content_lower = (content or "").lower()
        if any(keyword in content_lower for keyword in LOCALE_KEYWORDS):
            return LOCALE_CURRENCY

        return self.default_currency


def to_smallest_unit(amount: Decimal | float | int, currency: str,
                     registry: CurrencyRegistry | None = None) -> int:
    """Convert an amount to an integer count of the currency's minor unit.

    Args:
        amount: Amount in major units (e.g. Decimal("123.45"))
        currency: Currency code
        registry: Registry giving the currency's fraction digits

    Returns:
        Minor-unit integer, rounded half-up (12345 for 123.45 USD)
    """
    if registry is not None:
        digits = registry.fraction_digits(currency)
    else:
        digits = KNOWN_ISO_CODES.get(currency.upper(), 2)

    scaled = Decimal(str(amount)) * (Decimal(10) ** digits)
    return int(scaled.quantize(Decimal(1), rounding=ROUND_HALF_UP))
