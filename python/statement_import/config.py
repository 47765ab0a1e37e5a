"""
Import Settings Module

Loads statement-import settings from config/import_settings.yaml, falling
back to built-in defaults for anything the file does not set.
"""

import logging
from dataclasses import dataclass, field, fields
from pathlib import Path

import yaml

logger = logging.getLogger(__name__)

SETTINGS_FILE = "import_settings.yaml"


@dataclass
class ImportSettings:
    """Tunable knobs for the import pipeline."""

    default_currency: str = "UAH"
    default_category: str = "Other"
    default_card: str = "Imported"
    default_description: str = "Imported transaction"
    header_scan_rows: int = 20
    fallback_scan_rows: int = 15
    preview_sample_rows: int = 5
    date_window_past_years: int = 10
    date_window_future_years: int = 1
    max_reported_errors: int = 5
    infer_categories: bool = True
    duplicate_amount_tolerance: int = 1
    extra_currencies: list[dict] = field(default_factory=list)
    category_patterns: dict[str, list[str]] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: dict | None) -> "ImportSettings":
        """Build settings from a parsed YAML mapping, ignoring unknown keys.

        Args:
            data: Parsed settings mapping (may be None)

        Returns:
            ImportSettings instance
        """
        if not data:
            return cls()

        known = {f.name for f in fields(cls)}
        unknown = set(data) - known
        if unknown:
            logger.warning(f"Ignoring unknown import settings: {', '.join(sorted(unknown))}")

        return cls(**{k: v for k, v in data.items() if k in known and v is not None})


def default_config_dir() -> Path:
    """Repository-level config directory."""
    return Path(__file__).parent.parent.parent / "config"


def load_settings(config_dir: Path | str | None = None) -> ImportSettings:
    """Load import settings from the config directory.

    Args:
        config_dir: Path to configuration directory

    Returns:
        ImportSettings (defaults when the file is missing)
    """
    config_dir = Path(config_dir) if config_dir else default_config_dir()
    settings_file = config_dir / SETTINGS_FILE

    if not settings_file.exists():
        logger.info(f"Settings file not found, using defaults: {settings_file}")
        return ImportSettings()

    with open(settings_file, encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}

    if not isinstance(data, dict):
        raise ValueError(f"Invalid settings file {settings_file}: expected a mapping")

    return ImportSettings.from_dict(data.get("import", data))
