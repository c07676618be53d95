"""
Settings Module - Centralized Configuration Management
=======================================================

ARCHITECTURAL DECISION:
- All configuration is loaded from environment variables (no hardcoded secrets)
- Settings are immutable dataclass for safety and clarity
- Single source of truth for all configurable values

EXTENSIBILITY:
- To try another Hugging Face model: set SENTIMENT_MODEL
- To log somewhere else: point GOOGLE_SCRIPT_URL at another JSON webhook
"""

import os
from dataclasses import dataclass, field
from pathlib import Path
from functools import lru_cache

from dotenv import load_dotenv

# Load .env file if present (development convenience)
load_dotenv()

PLACEHOLDER_SCRIPT_URL = "https://script.google.com/macros/s/YOUR_SCRIPT_ID/exec"


def _env_bool(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


@dataclass(frozen=True)
class ClassifierSettings:
    """Hugging Face pipeline settings for sentiment analysis."""

    task: str = field(default_factory=lambda: os.getenv("SENTIMENT_TASK", "text-classification"))
    model: str = field(
        default_factory=lambda: os.getenv(
            "SENTIMENT_MODEL",
            "distilbert-base-uncased-finetuned-sst-2-english"
        )
    )

    # -1 = CPU
    device: int = field(default_factory=lambda: int(os.getenv("SENTIMENT_DEVICE", "-1")))
    max_length: int = 512

    # Keyword classifier steps in when the model cannot be loaded
    heuristic_fallback: bool = field(
        default_factory=lambda: _env_bool("SENTIMENT_HEURISTIC_FALLBACK", True)
    )


@dataclass(frozen=True)
class ReviewSourceSettings:
    """Where reviews come from."""

    reviews_file: Path = field(
        default_factory=lambda: Path(os.getenv("REVIEWS_FILE", "reviews_test.tsv"))
    )
    text_column: str = field(default_factory=lambda: os.getenv("REVIEWS_TEXT_COLUMN", "text"))


@dataclass(frozen=True)
class SheetsSettings:
    """Google Sheets (Apps Script web app) logging settings."""

    webhook_url: str = field(
        default_factory=lambda: os.getenv("GOOGLE_SCRIPT_URL", PLACEHOLDER_SCRIPT_URL)
    )
    timeout_seconds: int = field(default_factory=lambda: int(os.getenv("SHEETS_TIMEOUT", "10")))

    # Long reviews are cut before they are sent
    review_excerpt_length: int = field(
        default_factory=lambda: int(os.getenv("REVIEW_EXCERPT_LENGTH", "500"))
    )

    @property
    def is_configured(self) -> bool:
        return bool(self.webhook_url) and "YOUR_SCRIPT_ID" not in self.webhook_url


@dataclass(frozen=True)
class WebSettings:
    """Dashboard server settings."""

    host: str = field(default_factory=lambda: os.getenv("HOST", "127.0.0.1"))
    port: int = field(default_factory=lambda: int(os.getenv("PORT", "8000")))


@dataclass(frozen=True)
class Settings:
    """
    Root settings container - Single source of truth for all configuration.

    Usage:
        from review_pulse.infrastructure.config import get_settings
        settings = get_settings()
        print(settings.classifier.model)
    """

    # Sub-settings groups
    classifier: ClassifierSettings = field(default_factory=ClassifierSettings)
    reviews: ReviewSourceSettings = field(default_factory=ReviewSourceSettings)
    sheets: SheetsSettings = field(default_factory=SheetsSettings)
    web: WebSettings = field(default_factory=WebSettings)

    def validate(self) -> list[str]:
        """
        Validate settings and return list of warnings/errors.
        Returns empty list if all settings are valid.
        """
        issues = []

        if not self.sheets.is_configured:
            issues.append(
                "WARNING: GOOGLE_SCRIPT_URL not set. "
                "Analysis results will not be logged to Google Sheets."
            )

        if not self.reviews.reviews_file.exists():
            issues.append(
                f"WARNING: Reviews file not found: {self.reviews.reviews_file}. "
                "Built-in sample reviews will be used."
            )

        if self.sheets.review_excerpt_length <= 0:
            issues.append("WARNING: REVIEW_EXCERPT_LENGTH must be positive.")

        return issues


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """
    Get singleton Settings instance.
    Cached to ensure consistent settings throughout application lifecycle.
    """
    return Settings()
