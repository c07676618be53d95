"""
Analysis Logger - Best-Effort Google Sheets Logging
====================================================

Sends one JSON record per analysis to a Google Apps Script web app that
appends it to a spreadsheet.

Logging is secondary: send() never raises, and a failed delivery is only
written to the application log. It never reaches the end user.

USAGE:
    analysis_logger = build_analysis_logger(get_settings().sheets)
    outcome = analysis_logger.send(record)
"""

import asyncio
import logging
from abc import ABC, abstractmethod
from dataclasses import asdict, dataclass, field
from typing import Any, Dict, Optional

import requests

from ..config import SheetsSettings

logger = logging.getLogger(__name__)


@dataclass
class LogRecord:
    """One analysis, as written to the spreadsheet."""
    timestamp: str
    review: str
    sentiment: str
    confidence: str
    normalized_score: float
    action_taken: str
    meta: Dict[str, Any] = field(default_factory=dict)

    def to_payload(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class LogOutcome:
    """Result of a delivery attempt."""
    success: bool
    error: str = ""


class AnalysisLogger(ABC):
    """
    Abstract base class for analysis log destinations.
    Implement this interface to add new logging backends.
    """

    @abstractmethod
    def send(self, record: LogRecord) -> LogOutcome:
        """Deliver one record. Must not raise."""
        ...

    async def log(self, record: LogRecord) -> LogOutcome:
        """Deliver one record on a worker thread."""
        return await asyncio.to_thread(self.send, record)


class SheetsWebhookLogger(AnalysisLogger):
    """POST records as JSON to a Google Apps Script web app."""

    def __init__(self, webhook_url: str, timeout: int = 10, session: Optional[requests.Session] = None):
        self._webhook_url = webhook_url
        self._timeout = timeout
        self._http = session or requests

    def send(self, record: LogRecord) -> LogOutcome:
        logger.debug(f"Logging analysis to Google Sheets: {record.action_taken}")

        try:
            response = self._http.post(
                self._webhook_url,
                json=record.to_payload(),
                headers={"Content-Type": "application/json"},
                timeout=self._timeout,
            )
            response.raise_for_status()

        except requests.Timeout:
            logger.warning("Google Sheets logging timed out")
            return LogOutcome(success=False, error="timeout")

        except requests.RequestException as e:
            logger.warning(f"Failed to log to Google Sheets: {e}")
            return LogOutcome(success=False, error=str(e))

        logger.info("Data successfully logged to Google Sheets")
        return LogOutcome(success=True)


class NullAnalysisLogger(AnalysisLogger):
    """Used when no webhook is configured. Records are dropped."""

    def send(self, record: LogRecord) -> LogOutcome:
        logger.debug(f"Sheets logging disabled, dropping record for {record.action_taken}")
        return LogOutcome(success=True)


def build_analysis_logger(settings: SheetsSettings) -> AnalysisLogger:
    """Pick the webhook logger when a real URL is configured."""
    if not settings.is_configured:
        logger.warning("GOOGLE_SCRIPT_URL not set. Google Sheets logging is disabled.")
        return NullAnalysisLogger()
    return SheetsWebhookLogger(settings.webhook_url, timeout=settings.timeout_seconds)
