from .sheets_logger import (
    AnalysisLogger,
    LogOutcome,
    LogRecord,
    NullAnalysisLogger,
    SheetsWebhookLogger,
    build_analysis_logger,
)

__all__ = [
    "AnalysisLogger",
    "LogOutcome",
    "LogRecord",
    "NullAnalysisLogger",
    "SheetsWebhookLogger",
    "build_analysis_logger",
]
