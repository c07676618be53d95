# Application Layer
# =================
# Use cases and orchestration (no business rules).

from .analysis_service import (
    AnalysisError,
    AnalysisInProgressError,
    AnalysisOutcome,
    AnalysisUnavailableError,
    AppState,
    ReviewAnalyzer,
    build_default_analyzer,
)

__all__ = [
    "AnalysisError",
    "AnalysisInProgressError",
    "AnalysisOutcome",
    "AnalysisUnavailableError",
    "AppState",
    "ReviewAnalyzer",
    "build_default_analyzer",
]
