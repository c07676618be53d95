"""
Analysis Service - Review Analysis Orchestration
=================================================

Owns the application state (reviews, classifier readiness, busy flag) and
wires the collaborators together:

    ReviewSet --pick--> SentimentClassifier --first prediction--> decide_for()
                                                                     |
                                              AnalysisLogger <-- LogRecord

No business rules live here; the action choice is the Decision Engine's.
"""

import asyncio
import logging
import random
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Set

from ..domain import BusinessDecision, ClassificationResult, decide_for, normalize
from ..infrastructure.config import Settings, get_settings
from ..infrastructure.importer import ReviewSet, load_reviews
from ..infrastructure.llm import (
    HeuristicClassifier,
    SentimentClassifier,
    SentimentServiceError,
    TransformersClassifier,
)
from ..infrastructure.sheets import AnalysisLogger, LogRecord, build_analysis_logger

logger = logging.getLogger(__name__)


class AnalysisError(Exception):
    """Base exception for analysis requests that cannot run."""
    pass


class AnalysisUnavailableError(AnalysisError):
    """Reviews or model are not ready yet."""
    pass


class AnalysisInProgressError(AnalysisError):
    """Another analysis is still running."""
    pass


@dataclass
class AppState:
    """Everything the dashboard needs to know between requests."""
    reviews: List[str] = field(default_factory=list)
    review_source: str = ""
    reviews_loaded: bool = False
    model_ready: bool = False
    busy: bool = False
    classifier_name: str = ""
    last_error: str = ""

    @property
    def ready(self) -> bool:
        return self.reviews_loaded and self.model_ready

    @property
    def can_analyze(self) -> bool:
        return self.ready and not self.busy

    @property
    def status_message(self) -> str:
        if self.busy:
            return "Analyzing sentiment..."
        if self.ready:
            return f'Model ready! Loaded {len(self.reviews)} reviews. Click "Analyze Random Review" to start.'
        if self.last_error:
            return self.last_error
        if self.reviews_loaded:
            return f"Loaded {len(self.reviews)} reviews. Model is loading..."
        return "Loading reviews data..."


@dataclass(frozen=True)
class AnalysisOutcome:
    """Result of one analysis request."""
    review: str
    classification: ClassificationResult
    normalized_score: float
    decision: BusinessDecision

    @property
    def confidence_percent(self) -> str:
        return f"{self.classification.score * 100:.1f}"


class ReviewAnalyzer:
    """
    Composition root for the analysis flow.

    Usage:
        analyzer = build_default_analyzer()
        await analyzer.initialize()
        outcome = await analyzer.analyze()
        analyzer.dispatch_log(analyzer.build_log_record(outcome))
    """

    def __init__(
        self,
        settings: Settings,
        classifier: SentimentClassifier,
        analysis_logger: AnalysisLogger,
        fallback_classifier: Optional[SentimentClassifier] = None,
        rng: Optional[random.Random] = None,
    ):
        self.settings = settings
        self.classifier = classifier
        self.analysis_logger = analysis_logger
        self.fallback_classifier = fallback_classifier
        self.state = AppState()
        self._rng = rng or random.Random()
        self._pending_logs: Set[asyncio.Task] = set()

    # ── Startup ────────────────────────────────────────────────────

    async def initialize(self) -> AppState:
        """Load reviews and the model concurrently; both finish before analysis is allowed."""
        logger.info("Initializing review analyzer...")
        await asyncio.gather(self._load_reviews(), self._load_model())

        if self.state.ready:
            logger.info(self.state.status_message)
        else:
            logger.error(f"Initialization incomplete: {self.state.last_error}")
        return self.state

    async def _load_reviews(self) -> None:
        logger.info("Loading reviews data...")
        review_set = await asyncio.to_thread(
            load_reviews,
            self.settings.reviews.reviews_file,
            self.settings.reviews.text_column,
        )
        self._apply_reviews(review_set)

    async def _load_model(self) -> None:
        try:
            await self.classifier.load()
        except SentimentServiceError as e:
            if self.fallback_classifier is None:
                self.state.last_error = f"Failed to load sentiment model: {e}"
                logger.error(self.state.last_error)
                return

            logger.warning(f"{e}. Falling back to {self.fallback_classifier.name}.")
            self.classifier = self.fallback_classifier
            await self.classifier.load()

        self.state.classifier_name = self.classifier.name
        self.state.model_ready = True

    def _apply_reviews(self, review_set: ReviewSet) -> None:
        self.state.reviews = list(review_set.reviews)
        self.state.review_source = review_set.source
        self.state.reviews_loaded = bool(review_set.reviews)
        logger.info(f"Loaded {len(review_set)} reviews from {review_set.source}")

    def replace_reviews(self, reviews: List[str], source: str) -> None:
        """Swap in a freshly imported review list."""
        if not reviews:
            raise ValueError("Cannot replace reviews with an empty list")
        self._apply_reviews(ReviewSet(reviews=list(reviews), source=source))

    # ── Analysis ───────────────────────────────────────────────────

    def pick_review(self) -> str:
        """Pick a random review from those loaded."""
        if not self.state.reviews:
            raise AnalysisUnavailableError("No reviews available for analysis.")
        return self._rng.choice(self.state.reviews)

    async def analyze(self, text: Optional[str] = None) -> AnalysisOutcome:
        """
        Classify one review and choose the business action.

        Args:
            text: Review to analyze. A random loaded review when omitted.

        Raises:
            AnalysisUnavailableError: reviews or model are not ready.
            AnalysisInProgressError: another analysis is running.
            SentimentServiceError: the classifier failed on this review.
        """
        if not self.state.model_ready:
            raise AnalysisUnavailableError("Sentiment model is not ready yet. Please wait.")
        if text is None and not self.state.reviews_loaded:
            raise AnalysisUnavailableError("No reviews available for analysis.")
        if self.state.busy:
            raise AnalysisInProgressError("An analysis is already running. Please wait.")

        self.state.busy = True
        try:
            review = text.strip() if text is not None else self.pick_review()
            if not review:
                raise ValueError("Review text must not be empty")

            logger.info("Analyzing sentiment...")
            predictions = await self.classifier.classify(review)
            top = predictions[0]

            outcome = AnalysisOutcome(
                review=review,
                classification=top,
                normalized_score=normalize(top.label, top.score),
                decision=decide_for(top.label, top.score),
            )
            logger.info(
                f"Analysis complete: {top.label} ({outcome.confidence_percent}%) "
                f"-> {outcome.decision.action_code.value}"
            )
            return outcome
        finally:
            self.state.busy = False

    # ── Logging ────────────────────────────────────────────────────

    def build_log_record(self, outcome: AnalysisOutcome, client_meta: Optional[Dict[str, Any]] = None) -> LogRecord:
        """Assemble the spreadsheet row for one analysis."""
        now = datetime.now(timezone.utc)
        meta = {
            "timezone": datetime.now().astimezone().tzname(),
            "timestamp": now.isoformat(),
            "reviewsCount": len(self.state.reviews),
            "modelReady": self.state.model_ready,
            "classifier": self.state.classifier_name,
        }
        meta.update(client_meta or {})

        excerpt_length = self.settings.sheets.review_excerpt_length
        return LogRecord(
            timestamp=now.isoformat(),
            review=outcome.review[:excerpt_length],
            sentiment=outcome.classification.label,
            confidence=outcome.confidence_percent,
            normalized_score=round(outcome.normalized_score, 4),
            action_taken=outcome.decision.action_code.value,
            meta=meta,
        )

    def dispatch_log(self, record: LogRecord) -> asyncio.Task:
        """Fire-and-forget delivery. Must be called from a running event loop."""
        task = asyncio.get_running_loop().create_task(self.analysis_logger.log(record))
        self._pending_logs.add(task)
        task.add_done_callback(self._pending_logs.discard)
        return task

    async def drain_logs(self) -> None:
        """Wait for dispatched log deliveries (used before shutdown)."""
        if self._pending_logs:
            await asyncio.gather(*self._pending_logs, return_exceptions=True)


def build_default_analyzer(settings: Optional[Settings] = None) -> ReviewAnalyzer:
    """Wire the production collaborators from settings."""
    settings = settings or get_settings()

    for issue in settings.validate():
        logger.warning(issue)

    fallback = HeuristicClassifier() if settings.classifier.heuristic_fallback else None
    return ReviewAnalyzer(
        settings=settings,
        classifier=TransformersClassifier(settings.classifier),
        analysis_logger=build_analysis_logger(settings.sheets),
        fallback_classifier=fallback,
    )
