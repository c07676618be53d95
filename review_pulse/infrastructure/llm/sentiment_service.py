"""
Sentiment Service - Pre-trained Model Sentiment Classification
===============================================================

ARCHITECTURAL DECISION:
- Uses a Hugging Face `transformers` text-classification pipeline
  (DistilBERT fine-tuned on SST-2 by default)
- Falls back to keyword heuristics if the model cannot be loaded
- Raw pipeline output is validated before anything else sees it
- No business logic - just classification

WHY A LOCAL PIPELINE:
- No API key needed
- Model is downloaded once and cached by `transformers`
- Deterministic output for the same text

EXTENSIBILITY:
- To use a different model: set SENTIMENT_MODEL
- To use a hosted API: add another SentimentClassifier subclass
"""

import asyncio
import logging
import re
from abc import ABC, abstractmethod
from typing import Any, List, Optional

from pydantic import BaseModel, Field, ValidationError, field_validator

from ...domain import ClassificationResult
from ..config import ClassifierSettings, get_settings

logger = logging.getLogger(__name__)

WORD_PATTERN = re.compile(r"[a-z']+")


class SentimentServiceError(Exception):
    """Base exception for sentiment service errors."""
    pass


class Prediction(BaseModel):
    """Shape of one pipeline prediction: {"label": "POSITIVE", "score": 0.99}."""
    label: str
    score: float = Field(ge=0.0, le=1.0)

    @field_validator("label")
    @classmethod
    def _clean_label(cls, value: str) -> str:
        cleaned = value.strip().upper()
        if not cleaned:
            raise ValueError("label must not be empty")
        return cleaned


def parse_predictions(raw: Any) -> List[ClassificationResult]:
    """
    Validate raw classifier output.

    Accepts a single dict, a list of dicts, or a nested list (what the
    pipeline returns with top_k). Order is preserved; the first entry is the
    prediction callers use.

    Raises:
        SentimentServiceError: output is empty or malformed.
    """
    if isinstance(raw, dict):
        raw = [raw]

    if not isinstance(raw, (list, tuple)) or not raw:
        raise SentimentServiceError(f"Classifier returned no predictions: {raw!r}")

    # [[{...}, {...}]] for a single input with top_k
    if isinstance(raw[0], (list, tuple)):
        raw = raw[0]
        if not raw:
            raise SentimentServiceError("Classifier returned an empty prediction list")

    try:
        predictions = [Prediction.model_validate(item) for item in raw]
    except ValidationError as e:
        raise SentimentServiceError(f"Malformed classifier output: {e}") from e

    return [ClassificationResult(label=p.label, score=p.score) for p in predictions]


class SentimentClassifier(ABC):
    """
    Abstract base class for sentiment classifiers.
    Implement this interface to add new classification backends.
    """

    name: str = "classifier"

    @abstractmethod
    async def load(self) -> None:
        """Prepare the classifier. Raises SentimentServiceError on failure."""
        ...

    @abstractmethod
    async def classify(self, text: str) -> List[ClassificationResult]:
        """Return ranked (label, score) predictions, never empty."""
        ...


class TransformersClassifier(SentimentClassifier):
    """
    Sentiment classification with a `transformers` pipeline.

    USAGE:
        classifier = TransformersClassifier()
        await classifier.load()
        results = await classifier.classify("I loved the service!")
        print(results[0])  # ClassificationResult(label='POSITIVE', score=0.99...)
    """

    def __init__(self, settings: Optional[ClassifierSettings] = None, pipeline_factory=None):
        settings = settings or get_settings().classifier
        self._task = settings.task
        self._model = settings.model
        self._device = settings.device
        self._max_length = settings.max_length
        self._pipeline_factory = pipeline_factory
        self._pipeline = None
        self.name = self._model

    @property
    def is_loaded(self) -> bool:
        return self._pipeline is not None

    async def load(self) -> None:
        """Download (first run) and initialize the pipeline on a worker thread."""
        if self._pipeline is not None:
            return

        logger.info(f"Downloading sentiment analysis model {self._model}... (this may take a moment)")
        try:
            self._pipeline = await asyncio.to_thread(self._build_pipeline)
        except Exception as e:
            raise SentimentServiceError(f"Failed to load sentiment model {self._model}: {e}") from e

        logger.info("Sentiment analysis model loaded successfully")

    def _build_pipeline(self):
        factory = self._pipeline_factory
        if factory is None:
            from transformers import pipeline
            factory = pipeline
        return factory(self._task, model=self._model, device=self._device)

    async def classify(self, text: str) -> List[ClassificationResult]:
        """
        Classify sentiment of text.

        Args:
            text: Review text.

        Returns:
            Validated predictions, best first.
        """
        if self._pipeline is None:
            raise SentimentServiceError("Sentiment model is not loaded")

        try:
            raw = await asyncio.to_thread(
                self._pipeline, text, truncation=True, max_length=self._max_length
            )
        except Exception as e:
            raise SentimentServiceError(f"Sentiment inference failed: {e}") from e

        results = parse_predictions(raw)
        logger.debug(f"Model classified as: {results[0].label} ({results[0].score:.3f})")
        return results


class HeuristicClassifier(SentimentClassifier):
    """
    Fallback classification using keyword matching.

    Simple but effective for obvious cases. Keywords are word stems: each
    word counts at most once, so "love" and "loved" weigh the same.
    Confidence is the smoothed share of matching words:
    (majority + 1) / (total + 2).
    """

    name = "keyword-heuristic"

    POSITIVE_KEYWORDS = [
        "great", "good", "love", "excellent", "awesome",
        "amazing", "happy", "satisf", "wonderful", "fantastic",
        "perfect", "best", "thank", "appreciat", "recommend"
    ]

    NEGATIVE_KEYWORDS = [
        "bad", "terrible", "disappoint", "poor",
        "hate", "unhappy", "problem", "issue", "worst", "awful",
        "horrible", "never", "waste", "refund", "angry", "upset", "broke"
    ]

    async def load(self) -> None:
        logger.info("Using keyword heuristics for sentiment analysis")

    async def classify(self, text: str) -> List[ClassificationResult]:
        return [self.classify_text(text)]

    def classify_text(self, text: str) -> ClassificationResult:
        words = WORD_PATTERN.findall((text or "").lower())

        positives = sum(1 for word in words if word.startswith(tuple(self.POSITIVE_KEYWORDS)))
        negatives = sum(1 for word in words if word.startswith(tuple(self.NEGATIVE_KEYWORDS)))
        total = positives + negatives

        if positives > negatives:
            logger.debug("Heuristic: POSITIVE (keywords found)")
            return ClassificationResult("POSITIVE", (positives + 1) / (total + 2))

        if negatives > positives:
            logger.debug("Heuristic: NEGATIVE (keywords found)")
            return ClassificationResult("NEGATIVE", (negatives + 1) / (total + 2))

        logger.debug("Heuristic: NEUTRAL (mixed or no keywords)")
        return ClassificationResult("NEUTRAL", 0.5)
