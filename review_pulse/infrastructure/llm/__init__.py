from .sentiment_service import (
    HeuristicClassifier,
    SentimentClassifier,
    SentimentServiceError,
    TransformersClassifier,
    parse_predictions,
)

__all__ = [
    "HeuristicClassifier",
    "SentimentClassifier",
    "SentimentServiceError",
    "TransformersClassifier",
    "parse_predictions",
]
