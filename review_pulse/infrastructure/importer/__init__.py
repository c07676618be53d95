from .review_loader import (
    FALLBACK_REVIEWS,
    SUPPORTED_EXTENSIONS,
    ReviewLoader,
    ReviewSet,
    load_reviews,
)

__all__ = [
    "FALLBACK_REVIEWS",
    "SUPPORTED_EXTENSIONS",
    "ReviewLoader",
    "ReviewSet",
    "load_reviews",
]
