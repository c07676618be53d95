# Domain Layer
# ============
# Pure business rules. Nothing here imports from infrastructure or web.

from .decision_engine import (
    ActionCode,
    BusinessDecision,
    ClassificationResult,
    decide,
    decide_for,
    normalize,
)

__all__ = [
    "ActionCode",
    "BusinessDecision",
    "ClassificationResult",
    "decide",
    "decide_for",
    "normalize",
]
