"""
Decision Engine - Sentiment to Business Action
===============================================

ARCHITECTURAL DECISION:
- Pure functions only: no settings, no network, no module state
- Classifier output is first folded into a single "goodness" score in [0, 1]
- The goodness score picks exactly one of three follow-up actions

THRESHOLDS:
    score <= 0.4        -> OFFER_COUPON
    0.4 < score < 0.7   -> REQUEST_FEEDBACK
    score >= 0.7        -> ASK_REFERRAL
"""

import math
from dataclasses import dataclass
from enum import Enum
from typing import Optional

POSITIVE_LABEL = "POSITIVE"
NEGATIVE_LABEL = "NEGATIVE"
NEUTRAL_SCORE = 0.5

COUPON_MAX_SCORE = 0.4
REFERRAL_MIN_SCORE = 0.7


class ActionCode(Enum):
    """Business follow-up chosen for a review."""
    OFFER_COUPON = "OFFER_COUPON"
    REQUEST_FEEDBACK = "REQUEST_FEEDBACK"
    ASK_REFERRAL = "ASK_REFERRAL"


@dataclass(frozen=True)
class ClassificationResult:
    """One (label, score) pair as reported by the classifier."""
    label: str
    score: float

    def __post_init__(self):
        _check_unit_interval(self.score, "score")


@dataclass(frozen=True)
class BusinessDecision:
    """Action plus the display constants the dashboard renders for it."""
    action_code: ActionCode
    message: str
    accent_color: str
    icon: str
    button_label: str


# ── Presentation constants ─────────────────────────────────────────
COUPON_DECISION = BusinessDecision(
    action_code=ActionCode.OFFER_COUPON,
    message="We're sorry your experience fell short. Here is a 20% discount coupon for your next order.",
    accent_color="#f87171",
    icon="fa-ticket-alt",
    button_label="Claim Coupon",
)
FEEDBACK_DECISION = BusinessDecision(
    action_code=ActionCode.REQUEST_FEEDBACK,
    message="Thanks for sharing! Could you tell us what would make your next visit even better?",
    accent_color="#fbbf24",
    icon="fa-comment-dots",
    button_label="Share Feedback",
)
REFERRAL_DECISION = BusinessDecision(
    action_code=ActionCode.ASK_REFERRAL,
    message="We're thrilled you enjoyed it! Refer a friend and you both get a reward.",
    accent_color="#34d399",
    icon="fa-user-plus",
    button_label="Refer a Friend",
)


def _check_unit_interval(value: float, name: str) -> None:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValueError(f"{name} must be a number, got {value!r}")
    if math.isnan(value) or value < 0.0 or value > 1.0:
        raise ValueError(f"{name} must be within [0, 1], got {value!r}")


def normalize(label: Optional[str], score: float) -> float:
    """
    Fold a classifier (label, score) pair into a goodness score.

    Args:
        label: Classifier label. Only the exact strings "POSITIVE" and
            "NEGATIVE" carry signal; anything else is treated as neutral.
        score: Confidence reported for that same label.

    Returns:
        Goodness in [0, 1].

    Raises:
        ValueError: score is not a number in [0, 1].
    """
    _check_unit_interval(score, "score")

    if label == POSITIVE_LABEL:
        return float(score)
    if label == NEGATIVE_LABEL:
        return 1.0 - score
    return NEUTRAL_SCORE


def decide(normalized_score: float) -> BusinessDecision:
    """Pick the business action for a goodness score in [0, 1]."""
    _check_unit_interval(normalized_score, "normalized_score")

    if normalized_score <= COUPON_MAX_SCORE:
        return COUPON_DECISION
    if normalized_score < REFERRAL_MIN_SCORE:
        return FEEDBACK_DECISION
    return REFERRAL_DECISION


def decide_for(label: Optional[str], score: float) -> BusinessDecision:
    """Single entry point: decide(normalize(label, score))."""
    return decide(normalize(label, score))
