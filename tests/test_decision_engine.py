import math

import pytest

from review_pulse.domain import ActionCode, ClassificationResult, decide, decide_for, normalize


@pytest.mark.parametrize("score", [0.0, 0.12, 0.4, 0.5, 0.73, 1.0])
def test_normalize_positive_and_negative(score):
    assert normalize("POSITIVE", score) == score
    assert math.isclose(normalize("NEGATIVE", score), 1 - score)


@pytest.mark.parametrize("label", ["NEUTRAL", "positive", "Negative", "LABEL_1", "", None])
@pytest.mark.parametrize("score", [0.0, 0.3, 1.0])
def test_normalize_other_labels_are_neutral(label, score):
    assert normalize(label, score) == 0.5


@pytest.mark.parametrize("score", [-0.01, 1.01, float("nan"), "0.9", None, True])
def test_normalize_rejects_out_of_domain_scores(score):
    with pytest.raises(ValueError):
        normalize("POSITIVE", score)


@pytest.mark.parametrize(
    "score, expected",
    [
        (0.0, ActionCode.OFFER_COUPON),
        (0.4, ActionCode.OFFER_COUPON),
        (0.41, ActionCode.REQUEST_FEEDBACK),
        (0.5, ActionCode.REQUEST_FEEDBACK),
        (0.69, ActionCode.REQUEST_FEEDBACK),
        (0.7, ActionCode.ASK_REFERRAL),
        (1.0, ActionCode.ASK_REFERRAL),
    ],
)
def test_decide_thresholds(score, expected):
    assert decide(score).action_code == expected


def test_decide_boundaries_are_exact():
    assert decide(0.4).action_code == ActionCode.OFFER_COUPON
    assert decide(math.nextafter(0.4, 1.0)).action_code == ActionCode.REQUEST_FEEDBACK
    assert decide(math.nextafter(0.7, 0.0)).action_code == ActionCode.REQUEST_FEEDBACK
    assert decide(0.7).action_code == ActionCode.ASK_REFERRAL


@pytest.mark.parametrize("score", [-0.1, 1.5, float("nan")])
def test_decide_rejects_out_of_range(score):
    with pytest.raises(ValueError):
        decide(score)


@pytest.mark.parametrize(
    "label, score, normalized, expected",
    [
        ("POSITIVE", 0.9, 0.9, ActionCode.ASK_REFERRAL),
        ("NEGATIVE", 0.9, 0.1, ActionCode.OFFER_COUPON),
        ("NEGATIVE", 0.5, 0.5, ActionCode.REQUEST_FEEDBACK),
        ("NEUTRAL", 0.99, 0.5, ActionCode.REQUEST_FEEDBACK),
    ],
)
def test_decide_for_composed_examples(label, score, normalized, expected):
    assert math.isclose(normalize(label, score), normalized)
    assert decide_for(label, score).action_code == expected


def test_decide_for_is_repeatable():
    first = decide_for("POSITIVE", 0.55)
    second = decide_for("POSITIVE", 0.55)
    assert first == second


def test_each_action_carries_display_constants():
    decisions = [decide(0.1), decide(0.5), decide(0.9)]
    assert [d.action_code for d in decisions] == list(ActionCode)
    for decision in decisions:
        assert decision.message
        assert decision.accent_color.startswith("#")
        assert decision.icon.startswith("fa-")
        assert decision.button_label


def test_classification_result_validates_score():
    assert ClassificationResult("POSITIVE", 0.5).score == 0.5
    with pytest.raises(ValueError):
        ClassificationResult("POSITIVE", 1.2)
