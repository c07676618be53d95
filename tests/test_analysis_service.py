import asyncio
import threading

import pytest

from conftest import FakeClassifier
from review_pulse.application import analysis_service
from review_pulse.application import (
    AnalysisInProgressError,
    AnalysisUnavailableError,
    ReviewAnalyzer,
)
from review_pulse.domain import ActionCode
from review_pulse.infrastructure.config import ReviewSourceSettings, Settings, SheetsSettings
from review_pulse.infrastructure.importer import FALLBACK_REVIEWS
from review_pulse.infrastructure.llm import HeuristicClassifier, SentimentServiceError


def test_initialize_loads_reviews_and_model(make_analyzer):
    analyzer = make_analyzer()
    state = asyncio.run(analyzer.initialize())

    assert state.ready and state.can_analyze
    assert state.reviews == ["Great product, would buy again", "Terrible support"]
    assert state.classifier_name == "fake-model"
    assert "Model ready" in state.status_message


def test_initialize_uses_fallback_reviews(make_analyzer, tmp_path):
    settings = Settings(
        reviews=ReviewSourceSettings(reviews_file=tmp_path / "missing.tsv"),
        sheets=SheetsSettings(webhook_url=""),
    )
    analyzer = make_analyzer(settings=settings)
    state = asyncio.run(analyzer.initialize())

    assert state.ready
    assert state.review_source == "fallback"
    assert state.reviews == FALLBACK_REVIEWS


def test_model_failure_switches_to_fallback_classifier(make_analyzer):
    analyzer = make_analyzer(classifier=FakeClassifier(fail_load=True), fallback=HeuristicClassifier())
    state = asyncio.run(analyzer.initialize())

    assert state.model_ready
    assert state.classifier_name == "keyword-heuristic"
    assert isinstance(analyzer.classifier, HeuristicClassifier)


def test_model_failure_without_fallback_blocks_analysis(make_analyzer):
    analyzer = make_analyzer(classifier=FakeClassifier(fail_load=True))
    state = asyncio.run(analyzer.initialize())

    assert state.reviews_loaded
    assert not state.model_ready
    assert not state.can_analyze
    assert "Failed to load sentiment model" in state.last_error

    with pytest.raises(AnalysisUnavailableError):
        asyncio.run(analyzer.analyze())


def test_analyze_before_initialize(make_analyzer):
    with pytest.raises(AnalysisUnavailableError, match="not ready"):
        asyncio.run(make_analyzer().analyze())


@pytest.mark.parametrize(
    "label, score, expected",
    [
        ("POSITIVE", 0.9, ActionCode.ASK_REFERRAL),
        ("NEGATIVE", 0.9, ActionCode.OFFER_COUPON),
        ("NEGATIVE", 0.5, ActionCode.REQUEST_FEEDBACK),
    ],
)
def test_analyze_uses_first_prediction(make_analyzer, label, score, expected):
    classifier = FakeClassifier(label=label, score=score)
    analyzer = make_analyzer(classifier=classifier)

    async def run():
        await analyzer.initialize()
        return await analyzer.analyze()

    outcome = asyncio.run(run())

    assert outcome.review in analyzer.state.reviews
    assert classifier.seen == [outcome.review]
    assert outcome.classification.label == label
    assert outcome.decision.action_code == expected
    assert not analyzer.state.busy


def test_analyze_given_text(make_analyzer):
    analyzer = make_analyzer()

    async def run():
        await analyzer.initialize()
        return await analyzer.analyze("  Loved it  ")

    outcome = asyncio.run(run())
    assert outcome.review == "Loved it"
    assert outcome.confidence_percent == "90.0"


def test_analyze_rejects_blank_text(make_analyzer):
    analyzer = make_analyzer()

    async def run():
        await analyzer.initialize()
        await analyzer.analyze("   ")

    with pytest.raises(ValueError):
        asyncio.run(run())
    assert not analyzer.state.busy


def test_busy_flag_cleared_after_classifier_error(make_analyzer):
    analyzer = make_analyzer(classifier=FakeClassifier(fail_classify=True))

    async def run():
        await analyzer.initialize()
        await analyzer.analyze()

    with pytest.raises(SentimentServiceError):
        asyncio.run(run())
    assert not analyzer.state.busy
    assert analyzer.state.can_analyze


def test_overlapping_analysis_is_rejected(make_analyzer):
    class SlowClassifier(FakeClassifier):
        async def classify(self, text):
            await asyncio.sleep(0.05)
            return await super().classify(text)

    analyzer = make_analyzer(classifier=SlowClassifier())

    async def run():
        await analyzer.initialize()
        first = asyncio.create_task(analyzer.analyze())
        await asyncio.sleep(0)
        assert analyzer.state.busy
        with pytest.raises(AnalysisInProgressError):
            await analyzer.analyze()
        return await first

    outcome = asyncio.run(run())
    assert outcome.decision.action_code == ActionCode.ASK_REFERRAL
    assert not analyzer.state.busy


def test_replace_reviews(make_analyzer):
    analyzer = make_analyzer()
    analyzer.replace_reviews(["one", "two"], source="upload.csv")

    assert analyzer.state.reviews == ["one", "two"]
    assert analyzer.state.review_source == "upload.csv"
    with pytest.raises(ValueError):
        analyzer.replace_reviews([], source="empty.csv")


def test_build_log_record(make_analyzer):
    analyzer = make_analyzer(classifier=FakeClassifier(label="NEGATIVE", score=0.8))

    async def run():
        await analyzer.initialize()
        return await analyzer.analyze("The box was crushed and the lid missing")

    outcome = asyncio.run(run())
    record = analyzer.build_log_record(outcome, {"userAgent": "pytest"})

    assert record.review == "The box wa"
    assert record.sentiment == "NEGATIVE"
    assert record.confidence == "80.0"
    assert record.normalized_score == pytest.approx(0.2)
    assert record.action_taken == "OFFER_COUPON"
    assert record.meta["userAgent"] == "pytest"
    assert record.meta["reviewsCount"] == 2
    assert record.meta["modelReady"] is True


def test_dispatch_log_is_fire_and_forget(make_analyzer, recording_logger):
    analyzer = make_analyzer()

    async def run():
        await analyzer.initialize()
        outcome = await analyzer.analyze()
        analyzer.dispatch_log(analyzer.build_log_record(outcome))
        await analyzer.drain_logs()

    asyncio.run(run())
    assert len(recording_logger.records) == 1
    assert recording_logger.records[0].action_taken == "ASK_REFERRAL"


def test_analyzer_is_not_shared_between_instances(settings, recording_logger):
    a = ReviewAnalyzer(settings, FakeClassifier(), recording_logger)
    b = ReviewAnalyzer(settings, FakeClassifier(), recording_logger)
    asyncio.run(a.initialize())

    assert a.state.ready
    assert not b.state.ready


def test_analysis_waits_for_reviews_when_model_loads_first(make_analyzer, monkeypatch):
    release_reviews = threading.Event()
    real_load_reviews = analysis_service.load_reviews

    def gated_load_reviews(*args):
        release_reviews.wait(5)
        return real_load_reviews(*args)

    monkeypatch.setattr(analysis_service, "load_reviews", gated_load_reviews)
    analyzer = make_analyzer()

    async def run():
        startup = asyncio.create_task(analyzer.initialize())
        for _ in range(200):
            if analyzer.state.model_ready:
                break
            await asyncio.sleep(0.01)

        assert analyzer.state.model_ready
        assert not analyzer.state.reviews_loaded
        assert not analyzer.state.can_analyze
        with pytest.raises(AnalysisUnavailableError):
            await analyzer.analyze()

        release_reviews.set()
        await startup
        assert analyzer.state.can_analyze

    try:
        asyncio.run(run())
    finally:
        release_reviews.set()


def test_analysis_waits_for_model_when_reviews_load_first(make_analyzer):
    class GatedClassifier(FakeClassifier):
        def __init__(self):
            super().__init__()
            self.release = None

        async def load(self):
            self.release = asyncio.Event()
            await self.release.wait()

    classifier = GatedClassifier()
    analyzer = make_analyzer(classifier=classifier)

    async def run():
        startup = asyncio.create_task(analyzer.initialize())
        for _ in range(200):
            if analyzer.state.reviews_loaded:
                break
            await asyncio.sleep(0.01)

        assert analyzer.state.reviews_loaded
        assert not analyzer.state.model_ready
        assert not analyzer.state.can_analyze
        with pytest.raises(AnalysisUnavailableError):
            await analyzer.analyze("Loved it")

        classifier.release.set()
        await startup
        assert analyzer.state.can_analyze

    asyncio.run(run())
