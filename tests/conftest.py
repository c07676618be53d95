import random

import pytest

from review_pulse.application import ReviewAnalyzer
from review_pulse.domain import ClassificationResult
from review_pulse.infrastructure.config import (
    ClassifierSettings,
    ReviewSourceSettings,
    Settings,
    SheetsSettings,
)
from review_pulse.infrastructure.llm import SentimentClassifier, SentimentServiceError
from review_pulse.infrastructure.sheets import AnalysisLogger, LogOutcome


class FakeClassifier(SentimentClassifier):
    """Returns a fixed prediction; can be told to fail on load or classify."""

    name = "fake-model"

    def __init__(self, label="POSITIVE", score=0.9, fail_load=False, fail_classify=False):
        self.label = label
        self.score = score
        self.fail_load = fail_load
        self.fail_classify = fail_classify
        self.seen = []

    async def load(self):
        if self.fail_load:
            raise SentimentServiceError("model download failed")

    async def classify(self, text):
        self.seen.append(text)
        if self.fail_classify:
            raise SentimentServiceError("inference failed")
        return [
            ClassificationResult(self.label, self.score),
            ClassificationResult("OTHER", 1 - self.score),
        ]


class RecordingLogger(AnalysisLogger):
    def __init__(self):
        self.records = []

    def send(self, record):
        self.records.append(record)
        return LogOutcome(success=True)


@pytest.fixture
def reviews_file(tmp_path):
    path = tmp_path / "reviews_test.tsv"
    path.write_text(
        "id\ttext\n"
        "1\tGreat product, would buy again\n"
        "2\t  Terrible support  \n"
        "3\t\n",
        encoding="utf-8",
    )
    return path


@pytest.fixture
def settings(reviews_file):
    return Settings(
        classifier=ClassifierSettings(heuristic_fallback=True),
        reviews=ReviewSourceSettings(reviews_file=reviews_file, text_column="text"),
        sheets=SheetsSettings(webhook_url="", review_excerpt_length=10),
    )


@pytest.fixture
def recording_logger():
    return RecordingLogger()


@pytest.fixture
def make_analyzer(settings, recording_logger):
    def _make(classifier=None, fallback=None, **overrides):
        return ReviewAnalyzer(
            settings=overrides.get("settings", settings),
            classifier=classifier or FakeClassifier(),
            analysis_logger=overrides.get("analysis_logger", recording_logger),
            fallback_classifier=fallback,
            rng=random.Random(7),
        )
    return _make
