"""
Analysis Runner - Batch Review Sentiment Analysis
==================================================

Analyzes reviews from the terminal without starting the web dashboard.

    python run_analysis.py                 # 5 random reviews
    python run_analysis.py --count 20
    python run_analysis.py --text "Loved it, will buy again!"

Each analysis is logged to Google Sheets when GOOGLE_SCRIPT_URL is set.
"""

import sys
import asyncio
import argparse
import logging
from collections import Counter
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent))

from review_pulse.application import AnalysisError, build_default_analyzer
from review_pulse.domain import ActionCode
from review_pulse.infrastructure.llm import SentimentServiceError

logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)


def parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Analyze review sentiment and pick a follow-up action.")
    parser.add_argument("--count", type=int, default=5, help="number of random reviews to analyze")
    parser.add_argument("--text", help="analyze this review instead of random ones")
    return parser.parse_args(argv)


async def run_analysis(count: int = 5, text: str = None) -> Counter:
    """Run the analysis loop and return how often each action was chosen."""

    print("\n" + "=" * 60)
    print("   Review Pulse - Analysis Runner")
    print("=" * 60 + "\n")

    analyzer = build_default_analyzer()
    state = await analyzer.initialize()
    if not state.ready:
        print(f"Initialization failed: {state.last_error}")
        return Counter()

    print(f"Loaded {len(state.reviews)} reviews from {state.review_source}")
    print(f"Classifier: {state.classifier_name}\n")

    texts = [text] if text else [None] * count
    actions = Counter()

    for review in texts:
        print(f"{'─' * 40}")
        try:
            outcome = await analyzer.analyze(review)
        except (AnalysisError, SentimentServiceError, ValueError) as e:
            logger.error(f"Analysis failed: {e}")
            continue

        print(f"Review:    {outcome.review[:120]}")
        print(f"Sentiment: {outcome.classification.label} ({outcome.confidence_percent}% confidence)")
        print(f"Action:    {outcome.decision.action_code.value} - {outcome.decision.message}")

        actions[outcome.decision.action_code] += 1
        analyzer.dispatch_log(analyzer.build_log_record(outcome, {"client": "run_analysis"}))

    await analyzer.drain_logs()

    # Summary
    print("\n" + "=" * 60)
    print("Analysis Complete!")
    print("   " + " | ".join(f"{code.value}: {actions[code]}" for code in ActionCode))
    print("=" * 60 + "\n")
    return actions


def main(argv=None):
    args = parse_args(argv)
    try:
        asyncio.run(run_analysis(count=args.count, text=args.text))
    except KeyboardInterrupt:
        print("\nCancelled")


if __name__ == "__main__":
    main()
