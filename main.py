"""
Review Pulse - Web Server Entry Point
=====================================

Run this to start the web dashboard:
    python main.py

Then open http://127.0.0.1:8000 in your browser.

To analyze reviews from the terminal:
    python run_analysis.py
"""

import sys
from pathlib import Path

import uvicorn

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent))

from review_pulse.infrastructure.config import get_settings


def main():
    """Start the web server."""
    settings = get_settings()

    print("\n" + "=" * 50)
    print("   Review Pulse - Web Dashboard")
    print("=" * 50)
    print(f"\n   Starting server at http://{settings.web.host}:{settings.web.port}")
    print("   Press Ctrl+C to stop\n")

    uvicorn.run(
        "review_pulse.web.app:app",
        host=settings.web.host,
        port=settings.web.port,
        reload=True,
        log_level="info"
    )


if __name__ == "__main__":
    main()
