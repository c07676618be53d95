"""
FastAPI Web Application - Review Pulse Dashboard
=================================================

Single-page dashboard: pick a random review, classify its sentiment, show
the business action, and log the analysis to Google Sheets in the background.
"""

import html
import logging
from pathlib import Path
from typing import Optional
from urllib.parse import quote
from contextlib import asynccontextmanager

from fastapi import FastAPI, HTTPException, Request, BackgroundTasks, UploadFile, File
from fastapi.responses import HTMLResponse, RedirectResponse
from pydantic import BaseModel

from review_pulse.application import (
    AnalysisInProgressError,
    AnalysisOutcome,
    AnalysisUnavailableError,
    AppState,
    ReviewAnalyzer,
    build_default_analyzer,
)
from review_pulse.infrastructure.importer import ReviewLoader, SUPPORTED_EXTENSIONS
from review_pulse.infrastructure.llm import SentimentServiceError

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


# ── API Schemas ────────────────────────────────────────────────────

class AnalyzeRequest(BaseModel):
    text: Optional[str] = None


class AnalysisResponse(BaseModel):
    review: str
    label: str
    score: float
    confidence: str
    normalized_score: float
    action_code: str
    message: str
    accent_color: str
    icon: str
    button_label: str


class StatusResponse(BaseModel):
    ready: bool
    busy: bool
    reviews_loaded: bool
    model_ready: bool
    reviews_count: int
    review_source: str
    classifier: str
    status: str


# ══════════════════════════════════════════════════════════════════
#  SHARED CSS
# ══════════════════════════════════════════════════════════════════

SHARED_CSS = """
    @import url('https://fonts.googleapis.com/css2?family=Inter:wght@300;400;500;600;700;800&display=swap');

    :root {
        --bg-dark: #0a0a14;
        --bg-card: rgba(255,255,255,0.035);
        --border: rgba(255,255,255,0.07);
        --text: #e2e8f0;
        --text-muted: #64748b;
        --gradient: linear-gradient(135deg, #7c3aed 0%, #06b6d4 100%);
    }

    * { margin: 0; padding: 0; box-sizing: border-box; }

    body {
        font-family: 'Inter', -apple-system, BlinkMacSystemFont, sans-serif;
        background: var(--bg-dark);
        background-image: radial-gradient(ellipse 80% 50% at 50% -20%, rgba(124,58,237,0.15), transparent);
        min-height: 100vh;
        color: var(--text);
    }

    @keyframes fadeInUp {
        from { opacity: 0; transform: translateY(20px); }
        to   { opacity: 1; transform: translateY(0); }
    }

    .card {
        background: var(--bg-card);
        border: 1px solid var(--border);
        border-radius: 16px;
        padding: 28px;
        margin-bottom: 20px;
        animation: fadeInUp 0.5s ease-out both;
    }

    .btn {
        background: var(--gradient);
        color: #fff;
        border: none;
        padding: 12px 28px;
        border-radius: 10px;
        font-weight: 600;
        font-size: 14px;
        cursor: pointer;
        display: inline-flex;
        align-items: center;
        gap: 8px;
        font-family: inherit;
    }
    .btn:disabled { opacity: 0.45; cursor: not-allowed; }

    .badge {
        padding: 4px 10px;
        border-radius: 6px;
        font-size: 10px;
        font-weight: 600;
        text-transform: uppercase;
        letter-spacing: 0.4px;
    }
    .badge.positive { background: rgba(52,211,153,0.15); color: #34d399; }
    .badge.neutral  { background: rgba(148,163,184,0.15); color: #94a3b8; }
    .badge.negative { background: rgba(252,165,165,0.15); color: #fca5a5; }

    .alert {
        padding: 14px 20px;
        border-radius: 12px;
        margin-bottom: 20px;
        font-size: 14px;
        text-align: center;
    }
    .alert-info  { background: rgba(124,58,237,0.1); border: 1px solid rgba(124,58,237,0.25); color: #a78bfa; }
    .alert-error { background: rgba(248,113,113,0.1); border: 1px solid rgba(248,113,113,0.25); color: #f87171; }
"""


# ══════════════════════════════════════════════════════════════════
#  HTML TEMPLATE RENDERERS
# ══════════════════════════════════════════════════════════════════

def sentiment_view(label: str, score: float) -> dict:
    """Category, display label and icon for the sentiment badge."""
    if label == "POSITIVE" and score > 0.5:
        return {"category": "positive", "label": "POSITIVE", "icon": "fa-thumbs-up"}
    if label == "NEGATIVE" and score > 0.5:
        return {"category": "negative", "label": "NEGATIVE", "icon": "fa-thumbs-down"}
    return {"category": "neutral", "label": "NEUTRAL", "icon": "fa-question-circle"}


def render_result(outcome: AnalysisOutcome) -> str:
    view = sentiment_view(outcome.classification.label, outcome.classification.score)
    decision = outcome.decision
    return f"""
        <div class="card result {view['category']}">
            <div class="sentiment">
                <i class="sentiment-icon fas {view['icon']}"></i>
                <span class="badge {view['category']}">{view['label']}</span>
                <span class="confidence">{outcome.confidence_percent}% confidence</span>
            </div>
            <div class="action" style="border-color: {decision.accent_color};">
                <i class="fas {decision.icon}" style="color: {decision.accent_color};"></i>
                <p>{html.escape(decision.message)}</p>
                <button type="button" class="btn" style="background: {decision.accent_color};">{decision.button_label}</button>
                <code>{decision.action_code.value}</code>
            </div>
        </div>"""


def render_home(state: AppState, outcome: Optional[AnalysisOutcome] = None,
                review: str = "", message: str = "", error: str = "") -> str:
    """Render the analyzer page."""
    msg_html = f'<div class="alert alert-info">{html.escape(message)}</div>' if message else ""
    error_html = f'<div class="alert alert-error">{html.escape(error)}</div>' if error else ""

    shown_review = outcome.review if outcome else review
    if shown_review:
        review_html = f'<div class="review">{html.escape(shown_review)}</div>'
    else:
        review_html = '<div class="review empty">Click the button to analyze a random review.</div>'

    result_html = render_result(outcome) if outcome else ""
    disabled = "" if state.can_analyze else "disabled"
    accept = ",".join(SUPPORTED_EXTENSIONS)

    return f"""<!DOCTYPE html>
<html lang="en">
<head>
    <meta charset="UTF-8">
    <meta name="viewport" content="width=device-width, initial-scale=1.0">
    <title>Review Pulse</title>
    <link rel="stylesheet" href="https://cdnjs.cloudflare.com/ajax/libs/font-awesome/6.5.1/css/all.min.css">
    <style>
        {SHARED_CSS}
        .container {{ max-width: 760px; margin: 0 auto; padding: 40px 24px; }}
        h1 {{
            font-size: 30px; font-weight: 800; margin-bottom: 6px;
            background: var(--gradient);
            -webkit-background-clip: text; -webkit-text-fill-color: transparent;
        }}
        .subtitle {{ color: var(--text-muted); font-size: 14px; margin-bottom: 28px; }}
        .review {{ font-size: 16px; line-height: 1.6; margin-bottom: 20px; }}
        .review.empty {{ color: var(--text-muted); font-style: italic; }}
        .sentiment {{ display: flex; align-items: center; gap: 12px; margin-bottom: 18px; }}
        .sentiment-icon {{ font-size: 26px; }}
        .result.positive .sentiment-icon {{ color: #34d399; }}
        .result.negative .sentiment-icon {{ color: #fca5a5; }}
        .result.neutral .sentiment-icon {{ color: #94a3b8; }}
        .confidence {{ color: var(--text-muted); font-size: 13px; }}
        .action {{ border-left: 4px solid; padding: 12px 18px; display: grid; gap: 10px; }}
        .status {{ color: var(--text-muted); font-size: 13px; margin-top: 12px; }}
        .upload {{ display: flex; gap: 12px; align-items: center; flex-wrap: wrap; }}
    </style>
</head>
<body>
    <div class="container">
        <h1>Review Pulse</h1>
        <p class="subtitle">Sentiment analysis with automatic customer follow-up</p>
        {msg_html}
        {error_html}
        <div class="card">
            {review_html}
            <form method="post" action="/analyze" onsubmit="this.querySelector('button').disabled = true;">
                <button type="submit" class="btn" {disabled}>
                    <i class="fas fa-random"></i> Analyze Random Review
                </button>
            </form>
            <div class="status">{html.escape(state.status_message)}</div>
        </div>
        {result_html}
        <div class="card">
            <form class="upload" method="post" action="/reviews/import" enctype="multipart/form-data">
                <input type="file" name="file" accept="{accept}" required>
                <button type="submit" class="btn">Import Reviews</button>
            </form>
            <div class="status">Source: <code>{html.escape(state.review_source or "loading")}</code> · Classifier: <code>{html.escape(state.classifier_name or "loading")}</code></div>
        </div>
    </div>
</body>
</html>"""


def collect_client_meta(request: Request) -> dict:
    """Client metadata sent along with each log record."""
    return {
        "userAgent": request.headers.get("user-agent", ""),
        "language": request.headers.get("accept-language", ""),
        "clientHost": request.client.host if request.client else "",
        "url": str(request.url),
    }


def redirect_home(key: str, text: str) -> RedirectResponse:
    """Back to the dashboard with a ?message= or ?error= banner."""
    return RedirectResponse(url=f"/?{key}={quote(text)}", status_code=303)


def to_response(outcome: AnalysisOutcome) -> AnalysisResponse:
    decision = outcome.decision
    return AnalysisResponse(
        review=outcome.review,
        label=outcome.classification.label,
        score=outcome.classification.score,
        confidence=outcome.confidence_percent,
        normalized_score=outcome.normalized_score,
        action_code=decision.action_code.value,
        message=decision.message,
        accent_color=decision.accent_color,
        icon=decision.icon,
        button_label=decision.button_label,
    )


# ══════════════════════════════════════════════════════════════════
#  APP FACTORY & ROUTES
# ══════════════════════════════════════════════════════════════════

def create_app(analyzer: Optional[ReviewAnalyzer] = None) -> FastAPI:
    """Build the FastAPI app around one analyzer (the production one by default)."""
    analyzer = analyzer or build_default_analyzer()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        await analyzer.initialize()
        logger.info("Review analyzer ready" if analyzer.state.ready else "Review analyzer not ready")
        yield
        await analyzer.drain_logs()

    app = FastAPI(title="Review Pulse", description="Review Sentiment Analysis Dashboard", lifespan=lifespan)
    app.state.analyzer = analyzer

    # ── Dashboard ──────────────────────────────────────────────

    @app.get("/", response_class=HTMLResponse)
    async def home(message: str = "", error: str = ""):
        return render_home(analyzer.state, message=message, error=error)

    @app.post("/analyze", response_class=HTMLResponse)
    async def analyze_page(request: Request, background_tasks: BackgroundTasks):
        try:
            outcome = await analyzer.analyze()
        except (AnalysisUnavailableError, AnalysisInProgressError) as e:
            return render_home(analyzer.state, error=str(e))
        except SentimentServiceError as e:
            logger.error(f"Analysis failed: {e}")
            return render_home(analyzer.state, error=f"Analysis failed: {e}")

        record = analyzer.build_log_record(outcome, collect_client_meta(request))
        background_tasks.add_task(analyzer.analysis_logger.log, record)
        return render_home(analyzer.state, outcome=outcome, message="Analysis complete!")

    # ── Import ─────────────────────────────────────────────────

    @app.post("/reviews/import")
    async def import_reviews(file: UploadFile = File(...)):
        """Replace the loaded reviews with an uploaded file."""
        if not file.filename:
            return redirect_home("error", "No file selected")

        ext = Path(file.filename).suffix.lower()
        if ext not in SUPPORTED_EXTENSIONS:
            return redirect_home("error", f"Invalid file type. Use {', '.join(SUPPORTED_EXTENSIONS)}")

        try:
            content = await file.read()
            reviews, column = ReviewLoader(analyzer.settings.reviews.text_column).parse_buffer(content, ext)
            analyzer.replace_reviews(reviews, source=file.filename)
        except ValueError as e:
            return redirect_home("error", str(e)[:120])
        except Exception as e:
            logger.exception(f"Review import error: {e}")
            return redirect_home("error", f"Import failed: {str(e)[:80]}")

        return redirect_home("message", f"Imported {len(reviews)} reviews from column '{column}'")

    # ── API Endpoints ──────────────────────────────────────────

    @app.get("/api/status", response_model=StatusResponse)
    async def api_status():
        state = analyzer.state
        return StatusResponse(
            ready=state.ready,
            busy=state.busy,
            reviews_loaded=state.reviews_loaded,
            model_ready=state.model_ready,
            reviews_count=len(state.reviews),
            review_source=state.review_source,
            classifier=state.classifier_name,
            status=state.status_message,
        )

    @app.get("/api/reviews")
    async def api_reviews():
        return {"source": analyzer.state.review_source, "reviews": analyzer.state.reviews}

    @app.post("/api/analyze", response_model=AnalysisResponse)
    async def api_analyze(payload: AnalyzeRequest, request: Request, background_tasks: BackgroundTasks):
        try:
            outcome = await analyzer.analyze(payload.text)
        except AnalysisUnavailableError as e:
            raise HTTPException(status_code=503, detail=str(e))
        except AnalysisInProgressError as e:
            raise HTTPException(status_code=409, detail=str(e))
        except ValueError as e:
            raise HTTPException(status_code=422, detail=str(e))
        except SentimentServiceError as e:
            raise HTTPException(status_code=502, detail=f"Analysis failed: {e}")

        record = analyzer.build_log_record(outcome, collect_client_meta(request))
        background_tasks.add_task(analyzer.analysis_logger.log, record)
        return to_response(outcome)

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="127.0.0.1", port=8000)
