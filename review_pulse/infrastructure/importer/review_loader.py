"""
Review Loader - TSV/CSV/Excel Review Import
============================================

Parses a delimited or Excel file and auto-detects the review text column.
Supports .tsv, .txt, .csv, .xlsx and .xls formats.

If the configured file is missing or holds no usable text, load_reviews()
returns a built-in sample list so the dashboard always has something to analyze.
"""

import io
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional, Tuple, Union

import pandas as pd

logger = logging.getLogger(__name__)

# Common column name variations for auto-detection, most specific first
TEXT_PATTERNS = ['text', 'review', 'review_text', 'comment', 'body', 'content', 'feedback']

TAB_SEPARATED = ['.tsv', '.txt']
EXCEL = ['.xlsx', '.xls']
SUPPORTED_EXTENSIONS = TAB_SEPARATED + ['.csv'] + EXCEL

FALLBACK_REVIEWS = [
    "Absolutely loved this product! It exceeded all my expectations and arrived early.",
    "The quality is terrible. It broke after two days and support never answered.",
    "It's okay. Does what it says, nothing more, nothing less.",
    "Fantastic customer service, they replaced my damaged item within a day.",
    "Not worth the money. The description was misleading and the fit is wrong.",
    "Pretty good overall, although shipping took longer than promised.",
]

FALLBACK_SOURCE = "fallback"


@dataclass
class ReviewSet:
    """Non-empty, ordered list of trimmed review texts plus where they came from."""
    reviews: List[str] = field(default_factory=list)
    source: str = FALLBACK_SOURCE
    column: str = ""

    @property
    def is_fallback(self) -> bool:
        return self.source == FALLBACK_SOURCE

    def __len__(self) -> int:
        return len(self.reviews)


class ReviewLoader:
    """
    Review file parser with auto-detection of the text column.

    Usage:
        loader = ReviewLoader()
        reviews, column = loader.parse("reviews_test.tsv")
        # Returns: (["Great product!", "Awful support."], "text")
    """

    def __init__(self, text_column: str = "text"):
        self.text_column = text_column.strip().lower()
        self.detected_column: Optional[str] = None

    def parse(self, file_path: Union[str, Path]) -> Tuple[List[str], str]:
        """
        Parse a review file.

        Args:
            file_path: Path to the file (.tsv, .txt, .csv, .xlsx, .xls)

        Returns:
            Tuple of (review texts, detected column name)
        """
        path = Path(file_path)

        if not path.exists():
            raise FileNotFoundError(f"File not found: {file_path}")

        df = self._read(path, path.suffix.lower())
        reviews, column = self._extract(df)

        logger.info(f"Parsed {len(reviews)} reviews from {file_path} (column '{column}')")
        return reviews, column

    def parse_buffer(self, content: bytes, ext: str) -> Tuple[List[str], str]:
        """Parse an uploaded file that is already in memory."""
        df = self._read(io.BytesIO(content), ext.lower())
        return self._extract(df)

    def _read(self, source, ext: str) -> pd.DataFrame:
        """Read file based on extension."""
        try:
            if ext in TAB_SEPARATED:
                return pd.read_csv(source, sep='\t', dtype=str, keep_default_na=False, skip_blank_lines=True)
            if ext == '.csv':
                return pd.read_csv(source, dtype=str, keep_default_na=False, skip_blank_lines=True)
            if ext in EXCEL:
                return pd.read_excel(source, sheet_name=0, dtype=str, keep_default_na=False)
        except pd.errors.EmptyDataError as e:
            raise ValueError(f"Review file is empty: {e}") from e
        except Exception as e:
            logger.error(f"Failed to read review file: {e}")
            raise

        raise ValueError(
            f"Unsupported file format: {ext}. Use {', '.join(SUPPORTED_EXTENSIONS)}"
        )

    def _extract(self, df: pd.DataFrame) -> Tuple[List[str], str]:
        # Clean column names
        df.columns = df.columns.astype(str).str.strip().str.lower()

        column = self._find_column(df.columns)
        self.detected_column = column

        if not column:
            raise ValueError(
                f"Could not detect a review text column. Expected one of: {', '.join(TEXT_PATTERNS)}"
            )

        texts = df[column].dropna().astype(str).str.strip()
        reviews = [text for text in texts if text]

        if not reviews:
            raise ValueError(f"No valid reviews found in the '{column}' column.")

        return reviews, column

    def _find_column(self, columns: pd.Index) -> Optional[str]:
        """Exact match on the configured column, then the pattern list in order."""
        if self.text_column in columns:
            return self.text_column

        for pattern in TEXT_PATTERNS:
            for col in columns:
                if col == pattern:
                    return col

        for pattern in TEXT_PATTERNS:
            for col in columns:
                if pattern in col:
                    return col
        return None


def load_reviews(file_path: Union[str, Path], text_column: str = "text") -> ReviewSet:
    """
    Load reviews, falling back to the built-in samples.

    Never returns an empty ReviewSet: a missing, unreadable or empty file is
    logged and replaced by FALLBACK_REVIEWS.
    """
    loader = ReviewLoader(text_column=text_column)
    try:
        reviews, column = loader.parse(file_path)
        return ReviewSet(reviews=reviews, source=str(file_path), column=column)
    except FileNotFoundError:
        logger.warning(f"Reviews file not found: {file_path}. Using {len(FALLBACK_REVIEWS)} sample reviews.")
    except ValueError as e:
        logger.warning(f"Could not use reviews from {file_path}: {e}. Using sample reviews.")
    except Exception as e:
        logger.exception(f"Unexpected error loading reviews from {file_path}: {e}")

    return ReviewSet(reviews=list(FALLBACK_REVIEWS), source=FALLBACK_SOURCE)
