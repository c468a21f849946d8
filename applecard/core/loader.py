"""
PDF loading and plain-text line extraction using pdfplumber.
"""
import pdfplumber
from pathlib import Path
from typing import List, Optional, Union
import logging

from .errors import LineSourceError

logger = logging.getLogger(__name__)


class PDFLoader:
    """Handles PDF loading and line extraction."""

    def __init__(self, pdf_path: Union[str, Path]):
        self.pdf_path = Path(pdf_path)
        self._pdf = None
        self._lines: Optional[List[str]] = None

    @property
    def page_count(self) -> int:
        if self._pdf is None:
            return 0
        return len(self._pdf.pages)

    def load(self) -> List[str]:
        """
        Extract the text of every page as one ordered list of lines.

        Pages are joined with a newline and the whole text is split on
        newlines.  Lines are returned exactly as extracted: no trimming,
        merging or de-duplication.

        Returns:
            Lines in reading order
        """
        if self._lines is not None:
            return self._lines

        if not self.pdf_path.exists():
            raise LineSourceError(f"PDF file not found: {self.pdf_path}")

        try:
            self._pdf = pdfplumber.open(self.pdf_path)
            logger.info(f"Loaded PDF with {len(self._pdf.pages)} pages")

            page_texts = []
            for i, page in enumerate(self._pdf.pages, 1):
                text = page.extract_text() or ""
                page_texts.append(text)
                logger.debug(f"Page {i}: {len(text.splitlines())} lines extracted")

        except Exception as e:
            logger.error(f"Error loading PDF: {e}")
            raise LineSourceError(f"Could not read {self.pdf_path.name}: {e}") from e

        self._lines = "\n".join(page_texts).split("\n")
        return self._lines

    def close(self):
        """Close the PDF file."""
        if self._pdf:
            self._pdf.close()
            self._pdf = None


def read_lines(pdf_path: Union[str, Path]) -> List[str]:
    """
    Convenience function to extract the lines of a PDF.

    Args:
        pdf_path: Path to PDF file

    Returns:
        Lines in reading order
    """
    loader = PDFLoader(pdf_path)
    try:
        return loader.load()
    finally:
        loader.close()
