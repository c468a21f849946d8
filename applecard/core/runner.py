"""
End-to-end conversion orchestration.
"""
from pathlib import Path
from typing import List, Optional, Union
import logging

from .loader import read_lines
from .detectors import TemplateDetector, DEFAULT_TEMPLATE_ID
from .parser import StatementParser
from .writer import write_csv
from ..models.schema import StatementLayout, ParsedStatement

logger = logging.getLogger(__name__)


class StatementConverter:
    """Reads a statement PDF, parses its transactions and renders them."""

    def __init__(self, template_id: Optional[str] = None, strict: bool = False, verbose: bool = False):
        self.template_id = template_id or DEFAULT_TEMPLATE_ID
        self.strict = strict
        self.verbose = verbose

        # Load template
        detector = TemplateDetector()
        self.template = detector.get_template(self.template_id)
        if not self.template:
            raise ValueError(f"Template not found: {self.template_id}")
        self.layout = StatementLayout.from_template(self.template)

        if verbose:
            logging.basicConfig(level=logging.DEBUG)

    def read_lines(self, pdf_path: Union[str, Path]) -> List[str]:
        lines = read_lines(pdf_path)
        logger.info(f"Extracted {len(lines)} lines from {Path(pdf_path).name}")
        return lines

    def parse_lines(self, lines: List[str], source: Optional[str] = None) -> ParsedStatement:
        """
        Parse already extracted statement lines.

        Args:
            lines: Statement text lines in reading order
            source: Name of the document the lines came from

        Returns:
            ParsedStatement object
        """
        parser = StatementParser(self.layout, strict=self.strict)
        transactions = parser.parse(lines)
        return ParsedStatement(
            template_id=self.template_id,
            source=source,
            transactions=transactions,
            warnings=parser.warnings
        )

    def parse(self, pdf_path: Union[str, Path]) -> ParsedStatement:
        """
        Parse a PDF file into structured data.

        Args:
            pdf_path: Path to PDF file

        Returns:
            ParsedStatement object
        """
        lines = self.read_lines(pdf_path)
        return self.parse_lines(lines, source=Path(pdf_path).name)

    def convert(self, pdf_path: Union[str, Path]) -> str:
        """
        Convert a PDF file into CSV text.

        Args:
            pdf_path: Path to PDF file

        Returns:
            CSV text with a header row and one row per transaction
        """
        statement = self.parse(pdf_path)
        return write_csv(statement.transactions)


def parse_statement(pdf_path: Union[str, Path], template_id: Optional[str] = None,
                    strict: bool = False, verbose: bool = False) -> ParsedStatement:
    """
    Parse an Apple Card statement PDF.

    Args:
        pdf_path: Path to PDF file
        template_id: Template ID to use (defaults to apple_card_v1)
        strict: Raise StatementFormatError on layout anomalies
        verbose: Enable verbose logging

    Returns:
        ParsedStatement object
    """
    converter = StatementConverter(template_id, strict, verbose)
    return converter.parse(pdf_path)


def convert(pdf_path: Union[str, Path], template_id: Optional[str] = None,
            strict: bool = False, verbose: bool = False) -> str:
    """
    Convert an Apple Card statement PDF to CSV text.

    Args:
        pdf_path: Path to PDF file
        template_id: Template ID to use (defaults to apple_card_v1)
        strict: Raise StatementFormatError on layout anomalies
        verbose: Enable verbose logging

    Returns:
        CSV text
    """
    converter = StatementConverter(template_id, strict, verbose)
    return converter.convert(pdf_path)
