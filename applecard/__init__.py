"""
Apple Card Statement Converter

Rebuilds the transactions of an Apple Card PDF statement from its plain-text
line stream and renders them as CSV.
"""

__version__ = "1.0.0"
__author__ = "Apple Card Converter Team"

from .core.runner import convert, parse_statement, StatementConverter
from .core.parser import StatementParser, ParserState, parse_transactions
from .core.loader import read_lines
from .core.writer import write_csv, write_json
from .core.detectors import detect_template
from .core.errors import StatementError, LineSourceError, RecordSinkError, StatementFormatError
from .models.schema import Transaction, StatementLayout, ParsedStatement, ParseWarning

__all__ = [
    "convert",
    "parse_statement",
    "StatementConverter",
    "StatementParser",
    "ParserState",
    "parse_transactions",
    "read_lines",
    "write_csv",
    "write_json",
    "detect_template",
    "StatementError",
    "LineSourceError",
    "RecordSinkError",
    "StatementFormatError",
    "Transaction",
    "StatementLayout",
    "ParsedStatement",
    "ParseWarning"
]
