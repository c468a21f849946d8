"""
CSV and JSON rendering of parsed transactions.
"""
import csv
import io
import logging
from typing import Iterable

from .errors import RecordSinkError
from ..models.schema import Transaction, ParsedStatement

logger = logging.getLogger(__name__)


def write_csv(transactions: Iterable[Transaction]) -> str:
    """
    Render transactions as CSV text.

    The first row is the header, followed by one row per transaction with
    columns in the fixed order of ``Transaction.csv_header()``.

    Args:
        transactions: Transactions in statement order

    Returns:
        CSV text
    """
    buffer = io.StringIO()
    writer = csv.writer(buffer, quoting=csv.QUOTE_MINIMAL, lineterminator="\n")
    rows = 0

    try:
        writer.writerow(Transaction.csv_header())
        for transaction in transactions:
            writer.writerow(transaction.as_row())
            rows += 1
    except (csv.Error, OSError) as e:
        raise RecordSinkError(f"Could not write CSV row {rows + 1}: {e}") from e

    logger.debug(f"Wrote {rows} CSV rows")
    return buffer.getvalue()


def write_json(statement: ParsedStatement, indent: int = 2) -> str:
    """Render a parsed statement as JSON."""
    try:
        return statement.model_dump_json(indent=indent)
    except ValueError as e:
        raise RecordSinkError(f"Could not encode statement as JSON: {e}") from e
