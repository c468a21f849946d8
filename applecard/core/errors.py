"""
Exceptions raised while converting a statement.
"""
from typing import Optional


class StatementError(RuntimeError):
    pass


class LineSourceError(StatementError):
    """The PDF could not be opened or its text could not be extracted."""


class RecordSinkError(StatementError):
    """The parsed transactions could not be encoded."""


class StatementFormatError(StatementError):
    """A line did not fit the expected statement layout (strict mode only)."""

    def __init__(self, message: str, line_number: Optional[int] = None,
                 state: Optional[str] = None):
        self.line_number = line_number
        self.state = state
        if line_number is not None:
            message = f"line {line_number}: {message}"
        super().__init__(message)
