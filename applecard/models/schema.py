"""
Pydantic models for Apple Card statement data.
"""
from typing import List, Dict, Any, Optional, Tuple
from pydantic import BaseModel, Field


# CSV column name -> Transaction attribute, in output order
CSV_COLUMNS: List[Tuple[str, str]] = [
    ("date", "date"),
    ("location", "location"),
    ("amount", "transaction_amt"),
    ("cash_back_pct", "cash_back_pct"),
    ("cash_back_amt", "cash_back_amt"),
    ("promo_cash_amt", "promo_cash_amt"),
    ("promo_cash_pct", "promo_cash_pct"),
    ("cash_adj_amt", "cash_adjustment_amt"),
    ("cash_adj_pct", "cash_adjustment_pct"),
]


class Transaction(BaseModel):
    """Individual transaction record.

    Every value is the verbatim text of a statement line; nothing is parsed.
    """
    date: str = ""
    location: str = ""
    transaction_amt: str = ""
    cash_back_pct: str = ""
    cash_back_amt: str = ""
    promo_cash_amt: str = ""
    promo_cash_pct: str = ""
    cash_adjustment_amt: str = ""
    cash_adjustment_pct: str = ""

    @staticmethod
    def csv_header() -> List[str]:
        return [column for column, _ in CSV_COLUMNS]

    def as_row(self) -> List[str]:
        return [getattr(self, attr) for _, attr in CSV_COLUMNS]

    def is_complete(self) -> bool:
        """True when the mandatory date, location and amount are all present."""
        return bool(self.date and self.location and self.transaction_amt)

    def is_empty(self) -> bool:
        return not any(self.as_row())


class StatementLayout(BaseModel):
    """Line markers and patterns the transaction state machine keys on."""
    banner: str = "Transactions"
    header_lines: int = Field(3, ge=0)
    end_marker: str = "Total charges, credits and returns"
    page_break_pattern: str = r"^Page [0-9]+ /[0-9]+$"
    percent_pattern: str = r"^-?[0-9]+%$"
    promo_marker: str = "Promo Daily Cash"
    adjustment_marker: str = "Daily Cash Adjustment"

    @classmethod
    def from_template(cls, template: Optional[Dict[str, Any]]) -> "StatementLayout":
        """
        Build a layout from the ``transactions`` section of a template.

        Args:
            template: Parsed template YAML (may be None)

        Returns:
            StatementLayout with template values over the defaults
        """
        if not template:
            return cls()
        section = template.get('transactions') or {}
        return cls(**{k: v for k, v in section.items() if k in cls.model_fields})


class ParseWarning(BaseModel):
    """A structural anomaly tolerated in lenient mode."""
    line_number: int
    state: str
    message: str


class ParsedStatement(BaseModel):
    """Complete parse result for one statement."""
    template_id: str
    source: Optional[str] = None
    transactions: List[Transaction] = Field(default_factory=list)
    warnings: List[ParseWarning] = Field(default_factory=list)
