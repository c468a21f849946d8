"""
Transaction state machine over the plain-text line stream of a statement.

PDF text extraction loses all layout, so a statement arrives as one flat
sequence of lines.  The Apple Card layout is regular enough to rebuild rows
from line order alone:

    Transactions                      banner, then ``header_lines`` header lines
    Jan 1                             date
    Coffee Shop                       location
    2%                                Daily Cash percentage (optional)
    $0.10                             Daily Cash amount (only after a percentage)
    $5.00                             amount
    Promo Daily Cash                  optional block amending the previous row
    ...
    Page 2 /3                         page break, followed by a reprinted banner
    ...
    Total charges, credits and returns

Every state counts lines from the line it was entered on (its anchor), so
each state only needs to know the relative offset of the line in front of it.
"""
import re
import logging
from enum import Enum
from typing import Iterable, List, Optional

from .errors import StatementFormatError
from ..models.schema import Transaction, StatementLayout, ParseWarning

logger = logging.getLogger(__name__)


class ParserState(str, Enum):
    PREAMBLE = "preamble"
    TX_HEADER = "tx_header"
    TX_LIST = "tx_list"
    CASH_ADJ = "cash_adj"
    PROMO = "promo"
    PAGE_BREAK = "page_break"
    END = "end"


class StatementParser:
    """
    Rebuilds transactions from statement lines in a single forward pass.

    In lenient mode (the default) lines that do not fit the layout are
    tolerated: the anomaly is logged, recorded in ``warnings`` and incomplete
    rows are dropped.  In strict mode the first anomaly raises
    ``StatementFormatError``.
    """

    def __init__(self, layout: Optional[StatementLayout] = None, strict: bool = False):
        self.layout = layout or StatementLayout()
        self.strict = strict
        self._page_break_re = re.compile(self.layout.page_break_pattern)
        self._percent_re = re.compile(self.layout.percent_pattern)
        self._reset()

    def _reset(self):
        self.state = ParserState.PREAMBLE
        self.anchor = 0
        self.draft = Transaction()
        self.transactions: List[Transaction] = []
        self.warnings: List[ParseWarning] = []
        self._amending = False
        self._last_index = -1

    def parse(self, lines: Iterable[str]) -> List[Transaction]:
        """
        Parse statement lines into transactions.

        Args:
            lines: Statement text lines in reading order; consumed once

        Returns:
            Transactions in statement order
        """
        self._reset()

        for index, line in enumerate(lines):
            self._last_index = index
            self._step(index, line)
            if self.state is ParserState.END:
                break

        self._finish()
        logger.info(f"Parsed {len(self.transactions)} transactions "
                    f"({len(self.warnings)} warnings)")
        return list(self.transactions)

    def _step(self, index: int, line: str):
        offset = index - self.anchor
        state = self.state

        if state in (ParserState.PREAMBLE, ParserState.PAGE_BREAK):
            if line == self.layout.banner:
                if self.layout.header_lines:
                    self._enter(ParserState.TX_HEADER, index)
                else:
                    self._enter(ParserState.TX_LIST, index)

        elif state is ParserState.TX_HEADER:
            # The last header line becomes the anchor of the row list
            if offset == self.layout.header_lines:
                self._enter(ParserState.TX_LIST, index)

        elif state is ParserState.TX_LIST:
            self._step_row(index, offset, line)

        elif state is ParserState.PROMO:
            if offset == 1:
                self.draft.promo_cash_pct = line
            elif offset == 2:
                self.draft.promo_cash_amt = line
            elif offset == 3:
                self._finish_amendment(index)

        elif state is ParserState.CASH_ADJ:
            if offset == 1:
                self.draft.cash_adjustment_pct = line
            elif offset == 2:
                self.draft.cash_adjustment_amt = line
                self._finish_amendment(index)

    def _step_row(self, index: int, offset: int, line: str):
        layout = self.layout

        if offset == 1:
            if line == layout.end_marker:
                self._enter(ParserState.END, index)
                return
            if self._page_break_re.fullmatch(line):
                self.draft = Transaction()
                self._enter(ParserState.PAGE_BREAK, index)
                return
            if line == layout.promo_marker:
                self._begin_amendment(ParserState.PROMO, index, line)
                return
            if line == layout.adjustment_marker:
                self._begin_amendment(ParserState.CASH_ADJ, index, line)
                return
            self.draft.date = line

        elif offset == 2:
            self.draft.location = line

        elif offset == 3:
            # Rows without Daily Cash have no percentage line and end here
            if self._percent_re.fullmatch(line):
                self.draft.cash_back_pct = line
            else:
                self.draft.transaction_amt = line
                self._emit(index)

        elif offset == 4:
            self.draft.cash_back_amt = line

        elif offset == 5:
            self.draft.transaction_amt = line
            self._emit(index)

    def _enter(self, state: ParserState, index: int):
        if state is not self.state:
            logger.debug(f"line {index + 1}: {self.state.value} -> {state.value}")
        self.state = state
        self.anchor = index

    def _emit(self, index: int):
        draft, self.draft = self.draft, Transaction()
        if draft.is_complete():
            self.transactions.append(draft)
        else:
            self._anomaly(index, f"dropping incomplete transaction "
                                 f"(date={draft.date!r}, location={draft.location!r}, "
                                 f"amount={draft.transaction_amt!r})")
        self._enter(ParserState.TX_LIST, index)

    def _begin_amendment(self, state: ParserState, index: int, marker: str):
        if self.transactions:
            self.draft = self.transactions[-1].model_copy()
            self._amending = True
        else:
            self._anomaly(index, f"'{marker}' block has no preceding transaction")
            self.draft = Transaction()
            self._amending = False
        self._enter(state, index)

    def _finish_amendment(self, index: int):
        if self._amending:
            self.transactions[-1] = self.draft
        self.draft = Transaction()
        self._amending = False
        self._enter(ParserState.TX_LIST, index)

    def _finish(self):
        layout = self.layout
        state = self.state

        if state is ParserState.END:
            return
        if state is ParserState.PREAMBLE:
            message = f"'{layout.banner}' section not found"
        elif state is ParserState.TX_HEADER:
            message = "input ended inside the transaction header"
        elif state is ParserState.PAGE_BREAK:
            message = f"input ended after a page break without a new '{layout.banner}' banner"
        elif state is ParserState.PROMO:
            message = f"input ended inside a '{layout.promo_marker}' block"
        elif state is ParserState.CASH_ADJ:
            message = f"input ended inside a '{layout.adjustment_marker}' block"
        elif not self.draft.is_empty():
            message = (f"input ended inside a transaction row "
                       f"(date={self.draft.date!r}); row dropped")
        else:
            message = f"input ended before '{layout.end_marker}'"

        self.draft = Transaction()
        self._anomaly(self._last_index, message)

    def _anomaly(self, index: int, message: str):
        line_number = index + 1
        if self.strict:
            raise StatementFormatError(message, line_number=line_number, state=self.state.value)
        logger.warning(f"line {line_number} ({self.state.value}): {message}")
        self.warnings.append(ParseWarning(
            line_number=line_number,
            state=self.state.value,
            message=message
        ))


def parse_transactions(lines: Iterable[str], layout: Optional[StatementLayout] = None,
                       strict: bool = False) -> List[Transaction]:
    """
    Convenience function to parse statement lines.

    Args:
        lines: Statement text lines in reading order
        layout: Statement layout (defaults to the Apple Card layout)
        strict: Raise StatementFormatError on layout anomalies

    Returns:
        List of Transaction objects
    """
    return StatementParser(layout, strict).parse(lines)
