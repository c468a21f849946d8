"""
Test suite for the transaction state machine.
"""
import pytest

from applecard.core.parser import StatementParser, ParserState, parse_transactions
from applecard.core.errors import StatementFormatError
from applecard.models.schema import Transaction, StatementLayout


HEADER = ["Transactions", "Date", "Description", "Daily Cash"]
END = ["Total charges, credits and returns"]


def statement(*rows):
    """Build a line stream: banner and header, the given rows, then the end marker."""
    lines = list(HEADER)
    for row in rows:
        lines.extend(row)
    return lines + END


class TestTransactionRows:
    """Five-line rows (with Daily Cash) and four-line rows (without)."""

    def test_five_line_row(self):
        lines = statement(["Jan 1", "Coffee Shop", "2%", "$0.10", "$5.00"])

        result = parse_transactions(lines)

        assert result == [Transaction(
            date="Jan 1",
            location="Coffee Shop",
            transaction_amt="$5.00",
            cash_back_pct="2%",
            cash_back_amt="$0.10"
        )]
        assert result[0].promo_cash_amt == ""
        assert result[0].cash_adjustment_amt == ""

    def test_four_line_row_followed_by_next_row(self):
        lines = statement(
            ["Jan 1", "Payment", "-$100.00"],
            ["Jan 2", "Grocery", "3%", "$0.60", "$20.00"],
        )

        result = parse_transactions(lines)

        assert len(result) == 2
        assert result[0] == Transaction(date="Jan 1", location="Payment", transaction_amt="-$100.00")
        assert result[0].cash_back_pct == ""
        assert result[0].cash_back_amt == ""
        assert result[1].date == "Jan 2"
        assert result[1].transaction_amt == "$20.00"

    def test_negative_percentage_is_a_reward_line(self):
        lines = statement(["Jan 5", "Refund", "-2%", "-$0.40", "-$20.00"])

        result = parse_transactions(lines)

        assert result[0].cash_back_pct == "-2%"
        assert result[0].cash_back_amt == "-$0.40"
        assert result[0].transaction_amt == "-$20.00"

    def test_round_trip_example(self):
        lines = [
            "Transactions", "H1", "H2", "H3",
            "Jan 1", "Coffee Shop", "-5%", "$0.25", "$5.00",
            "Jan 2", "Grocery", "$20.00",
            "Total charges, credits and returns",
        ]

        result = parse_transactions(lines)

        assert result == [
            Transaction(date="Jan 1", location="Coffee Shop", transaction_amt="$5.00",
                        cash_back_pct="-5%", cash_back_amt="$0.25"),
            Transaction(date="Jan 2", location="Grocery", transaction_amt="$20.00"),
        ]

    def test_preamble_is_ignored(self):
        lines = ["Apple Card", "Statement", "Balance $25.00"] + statement(
            ["Jan 1", "Coffee Shop", "$5.00"]
        )

        result = parse_transactions(lines)

        assert [t.location for t in result] == ["Coffee Shop"]

    def test_field_text_is_verbatim(self):
        lines = statement(["  Jan 1 ", "CAFÉ  NOIR\tSF", "$1,005.00 "])

        result = parse_transactions(lines)

        assert result[0].date == "  Jan 1 "
        assert result[0].location == "CAFÉ  NOIR\tSF"
        assert result[0].transaction_amt == "$1,005.00 "


class TestAmendments:
    """Promo Daily Cash and Daily Cash Adjustment blocks amend the previous row."""

    def test_promo_block_amends_previous_row(self):
        lines = statement(
            ["Jan 1", "Apple Store", "3%", "$30.00", "$1,000.00"],
            ["Promo Daily Cash", "2%", "$20.00", "$0.00"],
            ["Jan 2", "Grocery", "$20.00"],
        )

        result = parse_transactions(lines)

        assert len(result) == 2
        assert result[0].location == "Apple Store"
        assert result[0].transaction_amt == "$1,000.00"
        assert result[0].cash_back_pct == "3%"
        assert result[0].promo_cash_pct == "2%"
        assert result[0].promo_cash_amt == "$20.00"
        assert result[1].promo_cash_pct == ""

    def test_adjustment_block_amends_previous_row(self):
        lines = statement(
            ["Jan 1", "Coffee Shop", "2%", "$0.10", "$5.00"],
            ["Daily Cash Adjustment", "-2%", "-$0.10"],
            ["Jan 2", "Grocery", "$20.00"],
        )

        result = parse_transactions(lines)

        assert len(result) == 2
        assert result[0].date == "Jan 1"
        assert result[0].location == "Coffee Shop"
        assert result[0].cash_back_amt == "$0.10"
        assert result[0].cash_adjustment_pct == "-2%"
        assert result[0].cash_adjustment_amt == "-$0.10"
        assert result[1] == Transaction(date="Jan 2", location="Grocery", transaction_amt="$20.00")

    def test_amendment_after_four_line_row(self):
        lines = statement(
            ["Jan 1", "Refund", "-$10.00"],
            ["Daily Cash Adjustment", "-1%", "-$0.10"],
        )

        result = parse_transactions(lines)

        assert len(result) == 1
        assert result[0].transaction_amt == "-$10.00"
        assert result[0].cash_adjustment_amt == "-$0.10"

    def test_amendment_does_not_touch_earlier_rows(self):
        lines = statement(
            ["Jan 1", "Coffee Shop", "$5.00"],
            ["Jan 2", "Apple Store", "3%", "$3.00", "$100.00"],
            ["Promo Daily Cash", "1%", "$1.00", "$0.00"],
        )

        result = parse_transactions(lines)

        assert result[0] == Transaction(date="Jan 1", location="Coffee Shop", transaction_amt="$5.00")
        assert result[1].promo_cash_amt == "$1.00"

    def test_orphan_promo_block_is_discarded(self):
        lines = statement(
            ["Promo Daily Cash", "2%", "$20.00", "$0.00"],
            ["Jan 2", "Grocery", "$20.00"],
        )
        parser = StatementParser()

        result = parser.parse(lines)

        assert result == [Transaction(date="Jan 2", location="Grocery", transaction_amt="$20.00")]
        assert len(parser.warnings) == 1
        assert "Promo Daily Cash" in parser.warnings[0].message
        assert parser.warnings[0].line_number == 5


class TestPageBreaksAndEnd:
    """Page breaks, the end marker and the states they lead to."""

    def test_page_break_resumes_after_banner(self):
        lines = (
            HEADER
            + ["Jan 1", "Coffee Shop", "2%", "$0.10", "$5.00"]
            + ["Page 1 /2", "Apple Card is issued by Goldman Sachs Bank USA", "Statement"]
            + HEADER
            + ["Jan 3", "Bookstore", "$12.00"]
            + END
        )
        parser = StatementParser()

        result = parser.parse(lines)

        assert [t.date for t in result] == ["Jan 1", "Jan 3"]
        assert result[1] == Transaction(date="Jan 3", location="Bookstore", transaction_amt="$12.00")
        assert parser.warnings == []

    def test_lines_after_page_break_are_ignored_until_banner(self):
        lines = (
            HEADER
            + ["Jan 1", "Coffee Shop", "$5.00"]
            + ["Page 2 /10", "Jan 9", "Not a row", "$99.00"]
            + END
        )
        parser = StatementParser()

        result = parser.parse(lines)

        assert len(result) == 1
        assert parser.state is ParserState.PAGE_BREAK
        assert len(parser.warnings) == 1

    def test_page_pattern_must_match_whole_line(self):
        lines = statement(["Page 1 /2 of statement", "Coffee Shop", "$5.00"])

        result = parse_transactions(lines)

        assert result[0].date == "Page 1 /2 of statement"

    def test_trailing_newline_is_not_a_percentage(self):
        lines = statement(["Jan 1\n", "Shop\n", "2%\n"])

        result = parse_transactions(lines)

        assert result[0].cash_back_pct == ""
        assert result[0].transaction_amt == "2%\n"

    def test_trailing_newline_is_not_a_page_break(self):
        lines = statement(["Jan 1", "Coffee Shop", "$5.00"], ["Page 1 /2\n", "Grocery", "$20.00"])
        parser = StatementParser()

        result = parser.parse(lines)

        assert [t.date for t in result] == ["Jan 1", "Page 1 /2\n"]
        assert parser.state is ParserState.END

    def test_end_marker_stops_parsing(self):
        lines = statement(["Jan 1", "Coffee Shop", "$5.00"]) + [
            "Jan 2", "Grocery", "$20.00",
            "Transactions", "Date", "Description", "Daily Cash",
            "Jan 3", "Bookstore", "$12.00",
        ]
        parser = StatementParser()

        result = parser.parse(lines)

        assert len(result) == 1
        assert parser.state is ParserState.END
        assert parser.warnings == []

    def test_end_marker_only_recognized_at_row_start(self):
        lines = statement(["Jan 1", "Total charges, credits and returns", "$5.00"])

        result = parse_transactions(lines)

        assert result[0].location == "Total charges, credits and returns"

    def test_generator_input_is_consumed_in_order(self):
        consumed = []

        def source():
            for line in statement(["Jan 1", "Coffee Shop", "$5.00"]) + ["Jan 2"]:
                consumed.append(line)
                yield line

        result = parse_transactions(source())

        assert len(result) == 1
        assert consumed[-1] == "Total charges, credits and returns"

    def test_parser_can_be_reused(self):
        parser = StatementParser()
        lines = statement(["Jan 1", "Coffee Shop", "$5.00"])

        first = parser.parse(lines)
        second = parser.parse(lines)

        assert first == second
        assert len(second) == 1


class TestLenientMode:
    """Layout anomalies are tolerated and reported as warnings."""

    def test_missing_banner(self):
        parser = StatementParser()

        result = parser.parse(["Apple Card", "Nothing to see"])

        assert result == []
        assert len(parser.warnings) == 1
        assert "'Transactions' section not found" in parser.warnings[0].message
        assert parser.warnings[0].state == "preamble"

    def test_truncated_row_is_dropped(self):
        parser = StatementParser()

        result = parser.parse(HEADER + ["Jan 1", "Coffee Shop", "$5.00", "Jan 2", "Grocery"])

        assert [t.date for t in result] == ["Jan 1"]
        assert len(parser.warnings) == 1
        assert parser.warnings[0].line_number == 9
        assert "row dropped" in parser.warnings[0].message

    def test_incomplete_row_is_not_emitted(self):
        parser = StatementParser()

        result = parser.parse(statement(["Jan 1", "", "$5.00"], ["Jan 2", "Grocery", "$20.00"]))

        assert [t.date for t in result] == ["Jan 2"]
        assert parser.warnings[0].line_number == 7
        for transaction in result:
            assert transaction.is_complete()

    def test_missing_end_marker(self):
        parser = StatementParser()

        result = parser.parse(HEADER + ["Jan 1", "Coffee Shop", "$5.00"])

        assert len(result) == 1
        assert "Total charges, credits and returns" in parser.warnings[0].message

    def test_empty_input(self):
        parser = StatementParser()

        assert parser.parse([]) == []
        assert len(parser.warnings) == 1


class TestStrictMode:
    """The first anomaly raises StatementFormatError."""

    def test_well_formed_statement_passes(self):
        lines = statement(["Jan 1", "Coffee Shop", "2%", "$0.10", "$5.00"])

        result = parse_transactions(lines, strict=True)

        assert len(result) == 1

    def test_missing_banner_raises(self):
        with pytest.raises(StatementFormatError) as excinfo:
            parse_transactions(["Apple Card"], strict=True)

        assert excinfo.value.state == "preamble"
        assert excinfo.value.line_number == 1

    def test_orphan_adjustment_raises(self):
        lines = statement(["Daily Cash Adjustment", "-2%", "-$0.10"])

        with pytest.raises(StatementFormatError) as excinfo:
            parse_transactions(lines, strict=True)

        assert excinfo.value.line_number == 5
        assert "Daily Cash Adjustment" in str(excinfo.value)

    def test_incomplete_row_raises(self):
        with pytest.raises(StatementFormatError) as excinfo:
            parse_transactions(statement(["Jan 1", "", "$5.00"]), strict=True)

        assert excinfo.value.line_number == 7
        assert str(excinfo.value).startswith("line 7:")

    def test_truncated_promo_block_raises(self):
        lines = HEADER + ["Jan 1", "Apple Store", "$100.00", "Promo Daily Cash", "2%"]

        with pytest.raises(StatementFormatError) as excinfo:
            parse_transactions(lines, strict=True)

        assert excinfo.value.state == "promo"


class TestLayout:
    """The state machine follows the configured layout."""

    def test_four_header_lines(self):
        layout = StatementLayout(header_lines=4)
        lines = ["Transactions", "Date", "Description", "Daily Cash", "Amount",
                 "Jan 1", "Coffee Shop", "$5.00"] + END

        result = parse_transactions(lines, layout=layout)

        assert result == [Transaction(date="Jan 1", location="Coffee Shop", transaction_amt="$5.00")]

    def test_custom_markers(self):
        layout = StatementLayout(
            banner="Activity",
            end_marker="Total activity",
            page_break_pattern=r"^Page [0-9]+ of [0-9]+$"
        )
        lines = ["Activity", "A", "B", "C", "Jan 1", "Coffee Shop", "$5.00",
                 "Page 1 of 2", "Activity", "A", "B", "C", "Jan 2", "Grocery", "$20.00",
                 "Total activity"]
        parser = StatementParser(layout)

        result = parser.parse(lines)

        assert [t.date for t in result] == ["Jan 1", "Jan 2"]
        assert parser.state is ParserState.END

    def test_from_template_ignores_unknown_keys(self):
        layout = StatementLayout.from_template({
            "transactions": {"header_lines": 4, "columns": ["date"]}
        })

        assert layout.header_lines == 4
        assert layout.banner == "Transactions"

    def test_from_empty_template(self):
        assert StatementLayout.from_template(None) == StatementLayout()
