"""Tests for user input parsing."""

import pytest
from decimal import Decimal

from telexpenses import texts
from telexpenses.validation import (
    InvalidAmountError,
    InvalidMonthError,
    InvalidYearError,
    PeriodQuery,
    UserInputError,
    parse_amount,
    parse_period_query,
)


class TestParseAmount:
    """Tests for amount parsing."""

    @pytest.mark.parametrize("text", ["12,50", "12.50", " 12.5 "])
    def test_comma_or_period(self, text):
        assert parse_amount(text) == Decimal("12.5")

    def test_integer(self):
        assert parse_amount("7") == Decimal("7")

    def test_zero_allowed(self):
        assert parse_amount("0") == Decimal("0")

    @pytest.mark.parametrize("text", ["abc", "", "12,50€", "1.2.3", "NaN", "Infinity"])
    def test_unparsable(self, text):
        with pytest.raises(InvalidAmountError):
            parse_amount(text)

    def test_negative_rejected(self):
        with pytest.raises(InvalidAmountError):
            parse_amount("-3")

    @pytest.mark.parametrize("text", ["7.205", "0.001", "1e-5"])
    def test_more_than_two_decimals_rejected(self, text):
        with pytest.raises(InvalidAmountError):
            parse_amount(text)

    @pytest.mark.parametrize("text", ["1e12", "10000000000", "9999999999.995"])
    def test_too_large_rejected(self, text):
        with pytest.raises(InvalidAmountError):
            parse_amount(text)

    def test_largest_amount_accepted(self):
        assert parse_amount("9999999999.99") == Decimal("9999999999.99")

    def test_trailing_zeros_accepted(self):
        amount = parse_amount("7.200")
        assert amount == Decimal("7.20")
        assert str(amount) == "7.20"

    def test_error_carries_reask_text(self):
        with pytest.raises(UserInputError) as exc_info:
            parse_amount("abc")
        assert exc_info.value.reply == texts.INVALID_AMOUNT


class TestUserInputError:
    """Tests for the re-ask texts carried by input errors."""

    def test_base_reply_is_neutral(self):
        assert UserInputError("unusable").reply == texts.INVALID_INPUT

    def test_subclasses_keep_their_reply(self):
        assert InvalidAmountError("x").reply == texts.INVALID_AMOUNT
        assert InvalidYearError("x").reply == texts.INVALID_YEAR
        assert InvalidMonthError("x").reply == texts.INVALID_MONTH

    def test_explicit_reply(self):
        assert UserInputError("x", reply=texts.CANCELLED).reply == texts.CANCELLED


class TestParsePeriodQuery:
    """Tests for the '<year> [<month>] [<category>]' format."""

    def test_year_month_category(self):
        assert parse_period_query("2021 5 Ψιλικά") == PeriodQuery(
            year=2021, month=5, category_text="Ψιλικά"
        )

    def test_year_only(self):
        assert parse_period_query("2021") == PeriodQuery(year=2021)

    def test_year_and_month(self):
        assert parse_period_query("2021 12") == PeriodQuery(year=2021, month=12)

    def test_extra_whitespace(self):
        assert parse_period_query("  2021   5  ") == PeriodQuery(year=2021, month=5)

    def test_multi_word_category(self):
        query = parse_period_query("2021 5 Σούπερ Λαική")
        assert query.category_text == "Σούπερ Λαική"

    @pytest.mark.parametrize("text", ["", "   ", "abc", "20x1 5", "-2021", "0"])
    def test_bad_year(self, text):
        with pytest.raises(InvalidYearError) as exc_info:
            parse_period_query(text)
        assert exc_info.value.reply == texts.INVALID_YEAR

    @pytest.mark.parametrize("text", ["2021 may", "2021 0", "2021 13", "2021 -1"])
    def test_bad_month(self, text):
        with pytest.raises(InvalidMonthError) as exc_info:
            parse_period_query(text)
        assert exc_info.value.reply == texts.INVALID_MONTH


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
