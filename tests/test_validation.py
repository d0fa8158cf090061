"""
Tests for input validation.
"""

from datetime import date

import pytest

from mortgage_calc.data_models import (
    AdvancedMortgageInput,
    ExtraPaymentWindow,
    FixedRatePeriod,
    LoanTerms,
    LumpSum,
)
from mortgage_calc.validation import (
    MortgageInputError,
    validate_advanced_input,
    validate_fixed_rate,
    validate_loan_terms,
    validate_overpayment,
    validate_part_payment,
)

TERMS = LoanTerms(principal=300000, annual_rate_percent=5, tenure_months=360)


class TestLoanTerms:
    """Test the basic loan limits."""

    def test_valid_terms_pass_through(self):
        assert validate_loan_terms(TERMS) is TERMS

    def test_zero_rate_allowed(self):
        validate_loan_terms(LoanTerms(100000, 0, 120))

    @pytest.mark.parametrize(
        "terms",
        [
            LoanTerms(0, 5, 360),
            LoanTerms(-1000, 5, 360),
            LoanTerms(300000, -1, 360),
            LoanTerms(300000, 31, 360),
            LoanTerms(300000, 5, 0),
            LoanTerms(300000, 5, 12.5),
        ],
    )
    def test_rejects_out_of_range(self, terms):
        with pytest.raises(MortgageInputError):
            validate_loan_terms(terms)

    def test_error_is_a_value_error(self):
        with pytest.raises(ValueError):
            validate_loan_terms(LoanTerms(0, 5, 360))


class TestModifiers:
    """Test overpayment, part payment and fixed rate checks."""

    def test_overpayment(self):
        assert validate_overpayment(0) == 0
        with pytest.raises(MortgageInputError):
            validate_overpayment(-50)

    def test_part_payment(self):
        validate_part_payment(100000, 120, 5, 10000, 100000)
        with pytest.raises(MortgageInputError):
            validate_part_payment(100000, 120, 5, -1, 100000)
        with pytest.raises(MortgageInputError):
            validate_part_payment(100000, 120, 5, 10000, 0)
        with pytest.raises(MortgageInputError, match="mode"):
            validate_part_payment(100000, 120, 5, 10000, 100000, mode="sideways")

    def test_fixed_rate_months_within_tenure(self):
        validate_fixed_rate(3, 360, 6, 360)
        with pytest.raises(MortgageInputError):
            validate_fixed_rate(3, 0, 6, 360)
        with pytest.raises(MortgageInputError):
            validate_fixed_rate(3, 361, 6, 360)

    def test_fixed_rate_limits(self):
        with pytest.raises(MortgageInputError):
            validate_fixed_rate(3, 24, 45, 360)


class TestAdvancedInput:
    """Test validation of the date-aware input."""

    def make(self, **kwargs):
        params = {"terms": TERMS, "loan_start_date": date(2026, 1, 1)}
        params.update(kwargs)
        return AdvancedMortgageInput(**params)

    def test_minimal_input(self):
        data = self.make()
        assert validate_advanced_input(data) is data

    @pytest.mark.parametrize("day", [0, 32])
    def test_payment_day_range(self, day):
        with pytest.raises(MortgageInputError):
            validate_advanced_input(self.make(emi_payment_day=day))

    def test_window_order(self):
        window = ExtraPaymentWindow(100, date(2027, 1, 1), date(2026, 1, 1))
        with pytest.raises(MortgageInputError):
            validate_advanced_input(self.make(extra_payments=window))

    def test_single_day_window(self):
        window = ExtraPaymentWindow(100, date(2026, 1, 1), date(2026, 1, 1))
        validate_advanced_input(self.make(extra_payments=window))

    def test_negative_lump_sum(self):
        with pytest.raises(MortgageInputError):
            validate_advanced_input(self.make(lump_sum=LumpSum(-5, date(2026, 5, 1))))

    def test_fixed_period_checked(self):
        with pytest.raises(MortgageInputError):
            validate_advanced_input(self.make(fixed_rate=FixedRatePeriod(0, 3, 6)))


class TestNonFiniteValues:
    """NaN and infinity never pass validation."""

    @pytest.mark.parametrize("value", [float("nan"), float("inf")])
    def test_principal(self, value):
        with pytest.raises(MortgageInputError):
            validate_loan_terms(LoanTerms(value, 5, 120))

    @pytest.mark.parametrize("value", [float("nan"), float("inf")])
    def test_rate(self, value):
        with pytest.raises(MortgageInputError):
            validate_loan_terms(LoanTerms(100000, value, 120))

    @pytest.mark.parametrize("value", [float("nan"), float("inf")])
    def test_tenure(self, value):
        with pytest.raises(MortgageInputError):
            validate_loan_terms(LoanTerms(100000, 5, value))

    @pytest.mark.parametrize("value", [float("nan"), float("inf")])
    def test_amounts(self, value):
        with pytest.raises(MortgageInputError):
            validate_overpayment(value)
        with pytest.raises(MortgageInputError):
            validate_part_payment(100000, 120, 5, value, 100000)
        with pytest.raises(MortgageInputError):
            validate_part_payment(100000, 120, 5, 1000, value)

    def test_advanced_blocks(self):
        start = date(2026, 1, 1)
        nan = float("nan")
        with pytest.raises(MortgageInputError):
            validate_advanced_input(
                AdvancedMortgageInput(TERMS, start, lump_sum=LumpSum(nan, date(2026, 5, 1)))
            )
        with pytest.raises(MortgageInputError):
            validate_advanced_input(
                AdvancedMortgageInput(
                    TERMS, start, extra_payments=ExtraPaymentWindow(nan, start, date(2026, 5, 1))
                )
            )
