"""Input validation for the mortgage calculator.

The calculation functions assume their inputs are valid. The command line
and web front ends call the helpers below before running a calculation and
turn ``MortgageInputError`` into a user-facing message.
"""

from __future__ import annotations

import math

from .data_models import AdvancedMortgageInput, LoanTerms
from .engine import PART_PAYMENT_MODES

MAX_ANNUAL_RATE_PERCENT = 30.0


class MortgageInputError(ValueError):
    """Raised when user supplied loan parameters are out of range."""


def _require_non_negative(value: float, label: str) -> None:
    if not math.isfinite(value) or value < 0:
        raise MortgageInputError(f"{label} must be a finite, non-negative amount")


def validate_loan_terms(terms: LoanTerms) -> LoanTerms:
    if not math.isfinite(terms.principal) or terms.principal <= 0:
        raise MortgageInputError("Loan amount must be positive")
    if not 0 <= terms.annual_rate_percent <= MAX_ANNUAL_RATE_PERCENT:
        raise MortgageInputError(
            f"Annual rate must be between 0 and {MAX_ANNUAL_RATE_PERCENT:g} percent"
        )
    tenure = terms.tenure_months
    if not math.isfinite(tenure) or int(tenure) != tenure or tenure <= 0:
        raise MortgageInputError("Tenure must be a positive whole number of months")
    return terms


def validate_overpayment(monthly_overpayment: float) -> float:
    _require_non_negative(monthly_overpayment, "Monthly overpayment")
    return monthly_overpayment


def validate_part_payment(
    current_balance: float,
    remaining_tenure_months: int,
    annual_rate_percent: float,
    lump_sum_amount: float,
    original_loan_amount: float,
    mode: str = "installment",
) -> None:
    """Check the inputs of ``calculate_part_payment_impact``."""
    validate_loan_terms(LoanTerms(current_balance, annual_rate_percent, remaining_tenure_months))
    _require_non_negative(lump_sum_amount, "Lump sum")
    if not math.isfinite(original_loan_amount) or original_loan_amount <= 0:
        raise MortgageInputError("Original loan amount must be positive")
    if mode not in PART_PAYMENT_MODES:
        raise MortgageInputError(
            f"Part payment mode must be one of {', '.join(PART_PAYMENT_MODES)}; got {mode}"
        )


def validate_fixed_rate(
    fixed_rate_percent: float,
    fixed_rate_months: int,
    post_fixed_rate_percent: float,
    total_tenure_months: int,
) -> None:
    for rate in (fixed_rate_percent, post_fixed_rate_percent):
        if not 0 <= rate <= MAX_ANNUAL_RATE_PERCENT:
            raise MortgageInputError(
                f"Annual rate must be between 0 and {MAX_ANNUAL_RATE_PERCENT:g} percent"
            )
    if fixed_rate_months <= 0 or fixed_rate_months > total_tenure_months:
        raise MortgageInputError("Fixed rate months must be between 1 and the loan tenure")


def validate_advanced_input(data: AdvancedMortgageInput) -> AdvancedMortgageInput:
    """Check every enabled block of an ``AdvancedMortgageInput``."""
    validate_loan_terms(data.terms)
    if not 1 <= data.emi_payment_day <= 31:
        raise MortgageInputError("EMI payment day must be between 1 and 31")
    if data.fixed_rate is not None:
        validate_fixed_rate(
            data.fixed_rate.fixed_rate_percent,
            data.fixed_rate.fixed_rate_months,
            data.fixed_rate.variable_rate_percent,
            data.terms.tenure_months,
        )
    if data.lump_sum is not None:
        _require_non_negative(data.lump_sum.amount, "Lump sum")
    if data.extra_payments is not None:
        _require_non_negative(data.extra_payments.amount, "Extra payment")
        if data.extra_payments.start_date > data.extra_payments.end_date:
            raise MortgageInputError("Extra payment start date must not be after its end date")
    return data
