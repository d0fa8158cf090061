"""Core calculation engine for the mortgage calculator.

This module implements the financial logic required to build amortization
schedules for fixed-rate annuity loans and to evaluate the effect of
prepayments on them: a constant monthly overpayment, a one-time part payment
and an initial fixed-rate period followed by a different rate. Results are
returned as lists of ``PaymentRecord`` objects wrapped in result dataclasses.

Inputs are assumed to be validated by the caller (see ``validation``). Every
function is pure and returns freshly built objects.
"""

from __future__ import annotations

import logging
import math
import sys
from typing import List, Optional, Tuple

from .data_models import (
    FixedRateResult,
    OverpaymentResult,
    PartPaymentResult,
    PaymentRecord,
)

logger = logging.getLogger(__name__)

# Residual balances below half a cent are absorbed by the period that left
# them, so floating point noise never produces a phantom extra period.
BALANCE_EPSILON = 0.005

# Share of the original loan amount that may be prepaid at once.
MAX_PART_PAYMENT_SHARE = 0.10

PART_PAYMENT_MODES = ("installment", "term")


def monthly_rate(annual_rate_percent: float) -> float:
    """Convert an annual rate in percent into a monthly decimal rate."""
    return annual_rate_percent / 12 / 100


def compute_emi(principal: float, annual_rate_percent: float, term_months: int) -> float:
    """Return the equal monthly installment for a loan.

    The formula is:

        EMI = P * (r * (1 + r)^n) / ((1 + r)^n - 1)

    where ``P`` is the principal, ``r`` is the monthly interest rate and
    ``n`` is the number of payments. When the interest rate is zero, the
    payment simplifies to ``P / n``.

    The growth term ``(1 + r)^n - 1`` is evaluated as
    ``expm1(n * log1p(r))`` so that tiny positive rates keep their
    precision instead of cancelling to zero.
    """
    rate = monthly_rate(annual_rate_percent)
    growth = math.expm1(term_months * math.log1p(rate))
    # Below machine epsilon the interest share is not representable
    if growth < sys.float_info.epsilon:
        return principal / term_months
    return principal * (rate / growth) * (1 + growth)


def total_interest_and_amount(principal: float, emi: float, tenure_months: int) -> Tuple[float, float]:
    """Return ``(total_interest, total_amount)`` of a loan paid at ``emi``."""
    total_amount = emi * tenure_months
    return total_amount - principal, total_amount


def savings_percentage(saved: float, baseline: float) -> float:
    """Return ``saved`` as a percentage of ``baseline`` (0 for a zero baseline)."""
    if abs(baseline) < BALANCE_EPSILON:
        return 0.0
    return saved / baseline * 100


def generate_schedule(
    principal: float,
    annual_rate_percent: float,
    tenure_months: int,
    monthly_overpayment: float = 0.0,
    emi: Optional[float] = None,
) -> List[PaymentRecord]:
    """Simulate the loan month by month and return its amortization schedule.

    Parameters
    ----------
    principal: float
        Balance at the start of the schedule.
    annual_rate_percent: float
        Annual nominal interest rate in percent.
    tenure_months: int
        Nominal term. The EMI is derived from it unless ``emi`` is given, and
        the simulation never runs more than twice this number of periods.
    monthly_overpayment: float
        Extra amount applied to principal every period.
    emi: float, optional
        Installment to use instead of the one derived from the terms.

    Returns
    -------
    List[PaymentRecord]
        One record per period. The last record of a fully repaid loan has a
        balance of exactly zero; a schedule cut by the iteration cap keeps
        its outstanding balance.
    """
    monthly_payment = compute_emi(principal, annual_rate_percent, tenure_months) if emi is None else emi
    rate = monthly_rate(annual_rate_percent)
    max_periods = tenure_months * 2

    schedule: List[PaymentRecord] = []
    balance = principal
    while balance > 0 and len(schedule) < max_periods:
        interest_payment = balance * rate
        principal_payment = monthly_payment - interest_payment + monthly_overpayment
        # Final period pays exactly what is left
        if principal_payment > balance or balance - principal_payment < BALANCE_EPSILON:
            principal_payment = balance
        balance -= principal_payment

        month = len(schedule) + 1
        schedule.append(
            PaymentRecord(
                month=month,
                year=(month - 1) // 12,
                payment=interest_payment + principal_payment,
                principal=principal_payment,
                interest=interest_payment,
                balance=max(0.0, balance),
            )
        )

    if balance > 0:
        logger.debug(
            "Schedule truncated at %d periods with %.2f outstanding", len(schedule), balance
        )
    else:
        logger.debug("Schedule repaid in %d periods (EMI %.2f)", len(schedule), monthly_payment)
    return schedule


def calculate_overpayment_impact(
    principal: float,
    annual_rate_percent: float,
    tenure_months: int,
    monthly_overpayment: float,
) -> OverpaymentResult:
    """Compare the plain loan with the same loan plus a constant overpayment.

    The baseline interest is computed analytically (``EMI * n - P``); only
    the schedule with the overpayment is simulated.
    """
    original_emi = compute_emi(principal, annual_rate_percent, tenure_months)
    original_total_interest, _ = total_interest_and_amount(principal, original_emi, tenure_months)

    schedule = generate_schedule(principal, annual_rate_percent, tenure_months, monthly_overpayment)
    new_tenure_months = len(schedule)
    new_total_interest = sum(record.interest for record in schedule)
    interest_saved = original_total_interest - new_total_interest

    return OverpaymentResult(
        original_tenure_months=tenure_months,
        new_tenure_months=new_tenure_months,
        tenure_saved=tenure_months - new_tenure_months,
        original_total_interest=original_total_interest,
        new_total_interest=new_total_interest,
        interest_saved=interest_saved,
        interest_saved_percentage=savings_percentage(interest_saved, original_total_interest),
        monthly_overpayment=monthly_overpayment,
        original_monthly_emi=original_emi,
        schedule=schedule,
    )


def calculate_part_payment_impact(
    current_balance: float,
    remaining_tenure_months: int,
    annual_rate_percent: float,
    lump_sum_amount: float,
    original_loan_amount: float,
    mode: str = "installment",
) -> PartPaymentResult:
    """Evaluate a one-time payment against the outstanding balance.

    ``mode="installment"`` re-amortizes the reduced balance over the same
    remaining tenure (lower EMI); ``mode="term"`` keeps the current EMI and
    lets the loan finish earlier. The 10 % cap on the payment is reported
    through ``is_within_limit`` but never enforced.
    """
    max_allowed_payment = original_loan_amount * MAX_PART_PAYMENT_SHARE
    is_within_limit = lump_sum_amount <= max_allowed_payment

    original_emi = compute_emi(current_balance, annual_rate_percent, remaining_tenure_months)
    original_total_interest, _ = total_interest_and_amount(
        current_balance, original_emi, remaining_tenure_months
    )

    new_balance = max(0.0, current_balance - lump_sum_amount)
    if new_balance == 0:
        # Nothing left to amortize; re-deriving an EMI would divide by zero
        return PartPaymentResult(
            original_balance=current_balance,
            lump_sum_amount=lump_sum_amount,
            new_balance=0.0,
            principal_reduction=current_balance,
            original_tenure_months=remaining_tenure_months,
            new_tenure_months=0,
            tenure_saved=remaining_tenure_months,
            original_total_interest=original_total_interest,
            new_total_interest=0.0,
            interest_saved=original_total_interest,
            interest_saved_percentage=savings_percentage(original_total_interest, original_total_interest),
            original_monthly_emi=original_emi,
            new_monthly_emi=0.0,
            max_allowed_payment=max_allowed_payment,
            is_within_limit=is_within_limit,
            mode=mode,
            schedule=[],
        )

    if mode == "term":
        new_emi = original_emi
        schedule = generate_schedule(
            new_balance, annual_rate_percent, remaining_tenure_months, emi=original_emi
        )
    else:
        new_emi = compute_emi(new_balance, annual_rate_percent, remaining_tenure_months)
        schedule = generate_schedule(new_balance, annual_rate_percent, remaining_tenure_months)

    new_tenure_months = len(schedule)
    new_total_interest = sum(record.interest for record in schedule)
    interest_saved = original_total_interest - new_total_interest

    return PartPaymentResult(
        original_balance=current_balance,
        lump_sum_amount=lump_sum_amount,
        new_balance=new_balance,
        principal_reduction=lump_sum_amount,
        original_tenure_months=remaining_tenure_months,
        new_tenure_months=new_tenure_months,
        tenure_saved=remaining_tenure_months - new_tenure_months,
        original_total_interest=original_total_interest,
        new_total_interest=new_total_interest,
        interest_saved=interest_saved,
        interest_saved_percentage=savings_percentage(interest_saved, original_total_interest),
        original_monthly_emi=original_emi,
        new_monthly_emi=new_emi,
        max_allowed_payment=max_allowed_payment,
        is_within_limit=is_within_limit,
        mode=mode,
        schedule=schedule,
    )


def _continue_numbering(records: List[PaymentRecord], offset: int) -> List[PaymentRecord]:
    renumbered = []
    for record in records:
        month = record.month + offset
        renumbered.append(
            PaymentRecord(
                month=month,
                year=(month - 1) // 12,
                payment=record.payment,
                principal=record.principal,
                interest=record.interest,
                balance=record.balance,
            )
        )
    return renumbered


def calculate_fixed_rate_impact(
    principal: float,
    fixed_rate_percent: float,
    fixed_rate_months: int,
    post_fixed_rate_percent: float,
    total_tenure_months: int,
    monthly_overpayment: float = 0.0,
) -> FixedRateResult:
    """Simulate a fixed-rate period followed by re-amortization at a new rate.

    During the fixed period the loan is paid at the EMI of the whole term at
    the fixed rate, plus ``monthly_overpayment``. The balance left when the
    period ends is re-amortized at ``post_fixed_rate_percent`` over the
    remaining months, without overpayment. The baseline is the whole term at
    the fixed rate.
    """
    fixed_emi = compute_emi(principal, fixed_rate_percent, total_tenure_months)
    fixed_schedule = generate_schedule(
        principal, fixed_rate_percent, total_tenure_months, monthly_overpayment, emi=fixed_emi
    )[:fixed_rate_months]

    balance_after_fixed = fixed_schedule[-1].balance if fixed_schedule else principal
    interest_during_fixed = sum(record.interest for record in fixed_schedule)
    remaining_months = total_tenure_months - fixed_rate_months

    schedule = list(fixed_schedule)
    post_fixed_emi = 0.0
    if balance_after_fixed > 0 and remaining_months > 0:
        post_fixed_emi = compute_emi(balance_after_fixed, post_fixed_rate_percent, remaining_months)
        post_schedule = generate_schedule(balance_after_fixed, post_fixed_rate_percent, remaining_months)
        schedule.extend(_continue_numbering(post_schedule, len(fixed_schedule)))

    original_total_interest, _ = total_interest_and_amount(principal, fixed_emi, total_tenure_months)
    new_total_interest = sum(record.interest for record in schedule)

    return FixedRateResult(
        original_tenure_months=total_tenure_months,
        fixed_rate_end_month=fixed_rate_months,
        principal_after_fixed_period=balance_after_fixed,
        interest_during_fixed_period=interest_during_fixed,
        remaining_tenure_after_fixed=remaining_months,
        original_total_interest=original_total_interest,
        new_total_interest=new_total_interest,
        total_interest_saved=original_total_interest - new_total_interest,
        fixed_period_emi=fixed_emi,
        post_fixed_emi=post_fixed_emi,
        schedule=schedule,
    )
