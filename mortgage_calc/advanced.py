"""Date-aware mortgage engine.

The advanced engine walks the loan month by month on real calendar dates.
On top of the plain annuity it supports:

* a fixed-rate period followed by a variable rate,
* a one-time lump sum applied in the calendar month of its date,
* a recurring extra payment for payments dated inside a window.

The installment is the EMI of the base terms and stays constant over the
whole horizon, including across the fixed-to-variable boundary: a change of
rate only changes how each installment splits between interest and
principal, and therefore how fast the loan is repaid.
"""

from __future__ import annotations

import logging
from datetime import date, timedelta
from typing import List, Optional

from .data_models import (
    AdvancedCalculationResult,
    AdvancedMortgageInput,
    FixedRatePeriod,
    PaymentDetail,
)
from .engine import (
    BALANCE_EPSILON,
    compute_emi,
    monthly_rate,
    savings_percentage,
    total_interest_and_amount,
)
from .utils import add_months, in_window, payment_date_for, same_month

logger = logging.getLogger(__name__)


def fixed_rate_end_date(period: FixedRatePeriod, loan_start_date: date) -> date:
    """Return the last date covered by the fixed rate.

    Without an explicit end date the fixed rate covers ``fixed_rate_months``
    whole months from the loan start, up to the day before the same day of
    the month ``fixed_rate_months`` later.
    """
    if period.fixed_rate_end_date is not None:
        return period.fixed_rate_end_date
    return add_months(loan_start_date, period.fixed_rate_months) - timedelta(days=1)


def effective_rate(
    payment_date: date,
    base_rate_percent: float,
    period: Optional[FixedRatePeriod],
    fixed_end: Optional[date],
) -> float:
    """Return the annual rate in force for a payment made on ``payment_date``."""
    if period is None or fixed_end is None:
        return base_rate_percent
    if payment_date <= fixed_end:
        return period.fixed_rate_percent
    return period.variable_rate_percent


def calculate_advanced(data: AdvancedMortgageInput) -> AdvancedCalculationResult:
    """Build the date-aware schedule and compare it with the plain loan.

    The baseline interest is computed analytically from the base-rate EMI
    (``EMI * n - P``); no baseline schedule is simulated.
    """
    terms = data.terms
    original_emi = compute_emi(terms.principal, terms.annual_rate_percent, terms.tenure_months)
    fixed_end = fixed_rate_end_date(data.fixed_rate, data.loan_start_date) if data.fixed_rate else None
    lump_sum = data.lump_sum if data.lump_sum and data.lump_sum.amount else None
    extra = data.extra_payments if data.extra_payments and data.extra_payments.amount else None

    schedule: List[PaymentDetail] = []
    balance = terms.principal
    total_interest_paid = 0.0
    total_lump_sum = 0.0
    total_extra_payments = 0.0
    max_periods = terms.tenure_months * 2

    while balance > 0 and len(schedule) < max_periods:
        month = len(schedule)
        payment_date = payment_date_for(data.loan_start_date, month, data.emi_payment_day)
        current_rate = effective_rate(payment_date, terms.annual_rate_percent, data.fixed_rate, fixed_end)

        interest_payment = balance * monthly_rate(current_rate)
        principal_payment = original_emi - interest_payment
        total_payment = original_emi
        is_extra_payment_month = False
        is_lump_sum_month = False

        if extra and in_window(payment_date, extra.start_date, extra.end_date):
            total_payment += extra.amount
            principal_payment += extra.amount
            total_extra_payments += extra.amount
            is_extra_payment_month = True

        if lump_sum and same_month(payment_date, lump_sum.date):
            total_payment += lump_sum.amount
            principal_payment += lump_sum.amount
            total_lump_sum += lump_sum.amount
            is_lump_sum_month = True

        if principal_payment > balance or balance - principal_payment < BALANCE_EPSILON:
            principal_payment = balance
            total_payment = balance + interest_payment

        balance -= principal_payment
        total_interest_paid += interest_payment

        schedule.append(
            PaymentDetail(
                date=payment_date,
                month_number=month + 1,
                principal_payment=principal_payment,
                interest_payment=interest_payment,
                total_payment=total_payment,
                balance=max(0.0, balance),
                is_lump_sum_month=is_lump_sum_month,
                is_extra_payment_month=is_extra_payment_month,
                interest_rate=current_rate,
            )
        )

    if balance > 0:
        logger.debug(
            "Advanced schedule truncated at %d periods with %.2f outstanding",
            len(schedule),
            balance,
        )

    new_tenure_months = len(schedule)
    original_total_interest, _ = total_interest_and_amount(
        terms.principal, original_emi, terms.tenure_months
    )
    interest_saved = original_total_interest - total_interest_paid

    return AdvancedCalculationResult(
        schedule=schedule,
        original_tenure_months=terms.tenure_months,
        new_tenure_months=new_tenure_months,
        tenure_saved=terms.tenure_months - new_tenure_months,
        original_total_interest=original_total_interest,
        new_total_interest=total_interest_paid,
        interest_saved=interest_saved,
        interest_saved_percentage=savings_percentage(interest_saved, original_total_interest),
        total_lump_sum=total_lump_sum,
        total_extra_payments=total_extra_payments,
        original_monthly_emi=original_emi,
        new_monthly_emi=original_emi,
    )
