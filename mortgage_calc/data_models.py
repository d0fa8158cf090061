"""Data models for the mortgage calculator.

This module defines dataclasses representing the entities used by the
calculator: the loan terms, the optional modifiers of the date-aware engine
(fixed-rate period, lump sum, extra payment window), individual schedule
rows and the result objects returned by each evaluator. Using dataclasses
makes it easy to construct, inspect and serialize these structures.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from typing import List, Optional


@dataclass(frozen=True)
class LoanTerms:
    """The basic terms of a loan.

    Attributes
    ----------
    principal: float
        The financed amount.
    annual_rate_percent: float
        Annual nominal interest rate in percentage points (``5`` means 5 %).
    tenure_months: int
        The loan term in months.
    """

    principal: float
    annual_rate_percent: float
    tenure_months: int


@dataclass
class PaymentRecord:
    """A row of a standard amortization schedule.

    ``month`` is the 1-based sequence number of the period and ``year`` the
    0-based loan year it falls in.
    """

    month: int
    year: int
    payment: float
    principal: float
    interest: float
    balance: float


@dataclass(frozen=True)
class FixedRatePeriod:
    """An initial window during which the rate is fixed.

    Attributes
    ----------
    fixed_rate_months: int
        Length of the fixed window in months.
    fixed_rate_percent: float
        The rate applied to payments dated on or before the end date.
    variable_rate_percent: float
        The rate applied to payments dated after the end date.
    fixed_rate_end_date: date, optional
        Last day covered by the fixed rate. When omitted it is derived from
        the loan start date and ``fixed_rate_months``.
    """

    fixed_rate_months: int
    fixed_rate_percent: float
    variable_rate_percent: float
    fixed_rate_end_date: Optional[date] = None


@dataclass(frozen=True)
class LumpSum:
    """A one-time payment applied in the calendar month of ``date``."""

    amount: float
    date: date


@dataclass(frozen=True)
class ExtraPaymentWindow:
    """A recurring extra payment for payments dated inside the window.

    Both ``start_date`` and ``end_date`` are inclusive.
    """

    amount: float
    start_date: date
    end_date: date


@dataclass(frozen=True)
class AdvancedMortgageInput:
    """Input of the date-aware engine.

    Each optional block is independent; ``None`` means the corresponding
    effect never applies.
    """

    terms: LoanTerms
    loan_start_date: date
    emi_payment_day: int = 1
    fixed_rate: Optional[FixedRatePeriod] = None
    lump_sum: Optional[LumpSum] = None
    extra_payments: Optional[ExtraPaymentWindow] = None


@dataclass
class PaymentDetail:
    """A row of a date-aware schedule.

    Besides the amounts, each entry carries its calendar date, the annual
    rate used for the period and flags telling whether the lump sum or the
    extra payment window applied to it.
    """

    date: date
    month_number: int
    principal_payment: float
    interest_payment: float
    total_payment: float
    balance: float
    is_lump_sum_month: bool
    is_extra_payment_month: bool
    interest_rate: float


@dataclass
class OverpaymentResult:
    original_tenure_months: int
    new_tenure_months: int
    tenure_saved: int
    original_total_interest: float
    new_total_interest: float
    interest_saved: float
    interest_saved_percentage: float
    monthly_overpayment: float
    original_monthly_emi: float
    schedule: List[PaymentRecord] = field(default_factory=list)


@dataclass
class PartPaymentResult:
    """Outcome of a one-time balance reduction.

    ``max_allowed_payment`` and ``is_within_limit`` are advisory: the new
    schedule is computed even when the lump sum exceeds the cap.
    """

    original_balance: float
    lump_sum_amount: float
    new_balance: float
    principal_reduction: float
    original_tenure_months: int
    new_tenure_months: int
    tenure_saved: int
    original_total_interest: float
    new_total_interest: float
    interest_saved: float
    interest_saved_percentage: float
    original_monthly_emi: float
    new_monthly_emi: float
    max_allowed_payment: float
    is_within_limit: bool
    mode: str
    schedule: List[PaymentRecord] = field(default_factory=list)


@dataclass
class FixedRateResult:
    original_tenure_months: int
    fixed_rate_end_month: int
    principal_after_fixed_period: float
    interest_during_fixed_period: float
    remaining_tenure_after_fixed: int
    original_total_interest: float
    new_total_interest: float
    total_interest_saved: float
    fixed_period_emi: float
    post_fixed_emi: float
    schedule: List[PaymentRecord] = field(default_factory=list)


@dataclass
class AdvancedCalculationResult:
    schedule: List[PaymentDetail]
    original_tenure_months: int
    new_tenure_months: int
    tenure_saved: int
    original_total_interest: float
    new_total_interest: float
    interest_saved: float
    interest_saved_percentage: float
    total_lump_sum: float
    total_extra_payments: float
    original_monthly_emi: float
    new_monthly_emi: float


@dataclass
class MortgageScenario:
    """A saved scenario, reduced to the metrics the comparison view needs."""

    id: str
    name: str
    loan_amount: float
    annual_rate: float
    tenure_months: int
    monthly_emi: float
    total_interest: float
    total_amount: float
    monthly_overpayment: Optional[float] = None
    lump_sum_payment: Optional[float] = None
    created_at: datetime = field(default_factory=datetime.now)
