"""Output helpers for the mortgage calculator.

This module provides simple functions to render amortization schedules,
evaluation results and scenario comparisons in a tabular text format. We
rely only on built-in printing and string formatting; currency symbols are
left to the caller.
"""

from __future__ import annotations

from datetime import date
from typing import Iterable, List, Tuple

from .comparison import ScenarioComparison
from .data_models import (
    AdvancedCalculationResult,
    FixedRateResult,
    OverpaymentResult,
    PartPaymentResult,
    PaymentDetail,
    PaymentRecord,
)
from .utils import months_to_years_months


def format_currency(value: float, decimal_places: int = 2) -> str:
    return f"{value:.{decimal_places}f}"


def format_date(dt: date) -> str:
    """Format a date as ``Mar 5, 2026``."""
    return f"{dt:%b} {dt.day}, {dt.year}"


def month_year_string(dt: date) -> str:
    return f"{dt:%b %Y}"


def format_tenure(months: int) -> str:
    years, rest = months_to_years_months(months)
    return f"{years}y {rest}m"


def print_summary(title: str, rows: List[Tuple[str, str]]) -> None:
    """Print labelled values under a title, one per line."""
    print(title)
    print("-" * 72)
    width = max((len(label) for label, _ in rows), default=0)
    for label, value in rows:
        print(f"{label:<{width}} : {value}")
    print("-" * 72)


def print_emi_summary(emi: float, total_interest: float, total_amount: float, tenure_months: int) -> None:
    print_summary(
        "Loan summary",
        [
            ("Monthly EMI", format_currency(emi)),
            ("Total interest", format_currency(total_interest)),
            ("Total amount", format_currency(total_amount)),
            ("Tenure", format_tenure(tenure_months)),
        ],
    )


def print_overpayment_summary(result: OverpaymentResult) -> None:
    print_summary(
        "Overpayment impact",
        [
            ("Monthly EMI", format_currency(result.original_monthly_emi)),
            ("Monthly overpayment", format_currency(result.monthly_overpayment)),
            ("Original tenure", format_tenure(result.original_tenure_months)),
            ("New tenure", format_tenure(result.new_tenure_months)),
            ("Tenure saved", f"{result.tenure_saved} months"),
            ("Original interest", format_currency(result.original_total_interest)),
            ("New interest", format_currency(result.new_total_interest)),
            ("Interest saved", f"{format_currency(result.interest_saved)} ({result.interest_saved_percentage:.2f}%)"),
        ],
    )


def print_part_payment_summary(result: PartPaymentResult) -> None:
    rows = [
        ("Original balance", format_currency(result.original_balance)),
        ("Lump sum", format_currency(result.lump_sum_amount)),
        ("New balance", format_currency(result.new_balance)),
        ("Original EMI", format_currency(result.original_monthly_emi)),
        ("New EMI", format_currency(result.new_monthly_emi)),
        ("Original tenure", format_tenure(result.original_tenure_months)),
        ("New tenure", format_tenure(result.new_tenure_months)),
        ("Interest saved", f"{format_currency(result.interest_saved)} ({result.interest_saved_percentage:.2f}%)"),
        ("Max allowed payment", format_currency(result.max_allowed_payment)),
    ]
    print_summary("Part payment impact", rows)
    if not result.is_within_limit:
        print("Warning: the lump sum exceeds the usual limit of 10% of the original loan.")


def print_fixed_rate_summary(result: FixedRateResult) -> None:
    print_summary(
        "Fixed rate period impact",
        [
            ("Fixed period EMI", format_currency(result.fixed_period_emi)),
            ("Fixed period", f"{result.fixed_rate_end_month} months"),
            ("Balance after fixed", format_currency(result.principal_after_fixed_period)),
            ("Interest during fixed", format_currency(result.interest_during_fixed_period)),
            ("EMI after fixed", format_currency(result.post_fixed_emi)),
            ("Remaining tenure", format_tenure(result.remaining_tenure_after_fixed)),
            ("Total interest", format_currency(result.new_total_interest)),
            ("Interest saved", format_currency(result.total_interest_saved)),
        ],
    )


def print_advanced_summary(result: AdvancedCalculationResult) -> None:
    rows = [
        ("Monthly EMI", format_currency(result.original_monthly_emi)),
        ("Original tenure", format_tenure(result.original_tenure_months)),
        ("New tenure", format_tenure(result.new_tenure_months)),
        ("Tenure saved", f"{result.tenure_saved} months"),
        ("Original interest", format_currency(result.original_total_interest)),
        ("New interest", format_currency(result.new_total_interest)),
        ("Interest saved", f"{format_currency(result.interest_saved)} ({result.interest_saved_percentage:.2f}%)"),
    ]
    if result.total_lump_sum:
        rows.append(("Total lump sum", format_currency(result.total_lump_sum)))
    if result.total_extra_payments:
        rows.append(("Total extra payments", format_currency(result.total_extra_payments)))
    if result.schedule:
        rows.append(("Last payment", format_date(result.schedule[-1].date)))
    print_summary("Advanced mortgage", rows)


def print_schedule(schedule: Iterable[PaymentRecord]) -> None:
    """Print a standard amortization schedule as a simple table."""
    headers = ["Month", "Year", "Payment", "Principal", "Interest", "Balance"]
    print("\t".join(headers))
    for record in schedule:
        row = [
            str(record.month),
            str(record.year + 1),
            format_currency(record.payment),
            format_currency(record.principal),
            format_currency(record.interest),
            format_currency(record.balance),
        ]
        print("\t".join(row))


def print_advanced_schedule(schedule: Iterable[PaymentDetail]) -> None:
    """Print a date-aware schedule; flags show lump sum and extra payments."""
    headers = ["Month", "Date", "Rate", "Payment", "Principal", "Interest", "Balance", "Extra", "Lump"]
    print("\t".join(headers))
    for entry in schedule:
        row = [
            str(entry.month_number),
            entry.date.isoformat(),
            f"{entry.interest_rate:.2f}%",
            format_currency(entry.total_payment),
            format_currency(entry.principal_payment),
            format_currency(entry.interest_payment),
            format_currency(entry.balance),
            "Yes" if entry.is_extra_payment_month else "No",
            "Yes" if entry.is_lump_sum_month else "No",
        ]
        print("\t".join(row))


def print_comparison(comparison: ScenarioComparison, baseline_index: int = 0) -> None:
    """Print the scenarios side by side with their difference to the baseline.

    A negative difference means the scenario is cheaper or shorter than the
    baseline scenario.
    """
    print("Comparison")
    print("=" * 72)
    print(f"{'Scenario':20s} {'EMI':>12s} {'Interest':>14s} {'Total':>14s} {'Tenure':>8s}")
    for i, scenario in enumerate(comparison.scenarios):
        print(
            f"{scenario.name[:20]:20s} {comparison.monthly_emi[i]:12.2f} "
            f"{comparison.total_interest[i]:14.2f} {comparison.total_amount[i]:14.2f} "
            f"{format_tenure(comparison.tenure[i]):>8s}"
        )
    if len(comparison.scenarios) > 1:
        print("-" * 72)
        print(f"Difference to {comparison.scenarios[baseline_index].name}")
        for scenario, diff in zip(comparison.scenarios, comparison.differences(baseline_index)):
            print(
                f"{scenario.name[:20]:20s} {diff['monthly_emi']:12.2f} "
                f"{diff['total_interest']:14.2f} {diff['total_amount']:14.2f} {int(diff['tenure']):8d}"
            )
    print("=" * 72)
