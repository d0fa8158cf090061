"""Command-line interface for the mortgage calculator.

This module uses the ``click`` library to implement a multi-command
interface. Users can compute the EMI of a loan, full amortization
schedules, the impact of overpayments, part payments and fixed-rate
periods, run the date-aware advanced calculation or compare several
scenarios. Results can be printed to the terminal or exported to JSON/CSV
files.
"""

from __future__ import annotations

import csv
import json
import logging
import shlex
from datetime import date
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence, Tuple, Union

import click

from .advanced import calculate_advanced
from .comparison import compare_scenarios, scenario_from_overpayment, scenario_from_terms
from .data_models import (
    AdvancedMortgageInput,
    ExtraPaymentWindow,
    FixedRatePeriod,
    LoanTerms,
    LumpSum,
    PaymentDetail,
    PaymentRecord,
)
from .engine import (
    PART_PAYMENT_MODES,
    calculate_fixed_rate_impact,
    calculate_overpayment_impact,
    calculate_part_payment_impact,
    compute_emi,
    generate_schedule,
    total_interest_and_amount,
)
from .formatter import (
    print_advanced_schedule,
    print_advanced_summary,
    print_comparison,
    print_emi_summary,
    print_fixed_rate_summary,
    print_overpayment_summary,
    print_part_payment_summary,
    print_schedule,
)
from .utils import parse_date, to_jsonable
from .validation import (
    MortgageInputError,
    validate_advanced_input,
    validate_fixed_rate,
    validate_loan_terms,
    validate_overpayment,
    validate_part_payment,
)

logger = logging.getLogger(__name__)

MAX_PRINTED_ROWS = 120


def parse_amount(value: str) -> float:
    """Parse a numeric string with optional suffixes.

    Accepts plain floats ("500000") and shorthand with ``k``/``m`` suffixes
    (e.g., "500k" meaning 500_000). Returns a float.
    """
    value = value.strip().lower()
    value = value.replace(",", "")
    factor = 1.0
    if value.endswith("k"):
        factor = 1_000.0
        value = value[:-1]
    elif value.endswith("m"):
        factor = 1_000_000.0
        value = value[:-1]
    try:
        return float(value) * factor
    except ValueError:
        raise click.BadParameter(f"Invalid amount: {value}")


def parse_date_option(value: str) -> date:
    try:
        return parse_date(value)
    except ValueError as exc:
        raise click.BadParameter(str(exc))


def parse_lump_sum(value: str) -> LumpSum:
    """Parse a lump sum given in ``DATE:AMOUNT`` format."""
    parts = value.split(":")
    if len(parts) != 2:
        raise click.BadParameter(f"Lump sum must be in YYYY-MM-DD:AMOUNT format; got {value}")
    dt_str, amt_str = parts
    return LumpSum(amount=parse_amount(amt_str), date=parse_date_option(dt_str))


def parse_extra_payment(value: str) -> ExtraPaymentWindow:
    """Parse an extra payment window given in ``AMOUNT:START:END`` format."""
    parts = value.split(":")
    if len(parts) != 3:
        raise click.BadParameter(
            f"Extra payment must be in AMOUNT:YYYY-MM-DD:YYYY-MM-DD format; got {value}"
        )
    amt_str, start_str, end_str = parts
    return ExtraPaymentWindow(
        amount=parse_amount(amt_str),
        start_date=parse_date_option(start_str),
        end_date=parse_date_option(end_str),
    )


def build_terms(principal: str, rate: float, term: int) -> LoanTerms:
    terms = LoanTerms(principal=parse_amount(principal), annual_rate_percent=rate, tenure_months=term)
    try:
        return validate_loan_terms(terms)
    except MortgageInputError as exc:
        raise click.BadParameter(str(exc))


def build_advanced_input(
    principal: str,
    rate: float,
    term: int,
    start_date: str,
    payment_day: int,
    fixed_months: Optional[int] = None,
    fixed_rate: Optional[float] = None,
    variable_rate: Optional[float] = None,
    fixed_end_date: Optional[str] = None,
    lump_sum: Optional[str] = None,
    extra_payment: Optional[str] = None,
) -> AdvancedMortgageInput:
    terms = build_terms(principal, rate, term)
    fixed_period = None
    if fixed_months is not None:
        if fixed_rate is None or variable_rate is None:
            raise click.UsageError("--fixed-months requires --fixed-rate and --variable-rate")
        fixed_period = FixedRatePeriod(
            fixed_rate_months=fixed_months,
            fixed_rate_percent=fixed_rate,
            variable_rate_percent=variable_rate,
            fixed_rate_end_date=parse_date_option(fixed_end_date) if fixed_end_date else None,
        )
    data = AdvancedMortgageInput(
        terms=terms,
        loan_start_date=parse_date_option(start_date),
        emi_payment_day=payment_day,
        fixed_rate=fixed_period,
        lump_sum=parse_lump_sum(lump_sum) if lump_sum else None,
        extra_payments=parse_extra_payment(extra_payment) if extra_payment else None,
    )
    try:
        return validate_advanced_input(data)
    except MortgageInputError as exc:
        raise click.BadParameter(str(exc))


def export_to_json(path: Path, result: Any) -> None:
    """Export a calculation result (summary and schedule) to a JSON file."""
    with path.open("w", encoding="utf-8") as f:
        json.dump(to_jsonable(result), f, indent=2)


def export_to_csv(path: Path, schedule: Sequence[Union[PaymentRecord, PaymentDetail]]) -> None:
    """Export a standard or date-aware schedule to a CSV file."""
    advanced = bool(schedule) and isinstance(schedule[0], PaymentDetail)
    if advanced:
        header = [
            "Month",
            "Date",
            "Rate",
            "Payment",
            "Principal",
            "Interest",
            "Balance",
            "Extra_Payment_Month",
            "Lump_Sum_Month",
        ]
    else:
        header = ["Month", "Year", "Payment", "Principal", "Interest", "Balance"]
    with path.open("w", newline="", encoding="utf-8") as f:
        writer = csv.writer(f)
        writer.writerow(header)
        for e in schedule:
            if advanced:
                writer.writerow(
                    [
                        e.month_number,
                        e.date.isoformat(),
                        e.interest_rate,
                        e.total_payment,
                        e.principal_payment,
                        e.interest_payment,
                        e.balance,
                        e.is_extra_payment_month,
                        e.is_lump_sum_month,
                    ]
                )
            else:
                writer.writerow([e.month, e.year, e.payment, e.principal, e.interest, e.balance])


def write_output(output: str, result: Any, schedule: Sequence[Any]) -> None:
    path = Path(output)
    if path.suffix.lower() == ".json":
        export_to_json(path, result)
    elif path.suffix.lower() == ".csv":
        export_to_csv(path, schedule)
    else:
        raise click.BadParameter("Unsupported output format; use .json or .csv")
    logger.info("Exported %d schedule rows to %s", len(schedule), path)
    click.echo(f"Schedule exported to {path}")


def _print_truncated(schedule: List[Any], printer) -> None:
    # Limit schedule length printed to avoid flooding the terminal
    if len(schedule) > MAX_PRINTED_ROWS:
        click.echo(f"Schedule has {len(schedule)} rows; showing first {MAX_PRINTED_ROWS} rows.")
        printer(schedule[:MAX_PRINTED_ROWS])
    else:
        printer(schedule)


def loan_options(func):
    """Attach the principal/rate/term options shared by most commands."""
    func = click.option("--term", "-t", "term", required=True, type=int, help="Loan tenure in months")(func)
    func = click.option("--rate", "-r", "rate", required=True, type=float, help="Annual interest rate (percent)")(func)
    func = click.option("--principal", "-p", "principal", required=True, help="Loan amount (accepts k/m suffixes)")(func)
    return func


@click.group()
@click.option(
    "--log-level",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"], case_sensitive=False),
    default="WARNING",
    show_default=True,
    help="Logging verbosity",
)
def cli(log_level: str) -> None:
    """A command-line mortgage calculator for prepayment scenarios."""
    logging.basicConfig(level=log_level.upper(), format="%(levelname)s %(name)s: %(message)s")


@cli.command()
@loan_options
def emi(principal: str, rate: float, term: int) -> None:
    """Compute the monthly installment and total cost of a loan."""
    terms = build_terms(principal, rate, term)
    monthly = compute_emi(terms.principal, terms.annual_rate_percent, terms.tenure_months)
    total_interest, total_amount = total_interest_and_amount(terms.principal, monthly, terms.tenure_months)
    print_emi_summary(monthly, total_interest, total_amount, terms.tenure_months)


@cli.command()
@loan_options
@click.option("--overpayment", "overpayment", default="0", help="Constant extra payment every month")
@click.option("--output", "output", type=str, help="Output file path (.json or .csv)")
def schedule(principal: str, rate: float, term: int, overpayment: str, output: Optional[str]) -> None:
    """Compute and print the full amortization schedule."""
    terms = build_terms(principal, rate, term)
    extra = parse_amount(overpayment)
    try:
        validate_overpayment(extra)
    except MortgageInputError as exc:
        raise click.BadParameter(str(exc))
    records = generate_schedule(terms.principal, terms.annual_rate_percent, terms.tenure_months, extra)
    if output:
        write_output(output, {"terms": terms, "schedule": records}, records)
    else:
        _print_truncated(records, print_schedule)


@cli.command()
@loan_options
@click.option("--overpayment", "overpayment", required=True, help="Constant extra payment every month")
@click.option("--show-schedule", is_flag=True, help="Also print the schedule with overpayments")
@click.option("--output", "output", type=str, help="Output file path (.json or .csv)")
def overpayment(
    principal: str, rate: float, term: int, overpayment: str, show_schedule: bool, output: Optional[str]
) -> None:
    """Show how much tenure and interest a monthly overpayment saves."""
    terms = build_terms(principal, rate, term)
    extra = parse_amount(overpayment)
    try:
        validate_overpayment(extra)
    except MortgageInputError as exc:
        raise click.BadParameter(str(exc))
    result = calculate_overpayment_impact(
        terms.principal, terms.annual_rate_percent, terms.tenure_months, extra
    )
    if output:
        write_output(output, result, result.schedule)
        return
    print_overpayment_summary(result)
    if show_schedule:
        _print_truncated(result.schedule, print_schedule)


@cli.command("part-payment")
@click.option("--balance", "-b", "balance", required=True, help="Current outstanding balance")
@click.option("--remaining-term", "remaining_term", required=True, type=int, help="Remaining tenure in months")
@click.option("--rate", "-r", "rate", required=True, type=float, help="Annual interest rate (percent)")
@click.option("--lump-sum", "lump_sum", required=True, help="One-time payment amount")
@click.option("--original-amount", "original_amount", required=True, help="Original loan amount")
@click.option(
    "--mode",
    type=click.Choice(PART_PAYMENT_MODES),
    default="installment",
    show_default=True,
    help="'installment' lowers the EMI, 'term' keeps the EMI and shortens the loan",
)
def part_payment(
    balance: str, remaining_term: int, rate: float, lump_sum: str, original_amount: str, mode: str
) -> None:
    """Evaluate a one-time part payment."""
    args = (parse_amount(balance), remaining_term, rate, parse_amount(lump_sum), parse_amount(original_amount), mode)
    try:
        validate_part_payment(*args)
    except MortgageInputError as exc:
        raise click.BadParameter(str(exc))
    print_part_payment_summary(calculate_part_payment_impact(*args))


@cli.command("fixed-rate")
@click.option("--principal", "-p", "principal", required=True, help="Loan amount (accepts k/m suffixes)")
@click.option("--term", "-t", "term", required=True, type=int, help="Loan tenure in months")
@click.option("--fixed-rate", "fixed_rate", required=True, type=float, help="Rate during the fixed period (percent)")
@click.option("--fixed-months", "fixed_months", required=True, type=int, help="Length of the fixed period")
@click.option("--post-fixed-rate", "post_fixed_rate", required=True, type=float, help="Rate after the fixed period")
@click.option("--overpayment", "overpayment", default="0", help="Extra monthly payment during the fixed period")
@click.option("--show-schedule", is_flag=True, help="Also print the schedule")
def fixed_rate(
    principal: str,
    term: int,
    fixed_rate: float,
    fixed_months: int,
    post_fixed_rate: float,
    overpayment: str,
    show_schedule: bool,
) -> None:
    """Simulate a fixed-rate period followed by a new rate."""
    terms = build_terms(principal, fixed_rate, term)
    extra = parse_amount(overpayment)
    try:
        validate_fixed_rate(fixed_rate, fixed_months, post_fixed_rate, term)
        validate_overpayment(extra)
    except MortgageInputError as exc:
        raise click.BadParameter(str(exc))
    result = calculate_fixed_rate_impact(terms.principal, fixed_rate, fixed_months, post_fixed_rate, term, extra)
    print_fixed_rate_summary(result)
    if show_schedule:
        _print_truncated(result.schedule, print_schedule)


@cli.command()
@loan_options
@click.option("--start-date", "-s", "start_date", required=True, help="Loan start date (YYYY-MM-DD)")
@click.option("--payment-day", "payment_day", type=int, default=1, show_default=True, help="EMI day of month (1-31)")
@click.option("--fixed-months", "fixed_months", type=int, help="Length of the fixed-rate period")
@click.option("--fixed-rate", "fixed_rate", type=float, help="Rate during the fixed period (percent)")
@click.option("--variable-rate", "variable_rate", type=float, help="Rate after the fixed period (percent)")
@click.option("--fixed-end-date", "fixed_end_date", help="Last day of the fixed period (defaults to start + fixed months)")
@click.option("--lump-sum", "lump_sum", help="One-time payment in YYYY-MM-DD:AMOUNT format")
@click.option("--extra-payment", "extra_payment", help="Extra monthly payment in AMOUNT:START:END format")
@click.option("--show-schedule", is_flag=True, help="Also print the schedule")
@click.option("--output", "output", type=str, help="Output file path (.json or .csv)")
def advanced(
    principal: str,
    rate: float,
    term: int,
    start_date: str,
    payment_day: int,
    fixed_months: Optional[int],
    fixed_rate: Optional[float],
    variable_rate: Optional[float],
    fixed_end_date: Optional[str],
    lump_sum: Optional[str],
    extra_payment: Optional[str],
    show_schedule: bool,
    output: Optional[str],
) -> None:
    """Run the date-aware calculation with rate changes and extra payments."""
    data = build_advanced_input(
        principal,
        rate,
        term,
        start_date,
        payment_day,
        fixed_months,
        fixed_rate,
        variable_rate,
        fixed_end_date,
        lump_sum,
        extra_payment,
    )
    result = calculate_advanced(data)
    if output:
        write_output(output, result, result.schedule)
        return
    print_advanced_summary(result)
    if show_schedule:
        _print_truncated(result.schedule, print_advanced_schedule)


def parse_scenario_opts(opts: str) -> Dict[str, Any]:
    """Convert a quoted scenario option string into keyword arguments.

    For example ``"--name Fast -p 300k -r 5 -t 360 --overpayment 200"``.
    """
    tokens = shlex.split(opts)
    params: Dict[str, Any] = {
        "name": None,
        "principal": None,
        "rate": None,
        "term": None,
        "overpayment": None,
    }
    i = 0
    while i < len(tokens):
        token = tokens[i]
        if i + 1 >= len(tokens):
            raise click.BadParameter(f"Missing value for scenario option {token}")
        value = tokens[i + 1]
        if token in ("-p", "--principal"):
            params["principal"] = value
        elif token in ("-r", "--rate", "-t", "--term"):
            key, convert = ("rate", float) if token in ("-r", "--rate") else ("term", int)
            try:
                params[key] = convert(value)
            except ValueError:
                raise click.BadParameter(f"Invalid value for scenario option {token}: {value}")
        elif token in ("-n", "--name"):
            params["name"] = value
        elif token == "--overpayment":
            params["overpayment"] = value
        else:
            raise click.BadParameter(f"Unknown option in scenario: {token}")
        i += 2
    for required in ("principal", "rate", "term"):
        if params[required] is None:
            raise click.BadParameter(f"Scenario missing required option {required}")
    return params


@cli.command()
@click.option(
    "--scenario",
    "scenarios",
    multiple=True,
    required=True,
    help="Scenario options as a quoted string; repeat to compare several",
)
def compare(scenarios: Tuple[str, ...]) -> None:
    """Compare loan scenarios.

    Scenarios are provided as quoted option strings, for example:

        mortgage-calc compare --scenario "-p 300k -r 5 -t 360" --scenario "-p 300k -r 5 -t 360 --overpayment 200"

    The first scenario is the baseline of the difference table.
    """
    built = []
    for index, opts in enumerate(scenarios, start=1):
        params = parse_scenario_opts(opts)
        terms = build_terms(params["principal"], params["rate"], params["term"])
        name = params["name"] or f"Scenario {index}"
        if params["overpayment"]:
            extra = parse_amount(params["overpayment"])
            try:
                validate_overpayment(extra)
            except MortgageInputError as exc:
                raise click.BadParameter(str(exc))
            result = calculate_overpayment_impact(
                terms.principal, terms.annual_rate_percent, terms.tenure_months, extra
            )
            built.append(scenario_from_overpayment(name, terms, result))
        else:
            built.append(scenario_from_terms(name, terms))
    print_comparison(compare_scenarios(built))


if __name__ == "__main__":
    cli()
