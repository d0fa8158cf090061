"""Scenario records and side-by-side comparison.

A ``MortgageScenario`` keeps only the headline metrics of a calculation so
that results of different evaluators (plain loan, overpayment, part
payment, advanced schedule) can be saved and compared with each other.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional, Sequence, Union
from uuid import uuid4

from .data_models import (
    AdvancedCalculationResult,
    AdvancedMortgageInput,
    LoanTerms,
    MortgageScenario,
    OverpaymentResult,
    PartPaymentResult,
    PaymentDetail,
    PaymentRecord,
)
from .engine import compute_emi, total_interest_and_amount

COMPARISON_METRICS = ("monthly_emi", "total_interest", "total_amount", "tenure")


def _new_id() -> str:
    return uuid4().hex


def scenario_from_terms(name: str, terms: LoanTerms, scenario_id: Optional[str] = None) -> MortgageScenario:
    """Build a scenario for the plain loan, without any prepayment."""
    emi = compute_emi(terms.principal, terms.annual_rate_percent, terms.tenure_months)
    total_interest, total_amount = total_interest_and_amount(terms.principal, emi, terms.tenure_months)
    return MortgageScenario(
        id=scenario_id or _new_id(),
        name=name,
        loan_amount=terms.principal,
        annual_rate=terms.annual_rate_percent,
        tenure_months=terms.tenure_months,
        monthly_emi=emi,
        total_interest=total_interest,
        total_amount=total_amount,
    )


def scenario_from_overpayment(
    name: str, terms: LoanTerms, result: OverpaymentResult, scenario_id: Optional[str] = None
) -> MortgageScenario:
    """Build a scenario from an overpayment evaluation.

    The monthly figure is the first period's cash outflow, installment plus
    overpayment.
    """
    return MortgageScenario(
        id=scenario_id or _new_id(),
        name=name,
        loan_amount=terms.principal,
        annual_rate=terms.annual_rate_percent,
        tenure_months=result.new_tenure_months,
        monthly_emi=result.schedule[0].payment if result.schedule else 0.0,
        total_interest=result.new_total_interest,
        total_amount=terms.principal + result.new_total_interest,
        monthly_overpayment=result.monthly_overpayment,
    )


def scenario_from_part_payment(
    name: str, annual_rate_percent: float, result: PartPaymentResult, scenario_id: Optional[str] = None
) -> MortgageScenario:
    return MortgageScenario(
        id=scenario_id or _new_id(),
        name=name,
        loan_amount=result.original_balance,
        annual_rate=annual_rate_percent,
        tenure_months=result.new_tenure_months,
        monthly_emi=result.new_monthly_emi,
        total_interest=result.new_total_interest,
        total_amount=result.original_balance + result.new_total_interest,
        lump_sum_payment=result.lump_sum_amount,
    )


def scenario_from_advanced(
    name: str,
    data: AdvancedMortgageInput,
    result: AdvancedCalculationResult,
    scenario_id: Optional[str] = None,
) -> MortgageScenario:
    return MortgageScenario(
        id=scenario_id or _new_id(),
        name=name,
        loan_amount=data.terms.principal,
        annual_rate=data.terms.annual_rate_percent,
        tenure_months=result.new_tenure_months,
        monthly_emi=result.original_monthly_emi,
        total_interest=result.new_total_interest,
        total_amount=data.terms.principal + result.new_total_interest,
        monthly_overpayment=data.extra_payments.amount if data.extra_payments else None,
        lump_sum_payment=result.total_lump_sum or None,
    )


def scenario_from_dict(payload: Dict[str, Any]) -> MortgageScenario:
    """Rebuild a scenario from the JSON form produced by ``utils.to_jsonable``."""
    created_at = payload.get("created_at")
    return MortgageScenario(
        id=payload.get("id") or _new_id(),
        name=payload["name"],
        loan_amount=float(payload["loan_amount"]),
        annual_rate=float(payload["annual_rate"]),
        tenure_months=int(payload["tenure_months"]),
        monthly_emi=float(payload["monthly_emi"]),
        total_interest=float(payload["total_interest"]),
        total_amount=float(payload["total_amount"]),
        monthly_overpayment=payload.get("monthly_overpayment"),
        lump_sum_payment=payload.get("lump_sum_payment"),
        created_at=datetime.fromisoformat(created_at) if created_at else datetime.now(),
    )


@dataclass
class ScheduleSummary:
    tenure_months: int
    total_interest: float
    total_principal: float
    total_paid: float


def summarize_schedule(schedule: Sequence[Union[PaymentRecord, PaymentDetail]]) -> ScheduleSummary:
    """Reduce a standard or date-aware schedule to its totals."""
    total_interest = 0.0
    total_principal = 0.0
    total_paid = 0.0
    for entry in schedule:
        if isinstance(entry, PaymentDetail):
            total_interest += entry.interest_payment
            total_principal += entry.principal_payment
            total_paid += entry.total_payment
        else:
            total_interest += entry.interest
            total_principal += entry.principal
            total_paid += entry.payment
    return ScheduleSummary(
        tenure_months=len(schedule),
        total_interest=total_interest,
        total_principal=total_principal,
        total_paid=total_paid,
    )


@dataclass
class ScenarioComparison:
    """Metrics of several scenarios, aligned with the order of ``scenarios``."""

    scenarios: List[MortgageScenario]
    monthly_emi: List[float] = field(default_factory=list)
    total_interest: List[float] = field(default_factory=list)
    total_amount: List[float] = field(default_factory=list)
    tenure: List[int] = field(default_factory=list)

    def best(self, metric: str) -> Optional[MortgageScenario]:
        """Return the scenario with the lowest value of ``metric``."""
        if metric not in COMPARISON_METRICS:
            raise ValueError(f"Unknown comparison metric: {metric}")
        values = getattr(self, metric)
        if not values:
            return None
        return self.scenarios[values.index(min(values))]

    def differences(self, baseline_index: int = 0) -> List[Dict[str, float]]:
        """Return each scenario's metrics minus those of the baseline scenario.

        A negative difference means the scenario is cheaper or shorter than
        the baseline.
        """
        diffs = []
        for i in range(len(self.scenarios)):
            diffs.append(
                {
                    metric: getattr(self, metric)[i] - getattr(self, metric)[baseline_index]
                    for metric in COMPARISON_METRICS
                }
            )
        return diffs


def compare_scenarios(scenarios: Sequence[MortgageScenario]) -> ScenarioComparison:
    scenarios = list(scenarios)
    return ScenarioComparison(
        scenarios=scenarios,
        monthly_emi=[s.monthly_emi for s in scenarios],
        total_interest=[s.total_interest for s in scenarios],
        total_amount=[s.total_amount for s in scenarios],
        tenure=[s.tenure_months for s in scenarios],
    )
