"""JSON API for the mortgage calculator.

The API exposes every calculation of the ``mortgage_calc`` package over
HTTP and keeps a per-session list of saved scenarios that can be compared
side by side. Configuration comes from environment variables:

``FLASK_SECRET_KEY``
    Key used to sign the session cookie holding the user token.
``SCENARIO_DATABASE_URL``
    SQLAlchemy URL of the scenario store.
``SCENARIO_MAX_PER_USER``
    How many saved scenarios are kept per user (oldest are dropped).

Run it with ``flask --app mortgage_calc_web.app run``.
"""

import math
import os
from typing import Any, Dict, Mapping, Optional
from uuid import uuid4

from flask import Blueprint, Flask, current_app, jsonify, request, session

from mortgage_calc.advanced import calculate_advanced
from mortgage_calc.comparison import (
    COMPARISON_METRICS,
    compare_scenarios,
    scenario_from_advanced,
    scenario_from_overpayment,
    scenario_from_part_payment,
    scenario_from_terms,
    summarize_schedule,
)
from mortgage_calc.data_models import (
    AdvancedMortgageInput,
    ExtraPaymentWindow,
    FixedRatePeriod,
    LoanTerms,
    LumpSum,
)
from mortgage_calc.engine import (
    calculate_fixed_rate_impact,
    calculate_overpayment_impact,
    calculate_part_payment_impact,
    compute_emi,
    generate_schedule,
    total_interest_and_amount,
)
from mortgage_calc.utils import float_from_str, parse_date, to_jsonable
from mortgage_calc.validation import (
    validate_advanced_input,
    validate_fixed_rate,
    validate_loan_terms,
    validate_overpayment,
    validate_part_payment,
)
from mortgage_calc_web.scenario_store import create_store

api = Blueprint("api", __name__, url_prefix="/api")


class BadRequest(ValueError):
    """Raised when a request body is missing fields or has malformed values."""


def _ensure_user_token() -> str:
    token = session.get("user_token")
    if not token:
        token = uuid4().hex
        session["user_token"] = token
        session.modified = True
    return token


def _store():
    return current_app.extensions["scenario_store"]


def _json_body() -> Dict[str, Any]:
    body = request.get_json(silent=True)
    if body is None:
        return {}
    if not isinstance(body, dict):
        raise BadRequest("Request body must be a JSON object")
    return body


def _number(body: Mapping[str, Any], key: str, default: Optional[float] = None) -> float:
    value = body.get(key, default)
    if value is None:
        raise BadRequest(f"Missing field: {key}")
    try:
        return float_from_str(str(value))
    except ValueError as exc:
        raise BadRequest(str(exc)) from exc


def _integer(body: Mapping[str, Any], key: str, default: Optional[int] = None) -> int:
    value = _number(body, key, default)
    if not math.isfinite(value) or int(value) != value:
        raise BadRequest(f"Field {key} must be a whole number")
    return int(value)


def _date(body: Mapping[str, Any], key: str):
    value = body.get(key)
    if not value:
        raise BadRequest(f"Missing field: {key}")
    try:
        return parse_date(str(value))
    except ValueError as exc:
        raise BadRequest(str(exc)) from exc


def _block(body: Mapping[str, Any], key: str) -> Optional[Mapping[str, Any]]:
    block = body.get(key)
    if block is None:
        return None
    if not isinstance(block, dict):
        raise BadRequest(f"Field {key} must be an object")
    return block


def _terms(body: Mapping[str, Any]) -> LoanTerms:
    return validate_loan_terms(
        LoanTerms(
            principal=_number(body, "principal"),
            annual_rate_percent=_number(body, "annual_rate_percent"),
            tenure_months=_integer(body, "tenure_months"),
        )
    )


def _part_payment_args(body: Mapping[str, Any]):
    args = (
        _number(body, "current_balance"),
        _integer(body, "remaining_tenure_months"),
        _number(body, "annual_rate_percent"),
        _number(body, "lump_sum_amount"),
        _number(body, "original_loan_amount"),
        body.get("mode", "installment"),
    )
    validate_part_payment(*args)
    return args


def _advanced_input(body: Mapping[str, Any]) -> AdvancedMortgageInput:
    fixed = _block(body, "fixed_rate")
    lump = _block(body, "lump_sum")
    extra = _block(body, "extra_payments")
    data = AdvancedMortgageInput(
        terms=_terms(body),
        loan_start_date=_date(body, "loan_start_date"),
        emi_payment_day=_integer(body, "emi_payment_day", 1),
        fixed_rate=FixedRatePeriod(
            fixed_rate_months=_integer(fixed, "fixed_rate_months"),
            fixed_rate_percent=_number(fixed, "fixed_rate_percent"),
            variable_rate_percent=_number(fixed, "variable_rate_percent"),
            fixed_rate_end_date=_date(fixed, "fixed_rate_end_date") if fixed.get("fixed_rate_end_date") else None,
        )
        if fixed
        else None,
        lump_sum=LumpSum(amount=_number(lump, "amount"), date=_date(lump, "date")) if lump else None,
        extra_payments=ExtraPaymentWindow(
            amount=_number(extra, "amount"),
            start_date=_date(extra, "start_date"),
            end_date=_date(extra, "end_date"),
        )
        if extra
        else None,
    )
    return validate_advanced_input(data)


def _include_schedule(body: Mapping[str, Any]) -> bool:
    value = body.get("include_schedule", True)
    if isinstance(value, bool):
        return value
    if isinstance(value, str) and value.strip().lower() in ("true", "false"):
        return value.strip().lower() == "true"
    raise BadRequest("Field include_schedule must be true or false")


def _result_payload(result: Any, include_schedule: bool) -> Dict[str, Any]:
    payload = to_jsonable(result)
    if not include_schedule:
        payload.pop("schedule", None)
    return payload


@api.errorhandler(ValueError)
def handle_bad_input(exc: ValueError):
    # MortgageInputError and BadRequest are both ValueErrors
    current_app.logger.warning("Rejected request to %s: %s", request.path, exc)
    return jsonify({"error": str(exc)}), 400


@api.post("/emi")
def emi():
    terms = _terms(_json_body())
    monthly = compute_emi(terms.principal, terms.annual_rate_percent, terms.tenure_months)
    total_interest, total_amount = total_interest_and_amount(terms.principal, monthly, terms.tenure_months)
    return jsonify(
        {
            "monthly_emi": monthly,
            "total_interest": total_interest,
            "total_amount": total_amount,
            "tenure_months": terms.tenure_months,
        }
    )


@api.post("/schedule")
def schedule():
    body = _json_body()
    terms = _terms(body)
    overpayment = validate_overpayment(_number(body, "monthly_overpayment", 0))
    records = generate_schedule(terms.principal, terms.annual_rate_percent, terms.tenure_months, overpayment)
    return jsonify(
        {
            "monthly_emi": compute_emi(terms.principal, terms.annual_rate_percent, terms.tenure_months),
            "summary": to_jsonable(summarize_schedule(records)),
            "schedule": to_jsonable(records),
        }
    )


@api.post("/overpayment")
def overpayment():
    body = _json_body()
    terms = _terms(body)
    extra = validate_overpayment(_number(body, "monthly_overpayment"))
    result = calculate_overpayment_impact(terms.principal, terms.annual_rate_percent, terms.tenure_months, extra)
    return jsonify(_result_payload(result, _include_schedule(body)))


@api.post("/part-payment")
def part_payment():
    body = _json_body()
    result = calculate_part_payment_impact(*_part_payment_args(body))
    return jsonify(_result_payload(result, _include_schedule(body)))


@api.post("/fixed-rate")
def fixed_rate():
    body = _json_body()
    principal = _number(body, "principal")
    fixed = _number(body, "fixed_rate_percent")
    months = _integer(body, "fixed_rate_months")
    post_fixed = _number(body, "post_fixed_rate_percent")
    tenure = _integer(body, "tenure_months")
    extra = validate_overpayment(_number(body, "monthly_overpayment", 0))
    validate_loan_terms(LoanTerms(principal, fixed, tenure))
    validate_fixed_rate(fixed, months, post_fixed, tenure)
    result = calculate_fixed_rate_impact(principal, fixed, months, post_fixed, tenure, extra)
    return jsonify(_result_payload(result, _include_schedule(body)))


@api.post("/advanced")
def advanced():
    body = _json_body()
    result = calculate_advanced(_advanced_input(body))
    return jsonify(_result_payload(result, _include_schedule(body)))


def _build_scenario(body: Mapping[str, Any]):
    name = str(body.get("name") or "").strip() or "Scenario"
    kind = body.get("kind", "loan")
    if kind == "loan":
        return scenario_from_terms(name, _terms(body))
    if kind == "overpayment":
        terms = _terms(body)
        extra = validate_overpayment(_number(body, "monthly_overpayment"))
        result = calculate_overpayment_impact(
            terms.principal, terms.annual_rate_percent, terms.tenure_months, extra
        )
        return scenario_from_overpayment(name, terms, result)
    if kind == "part_payment":
        args = _part_payment_args(body)
        return scenario_from_part_payment(name, args[2], calculate_part_payment_impact(*args))
    if kind == "advanced":
        data = _advanced_input(body)
        return scenario_from_advanced(name, data, calculate_advanced(data))
    raise BadRequest(f"Unknown scenario kind: {kind}")


@api.get("/scenarios")
def list_scenarios():
    user_token = _ensure_user_token()
    return jsonify(to_jsonable(_store().list_scenarios(user_token)))


@api.post("/scenarios")
def add_scenario():
    user_token = _ensure_user_token()
    scenario = _build_scenario(_json_body())
    _store().add_scenario(user_token, scenario)
    current_app.logger.info("Saved scenario %s (%s)", scenario.id, scenario.name)
    return jsonify(to_jsonable(scenario)), 201


@api.delete("/scenarios/<scenario_id>")
def remove_scenario(scenario_id: str):
    if not _store().remove_scenario(session.get("user_token"), scenario_id):
        return jsonify({"error": f"Unknown scenario: {scenario_id}"}), 404
    return "", 204


@api.delete("/scenarios")
def clear_scenarios():
    _store().clear_scenarios(session.get("user_token"))
    return "", 204


@api.get("/compare")
def compare():
    user_token = _ensure_user_token()
    comparison = compare_scenarios(_store().list_scenarios(user_token))
    best = {}
    for metric in COMPARISON_METRICS:
        winner = comparison.best(metric)
        best[metric] = winner.id if winner else None
    return jsonify(
        {
            "scenarios": to_jsonable(comparison.scenarios),
            "metrics": {metric: getattr(comparison, metric) for metric in COMPARISON_METRICS},
            "best": best,
            "differences": comparison.differences() if comparison.scenarios else [],
        }
    )


def create_app(overrides: Optional[Mapping[str, Any]] = None) -> Flask:
    """Build the application; ``overrides`` win over environment settings."""
    app = Flask(__name__)
    app.config["SECRET_KEY"] = os.environ.get("FLASK_SECRET_KEY", "dev-secret-key")
    app.config["SCENARIO_DATABASE_URL"] = os.environ.get("SCENARIO_DATABASE_URL")
    app.config["SCENARIO_MAX_PER_USER"] = int(os.environ.get("SCENARIO_MAX_PER_USER", "10"))
    if overrides:
        app.config.update(overrides)

    app.extensions["scenario_store"] = create_store(
        app.config["SCENARIO_DATABASE_URL"], max_per_user=app.config["SCENARIO_MAX_PER_USER"]
    )
    app.register_blueprint(api)
    return app


if __name__ == "__main__":
    print("Starting Mortgage Calculator API...")
    create_app().run(host="0.0.0.0", port=8710, debug=True)
