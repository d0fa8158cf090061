"""
Tests for the Flask JSON API and the scenario store.
"""

import pytest

from mortgage_calc.comparison import scenario_from_terms
from mortgage_calc.data_models import LoanTerms
from mortgage_calc_web.app import create_app
from mortgage_calc_web.scenario_store import ScenarioStore

LOAN = {"principal": 300000, "annual_rate_percent": 5, "tenure_months": 360}


@pytest.fixture
def app(tmp_path):
    return create_app(
        {
            "TESTING": True,
            "SECRET_KEY": "test",
            "SCENARIO_DATABASE_URL": f"sqlite:///{tmp_path / 'scenarios.sqlite3'}",
            "SCENARIO_MAX_PER_USER": 3,
        }
    )


@pytest.fixture
def client(app):
    return app.test_client()


class TestCalculationRoutes:
    """Test the stateless calculation endpoints."""

    def test_emi(self, client):
        response = client.post("/api/emi", json=LOAN)
        assert response.status_code == 200
        body = response.get_json()
        assert round(body["monthly_emi"], 2) == 1610.46
        assert body["tenure_months"] == 360

    def test_missing_field(self, client):
        response = client.post("/api/emi", json={"principal": 300000, "annual_rate_percent": 5})
        assert response.status_code == 400
        assert "tenure_months" in response.get_json()["error"]

    def test_rate_out_of_range(self, client):
        response = client.post("/api/emi", json={**LOAN, "annual_rate_percent": 45})
        assert response.status_code == 400

    def test_non_numeric_field(self, client):
        response = client.post("/api/emi", json={**LOAN, "principal": "lots"})
        assert response.status_code == 400

    def test_non_finite_principal(self, client):
        """NaN is rejected instead of leaking into the JSON response."""
        response = client.post("/api/overpayment", json={**LOAN, "principal": "nan", "monthly_overpayment": 100})
        assert response.status_code == 400
        assert "Loan amount" in response.get_json()["error"]

    def test_infinite_tenure(self, client):
        response = client.post("/api/emi", json={**LOAN, "tenure_months": "inf"})
        assert response.status_code == 400
        assert "tenure_months" in response.get_json()["error"]

    def test_non_finite_overpayment(self, client):
        response = client.post("/api/overpayment", json={**LOAN, "monthly_overpayment": "nan"})
        assert response.status_code == 400

    @pytest.mark.parametrize("flag", [False, "false", "False"])
    def test_include_schedule_false(self, client, flag):
        response = client.post(
            "/api/overpayment", json={**LOAN, "monthly_overpayment": 300, "include_schedule": flag}
        )
        assert response.status_code == 200
        assert "schedule" not in response.get_json()

    def test_include_schedule_string_true(self, client):
        response = client.post(
            "/api/overpayment", json={**LOAN, "monthly_overpayment": 300, "include_schedule": "true"}
        )
        assert "schedule" in response.get_json()

    def test_include_schedule_rejects_other_values(self, client):
        response = client.post(
            "/api/overpayment", json={**LOAN, "monthly_overpayment": 300, "include_schedule": "maybe"}
        )
        assert response.status_code == 400

    def test_schedule(self, client):
        response = client.post("/api/schedule", json={**LOAN, "tenure_months": 120, "principal": 100000})
        body = response.get_json()
        assert len(body["schedule"]) == 120
        assert body["summary"]["tenure_months"] == 120
        assert body["schedule"][-1]["balance"] == 0

    def test_overpayment_without_schedule(self, client):
        response = client.post(
            "/api/overpayment", json={**LOAN, "monthly_overpayment": 300, "include_schedule": False}
        )
        body = response.get_json()
        assert body["tenure_saved"] > 0
        assert "schedule" not in body

    def test_part_payment_full_balance(self, client):
        response = client.post(
            "/api/part-payment",
            json={
                "current_balance": 50000,
                "remaining_tenure_months": 60,
                "annual_rate_percent": 4,
                "lump_sum_amount": 50000,
                "original_loan_amount": 200000,
            },
        )
        body = response.get_json()
        assert body["new_tenure_months"] == 0
        assert body["interest_saved"] == body["original_total_interest"]
        assert body["schedule"] == []

    def test_fixed_rate(self, client):
        response = client.post(
            "/api/fixed-rate",
            json={
                "principal": 300000,
                "fixed_rate_percent": 3,
                "fixed_rate_months": 24,
                "post_fixed_rate_percent": 6,
                "tenure_months": 360,
            },
        )
        assert response.status_code == 200
        assert response.get_json()["remaining_tenure_after_fixed"] == 336

    def test_advanced(self, client):
        response = client.post(
            "/api/advanced",
            json={
                **LOAN,
                "loan_start_date": "2026-01-01",
                "emi_payment_day": 15,
                "lump_sum": {"amount": 25000, "date": "2027-01-20"},
                "fixed_rate": {"fixed_rate_months": 24, "fixed_rate_percent": 3, "variable_rate_percent": 6},
            },
        )
        assert response.status_code == 200
        body = response.get_json()
        assert body["total_lump_sum"] == 25000
        assert body["schedule"][0]["date"] == "2026-01-15"
        assert body["schedule"][12]["is_lump_sum_month"] is True

    def test_advanced_bad_date(self, client):
        response = client.post("/api/advanced", json={**LOAN, "loan_start_date": "soon"})
        assert response.status_code == 400


class TestScenarioRoutes:
    """Test saving, listing, comparing and deleting scenarios."""

    def test_add_list_compare_delete(self, client):
        plain = client.post("/api/scenarios", json={**LOAN, "name": "Plain"})
        assert plain.status_code == 201
        fast = client.post(
            "/api/scenarios", json={**LOAN, "name": "Fast", "kind": "overpayment", "monthly_overpayment": 500}
        )
        assert fast.status_code == 201

        listed = client.get("/api/scenarios").get_json()
        assert [s["name"] for s in listed] == ["Plain", "Fast"]

        comparison = client.get("/api/compare").get_json()
        assert comparison["best"]["tenure"] == fast.get_json()["id"]
        assert comparison["best"]["monthly_emi"] == plain.get_json()["id"]
        assert comparison["differences"][1]["tenure"] < 0

        response = client.delete(f"/api/scenarios/{plain.get_json()['id']}")
        assert response.status_code == 204
        assert [s["name"] for s in client.get("/api/scenarios").get_json()] == ["Fast"]

    def test_unknown_scenario(self, client):
        client.get("/api/scenarios")
        response = client.delete("/api/scenarios/nope")
        assert response.status_code == 404
        assert response.get_json()["error"] == "Unknown scenario: nope"

    def test_unknown_kind(self, client):
        response = client.post("/api/scenarios", json={**LOAN, "kind": "rent"})
        assert response.status_code == 400

    def test_clear(self, client):
        client.post("/api/scenarios", json={**LOAN, "name": "One"})
        assert client.delete("/api/scenarios").status_code == 204
        assert client.get("/api/scenarios").get_json() == []

    def test_scenarios_are_per_session(self, app, client):
        client.post("/api/scenarios", json={**LOAN, "name": "Mine"})
        other = app.test_client()
        assert other.get("/api/scenarios").get_json() == []

    def test_empty_compare(self, client):
        body = client.get("/api/compare").get_json()
        assert body["scenarios"] == []
        assert body["best"]["tenure"] is None
        assert body["differences"] == []


class TestScenarioStore:
    """Test the store directly."""

    def test_oldest_scenarios_trimmed(self, tmp_path):
        store = ScenarioStore(f"sqlite:///{tmp_path / 'store.sqlite3'}", max_per_user=2)
        terms = LoanTerms(100000, 5, 120)
        for name in ("a", "b", "c"):
            store.add_scenario("user", scenario_from_terms(name, terms))
        assert [s.name for s in store.list_scenarios("user")] == ["b", "c"]

    def test_remove_requires_owner(self, tmp_path):
        store = ScenarioStore(f"sqlite:///{tmp_path / 'store.sqlite3'}")
        scenario = scenario_from_terms("a", LoanTerms(100000, 5, 120))
        store.add_scenario("owner", scenario)
        assert store.remove_scenario("intruder", scenario.id) is False
        assert store.remove_scenario("owner", scenario.id) is True
        assert store.list_scenarios("owner") == []

    def test_round_trips_scenario(self, tmp_path):
        store = ScenarioStore(f"sqlite:///{tmp_path / 'store.sqlite3'}")
        scenario = scenario_from_terms("a", LoanTerms(100000, 5, 120))
        store.add_scenario("owner", scenario)
        assert store.list_scenarios("owner") == [scenario]

    def test_missing_token_is_a_no_op(self, tmp_path):
        store = ScenarioStore(f"sqlite:///{tmp_path / 'store.sqlite3'}")
        store.add_scenario(None, scenario_from_terms("a", LoanTerms(100000, 5, 120)))
        assert store.list_scenarios(None) == []
