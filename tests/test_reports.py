"""Tests for revenue, occupancy and trial-contract reports."""

from datetime import date

import pytest

from conftest import auth_headers, make_contract, make_unit, make_user
from housnkuh.domain.reports.service import ReportService, TrialPhase, billing_start, trial_phase
from housnkuh.shared.exceptions import ValidationError

TODAY = date(2025, 9, 15)


@pytest.fixture
def service(db_session):
    return ReportService(db_session)


@pytest.fixture
def vendor(db_session):
    return make_user(db_session)


class TestBillingStart:
    def test_regular_contract_bills_from_payable_from(self, db_session, vendor):
        contract = make_contract(db_session, vendor, [make_unit(db_session, "A1")], date(2025, 9, 1), date(2026, 9, 1))
        assert billing_start(contract) == date(2025, 9, 1)

    def test_trial_month_is_skipped(self, db_session, vendor):
        contract = make_contract(
            db_session,
            vendor,
            [make_unit(db_session, "A1")],
            date(2025, 9, 1),
            date(2026, 10, 1),
            trial_booking=True,
            trial_ends_on=date(2025, 10, 1),
        )
        assert contract.payable_from == date(2025, 9, 1)
        assert billing_start(contract) == date(2025, 10, 1)

    def test_store_opening_after_trial_wins(self, db_session, vendor):
        contract = make_contract(
            db_session,
            vendor,
            [make_unit(db_session, "A1")],
            date(2025, 9, 1),
            date(2026, 10, 1),
            trial_booking=True,
            trial_ends_on=date(2025, 10, 1),
        )
        contract.payable_from = date(2025, 11, 1)
        assert billing_start(contract) == date(2025, 11, 1)


class TestMonthlyRevenue:
    def test_trial_month_is_not_billed(self, db_session, service, vendor):
        regular_unit = make_unit(db_session, "A1", price=35.0)
        trial_unit = make_unit(db_session, "B1", price=40.0)
        make_contract(db_session, vendor, [regular_unit], date(2025, 9, 1), date(2026, 9, 1))
        make_contract(
            db_session,
            vendor,
            [trial_unit],
            date(2025, 9, 1),
            date(2026, 10, 1),
            trial_booking=True,
            trial_ends_on=date(2025, 10, 1),
        )

        september = service.calculate_monthly_revenue(date(2025, 9, 1), today=TODAY)
        assert september["total_revenue"] == 35.0
        assert september["paid_contracts"] == 1
        assert september["trial_contracts"] == 1
        assert [(u["label"], u["revenue"], u["trial_contracts"]) for u in september["units"]] == [
            ("A1", 35.0, 0),
            ("B1", 0.0, 1),
        ]

        october = service.calculate_monthly_revenue(date(2025, 10, 1), today=TODAY)
        assert october["total_revenue"] == 75.0
        assert october["trial_contracts"] == 0
        assert october["is_projection"] is True

    def test_partial_months_are_prorated(self, db_session, service, vendor):
        make_contract(db_session, vendor, [make_unit(db_session, "A1", price=30.0)], date(2025, 9, 16), date(2026, 9, 16))
        make_contract(
            db_session,
            vendor,
            [make_unit(db_session, "B1", price=31.0)],
            date(2025, 9, 16),
            date(2026, 10, 16),
            trial_booking=True,
            trial_ends_on=date(2025, 10, 16),
        )

        assert service.calculate_monthly_revenue(date(2025, 9, 1), today=TODAY)["total_revenue"] == 15.0
        october = service.calculate_monthly_revenue(date(2025, 10, 1), today=TODAY)
        assert {u["label"]: u["revenue"] for u in october["units"]} == {"A1": 30.0, "B1": 16.0}

    def test_contract_ending_mid_month(self, db_session, service, vendor):
        make_contract(db_session, vendor, [make_unit(db_session, "A1", price=30.0)], date(2025, 3, 1), date(2025, 9, 11))
        assert service.calculate_monthly_revenue(date(2025, 9, 1), today=TODAY)["total_revenue"] == 10.0

    def test_billing_deferred_until_store_opening(self, db_session, service, vendor):
        contract = make_contract(db_session, vendor, [make_unit(db_session, "A1")], date(2025, 9, 1), date(2026, 9, 1))
        contract.payable_from = date(2025, 10, 1)
        db_session.commit()

        report = service.calculate_monthly_revenue(date(2025, 9, 1), today=TODAY)
        assert report["total_revenue"] == 0.0
        assert report["deferred_contracts"] == 1
        assert report["paid_contracts"] == 0

    def test_cancelled_and_pending_contracts_earn_nothing(self, db_session, service, vendor):
        unit = make_unit(db_session, "A1")
        make_contract(db_session, vendor, [unit], date(2025, 9, 1), date(2026, 9, 1), status="cancelled")
        make_contract(db_session, vendor, [unit], date(2025, 9, 1), date(2026, 9, 1), status="pending")

        report = service.calculate_monthly_revenue(date(2025, 9, 1), today=TODAY)
        assert report["total_revenue"] == 0.0
        assert report["units"] == []

    def test_any_day_selects_its_month(self, service):
        assert service.calculate_monthly_revenue(date(2025, 9, 23), today=TODAY)["month"] == date(2025, 9, 1)


class TestRevenueRange:
    def test_covers_every_month_inclusive(self, db_session, service, vendor):
        make_contract(db_session, vendor, [make_unit(db_session, "A1", price=35.0)], date(2025, 9, 1), date(2026, 9, 1))

        reports = service.get_revenue_range(date(2025, 8, 15), date(2025, 10, 2), today=TODAY)
        assert [r["month"] for r in reports] == [date(2025, 8, 1), date(2025, 9, 1), date(2025, 10, 1)]
        assert [r["total_revenue"] for r in reports] == [0.0, 35.0, 35.0]
        assert [r["is_projection"] for r in reports] == [False, False, True]

    def test_inverted_range(self, service):
        with pytest.raises(ValidationError):
            service.get_revenue_range(date(2025, 10, 1), date(2025, 9, 1))

    def test_range_is_capped(self, service):
        with pytest.raises(ValidationError):
            service.get_revenue_range(date(2025, 1, 1), date(2028, 1, 1))


class TestProjectedOccupancy:
    def test_counts_units_held_by_blocking_contracts(self, db_session, service, vendor):
        booked = make_unit(db_session, "A1")
        make_unit(db_session, "A2")
        make_contract(db_session, vendor, [booked], date(2025, 9, 1), date(2025, 11, 1), status="scheduled")
        make_contract(db_session, vendor, [booked], date(2025, 11, 1), date(2026, 1, 1), status="cancelled")

        result = service.get_projected_occupancy(months=4, today=date(2025, 8, 20))
        assert [entry["month"] for entry in result] == [
            date(2025, 8, 1),
            date(2025, 9, 1),
            date(2025, 10, 1),
            date(2025, 11, 1),
        ]
        assert [entry["occupied_units"] for entry in result] == [0, 1, 1, 0]
        assert result[1]["total_units"] == 2
        assert result[1]["occupancy_rate"] == 50.0

    def test_no_units(self, service):
        assert service.get_projected_occupancy(months=1, today=TODAY)[0]["occupancy_rate"] == 0.0

    @pytest.mark.parametrize("months", [0, 37])
    def test_month_count_bounds(self, service, months):
        with pytest.raises(ValidationError):
            service.get_projected_occupancy(months=months, today=TODAY)


@pytest.fixture
def trial_ledger(db_session, vendor):
    """One trial booking per phase as of TODAY, plus a regular contract"""
    upcoming = make_contract(
        db_session, vendor, [make_unit(db_session, "U1")], date(2025, 10, 1), date(2026, 11, 1),
        status="scheduled", trial_booking=True, trial_ends_on=date(2025, 11, 1),
    )
    in_trial = make_contract(
        db_session, vendor, [make_unit(db_session, "T1")], date(2025, 9, 1), date(2026, 10, 1),
        trial_booking=True, trial_ends_on=date(2025, 10, 1),
    )
    converted = make_contract(
        db_session, vendor, [make_unit(db_session, "C1")], date(2025, 7, 1), date(2026, 8, 1),
        trial_booking=True, trial_ends_on=date(2025, 8, 1),
    )
    cancelled = make_contract(
        db_session, vendor, [make_unit(db_session, "X1")], date(2025, 9, 1), date(2025, 9, 10),
        status="cancelled", trial_booking=True, trial_ends_on=date(2025, 10, 1),
    )
    cancelled.trial_cancelled = True
    cancelled.trial_cancellation_date = date(2025, 9, 10)
    make_contract(db_session, vendor, [make_unit(db_session, "R1")], date(2025, 9, 1), date(2026, 9, 1))
    db_session.commit()
    return {"upcoming": upcoming, "in_trial": in_trial, "converted": converted, "cancelled": cancelled}


class TestTrialReports:
    def test_phase_per_contract(self, trial_ledger):
        assert trial_phase(trial_ledger["upcoming"], TODAY) == TrialPhase.UPCOMING
        assert trial_phase(trial_ledger["in_trial"], TODAY) == TrialPhase.IN_TRIAL
        assert trial_phase(trial_ledger["converted"], TODAY) == TrialPhase.CONVERTED
        assert trial_phase(trial_ledger["cancelled"], TODAY) == TrialPhase.CANCELLED

    def test_trial_end_date_is_exclusive(self, trial_ledger):
        assert trial_phase(trial_ledger["in_trial"], date(2025, 9, 30)) == TrialPhase.IN_TRIAL
        assert trial_phase(trial_ledger["in_trial"], date(2025, 10, 1)) == TrialPhase.CONVERTED

    def test_list_contains_only_trial_bookings_newest_first(self, service, trial_ledger):
        contracts = service.get_trial_contracts(today=TODAY)
        expected = sorted((c.id for c in trial_ledger.values()), reverse=True)
        assert [contract.id for contract, _ in contracts] == expected

    def test_filter_by_phase(self, service, trial_ledger):
        contracts = service.get_trial_contracts(phase="in_trial", today=TODAY)
        assert [(contract.id, phase) for contract, phase in contracts] == [
            (trial_ledger["in_trial"].id, TrialPhase.IN_TRIAL)
        ]

    def test_unknown_phase(self, service):
        with pytest.raises(ValidationError):
            service.get_trial_contracts(phase="expired")

    def test_statistics(self, service, trial_ledger):
        assert service.get_trial_statistics(today=TODAY) == {
            "total": 4,
            "upcoming": 1,
            "in_trial": 1,
            "converted": 1,
            "cancelled": 1,
            "cancelled_in_trial": 1,
            "conversion_rate": 50.0,
        }

    def test_statistics_without_trials(self, service):
        stats = service.get_trial_statistics(today=TODAY)
        assert stats["total"] == 0
        assert stats["conversion_rate"] == 0.0


class TestReportEndpoints:
    def test_monthly_revenue(self, client, db_session, admin_headers, vendor):
        make_contract(db_session, vendor, [make_unit(db_session, "A1", price=35.0)], date(2025, 9, 1), date(2026, 9, 1))

        response = client.get("/admin/reports/revenue?year=2025&month=10", headers=admin_headers)
        assert response.status_code == 200
        body = response.json()
        assert body["month"] == "2025-10-01"
        assert body["totalRevenue"] == 35.0
        assert body["units"][0]["label"] == "A1"

    def test_revenue_range(self, client, admin_headers):
        response = client.get("/admin/reports/revenue/range?from=2025-01-01&to=2025-03-01", headers=admin_headers)
        assert [entry["month"] for entry in response.json()] == ["2025-01-01", "2025-02-01", "2025-03-01"]

        response = client.get("/admin/reports/revenue/range?from=2025-03-01&to=2025-01-01", headers=admin_headers)
        assert response.status_code == 400

    def test_occupancy(self, client, db_session, admin_headers):
        make_unit(db_session, "A1")
        body = client.get("/admin/reports/occupancy?months=3", headers=admin_headers).json()
        assert len(body) == 3
        assert body[0]["totalUnits"] == 1

        assert client.get("/admin/reports/occupancy?months=0", headers=admin_headers).status_code == 400

    def test_trial_report(self, client, admin_headers, trial_ledger):
        body = client.get("/admin/reports/trials", headers=admin_headers).json()
        assert body["statistics"]["total"] == 4
        assert body["statistics"]["cancelledInTrial"] == 1
        assert {entry["contractId"] for entry in body["contracts"]} == {c.id for c in trial_ledger.values()}
        assert all(entry["vendorEmail"] == "vendor@example.com" for entry in body["contracts"])

        body = client.get("/admin/reports/trials?phase=cancelled", headers=admin_headers).json()
        assert [entry["units"] for entry in body["contracts"]] == [["X1"]]

    def test_reports_require_admin(self, client, vendor):
        response = client.get("/admin/reports/revenue?year=2025&month=9", headers=auth_headers(vendor))
        assert response.status_code == 403
