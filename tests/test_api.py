"""End-to-end tests through the HTTP API."""

import re
from datetime import date

from conftest import (
    VENDOR_PASSWORD,
    auth_headers,
    make_contract,
    make_unit,
    make_user,
    make_vendor_with_booking,
)
from housnkuh.models import RentalUnit

REGISTRATION = {
    "email": "Hof@Example.com",
    "password": VENDOR_PASSWORD,
    "name": "Anna Mueller",
    "company": "Hof Mueller",
    "street": "Dorfstrasse",
    "houseNumber": "12",
    "postalCode": "95679",
    "city": "Waldershof",
    "package": {
        "packageName": "Starter",
        "unitCounts": {"standard": 1},
        "rentalDuration": 6,
        "commissionType": "basic",
        "monthlyPrice": 33.25,
        "desiredStartDate": "2030-01-01",
    },
}


def extract_token(mjml: str) -> str:
    return re.search(r"token=([A-Za-z0-9_\-]+)", mjml).group(1)


class TestVendorOnboarding:
    def test_register_confirm_login(self, client, sent_emails):
        response = client.post("/vendors/register", json=REGISTRATION)
        assert response.status_code == 201
        body = response.json()
        assert body["email"] == "hof@example.com"
        assert body["bookingStatus"] == "pending"
        assert body["monthlyPrice"] == 33.25

        # Login is refused until the email is confirmed
        response = client.post("/vendors/login", json={"email": "hof@example.com", "password": VENDOR_PASSWORD})
        assert response.status_code == 403

        assert sent_emails[0]["to"] == "hof@example.com"
        token = extract_token(sent_emails[0]["mjml"])

        response = client.post("/vendors/confirm-email", json={"token": token})
        assert response.status_code == 200
        assert response.json()["accountStatus"] == "active"
        assert sent_emails[-1]["to"] == "admin@housnkuh.de"

        response = client.post("/vendors/confirm-email", json={"token": token})
        assert response.status_code == 400

        response = client.post("/vendors/login", json={"email": "hof@example.com", "password": VENDOR_PASSWORD})
        assert response.status_code == 200
        access_token = response.json()["accessToken"]

        response = client.get("/vendors/me/contracts", headers={"Authorization": f"Bearer {access_token}"})
        assert response.status_code == 200
        assert response.json() == []

    def test_duplicate_registration(self, client):
        assert client.post("/vendors/register", json=REGISTRATION).status_code == 201
        response = client.post("/vendors/register", json=REGISTRATION)
        assert response.status_code == 409
        assert response.json()["error"] == "conflict"

    def test_invalid_registration(self, client, sent_emails):
        response = client.post("/vendors/register", json={**REGISTRATION, "postalCode": "123"})
        assert response.status_code == 400
        assert response.json()["error"] == "validation_error"
        assert sent_emails == []

    def test_malformed_body(self, client):
        assert client.post("/vendors/register", json={"email": "x@example.com"}).status_code == 422

    def test_wrong_password(self, client, db_session):
        make_user(db_session, email="hof@example.com")
        response = client.post("/vendors/login", json={"email": "hof@example.com", "password": "Falsch123!"})
        assert response.status_code == 401


class TestAdminBookings:
    def test_pending_list_and_approval(self, client, db_session, admin_headers, sent_emails):
        vendor = make_vendor_with_booking(db_session)
        unit = make_unit(db_session, "A1")

        response = client.get("/admin/bookings/pending", headers=admin_headers)
        assert response.status_code == 200
        [pending] = response.json()
        assert pending["vendorEmail"] == vendor.email
        assert pending["emailConfirmed"] is True
        assert pending["price"]["monthlyTotal"] == 126.0

        response = client.post(
            f"/admin/bookings/{pending['id']}/approve",
            json={"unitIds": [unit.id], "scheduledStartDate": "2030-01-01"},
            headers=admin_headers,
        )
        assert response.status_code == 200
        contract = response.json()["contract"]
        assert contract["status"] == "scheduled"
        assert contract["impactFrom"] == "2030-01-01"
        assert contract["impactTo"] == "2031-01-01"
        assert contract["services"][0]["label"] == "A1"
        assert sent_emails[-1]["to"] == vendor.email

        assert client.get("/admin/bookings/pending", headers=admin_headers).json() == []

        response = client.get("/vendors/me/contracts", headers=auth_headers(vendor))
        assert [c["id"] for c in response.json()] == [contract["id"]]

    def test_conflicting_approval(self, client, db_session, admin_headers):
        vendor = make_vendor_with_booking(db_session)
        other = make_user(db_session, email="other@example.com")
        unit = make_unit(db_session, "A1")
        make_contract(db_session, other, [unit], date(2029, 6, 1), date(2030, 6, 1), status="scheduled")

        response = client.post(
            f"/admin/bookings/{vendor.pending_booking.id}/approve",
            json={"unitIds": [unit.id], "scheduledStartDate": "2030-01-01"},
            headers=admin_headers,
        )
        assert response.status_code == 409
        assert response.json()["context"]["unitIds"] == [unit.id]

    def test_unknown_booking(self, client, admin_headers):
        response = client.post("/admin/bookings/999/approve", json={"unitIds": [1]}, headers=admin_headers)
        assert response.status_code == 404

    def test_reject(self, client, db_session, admin_headers, sent_emails):
        vendor = make_vendor_with_booking(db_session)
        response = client.post(
            f"/admin/bookings/{vendor.pending_booking.id}/reject",
            json={"reason": "Kein Platz"},
            headers=admin_headers,
        )
        assert response.status_code == 200
        assert response.json()["status"] == "cancelled"
        assert "Kein Platz" in sent_emails[-1]["mjml"]

    def test_requires_authentication(self, client):
        assert client.get("/admin/bookings/pending").status_code in (401, 403)
        response = client.get("/admin/bookings/pending", headers={"Authorization": "Bearer not-a-jwt"})
        assert response.status_code == 401

    def test_requires_admin(self, client, db_session):
        vendor = make_user(db_session)
        assert client.get("/admin/bookings/pending", headers=auth_headers(vendor)).status_code == 403


class TestContracts:
    def test_vendor_cancels_own_scheduled_contract(self, client, db_session, sent_emails):
        vendor = make_user(db_session)
        unit = make_unit(db_session, "A1")
        contract = make_contract(db_session, vendor, [unit], date(2030, 1, 1), date(2031, 1, 1), status="scheduled")

        response = client.post(
            f"/vendors/me/contracts/{contract.id}/cancel", json={"reason": "Umzug"}, headers=auth_headers(vendor)
        )
        assert response.status_code == 200
        assert response.json()["status"] == "cancelled"
        assert response.json()["effectiveStatus"] == "cancelled"
        assert sent_emails[-1]["to"] == vendor.email

        response = client.post(
            f"/vendors/me/contracts/{contract.id}/cancel", json={}, headers=auth_headers(vendor)
        )
        assert response.status_code == 409

    def test_vendor_cannot_cancel_foreign_contract(self, client, db_session):
        owner = make_user(db_session, email="owner@example.com")
        intruder = make_user(db_session, email="intruder@example.com")
        unit = make_unit(db_session, "A1")
        contract = make_contract(db_session, owner, [unit], date(2030, 1, 1), date(2031, 1, 1), status="scheduled")

        response = client.post(f"/vendors/me/contracts/{contract.id}/cancel", json={}, headers=auth_headers(intruder))
        assert response.status_code == 404

    def test_admin_lists_and_reconciles(self, client, db_session, admin_headers):
        vendor = make_user(db_session)
        unit = make_unit(db_session, "A1")
        contract = make_contract(db_session, vendor, [unit], date(2024, 1, 1), date(2099, 1, 1), status="scheduled")

        listed = client.get("/admin/contracts?status=scheduled", headers=admin_headers).json()
        assert [c["id"] for c in listed] == [contract.id]
        # Derived status is reported without being persisted
        assert listed[0]["effectiveStatus"] == "active"

        response = client.post("/admin/contracts/reconcile-statuses", headers=admin_headers)
        assert response.status_code == 200
        assert response.json()["activated"] == 1

        response = client.get(f"/admin/contracts/{contract.id}", headers=admin_headers)
        assert response.json()["status"] == "active"

    def test_unknown_status_filter(self, client, admin_headers):
        assert client.get("/admin/contracts?status=archived", headers=admin_headers).status_code == 400


class TestRentalUnits:
    def test_create_update_and_list(self, client, admin_headers):
        response = client.post(
            "/admin/rental-units", json={"label": "K1", "unitType": "cooled"}, headers=admin_headers
        )
        assert response.status_code == 201
        unit = response.json()
        assert unit["monthlyPrice"] == 50.0
        assert unit["available"] is True

        response = client.patch(
            f"/admin/rental-units/{unit['id']}", json={"monthlyPrice": 55.0}, headers=admin_headers
        )
        assert response.json()["monthlyPrice"] == 55.0

        listed = client.get("/admin/rental-units?type=cooled", headers=admin_headers).json()
        assert [u["label"] for u in listed] == ["K1"]

        response = client.post(
            "/admin/rental-units", json={"label": "K1", "unitType": "cooled"}, headers=admin_headers
        )
        assert response.status_code == 409

    def test_unknown_unit(self, client, admin_headers):
        assert client.get("/admin/rental-units/999", headers=admin_headers).status_code == 404

    def test_availability_endpoints(self, client, db_session, admin_headers):
        vendor = make_user(db_session)
        booked = make_unit(db_session, "A1")
        free = make_unit(db_session, "A2")
        make_contract(db_session, vendor, [booked], date(2030, 1, 1), date(2031, 1, 1), status="scheduled")

        response = client.get(
            f"/admin/rental-units/{booked.id}/availability?from=2030-06-01&to=2030-07-01", headers=admin_headers
        )
        body = response.json()
        assert body["available"] is False
        assert body["conflicts"][0]["impactTo"] == "2031-01-01"
        assert body["nextAvailable"] == "2031-01-01"

        response = client.post(
            "/admin/rental-units/availability/batch",
            json={"unitIds": [booked.id, free.id], "startDate": "2030-06-01", "endDate": "2030-07-01"},
            headers=admin_headers,
        )
        results = response.json()
        assert results[str(booked.id)]["available"] is False
        assert results[str(free.id)]["available"] is True

        response = client.get("/rental-units/available?from=2030-06-01&to=2030-07-01&type=standard")
        assert [u["label"] for u in response.json()] == ["A2"]

    def test_public_search_hides_booking_references(self, client, db_session):
        vendor = make_user(db_session)
        unit = make_unit(db_session, "A1")
        contract = make_contract(db_session, vendor, [unit], date(2030, 1, 1), date(2030, 6, 1), status="scheduled")
        unit.current_contract_id = contract.id
        db_session.commit()

        response = client.get("/rental-units/available?from=2030-06-01&to=2030-07-01")
        assert response.status_code == 200
        [entry] = response.json()
        assert entry["label"] == "A1"
        assert "currentContractId" not in entry
        assert "available" not in entry

    def test_inverted_range(self, client, db_session, admin_headers):
        unit = make_unit(db_session, "A1")
        response = client.get(
            f"/admin/rental-units/{unit.id}/availability?from=2030-07-01&to=2030-06-01", headers=admin_headers
        )
        assert response.status_code == 400


class TestStoreSettings:
    def test_update_and_public_status(self, client, db_session, admin_headers, sent_emails):
        waiting = make_vendor_with_booking(db_session, email="waiting@example.com")

        response = client.put(
            "/admin/settings/store-opening",
            json={"enabled": True, "openingDate": "2099-05-01", "reminderDays": [7, 30]},
            headers=admin_headers,
        )
        assert response.status_code == 200
        body = response.json()
        assert body["enabled"] is True
        assert body["reminderDays"] == [30, 7]
        assert body["isStoreOpen"] is False
        assert sent_emails[-1]["to"] == waiting.email

        status = client.get("/store/status").json()
        assert status["isStoreOpen"] is False
        assert status["openingDate"] == "2099-05-01"

    def test_past_opening_date(self, client, admin_headers):
        response = client.put(
            "/admin/settings/store-opening", json={"enabled": True, "openingDate": "2000-01-01"}, headers=admin_headers
        )
        assert response.status_code == 400

    def test_partial_update_keeps_opening_date(self, client, admin_headers):
        client.put(
            "/admin/settings/store-opening", json={"enabled": True, "openingDate": "2099-05-01"}, headers=admin_headers
        )
        response = client.put(
            "/admin/settings/store-opening", json={"trialMonthEnabled": True}, headers=admin_headers
        )
        assert response.status_code == 200
        assert response.json()["openingDate"] == "2099-05-01"
        assert response.json()["trialMonthEnabled"] is True

        response = client.put(
            "/admin/settings/store-opening", json={"clearOpeningDate": True}, headers=admin_headers
        )
        assert response.json()["openingDate"] is None

    def test_defaults(self, client, admin_headers):
        body = client.get("/admin/settings/store-opening", headers=admin_headers).json()
        assert body["enabled"] is False
        assert body["reminderDays"] == [30, 14, 7, 1]


class TestAppSurface:
    def test_health(self, client):
        assert client.get("/health").json() == {"status": "healthy"}

    def test_security_headers(self, client):
        response = client.get("/")
        assert response.headers["X-Content-Type-Options"] == "nosniff"
        assert "Content-Security-Policy" in response.headers

    def test_unit_rows_are_versioned(self, db_session):
        unit = make_unit(db_session, "V1")
        first = unit.version
        unit.monthly_price = 40.0
        db_session.commit()
        assert db_session.get(RentalUnit, unit.id).version == first + 1
