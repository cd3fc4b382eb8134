"""
Integration tests — admin API under /api/admin.

Coverage:
  - password login and bearer-token enforcement
  - registration listing, status filter, approve / reject / verify-payment
  - approval gated on completed payment; terminal states
  - CSV export
  - sponsor and volunteer moderation
  - dashboard stats
"""
from __future__ import annotations

import csv
import io

import pytest


def _verify_cash(client, admin_headers, reg_id: int, **extra):
    return client.post(
        f"/api/admin/registrations/{reg_id}/verify-payment",
        json={"method": "cash", **extra},
        headers=admin_headers,
    )


# ─────────────────────────── Auth ─────────────────────────────────────────────

class TestAdminAuth:
    def test_login_returns_bearer_token(self, client) -> None:
        resp = client.post("/api/admin/login", json={"password": "testing-admin-password"})
        assert resp.status_code == 200
        body = resp.get_json()
        assert body["ok"] is True
        assert body["token_type"] == "Bearer"
        assert body["token"]
        assert body["expires_at"]

    def test_wrong_password(self, client) -> None:
        resp = client.post("/api/admin/login", json={"password": "letmein"})
        assert resp.status_code == 401
        err = resp.get_json()["error"]
        assert err["code"] == 401
        assert err["message"] == "Invalid password."

    def test_missing_token(self, client) -> None:
        resp = client.get("/api/admin/registrations")
        assert resp.status_code == 401
        assert resp.get_json()["error"]["message"] == "Missing bearer token."

    def test_garbage_token(self, client) -> None:
        resp = client.get("/api/admin/registrations", headers={"Authorization": "Bearer not.a.jwt"})
        assert resp.status_code == 401
        assert resp.get_json()["error"]["message"] == "Invalid admin token."

    @pytest.mark.parametrize(
        "path",
        [
            "/api/admin/sponsors",
            "/api/admin/volunteers",
            "/api/admin/stats",
            "/api/admin/registrations.csv",
        ],
    )
    def test_every_admin_read_is_protected(self, client, path: str) -> None:
        assert client.get(path).status_code == 401

    def test_public_endpoints_need_no_token(self, client) -> None:
        assert client.get("/api/stats").status_code == 200


# ─────────────────────────── Registrations ────────────────────────────────────

class TestAdminRegistrations:
    def test_list_includes_payments_and_history(self, client, admin_headers, create_registration) -> None:
        create_registration(size=2)
        create_registration(registration_type="individual", size=1, team_name=None)

        body = client.get("/api/admin/registrations", headers=admin_headers).get_json()
        assert body["count"] == 2
        newest = body["registrations"][0]
        assert newest["registration_type"] == "individual"
        assert newest["payments"] == []
        assert newest["history"] == []

    def test_status_filter(self, client, admin_headers, create_registration) -> None:
        reg = create_registration()
        _verify_cash(client, admin_headers, reg["id"])
        create_registration()

        body = client.get("/api/admin/registrations?status=payment_completed", headers=admin_headers).get_json()
        assert body["count"] == 1
        assert body["registrations"][0]["id"] == reg["id"]

    def test_unknown_status_filter(self, client, admin_headers) -> None:
        resp = client.get("/api/admin/registrations?status=waitlisted", headers=admin_headers)
        assert resp.status_code == 400
        assert resp.get_json()["error"]["field"] == "status"

    def test_approve_before_payment_conflicts(self, client, admin_headers, create_registration) -> None:
        reg = create_registration()
        resp = client.post(f"/api/admin/registrations/{reg['id']}/approve", headers=admin_headers)
        assert resp.status_code == 409
        err = resp.get_json()["error"]
        assert err["state"] == "pending_payment"
        assert err["event"] == "approve"
        assert "after payment is completed" in err["message"]

    def test_verify_cash_then_approve(self, client, admin_headers, create_registration) -> None:
        reg = create_registration(size=3)

        resp = _verify_cash(client, admin_headers, reg["id"], amount="60", reference="cash-001")
        assert resp.status_code == 200
        body = resp.get_json()
        assert body["changed"] is True
        detail = body["registration"]
        assert detail["status"] == "payment_completed"
        assert detail["transaction_id"] == "cash-001"
        assert detail["payments"][0]["payment_method"] == "cash"
        assert detail["payments"][0]["status"] == "completed"
        assert detail["payments"][0]["amount"] == "60.00"
        assert [h["to_state"] for h in detail["history"]] == ["payment_processing", "payment_completed"]
        assert {h["actor"] for h in detail["history"]} == {"admin"}

        resp = client.post(
            f"/api/admin/registrations/{reg['id']}/approve", json={"note": "roster checked"}, headers=admin_headers
        )
        assert resp.status_code == 200
        detail = resp.get_json()["registration"]
        assert detail["status"] == "approved"
        assert detail["approved"] is True
        assert detail["allowed_events"] == []
        assert detail["history"][-1]["note"] == "roster checked"

    def test_second_approval_conflicts(self, client, admin_headers, create_registration) -> None:
        reg = create_registration()
        _verify_cash(client, admin_headers, reg["id"])
        client.post(f"/api/admin/registrations/{reg['id']}/approve", headers=admin_headers)

        resp = client.post(f"/api/admin/registrations/{reg['id']}/approve", headers=admin_headers)
        assert resp.status_code == 409
        assert resp.get_json()["error"]["state"] == "approved"

    def test_verify_twice_is_a_noop(self, client, admin_headers, create_registration) -> None:
        reg = create_registration()
        _verify_cash(client, admin_headers, reg["id"])
        resp = _verify_cash(client, admin_headers, reg["id"])
        assert resp.status_code == 200
        body = resp.get_json()
        assert body["changed"] is False
        assert len(body["registration"]["payments"]) == 1

    def test_verify_wrong_amount(self, client, admin_headers, create_registration) -> None:
        reg = create_registration(size=3)
        resp = _verify_cash(client, admin_headers, reg["id"], amount="40")
        assert resp.status_code == 400
        assert resp.get_json()["error"]["field"] == "amount"

    def test_verify_non_finite_amount(self, client, admin_headers, create_registration) -> None:
        reg = create_registration()
        resp = _verify_cash(client, admin_headers, reg["id"], amount="Infinity")
        assert resp.status_code == 400
        assert resp.get_json()["error"]["field"] == "amount"

    def test_paypal_cannot_be_verified_by_hand(self, client, admin_headers, create_registration) -> None:
        reg = create_registration()
        resp = client.post(
            f"/api/admin/registrations/{reg['id']}/verify-payment",
            json={"method": "paypal"},
            headers=admin_headers,
        )
        assert resp.status_code == 400
        assert resp.get_json()["error"]["field"] == "method"

    def test_reused_reference_is_rejected(self, client, admin_headers, create_registration) -> None:
        first = create_registration()
        second = create_registration()
        _verify_cash(client, admin_headers, first["id"], reference="venmo-77")
        resp = _verify_cash(client, admin_headers, second["id"], reference="venmo-77")
        assert resp.status_code == 400
        assert resp.get_json()["error"]["field"] == "reference"

    def test_reject_is_terminal(self, client, admin_headers, create_registration) -> None:
        reg = create_registration()
        resp = client.post(
            f"/api/admin/registrations/{reg['id']}/reject", json={"reason": "duplicate entry"}, headers=admin_headers
        )
        assert resp.status_code == 200
        detail = resp.get_json()["registration"]
        assert detail["status"] == "rejected"
        assert detail["history"][-1]["note"] == "duplicate entry"

        again = _verify_cash(client, admin_headers, reg["id"])
        assert again.status_code == 409

    def test_unknown_registration(self, client, admin_headers) -> None:
        resp = client.post("/api/admin/registrations/999/approve", headers=admin_headers)
        assert resp.status_code == 404
        assert resp.get_json()["error"]["resource"] == "registration"

    def test_csv_export(self, client, admin_headers, create_registration) -> None:
        create_registration(size=3)
        resp = client.get("/api/admin/registrations.csv", headers=admin_headers)
        assert resp.status_code == 200
        assert resp.mimetype == "text/csv"
        assert "registrations.csv" in resp.headers["Content-Disposition"]

        rows = list(csv.reader(io.StringIO(resp.get_data(as_text=True))))
        assert rows[0] == ["ID", "Team", "Type", "Players", "Player Names", "Fee", "Status", "Transaction", "Created"]
        assert rows[1][1:7] == [
            "Downtown Dribblers",
            "team",
            "3",
            "Player A; Player B; Player C",
            "60",
            "pending_payment",
        ]


# ─────────────────────────── Sponsors / Volunteers ────────────────────────────

class TestAdminModeration:
    def _sponsor(self, client) -> int:
        resp = client.post("/api/sponsors", json={"name": "Hill Country Bank", "email": "b@bank.test",
                                                  "donation_amount": "300"})
        return resp.get_json()["sponsor"]["id"]

    def test_approve_sponsor_puts_it_on_the_wall(self, client, admin_headers) -> None:
        sponsor_id = self._sponsor(client)
        assert client.get("/api/sponsors").get_json()["tiers"] == []

        resp = client.post(f"/api/admin/sponsors/{sponsor_id}/approve", headers=admin_headers)
        assert resp.get_json()["changed"] is True
        again = client.post(f"/api/admin/sponsors/{sponsor_id}/approve", headers=admin_headers)
        assert again.get_json()["changed"] is False

        tiers = client.get("/api/sponsors").get_json()["tiers"]
        assert tiers[0]["tier"] == "Gold"
        assert tiers[0]["sponsors"][0]["id"] == sponsor_id

    def test_reject_sponsor(self, client, admin_headers) -> None:
        sponsor_id = self._sponsor(client)
        client.post(f"/api/admin/sponsors/{sponsor_id}/approve", headers=admin_headers)
        resp = client.post(f"/api/admin/sponsors/{sponsor_id}/reject", headers=admin_headers)
        assert resp.get_json()["sponsor"]["approved"] is False
        assert client.get("/api/sponsors").get_json()["tiers"] == []

    def test_sponsor_list(self, client, admin_headers) -> None:
        self._sponsor(client)
        body = client.get("/api/admin/sponsors", headers=admin_headers).get_json()
        assert body["count"] == 1
        assert body["sponsors"][0]["email"] == "b@bank.test"

    def test_unknown_sponsor(self, client, admin_headers) -> None:
        assert client.post("/api/admin/sponsors/42/approve", headers=admin_headers).status_code == 404

    def test_volunteer_moderation(self, client, admin_headers) -> None:
        resp = client.post(
            "/api/volunteers",
            json={"name": "Sam Rivers", "email": "sam@example.com", "phone": "512-555-0199", "age_or_rank": "30"},
        )
        vol_id = resp.get_json()["volunteer"]["id"]

        approved = client.post(f"/api/admin/volunteers/{vol_id}/approve", headers=admin_headers).get_json()
        assert approved["volunteer"]["approved"] is True

        listing = client.get("/api/admin/volunteers", headers=admin_headers).get_json()
        assert listing["count"] == 1
        assert listing["volunteers"][0]["approved"] is True

        rejected = client.post(f"/api/admin/volunteers/{vol_id}/reject", headers=admin_headers).get_json()
        assert rejected["changed"] is True


# ─────────────────────────── Stats ────────────────────────────────────────────

class TestAdminStats:
    def test_dashboard(self, client, admin_headers, create_registration) -> None:
        reg = create_registration(size=2)
        create_registration()
        _verify_cash(client, admin_headers, reg["id"])
        client.post("/api/sponsors", json={"name": "Cafe Luna", "email": "hi@luna.test", "donation_amount": "75"})

        body = client.get("/api/admin/stats", headers=admin_headers).get_json()
        assert body["registrations_by_status"]["payment_completed"] == 1
        assert body["registrations_by_status"]["pending_payment"] == 1
        assert body["registrations_by_status"]["approved"] == 0
        assert body["pending_sponsors"] == 1
        assert body["total_volunteers"] == 0
        # unapproved sponsors do not count toward the total
        assert body["total_raised"] == "40.00"
        assert body["percent_of_goal"] == 10
