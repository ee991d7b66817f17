"""
Tests for the daily evaluation quota: plan limits, lazy reset and fail-open.
"""
import json
import os
from unittest.mock import MagicMock, patch

import pytest

from claim_store.record_store import Collections, DocumentNotFound, StorageError
from config_manager import ConfigManager, PlanLimitsConfig
from app.main import create_app
from app.quota import Plan, PlanLimitTable, QuotaTracker, QuotaExceeded, UserQuotaRecord


class TestPlanLimitTable:
    """Plan to daily limit lookup."""

    def test_default_limits(self):
        table = PlanLimitTable()
        assert table.limit_for("free") == 1
        assert table.limit_for("pro") == 20
        assert table.limit_for("max") == 99

    def test_unknown_plan_gets_free_limit(self):
        table = PlanLimitTable()
        assert table.limit_for("enterprise") == 1
        assert table.limit_for(None) == 1
        assert table.limit_for("") == 1

    def test_from_config(self):
        table = PlanLimitTable.from_config(
            PlanLimitsConfig(free_daily_evals=3, pro_daily_evals=30, max_daily_evals=300)
        )
        assert table.limit_for("free") == 3
        assert table.limit_for("pro") == 30
        assert table.limit_for("max") == 300

    def test_plan_parse(self):
        assert Plan.parse("pro") is Plan.PRO
        assert Plan.parse("gold") is None
        assert Plan.parse(None) is None

    def test_string_limit_from_config_file_is_enforced(self, tmp_path, record_store, clock):
        config_file = tmp_path / "claim_guard_config.json"
        config_file.write_text(json.dumps({"plans": {"free_daily_evals": "1"}}))
        with patch.dict(os.environ, {}, clear=True):
            plan_config = ConfigManager(str(config_file)).get_plan_limits_config()
        tracker = QuotaTracker(record_store, PlanLimitTable.from_config(plan_config), clock=clock)

        assert tracker.check("u1").remaining == 1
        tracker.decrement("u1")

        result = tracker.check("u1")
        assert result.allowed is False
        assert result.remaining == 0


class TestQuotaTracker:
    """check / decrement / set_plan against a JSON record store."""

    @pytest.fixture(autouse=True)
    def _tracker(self, record_store, clock):
        self.store = record_store
        self.clock = clock
        self.tracker = QuotaTracker(record_store, PlanLimitTable(), clock=clock)

    def _user_data(self, user_id="u1"):
        return self.store.get_document(Collections.USERS, user_id).data

    def test_free_plan_allows_exactly_one_evaluation(self):
        first = self.tracker.check("u1")
        assert first.allowed is True
        assert first.remaining == 1

        self.tracker.decrement("u1")

        second = self.tracker.check("u1")
        assert second.allowed is False
        assert second.remaining == 0
        assert second.message == (
            "Daily evaluation limit reached. Your free plan allows 1 evaluation per day. "
            "Upgrade your plan for more."
        )
        assert second.plan == "free"
        assert second.limit == 1

    def test_first_check_creates_private_user_document(self):
        self.tracker.check("u1")

        document = self.store.get_document(Collections.USERS, "u1")
        assert document.permissions == ['read("user:u1")', 'update("user:u1")']
        assert document.data["pricing_plan"] == "free"
        assert document.data["evaluation_times"] == 1
        assert document.data["evaluation_reset_date"] == "2025-03-14"

    def test_reset_on_new_utc_day(self):
        self.tracker.check("u1")
        self.tracker.decrement("u1")
        assert self.tracker.check("u1").allowed is False

        self.clock.advance(days=1)

        result = self.tracker.check("u1")
        assert result.allowed is True
        assert result.remaining == 1
        assert self._user_data()["evaluation_reset_date"] == "2025-03-15"

    def test_no_reset_within_same_utc_day(self):
        self.tracker.check("u1")
        self.tracker.decrement("u1")

        self.clock.advance(hours=13)  # 23:30 UTC, still the same day
        assert self.tracker.check("u1").allowed is False

    def test_downgrade_clamps_remaining_to_new_limit(self):
        self.store.create_document(
            Collections.USERS,
            "u1",
            UserQuotaRecord(plan="max", remaining=50, reset_date="2025-03-14").to_user_data(),
            [],
        )
        assert self.tracker.check("u1").remaining == 50

        self.store.update_document(Collections.USERS, "u1", {"pricing_plan": "free"})

        result = self.tracker.check("u1")
        assert result.allowed is True
        assert result.remaining == 1

        self.tracker.decrement("u1")
        assert self._user_data()["evaluation_times"] == 0

    def test_pro_plan_counts_down(self):
        assert self.tracker.set_plan("u1", "pro").success is True
        assert self._user_data()["evaluation_times"] == 20

        self.tracker.decrement("u1")
        self.tracker.decrement("u1")

        result = self.tracker.check("u1")
        assert result.allowed is True
        assert result.remaining == 18

    def test_decrement_never_goes_negative(self):
        self.tracker.check("u1")
        for _ in range(3):
            self.tracker.decrement("u1")
        assert self._user_data()["evaluation_times"] == 0

    def test_decrement_on_stale_day_resets_first(self):
        self.store.create_document(
            Collections.USERS,
            "u1",
            UserQuotaRecord(plan="pro", remaining=0, reset_date="2025-03-13").to_user_data(),
            [],
        )

        self.tracker.decrement("u1")

        data = self._user_data()
        assert data["evaluation_times"] == 19
        assert data["evaluation_reset_date"] == "2025-03-14"

    def test_remaining_never_exceeds_limit_after_writes(self):
        self.tracker.set_plan("u1", "max")
        self.tracker.decrement("u1")
        self.tracker.set_plan("u1", "pro")
        self.tracker.check("u1")
        self.tracker.decrement("u1")

        data = self._user_data()
        assert data["evaluation_times"] <= PlanLimitTable().limit_for(data["pricing_plan"])

    def test_set_plan_rejects_unknown_plan(self):
        result = self.tracker.set_plan("u1", "platinum")
        assert result.success is False
        assert result.message == "Invalid plan"
        assert result.invalid_plan is True
        with pytest.raises(DocumentNotFound):
            self.store.get_document(Collections.USERS, "u1")

    def test_set_plan_keeps_profile_fields(self):
        self.store.create_document(Collections.USERS, "u1", {"full_name": "Ada", "email": "ada@example.com"}, [])

        self.tracker.set_plan("u1", "pro")

        data = self._user_data()
        assert data["full_name"] == "Ada"
        assert data["pricing_plan"] == "pro"

    def test_get_quota_info_does_not_write(self):
        info = self.tracker.get_quota_info("u1")

        assert info["plan"] == "free"
        assert info["daily_limit"] == 1
        assert info["remaining"] == 1
        assert info["reset_date"] is None
        with pytest.raises(DocumentNotFound):
            self.store.get_document(Collections.USERS, "u1")

    def test_get_quota_info_reports_full_limit_on_stale_day(self):
        self.store.create_document(
            Collections.USERS,
            "u1",
            UserQuotaRecord(plan="pro", remaining=2, reset_date="2025-03-01").to_user_data(),
            [],
        )
        assert self.tracker.get_quota_info("u1")["remaining"] == 20


class TestQuotaFailureModes:
    """Storage faults: check fails open, decrement is swallowed."""

    def test_check_fails_open_on_read_failure(self):
        store = MagicMock()
        store.get_document.side_effect = StorageError("disk unavailable")
        tracker = QuotaTracker(store, PlanLimitTable())

        result = tracker.check("u1")

        assert result.allowed is True
        assert result.remaining == -1
        assert result.failed_open is True

    def test_check_fails_open_on_write_failure(self):
        store = MagicMock()
        store.get_document.side_effect = DocumentNotFound(Collections.USERS, "u1")
        store.create_document.side_effect = StorageError("read-only filesystem")
        tracker = QuotaTracker(store, PlanLimitTable())

        result = tracker.check("u1")

        assert result.allowed is True
        assert result.remaining == -1

    def test_decrement_swallows_storage_errors(self):
        store = MagicMock()
        store.get_document.side_effect = StorageError("disk unavailable")
        tracker = QuotaTracker(store, PlanLimitTable())

        tracker.decrement("u1")  # must not raise
        store.update_document.assert_not_called()

    def test_set_plan_reports_storage_errors(self):
        store = MagicMock()
        store.get_document.side_effect = StorageError("disk unavailable")
        tracker = QuotaTracker(store, PlanLimitTable())

        result = tracker.set_plan("u1", "pro")

        assert result.success is False
        assert "disk unavailable" in result.message


class TestQuotaExceeded:

    def test_payload(self):
        error = QuotaExceeded("pro", 20)
        payload = error.to_dict()
        assert payload["error"] == "Quota exceeded"
        assert payload["plan"] == "pro"
        assert payload["limit"] == 20
        assert "20 evaluations per day" in payload["message"]


class TestQuotaRoutes:
    """GET /api/quota and the admin plan endpoint."""

    @pytest.fixture(autouse=True)
    def _app(self, tmp_path, record_store, clock):
        config_file = tmp_path / "claim_guard_config.json"
        config_file.write_text(json.dumps({"app": {"admin_user_ids": ["admin1"]}}))
        self.app = create_app(ConfigManager(str(config_file)), record_store=record_store, clock=clock)
        self.client = self.app.test_client()
        self.store = record_store

    def test_quota_requires_login(self):
        response = self.client.get("/api/quota")
        assert response.status_code == 401

    def test_quota_for_new_user(self):
        self.client.set_cookie("uid", "u1")
        response = self.client.get("/api/quota")
        assert response.status_code == 200
        quota = response.get_json()["quota"]
        assert quota["plan"] == "free"
        assert quota["remaining"] == 1
        assert quota["daily_limit"] == 1

    def test_admin_sets_plan(self):
        self.client.set_cookie("uid", "admin1")
        response = self.client.post("/admin/users/u1/plan", json={"plan": "max"})
        assert response.status_code == 200
        assert response.get_json()["success"] is True
        assert self.store.get_document(Collections.USERS, "u1").data["evaluation_times"] == 99

    def test_non_admin_cannot_set_plan(self):
        self.client.set_cookie("uid", "u1")
        response = self.client.post("/admin/users/u1/plan", json={"plan": "max"})
        assert response.status_code == 403

    def test_invalid_plan_is_rejected(self):
        self.client.set_cookie("uid", "admin1")
        response = self.client.post("/admin/users/u1/plan", json={"plan": "gold"})
        assert response.status_code == 400
        assert response.get_json()["message"] == "Invalid plan"
