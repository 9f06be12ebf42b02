"""DatabaseManager tests.

Covers the facade: demo data loading, idempotent seeding and the
dictionary-returning convenience queries.
"""
import random
from datetime import date, datetime

import pytest

from database import DatabaseManager, NotFoundError
from tests.conftest import make_user

EXPECTED_COUNTS = {
    "users": 12,
    "fps": 10,
    "partners": 5,
    "allocations": 9,
    "matching_history": 10,
    "reviews": 8,
    "faqs": 5,
    "legal_documents": 2,
    "banners": 3,
    "payment_urls": 6,
    "plans": 3,
    "fp_contracts": 4,
    "fp_payments": 5,
    "fp_performance": 3,
    "partner_leads": 7,
    "gifts": 4,
}


class TestInfrastructure:
    """Tests for connection-level helpers."""

    def test_default_url_is_in_memory(self):
        db = DatabaseManager()
        try:
            assert db.database_url == "sqlite://"
        finally:
            db.close()

    def test_non_sqlite_url_rejected(self):
        with pytest.raises(ValueError):
            DatabaseManager(database_url="postgresql://localhost/console")

    def test_create_tables_idempotent(self, temp_db):
        temp_db.create_tables()
        assert temp_db.users.count_all() == 0

    def test_execute_raw_sql(self, seeded_db):
        rows = seeded_db.execute_raw_sql(
            "SELECT id FROM fps WHERE status = :status", {"status": "停止中"}
        )
        assert [row[0] for row in rows] == ["FP008"]


class TestSeeding:
    """Tests for demo data loading."""

    def test_seed_counts(self, temp_db):
        counts = temp_db.seed(random.Random(7))
        assert counts == EXPECTED_COUNTS

    def test_seed_is_idempotent(self, seeded_db):
        counts = seeded_db.seed()
        assert counts == EXPECTED_COUNTS

    def test_seed_skipped_when_data_exists(self, temp_db):
        make_user(temp_db)
        counts = temp_db.seed()
        assert counts["users"] == 1
        assert counts["fps"] == 0

    def test_same_seed_same_data(self):
        snapshots = []
        for _ in range(2):
            db = DatabaseManager(database_url="sqlite://")
            db.create_tables()
            db.seed(random.Random(20250901))
            snapshots.append([
                (a.fp_id, a.completed_allocations, a.completion_date)
                for a in db.allocations.list_all()
            ])
            db.close()
        assert snapshots[0] == snapshots[1]

    def test_new_users(self, seeded_db):
        assert seeded_db.users.new_user_count() == 5


class TestConvenienceQueries:
    """Tests for dictionary-returning helpers."""

    def test_user_detail_marks_seen(self, seeded_db):
        detail = seeded_db.get_user_detail("U004")
        assert detail["name"] == "中村健太"
        assert detail["partner"] == "パートナーA"
        assert detail["is_new"] is False
        assert seeded_db.users.get("U004").is_new is False
        assert [c["id"] for c in detail["consultations"]] == ["HIST004"]
        assert detail["consultations"][0]["fp_name"] == "伊藤沙織"
        assert [r["rating"] for r in detail["reviews"]] == [3]
        assert detail["gifts"] == []

    def test_user_detail_gifts(self, seeded_db):
        gifts = seeded_db.get_user_detail("U001")["gifts"]
        assert [g["id"] for g in gifts] == ["GIFT002", "GIFT001"]
        assert gifts[1]["processed_date"] == date(2024, 9, 18)

    def test_user_detail_without_marking(self, seeded_db):
        detail = seeded_db.get_user_detail("U005", mark_seen=False)
        assert detail["is_new"] is True
        assert seeded_db.users.get("U005").is_new is True

    def test_user_detail_without_partner(self, seeded_db):
        assert seeded_db.get_user_detail("U009")["partner"] is None

    def test_user_detail_missing(self, seeded_db):
        with pytest.raises(NotFoundError):
            seeded_db.get_user_detail("U404")

    def test_fp_list_newest_first(self, seeded_db):
        fps = seeded_db.get_fp_list()
        assert fps[0]["id"] == "FP010"
        assert fps[-1]["id"] == "FP001"
        assert fps[-1]["monthly_assignment"] == "8/10"

    def test_fp_list_active_only(self, seeded_db):
        ids = {fp["id"] for fp in seeded_db.get_fp_list(active_only=True)}
        assert len(ids) == 9
        assert "FP008" not in ids

    def test_partner_detail(self, seeded_db):
        detail = seeded_db.get_partner_detail("PART001")
        assert detail["active_url"].endswith("v=2")
        assert [u["status"] for u in detail["url_history"]] == ["利用中", "停止済み"]
        assert detail["performance"] == {
            "partner_id": "PART001",
            "total_leads": 90,
            "accounts_created": 3,
            "matched": 3,
            "approved": 2,
            "pending": 1,
            "auto_rejected": 1,
            "manual_rejected": 1,
        }
        assert detail["company_info"]["representative_name"] == "佐藤健一"
        assert detail["contract_info"] == {
            "start_date": date(2024, 1, 1),
            "end_date": date(2024, 12, 31),
            "status": "有効",
            "referral_fee": 10000,
        }
        assert [lead["id"] for lead in detail["lead_history"]][:2] == ["LEAD001", "LEAD002"]
        assert detail["lead_history"][1]["rejection_type"] == "自動"

    def test_partner_detail_expired_contract(self, seeded_db):
        assert seeded_db.get_partner_detail("PART005")["contract_info"]["status"] == "期限切れ"

    def test_fp_detail(self, seeded_db):
        detail = seeded_db.get_fp_detail("FP001", today=date(2024, 9, 20))
        assert detail["industry_experience"] == "金融業界15年"
        assert detail["awards"] == "MDRT 2023"
        assert detail["contract"]["id"] == "CON002"
        assert detail["contract"]["monthly_fee"] == 200000
        assert [p["id"] for p in detail["payments"]] == ["PAY004", "PAY003", "PAY002", "PAY001"]
        assert detail["outstanding_amount"] == 230000
        assert (detail["performance"]["year"], detail["performance"]["month"]) == (2024, 9)
        assert detail["performance"]["delivery_rate"] == 95.0

    def test_fp_detail_without_business_records(self, seeded_db):
        detail = seeded_db.get_fp_detail("FP003", today=date(2024, 9, 20))
        assert detail["industry_experience"] is None
        assert detail["contract"] is None
        assert detail["payments"] == []
        assert detail["outstanding_amount"] == 0
        assert detail["performance"] is None

    def test_fp_detail_contract_outside_period(self, seeded_db):
        assert seeded_db.get_fp_detail("FP001", today=date(2025, 6, 1))["contract"] is None

    def test_fp_detail_missing(self, seeded_db):
        with pytest.raises(NotFoundError):
            seeded_db.get_fp_detail("FP404")

    def test_matching_detail(self, seeded_db):
        detail = seeded_db.get_matching_detail("HIST001")
        assert detail["current_status"] == "面談実施"
        assert detail["fp_name"] == "田中太郎"
        assert detail["partner"] == "パートナーA"
        assert [e["status"] for e in detail["status_history"]] == ["新規", "面談実施"]
        assert detail["status_history"][0] == {
            "changed_at": datetime(2024, 9, 15, 14, 30),
            "status": "新規",
            "updated_by": "システム",
            "notes": "",
        }

    def test_matching_detail_missing(self, seeded_db):
        with pytest.raises(NotFoundError):
            seeded_db.get_matching_detail("HIST404")

    def test_partner_detail_missing(self, seeded_db):
        with pytest.raises(NotFoundError):
            seeded_db.get_partner_detail("PART404")
