"""BaseCRUD tests.

Covers id allocation (prefix + zero padding, never reused after delete,
explicit ids observed), generic update/delete semantics and foreign key
resolution.
"""
from datetime import date

import pytest

from database.base_crud import BaseCRUD
from database.exceptions import NotFoundError
from database.models import FAQItem, IdSequence, User
from tests.conftest import make_fp, make_partner, make_user


class TestIdAllocation:
    """Tests for next_id / observe_id."""

    def test_format_id_zero_pads(self):
        assert BaseCRUD.format_id("U", 4) == "U004"
        assert BaseCRUD.format_id("plan_", 12) == "plan_012"

    def test_sequential_ids(self, temp_db):
        first = make_user(temp_db, "一人目")
        second = make_user(temp_db, "二人目")
        assert first.id == "U001"
        assert second.id == "U002"

    def test_ids_not_reused_after_delete(self, temp_db):
        make_user(temp_db, "一人目")
        second = make_user(temp_db, "二人目")
        assert temp_db.users.delete(second.id) is True

        third = make_user(temp_db, "三人目")
        assert third.id == "U003"

    def test_explicit_id_advances_sequence(self, temp_db):
        make_user(temp_db, "明示", id="U010")
        fresh = make_user(temp_db, "自動")
        assert fresh.id == "U011"

    def test_explicit_non_numeric_id_is_kept(self, temp_db):
        doc = temp_db.legal_documents.add(
            id="tos", name="サービス利用規約", current_version="v1.0"
        )
        assert doc.id == "tos"
        auto = temp_db.legal_documents.add(
            name="特定商取引法に基づく表記", current_version="v1.0"
        )
        assert auto.id == "DOC001"

    def test_sequence_row_tracks_last_value(self, temp_db):
        make_fp(temp_db, "FP一")
        make_fp(temp_db, "FP二")
        with temp_db.get_session() as session:
            seq = session.get(IdSequence, "FP")
            assert seq.last_value == 2

    def test_prefixes_are_independent(self, temp_db):
        user = make_user(temp_db)
        fp = make_fp(temp_db)
        assert user.id == "U001"
        assert fp.id == "FP001"


class TestGenericOperations:
    """Tests for get/update/delete/count."""

    def test_get_missing_returns_none(self, temp_db):
        assert temp_db.users.get("U999") is None
        assert temp_db.users.exists("U999") is False

    def test_require_missing_raises(self, temp_db):
        with pytest.raises(NotFoundError) as exc:
            temp_db.users.require("U999")
        assert exc.value.entity == "User"
        assert exc.value.key == "U999"
        assert isinstance(exc.value, LookupError)

    def test_update_merges_fields(self, temp_db):
        user = make_user(temp_db, "更新前", phone="090-0000-0000")
        updated = temp_db.users.update(user.id, name="更新後")
        assert updated.name == "更新後"
        assert updated.phone == "090-0000-0000"
        assert updated.id == user.id
        assert temp_db.users.count_all() == 1

    def test_update_missing_returns_none(self, temp_db):
        assert temp_db.users.update("U999", name="x") is None

    def test_update_unknown_field_raises(self, temp_db):
        user = make_user(temp_db)
        with pytest.raises(ValueError):
            temp_db.users.update(user.id, nickname="x")

    def test_update_id_is_rejected(self, temp_db):
        user = make_user(temp_db)
        with pytest.raises(ValueError):
            temp_db.users.update(user.id, id="U100")

    def test_delete_missing_is_noop(self, temp_db):
        make_user(temp_db)
        assert temp_db.users.delete("U999") is False
        assert temp_db.users.count_all() == 1

    def test_get_all_with_filters(self, temp_db):
        make_user(temp_db, "認証済", verification_status="認証済み")
        make_user(temp_db, "未認証")
        verified = temp_db.users.get_all(
            User, filters={"verification_status": "認証済み"}
        )
        assert [u.name for u in verified] == ["認証済"]

    def test_create_with_session_commits_by_caller(self, temp_db):
        with temp_db.get_session() as session:
            faq = temp_db.faqs.create(
                FAQItem, id_prefix="FAQ", session=session,
                display_order=1, category="その他",
                question="Q", answer="A", last_updated=date(2024, 9, 1),
            )
            assert faq.id == "FAQ001"
            session.commit()
        assert temp_db.faqs.exists("FAQ001")


class TestReferences:
    """Foreign keys resolve or raise NotFoundError."""

    def test_add_with_unknown_partner_raises(self, temp_db):
        with pytest.raises(NotFoundError) as exc:
            make_user(temp_db, partner_id="PART999")
        assert exc.value.entity == "Partner"
        assert temp_db.users.count_all() == 0

    def test_add_with_known_partner(self, temp_db):
        partner = make_partner(temp_db)
        user = make_user(temp_db, partner_id=partner.id)
        assert user.partner.name == partner.name

    def test_update_with_unknown_reference_raises(self, temp_db):
        user = make_user(temp_db)
        with pytest.raises(NotFoundError):
            temp_db.users.update(user.id, partner_id="PART404")

    def test_deleting_partner_clears_user_reference(self, temp_db):
        partner = make_partner(temp_db)
        user = make_user(temp_db, partner_id=partner.id)
        temp_db.partners.delete(partner.id)
        assert temp_db.users.get(user.id).partner_id is None
