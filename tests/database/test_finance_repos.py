"""Finance repository tests (payment URLs, subscription plans, FP contracts
and FP payments)."""
from datetime import date

import pytest

from database.exceptions import InvalidStateError, NotFoundError
from tests.conftest import make_fp


class TestPaymentURLRepository:
    """Tests for PaymentURLRepository."""

    def test_add_defaults(self, temp_db):
        record = temp_db.payment_urls.add(
            url_name="初回決済", url="https://pay.example.com/first"
        )
        assert record.id == "URL001"
        assert record.status == "利用中"
        assert record.payment_count == 0
        assert record.creation_date == date.today()
        assert record.last_payment_date is None

    def test_seeded_urls_continue_numbering(self, seeded_db):
        record = seeded_db.payment_urls.add(
            url_name="追加", url="https://pay.example.com/extra"
        )
        assert record.id == "URL007"

    def test_get_in_use(self, seeded_db):
        assert [u.id for u in seeded_db.payment_urls.get_in_use()] == [
            "URL001", "URL002", "URL003", "URL006"
        ]

    def test_stop(self, seeded_db):
        assert seeded_db.payment_urls.stop("URL001").status == "停止中"
        assert seeded_db.payment_urls.stop("URL404") is None

    def test_record_payment(self, seeded_db):
        record = seeded_db.payment_urls.record_payment(
            "URL002", paid_on=date(2024, 9, 20)
        )
        assert record.payment_count == 24
        assert record.last_payment_date == date(2024, 9, 20)

    def test_record_payment_on_stopped_url(self, seeded_db):
        with pytest.raises(ValueError):
            seeded_db.payment_urls.record_payment("URL004")
        assert seeded_db.payment_urls.get("URL004").payment_count == 3

    def test_record_payment_missing(self, temp_db):
        assert temp_db.payment_urls.record_payment("URL404") is None


class TestSubscriptionPlanRepository:
    """Tests for SubscriptionPlanRepository."""

    def test_add_defaults(self, temp_db):
        plan = temp_db.plans.add(plan_name="ライト", price=9800)
        assert plan.id == "plan_001"
        assert plan.billing_cycle == "月間請求"
        assert plan.status == "有効"
        assert plan.subscriber_count == 0

    def test_active_plans_by_price(self, seeded_db):
        seeded_db.plans.add(plan_name="ライト", price=9800)
        seeded_db.plans.update("plan_002", status="無効")
        assert [p.plan_name for p in seeded_db.plans.active_plans()] == [
            "ライト", "基本プラン", "エンタープライズプラン"
        ]


def _contract(db, fp_id, **fields):
    defaults = {
        "fp_id": fp_id, "plan_name": "ビジネスプラン", "monthly_fee": 200000,
        "contract_start": date(2024, 4, 1), "contract_end": date(2025, 3, 31),
    }
    defaults.update(fields)
    return db.fp_contracts.add(**defaults)


class TestFPContractRepository:
    """Tests for FPContractRepository."""

    def test_add_defaults(self, temp_db):
        fp = make_fp(temp_db)
        contract = _contract(temp_db, fp.id)
        assert contract.id == "CON001"
        assert contract.contract_status == "有効"
        assert contract.fp_rank == 3
        assert contract.renewal_date is None

    def test_add_end_before_start(self, temp_db):
        fp = make_fp(temp_db)
        with pytest.raises(ValueError):
            _contract(temp_db, fp.id, contract_end=date(2024, 3, 31))
        assert temp_db.fp_contracts.count_all() == 0

    def test_add_unknown_fp(self, temp_db):
        with pytest.raises(NotFoundError):
            _contract(temp_db, "FP404")

    def test_current(self, temp_db):
        fp = make_fp(temp_db)
        _contract(temp_db, fp.id, contract_start=date(2023, 4, 1),
                  contract_end=date(2024, 3, 31), contract_status="無効")
        latest = _contract(temp_db, fp.id)

        assert temp_db.fp_contracts.current(fp.id, today=date(2024, 9, 1)).id == latest.id
        assert temp_db.fp_contracts.current(fp.id, today=date(2024, 1, 1)) is None
        assert temp_db.fp_contracts.current(fp.id, today=date(2025, 4, 1)) is None

    def test_for_fp_newest_first(self, seeded_db):
        assert [c.id for c in seeded_db.fp_contracts.for_fp("FP001")] == [
            "CON002", "CON001"
        ]

    def test_renew(self, temp_db):
        fp = make_fp(temp_db)
        contract = _contract(temp_db, fp.id)
        renewed = temp_db.fp_contracts.renew(
            contract.id, date(2026, 3, 31), renewal_date=date(2025, 3, 1)
        )
        assert renewed.contract_end == date(2026, 3, 31)
        assert renewed.renewal_date == date(2025, 3, 1)

    def test_renew_must_extend(self, temp_db):
        fp = make_fp(temp_db)
        contract = _contract(temp_db, fp.id)
        with pytest.raises(ValueError):
            temp_db.fp_contracts.renew(contract.id, date(2025, 3, 31))
        assert temp_db.fp_contracts.get(contract.id).renewal_date is None

    def test_renew_cancelled(self, temp_db):
        fp = make_fp(temp_db)
        contract = _contract(temp_db, fp.id)
        assert temp_db.fp_contracts.cancel(contract.id).contract_status == "無効"
        with pytest.raises(InvalidStateError):
            temp_db.fp_contracts.renew(contract.id, date(2026, 3, 31))

    def test_renew_missing(self, temp_db):
        with pytest.raises(NotFoundError):
            temp_db.fp_contracts.renew("CON404", date(2026, 3, 31))

    def test_cancel_missing(self, temp_db):
        assert temp_db.fp_contracts.cancel("CON404") is None

    def test_deleting_fp_removes_contracts(self, temp_db):
        fp = make_fp(temp_db)
        _contract(temp_db, fp.id)
        temp_db.fps.delete(fp.id)
        assert temp_db.fp_contracts.count_all() == 0


class TestFPPaymentRepository:
    """Tests for FPPaymentRepository."""

    def test_add_defaults(self, temp_db):
        fp = make_fp(temp_db)
        payment = temp_db.fp_payments.add(
            fp_id=fp.id, invoice_date=date(2024, 9, 1), period="2024年9月",
            fee_type="月額利用料", amount=200000,
        )
        assert payment.id == "PAY001"
        assert payment.payment_status == "未払い"
        assert payment.payment_method == "クレジットカード"
        assert payment.payment_date is None

    def test_for_fp_newest_first(self, seeded_db):
        assert [p.id for p in seeded_db.fp_payments.for_fp("FP001")] == [
            "PAY004", "PAY003", "PAY002", "PAY001"
        ]

    def test_unpaid(self, seeded_db):
        assert [p.id for p in seeded_db.fp_payments.unpaid()] == ["PAY003", "PAY004"]
        assert seeded_db.fp_payments.unpaid("FP002") == []

    def test_outstanding_amount(self, seeded_db):
        assert seeded_db.fp_payments.outstanding_amount("FP001") == 230000
        assert seeded_db.fp_payments.outstanding_amount("FP002") == 0
        assert seeded_db.fp_payments.outstanding_amount("FP009") == 0

    def test_mark_paid(self, seeded_db):
        payment = seeded_db.fp_payments.mark_paid(
            "PAY003", paid_on=date(2024, 9, 30), method="銀行振込"
        )
        assert payment.payment_status == "支払い済み"
        assert payment.payment_date == date(2024, 9, 30)
        assert payment.payment_method == "銀行振込"
        assert seeded_db.fp_payments.outstanding_amount("FP001") == 30000

    def test_mark_paid_keeps_method(self, seeded_db):
        payment = seeded_db.fp_payments.mark_paid("PAY004", paid_on=date(2024, 9, 30))
        assert payment.payment_method == "クレジットカード"

    def test_mark_paid_twice(self, seeded_db):
        with pytest.raises(InvalidStateError):
            seeded_db.fp_payments.mark_paid("PAY001")
        assert seeded_db.fp_payments.get("PAY001").payment_date == date(2024, 7, 5)

    def test_mark_paid_missing(self, temp_db):
        with pytest.raises(NotFoundError):
            temp_db.fp_payments.mark_paid("PAY404")
