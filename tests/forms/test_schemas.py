"""Form model tests.

Every form is validated through validate_form so the assertions read
the same way the edit dialogs consume the result: as field errors.
"""
from datetime import date, datetime

import pytest

from forms import (
    AllocationForm, BannerForm, FAQForm, FPContractForm, FPForm, FPPaymentForm,
    GiftForm, LegalDocumentForm, LegalUploadForm, MatchingStatusForm,
    PartnerForm, PartnerLeadForm, PaymentURLForm, ReviewForm,
    SubscriptionPlanForm, UserForm, validate_form,
)
from forms.validation import ROOT_FIELD


# ============================================================
# validate_form / ValidationResult
# ============================================================
class TestValidationResult:
    """Tests for the error structure."""

    def test_ok_result_carries_clean_data(self):
        result = validate_form(PartnerForm, {
            "name": "  パートナーZ  ",
            "contact_email": "z@example.com",
            "lp_url": "https://example.com/lp",
        })
        assert result.ok
        assert result.data["name"] == "パートナーZ"
        assert result.data["status"] == "アクティブ"

    def test_errors_are_per_field(self):
        result = validate_form(PartnerForm, {
            "name": "   ",
            "contact_email": "not-an-email",
            "lp_url": "ftp://example.com",
        })
        assert not result.ok
        assert result.data == {}
        assert set(result.fields) == {"name", "contact_email", "lp_url"}
        assert result.errors_for("name")[0].code == "string_too_short"
        assert "contact_email" in result.messages()

    def test_missing_required(self):
        result = validate_form(PartnerForm, {})
        assert {e.code for e in result.errors} == {"missing"}

    def test_unknown_field_rejected(self):
        result = validate_form(FAQForm, {
            "category": "その他", "question": "Q", "answer": "A", "id": "FAQ009",
        })
        assert result.fields == ["id"]
        assert result.errors[0].code == "extra_forbidden"


class TestAddressFormats:
    """E-mail and URL format checks."""

    PARTNER = {
        "name": "パートナーZ",
        "contact_email": "z@example.com",
        "lp_url": "https://example.com/lp",
    }

    @pytest.mark.parametrize("email", [
        "a@b..com", "x@y.z.", "foo@bar..jp", "no-at-sign", "a@", "@example.com",
        "two@@example.com", "space in@example.com",
    ])
    def test_malformed_email_rejected(self, email):
        result = validate_form(UserForm, {"name": "Aoki", "email": email})
        assert result.fields == ["email"]

    def test_email_stripped(self):
        result = validate_form(UserForm, {"name": "Aoki", "email": " sho@example.com "})
        assert result.ok
        assert result.data["email"] == "sho@example.com"

    @pytest.mark.parametrize("url", [
        "ftp://example.com", "example.com/lp", "https://", "http//example.com",
    ])
    def test_malformed_url_rejected(self, url):
        result = validate_form(PartnerForm, {**self.PARTNER, "lp_url": url})
        assert result.fields == ["lp_url"]

    def test_url_kept_as_entered(self):
        result = validate_form(PartnerForm, {
            **self.PARTNER, "lp_url": "https://example.com",
        })
        assert result.data["lp_url"] == "https://example.com"


# ============================================================
# Entity forms
# ============================================================
class TestUserForm:
    """Tests for UserForm."""

    def test_valid_with_string_dates(self):
        result = validate_form(UserForm, {
            "name": "青木翔", "email": "sho@example.com",
            "birth_date": "1993/01/08", "registration_date": "2024-08-20",
            "prefecture": "埼玉県", "phone": "",
        })
        assert result.ok
        assert result.data["birth_date"] == date(1993, 1, 8)
        assert result.data["registration_date"] == date(2024, 8, 20)
        assert result.data["phone"] is None

    def test_unknown_prefecture(self):
        result = validate_form(UserForm, {
            "name": "青木翔", "email": "sho@example.com", "prefecture": "東京",
        })
        assert result.fields == ["prefecture"]

    def test_enum_literals(self):
        result = validate_form(UserForm, {
            "name": "青木翔", "email": "sho@example.com", "line_status": "連携",
        })
        assert result.fields == ["line_status"]

    def test_bad_date(self):
        result = validate_form(UserForm, {
            "name": "青木翔", "email": "sho@example.com", "birth_date": "昨日",
        })
        assert result.fields == ["birth_date"]


class TestFPForm:
    """Tests for FPForm."""

    BASE = {"name": "田中太郎", "email": "tanaka@example.com"}

    def test_defaults(self):
        result = validate_form(FPForm, self.BASE)
        assert result.ok
        assert result.data["fp_type"] == "個人"
        assert result.data["rank"] == 3
        assert result.data["status"] == "活動中"

    def test_corporate_requires_company(self):
        result = validate_form(FPForm, {**self.BASE, "fp_type": "法人"})
        assert result.fields == [ROOT_FIELD]

        result = validate_form(
            FPForm, {**self.BASE, "fp_type": "法人", "company": "山田株式会社"}
        )
        assert result.ok

    @pytest.mark.parametrize("rank", [0, 6])
    def test_rank_range(self, rank):
        assert validate_form(FPForm, {**self.BASE, "rank": rank}).fields == ["rank"]

    def test_profile_fields_optional(self):
        result = validate_form(FPForm, {
            **self.BASE, "industry_experience": "金融業界15年", "awards": "",
        })
        assert result.ok
        assert result.data["industry_experience"] == "金融業界15年"
        assert result.data["awards"] is None


class TestPartnerForm:
    """Tests for PartnerForm company and contract fields."""

    BASE = {
        "name": "パートナーZ",
        "contact_email": "z@example.com",
        "lp_url": "https://example.com/lp",
    }

    def test_contract_fields(self):
        result = validate_form(PartnerForm, {
            **self.BASE, "representative_name": "佐藤健一",
            "contract_start": "2024-01-01", "contract_end": "2024/12/31",
            "referral_fee": "10000", "phone_number": "",
        })
        assert result.ok
        assert result.data["contract_end"] == date(2024, 12, 31)
        assert result.data["contract_status"] == "有効"
        assert result.data["referral_fee"] == 10000
        assert result.data["phone_number"] is None

    def test_contract_period_order(self):
        result = validate_form(PartnerForm, {
            **self.BASE, "contract_start": "2024-12-31", "contract_end": "2024-01-01",
        })
        assert result.fields == [ROOT_FIELD]

    def test_contract_status(self):
        result = validate_form(PartnerForm, {**self.BASE, "contract_status": "終了"})
        assert result.fields == ["contract_status"]

    def test_referral_fee_not_negative(self):
        result = validate_form(PartnerForm, {**self.BASE, "referral_fee": -1})
        assert result.fields == ["referral_fee"]


class TestPartnerLeadForm:
    """Tests for PartnerLeadForm."""

    def test_valid(self):
        result = validate_form(PartnerLeadForm, {
            "partner_id": "PART001", "user_name": "青木翔", "age": "31",
            "prefecture": "埼玉県", "received_at": "2024-09-20 10:00",
        })
        assert result.ok
        assert result.data["age"] == 31
        assert result.data["received_at"] == datetime(2024, 9, 20, 10, 0)

    def test_decision_not_accepted(self):
        result = validate_form(PartnerLeadForm, {
            "partner_id": "PART001", "user_name": "青木翔",
            "approval_status": "承認済み",
        })
        assert result.fields == ["approval_status"]

    def test_unknown_prefecture(self):
        result = validate_form(PartnerLeadForm, {
            "partner_id": "PART001", "user_name": "青木翔", "prefecture": "東京",
        })
        assert result.fields == ["prefecture"]


class TestAllocationForm:
    """Tests for AllocationForm."""

    def test_completed_within_total(self):
        ok = validate_form(AllocationForm, {
            "fp_id": "FP001", "completed_allocations": 10, "total_allocations": 10,
        })
        assert ok.ok

        bad = validate_form(AllocationForm, {
            "fp_id": "FP001", "completed_allocations": 11, "total_allocations": 10,
        })
        assert bad.fields == [ROOT_FIELD]

    def test_negative_counts(self):
        result = validate_form(AllocationForm, {
            "fp_id": "FP001", "completed_allocations": -1, "total_allocations": 5,
        })
        assert result.fields == ["completed_allocations"]


class TestReviewForm:
    """Tests for ReviewForm."""

    BASE = {"fp_id": "FP001", "reviewer_name": "佐藤花子", "rating": 4}

    @pytest.mark.parametrize("rating", [0, 6])
    def test_rating_range(self, rating):
        result = validate_form(ReviewForm, {**self.BASE, "rating": rating})
        assert result.fields == ["rating"]

    def test_status_limited_to_review_statuses(self):
        result = validate_form(ReviewForm, {**self.BASE, "status_at_review": "失注"})
        assert result.fields == ["status_at_review"]

    def test_posted_at_string(self):
        result = validate_form(ReviewForm, {**self.BASE, "posted_at": "2024-09-18 20:15"})
        assert result.data["posted_at"] == datetime(2024, 9, 18, 20, 15)


class TestFinanceForms:
    """Tests for PaymentURLForm and SubscriptionPlanForm."""

    def test_payment_url(self):
        result = validate_form(PaymentURLForm, {
            "url_name": "初回決済", "url": "https://pay.example.com/x", "amount": "",
        })
        assert result.ok
        assert result.data["amount"] is None

    def test_payment_url_bad_status(self):
        result = validate_form(PaymentURLForm, {
            "url_name": "初回決済", "url": "https://pay.example.com/x",
            "status": "停止済み",
        })
        assert result.fields == ["status"]

    def test_plan_price_not_negative(self):
        result = validate_form(SubscriptionPlanForm, {"plan_name": "P", "price": -1})
        assert result.fields == ["price"]


class TestFPBusinessForms:
    """Tests for FP contract, FP payment, gift and status forms."""

    CONTRACT = {
        "fp_id": "FP001", "plan_name": "ビジネスプラン", "monthly_fee": 200000,
        "contract_start": "2024-04-01", "contract_end": "2025-03-31",
    }
    PAYMENT = {
        "fp_id": "FP001", "invoice_date": "2024-09-01", "period": "2024年9月",
        "fee_type": "月額利用料", "amount": 200000,
    }

    def test_contract_defaults(self):
        result = validate_form(FPContractForm, self.CONTRACT)
        assert result.ok
        assert result.data["contract_status"] == "有効"
        assert result.data["fp_rank"] == 3

    def test_contract_period_order(self):
        result = validate_form(FPContractForm, {
            **self.CONTRACT, "contract_end": "2024-03-31",
        })
        assert result.fields == [ROOT_FIELD]

    def test_payment_defaults(self):
        result = validate_form(FPPaymentForm, self.PAYMENT)
        assert result.ok
        assert result.data["payment_status"] == "未払い"
        assert result.data["payment_method"] == "クレジットカード"

    def test_paid_requires_date(self):
        result = validate_form(FPPaymentForm, {
            **self.PAYMENT, "payment_status": "支払い済み",
        })
        assert result.fields == [ROOT_FIELD]

        result = validate_form(FPPaymentForm, {
            **self.PAYMENT, "payment_status": "支払い済み", "payment_date": "2024-09-05",
        })
        assert result.ok

    def test_payment_method(self):
        result = validate_form(FPPaymentForm, {**self.PAYMENT, "payment_method": "現金"})
        assert result.fields == ["payment_method"]

    def test_gift_defaults_to_today(self):
        result = validate_form(GiftForm, {"user_id": "U001", "gift_type": "Amazonギフト券"})
        assert result.data["application_date"] == date.today()

    def test_matching_status(self):
        assert validate_form(MatchingStatusForm, {"status": "契約"}).ok
        assert validate_form(MatchingStatusForm, {"status": "完了"}).fields == ["status"]


class TestContentForms:
    """Tests for FAQ, legal document and banner forms."""

    def test_faq_category(self):
        result = validate_form(FAQForm, {
            "category": "料金", "question": "Q", "answer": "A",
        })
        assert result.fields == ["category"]

    def test_faq_blank_order_means_append(self):
        result = validate_form(FAQForm, {
            "category": "その他", "question": "Q", "answer": "A", "display_order": "",
        })
        assert result.ok
        assert result.data["display_order"] is None

    @pytest.mark.parametrize("version, ok", [
        ("v2.2", True), ("1.0", True), ("v3", True), ("latest", False), ("v1.", False),
    ])
    def test_version_format(self, version, ok):
        result = validate_form(LegalUploadForm, {"version": version, "file_name": "a.pdf"})
        assert result.ok is ok

    def test_legal_document(self):
        result = validate_form(LegalDocumentForm, {"name": "", "current_version": "v1.0"})
        assert result.fields == ["name"]

    def test_banner_period_order(self):
        result = validate_form(BannerForm, {
            "link_url": "https://example.com",
            "display_start": "2024-10-01", "display_end": "2024-09-01",
        })
        assert result.fields == [ROOT_FIELD]

    def test_banner_position_range(self):
        result = validate_form(BannerForm, {
            "position": 4, "link_url": "https://example.com",
            "display_start": "2024-09-01", "display_end": "2024-09-30",
        })
        assert result.fields == ["position"]

    def test_banner_defaults(self):
        result = validate_form(BannerForm, {
            "link_url": "https://example.com",
            "display_start": "2024-09-01", "display_end": "2024-09-01",
        })
        assert result.ok
        assert result.data["position"] == 1
        assert result.data["image_file_name"] is None
