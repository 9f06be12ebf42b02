"""各实体的编辑表单模型。

所有表单遵循同一套规则：
- 必填字段去除首尾空白后不能为空
- 邮箱、URL 必须格式正确（EmailStr / HttpUrl）
- 枚举字段只能取对应的日文字面值
- 可选字段传入空字符串视为未填写（None）
- 日期可以是 date 对象，也可以是 ``YYYY-MM-DD`` / ``YYYY/MM/DD`` 字符串

表单模型只负责校验；ID 由仓库分配，不在表单中。
"""
import re
from datetime import date, datetime
from typing import Annotated, Any, List, Literal, Optional

from pydantic import (
    AfterValidator, BaseModel, BeforeValidator, EmailStr, Field, HttpUrl,
    StringConstraints, TypeAdapter, ValidationError, ValidationInfo,
    field_validator, model_validator,
)

from config.console_config import console_config
from listing.filters import coerce_date

_VERSION_RE = re.compile(r"^v?\d+(\.\d+)*$")
_HTTP_URL = TypeAdapter(HttpUrl)


def _check_url(value: str) -> str:
    # 只校验，保存时保留输入的原文（HttpUrl 会补末尾的斜杠）
    try:
        _HTTP_URL.validate_python(value)
    except ValidationError:
        raise ValueError("URLの形式が正しくありません") from None
    return value


def _check_version(value: str) -> str:
    if not _VERSION_RE.match(value):
        raise ValueError("バージョンは v1.0 の形式で入力してください")
    return value


def _parse_date(value: Any) -> Any:
    if isinstance(value, str) and value.strip():
        parsed = coerce_date(value)
        if parsed is not None:
            return parsed.date()
    return value


def _parse_datetime(value: Any) -> Any:
    if isinstance(value, str) and value.strip():
        parsed = coerce_date(value)
        if parsed is not None:
            return parsed
    return value


NonBlank = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1)]
Email = EmailStr
Url = Annotated[NonBlank, AfterValidator(_check_url)]
Version = Annotated[NonBlank, AfterValidator(_check_version)]
FlexibleDate = Annotated[date, BeforeValidator(_parse_date)]
FlexibleDateTime = Annotated[datetime, BeforeValidator(_parse_datetime)]

LineStatus = Literal["連携済み", "未連携"]
VerificationStatus = Literal["認証済み", "未認証"]
FPType = Literal["個人", "法人"]
FPStatus = Literal["活動中", "停止中"]
FPRole = Literal["一般", "管理者"]
PartnerStatus = Literal["アクティブ", "停止中"]
AllocationType = Literal["基本割当", "追加配信依頼"]
ReviewerType = Literal["エンドユーザー", "システム管理者"]
ReviewStatus = Literal["新規", "日程調整", "面談実施", "商品提案", "契約"]
PaymentURLStatus = Literal["利用中", "停止中"]
PlanStatus = Literal["有効", "無効"]
BillingCycle = Literal["月間請求", "年間請求"]
PublicationStatus = Literal["公開中", "非公開"]
PartnerContractStatus = Literal["有効", "無効", "期限切れ"]
FPContractStatus = Literal["有効", "無効"]
FPPaymentStatus = Literal["支払い済み", "未払い"]
FPPaymentMethod = Literal["クレジットカード", "銀行振込"]
ConsultationStatus = Literal["新規", "日程調整", "面談実施", "商品提案", "契約", "保留", "失注"]


class ConsoleForm(BaseModel):
    """表单基类。未知字段视为错误，可选字段的空字符串转为 None。"""

    model_config = {"str_strip_whitespace": True, "extra": "forbid"}

    @field_validator("*", mode="before")
    @classmethod
    def blank_to_none(cls, value: Any, info: ValidationInfo) -> Any:
        if isinstance(value, str) and value.strip() == "":
            field = cls.model_fields.get(info.field_name)
            if field is not None and not field.is_required() and field.default is None:
                return None
        return value


class UserForm(ConsoleForm):
    name: NonBlank
    furigana: str = ""
    email: Email
    phone: Optional[str] = None
    birth_date: Optional[FlexibleDate] = None
    gender: Optional[str] = None
    prefecture: Optional[str] = None
    consultation_content: Optional[str] = None
    preferred_call_time: Optional[str] = None
    line_status: LineStatus = "未連携"
    partner_id: Optional[str] = None
    registration_date: FlexibleDate = Field(default_factory=date.today)
    verification_status: VerificationStatus = "未認証"

    @field_validator("prefecture")
    @classmethod
    def known_prefecture(cls, value: Optional[str]) -> Optional[str]:
        if value is not None and value not in console_config.get_prefectures():
            raise ValueError(f"都道府県が正しくありません: {value}")
        return value


class FPForm(ConsoleForm):
    """FP 表单。法人 FP 必须填写所属公司。"""

    name: NonBlank
    furigana: str = ""
    email: Email
    fp_type: FPType = "個人"
    company: str = ""
    position: Optional[str] = None
    work_address: Optional[str] = None
    join_date: FlexibleDate = Field(default_factory=date.today)
    rank: int = Field(default=3, ge=1, le=5)
    assigned_count: int = Field(default=0, ge=0)
    monthly_limit: int = Field(default=10, ge=0)
    status: FPStatus = "活動中"
    role: FPRole = "一般"
    industry_experience: Optional[str] = None
    annual_consultations: Optional[str] = None
    contract_counts: Optional[str] = None
    awards: Optional[str] = None

    @model_validator(mode="after")
    def company_for_corporate(self) -> "FPForm":
        if self.fp_type == "法人" and not self.company:
            raise ValueError("法人FPは会社名が必須です")
        return self


class PartnerForm(ConsoleForm):
    """合作伙伴表单。公司信息与合同条件都可以留空，合同结束日不能早于开始日。"""

    name: NonBlank
    contact_email: Email
    lp_url: Url
    status: PartnerStatus = "アクティブ"
    representative_name: Optional[str] = None
    phone_number: Optional[str] = None
    address: Optional[str] = None
    contact_person_name: Optional[str] = None
    contact_person_department: Optional[str] = None
    contract_start: Optional[FlexibleDate] = None
    contract_end: Optional[FlexibleDate] = None
    contract_status: PartnerContractStatus = "有効"
    referral_fee: Optional[int] = Field(default=None, ge=0)

    @model_validator(mode="after")
    def contract_in_order(self) -> "PartnerForm":
        if (self.contract_start and self.contract_end
                and self.contract_end < self.contract_start):
            raise ValueError("契約終了日は開始日以降にしてください")
        return self


class PartnerLeadForm(ConsoleForm):
    """合作伙伴送来的线索。新线索一律从 保留中 开始，审核结果不在表单中。"""

    partner_id: NonBlank
    user_name: NonBlank
    user_id: Optional[str] = None
    received_at: FlexibleDateTime = Field(default_factory=datetime.now)
    age: Optional[int] = Field(default=None, ge=0, le=120)
    prefecture: Optional[str] = None
    consultation_content: Optional[str] = None

    @field_validator("prefecture")
    @classmethod
    def known_prefecture(cls, value: Optional[str]) -> Optional[str]:
        if value is not None and value not in console_config.get_prefectures():
            raise ValueError(f"都道府県が正しくありません: {value}")
        return value


class AllocationForm(ConsoleForm):
    """匹配分配表单。完成数不能超过配额总数。"""

    fp_id: NonBlank
    allocation_type: AllocationType = "基本割当"
    completed_allocations: int = Field(default=0, ge=0)
    total_allocations: int = Field(ge=0)
    completion_date: Optional[FlexibleDate] = None

    @model_validator(mode="after")
    def completed_within_total(self) -> "AllocationForm":
        if self.completed_allocations > self.total_allocations:
            raise ValueError(
                f"完了数({self.completed_allocations})が"
                f"総数({self.total_allocations})を超えています"
            )
        return self


class ReviewForm(ConsoleForm):
    fp_id: NonBlank
    reviewer_name: NonBlank
    reviewer_type: ReviewerType = "エンドユーザー"
    user_id: Optional[str] = None
    rating: int = Field(ge=1, le=5)
    review_content: str = ""
    status_at_review: ReviewStatus = "新規"
    posted_at: FlexibleDateTime = Field(default_factory=datetime.now)
    consultation_topics: List[str] = Field(default_factory=list)


class MatchingStatusForm(ConsoleForm):
    """咨询状态变更表单。"""

    status: ConsultationStatus
    notes: Optional[str] = None


class PaymentURLForm(ConsoleForm):
    url_name: NonBlank
    url: Url
    status: PaymentURLStatus = "利用中"
    description: Optional[str] = None
    amount: Optional[int] = Field(default=None, ge=0)


class SubscriptionPlanForm(ConsoleForm):
    plan_name: NonBlank
    price: int = Field(ge=0)
    billing_cycle: BillingCycle = "月間請求"
    status: PlanStatus = "有効"
    subscriber_count: int = Field(default=0, ge=0)


class FPContractForm(ConsoleForm):
    fp_id: NonBlank
    plan_name: NonBlank
    contract_start: FlexibleDate
    contract_end: FlexibleDate
    renewal_date: Optional[FlexibleDate] = None
    monthly_fee: int = Field(ge=0)
    contract_status: FPContractStatus = "有効"
    fp_rank: int = Field(default=3, ge=1, le=5)

    @model_validator(mode="after")
    def period_in_order(self) -> "FPContractForm":
        if self.contract_end < self.contract_start:
            raise ValueError("契約終了日は開始日以降にしてください")
        return self


class FPPaymentForm(ConsoleForm):
    """FP 付款表单。已付款的记录必须有付款日。"""

    fp_id: NonBlank
    invoice_date: FlexibleDate
    period: NonBlank
    fee_type: NonBlank
    amount: int = Field(ge=0)
    payment_status: FPPaymentStatus = "未払い"
    payment_date: Optional[FlexibleDate] = None
    payment_method: FPPaymentMethod = "クレジットカード"
    notes: str = ""

    @model_validator(mode="after")
    def paid_has_date(self) -> "FPPaymentForm":
        if self.payment_status == "支払い済み" and self.payment_date is None:
            raise ValueError("支払い済みの場合は支払日が必須です")
        return self


class GiftForm(ConsoleForm):
    user_id: NonBlank
    gift_type: NonBlank
    application_date: FlexibleDate = Field(default_factory=date.today)


class FAQForm(ConsoleForm):
    """FAQ 表单。display_order 未填写时由仓库追加到末尾。"""

    category: NonBlank
    question: NonBlank
    answer: NonBlank
    publication_status: PublicationStatus = "公開中"
    display_order: Optional[int] = Field(default=None, ge=1)

    @field_validator("category")
    @classmethod
    def known_category(cls, value: str) -> str:
        if value not in console_config.get_faq_categories():
            raise ValueError(f"カテゴリが正しくありません: {value}")
        return value


class LegalDocumentForm(ConsoleForm):
    name: NonBlank
    current_version: Version
    publication_status: PublicationStatus = "公開中"


class LegalUploadForm(ConsoleForm):
    """新版本上传表单（只记录文件名）。"""

    version: Version
    file_name: NonBlank


class BannerForm(ConsoleForm):
    """广告横幅表单。

    position 0 表示不放在任何广告位；image_file_name 是选择的图片文件名，
    只用于生成本地引用路径。
    """

    position: int = Field(default=1, ge=0, le=3)
    link_url: Url
    display_start: FlexibleDate
    display_end: FlexibleDate
    publication_status: PublicationStatus = "公開中"
    image_file_name: Optional[str] = None

    @model_validator(mode="after")
    def period_in_order(self) -> "BannerForm":
        if self.display_end < self.display_start:
            raise ValueError("表示終了日は開始日以降にしてください")
        return self
