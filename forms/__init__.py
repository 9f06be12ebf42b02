"""forms 模块 - 编辑表单模型、校验结果与新建/编辑对话框。"""
from .validation import FieldError, ValidationResult, validate_form
from .detail import DetailSurface, SubmitResult, SurfaceMode
from .schemas import (
    UserForm, FPForm, PartnerForm, AllocationForm, ReviewForm,
    PaymentURLForm, SubscriptionPlanForm, FAQForm, LegalDocumentForm,
    LegalUploadForm, BannerForm, PartnerLeadForm, MatchingStatusForm,
    FPContractForm, FPPaymentForm, GiftForm,
)

__all__ = [
    "FieldError", "ValidationResult", "validate_form",
    "DetailSurface", "SubmitResult", "SurfaceMode",
    "UserForm", "FPForm", "PartnerForm", "AllocationForm", "ReviewForm",
    "PaymentURLForm", "SubscriptionPlanForm", "FAQForm", "LegalDocumentForm",
    "LegalUploadForm", "BannerForm", "PartnerLeadForm", "MatchingStatusForm",
    "FPContractForm", "FPPaymentForm", "GiftForm",
]
