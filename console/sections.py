"""管理コンソール的各画面定义。

每个画面由一个列表控制器（ListView）和一个新建/编辑对话框（DetailSurface）
组成。检索字段、筛选项、排序键及其初始方向与各管理画面保持一致。
"""
from dataclasses import dataclass
from typing import Callable, Dict, Optional

from database import DatabaseManager
from forms import (
    DetailSurface, UserForm, FPForm, PartnerForm, AllocationForm, ReviewForm,
    PaymentURLForm, SubscriptionPlanForm, FAQForm, LegalDocumentForm,
    BannerForm,
)
from listing import (
    DateRange, EnumFilter, FilterSet, FlagFilter, ListView, SortDirection,
    SortKey, SortState, TextSearch,
)

ASC = SortDirection.ASC


@dataclass
class Section:
    """一个管理画面。

    Attributes:
        name: 画面标识（如 ``users``）。
        title: 画面标题。
        view: 列表控制器。
        surface: 新建/编辑对话框（只读画面为 None）。
    """
    name: str
    title: str
    view: ListView
    surface: Optional[DetailSurface] = None


def _fp_attr(name: str) -> Callable:
    """通过 ``record.fp`` 访问 FP 字段。"""
    return lambda record: getattr(record.fp, name) if record.fp else None


def build_users_section(db: DatabaseManager) -> Section:
    filters = FilterSet([
        TextSearch("search", ["name", "email"]),
        EnumFilter("partner", lambda u: u.partner.name if u.partner else None),
        EnumFilter("verification_status"),
        EnumFilter("new_user", lambda u: "新規のみ" if u.is_new else "既存"),
        DateRange("registration_date"),
    ])
    sort = SortState([SortKey("registration_date", label="登録日")],
                     default_key="registration_date")
    return Section(
        "users", "ユーザー管理",
        ListView("users", db.users.list_all, filters, sort),
        DetailSurface("users", db.users, UserForm),
    )


def build_fps_section(db: DatabaseManager) -> Section:
    filters = FilterSet([
        TextSearch("search", ["name", "email", "company"]),
        EnumFilter("fp_type"),
        EnumFilter("status"),
        FlagFilter("incomplete_only", lambda fp: fp.is_incomplete),
    ])
    sort = SortState([
        SortKey("join_date", label="登録日"),
        SortKey("review_count", label="評価数"),
        SortKey("average_rating", label="平均評価"),
        SortKey("rank", label="ランク"),
    ], default_key="join_date")
    return Section(
        "fps", "FP管理",
        ListView("fps", db.fps.list_all, filters, sort),
        DetailSurface("fps", db.fps, FPForm),
    )


def build_matching_section(db: DatabaseManager) -> Section:
    filters = FilterSet([
        TextSearch("search", [_fp_attr("name"), _fp_attr("email"),
                              _fp_attr("company")]),
        EnumFilter("fp_type", _fp_attr("fp_type")),
        EnumFilter("allocation_type"),
        FlagFilter("in_progress_only", lambda a: a.status != "完了"),
        DateRange("completion_date"),
    ])
    sort = SortState([
        SortKey("completion_date", label="完了日"),
        SortKey("completed_allocations", label="完了数"),
        SortKey("total_allocations", label="総割当数"),
    ], default_key="completion_date")
    return Section(
        "matching", "マッチング管理",
        ListView("matching", db.allocations.list_all, filters, sort),
        DetailSurface("matching", db.allocations, AllocationForm),
    )


def build_matching_history_section(db: DatabaseManager) -> Section:
    filters = FilterSet([
        TextSearch("search", [_fp_attr("name"),
                              lambda h: h.user.name if h.user else None]),
        EnumFilter("allocation_type"),
        EnumFilter("allocation_method"),
        EnumFilter("current_status"),
        DateRange("allocated_at"),
    ])
    sort = SortState([SortKey("allocated_at", label="割当日時")],
                     default_key="allocated_at")
    return Section(
        "matching_history", "マッチング履歴",
        ListView("matching_history", db.matching_history.list_all,
                 filters, sort),
    )


def build_partners_section(db: DatabaseManager) -> Section:
    filters = FilterSet([
        TextSearch("search", ["name", "contact_email"]),
        EnumFilter("status"),
    ])
    sort = SortState([SortKey("last_updated", label="最終更新日")],
                     default_key="last_updated")
    return Section(
        "partners", "パートナー管理",
        ListView("partners", db.partners.list_all, filters, sort),
        DetailSurface("partners", db.partners, PartnerForm),
    )


def build_reviews_section(db: DatabaseManager) -> Section:
    # 投稿者名只在终端用户的投稿中参与检索
    def end_user_name(review):
        if review.reviewer_type == "エンドユーザー":
            return review.reviewer_name
        return None

    filters = FilterSet([
        TextSearch("search", [_fp_attr("name"), end_user_name]),
        EnumFilter("rating"),
        EnumFilter("reviewer_type"),
        EnumFilter("fp_type", _fp_attr("fp_type")),
        EnumFilter("status_at_review"),
        DateRange("posted_at"),
    ])
    sort = SortState([
        SortKey("posted_at", label="投稿日時"),
        SortKey("rating", label="評価"),
    ], default_key="posted_at")
    return Section(
        "reviews", "レビュー管理",
        ListView("reviews", db.reviews.list_all, filters, sort),
        DetailSurface("reviews", db.reviews, ReviewForm),
    )


def build_payment_urls_section(db: DatabaseManager) -> Section:
    filters = FilterSet([
        TextSearch("search", ["url_name"]),
        EnumFilter("status"),
    ])
    sort = SortState([
        SortKey("creation_date", label="作成日"),
        SortKey("last_payment_date", label="最終決済日"),
        SortKey("payment_count", label="決済回数"),
    ], default_key="creation_date", new_key_direction=ASC)
    return Section(
        "payment_urls", "決済URL管理",
        ListView("payment_urls", db.payment_urls.list_all, filters, sort),
        DetailSurface("payment_urls", db.payment_urls, PaymentURLForm),
    )


def build_subscription_plans_section(db: DatabaseManager) -> Section:
    filters = FilterSet([
        TextSearch("search", ["plan_name"]),
        EnumFilter("status"),
    ])
    sort = SortState([
        SortKey("creation_date", label="作成日"),
        SortKey("price", label="料金"),
        SortKey("subscriber_count", label="契約数"),
    ], default_key="creation_date")
    return Section(
        "subscription_plans", "サブスクリプションプラン",
        ListView("subscription_plans", db.plans.list_all, filters, sort),
        DetailSurface("subscription_plans", db.plans, SubscriptionPlanForm),
    )


def build_faqs_section(db: DatabaseManager) -> Section:
    filters = FilterSet([
        TextSearch("search", ["question", "answer"]),
        EnumFilter("category"),
        EnumFilter("publication_status"),
    ])
    sort = SortState([
        SortKey("display_order", label="表示順"),
        SortKey("last_updated", label="最終更新日"),
    ], default_key="display_order", default_direction=ASC,
        new_key_direction=ASC)
    return Section(
        "faqs", "FAQ管理",
        ListView("faqs", db.faqs.ordered, filters, sort),
        DetailSurface("faqs", db.faqs, FAQForm),
    )


def build_legal_documents_section(db: DatabaseManager) -> Section:
    filters = FilterSet([
        TextSearch("search", ["name"]),
        EnumFilter("publication_status"),
    ])
    sort = SortState([SortKey("last_updated", label="最終更新日")],
                     default_key="last_updated")
    return Section(
        "legal_documents", "規約・ポリシー管理",
        ListView("legal_documents", db.legal_documents.list_all,
                 filters, sort),
        DetailSurface("legal_documents", db.legal_documents,
                      LegalDocumentForm),
    )


def build_banners_section(db: DatabaseManager) -> Section:
    filters = FilterSet([
        TextSearch("search", ["link_url"]),
        EnumFilter("publication_status"),
        FlagFilter("active_only", lambda b: (b.position or 0) > 0),
    ])
    # 广告位 0（未投放）排在最后
    sort = SortState([
        SortKey("position", lambda b: b.position or 99, label="表示位置"),
        SortKey("clicks", label="クリック数"),
    ], default_key="position", default_direction=ASC, new_key_direction=ASC)
    return Section(
        "banners", "広告バナー管理",
        ListView("banners", db.banners.ordered, filters, sort),
        DetailSurface("banners", db.banners, BannerForm),
    )


SECTION_BUILDERS: Dict[str, Callable[[DatabaseManager], Section]] = {
    "users": build_users_section,
    "fps": build_fps_section,
    "matching": build_matching_section,
    "matching_history": build_matching_history_section,
    "partners": build_partners_section,
    "reviews": build_reviews_section,
    "payment_urls": build_payment_urls_section,
    "subscription_plans": build_subscription_plans_section,
    "faqs": build_faqs_section,
    "legal_documents": build_legal_documents_section,
    "banners": build_banners_section,
}


def build_sections(db: DatabaseManager) -> Dict[str, Section]:
    """构建全部画面。"""
    return {name: builder(db) for name, builder in SECTION_BUILDERS.items()}
