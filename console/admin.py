"""管理コンソール - 数据与全部画面的所有者。

AdminConsole 在应用启动时构造：创建（内存）数据库、载入演示数据，
并把同一个 DatabaseManager 注入到所有画面中。
"""
from typing import Dict, List, Optional

from loguru import logger

from config.console_config import console_config
from config.settings import settings
from database import DatabaseManager
from forms import (
    DetailSurface, FPContractForm, FPPaymentForm, GiftForm, LegalUploadForm,
    MatchingStatusForm, PartnerLeadForm,
)
from listing import ListView
from .sections import Section, build_sections


class AdminConsole:
    """管理コンソール。

    Attributes:
        db: 数据库管理器。
        sections: 画面标识 → Section。
        legal_upload: 法律文档新版本上传对话框。
        fp_contracts / fp_payments: FP 详情中的契约、付款对话框。
        partner_leads: 合作伙伴详情中的线索登记对话框。
        gifts: 用户详情中的礼品申请对话框。
        matching_status: 匹配记录的咨询状态变更对话框。

    Example::

        console = AdminConsole()
        view = console.view("users")
        view.set_filter("search", "青木")
        page = view.page()
    """

    def __init__(self, db: Optional[DatabaseManager] = None,
                 seed: Optional[bool] = None) -> None:
        """
        Args:
            db: 数据库管理器（可选，默认按 settings 新建）。
            seed: 是否载入演示数据（可选，默认取 settings.seed_on_start）。
        """
        self.db = db or DatabaseManager()
        self.db.create_tables()
        if settings.seed_on_start if seed is None else seed:
            self.db.seed()

        self.sections: Dict[str, Section] = build_sections(self.db)
        self.legal_upload = DetailSurface(
            "legal_upload", self.db.legal_documents, LegalUploadForm,
            create=self.db.legal_documents.upload_version,
        )
        self.fp_contracts = DetailSurface(
            "fp_contracts", self.db.fp_contracts, FPContractForm
        )
        self.fp_payments = DetailSurface(
            "fp_payments", self.db.fp_payments, FPPaymentForm
        )
        self.partner_leads = DetailSurface(
            "partner_leads", self.db.partner_leads, PartnerLeadForm,
            create=self.db.partner_leads.receive,
        )
        self.gifts = DetailSurface(
            "gifts", self.db.gifts, GiftForm, create=self.db.gifts.apply
        )
        self.matching_status = DetailSurface(
            "matching_status", self.db.matching_history, MatchingStatusForm,
            update=self._change_status,
        )
        logger.info(f"Admin console ready: {len(self.sections)} sections")

    @property
    def section_names(self) -> List[str]:
        return list(self.sections)

    def section(self, name: str) -> Section:
        """按标识获取画面。

        Raises:
            ValueError: 画面不存在。
        """
        if name not in self.sections:
            raise ValueError(
                f"Unknown section: {name}, expected one of {self.section_names}"
            )
        return self.sections[name]

    def view(self, name: str) -> ListView:
        return self.section(name).view

    def surface(self, name: str) -> DetailSurface:
        """获取画面的新建/编辑对话框。

        Raises:
            ValueError: 画面不存在或为只读画面。
        """
        surface = self.section(name).surface
        if surface is None:
            raise ValueError(f"Section {name} is read-only")
        return surface

    def open_upload(self, doc_id: str) -> None:
        """为指定文档打开新版本上传对话框。

        Raises:
            NotFoundError: 文档不存在。
        """
        self.db.legal_documents.require(doc_id)
        self.legal_upload.open_create(context={"doc_id": doc_id})

    def open_contract(self, fp_id: str) -> None:
        """为指定 FP 打开新契约对话框。

        Raises:
            NotFoundError: FP 不存在。
        """
        self.db.fps.require(fp_id)
        self.fp_contracts.open_create(defaults={"fp_id": fp_id})

    def open_payment(self, fp_id: str) -> None:
        self.db.fps.require(fp_id)
        self.fp_payments.open_create(defaults={"fp_id": fp_id})

    def open_lead(self, partner_id: str) -> None:
        self.db.partners.require(partner_id)
        self.partner_leads.open_create(defaults={"partner_id": partner_id})

    def open_gift(self, user_id: str) -> None:
        self.db.users.require(user_id)
        self.gifts.open_create(defaults={"user_id": user_id})

    def open_status_change(self, history_id: str) -> None:
        """打开咨询状态变更对话框。

        Raises:
            NotFoundError: 匹配记录不存在。
        """
        self.matching_status.open_edit(history_id)

    def _change_status(self, history_id: str, status: str,
                       notes: Optional[str] = None):
        return self.db.matching_history.update_status(
            history_id, status, notes=notes or ""
        )

    def menu(self) -> List[Dict[str, str]]:
        return console_config.get_menu_sections()

    def close(self) -> None:
        self.db.close()
