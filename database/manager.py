"""数据库管理器 - 统一门面（Facade）。

DatabaseManager 是 database 模块的统一入口，组合了所有子仓库，
提供两套 API：

1. **子仓库访问**（细粒度）：
   通过 ``db.users``、``db.fps`` 等属性直接访问子仓库，
   返回 ORM 对象，列表画面和编辑画面都通过它读写数据。

2. **便捷方法**（粗粒度）：
   提供扁平化的方法（如 ``get_user_detail()``、``get_fp_list()``），
   返回字典/基本类型，适合终端输出和详情面板。

管理器在应用启动时构造，并注入到各画面的控制器中；
它拥有全部数据，生命周期与进程相同。
"""
import random
from datetime import date
from typing import Optional, List, Dict, Any
from sqlalchemy.orm import Session
from loguru import logger

from .connection import DatabaseConnection
from .entity_repos import UserRepository, FPRepository, PartnerRepository
from .business_repos import (
    AllocationRepository, MatchingHistoryRepository, ReviewRepository,
    FPPerformanceRepository, PartnerLeadRepository, GiftRepository,
)
from .content_repos import (
    FAQRepository, LegalDocumentRepository, BannerRepository
)
from .finance_repos import (
    PaymentURLRepository, SubscriptionPlanRepository,
    FPContractRepository, FPPaymentRepository,
)
from .seed import seed_demo_data


class DatabaseManager:
    """数据库管理器 - 统一门面。

    Attributes:
        conn: 数据库连接管理器。
        users: 终端用户仓库。
        fps: FP 仓库。
        partners: 合作伙伴仓库。
        allocations: 匹配分配仓库。
        matching_history: 匹配履历仓库。
        reviews: 评价仓库。
        fp_performance: FP 月度实绩仓库。
        partner_leads: 合作伙伴线索仓库。
        gifts: 礼品申请仓库。
        faqs: FAQ 仓库。
        legal_documents: 法律文档仓库。
        banners: 广告横幅仓库。
        payment_urls: 决済URL仓库。
        plans: 订阅方案仓库。
        fp_contracts: FP 契约仓库。
        fp_payments: FP 支付记录仓库。

    Example::

        db = DatabaseManager()
        db.create_tables()
        db.seed()

        # 通过子仓库访问（返回 ORM 对象）
        fp = db.fps.require("FP001")

        # 通过便捷方法访问（返回字典）
        detail = db.get_user_detail("U001")
    """

    def __init__(self, database_url: Optional[str] = None) -> None:
        """初始化数据库管理器。

        Args:
            database_url: 数据库连接URL。如果为None则使用settings配置。
        """
        # 基础设施层
        self.conn = DatabaseConnection(database_url)

        # 实体仓库
        self.users = UserRepository(self.conn)
        self.fps = FPRepository(self.conn)
        self.partners = PartnerRepository(self.conn)

        # 业务记录仓库
        self.allocations = AllocationRepository(self.conn)
        self.matching_history = MatchingHistoryRepository(
            self.conn, self.fps, self.users
        )
        self.reviews = ReviewRepository(self.conn)
        self.fp_performance = FPPerformanceRepository(self.conn)
        self.partner_leads = PartnerLeadRepository(self.conn, self.partners)
        self.gifts = GiftRepository(self.conn)

        # 内容仓库
        self.faqs = FAQRepository(self.conn)
        self.legal_documents = LegalDocumentRepository(self.conn)
        self.banners = BannerRepository(self.conn)

        # 财务仓库
        self.payment_urls = PaymentURLRepository(self.conn)
        self.plans = SubscriptionPlanRepository(self.conn)
        self.fp_contracts = FPContractRepository(self.conn)
        self.fp_payments = FPPaymentRepository(self.conn)

    # ================================================================
    # 基础设施方法
    # ================================================================

    def create_tables(self) -> None:
        """创建所有数据库表（幂等操作）。"""
        self.conn.create_tables()

    def seed(self, rng: Optional[random.Random] = None) -> Dict[str, int]:
        """载入演示数据，详见 database.seed.seed_demo_data。"""
        return seed_demo_data(self, rng)

    def get_session(self) -> Session:
        """获取数据库会话。"""
        return self.conn.get_session()

    @property
    def database_url(self) -> str:
        """数据库连接URL。"""
        return self.conn.database_url

    def execute_raw_sql(self, sql: str,
                        params: Optional[dict] = None) -> Any:
        """执行原始 SQL 语句。

        注意：应优先使用 ORM 方法，仅在必要时使用原始 SQL。
        """
        return self.conn.execute_raw_sql(sql, params)

    def close(self) -> None:
        """关闭数据库连接，释放所有资源（内存数据库随之消失）。"""
        self.conn.close()
        logger.info("Database connection closed")

    # ================================================================
    # 便捷查询方法
    # ================================================================

    def record_counts(self) -> Dict[str, int]:
        """各实体的记录数。"""
        return {
            "users": self.users.count_all(),
            "fps": self.fps.count_all(),
            "partners": self.partners.count_all(),
            "allocations": self.allocations.count_all(),
            "matching_history": self.matching_history.count_all(),
            "reviews": self.reviews.count_all(),
            "faqs": self.faqs.count_all(),
            "legal_documents": self.legal_documents.count_all(),
            "banners": self.banners.count_all(),
            "payment_urls": self.payment_urls.count_all(),
            "plans": self.plans.count_all(),
            "fp_contracts": self.fp_contracts.count_all(),
            "fp_payments": self.fp_payments.count_all(),
            "fp_performance": self.fp_performance.count_all(),
            "partner_leads": self.partner_leads.count_all(),
            "gifts": self.gifts.count_all(),
        }

    def get_user_detail(self, user_id: str,
                        mark_seen: bool = True) -> Dict[str, Any]:
        """获取用户详情（基本信息 + 咨询履历 + 评价 + 礼品申请）。

        打开详情即视为已查看，默认清除「新規」标记。

        Args:
            user_id: 用户ID。
            mark_seen: 是否清除新用户标记。

        Returns:
            用户详情字典。

        Raises:
            NotFoundError: 用户不存在。
        """
        with self.get_session() as session:
            user = self.users.require(user_id, session=session)
            if mark_seen and user.is_new:
                self.users.mark_seen(user_id, session=session)
                session.commit()

            consultations = self.users.consultations(user_id, session=session)
            reviews = self.users.reviews_for(user_id, session=session)

            return {
                "id": user.id,
                "name": user.name,
                "furigana": user.furigana,
                "email": user.email,
                "phone": user.phone,
                "prefecture": user.prefecture,
                "registration_date": user.registration_date,
                "verification_status": user.verification_status,
                "line_status": user.line_status,
                "partner": user.partner.name if user.partner else None,
                "is_new": user.is_new,
                "consultations": [
                    {
                        "id": h.id,
                        "allocated_at": h.allocated_at,
                        "fp_name": h.fp.name,
                        "status": h.current_status,
                    }
                    for h in consultations
                ],
                "reviews": [
                    {
                        "id": r.id,
                        "fp_name": r.fp.name,
                        "rating": r.rating,
                        "posted_at": r.posted_at,
                    }
                    for r in reviews
                ],
                "gifts": [
                    {
                        "id": g.id,
                        "application_date": g.application_date,
                        "gift_type": g.gift_type,
                        "status": g.status,
                        "processed_date": g.processed_date,
                    }
                    for g in self.gifts.for_user(user_id, session=session)
                ],
            }

    def get_fp_list(self, active_only: bool = False) -> List[Dict[str, Any]]:
        """获取 FP 列表（默认排序：新建的在前）。

        Args:
            active_only: 是否只返回活動中的 FP。

        Returns:
            FP 信息字典列表。
        """
        fps = self.fps.list_all()
        if active_only:
            fps = [fp for fp in fps if fp.status == "活動中"]
        return [
            {
                "id": fp.id,
                "name": fp.name,
                "fp_type": fp.fp_type,
                "company": fp.company,
                "monthly_assignment": fp.monthly_assignment,
                "review_count": fp.review_count,
                "average_rating": fp.average_rating,
                "rank": fp.rank,
                "status": fp.status,
            }
            for fp in fps
        ]

    def get_fp_detail(self, fp_id: str,
                      today: Optional[date] = None) -> Dict[str, Any]:
        """获取 FP 详情（プロフィール + 契约 + 支付 + 月度实绩）。

        Args:
            fp_id: FP ID。
            today: 判断有效契约的基准日（可选，默认今天）。

        Raises:
            NotFoundError: FP 不存在。
        """
        fp = self.fps.require(fp_id)
        contract = self.fp_contracts.current(fp_id, today=today)
        latest = self.fp_performance.latest(fp_id)
        return {
            "id": fp.id,
            "name": fp.name,
            "email": fp.email,
            "fp_type": fp.fp_type,
            "company": fp.company,
            "rank": fp.rank,
            "status": fp.status,
            "monthly_assignment": fp.monthly_assignment,
            "industry_experience": fp.industry_experience,
            "annual_consultations": fp.annual_consultations,
            "contract_counts": fp.contract_counts,
            "awards": fp.awards,
            "contract": {
                "id": contract.id,
                "plan_name": contract.plan_name,
                "monthly_fee": contract.monthly_fee,
                "contract_start": contract.contract_start,
                "contract_end": contract.contract_end,
                "renewal_date": contract.renewal_date,
                "fp_rank": contract.fp_rank,
            } if contract else None,
            "payments": [
                {
                    "id": p.id,
                    "invoice_date": p.invoice_date,
                    "period": p.period,
                    "fee_type": p.fee_type,
                    "amount": p.amount,
                    "payment_status": p.payment_status,
                    "payment_date": p.payment_date,
                    "payment_method": p.payment_method,
                }
                for p in self.fp_payments.for_fp(fp_id)
            ],
            "outstanding_amount": self.fp_payments.outstanding_amount(fp_id),
            "performance": (
                self.fp_performance.summarize(latest) if latest else None
            ),
        }

    def get_matching_detail(self, history_id: str) -> Dict[str, Any]:
        """获取匹配履历详情（用户 + FP + 状态变更记录）。

        Raises:
            NotFoundError: 匹配履历不存在。
        """
        record = self.matching_history.require(history_id)
        return {
            "id": record.id,
            "allocated_at": record.allocated_at,
            "allocation_type": record.allocation_type,
            "allocation_method": record.allocation_method,
            "current_status": record.current_status,
            "user_name": record.user.name,
            "user_prefecture": record.user.prefecture,
            "consultation_content": record.user.consultation_content,
            "fp_name": record.fp.name,
            "fp_type": record.fp.fp_type,
            "fp_rank": record.fp.rank,
            "partner": record.partner.name if record.partner else None,
            "status_history": [
                {
                    "changed_at": e.changed_at,
                    "status": e.status,
                    "updated_by": e.updated_by,
                    "notes": e.notes,
                }
                for e in self.matching_history.status_history(history_id)
            ],
        }

    def get_partner_detail(self, partner_id: str) -> Dict[str, Any]:
        """获取合作伙伴详情（公司信息 + 合同 + 追踪 URL + 线索 + 实绩）。

        Raises:
            NotFoundError: 合作伙伴不存在。
        """
        partner = self.partners.require(partner_id)
        active = self.partners.active_url(partner_id)
        return {
            "id": partner.id,
            "name": partner.name,
            "contact_email": partner.contact_email,
            "lp_url": partner.lp_url,
            "status": partner.status,
            "last_updated": partner.last_updated,
            "company_info": {
                "representative_name": partner.representative_name,
                "phone_number": partner.phone_number,
                "address": partner.address,
                "contact_person_name": partner.contact_person_name,
                "contact_person_department": partner.contact_person_department,
            },
            "contract_info": {
                "start_date": partner.contract_start,
                "end_date": partner.contract_end,
                "status": partner.contract_status,
                "referral_fee": partner.referral_fee,
            },
            "active_url": active.url if active else None,
            "url_history": [
                {
                    "url": u.url,
                    "generation_date": u.generation_date,
                    "status": u.status,
                    "leads_count": u.leads_count,
                }
                for u in self.partners.url_history(partner_id)
            ],
            "lead_history": [
                {
                    "id": lead.id,
                    "received_at": lead.received_at,
                    "user_name": lead.user_name,
                    "age": lead.age,
                    "prefecture": lead.prefecture,
                    "approval_status": lead.approval_status,
                    "rejection_type": lead.rejection_type,
                }
                for lead in self.partner_leads.for_partner(partner_id)
            ],
            "performance": self.partners.performance(partner_id),
        }
