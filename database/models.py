"""SQLAlchemy ORM 模型定义。

本模块定义了管理コンソール所有数据表的ORM模型，包括：
- 用户、FP、合作伙伴等基础实体（含 FP 契约/支付/月度实绩、合作伙伴线索）
- 匹配分配、匹配履历（含状态变更记录）、评价、礼品申请等业务记录
- FAQ、法律文档、广告横幅等内容数据
- 决済URL、订阅方案等财务元数据
- ID 序列表（保证新 ID 永不复用）

所有实体使用字符串主键（``PREFIX`` + 零填充序号），实体之间通过
显式外键关联，而不是按姓名/邮箱字符串匹配。
"""
from typing import List, Optional
from sqlalchemy import (
    Column, Integer, String, Text, Boolean, Date, DateTime, Float,
    ForeignKey, JSON, UniqueConstraint
)
from sqlalchemy.orm import declarative_base
from sqlalchemy.orm import relationship
from datetime import datetime, date

# SQLAlchemy declarative base，所有模型都继承自此类
Base = declarative_base()

# 允许使用旧式类型注解（Column 赋值 + 类型提示）
Base.__allow_unmapped__ = True


class IdSequence(Base):
    """ID 序列表模型。

    每个 ID 前缀一行，记录已分配的最大序号。删除记录不会回退序号，
    因此新 ID 不会与任何现存或已删除的 ID 冲突。

    Attributes:
        prefix: ID 前缀（如 U、FP、PART），主键。
        last_value: 已分配的最大序号。
    """
    __tablename__ = "id_sequences"

    prefix: str = Column(String(20), primary_key=True)
    last_value: int = Column(Integer, nullable=False, default=0)


class Partner(Base):
    """合作伙伴（パートナー）表模型。

    外部引流来源，通过带追踪的 LP URL 向系统输送终端用户。

    Attributes:
        id: 主键，如 PART001。
        name: 合作伙伴名称，必填。
        contact_email: 联系邮箱。
        lp_url: 落地页 URL。
        status: 账户状态，アクティブ / 停止中。
        representative_name / phone_number / address: 公司信息。
        contact_person_name / contact_person_department: 对接担当者。
        contract_start / contract_end: 合同期间。
        contract_status: 合同状态，有効 / 無効 / 期限切れ。
        referral_fee: 每件介绍费（日元）。
        last_updated: 最后更新日期。
        created_at: 创建时间。

    Relationships:
        urls: 追踪 URL 发行履历（新的在前）。
    """
    __tablename__ = "partners"

    id: str = Column(String(20), primary_key=True)
    name: str = Column(String(100), nullable=False)
    contact_email: str = Column(String(255), nullable=False)
    lp_url: str = Column(String(500), nullable=False)
    status: str = Column(String(10), default="アクティブ")
    representative_name: Optional[str] = Column(String(50))
    phone_number: Optional[str] = Column(String(20))
    address: Optional[str] = Column(String(255))
    contact_person_name: Optional[str] = Column(String(50))
    contact_person_department: Optional[str] = Column(String(50))
    contract_start: Optional[date] = Column(Date)
    contract_end: Optional[date] = Column(Date)
    contract_status: str = Column(String(10), default="有効")
    referral_fee: Optional[int] = Column(Integer)
    last_updated: date = Column(Date, default=date.today)
    created_at: datetime = Column(DateTime, default=datetime.utcnow)

    urls: List["PartnerUrl"] = relationship(
        "PartnerUrl",
        back_populates="partner",
        cascade="all, delete-orphan",
        lazy="selectin",
        order_by=lambda: PartnerUrl.id.desc(),
    )


class PartnerUrl(Base):
    """合作伙伴追踪 URL 履历表模型。

    同一合作伙伴任意时刻最多只有一条「利用中」的 URL。

    Attributes:
        id: 主键，自增整数。
        partner_id: 合作伙伴ID，外键。
        url: 追踪 URL。
        generation_date: 生成日期。
        status: 利用中 / 停止済み。
        leads_count: 通过该 URL 获取的线索数。
    """
    __tablename__ = "partner_urls"

    id: int = Column(Integer, primary_key=True, autoincrement=True)
    partner_id: str = Column(
        String(20), ForeignKey("partners.id", ondelete="CASCADE"), nullable=False
    )
    url: str = Column(String(500), nullable=False)
    generation_date: date = Column(Date, nullable=False)
    status: str = Column(String(10), default="利用中")
    leads_count: int = Column(Integer, default=0)

    partner: "Partner" = relationship("Partner", back_populates="urls")


class PartnerLead(Base):
    """合作伙伴线索接收履历表模型。

    每条线索经审核后为 承認済み / 拒否；拒否时记录是自动还是人工驳回。

    Attributes:
        id: 主键，如 LEAD001。
        partner_id: 合作伙伴ID，外键。
        user_id: 线索注册后的终端用户ID（可选）。
        received_at: 接收时间。
        user_name / age / prefecture / consultation_content: 线索内容。
        approval_status: 承認済み / 拒否 / 保留中。
        rejection_type: 自動 / 手動（仅拒否时有值）。
        consultation_status: 当前咨询状态（可选）。
    """
    __tablename__ = "partner_leads"

    id: str = Column(String(20), primary_key=True)
    partner_id: str = Column(
        String(20), ForeignKey("partners.id", ondelete="CASCADE"), nullable=False
    )
    user_id: Optional[str] = Column(
        String(20), ForeignKey("users.id", ondelete="SET NULL")
    )
    received_at: datetime = Column(DateTime, nullable=False)
    user_name: str = Column(String(50), nullable=False)
    age: Optional[int] = Column(Integer)
    prefecture: Optional[str] = Column(String(10))
    consultation_content: Optional[str] = Column(Text)
    approval_status: str = Column(String(10), default="保留中")
    rejection_type: Optional[str] = Column(String(10))
    consultation_status: Optional[str] = Column(String(10))


class User(Base):
    """终端用户表模型。

    Attributes:
        id: 主键，如 U001。
        name: 姓名，必填。
        furigana: 假名读音。
        email: 邮箱，必填。
        phone / birth_date / gender / prefecture: 可选个人信息。
        consultation_content: 咨询内容。
        preferred_call_time: 希望联系时间段。
        line_status: LINE 公式账号联动状态，連携済み / 未連携。
        partner_id: 引流来源合作伙伴ID，外键（可选）。
        last_login: 最后登录时间。
        registration_date: 注册日期，必填。
        verification_status: 認証済み / 未認証。
        is_new: 是否为未查看过的新用户。
    """
    __tablename__ = "users"

    id: str = Column(String(20), primary_key=True)
    name: str = Column(String(50), nullable=False)
    furigana: str = Column(String(100), default="")
    email: str = Column(String(255), nullable=False)
    phone: Optional[str] = Column(String(20))
    birth_date: Optional[date] = Column(Date)
    gender: Optional[str] = Column(String(10))
    prefecture: Optional[str] = Column(String(10))
    consultation_content: Optional[str] = Column(Text)
    preferred_call_time: Optional[str] = Column(String(50))
    line_status: str = Column(String(10), default="未連携")
    partner_id: Optional[str] = Column(
        String(20), ForeignKey("partners.id", ondelete="SET NULL")
    )
    last_login: Optional[datetime] = Column(DateTime)
    registration_date: date = Column(Date, nullable=False, default=date.today)
    verification_status: str = Column(String(10), default="未認証")
    is_new: bool = Column(Boolean, default=True)
    created_at: datetime = Column(DateTime, default=datetime.utcnow)

    partner: Optional["Partner"] = relationship("Partner", lazy="joined")


class FP(Base):
    """ファイナンシャルプランナー（FP）表模型。

    Attributes:
        id: 主键，如 FP001。
        name: 姓名，必填。
        email: 邮箱，必填。
        fp_type: 個人 / 法人。
        company: 所属公司（個人 FP 为空字符串）。
        join_date: 入驻日期。
        review_count: 评价数（由评价仓库重新统计）。
        average_rating: 平均评分。
        rank: FP 等级 1-5。
        assigned_count: 本月已分配数。
        monthly_limit: 本月分配上限。
        status: 活動中 / 停止中。
        role: 一般 / 管理者。
        industry_experience / annual_consultations / contract_counts / awards:
            プロフィール上的自由记述项目。
    """
    __tablename__ = "fps"

    id: str = Column(String(20), primary_key=True)
    name: str = Column(String(50), nullable=False)
    furigana: str = Column(String(100), default="")
    email: str = Column(String(255), nullable=False)
    fp_type: str = Column(String(10), nullable=False, default="個人")
    company: str = Column(String(100), default="")
    position: Optional[str] = Column(String(50))
    work_address: Optional[str] = Column(String(255))
    industry_experience: Optional[str] = Column(String(100))
    annual_consultations: Optional[str] = Column(String(100))
    contract_counts: Optional[str] = Column(String(100))
    awards: Optional[str] = Column(Text)
    join_date: date = Column(Date, nullable=False, default=date.today)
    review_count: int = Column(Integer, default=0)
    average_rating: float = Column(Float, default=0.0)
    rank: int = Column(Integer, default=3)
    assigned_count: int = Column(Integer, default=0)
    monthly_limit: int = Column(Integer, default=10)
    status: str = Column(String(10), default="活動中")
    role: str = Column(String(10), default="一般")
    created_at: datetime = Column(DateTime, default=datetime.utcnow)

    @property
    def monthly_assignment(self) -> str:
        """本月分配进度，如 ``3/10``。"""
        return f"{self.assigned_count or 0}/{self.monthly_limit or 0}"

    @property
    def is_incomplete(self) -> bool:
        return (self.assigned_count or 0) < (self.monthly_limit or 0)


class FPContract(Base):
    """FP 契约表模型。

    Attributes:
        id: 主键，如 CON001。
        fp_id: FP ID，外键。
        contract_start / contract_end: 契约期间。
        renewal_date: 最近一次更新日（可选）。
        plan_name: 契约方案名。
        monthly_fee: 月额费用（日元）。
        contract_status: 有効 / 無効。
        fp_rank: 契约时的 FP 等级 1-5。
    """
    __tablename__ = "fp_contracts"

    id: str = Column(String(20), primary_key=True)
    fp_id: str = Column(
        String(20), ForeignKey("fps.id", ondelete="CASCADE"), nullable=False
    )
    contract_start: date = Column(Date, nullable=False)
    contract_end: date = Column(Date, nullable=False)
    renewal_date: Optional[date] = Column(Date)
    plan_name: str = Column(String(100), nullable=False)
    monthly_fee: int = Column(Integer, nullable=False)
    contract_status: str = Column(String(10), default="有効")
    fp_rank: int = Column(Integer, default=3)

    def covers(self, day: date) -> bool:
        """契约是否有效且期间包含 day。"""
        return (
            self.contract_status == "有効"
            and self.contract_start <= day <= self.contract_end
        )


class FPPayment(Base):
    """FP 支付记录表模型。

    Attributes:
        id: 主键，如 PAY001。
        fp_id: FP ID，外键。
        invoice_date: 请求日。
        period: 请求对象期间（如 ``2024年9月``）。
        fee_type: 费用类型（月額利用料、追加配信料 等）。
        amount: 金额（日元）。
        payment_status: 支払い済み / 未払い。
        payment_date: 支付日（未支付为空）。
        payment_method: クレジットカード / 銀行振込。
        notes: 备注。
    """
    __tablename__ = "fp_payments"

    id: str = Column(String(20), primary_key=True)
    fp_id: str = Column(
        String(20), ForeignKey("fps.id", ondelete="CASCADE"), nullable=False
    )
    invoice_date: date = Column(Date, nullable=False)
    period: str = Column(String(20), nullable=False)
    fee_type: str = Column(String(50), nullable=False)
    amount: int = Column(Integer, nullable=False)
    payment_status: str = Column(String(10), default="未払い")
    payment_date: Optional[date] = Column(Date)
    payment_method: str = Column(String(20), default="クレジットカード")
    notes: str = Column(Text, default="")


def _rate(numerator: int, denominator: int) -> float:
    # 分母为 0 时按 0% 显示
    if not denominator:
        return 0.0
    return round((numerator or 0) / denominator * 100, 1)


class FPPerformance(Base):
    """FP 月度实绩表模型。

    从预定配信到成约的漏斗，每个 FP 每月一行。
    各阶段的转化率由相邻两个阶段的件数推导，以百分比（保留一位小数）表示。

    Attributes:
        id: 主键，自增整数。
        fp_id: FP ID，外键。
        year / month: 对象年月。
        scheduled_deliveries: 预定配信数。
        actual_deliveries: 实际配信数。
        phone_connections: 电话接通数。
        schedule_adjustments: 日程调整数。
        meetings_held: 面谈实施数。
        proposals_sent: 商品提案数。
        contracts_signed: 成约数。
    """
    __tablename__ = "fp_performance"
    __table_args__ = (UniqueConstraint("fp_id", "year", "month"),)

    id: int = Column(Integer, primary_key=True, autoincrement=True)
    fp_id: str = Column(
        String(20), ForeignKey("fps.id", ondelete="CASCADE"), nullable=False
    )
    year: int = Column(Integer, nullable=False)
    month: int = Column(Integer, nullable=False)
    scheduled_deliveries: int = Column(Integer, default=0)
    actual_deliveries: int = Column(Integer, default=0)
    phone_connections: int = Column(Integer, default=0)
    schedule_adjustments: int = Column(Integer, default=0)
    meetings_held: int = Column(Integer, default=0)
    proposals_sent: int = Column(Integer, default=0)
    contracts_signed: int = Column(Integer, default=0)

    @property
    def delivery_rate(self) -> float:
        return _rate(self.actual_deliveries, self.scheduled_deliveries)

    @property
    def connection_rate(self) -> float:
        return _rate(self.phone_connections, self.actual_deliveries)

    @property
    def schedule_rate(self) -> float:
        return _rate(self.schedule_adjustments, self.phone_connections)

    @property
    def meeting_rate(self) -> float:
        return _rate(self.meetings_held, self.schedule_adjustments)

    @property
    def proposal_rate(self) -> float:
        return _rate(self.proposals_sent, self.meetings_held)

    @property
    def contract_rate(self) -> float:
        return _rate(self.contracts_signed, self.proposals_sent)


class MatchingAllocation(Base):
    """匹配分配表模型。

    一个 FP 在当期被分配的线索配额。

    Attributes:
        id: 主键，如 ALLOC001。
        fp_id: FP ID，外键。
        allocation_type: 基本割当 / 追加配信依頼。
        completed_allocations: 已完成分配数。
        total_allocations: 配额总数。
        completion_date: 完成日期（未完成为空）。
    """
    __tablename__ = "matching_allocations"

    id: str = Column(String(20), primary_key=True)
    fp_id: str = Column(
        String(20), ForeignKey("fps.id", ondelete="CASCADE"), nullable=False
    )
    allocation_type: str = Column(String(20), default="基本割当")
    completed_allocations: int = Column(Integer, default=0)
    total_allocations: int = Column(Integer, nullable=False)
    completion_date: Optional[date] = Column(Date)
    created_at: datetime = Column(DateTime, default=datetime.utcnow)

    fp: "FP" = relationship("FP", lazy="joined")

    @property
    def status(self) -> str:
        """完了 / 未完了，由完成数推导。"""
        if (self.completed_allocations or 0) >= (self.total_allocations or 0):
            return "完了"
        return "未完了"


class MatchingHistory(Base):
    """匹配履历表模型。

    记录每一次把终端用户分配给 FP 的事件及其后续咨询状态。

    Attributes:
        id: 主键，如 HIST001。
        allocated_at: 分配时间。
        fp_id: FP ID，外键。
        user_id: 终端用户ID，外键。
        partner_id: 引流合作伙伴ID，外键（可选）。
        allocation_type: 基本割当 / 追加配信依頼。
        allocation_method: 自動マッチング / 手動割当。
        current_status: 当前咨询状态（新規 … 失注）。
        notes: 备注。
    """
    __tablename__ = "matching_history"

    id: str = Column(String(20), primary_key=True)
    allocated_at: datetime = Column(DateTime, nullable=False)
    fp_id: str = Column(
        String(20), ForeignKey("fps.id", ondelete="CASCADE"), nullable=False
    )
    user_id: str = Column(
        String(20), ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    partner_id: Optional[str] = Column(
        String(20), ForeignKey("partners.id", ondelete="SET NULL")
    )
    allocation_type: str = Column(String(20), default="基本割当")
    allocation_method: str = Column(String(20), default="自動マッチング")
    current_status: str = Column(String(10), default="新規")
    notes: Optional[str] = Column(Text)

    fp: "FP" = relationship("FP", lazy="joined")
    user: "User" = relationship("User", lazy="joined")
    partner: Optional["Partner"] = relationship("Partner", lazy="joined")
    status_history: List["MatchingStatusEntry"] = relationship(
        "MatchingStatusEntry",
        back_populates="history",
        cascade="all, delete-orphan",
        lazy="selectin",
        order_by=lambda: [MatchingStatusEntry.changed_at, MatchingStatusEntry.id],
    )


class MatchingStatusEntry(Base):
    """匹配履历的状态变更记录表模型。

    每次记录匹配或更新咨询状态时追加一行，旧的状态不会被覆盖。

    Attributes:
        id: 主键，自增整数。
        history_id: 匹配履历ID，外键。
        changed_at: 变更时间。
        status: 变更后的咨询状态。
        updated_by: 操作者。
        notes: 备注。
    """
    __tablename__ = "matching_status_entries"

    id: int = Column(Integer, primary_key=True, autoincrement=True)
    history_id: str = Column(
        String(20), ForeignKey("matching_history.id", ondelete="CASCADE"),
        nullable=False
    )
    changed_at: datetime = Column(DateTime, nullable=False)
    status: str = Column(String(10), nullable=False)
    updated_by: str = Column(String(50), nullable=False)
    notes: str = Column(Text, default="")

    history: "MatchingHistory" = relationship(
        "MatchingHistory", back_populates="status_history"
    )


class ReviewRecord(Base):
    """评价记录表模型。

    Attributes:
        id: 主键，如 REV001。
        posted_at: 投稿时间。
        reviewer_name: 投稿者名称。
        reviewer_type: エンドユーザー / システム管理者。
        fp_id: 被评价 FP 的 ID，外键。
        user_id: 投稿的终端用户ID（管理员投稿为空）。
        rating: 评分 1-5。
        review_content: 评价内容。
        status_at_review: 投稿时的咨询状态。
        consultation_topics: 咨询话题列表。
    """
    __tablename__ = "reviews"

    id: str = Column(String(20), primary_key=True)
    posted_at: datetime = Column(DateTime, nullable=False)
    reviewer_name: str = Column(String(50), nullable=False)
    reviewer_type: str = Column(String(20), default="エンドユーザー")
    fp_id: str = Column(
        String(20), ForeignKey("fps.id", ondelete="CASCADE"), nullable=False
    )
    user_id: Optional[str] = Column(
        String(20), ForeignKey("users.id", ondelete="SET NULL")
    )
    rating: int = Column(Integer, nullable=False)
    review_content: str = Column(Text, default="")
    status_at_review: str = Column(String(10), default="新規")
    consultation_topics: List[str] = Column(JSON, default=list)

    fp: "FP" = relationship("FP", lazy="joined")


class Gift(Base):
    """礼品申请表模型。

    Attributes:
        id: 主键，如 GIFT001。
        user_id: 申请的终端用户ID，外键。
        application_date: 申请日。
        gift_type: 礼品种类。
        status: 申請中 / 処理完了 / LINE公式で配信済み / エラー。
        processed_date: 处理完成日（未完成为空）。
    """
    __tablename__ = "gifts"

    id: str = Column(String(20), primary_key=True)
    user_id: str = Column(
        String(20), ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    application_date: date = Column(Date, nullable=False, default=date.today)
    gift_type: str = Column(String(100), nullable=False)
    status: str = Column(String(20), default="申請中")
    processed_date: Optional[date] = Column(Date)


class PaymentURL(Base):
    """决済 URL 表模型。

    Attributes:
        id: 主键，如 URL001。
        url_name: URL 名称。
        url: 决済链接。
        status: 利用中 / 停止中。
        creation_date: 创建日期。
        last_payment_date: 最后一次决済日期。
        payment_count: 决済次数。
        description: 说明。
        amount: 决済金额（日元）。
    """
    __tablename__ = "payment_urls"

    id: str = Column(String(20), primary_key=True)
    url_name: str = Column(String(100), nullable=False)
    url: str = Column(String(500), nullable=False)
    status: str = Column(String(10), default="利用中")
    creation_date: date = Column(Date, nullable=False, default=date.today)
    last_payment_date: Optional[date] = Column(Date)
    payment_count: int = Column(Integer, default=0)
    description: Optional[str] = Column(Text)
    amount: Optional[int] = Column(Integer)


class SubscriptionPlan(Base):
    """订阅方案表模型。"""
    __tablename__ = "subscription_plans"

    id: str = Column(String(20), primary_key=True)
    plan_name: str = Column(String(100), nullable=False)
    price: int = Column(Integer, nullable=False)
    billing_cycle: str = Column(String(10), default="月間請求")
    status: str = Column(String(10), default="有効")
    subscriber_count: int = Column(Integer, default=0)
    creation_date: date = Column(Date, nullable=False, default=date.today)


class FAQItem(Base):
    """FAQ 表模型。"""
    __tablename__ = "faqs"

    id: str = Column(String(20), primary_key=True)
    display_order: int = Column(Integer, nullable=False)
    category: str = Column(String(50), nullable=False)
    question: str = Column(Text, nullable=False)
    answer: str = Column(Text, nullable=False)
    publication_status: str = Column(String(10), default="公開中")
    last_updated: date = Column(Date, default=date.today)


class LegalDocument(Base):
    """法律文档（利用規約、プライバシーポリシー等）表模型。

    Relationships:
        versions: 上传履历（新的在前）。
    """
    __tablename__ = "legal_documents"

    id: str = Column(String(20), primary_key=True)
    name: str = Column(String(100), nullable=False)
    current_version: str = Column(String(20), nullable=False)
    last_updated: date = Column(Date, default=date.today)
    publication_status: str = Column(String(10), default="公開中")

    versions: List["LegalDocumentVersion"] = relationship(
        "LegalDocumentVersion",
        back_populates="document",
        cascade="all, delete-orphan",
        lazy="selectin",
        order_by=lambda: LegalDocumentVersion.id.desc(),
    )


class LegalDocumentVersion(Base):
    """法律文档版本履历表模型。

    文件并不真正上传，file_url 仅是本地虚构的引用路径。
    """
    __tablename__ = "legal_document_versions"

    id: int = Column(Integer, primary_key=True, autoincrement=True)
    document_id: str = Column(
        String(20), ForeignKey("legal_documents.id", ondelete="CASCADE"),
        nullable=False
    )
    version: str = Column(String(20), nullable=False)
    upload_date: date = Column(Date, nullable=False)
    file_name: str = Column(String(255), nullable=False)
    file_url: str = Column(String(500), nullable=False)

    document: "LegalDocument" = relationship(
        "LegalDocument", back_populates="versions"
    )


class AdBanner(Base):
    """广告横幅表模型。

    Attributes:
        position: 广告位 1-3，0 表示不在任何广告位上。
        display_start / display_end: 展示期间。
        clicks: 点击数。
    """
    __tablename__ = "ad_banners"

    id: str = Column(String(20), primary_key=True)
    position: int = Column(Integer, default=0)
    image_url: str = Column(String(500), nullable=False)
    link_url: str = Column(String(500), nullable=False)
    display_start: date = Column(Date, nullable=False)
    display_end: date = Column(Date, nullable=False)
    publication_status: str = Column(String(10), default="公開中")
    clicks: int = Column(Integer, default=0)

    @property
    def display_period(self) -> str:
        return (
            f"{self.display_start:%Y/%m/%d} - {self.display_end:%Y/%m/%d}"
        )
