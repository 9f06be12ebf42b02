"""业务记录仓库 - 匹配与评价数据的数据访问层。

管理系统中的核心业务记录（匹配分配、匹配履历及其状态变更、评价、
FP 月度实绩、合作伙伴线索、礼品申请），
这些记录通过外键引用 FP、终端用户、合作伙伴。

外键在写入前逐一解析，无法解析时抛出 NotFoundError，
而不是像按姓名匹配那样静默地显示为空。
"""
import math
import random
from typing import Optional, List, Any, Dict, Union
from datetime import date, datetime
from sqlalchemy import func
from sqlalchemy.orm import Session
from loguru import logger

from .base_crud import BaseCRUD
from .connection import DatabaseConnection
from .entity_repos import FPRepository, UserRepository, PartnerRepository
from .exceptions import InvalidStateError, NotFoundError
from .models import (
    FP, User, Partner, MatchingAllocation, MatchingHistory,
    MatchingStatusEntry, ReviewRecord, FPPerformance, PartnerLead, Gift
)
from config.console_config import (
    CONSULTATION_STATUSES, GIFT_DONE_STATUSES, GIFT_STATUSES,
)

# 实绩漏斗的各阶段（从预定配信到成约）
FUNNEL_FIELDS = (
    "scheduled_deliveries", "actual_deliveries", "phone_connections",
    "schedule_adjustments", "meetings_held", "proposals_sent",
    "contracts_signed",
)


class AllocationRepository(BaseCRUD):
    """匹配分配 仓库。

    管理每个 FP 当期的线索配额及其完成进度。
    """

    model = MatchingAllocation
    id_prefix = "ALLOC"
    references = {"fp_id": FP}

    def __init__(self, conn: DatabaseConnection) -> None:
        super().__init__(conn)

    def resolve_fp(self, allocation: Union[MatchingAllocation, str],
                   session: Optional[Session] = None) -> FP:
        """解析分配记录引用的 FP。

        Args:
            allocation: 分配记录对象或其 ID。

        Returns:
            FP 对象。

        Raises:
            NotFoundError: 分配记录或 FP 不存在。
        """
        def _query(sess):
            record = allocation
            if isinstance(allocation, str):
                record = self.require(allocation, session=sess)
            fp = sess.get(FP, record.fp_id)
            if fp is None:
                logger.warning(
                    f"Allocation {record.id} references missing FP "
                    f"{record.fp_id}"
                )
                raise NotFoundError("FP", record.fp_id)
            return fp

        return self._run(_query, session)

    def for_fp(self, fp_id: str,
               session: Optional[Session] = None) -> List[MatchingAllocation]:
        return self.get_all(
            MatchingAllocation, filters={"fp_id": fp_id}, session=session
        )

    def record_completion(self, allocation_id: str, count: int = 1,
                          today: Optional[date] = None,
                          session: Optional[Session] = None
                          ) -> MatchingAllocation:
        """完成数增加 count（不超过配额总数）。

        完成数达到总数时记录完成日期。

        Raises:
            NotFoundError: 分配记录不存在。
        """
        today = today or date.today()

        def _do(sess):
            record = self.require(allocation_id, session=sess)
            record.completed_allocations = min(
                (record.completed_allocations or 0) + count,
                record.total_allocations,
            )
            if record.status == "完了" and record.completion_date is None:
                record.completion_date = today
            sess.flush()
            return record

        record = self._run(_do, session, commit=True)
        logger.info(
            f"Allocation progress {allocation_id}: "
            f"{record.completed_allocations}/{record.total_allocations}"
        )
        return record

    def generate_for_active_fps(self, rng: random.Random,
                                today: Optional[date] = None,
                                session: Optional[Session] = None
                                ) -> List[MatchingAllocation]:
        """为所有活動中的 FP 生成当月分配的演示数据。

        每第 4 个 FP 全部完成，其余完成 50%〜95%；每第 5 个 FP 为追加配信依頼。
        随机数由调用方传入的 rng 决定，相同种子生成相同数据。

        Args:
            rng: 随机数生成器。
            today: 基准日期（完成日期取该月 1〜5 日）。

        Returns:
            新建的分配记录列表。
        """
        today = today or date.today()

        def _do(sess):
            fps = sess.query(FP).filter(
                FP.status == "活動中"
            ).order_by(FP.id).all()
            created = []
            for index, fp in enumerate(fps):
                total = fp.monthly_limit or 0
                if index % 4 == 0:
                    completed = total
                else:
                    ratio = 0.5 + rng.random() * 0.45
                    completed = math.floor(total * ratio)
                created.append(self.create(
                    MatchingAllocation,
                    id_prefix=self.id_prefix,
                    session=sess,
                    fp_id=fp.id,
                    allocation_type=(
                        "追加配信依頼" if index % 5 == 0 else "基本割当"
                    ),
                    completed_allocations=completed,
                    total_allocations=total,
                    completion_date=(
                        today.replace(day=5 - index % 5)
                        if completed >= total else None
                    ),
                ))
            return created

        created = self._run(_do, session, commit=True)
        logger.info(f"Generated {len(created)} allocations for active FPs")
        return created


class MatchingHistoryRepository(BaseCRUD):
    """匹配履历 仓库。

    记录终端用户被分配给 FP 的事件，并跟踪后续咨询状态。
    记录匹配时自动累加 FP 的本月分配数。
    每次新建或状态变化都会追加一条状态变更记录，旧的状态保留在履历中。
    """

    model = MatchingHistory
    id_prefix = "HIST"
    references = {"fp_id": FP, "user_id": User, "partner_id": Partner}

    def __init__(self, conn: DatabaseConnection,
                 fp_repo: FPRepository,
                 user_repo: UserRepository) -> None:
        super().__init__(conn)
        self._fps = fp_repo
        self._users = user_repo

    @staticmethod
    def _append_status(record: MatchingHistory, status: str,
                       changed_at: datetime, updated_by: str,
                       notes: str = "") -> MatchingStatusEntry:
        entry = MatchingStatusEntry(
            changed_at=changed_at, status=status,
            updated_by=updated_by, notes=notes or "",
        )
        record.status_history.append(entry)
        return entry

    def add(self, session: Optional[Session] = None,
            updated_by: str = "システム", **fields: Any) -> MatchingHistory:
        """新建匹配履历，并以分配时间记录初始状态。"""
        def _do(sess):
            record = super(MatchingHistoryRepository, self).add(
                session=sess, **fields
            )
            self._append_status(
                record, record.current_status, record.allocated_at, updated_by
            )
            sess.flush()
            return record

        return self._run(_do, session, commit=True)

    def update(self, record_id: str, session: Optional[Session] = None,
               updated_by: str = "管理者", **fields: Any
               ) -> Optional[MatchingHistory]:
        """更新匹配履历；咨询状态发生变化时追加状态变更记录。"""
        def _do(sess):
            before = self.get(record_id, session=sess)
            previous = before.current_status if before is not None else None
            record = super(MatchingHistoryRepository, self).update(
                record_id, session=sess, **fields
            )
            if record is not None and record.current_status != previous:
                self._append_status(
                    record, record.current_status, datetime.now(), updated_by
                )
                sess.flush()
            return record

        return self._run(_do, session, commit=True)

    def record(self, user_id: str, fp_id: str,
               allocated_at: Optional[datetime] = None,
               allocation_type: str = "基本割当",
               allocation_method: str = "自動マッチング",
               partner_id: Optional[str] = None,
               notes: Optional[str] = None,
               session: Optional[Session] = None) -> MatchingHistory:
        """记录一次匹配。

        Args:
            user_id: 终端用户ID。
            fp_id: FP ID。
            allocated_at: 分配时间（可选，默认现在）。
            allocation_type: 基本割当 / 追加配信依頼。
            allocation_method: 自動マッチング / 手動割当。
            partner_id: 引流合作伙伴（可选，默认取用户的来源合作伙伴）。
            notes: 备注（可选）。

        Returns:
            新建的 MatchingHistory 对象。

        Raises:
            NotFoundError: 用户、FP 或合作伙伴不存在。
        """
        def _do(sess):
            user = self._users.require(user_id, session=sess)
            record = self.add(
                session=sess,
                updated_by=(
                    "システム" if allocation_method == "自動マッチング"
                    else "管理者"
                ),
                allocated_at=allocated_at or datetime.now(),
                fp_id=fp_id,
                user_id=user_id,
                partner_id=partner_id or user.partner_id,
                allocation_type=allocation_type,
                allocation_method=allocation_method,
                current_status="新規",
                notes=notes,
            )
            self._fps.record_assignment(fp_id, session=sess)
            return record

        return self._run(_do, session, commit=True)

    def update_status(self, history_id: str, status: str,
                      updated_by: str = "管理者", notes: str = "",
                      changed_at: Optional[datetime] = None,
                      session: Optional[Session] = None
                      ) -> Optional[MatchingHistory]:
        """更新咨询状态并追加一条状态变更记录。

        Args:
            history_id: 匹配履历ID。
            status: 新的咨询状态。
            updated_by: 操作者（可选，默认管理者）。
            notes: 变更备注（可选）。
            changed_at: 变更时间（可选，默认现在）。

        Returns:
            更新后的记录，不存在返回 None。

        Raises:
            ValueError: 状态不在允许的取值中。
        """
        if status not in CONSULTATION_STATUSES:
            raise ValueError(
                f"Invalid consultation status: {status}, "
                f"expected one of {CONSULTATION_STATUSES}"
            )

        def _do(sess):
            record = self.get(history_id, session=sess)
            if record is None:
                return None
            record.current_status = status
            self._append_status(
                record, status, changed_at or datetime.now(), updated_by, notes
            )
            sess.flush()
            return record

        record = self._run(_do, session, commit=True)
        if record is not None:
            logger.info(f"Matching {history_id} status -> {status}")
        return record

    def status_history(self, history_id: str,
                       session: Optional[Session] = None
                       ) -> List[MatchingStatusEntry]:
        """获取状态变更记录（旧的在前）。

        Raises:
            NotFoundError: 匹配履历不存在。
        """
        def _query(sess):
            self.require(history_id, session=sess)
            return sess.query(MatchingStatusEntry).filter(
                MatchingStatusEntry.history_id == history_id
            ).order_by(
                MatchingStatusEntry.changed_at, MatchingStatusEntry.id
            ).all()

        return self._run(_query, session)

    def for_user(self, user_id: str,
                 session: Optional[Session] = None) -> List[MatchingHistory]:
        return self.get_all(
            MatchingHistory, filters={"user_id": user_id},
            order_by=MatchingHistory.allocated_at.desc(), session=session
        )

    def for_fp(self, fp_id: str,
               session: Optional[Session] = None) -> List[MatchingHistory]:
        return self.get_all(
            MatchingHistory, filters={"fp_id": fp_id},
            order_by=MatchingHistory.allocated_at.desc(), session=session
        )


class ReviewRepository(BaseCRUD):
    """评价 仓库。

    评价的增删改都会重新统计被评价 FP 的评价数与平均评分。
    """

    model = ReviewRecord
    id_prefix = "REV"
    references = {"fp_id": FP, "user_id": User}

    def __init__(self, conn: DatabaseConnection) -> None:
        super().__init__(conn)

    def for_fp(self, fp_id: str,
               session: Optional[Session] = None) -> List[ReviewRecord]:
        return self.get_all(
            ReviewRecord, filters={"fp_id": fp_id},
            order_by=ReviewRecord.posted_at.desc(), session=session
        )

    def average_rating(self, fp_id: str,
                       session: Optional[Session] = None) -> float:
        """FP 的平均评分，没有评价时为 0.0。"""
        def _query(sess):
            value = sess.query(func.avg(ReviewRecord.rating)).filter(
                ReviewRecord.fp_id == fp_id
            ).scalar()
            return round(float(value), 2) if value is not None else 0.0

        return self._run(_query, session)

    def refresh_fp_stats(self, fp_id: str,
                         session: Optional[Session] = None) -> Optional[FP]:
        """重新统计 FP 的评价数与平均评分。

        Returns:
            更新后的 FP 对象，FP 不存在返回 None。
        """
        def _do(sess):
            fp = sess.get(FP, fp_id)
            if fp is None:
                return None
            fp.review_count = sess.query(ReviewRecord).filter(
                ReviewRecord.fp_id == fp_id
            ).count()
            fp.average_rating = self.average_rating(fp_id, session=sess)
            sess.flush()
            return fp

        return self._run(_do, session, commit=True)

    def add(self, session: Optional[Session] = None, **fields: Any
            ) -> ReviewRecord:
        def _do(sess):
            review = super(ReviewRepository, self).add(session=sess, **fields)
            self.refresh_fp_stats(review.fp_id, session=sess)
            return review

        return self._run(_do, session, commit=True)

    def update(self, record_id: str, session: Optional[Session] = None,
               **fields: Any) -> Optional[ReviewRecord]:
        def _do(sess):
            before = self.get(record_id, session=sess)
            old_fp_id = before.fp_id if before is not None else None
            review = super(ReviewRepository, self).update(
                record_id, session=sess, **fields
            )
            if review is not None:
                self.refresh_fp_stats(review.fp_id, session=sess)
                if old_fp_id and old_fp_id != review.fp_id:
                    self.refresh_fp_stats(old_fp_id, session=sess)
            return review

        return self._run(_do, session, commit=True)

    def delete(self, record_id: str,
               session: Optional[Session] = None) -> bool:
        def _do(sess):
            review = self.get(record_id, session=sess)
            if review is None:
                return False
            fp_id = review.fp_id
            deleted = super(ReviewRepository, self).delete(
                record_id, session=sess
            )
            # bulk delete 不会同步会话中的对象，先移出会话再统计
            sess.expunge(review)
            self.refresh_fp_stats(fp_id, session=sess)
            return deleted

        return self._run(_do, session, commit=True)


class FPPerformanceRepository(BaseCRUD):
    """FP 月度实绩 仓库。

    每个 FP 每月一行，同一月份再次登记时覆盖给出的件数。
    """

    model = FPPerformance
    references = {"fp_id": FP}

    def __init__(self, conn: DatabaseConnection) -> None:
        super().__init__(conn)

    def record_month(self, fp_id: str, year: int, month: int,
                     session: Optional[Session] = None,
                     **counts: int) -> FPPerformance:
        """登记某月的实绩件数。

        Args:
            fp_id: FP ID。
            year: 对象年。
            month: 对象月（1-12）。
            **counts: 漏斗各阶段的件数，见 FUNNEL_FIELDS。

        Returns:
            FPPerformance 对象。

        Raises:
            ValueError: 月份、阶段名或件数不合法。
            NotFoundError: FP 不存在。
        """
        if not 1 <= month <= 12:
            raise ValueError(f"Invalid month: {month}")
        unknown = [k for k in counts if k not in FUNNEL_FIELDS]
        if unknown:
            raise ValueError(f"Unknown performance fields: {unknown}")
        negative = [k for k, v in counts.items() if v is None or v < 0]
        if negative:
            raise ValueError(f"Counts must be non-negative: {negative}")

        def _do(sess):
            existing = sess.query(FPPerformance).filter(
                FPPerformance.fp_id == fp_id,
                FPPerformance.year == year,
                FPPerformance.month == month,
            ).first()
            if existing is None:
                return self.add(
                    session=sess, fp_id=fp_id, year=year, month=month,
                    **counts
                )
            for key, value in counts.items():
                setattr(existing, key, value)
            sess.flush()
            return existing

        record = self._run(_do, session, commit=True)
        logger.info(f"Performance recorded: {fp_id} {year}/{month:02d}")
        return record

    def for_fp(self, fp_id: str,
               session: Optional[Session] = None) -> List[FPPerformance]:
        """FP 的月度实绩（新的月份在前）。"""
        def _query(sess):
            return sess.query(FPPerformance).filter(
                FPPerformance.fp_id == fp_id
            ).order_by(
                FPPerformance.year.desc(), FPPerformance.month.desc()
            ).all()

        return self._run(_query, session)

    def latest(self, fp_id: str,
               session: Optional[Session] = None) -> Optional[FPPerformance]:
        records = self.for_fp(fp_id, session=session)
        return records[0] if records else None

    @staticmethod
    def summarize(record: FPPerformance) -> Dict[str, Any]:
        """把一行实绩展开为件数 + 转化率的字典。"""
        summary: Dict[str, Any] = {
            "year": record.year,
            "month": record.month,
        }
        for name in FUNNEL_FIELDS:
            summary[name] = getattr(record, name) or 0
        summary.update({
            "delivery_rate": record.delivery_rate,
            "connection_rate": record.connection_rate,
            "schedule_rate": record.schedule_rate,
            "meeting_rate": record.meeting_rate,
            "proposal_rate": record.proposal_rate,
            "contract_rate": record.contract_rate,
        })
        return summary


class PartnerLeadRepository(BaseCRUD):
    """合作伙伴线索 仓库。

    接收的线索先处于保留中，审核后为承認済み或拒否（自動 / 手動）。
    接收线索时同时累加合作伙伴利用中 URL 的线索数。
    """

    model = PartnerLead
    id_prefix = "LEAD"
    newest_first = True
    references = {"partner_id": Partner, "user_id": User}

    def __init__(self, conn: DatabaseConnection,
                 partner_repo: PartnerRepository) -> None:
        super().__init__(conn)
        self._partners = partner_repo

    def receive(self, partner_id: str, user_name: str,
                received_at: Optional[datetime] = None,
                session: Optional[Session] = None,
                **details: Any) -> PartnerLead:
        """接收一条线索。

        Args:
            partner_id: 合作伙伴ID。
            user_name: 线索的姓名。
            received_at: 接收时间（可选，默认现在）。
            **details: user_id / age / prefecture / consultation_content 等。

        Raises:
            NotFoundError: 合作伙伴或用户不存在。
        """
        def _do(sess):
            lead = self.add(
                session=sess,
                partner_id=partner_id,
                user_name=user_name,
                received_at=received_at or datetime.now(),
                approval_status="保留中",
                **details,
            )
            self._partners.record_lead(partner_id, session=sess)
            return lead

        return self._run(_do, session, commit=True)

    def for_partner(self, partner_id: str,
                    session: Optional[Session] = None) -> List[PartnerLead]:
        """合作伙伴的线索接收履历（新的在前）。

        Raises:
            NotFoundError: 合作伙伴不存在。
        """
        def _query(sess):
            self._partners.require(partner_id, session=sess)
            return sess.query(PartnerLead).filter(
                PartnerLead.partner_id == partner_id
            ).order_by(
                PartnerLead.received_at.desc(), PartnerLead.id.desc()
            ).all()

        return self._run(_query, session)

    def pending(self, partner_id: Optional[str] = None,
                session: Optional[Session] = None) -> List[PartnerLead]:
        filters = {"approval_status": "保留中"}
        if partner_id is not None:
            filters["partner_id"] = partner_id
        return self.get_all(
            PartnerLead, filters=filters,
            order_by=PartnerLead.received_at, session=session
        )

    def _decide(self, lead_id: str, status: str,
                rejection_type: Optional[str],
                session: Optional[Session]) -> PartnerLead:
        def _do(sess):
            lead = self.require(lead_id, session=sess)
            if lead.approval_status != "保留中":
                raise InvalidStateError(
                    f"Lead {lead_id} already {lead.approval_status}"
                )
            lead.approval_status = status
            lead.rejection_type = rejection_type
            sess.flush()
            return lead

        lead = self._run(_do, session, commit=True)
        logger.info(f"Lead {lead_id} -> {status}")
        return lead

    def approve(self, lead_id: str,
                session: Optional[Session] = None) -> PartnerLead:
        """承认保留中的线索。

        Raises:
            NotFoundError: 线索不存在。
            InvalidStateError: 线索已审核。
        """
        return self._decide(lead_id, "承認済み", None, session)

    def reject(self, lead_id: str, automatic: bool = False,
               session: Optional[Session] = None) -> PartnerLead:
        """驳回保留中的线索。

        Args:
            automatic: 是否为自动驳回（默认人工）。

        Raises:
            NotFoundError: 线索不存在。
            InvalidStateError: 线索已审核。
        """
        return self._decide(
            lead_id, "拒否", "自動" if automatic else "手動", session
        )


class GiftRepository(BaseCRUD):
    """礼品申请 仓库。

    申请后为申請中；处理后变为処理完了 / LINE公式で配信済み / エラー。
    エラー的申请可以重新处理。
    """

    model = Gift
    id_prefix = "GIFT"
    newest_first = True
    references = {"user_id": User}

    def __init__(self, conn: DatabaseConnection) -> None:
        super().__init__(conn)

    def apply(self, user_id: str, gift_type: str,
              application_date: Optional[date] = None,
              session: Optional[Session] = None) -> Gift:
        """登记礼品申请。

        Raises:
            NotFoundError: 用户不存在。
        """
        return self.add(
            session=session,
            user_id=user_id,
            gift_type=gift_type,
            application_date=application_date or date.today(),
            status="申請中",
        )

    def for_user(self, user_id: str,
                 session: Optional[Session] = None) -> List[Gift]:
        """用户的礼品申请（新的在前）。"""
        return self.get_all(
            Gift, filters={"user_id": user_id},
            order_by=Gift.application_date.desc(), session=session
        )

    def process(self, gift_id: str, status: str = "処理完了",
                processed_date: Optional[date] = None,
                session: Optional[Session] = None) -> Gift:
        """登记处理结果。

        処理完了 与 LINE公式で配信済み 记录处理日期，エラー 不记录。

        Raises:
            ValueError: status 不是处理结果的状态。
            NotFoundError: 申请不存在。
            InvalidStateError: 申请已处理完成。
        """
        if status not in GIFT_STATUSES or status == "申請中":
            raise ValueError(f"Invalid gift result status: {status}")

        def _do(sess):
            gift = self.require(gift_id, session=sess)
            if gift.status in GIFT_DONE_STATUSES:
                raise InvalidStateError(f"Gift {gift_id} already {gift.status}")
            gift.status = status
            gift.processed_date = (
                processed_date or date.today()
                if status in GIFT_DONE_STATUSES else None
            )
            sess.flush()
            return gift

        gift = self._run(_do, session, commit=True)
        if status == "エラー":
            logger.warning(f"Gift {gift_id} processing failed")
        else:
            logger.info(f"Gift {gift_id} -> {status}")
        return gift
