"""实体仓库 - 基础实体的数据访问层。

管理系统中的基础实体（终端用户、FP、合作伙伴），
这些实体被匹配、评价等业务记录通过外键引用。

每个仓库继承 BaseCRUD 获得通用能力，并添加领域特定的查询方法。
"""
from typing import Optional, List, Dict, Any
from datetime import date
from sqlalchemy import func, or_
from sqlalchemy.orm import Session
from loguru import logger

from .base_crud import BaseCRUD
from .connection import DatabaseConnection
from .exceptions import NotFoundError
from .models import (
    User, FP, Partner, PartnerUrl, PartnerLead, MatchingHistory, ReviewRecord
)


class UserRepository(BaseCRUD):
    """终端用户 仓库。

    管理通过合作伙伴 LP 注册进来的终端用户。
    """

    model = User
    id_prefix = "U"
    references = {"partner_id": Partner}

    def __init__(self, conn: DatabaseConnection) -> None:
        super().__init__(conn)

    def search(self, keyword: str,
               session: Optional[Session] = None) -> List[User]:
        """按姓名、假名或邮箱搜索用户。

        Args:
            keyword: 搜索关键词。

        Returns:
            匹配的用户列表。
        """
        def _query(sess):
            return sess.query(User).filter(
                or_(
                    User.name.contains(keyword),
                    User.furigana.contains(keyword),
                    User.email.contains(keyword),
                )
            ).order_by(User.id).all()

        return self._run(_query, session)

    def mark_seen(self, user_id: str,
                  session: Optional[Session] = None) -> Optional[User]:
        """打开用户详情时清除「新規」标记。

        Returns:
            更新后的 User 对象，不存在返回 None。
        """
        return self.update(user_id, session=session, is_new=False)

    def new_user_count(self, session: Optional[Session] = None) -> int:
        return self._run(
            lambda sess: sess.query(User).filter(User.is_new.is_(True)).count(),
            session,
        )

    def get_by_partner(self, partner_id: str,
                       session: Optional[Session] = None) -> List[User]:
        return self.get_all(
            User, filters={"partner_id": partner_id}, session=session
        )

    def consultations(self, user_id: str,
                      session: Optional[Session] = None
                      ) -> List[MatchingHistory]:
        """获取用户的咨询/匹配履历（新的在前）。

        Raises:
            NotFoundError: 用户不存在。
        """
        def _query(sess):
            self.require(user_id, session=sess)
            return sess.query(MatchingHistory).filter(
                MatchingHistory.user_id == user_id
            ).order_by(MatchingHistory.allocated_at.desc()).all()

        return self._run(_query, session)

    def reviews_for(self, user_id: str,
                    session: Optional[Session] = None) -> List[ReviewRecord]:
        """获取用户投稿的评价。"""
        def _query(sess):
            self.require(user_id, session=sess)
            return sess.query(ReviewRecord).filter(
                ReviewRecord.user_id == user_id
            ).order_by(ReviewRecord.posted_at.desc()).all()

        return self._run(_query, session)


class FPRepository(BaseCRUD):
    """FP 仓库。

    管理个人 FP 和法人 FP 账户。新建的 FP 在默认列表中排在最前。
    """

    model = FP
    id_prefix = "FP"
    newest_first = True

    def __init__(self, conn: DatabaseConnection) -> None:
        super().__init__(conn)

    def search(self, keyword: str,
               session: Optional[Session] = None) -> List[FP]:
        """按姓名、邮箱或公司名搜索 FP。"""
        def _query(sess):
            return sess.query(FP).filter(
                or_(
                    FP.name.contains(keyword),
                    FP.email.contains(keyword),
                    FP.company.contains(keyword),
                )
            ).order_by(FP.id).all()

        return self._run(_query, session)

    def find_by_email(self, email: str,
                      session: Optional[Session] = None) -> Optional[FP]:
        def _query(sess):
            return sess.query(FP).filter(
                func.lower(FP.email) == email.lower()
            ).first()

        return self._run(_query, session)

    def resolve(self, fp_id: str,
                session: Optional[Session] = None) -> FP:
        """解析 FP 引用。

        Raises:
            NotFoundError: FP 不存在。
        """
        fp = self.get(fp_id, session=session)
        if fp is None:
            logger.warning(f"Unresolvable FP reference: {fp_id}")
            raise NotFoundError("FP", fp_id)
        return fp

    def get_active(self, session: Optional[Session] = None) -> List[FP]:
        """获取所有活動中的 FP。"""
        return self.get_all(FP, filters={"status": "活動中"}, session=session)

    def deactivate(self, fp_id: str,
                   session: Optional[Session] = None) -> Optional[FP]:
        """停用 FP。

        Returns:
            更新后的 FP 对象，不存在返回 None。
        """
        return self.update(fp_id, session=session, status="停止中")

    def record_assignment(self, fp_id: str, count: int = 1,
                          session: Optional[Session] = None) -> FP:
        """本月分配数增加 count。

        上限不做强制：手动分配可以超出上限。

        Raises:
            NotFoundError: FP 不存在。
        """
        def _do(sess):
            fp = self.require(fp_id, session=sess)
            fp.assigned_count = (fp.assigned_count or 0) + count
            sess.flush()
            return fp

        fp = self._run(_do, session, commit=True)
        if fp.assigned_count > fp.monthly_limit:
            logger.warning(
                f"FP {fp_id} over-assigned: {fp.monthly_assignment}"
            )
        return fp

    def reset_monthly_assignments(self,
                                  session: Optional[Session] = None) -> int:
        """月初清零所有 FP 的本月分配数。

        Returns:
            被清零的 FP 数量。
        """
        def _do(sess):
            return sess.query(FP).update(
                {FP.assigned_count: 0}, synchronize_session=False
            )

        updated = self._run(_do, session, commit=True)
        logger.info(f"Monthly assignments reset for {updated} FPs")
        return updated


class PartnerRepository(BaseCRUD):
    """合作伙伴 仓库。

    管理合作伙伴及其追踪 URL 的发行/停止。新建的合作伙伴在默认列表中排在最前。
    """

    model = Partner
    id_prefix = "PART"
    newest_first = True

    def __init__(self, conn: DatabaseConnection) -> None:
        super().__init__(conn)

    def get_active(self, session: Optional[Session] = None) -> List[Partner]:
        return self.get_all(
            Partner, filters={"status": "アクティブ"}, session=session
        )

    def active_url(self, partner_id: str,
                   session: Optional[Session] = None) -> Optional[PartnerUrl]:
        """获取合作伙伴当前利用中的追踪 URL。

        Raises:
            NotFoundError: 合作伙伴不存在。
        """
        def _query(sess):
            self.require(partner_id, session=sess)
            return sess.query(PartnerUrl).filter(
                PartnerUrl.partner_id == partner_id,
                PartnerUrl.status == "利用中",
            ).order_by(PartnerUrl.id.desc()).first()

        return self._run(_query, session)

    def url_history(self, partner_id: str,
                    session: Optional[Session] = None) -> List[PartnerUrl]:
        """获取追踪 URL 发行履历（新的在前）。"""
        def _query(sess):
            self.require(partner_id, session=sess)
            return sess.query(PartnerUrl).filter(
                PartnerUrl.partner_id == partner_id
            ).order_by(PartnerUrl.id.desc()).all()

        return self._run(_query, session)

    def stop_active_url(self, partner_id: str,
                        session: Optional[Session] = None
                        ) -> Optional[PartnerUrl]:
        """停止当前利用中的 URL。

        Returns:
            被停止的 PartnerUrl，没有利用中的 URL 时返回 None。
        """
        def _do(sess):
            current = self.active_url(partner_id, session=sess)
            if current is None:
                return None
            current.status = "停止済み"
            sess.flush()
            return current

        stopped = self._run(_do, session, commit=True)
        if stopped is not None:
            logger.info(f"Partner URL stopped: {partner_id} {stopped.url}")
        return stopped

    def issue_url(self, partner_id: str, url: Optional[str] = None,
                  today: Optional[date] = None,
                  session: Optional[Session] = None) -> PartnerUrl:
        """发行新的追踪 URL，并停止原来利用中的 URL。

        Args:
            partner_id: 合作伙伴ID。
            url: 指定 URL（可选，默认由 LP URL 派生）。
            today: 发行日期（可选，默认今天）。

        Returns:
            新的 PartnerUrl 对象。

        Raises:
            NotFoundError: 合作伙伴不存在。
        """
        today = today or date.today()

        def _do(sess):
            partner = self.require(partner_id, session=sess)
            for existing in partner.urls:
                if existing.status == "利用中":
                    existing.status = "停止済み"
            issued = len(partner.urls)
            new_url = PartnerUrl(
                partner=partner,
                url=url or f"{partner.lp_url}?ref={partner.id}&v={issued + 1}",
                generation_date=today,
                status="利用中",
                leads_count=0,
            )
            sess.add(new_url)
            partner.last_updated = today
            sess.flush()
            sess.refresh(new_url)
            return new_url

        new_url = self._run(_do, session, commit=True)
        logger.info(f"Partner URL issued: {partner_id} {new_url.url}")
        return new_url

    def record_lead(self, partner_id: str,
                    session: Optional[Session] = None) -> Optional[PartnerUrl]:
        """利用中 URL 的线索数加一，没有利用中的 URL 时返回 None。"""
        def _do(sess):
            current = self.active_url(partner_id, session=sess)
            if current is not None:
                current.leads_count = (current.leads_count or 0) + 1
                sess.flush()
            return current

        return self._run(_do, session, commit=True)

    def expire_contracts(self, today: Optional[date] = None,
                         session: Optional[Session] = None) -> int:
        """把结束日已过的有効合同标记为期限切れ。

        Returns:
            被标记的合作伙伴数量。
        """
        today = today or date.today()

        def _do(sess):
            return sess.query(Partner).filter(
                Partner.contract_status == "有効",
                Partner.contract_end.isnot(None),
                Partner.contract_end < today,
            ).update(
                {Partner.contract_status: "期限切れ"},
                synchronize_session=False,
            )

        expired = self._run(_do, session, commit=True)
        if expired:
            logger.info(f"Partner contracts expired: {expired}")
        return expired

    def performance(self, partner_id: str,
                    session: Optional[Session] = None) -> Dict[str, Any]:
        """合作伙伴实绩汇总。

        Returns:
            包含以下键的字典：total_leads（各 URL 线索数合计）、
            accounts_created（经由该合作伙伴注册的用户数）、
            matched（匹配履历数）、approved / pending（承認済み / 保留中的
            线索数）、auto_rejected / manual_rejected（自动 / 人工驳回数）。
        """
        def _query(sess):
            self.require(partner_id, session=sess)
            total_leads = sess.query(
                func.coalesce(func.sum(PartnerUrl.leads_count), 0)
            ).filter(PartnerUrl.partner_id == partner_id).scalar()
            accounts = sess.query(User).filter(
                User.partner_id == partner_id
            ).count()
            matched = sess.query(MatchingHistory).filter(
                MatchingHistory.partner_id == partner_id
            ).count()
            rows = sess.query(
                PartnerLead.approval_status,
                PartnerLead.rejection_type,
                func.count(PartnerLead.id),
            ).filter(
                PartnerLead.partner_id == partner_id
            ).group_by(
                PartnerLead.approval_status, PartnerLead.rejection_type
            ).all()
            leads = {"承認済み": 0, "保留中": 0, "自動": 0, "手動": 0}
            for status, rejection_type, count in rows:
                key = rejection_type if status == "拒否" else status
                if key in leads:
                    leads[key] += count
            return {
                "partner_id": partner_id,
                "total_leads": int(total_leads or 0),
                "accounts_created": accounts,
                "matched": matched,
                "approved": leads["承認済み"],
                "pending": leads["保留中"],
                "auto_rejected": leads["自動"],
                "manual_rejected": leads["手動"],
            }

        return self._run(_query, session)
