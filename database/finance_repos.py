"""财务仓库 - 决済URL、订阅方案以及 FP 契约与支付记录的数据访问层。

只管理元数据：不处理真实的支付。
"""
from typing import Optional, List, Any
from datetime import date
from sqlalchemy import func
from sqlalchemy.orm import Session
from loguru import logger

from .base_crud import BaseCRUD
from .connection import DatabaseConnection
from .exceptions import InvalidStateError
from .models import FP, FPContract, FPPayment, PaymentURL, SubscriptionPlan


class PaymentURLRepository(BaseCRUD):
    """决済URL 仓库。"""

    model = PaymentURL
    id_prefix = "URL"

    def __init__(self, conn: DatabaseConnection) -> None:
        super().__init__(conn)

    def add(self, session: Optional[Session] = None, **fields: Any
            ) -> PaymentURL:
        fields.setdefault("creation_date", date.today())
        fields.setdefault("payment_count", 0)
        return super().add(session=session, **fields)

    def get_in_use(self, session: Optional[Session] = None
                   ) -> List[PaymentURL]:
        return self.get_all(
            PaymentURL, filters={"status": "利用中"}, session=session
        )

    def stop(self, url_id: str,
             session: Optional[Session] = None) -> Optional[PaymentURL]:
        """停止决済URL，不存在返回 None。"""
        return self.update(url_id, session=session, status="停止中")

    def record_payment(self, url_id: str, paid_on: Optional[date] = None,
                       session: Optional[Session] = None
                       ) -> Optional[PaymentURL]:
        """登记一次决済：次数加一并更新最后决済日期。

        Returns:
            更新后的 PaymentURL，不存在返回 None。

        Raises:
            ValueError: URL 已停止。
        """
        paid_on = paid_on or date.today()

        def _do(sess):
            record = self.get(url_id, session=sess)
            if record is None:
                return None
            if record.status != "利用中":
                raise ValueError(f"Payment URL {url_id} is not in use")
            record.payment_count = (record.payment_count or 0) + 1
            record.last_payment_date = paid_on
            sess.flush()
            return record

        record = self._run(_do, session, commit=True)
        if record is not None:
            logger.info(
                f"Payment recorded on {url_id}: count={record.payment_count}"
            )
        return record


class SubscriptionPlanRepository(BaseCRUD):
    """订阅方案 仓库。"""

    model = SubscriptionPlan
    id_prefix = "plan_"

    def __init__(self, conn: DatabaseConnection) -> None:
        super().__init__(conn)

    def add(self, session: Optional[Session] = None, **fields: Any
            ) -> SubscriptionPlan:
        fields.setdefault("creation_date", date.today())
        fields.setdefault("subscriber_count", 0)
        return super().add(session=session, **fields)

    def active_plans(self, session: Optional[Session] = None
                     ) -> List[SubscriptionPlan]:
        return self.get_all(
            SubscriptionPlan, filters={"status": "有効"},
            order_by=SubscriptionPlan.price, session=session
        )


class FPContractRepository(BaseCRUD):
    """FP 契约仓库。

    一个 FP 可以有多份契约（更新或换方案时新建），同一时间有效的只有一份。
    """

    model = FPContract
    id_prefix = "CON"
    references = {"fp_id": FP}

    def __init__(self, conn: DatabaseConnection) -> None:
        super().__init__(conn)

    def add(self, session: Optional[Session] = None, **fields: Any
            ) -> FPContract:
        """新建契约。

        Raises:
            ValueError: 契约结束日早于开始日。
            NotFoundError: FP 不存在。
        """
        start, end = fields.get("contract_start"), fields.get("contract_end")
        if start and end and end < start:
            raise ValueError(
                f"Contract end {end} is before contract start {start}"
            )
        return super().add(session=session, **fields)

    def for_fp(self, fp_id: str,
               session: Optional[Session] = None) -> List[FPContract]:
        """FP 的契约列表（开始日新的在前）。"""
        return self.get_all(
            FPContract, filters={"fp_id": fp_id},
            order_by=FPContract.contract_start.desc(), session=session
        )

    def current(self, fp_id: str, today: Optional[date] = None,
                session: Optional[Session] = None) -> Optional[FPContract]:
        """获取 today 当天有效的契约，没有时返回 None。"""
        today = today or date.today()
        for contract in self.for_fp(fp_id, session=session):
            if contract.covers(today):
                return contract
        return None

    def renew(self, contract_id: str, new_end: date,
              renewal_date: Optional[date] = None,
              session: Optional[Session] = None) -> FPContract:
        """延长契约期间。

        Args:
            contract_id: 契约ID。
            new_end: 新的结束日，必须晚于当前结束日。
            renewal_date: 更新日（可选，默认今天）。

        Raises:
            NotFoundError: 契约不存在。
            InvalidStateError: 契约已無効。
            ValueError: 新结束日不晚于当前结束日。
        """
        renewal_date = renewal_date or date.today()

        def _do(sess):
            contract = self.require(contract_id, session=sess)
            if contract.contract_status != "有効":
                raise InvalidStateError(
                    f"Contract {contract_id} is {contract.contract_status}"
                )
            if new_end <= contract.contract_end:
                raise ValueError(
                    f"New end {new_end} must be after {contract.contract_end}"
                )
            contract.contract_end = new_end
            contract.renewal_date = renewal_date
            sess.flush()
            return contract

        contract = self._run(_do, session, commit=True)
        logger.info(f"Contract renewed: {contract_id} until {new_end}")
        return contract

    def cancel(self, contract_id: str,
               session: Optional[Session] = None) -> Optional[FPContract]:
        """解除契约，不存在返回 None。"""
        return self.update(
            contract_id, session=session, contract_status="無効"
        )


class FPPaymentRepository(BaseCRUD):
    """FP 支付记录 仓库。"""

    model = FPPayment
    id_prefix = "PAY"
    references = {"fp_id": FP}

    def __init__(self, conn: DatabaseConnection) -> None:
        super().__init__(conn)

    def for_fp(self, fp_id: str,
               session: Optional[Session] = None) -> List[FPPayment]:
        """FP 的支付记录（请求日新的在前）。"""
        return self.get_all(
            FPPayment, filters={"fp_id": fp_id},
            order_by=FPPayment.invoice_date.desc(), session=session
        )

    def unpaid(self, fp_id: Optional[str] = None,
               session: Optional[Session] = None) -> List[FPPayment]:
        filters = {"payment_status": "未払い"}
        if fp_id is not None:
            filters["fp_id"] = fp_id
        return self.get_all(
            FPPayment, filters=filters,
            order_by=FPPayment.invoice_date, session=session
        )

    def outstanding_amount(self, fp_id: str,
                           session: Optional[Session] = None) -> int:
        """FP 的未支付金额合计。"""
        def _query(sess):
            total = sess.query(
                func.coalesce(func.sum(FPPayment.amount), 0)
            ).filter(
                FPPayment.fp_id == fp_id,
                FPPayment.payment_status == "未払い",
            ).scalar()
            return int(total or 0)

        return self._run(_query, session)

    def mark_paid(self, payment_id: str, paid_on: Optional[date] = None,
                  method: Optional[str] = None,
                  session: Optional[Session] = None) -> FPPayment:
        """登记支付完成。

        Args:
            payment_id: 支付记录ID。
            paid_on: 支付日（可选，默认今天）。
            method: 支付方式（可选，默认保持原值）。

        Raises:
            NotFoundError: 支付记录不存在。
            InvalidStateError: 已经支付。
        """
        paid_on = paid_on or date.today()

        def _do(sess):
            payment = self.require(payment_id, session=sess)
            if payment.payment_status == "支払い済み":
                raise InvalidStateError(f"Payment {payment_id} already paid")
            payment.payment_status = "支払い済み"
            payment.payment_date = paid_on
            if method:
                payment.payment_method = method
            sess.flush()
            return payment

        payment = self._run(_do, session, commit=True)
        logger.info(f"FP payment settled: {payment_id} ({payment.amount})")
        return payment
