"""通用 CRUD 基类。

所有仓库继承 BaseCRUD 获得通用的增删改查能力：

- 通用方法（第一个参数为模型类）：get_by_id / get_all / create /
  update_by_id / delete_by_id / count
- 实体绑定的快捷方法（使用子类声明的 ``model`` 与 ``id_prefix``）：
  get / require / list_all / add / update / delete / exists / count_all
- ID 生成：``PREFIX`` + 零填充序号，序号保存在 id_sequences 表中，
  删除记录后也不会复用。

每个方法都接受可选的外部 ``session``。传入外部会话时只 flush 不 commit，
由调用方负责提交；否则方法自行开启会话并提交。
"""
from typing import Any, Callable, Dict, List, Optional, Type, TypeVar

from sqlalchemy.orm import Session
from loguru import logger

from .connection import DatabaseConnection
from .exceptions import NotFoundError
from .models import Base, IdSequence
from config.settings import settings

T = TypeVar("T")


class BaseCRUD:
    """通用 CRUD 基类。

    Attributes:
        conn: 数据库连接管理器。
        model: 子类绑定的实体模型（可选）。
        id_prefix: 子类实体的 ID 前缀（可选）。
        newest_first: list_all 是否按新建顺序倒序返回。
    """

    model: Optional[Type[Base]] = None
    id_prefix: Optional[str] = None
    newest_first: bool = False
    # 外键字段 -> 被引用的模型，add/update 时逐一解析
    references: Dict[str, Type[Base]] = {}

    def __init__(self, conn: DatabaseConnection) -> None:
        self.conn = conn

    def _get_session(self) -> Session:
        return self.conn.get_session()

    def _run(self, fn: Callable[[Session], T],
             session: Optional[Session] = None,
             commit: bool = False) -> T:
        """在外部会话或新会话中执行 fn。"""
        if session:
            return fn(session)

        with self._get_session() as sess:
            result = fn(sess)
            if commit:
                sess.commit()
            return result

    # ================================================================
    # ID 生成
    # ================================================================

    @staticmethod
    def format_id(prefix: str, value: int) -> str:
        return f"{prefix}{value:0{settings.id_number_width}d}"

    def next_id(self, prefix: str, session: Session) -> str:
        """分配下一个 ID（在给定会话中递增序号）。

        Args:
            prefix: ID 前缀。
            session: 当前会话。

        Returns:
            新 ID，如 ``U004``。
        """
        seq = session.get(IdSequence, prefix)
        if seq is None:
            seq = IdSequence(prefix=prefix, last_value=0)
            session.add(seq)
        seq.last_value += 1
        session.flush()
        return self.format_id(prefix, seq.last_value)

    def observe_id(self, prefix: str, record_id: str,
                   session: Session) -> None:
        """登记一个显式指定的 ID，使序号不落后于它。"""
        suffix = record_id[len(prefix):] if record_id.startswith(prefix) else ""
        if not suffix.isdigit():
            return
        seq = session.get(IdSequence, prefix)
        if seq is None:
            seq = IdSequence(prefix=prefix, last_value=0)
            session.add(seq)
        seq.last_value = max(seq.last_value, int(suffix))
        session.flush()

    # ================================================================
    # 通用方法
    # ================================================================

    def get_by_id(self, model: Type[T], record_id: Any,
                  session: Optional[Session] = None) -> Optional[T]:
        """按主键获取记录，不存在返回 None。"""
        return self._run(lambda sess: sess.get(model, record_id), session)

    def get_all(self, model: Type[T],
                filters: Optional[Dict[str, Any]] = None,
                order_by: Any = None,
                session: Optional[Session] = None) -> List[T]:
        """获取记录列表。

        Args:
            model: 模型类。
            filters: 等值过滤条件，如 ``{"status": "活動中"}``。
            order_by: 排序表达式（可选，默认按主键）。

        Returns:
            记录列表。
        """
        def _query(sess):
            query = sess.query(model)
            if filters:
                query = query.filter_by(**filters)
            if order_by is not None:
                query = query.order_by(order_by)
            else:
                query = query.order_by(model.id)
            return query.all()

        return self._run(_query, session)

    def create(self, model: Type[T], id_prefix: Optional[str] = None,
               session: Optional[Session] = None, **fields: Any) -> T:
        """创建记录。

        字符串主键未显式给出时按 id_prefix 自动分配；显式给出时登记到序号表，
        保证之后分配的 ID 不与之冲突。

        Args:
            model: 模型类。
            id_prefix: ID 前缀（字符串主键的模型需要）。
            session: 外部会话（可选）。
            **fields: 字段值。

        Returns:
            新建的记录对象。
        """
        def _do(sess):
            if id_prefix:
                if fields.get("id"):
                    self.observe_id(id_prefix, fields["id"], sess)
                else:
                    fields["id"] = self.next_id(id_prefix, sess)
            record = model(**fields)
            sess.add(record)
            sess.flush()
            sess.refresh(record)
            return record

        record = self._run(_do, session, commit=True)
        logger.info(f"{model.__name__} created: {record.id}")
        return record

    def update_by_id(self, model: Type[T], record_id: Any,
                     session: Optional[Session] = None,
                     **fields: Any) -> Optional[T]:
        """按主键更新记录（仅覆盖给出的字段）。

        Returns:
            更新后的记录，不存在返回 None。

        Raises:
            ValueError: 字段不属于该模型。
        """
        unknown = [k for k in fields if k == "id" or not hasattr(model, k)]
        if unknown:
            raise ValueError(
                f"Cannot update {model.__name__} fields: {unknown}"
            )

        def _do(sess):
            record = sess.get(model, record_id)
            if record is None:
                return None
            for key, value in fields.items():
                setattr(record, key, value)
            sess.flush()
            sess.refresh(record)
            return record

        record = self._run(_do, session, commit=True)
        if record is not None:
            logger.info(f"{model.__name__} updated: {record_id}")
        return record

    def delete_by_id(self, model: Type[Base], record_id: Any,
                     session: Optional[Session] = None) -> bool:
        """按主键删除记录。

        删除不存在的 ID 是无操作，返回 False。
        """
        def _do(sess):
            deleted = sess.query(model).filter(
                model.id == record_id
            ).delete(synchronize_session=False)
            sess.flush()
            return deleted > 0

        deleted = self._run(_do, session, commit=True)
        if deleted:
            logger.info(f"{model.__name__} deleted: {record_id}")
        return deleted

    def count(self, model: Type[Base],
              session: Optional[Session] = None) -> int:
        return self._run(lambda sess: sess.query(model).count(), session)

    # ================================================================
    # 实体绑定的快捷方法
    # ================================================================

    def get(self, record_id: Any,
            session: Optional[Session] = None) -> Optional[Any]:
        return self.get_by_id(self.model, record_id, session=session)

    def require(self, record_id: Any,
                session: Optional[Session] = None) -> Any:
        """获取记录，不存在时抛出 NotFoundError。"""
        record = self.get(record_id, session=session)
        if record is None:
            raise NotFoundError(self.model.__name__, record_id)
        return record

    def exists(self, record_id: Any,
               session: Optional[Session] = None) -> bool:
        return self.get(record_id, session=session) is not None

    def list_all(self, session: Optional[Session] = None) -> List[Any]:
        records = self.get_all(self.model, session=session)
        if self.newest_first:
            records.reverse()
        return records

    def check_references(self, fields: Dict[str, Any],
                         session: Session) -> None:
        """校验外键字段都能解析到现存记录。

        Raises:
            NotFoundError: 任一外键无法解析。
        """
        for field_name, ref_model in self.references.items():
            value = fields.get(field_name)
            if value is None:
                continue
            if session.get(ref_model, value) is None:
                logger.warning(
                    f"{self.model.__name__}.{field_name} references "
                    f"missing {ref_model.__name__}: {value}"
                )
                raise NotFoundError(ref_model.__name__, value)

    def add(self, session: Optional[Session] = None, **fields: Any) -> Any:
        def _do(sess):
            self.check_references(fields, sess)
            return self.create(
                self.model, id_prefix=self.id_prefix, session=sess, **fields
            )

        return self._run(_do, session, commit=True)

    def update(self, record_id: Any, session: Optional[Session] = None,
               **fields: Any) -> Optional[Any]:
        def _do(sess):
            self.check_references(fields, sess)
            return self.update_by_id(
                self.model, record_id, session=sess, **fields
            )

        return self._run(_do, session, commit=True)

    def delete(self, record_id: Any,
               session: Optional[Session] = None) -> bool:
        return self.delete_by_id(self.model, record_id, session=session)

    def count_all(self, session: Optional[Session] = None) -> int:
        return self.count(self.model, session=session)
