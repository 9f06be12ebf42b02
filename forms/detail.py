"""详情/编辑画面的状态机。

每个画面的新建/编辑对话框都是一个 DetailSurface：

    Closed → Open(Create | Edit) → Submitted → Closed
                                 → Cancelled → Closed

提交时先用表单模型校验；校验失败时对话框保持打开，并返回字段错误。
新建由仓库分配新 ID；编辑只覆盖提交的字段，ID 与记录数不变。
"""
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Dict, List, Mapping, Optional, Type

from loguru import logger
from pydantic import BaseModel

from database.base_crud import BaseCRUD
from database.exceptions import InvalidStateError, NotFoundError
from .validation import ROOT_FIELD, FieldError, validate_form


class SurfaceMode(Enum):
    """对话框状态"""
    CLOSED = "closed"
    CREATE = "create"
    EDIT = "edit"


@dataclass
class SubmitResult:
    """提交结果。

    Attributes:
        ok: 是否保存成功。
        record: 保存后的记录（失败时为 None）。
        errors: 字段错误列表。
    """
    ok: bool
    record: Any = None
    errors: List[FieldError] = field(default_factory=list)


class DetailSurface:
    """通用新建/编辑对话框。

    Attributes:
        name: 画面名称（用于日志）。
        repo: 记录所在的仓库，编辑时按 ID 读取记录。
        form_cls: 表单模型类。
        mode: 当前状态。
        record_id: 编辑中的记录 ID。
        values: 对话框打开时的字段初始值。
        context: 传给保存函数的附加参数（如上传对象的文档 ID）。

    Example::

        surface = DetailSurface("faqs", db.faqs, FAQForm)
        surface.open_create()
        result = surface.submit({"category": "その他", "question": "…", "answer": "…"})
        if not result.ok:
            print(result.errors)
    """

    def __init__(self, name: str, repo: BaseCRUD, form_cls: Type[BaseModel],
                 create: Optional[Callable[..., Any]] = None,
                 update: Optional[Callable[..., Any]] = None) -> None:
        """
        Args:
            name: 画面名称。
            repo: 仓库。
            form_cls: 表单模型类。
            create: 新建函数（可选，默认 repo.add）。
            update: 更新函数（可选，默认 repo.update）。
        """
        self.name = name
        self.repo = repo
        self.form_cls = form_cls
        self._create = create or repo.add
        self._update = update or repo.update
        self.mode = SurfaceMode.CLOSED
        self.record_id: Optional[Any] = None
        self.values: Dict[str, Any] = {}
        self.context: Dict[str, Any] = {}

    @property
    def is_open(self) -> bool:
        return self.mode is not SurfaceMode.CLOSED

    @property
    def form_fields(self) -> List[str]:
        return list(self.form_cls.model_fields)

    def _reset(self) -> None:
        self.mode = SurfaceMode.CLOSED
        self.record_id = None
        self.values = {}
        self.context = {}

    def open_create(self, defaults: Optional[Mapping[str, Any]] = None,
                    context: Optional[Mapping[str, Any]] = None) -> None:
        """打开新建对话框。

        Args:
            defaults: 字段初始值（可选）。
            context: 传给新建函数的附加参数（可选）。
        """
        self.mode = SurfaceMode.CREATE
        self.record_id = None
        self.values = dict(defaults or {})
        self.context = dict(context or {})
        logger.debug(f"[{self.name}] open create")

    def open_edit(self, record_id: Any) -> Any:
        """打开编辑对话框，字段初始值取自现有记录。

        Returns:
            编辑对象记录。

        Raises:
            NotFoundError: 记录不存在。
        """
        record = self.repo.require(record_id)
        self.mode = SurfaceMode.EDIT
        self.record_id = record_id
        self.values = {
            name: getattr(record, name)
            for name in self.form_fields
            if hasattr(record, name)
        }
        self.context = {}
        logger.debug(f"[{self.name}] open edit {record_id}")
        return record

    def cancel(self) -> None:
        """关闭对话框，不保存。

        Raises:
            InvalidStateError: 对话框未打开。
        """
        if not self.is_open:
            raise InvalidStateError(f"{self.name}: cancel while closed")
        logger.debug(f"[{self.name}] cancelled")
        self._reset()

    def submit(self, data: Optional[Mapping[str, Any]] = None) -> SubmitResult:
        """提交对话框。

        提交的字段覆盖初始值后整体校验。校验或保存失败时对话框保持打开。

        Args:
            data: 画面输入的字段值。

        Returns:
            SubmitResult。

        Raises:
            InvalidStateError: 对话框未打开。
        """
        if not self.is_open:
            raise InvalidStateError(f"{self.name}: submit while closed")

        submitted = dict(data or {})
        result = validate_form(self.form_cls, {**self.values, **submitted})
        if not result.ok:
            logger.warning(
                f"[{self.name}] submission rejected: {result.messages()}"
            )
            return SubmitResult(ok=False, errors=result.errors)

        try:
            if self.mode is SurfaceMode.CREATE:
                record = self._create(**self.context, **result.data)
            else:
                fields = {k: result.data[k] for k in submitted if k in result.data}
                record = self._update(self.record_id, **fields)
                if record is None:
                    raise NotFoundError(self.repo.model.__name__, self.record_id)
        except NotFoundError as exc:
            logger.warning(f"[{self.name}] submission rejected: {exc}")
            return SubmitResult(ok=False, errors=[
                FieldError(self._field_for(submitted, exc.key), "not_found", str(exc))
            ])
        except ValueError as exc:
            logger.warning(f"[{self.name}] submission rejected: {exc}")
            return SubmitResult(ok=False, errors=[
                FieldError(ROOT_FIELD, "value_error", str(exc))
            ])

        logger.info(f"[{self.name}] {self.mode.value} saved: {record.id}")
        self._reset()
        return SubmitResult(ok=True, record=record)

    def delete(self, record_id: Any) -> bool:
        """删除记录。正在编辑该记录时对话框随之关闭。

        Returns:
            是否删除了记录；ID 不存在时返回 False（不视为错误）。
        """
        deleted = self.repo.delete(record_id)
        if self.mode is SurfaceMode.EDIT and self.record_id == record_id:
            self._reset()
        if not deleted:
            logger.debug(f"[{self.name}] delete skipped, no record {record_id}")
        return deleted

    def _field_for(self, submitted: Mapping[str, Any], key: Any) -> str:
        merged = {**self.values, **submitted}
        for name, value in merged.items():
            if value == key and name != "id":
                return name
        return ROOT_FIELD
