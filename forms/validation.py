"""表单校验结果。

把 pydantic 的 ValidationError 转换为结构化的字段错误列表，
编辑画面据此在对应字段下显示错误信息，而不是向调用方抛出异常。
"""
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Type

from pydantic import BaseModel, ValidationError

ROOT_FIELD = "__root__"


@dataclass
class FieldError:
    """单个字段的校验错误。

    Attributes:
        field: 字段名，跨字段规则为 ``__root__``。
        code: 错误类型（pydantic 的 error type，如 ``missing``）。
        message: 错误信息。
    """
    field: str
    code: str
    message: str


@dataclass
class ValidationResult:
    """校验结果。

    Attributes:
        errors: 字段错误列表，为空表示校验通过。
        data: 校验通过时为清洗后的字段值。
    """
    errors: List[FieldError] = field(default_factory=list)
    data: Dict[str, Any] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return not self.errors

    @property
    def fields(self) -> List[str]:
        """有错误的字段名（去重，保持顺序）。"""
        return list(dict.fromkeys(e.field for e in self.errors))

    def errors_for(self, field_name: str) -> List[FieldError]:
        return [e for e in self.errors if e.field == field_name]

    def messages(self) -> Dict[str, List[str]]:
        result: Dict[str, List[str]] = {}
        for error in self.errors:
            result.setdefault(error.field, []).append(error.message)
        return result


def validate_form(form_cls: Type[BaseModel],
                  data: Mapping[str, Any]) -> ValidationResult:
    """用表单模型校验输入数据。

    Args:
        form_cls: pydantic 表单模型类。
        data: 画面输入的字段值。

    Returns:
        ValidationResult，校验失败时 data 为空。
    """
    try:
        form = form_cls.model_validate(dict(data))
    except ValidationError as exc:
        errors = []
        for err in exc.errors():
            loc = [str(part) for part in err.get("loc", ())]
            errors.append(FieldError(
                field=".".join(loc) if loc else ROOT_FIELD,
                code=err.get("type", "value_error"),
                message=err.get("msg", ""),
            ))
        return ValidationResult(errors=errors)
    return ValidationResult(data=form.model_dump())
