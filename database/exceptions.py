"""管理コンソール异常定义。

- NotFoundError: ID 或外键无法解析
- InvalidStateError: 详情/编辑面板在错误的状态下被操作

表单校验失败不通过异常传递，而是返回 ValidationResult。
"""
from typing import Any


class ConsoleError(Exception):
    """所有管理コンソール异常的基类"""


class NotFoundError(ConsoleError, LookupError):
    """实体不存在。

    Attributes:
        entity: 实体名称（如 "FP"、"User"）。
        key: 查找所用的键。
    """

    def __init__(self, entity: str, key: Any) -> None:
        self.entity = entity
        self.key = key
        super().__init__(f"{entity} not found: {key!r}")


class InvalidStateError(ConsoleError):
    """在不允许的状态下执行了操作"""
