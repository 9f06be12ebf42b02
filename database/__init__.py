"""database 模块 - 管理コンソール的数据层。

统一入口为 DatabaseManager，子仓库与模型可按需单独导入。
"""
from .manager import DatabaseManager
from .exceptions import ConsoleError, NotFoundError, InvalidStateError

__all__ = [
    "DatabaseManager",
    "ConsoleError",
    "NotFoundError",
    "InvalidStateError",
]
