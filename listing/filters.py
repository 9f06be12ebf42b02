"""过滤引擎 - 列表画面的检索与筛选条件

每个列表画面由若干过滤条件（Criterion）组成，FilterSet 以逻辑 AND 组合所有
处于有效状态的条件。

条件种类：
- TextSearch: 关键词在指定字段中做不区分大小写的部分匹配
- EnumFilter: 字段精确匹配，「全て」等哨兵值表示不过滤
- FlagFilter: 开关打开时只保留满足谓词的记录
- DateRange: 日期字段的闭区间过滤

过滤条件的输入来自画面，格式错误的输入不会抛出异常，只会让该条件失效。
"""
from abc import ABC, abstractmethod
from datetime import date, datetime, time
from typing import Any, Callable, Dict, Iterable, List, Optional, Sequence, Tuple, Union

from config.console_config import ALL_SENTINELS

# 字段访问方式：属性名（或字典键），或接收记录返回值的函数
Accessor = Union[str, Callable[[Any], Any]]

_DATE_FORMATS = (
    "%Y-%m-%d %H:%M:%S",
    "%Y-%m-%d %H:%M",
    "%Y-%m-%dT%H:%M:%S",
    "%Y-%m-%dT%H:%M",
    "%Y-%m-%d",
    "%Y/%m/%d %H:%M:%S",
    "%Y/%m/%d %H:%M",
    "%Y/%m/%d",
)


def resolve(record: Any, accessor: Accessor) -> Any:
    """按访问方式取出记录的字段值，字段不存在时返回 None"""
    if callable(accessor):
        return accessor(record)
    if isinstance(record, dict):
        return record.get(accessor)
    return getattr(record, accessor, None)


def coerce_date(value: Any) -> Optional[datetime]:
    """把日期类的值统一转换为 datetime

    支持 date / datetime 对象，以及 ``YYYY-MM-DD``、``YYYY/MM/DD``
    （可带时间）格式的字符串。

    Returns:
        转换后的 datetime，无法解析时返回 None
    """
    if isinstance(value, datetime):
        return value
    if isinstance(value, date):
        return datetime.combine(value, time.min)
    if not isinstance(value, str):
        return None

    text = value.strip()
    for fmt in _DATE_FORMATS:
        try:
            return datetime.strptime(text, fmt)
        except ValueError:
            continue
    return None


def is_all_value(value: Any) -> bool:
    """是否为「全部」哨兵值（None、空字符串、全て、すべて）"""
    return value is None or str(value).strip() in ALL_SENTINELS


class Criterion(ABC):
    """过滤条件基类

    Attributes:
        name: 条件名称，画面通过该名称设置条件值
    """

    def __init__(self, name: str):
        self.name = name

    @abstractmethod
    def is_active(self, value: Any) -> bool:
        """给定的条件值是否使该条件生效"""

    @abstractmethod
    def matches(self, record: Any, value: Any) -> bool:
        """记录是否满足条件（仅在条件生效时调用）"""

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.name!r})"


class TextSearch(Criterion):
    """关键词检索

    关键词为空时不过滤；否则只要任一字段包含关键词（不区分大小写）即匹配。
    字段值为 None 时视为不匹配。
    """

    def __init__(self, name: str, fields: Sequence[Accessor]):
        super().__init__(name)
        if not fields:
            raise ValueError(f"TextSearch {name!r} needs at least one field")
        self.fields = list(fields)

    def is_active(self, value: Any) -> bool:
        return value is not None and str(value).strip() != ""

    def matches(self, record: Any, value: Any) -> bool:
        term = str(value).strip().lower()
        for accessor in self.fields:
            field_value = resolve(record, accessor)
            if field_value is None:
                continue
            if term in str(field_value).lower():
                return True
        return False


class EnumFilter(Criterion):
    """枚举值精确匹配

    值按字符串形式比较，因此画面传入的 ``"4"`` 可以匹配评分 ``4``。
    """

    def __init__(self, name: str, field: Optional[Accessor] = None):
        super().__init__(name)
        self.field = field if field is not None else name

    def is_active(self, value: Any) -> bool:
        return not is_all_value(value)

    def matches(self, record: Any, value: Any) -> bool:
        field_value = resolve(record, self.field)
        if field_value is None:
            return False
        return str(field_value) == str(value).strip()


class FlagFilter(Criterion):
    """开关过滤，打开时只保留 predicate(record) 为真的记录"""

    def __init__(self, name: str, predicate: Callable[[Any], bool]):
        super().__init__(name)
        self.predicate = predicate

    def is_active(self, value: Any) -> bool:
        return bool(value)

    def matches(self, record: Any, value: Any) -> bool:
        return bool(self.predicate(record))


class DateRange(Criterion):
    """日期闭区间过滤

    条件值为 ``(start, end)``，任一端可为 None 或空字符串。
    比较以日为单位，两端都包含在内。
    无法解析的端点视为未设置；只要有一端生效，日期缺失或无法解析的记录就被排除。
    """

    def __init__(self, name: str, field: Optional[Accessor] = None):
        super().__init__(name)
        self.field = field if field is not None else name

    @staticmethod
    def bounds(value: Any) -> Tuple[Optional[date], Optional[date]]:
        """把条件值解析为 (开始日, 结束日)"""
        if value is None:
            return None, None
        if isinstance(value, dict):
            start, end = value.get("start"), value.get("end")
        elif isinstance(value, (tuple, list)) and len(value) == 2:
            start, end = value
        else:
            return None, None
        start_dt, end_dt = coerce_date(start), coerce_date(end)
        return (
            start_dt.date() if start_dt else None,
            end_dt.date() if end_dt else None,
        )

    def is_active(self, value: Any) -> bool:
        start, end = self.bounds(value)
        return start is not None or end is not None

    def matches(self, record: Any, value: Any) -> bool:
        start, end = self.bounds(value)
        record_dt = coerce_date(resolve(record, self.field))
        if record_dt is None:
            return False
        day = record_dt.date()
        if start is not None and day < start:
            return False
        if end is not None and day > end:
            return False
        return True


class FilterSet:
    """过滤条件集合

    保存各条件的当前值，并以逻辑 AND 组合所有生效的条件。

    Example:
        ```python
        filters = FilterSet([
            TextSearch("search", ["name", "email"]),
            EnumFilter("status"),
        ])
        filters.set("search", "青木")
        rows = filters.apply(users)
        ```
    """

    def __init__(self, criteria: Iterable[Criterion] = ()):
        self._criteria: Dict[str, Criterion] = {}
        self._values: Dict[str, Any] = {}
        for criterion in criteria:
            self.add(criterion)

    def add(self, criterion: Criterion):
        if criterion.name in self._criteria:
            raise ValueError(f"Duplicate filter name: {criterion.name}")
        self._criteria[criterion.name] = criterion

    @property
    def names(self) -> List[str]:
        return list(self._criteria)

    def criteria(self) -> List[Criterion]:
        return list(self._criteria.values())

    @property
    def values(self) -> Dict[str, Any]:
        return dict(self._values)

    def set(self, name: str, value: Any):
        """设置条件值

        Raises:
            ValueError: 条件名称不存在
        """
        if name not in self._criteria:
            raise ValueError(
                f"Unknown filter: {name}, expected one of {self.names}"
            )
        self._values[name] = value

    def get(self, name: str) -> Any:
        return self._values.get(name)

    def clear(self):
        self._values.clear()

    def active(self) -> List[Tuple[Criterion, Any]]:
        """当前生效的 (条件, 值) 列表"""
        result = []
        for name, criterion in self._criteria.items():
            value = self._values.get(name)
            if criterion.is_active(value):
                result.append((criterion, value))
        return result

    def matches(self, record: Any) -> bool:
        return all(c.matches(record, v) for c, v in self.active())

    def apply(self, records: Iterable[Any]) -> List[Any]:
        """返回满足所有生效条件的记录（保持原有顺序）"""
        active = self.active()
        return [
            r for r in records
            if all(c.matches(r, v) for c, v in active)
        ]
