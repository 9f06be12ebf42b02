"""排序引擎 - 列表画面的单键排序

每个画面同一时刻只有一个排序键和一个方向。排序是确定的：
键值相同的记录按 ID 升序排列，键值缺失的记录无论升降序都排在最后。
"""
from dataclasses import dataclass
from datetime import date
from enum import Enum
from typing import Any, Dict, Iterable, List, Optional, Tuple

from .filters import Accessor, coerce_date, resolve


class SortDirection(Enum):
    """排序方向"""
    ASC = "asc"
    DESC = "desc"

    @property
    def flipped(self) -> "SortDirection":
        return SortDirection.DESC if self is SortDirection.ASC else SortDirection.ASC


def sort_value(value: Any) -> Optional[Tuple[int, Any]]:
    """把字段值转换为可比较的键

    数值按数值比较，日期类（date 对象或可解析的日期字符串）按时间比较，
    其余字符串按字典序比较。不同种类之间按 数值 < 日期 < 字符串 排列。

    Returns:
        (种类, 值) 元组，值缺失时返回 None
    """
    if value is None:
        return None
    if isinstance(value, bool):
        return 0, int(value)
    if isinstance(value, (int, float)):
        return 0, value
    if isinstance(value, date):
        return 1, coerce_date(value)
    if isinstance(value, Enum):
        value = value.value
    text = str(value).strip()
    if text == "":
        return None
    try:
        return 0, float(text)
    except ValueError:
        pass
    parsed = coerce_date(text)
    if parsed is not None:
        return 1, parsed
    return 2, text


def sort_records(records: Iterable[Any], accessor: Accessor,
                 direction: SortDirection = SortDirection.ASC,
                 id_accessor: Accessor = "id") -> List[Any]:
    """按单个键排序

    Args:
        records: 记录集合
        accessor: 排序字段
        direction: 排序方向
        id_accessor: 同值时用于决定顺序的 ID 字段

    Returns:
        排序后的新列表，原集合不变
    """
    def id_key(record):
        key = sort_value(resolve(record, id_accessor))
        return (key is None, key or (0, 0))

    present, missing = [], []
    for record in sorted(records, key=id_key):
        key = sort_value(resolve(record, accessor))
        if key is None:
            missing.append(record)
        else:
            present.append((key, record))

    # 排序是稳定的（reverse 也一样），同值记录保持 ID 升序
    present.sort(key=lambda pair: pair[0],
                 reverse=direction is SortDirection.DESC)
    return [record for _, record in present] + missing


@dataclass
class SortKey:
    """可选的排序键

    Attributes:
        name: 排序键名称（画面上的列名）
        accessor: 字段访问方式，默认与名称相同
        label: 显示名称
    """
    name: str
    accessor: Optional[Accessor] = None
    label: str = ""

    def __post_init__(self):
        if self.accessor is None:
            self.accessor = self.name


class SortState:
    """当前排序状态

    toggle(key) 对同一个键切换方向；切换到另一个键时使用画面的初始方向
    （默认降序）。

    Attributes:
        key: 当前排序键名称
        direction: 当前排序方向
        new_key_direction: 切换到新键时使用的方向
    """

    def __init__(self, keys: Iterable[SortKey], default_key: str,
                 default_direction: SortDirection = SortDirection.DESC,
                 new_key_direction: SortDirection = SortDirection.DESC):
        self._keys: Dict[str, SortKey] = {k.name: k for k in keys}
        if default_key not in self._keys:
            raise ValueError(f"Unknown sort key: {default_key}")
        self.default_key = default_key
        self.default_direction = default_direction
        self.new_key_direction = new_key_direction
        self.key = default_key
        self.direction = default_direction

    @property
    def keys(self) -> List[str]:
        return list(self._keys)

    def _check(self, key: str):
        if key not in self._keys:
            raise ValueError(f"Unknown sort key: {key}, expected one of {self.keys}")

    def toggle(self, key: str):
        """点击列头：同一键切换方向，其他键从初始方向开始"""
        self._check(key)
        if key == self.key:
            self.direction = self.direction.flipped
        else:
            self.key = key
            self.direction = self.new_key_direction

    def set(self, key: str, direction: SortDirection):
        self._check(key)
        self.key = key
        self.direction = direction

    def reset(self):
        self.key = self.default_key
        self.direction = self.default_direction

    def accessor(self, key: str) -> Accessor:
        """排序键对应的字段访问方式"""
        self._check(key)
        return self._keys[key].accessor

    def apply(self, records: Iterable[Any]) -> List[Any]:
        return sort_records(records, self.accessor(self.key), self.direction)

    def __repr__(self) -> str:
        return f"SortState({self.key!r}, {self.direction.value})"
