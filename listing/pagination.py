"""分页器 - 列表画面的分页

页码从 1 开始，每页件数只能从配置的选项中选择（默认 30 / 50 / 100）。
"""
import math
from dataclasses import dataclass, field
from typing import Any, List, Optional, Sequence

from config.settings import settings


def page_count(total: int, size: int) -> int:
    """总页数，0 件时为 0"""
    if size <= 0:
        raise ValueError(f"Page size must be positive: {size}")
    return math.ceil(total / size) if total > 0 else 0


@dataclass
class Page:
    """一页的数据

    Attributes:
        items: 本页记录
        number: 页码（1 起算）
        size: 每页件数
        total: 过滤后的总件数
        page_count: 总页数
    """
    items: List[Any] = field(default_factory=list)
    number: int = 1
    size: int = 30
    total: int = 0
    page_count: int = 0

    @property
    def is_empty(self) -> bool:
        """没有任何记录（画面显示「該当するデータがありません」）"""
        return self.total == 0

    @property
    def has_previous(self) -> bool:
        return self.number > 1

    @property
    def has_next(self) -> bool:
        return self.number < self.page_count

    @property
    def start_index(self) -> int:
        """本页第一条记录的序号（1 起算），空页为 0"""
        return 0 if self.is_empty else (self.number - 1) * self.size + 1

    @property
    def end_index(self) -> int:
        return 0 if self.is_empty else self.start_index + len(self.items) - 1

    def summary(self) -> str:
        if self.is_empty:
            return "0 件"
        return f"{self.total} 件中 {self.start_index}-{self.end_index} 件"


def paginate(records: Sequence[Any], page: int, size: int) -> Page:
    """取出第 page 页

    超出范围的页码被夹到 [1, 总页数] 之间。

    Args:
        records: 已过滤、已排序的记录
        page: 页码（1 起算）
        size: 每页件数

    Returns:
        Page 对象
    """
    total = len(records)
    pages = page_count(total, size)
    number = min(max(page, 1), max(pages, 1))
    start = (number - 1) * size
    return Page(
        items=list(records[start:start + size]),
        number=number,
        size=size,
        total=total,
        page_count=pages,
    )


class Paginator:
    """分页状态

    保存当前页码与每页件数；翻页操作在首页/末页处不做任何事。

    Attributes:
        options: 可选的每页件数
        size: 当前每页件数
        page: 当前页码
        total: 最近一次分页时的总件数
    """

    def __init__(self, options: Optional[Sequence[int]] = None,
                 size: Optional[int] = None):
        self.options = list(options or settings.page_size_options)
        if not self.options or any(o <= 0 for o in self.options):
            raise ValueError(f"Invalid page size options: {self.options}")
        if size is None:
            size = (settings.default_page_size
                    if settings.default_page_size in self.options
                    else self.options[0])
        self._check_size(size)
        self.size = size
        self.page = 1
        self.total = 0

    def _check_size(self, size: int):
        if size not in self.options:
            raise ValueError(
                f"Page size {size} not allowed, expected one of {self.options}"
            )

    @property
    def page_count(self) -> int:
        return page_count(self.total, self.size)

    def set_size(self, size: int):
        """变更每页件数并回到第 1 页

        Raises:
            ValueError: 件数不在可选项中
        """
        self._check_size(size)
        self.size = size
        self.page = 1

    def reset(self):
        self.page = 1

    def next(self):
        if self.page < self.page_count:
            self.page += 1

    def previous(self):
        if self.page > 1:
            self.page -= 1

    def go_to(self, page: int):
        self.page = min(max(page, 1), max(self.page_count, 1))

    def apply(self, records: Sequence[Any]) -> Page:
        """对记录分页，并记录总件数（页码超出时夹回末页）"""
        self.total = len(records)
        result = paginate(records, self.page, self.size)
        self.page = result.number
        return result
