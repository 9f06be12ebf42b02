"""列表画面控制器 - List / Filter / Sort / Paginate

ListView 把数据加载函数、过滤条件、排序状态、分页器组合在一起。
每次取数据都会重新调用加载函数，因此编辑画面保存后列表立即反映最新数据。

处理顺序固定为：加载 → 过滤 → 排序 → 分页。
变更过滤条件、排序、每页件数时回到第 1 页。
"""
from typing import Any, Callable, Iterable, List, Optional

from loguru import logger

from .filters import FilterSet
from .pagination import Page, Paginator
from .sorting import SortDirection, SortState

Loader = Callable[[], Iterable[Any]]


class ListView:
    """通用列表画面控制器

    Attributes:
        name: 画面名称（用于日志）
        filters: 过滤条件集合
        sort: 排序状态
        paginator: 分页器

    Example:
        ```python
        view = ListView("users", db.users.list_all, filters, sort)
        view.set_filter("search", "青木")
        view.sort_by("registration_date")
        page = view.page()
        ```
    """

    def __init__(self, name: str, loader: Loader, filters: FilterSet,
                 sort: SortState, paginator: Optional[Paginator] = None):
        self.name = name
        self._loader = loader
        self.filters = filters
        self.sort = sort
        self.paginator = paginator or Paginator()

    # ========== 过滤 ==========

    def set_filter(self, name: str, value: Any):
        self.filters.set(name, value)
        self.paginator.reset()
        logger.debug(f"[{self.name}] filter {name}={value!r}")

    def clear_filters(self):
        self.filters.clear()
        self.paginator.reset()
        logger.debug(f"[{self.name}] filters cleared")

    # ========== 排序 ==========

    def sort_by(self, key: str):
        """点击列头：同一列切换方向，其他列从初始方向开始"""
        self.sort.toggle(key)
        self.paginator.reset()
        logger.debug(f"[{self.name}] sort {self.sort}")

    def set_sort(self, key: str, direction: SortDirection):
        self.sort.set(key, direction)
        self.paginator.reset()
        logger.debug(f"[{self.name}] sort {self.sort}")

    # ========== 分页 ==========

    def set_page_size(self, size: int):
        self.paginator.set_size(size)
        logger.debug(f"[{self.name}] page size {size}")

    def next_page(self):
        self._sync_total()
        self.paginator.next()

    def previous_page(self):
        self.paginator.previous()

    def go_to_page(self, number: int):
        self._sync_total()
        self.paginator.go_to(number)

    def _sync_total(self):
        self.paginator.total = len(self.rows())

    # ========== 数据 ==========

    def rows(self) -> List[Any]:
        """过滤并排序后的全部记录"""
        records = list(self._loader())
        return self.sort.apply(self.filters.apply(records))

    def page(self) -> Page:
        """当前页"""
        return self.paginator.apply(self.rows())

    @property
    def page_number(self) -> int:
        return self.paginator.page
