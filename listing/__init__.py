"""listing 模块 - 列表画面的过滤、排序、分页引擎"""
from .filters import (
    Criterion, TextSearch, EnumFilter, FlagFilter, DateRange, FilterSet,
    coerce_date, resolve,
)
from .sorting import SortDirection, SortKey, SortState, sort_records
from .pagination import Page, Paginator, paginate, page_count
from .view import ListView

__all__ = [
    "Criterion", "TextSearch", "EnumFilter", "FlagFilter", "DateRange",
    "FilterSet", "coerce_date", "resolve",
    "SortDirection", "SortKey", "SortState", "sort_records",
    "Page", "Paginator", "paginate", "page_count",
    "ListView",
]
