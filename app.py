#!/usr/bin/env python3
"""FP マッチング管理コンソール - 终端入口

在终端中浏览管理画面的列表（检索 / 筛选 / 排序 / 分页）。
数据保存在内存数据库中，每次启动都会重新载入演示数据。

使用方式：
    python app.py users

    # 检索 + 排序 + 翻页
    python app.py users --search 青木 --sort registration_date --page 2

    # 筛选条件（可重复）与日期范围
    python app.py reviews --filter rating=5 --filter reviewer_type=エンドユーザー
    python app.py matching_history --from 2024-09-12 --to 2024/09/14

    # 列出所有画面
    python app.py --list

环境变量（在 .env 文件中配置）：
    DATABASE_URL       数据库连接地址（默认内存 SQLite）
    DEFAULT_PAGE_SIZE  每页件数（默认 30）
    SEED_ON_START      是否载入演示数据（默认 true）
    LOG_LEVEL          日志级别（默认 INFO）
"""
import argparse
import sys

from loguru import logger

from config.settings import settings
from console import AdminConsole
from database import DatabaseManager
from listing import DateRange, SortDirection, resolve

# 各画面的显示列：(列名, 字段或取值函数)
COLUMNS = {
    "users": [("ID", "id"), ("氏名", "name"), ("メール", "email"),
              ("登録日", "registration_date"), ("認証", "verification_status"),
              ("新規", lambda u: "●" if u.is_new else "")],
    "fps": [("ID", "id"), ("氏名", "name"), ("種別", "fp_type"),
            ("会社", "company"), ("今月割当", "monthly_assignment"),
            ("評価", "average_rating"), ("ランク", "rank"), ("状態", "status")],
    "matching": [("ID", "id"), ("FP", lambda a: a.fp.name),
                 ("種別", "allocation_type"),
                 ("進捗", lambda a: f"{a.completed_allocations}/{a.total_allocations}"),
                 ("状態", "status"), ("完了日", "completion_date")],
    "matching_history": [("ID", "id"), ("割当日時", "allocated_at"),
                         ("FP", lambda h: h.fp.name),
                         ("ユーザー", lambda h: h.user.name),
                         ("方法", "allocation_method"), ("状態", "current_status")],
    "partners": [("ID", "id"), ("名称", "name"), ("メール", "contact_email"),
                 ("状態", "status"), ("最終更新日", "last_updated")],
    "reviews": [("ID", "id"), ("投稿日時", "posted_at"),
                ("FP", lambda r: r.fp.name), ("投稿者", "reviewer_name"),
                ("評価", "rating"), ("状態", "status_at_review")],
    "payment_urls": [("ID", "id"), ("名称", "url_name"), ("状態", "status"),
                     ("作成日", "creation_date"), ("最終決済日", "last_payment_date"),
                     ("決済回数", "payment_count")],
    "subscription_plans": [("ID", "id"), ("プラン名", "plan_name"),
                           ("料金", "price"), ("請求", "billing_cycle"),
                           ("状態", "status"), ("契約数", "subscriber_count")],
    "faqs": [("ID", "id"), ("順", "display_order"), ("カテゴリ", "category"),
             ("質問", "question"), ("状態", "publication_status")],
    "legal_documents": [("ID", "id"), ("名称", "name"),
                        ("バージョン", "current_version"),
                        ("最終更新日", "last_updated"), ("状態", "publication_status")],
    "banners": [("ID", "id"), ("位置", "position"), ("リンク", "link_url"),
                ("期間", "display_period"), ("状態", "publication_status"),
                ("クリック", "clicks")],
}


def setup_logging(level: str):
    logger.remove()
    logger.add(sys.stderr, level=level.upper())


def parse_filters(items):
    """把 ``key=value`` 形式的参数解析为字典"""
    filters = {}
    for item in items or []:
        if "=" not in item:
            raise ValueError(f"Invalid filter (expected key=value): {item}")
        key, value = item.split("=", 1)
        filters[key.strip()] = value.strip()
    return filters


def render_page(section, page):
    columns = COLUMNS.get(section.name, [("ID", "id")])
    print(f"■ {section.title}  ({page.summary()}  page {page.number}/{page.page_count})")
    if page.is_empty:
        print("  該当するデータがありません")
        return

    rows = [
        ["" if resolve(r, acc) is None else str(resolve(r, acc)) for _, acc in columns]
        for r in page.items
    ]
    headers = [name for name, _ in columns]
    widths = [max(len(h), *(len(row[i]) for row in rows)) for i, h in enumerate(headers)]
    print("  " + " | ".join(h.ljust(w) for h, w in zip(headers, widths)))
    print("  " + "-+-".join("-" * w for w in widths))
    for row in rows:
        print("  " + " | ".join(c.ljust(w) for c, w in zip(row, widths)))


def main(argv=None):
    parser = argparse.ArgumentParser(description="FP マッチング管理コンソール")
    parser.add_argument("section", nargs="?", help="画面 (users, fps, matching ...)")
    parser.add_argument("--list", action="store_true", help="列出所有画面")
    parser.add_argument("--search", help="检索关键词")
    parser.add_argument("--filter", action="append", metavar="KEY=VALUE",
                        help="筛选条件（可重复）")
    parser.add_argument("--from", dest="date_from", help="日期范围开始")
    parser.add_argument("--to", dest="date_to", help="日期范围结束")
    parser.add_argument("--sort", help="排序键")
    parser.add_argument("--asc", action="store_true", help="升序")
    parser.add_argument("--desc", action="store_true", help="降序")
    parser.add_argument("--page", type=int, default=1, help="页码 (默认: 1)")
    parser.add_argument("--page-size", type=int, help="每页件数")
    parser.add_argument("--db", default=None, help="数据库连接 URL")
    parser.add_argument("--no-seed", action="store_true", help="不载入演示数据")
    parser.add_argument("--log-level", default=settings.log_level,
                        help=f"日志级别 (默认: {settings.log_level})")
    args = parser.parse_args(argv)

    setup_logging(args.log_level)

    console = None
    try:
        console = AdminConsole(DatabaseManager(args.db),
                               seed=False if args.no_seed else None)
        if args.list or not args.section:
            for name in console.section_names:
                print(f"  {name:<20} {console.section(name).title}")
            return 0

        section = console.section(args.section)
        view = section.view

        if args.search:
            view.set_filter("search", args.search)
        for key, value in parse_filters(args.filter).items():
            view.set_filter(key, value)
        if args.date_from or args.date_to:
            ranges = [c for c in view.filters.criteria()
                      if isinstance(c, DateRange)]
            if not ranges:
                raise ValueError(f"Section {section.name} has no date range")
            view.set_filter(ranges[0].name, (args.date_from, args.date_to))

        if args.sort or args.asc or args.desc:
            key = args.sort or view.sort.key
            if args.asc or args.desc:
                view.set_sort(key, SortDirection.ASC if args.asc else SortDirection.DESC)
            elif key != view.sort.key:
                view.sort_by(key)

        if args.page_size:
            view.set_page_size(args.page_size)
        view.go_to_page(args.page)

        render_page(section, view.page())
        return 0
    except ValueError as e:
        logger.error(str(e))
        return 2
    finally:
        if console is not None:
            console.close()


if __name__ == "__main__":
    sys.exit(main())
