"""全局配置管理

所有可配置项均可通过 .env 文件或环境变量设置，运行时自动加载到此处。
默认使用内存 SQLite 作为数据存储，进程退出后数据即丢失。

使用方式：
    1. 手动创建 .env 文件，例如 ``DATABASE_URL=sqlite:///data/console.db``
    2. 或直接设置环境变量 ``DEFAULT_PAGE_SIZE=50``
"""
from typing import List

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """应用配置 - 所有字段均可通过 .env 或环境变量覆盖"""

    # ========== 数据库 ==========
    database_url: str = "sqlite://"

    # ========== 列表分页 ==========
    default_page_size: int = 30
    page_size_options: List[int] = [30, 50, 100]

    # ========== 演示数据 ==========
    seed_on_start: bool = True
    seed_random_seed: int = 20250901

    # ========== ID 生成 ==========
    id_number_width: int = 3

    # ========== 日志 ==========
    log_level: str = "INFO"

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        case_sensitive = False
        extra = "ignore"


# 全局配置实例
settings = Settings()
