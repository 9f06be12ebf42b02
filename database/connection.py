"""数据库连接与基础设施管理。

本模块负责数据库的底层基础设施，包括：
- 数据库引擎创建（默认内存 SQLite，进程退出后数据即丢失）
- 会话（Session）管理
- 数据库表创建
- 原始SQL执行

本模块不包含任何业务逻辑，仅提供数据库基础操作。
"""
from typing import Optional, Any
from sqlalchemy import create_engine, event, text
from sqlalchemy.orm import sessionmaker, Session
from sqlalchemy.pool import StaticPool
from loguru import logger

from .models import Base
from config.settings import settings


def _is_memory_url(database_url: str) -> bool:
    return database_url in ("sqlite://", "sqlite:///:memory:") or (
        database_url.startswith("sqlite") and "mode=memory" in database_url
    )


class DatabaseConnection:
    """数据库连接管理器。

    负责数据库引擎的创建和会话管理。内存 SQLite 使用 StaticPool，
    保证同一进程内所有会话共享同一个内存数据库。

    Attributes:
        database_url: 数据库连接URL。
        engine: SQLAlchemy引擎对象。
        SessionLocal: 会话工厂。

    Example:
        ```python
        # 内存数据库（默认，进程退出即丢失）
        conn = DatabaseConnection("sqlite://")

        # 文件数据库（仅用于调试导出）
        conn = DatabaseConnection("sqlite:///data/console.db")
        ```
    """

    def __init__(self, database_url: Optional[str] = None) -> None:
        """初始化数据库连接。

        Args:
            database_url: 数据库连接URL，如果为None则使用settings中的配置。
        """
        self.database_url: str = database_url or settings.database_url

        if not self.database_url.startswith("sqlite"):
            raise ValueError(
                f"Unsupported database url: {self.database_url}, "
                f"only sqlite is supported"
            )

        if _is_memory_url(self.database_url):
            self.engine = create_engine(
                self.database_url,
                echo=False,
                connect_args={"check_same_thread": False},
                poolclass=StaticPool,
            )
        else:
            self.engine = create_engine(
                self.database_url,
                echo=False,
                connect_args={"check_same_thread": False}
            )

        # SQLite 默认不校验外键，需要在每个连接上显式开启
        @event.listens_for(self.engine, "connect")
        def _enable_foreign_keys(dbapi_connection, connection_record):
            cursor = dbapi_connection.cursor()
            cursor.execute("PRAGMA foreign_keys=ON")
            cursor.close()

        self.SessionLocal = sessionmaker(
            bind=self.engine, autocommit=False, autoflush=False,
            expire_on_commit=False
        )
        logger.debug(f"Database engine created: {self.database_url}")

    def create_tables(self) -> None:
        """创建所有数据库表。

        根据 models.py 中定义的所有模型创建对应的数据库表。
        如果表已存在则不会重复创建（幂等操作）。
        """
        Base.metadata.create_all(self.engine)

    def get_session(self) -> Session:
        """获取数据库会话。

        Returns:
            数据库会话对象。
        """
        return self.SessionLocal()

    def execute_raw_sql(self, sql: str, params: Optional[dict] = None) -> Any:
        """执行原始SQL语句。

        注意：此方法应谨慎使用，建议优先使用ORM方法。

        Args:
            sql: SQL语句字符串。
            params: SQL参数字典（可选）。

        Returns:
            SQL执行结果（已取出的行列表）。
        """
        with self.get_session() as session:
            result = session.execute(text(sql), params or {})
            rows = result.fetchall() if result.returns_rows else []
            session.commit()
            return rows

    def close(self) -> None:
        """关闭数据库连接，释放引擎资源。

        对内存数据库而言，关闭即意味着所有数据被丢弃。
        """
        if self.engine is not None:
            self.engine.dispose()
