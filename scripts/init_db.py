"""初始化数据库

默认数据库在内存中，本脚本主要用于把演示数据导出到文件数据库以便调试：

    DATABASE_URL=sqlite:///data/console.db python scripts/init_db.py
"""
import sys
import os

# 添加项目根目录到路径
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from database import DatabaseManager
from loguru import logger


def init_database(database_url=None):
    """初始化数据库和种子数据"""
    logger.info("Initializing database...")

    # 创建数据库管理器
    db = DatabaseManager(database_url)

    # 创建所有表
    logger.info("Creating tables...")
    db.create_tables()

    # 插入种子数据
    logger.info("Inserting seed data...")
    counts = db.seed()
    for name, count in counts.items():
        logger.info(f"  {name}: {count}")

    logger.info(f"Database initialization completed: {db.database_url}")
    return db


if __name__ == "__main__":
    init_database(sys.argv[1] if len(sys.argv) > 1 else None).close()
