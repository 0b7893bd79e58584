"""DAO 基类

交互日志数据库的路径解析与连接管理。数据库位于 logging.directory 下，
文件名固定为 interactions.db；相对目录以当前工作目录为基准。
"""
import sqlite3
from typing import Optional
from pathlib import Path
from contextlib import contextmanager

DB_FILE_NAME = "interactions.db"


def get_db_path(directory: Optional[str]) -> Optional[str]:
    """由日志目录得到数据库文件路径

    Args:
        directory: logging.directory 配置，为空表示不持久化

    Returns:
        数据库文件路径；directory 为空时返回 None
    """
    if not directory:
        return None
    logs_dir = Path(directory)
    if not logs_dir.is_absolute():
        logs_dir = Path.cwd() / logs_dir
    return str(logs_dir / DB_FILE_NAME)


class BaseDAO:
    """DAO 基类"""

    def __init__(self, db_path: str):
        self.db_path = db_path

    @contextmanager
    def get_connection(self, row_factory: bool = True):
        """
        获取数据库连接的上下文管理器

        Args:
            row_factory: 是否启用 Row 工厂（按列名访问）
        """
        conn = sqlite3.connect(self.db_path)
        if row_factory:
            conn.row_factory = sqlite3.Row
        try:
            yield conn
        finally:
            conn.close()

    @contextmanager
    def get_cursor(self, row_factory: bool = True):
        """获取 (connection, cursor)"""
        with self.get_connection(row_factory) as conn:
            yield conn, conn.cursor()
