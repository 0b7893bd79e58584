"""数据库初始化脚本

创建交互日志 SQLite 数据库的表结构

表结构：
- interactions: 每次诊断的交互记录
"""
import sqlite3
from pathlib import Path

# 数据库 schema SQL
SCHEMA_SQL = """
-- 交互记录表
CREATE TABLE IF NOT EXISTS interactions (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    timestamp TEXT NOT NULL,                   -- ISO-8601（UTC）
    log_date TEXT NOT NULL,                    -- YYYY-MM-DD，按天统计
    original_input TEXT,                       -- 截断后的用户输入
    detected_plant TEXT,                       -- 植物 id
    plant_name TEXT,
    plant_match_score REAL,
    detection_method TEXT,
    diagnoses_json TEXT NOT NULL               -- JSON 数组
);

CREATE INDEX IF NOT EXISTS idx_interactions_log_date ON interactions(log_date);
"""


def init_database(db_path: str, verbose: bool = True) -> str:
    """
    初始化数据库，创建表结构

    Args:
        db_path: 数据库文件路径，默认为 logs/interactions.db
        verbose: 是否打印进度

    Returns:
        数据库文件路径
    """
    Path(db_path).parent.mkdir(parents=True, exist_ok=True)

    if verbose:
        print(f"正在初始化数据库: {db_path}")

    conn = sqlite3.connect(db_path)
    cursor = conn.cursor()

    try:
        cursor.executescript(SCHEMA_SQL)
        conn.commit()
    except sqlite3.Error:
        conn.rollback()
        raise
    finally:
        conn.close()

    if verbose:
        print(f"[OK] 数据库初始化完成: {db_path}")
    return db_path

