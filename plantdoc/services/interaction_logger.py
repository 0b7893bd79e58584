"""交互日志服务

记录每次诊断结果，并提供当日统计。

- 内存中保留最近 max_memory_logs 条记录
- logging.enabled 且非只读环境时，写入 SQLite（InteractionDAO）
- 持久化失败只记录警告，不影响诊断
"""
import logging
import os
import sqlite3
from collections import deque
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from plantdoc.dao import InteractionDAO
from plantdoc.dao.base import get_db_path
from plantdoc.models import DiagnosisResult, LogStats
from plantdoc.scripts.init_db import init_database
from plantdoc.utils.config import LoggingConfig

logger = logging.getLogger(__name__)

READ_ONLY_ENV_VARS = ("VERCEL", "NETLIFY", "AWS_REGION", "LAMBDA_TASK_ROOT", "GAE_ENV")


def is_read_only_environment() -> bool:
    """Serverless 等只读文件系统环境"""
    return any(os.environ.get(name) for name in READ_ONLY_ENV_VARS)


def _today() -> str:
    return datetime.now(timezone.utc).strftime("%Y-%m-%d")


def build_log_entry(result: DiagnosisResult) -> Dict[str, Any]:
    """从诊断结果构造日志条目"""
    return {
        "timestamp": result.timestamp,
        "originalInput": result.original_input,
        "detectedPlant": result.detected_plant,
        "plantName": result.plant_name,
        "plantMatchScore": result.plant_match_score,
        "detectionMethod": result.detection_method,
        "diagnoses": [d.model_dump() for d in result.diagnoses],
    }


def compute_stats(entries: List[Dict[str, Any]]) -> LogStats:
    """统计交互记录

    averageConfidence 为每条记录最高诊断置信度的平均值。
    """
    stats = LogStats()
    if not entries:
        return stats

    total_confidence = 0.0
    for entry in entries:
        plant_name = entry.get("plantName")
        stats.plants_detected[plant_name] = stats.plants_detected.get(plant_name, 0) + 1

        diagnoses = entry.get("diagnoses") or []
        if diagnoses:
            total_confidence += max(d["confidence"] for d in diagnoses)

        for diagnosis in diagnoses:
            cause_id = diagnosis["cause"]["id"]
            stats.most_common_issues[cause_id] = stats.most_common_issues.get(cause_id, 0) + 1

    stats.total_interactions = len(entries)
    stats.average_confidence = total_confidence / len(entries)
    return stats


class InteractionLogger:
    """交互日志记录器"""

    def __init__(self, config: Optional[LoggingConfig] = None):
        """初始化

        Args:
            config: 日志配置；只读环境下强制关闭持久化
        """
        self.config = config or LoggingConfig()
        self.memory_logs = deque(maxlen=self.config.max_memory_logs)
        self.read_only = is_read_only_environment()
        self.enabled = self.config.enabled and not self.read_only
        self.dao: Optional[InteractionDAO] = None

        self.db_path = get_db_path(self.config.directory)
        if self.enabled and self.db_path:
            self.dao = self._open_database(self.db_path)
        self.enabled = self.dao is not None

    def _open_database(self, db_path: str) -> Optional[InteractionDAO]:
        try:
            init_database(db_path, verbose=False)
        except (OSError, sqlite3.Error) as e:
            logger.warning(f"交互日志已禁用: 无法初始化 {db_path}: {e}")
            return None
        return InteractionDAO(db_path)

    def log_interaction(self, result: DiagnosisResult) -> Dict[str, Any]:
        """记录一次诊断

        Returns:
            写入的日志条目
        """
        entry = build_log_entry(result)
        self.memory_logs.append(entry)

        if self.dao is not None:
            try:
                self.dao.insert(entry)
            except sqlite3.Error as e:
                logger.warning(f"交互日志写入失败: {e}")
        return entry

    def load_today_logs(self) -> List[Dict[str, Any]]:
        """当日记录：持久化开启时读数据库，否则读内存"""
        if self.dao is None:
            return list(self.memory_logs)

        try:
            return self.dao.get_by_date(_today())
        except sqlite3.Error as e:
            logger.warning(f"交互日志读取失败: {e}")
            return []

    def get_stats(self) -> LogStats:
        """当日统计"""
        return compute_stats(self.load_today_logs())
