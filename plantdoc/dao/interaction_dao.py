"""Interaction DAO

负责 interactions 表的数据访问（每次诊断的交互记录）
"""
import json
from typing import List, Dict, Any

from plantdoc.dao.base import BaseDAO


class InteractionDAO(BaseDAO):
    """交互记录数据访问对象"""

    def insert(self, entry: Dict[str, Any]) -> None:
        """
        写入一条交互记录

        Args:
            entry: 日志条目（timestamp、originalInput、detectedPlant、plantName、
                   plantMatchScore、detectionMethod、diagnoses）
        """
        timestamp = entry.get("timestamp") or ""
        with self.get_cursor(row_factory=False) as (conn, cursor):
            cursor.execute(
                """
                INSERT INTO interactions (
                    timestamp, log_date, original_input, detected_plant, plant_name,
                    plant_match_score, detection_method, diagnoses_json
                )
                VALUES (?, ?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    timestamp,
                    timestamp[:10],
                    entry.get("originalInput"),
                    entry.get("detectedPlant"),
                    entry.get("plantName"),
                    entry.get("plantMatchScore"),
                    entry.get("detectionMethod"),
                    json.dumps(entry.get("diagnoses", []), ensure_ascii=False),
                ),
            )
            conn.commit()

    def get_by_date(self, log_date: str) -> List[Dict[str, Any]]:
        """
        获取某一天的交互记录

        Args:
            log_date: 日期（YYYY-MM-DD）

        Returns:
            日志条目列表，按写入顺序
        """
        with self.get_cursor() as (conn, cursor):
            cursor.execute(
                """
                SELECT timestamp, original_input, detected_plant, plant_name,
                       plant_match_score, detection_method, diagnoses_json
                FROM interactions
                WHERE log_date = ?
                ORDER BY id
                """,
                (log_date,),
            )
            return [self._row_to_entry(row) for row in cursor.fetchall()]

    def count(self) -> int:
        with self.get_cursor(row_factory=False) as (conn, cursor):
            cursor.execute("SELECT COUNT(*) FROM interactions")
            return cursor.fetchone()[0]

    @staticmethod
    def _row_to_entry(row) -> Dict[str, Any]:
        return {
            "timestamp": row["timestamp"],
            "originalInput": row["original_input"],
            "detectedPlant": row["detected_plant"],
            "plantName": row["plant_name"],
            "plantMatchScore": row["plant_match_score"],
            "detectionMethod": row["detection_method"],
            "diagnoses": json.loads(row["diagnoses_json"] or "[]"),
        }
