"""诊断引擎

编排一次完整的诊断：输入规范化 → 植物识别 → 症状抽取 → 病因打分。

引擎显式构造并在启动时加载一次知识库和配置，由 API 和 CLI 共享同一实例。
诊断过程是纯 CPU 计算，不做任何 I/O；并发请求各自读取一次知识库快照。
"""
import logging
from datetime import datetime, timezone
from typing import Optional

from plantdoc.core.cause_scorer import CauseScorer
from plantdoc.core.plant_detector import PlantDetector
from plantdoc.core.symptom_extractor import SymptomExtractor
from plantdoc.models import GENERIC_PLANT_ID, Cause, Diagnosis, DiagnosisResult, PlantRecord
from plantdoc.services.knowledge_base import KnowledgeBase, KnowledgeBaseStore
from plantdoc.utils.config import Config

logger = logging.getLogger(__name__)

ELLIPSIS = "..."

EMPTY_INPUT_DIAGNOSIS = Diagnosis(
    cause=Cause(id="empty_input", label="No Input Provided"),
    confidence=0,
    why="Please provide a description of your plant's problem.",
    actions=[
        "Describe what you're seeing (yellow leaves, drooping, etc.)",
        "Mention the plant name if you know it",
        "Include details about watering and light conditions",
        "Describe any recent changes to the plant's environment",
    ],
    eco_tip="The more details you provide, the better I can help diagnose the issue!",
)


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")


class DiagnosisEngine:
    """诊断引擎"""

    def __init__(self, store: KnowledgeBaseStore, config: Optional[Config] = None):
        """初始化诊断引擎

        Args:
            store: 知识库持有者
            config: 全局配置，缺省使用默认值
        """
        self.store = store
        self.config = config or Config()
        self.detector = PlantDetector(self.config.diagnosis, self.config.scoring)
        self.extractor = SymptomExtractor(self.config.scoring)
        self.scorer = CauseScorer(self.config.diagnosis, self.config.scoring)

    @classmethod
    def from_files(
        cls,
        config: Optional[Config] = None,
        plants_path: Optional[str] = None,
    ) -> "DiagnosisEngine":
        """从植物目录文件构造引擎（失败即抛出 KnowledgeBaseError）"""
        config = config or Config()
        store = KnowledgeBaseStore.from_file(
            plants_path,
            fuzzy_min_window_ratio=config.scoring.fuzzy_min_window_ratio,
            fuzzy_min_similarity=config.scoring.fuzzy_min_similarity,
        )
        return cls(store, config)

    @property
    def knowledge_base(self) -> KnowledgeBase:
        return self.store.snapshot

    def normalize_input(self, text: str) -> str:
        """超长输入截断并追加省略号"""
        max_length = self.config.ui.max_input_length
        if len(text) > max_length:
            return text[:max_length] + ELLIPSIS
        return text

    def diagnose(self, text: Optional[str]) -> DiagnosisResult:
        """诊断

        Args:
            text: 用户描述

        Returns:
            DiagnosisResult，任何输入都返回有效结果
        """
        if not text or not text.strip():
            return DiagnosisResult(
                plant_name=GENERIC_PLANT_ID,
                plant_match_score=0,
                diagnoses=[EMPTY_INPUT_DIAGNOSIS.model_copy(deep=True)],
                timestamp=_now_iso(),
            )

        knowledge_base = self.store.snapshot
        truncated = self.normalize_input(text)

        detection = self.detector.detect(truncated, knowledge_base)
        symptoms = self.extractor.extract(truncated, detection.plant, knowledge_base)
        enhanced = self.extractor.extract_enhanced(truncated, detection.plant)
        diagnoses = self.scorer.score(detection.plant, symptoms, enhanced, truncated)

        logger.debug(
            f"plant={detection.plant.id} method={detection.method} "
            f"symptoms={len(symptoms)} enhanced={len(enhanced)} diagnoses={len(diagnoses)}"
        )

        return DiagnosisResult(
            plant_name=detection.plant.name,
            plant_match_score=detection.score,
            diagnoses=diagnoses,
            timestamp=_now_iso(),
            original_input=truncated,
            detected_plant=detection.plant.id,
            detection_method=detection.method,
        )

    def add_plant(self, plant: PlantRecord) -> None:
        """追加植物（管理操作，与诊断互斥地重建模糊索引）"""
        self.store.add_plant(plant)

    def rebuild_index(self) -> None:
        """重建模糊检索索引"""
        self.store.rebuild_index()
