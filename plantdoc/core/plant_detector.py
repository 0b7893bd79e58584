"""植物识别器

从自由文本中识别植物，按优先级依次尝试：
1. 名称精确匹配（score=1.0）
2. 别名匹配（score=0.9）
3. 模糊匹配（score=1-distance）
4. 兜底返回 generic 记录（score=0.1）

精确匹配和别名匹配代价低且无歧义，只有二者都失败时才进入模糊匹配，
以限制近似匹配带来的误判。
"""
from dataclasses import dataclass

from plantdoc.models import PlantRecord
from plantdoc.services.knowledge_base import KnowledgeBase
from plantdoc.utils.config import DiagnosisConfig, ScoringConfig
from plantdoc.utils.text_utils import split_words, words_covered

METHOD_PLANT_NAME = "plant_name_match"
METHOD_ALIAS = "alias_match"
METHOD_FUZZY = "fuzzy_match"
METHOD_GENERIC = "generic_fallback"


@dataclass
class PlantDetection:
    """植物识别结果

    Attributes:
        plant: 识别出的植物记录
        score: 识别置信度 [0, 1]
        method: 识别方式
    """

    plant: PlantRecord
    score: float
    method: str


class PlantDetector:
    """植物识别器"""

    def __init__(
        self,
        diagnosis_config: DiagnosisConfig = None,
        scoring_config: ScoringConfig = None,
    ):
        self.diagnosis_config = diagnosis_config or DiagnosisConfig()
        self.scoring = scoring_config or ScoringConfig()

    def detect(self, text: str, knowledge_base: KnowledgeBase) -> PlantDetection:
        """识别输入文本对应的植物

        Args:
            text: 用户输入
            knowledge_base: 知识库快照

        Returns:
            PlantDetection，不会返回 None
        """
        text_lower = text.lower()
        input_words = split_words(text_lower)

        detection = (
            self._match_name(input_words, knowledge_base)
            or self._match_alias(text_lower, input_words, knowledge_base)
            or self._match_fuzzy(text, knowledge_base)
        )
        if detection:
            return detection

        return PlantDetection(
            plant=knowledge_base.generic,
            score=self.scoring.generic_fallback_score,
            method=METHOD_GENERIC,
        )

    def _match_name(self, input_words, knowledge_base: KnowledgeBase):
        """名称中的每个词都出现在输入中"""
        for plant in knowledge_base.plants:
            name_words = split_words(plant.name.lower())
            if words_covered(name_words, input_words):
                return PlantDetection(plant, self.scoring.plant_name_score, METHOD_PLANT_NAME)
        return None

    def _match_alias(self, text_lower: str, input_words, knowledge_base: KnowledgeBase):
        """别名作为子串出现，且别名中每个词都出现在输入中"""
        for plant in knowledge_base.plants:
            for alias in plant.aliases:
                alias_lower = alias.lower()
                if len(alias_lower) < self.scoring.min_alias_length:
                    continue
                if alias_lower not in text_lower:
                    continue
                if words_covered(split_words(alias_lower), input_words):
                    return PlantDetection(plant, self.scoring.alias_score, METHOD_ALIAS)
        return None

    def _match_fuzzy(self, text: str, knowledge_base: KnowledgeBase):
        hit = knowledge_base.fuzzy_index.search(text)
        if hit is None:
            return None

        plant, distance = hit
        if distance < self.diagnosis_config.fuzzy_threshold:
            score = min(max(1 - distance, 0.0), 1.0)
            return PlantDetection(plant, score, METHOD_FUZZY)
        return None
