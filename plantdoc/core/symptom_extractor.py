"""症状抽取器

将用户描述匹配到知识库中的症状短语。

候选池 = 当前植物的症状 + generic 记录的症状。每个候选的打分（累加后截断到 1.0）：
- 症状短语完整出现在输入中：1.0（exact），不再继续打分
- 否则累加：
  - 每个长度 > 2 的症状词，若与某个输入词互相包含：+0.3（partial）
  - 每个长度 > 3 的症状词，若作为子串出现在输入中：+0.5（substring）
  - 症状与输入同时命中的语义分组数 × 0.4（semantic）
- 累计权重 > 0.2 才保留
"""
from typing import List

from plantdoc.models import PlantRecord, SymptomMatch
from plantdoc.services.knowledge_base import KnowledgeBase
from plantdoc.utils.config import ScoringConfig
from plantdoc.utils.text_utils import count_semantic_groups, split_words

SOURCE_PLANT_SPECIFIC = "plant_specific"
SOURCE_GENERIC = "generic"
SOURCE_ENHANCED_DIRECT = "enhanced_direct"
SOURCE_ENHANCED_PARTIAL = "enhanced_partial"


class SymptomExtractor:
    """症状抽取器"""

    def __init__(self, scoring_config: ScoringConfig = None):
        self.scoring = scoring_config or ScoringConfig()

    def extract(
        self, text: str, plant: PlantRecord, knowledge_base: KnowledgeBase
    ) -> List[SymptomMatch]:
        """抽取症状

        Args:
            text: 用户输入
            plant: 识别出的植物
            knowledge_base: 知识库快照（提供 generic 症状）

        Returns:
            按权重降序、按症状文本去重的匹配列表，最多 max_symptoms 条
        """
        text_lower = text.lower()
        input_words = split_words(text_lower)
        plant_symptoms = plant.symptoms
        candidates = [*plant_symptoms, *knowledge_base.generic.symptoms]

        matched = []
        for symptom in candidates:
            weight, match_type = self._score_candidate(symptom.lower(), text_lower, input_words)
            if weight > self.scoring.symptom_retain_threshold:
                matched.append(SymptomMatch(
                    symptom=symptom,
                    source=SOURCE_PLANT_SPECIFIC if symptom in plant_symptoms else SOURCE_GENERIC,
                    weight=min(weight, 1.0),
                    match_type=match_type,
                ))

        # 稳定排序后去重，保留权重最高的一条
        matched.sort(key=lambda m: m.weight, reverse=True)
        unique = []
        seen = set()
        for match in matched:
            if match.symptom in seen:
                continue
            seen.add(match.symptom)
            unique.append(match)

        return unique[:self.scoring.max_symptoms]

    def _score_candidate(self, symptom: str, text: str, input_words: List[str]):
        """计算单个候选症状的权重和匹配类型"""
        if symptom in text:
            return self.scoring.exact_weight, "exact"

        score = 0.0
        match_type = ""
        symptom_words = split_words(symptom)

        for symptom_word in symptom_words:
            if len(symptom_word) < self.scoring.partial_min_word_length:
                continue
            if any(symptom_word in word or word in symptom_word for word in input_words):
                score += self.scoring.partial_word_weight
                match_type = "partial"

        for symptom_word in symptom_words:
            if len(symptom_word) >= self.scoring.substring_min_word_length and symptom_word in text:
                score += self.scoring.substring_word_weight
                match_type = "substring"

        semantic_matches = count_semantic_groups(symptom, text)
        if semantic_matches > 0:
            score += semantic_matches * self.scoring.semantic_group_weight
            match_type = "semantic"

        return score, match_type

    def extract_enhanced(self, text: str, plant: PlantRecord) -> List[SymptomMatch]:
        """增强症状检测

        只扫描当前植物自己的症状，用于提升病因置信度，不并入主列表。
        """
        text_lower = text.lower()
        enhanced = []

        for symptom in plant.symptoms:
            symptom_lower = symptom.lower()
            if symptom_lower in text_lower:
                enhanced.append(SymptomMatch(
                    symptom=symptom,
                    source=SOURCE_ENHANCED_DIRECT,
                    weight=self.scoring.enhanced_direct_weight,
                ))
            elif any(
                len(word) >= self.scoring.partial_min_word_length and word in text_lower
                for word in split_words(symptom_lower)
            ):
                enhanced.append(SymptomMatch(
                    symptom=symptom,
                    source=SOURCE_ENHANCED_PARTIAL,
                    weight=self.scoring.enhanced_partial_weight,
                ))

        return enhanced
