"""病因打分器

根据识别出的植物、症状匹配和原始输入，为植物的每个病因计算置信度。

置信度公式：
confidence = max(0.3, min(1.0,
    plant_match_weight × |matched_keywords| / max(|keywords|, 1)
    + symptom_match_weight × (avg(symptoms) + avg(enhanced)) / 2))

avg(S) = 0（S 为空）或 sum(weight) / max(|S|, 3)

兜底链：
1. 主列表和增强列表都为空：返回固定的"症状不明确"诊断（0.2）
2. 所有病因都未命中：按固定顺序尝试四组常见模式，首个命中的给出 0.4 的诊断
"""
from typing import List, Optional

from plantdoc.models import Cause, Diagnosis, PlantRecord, SymptomMatch
from plantdoc.utils.config import DiagnosisConfig, ScoringConfig
from plantdoc.utils.text_utils import FALLBACK_PATTERNS

GENERIC_ACTIONS = [
    "Check soil moisture with your finger",
    "Ensure proper drainage",
    "Adjust watering schedule",
    "Monitor plant response",
]

FALLBACK_SOLUTION_KEY = "watering_issues"

NO_SYMPTOMS_DIAGNOSIS = Diagnosis(
    cause=Cause(id="no_symptoms", label="Unclear Symptoms"),
    confidence=0.2,
    why=(
        "I couldn't detect specific symptoms in your description. Try mentioning "
        "specific issues like 'yellow leaves', 'drooping', or 'brown spots'."
    ),
    actions=[
        "Provide more specific details about what you're seeing",
        "Mention the plant name if you know it",
        "Describe the symptoms more clearly",
        "Include information about watering, light, and recent changes",
    ],
    eco_tip="When in doubt, less water is usually better than more water for most plants!",
)

FALLBACK_LABELS = {
    "underwatering": "Underwatering & Dehydration",
    "overwatering": "Overwatering & Root Rot",
    "light_issues": "Light Problems & Photosynthesis Issues",
    "pests": "Pest Infestation & Disease",
}

COMMON_SYMPTOM_WORDS = ["yellow", "brown", "dry", "wet", "pale", "small", "weak"]


class CauseScorer:
    """病因打分器

    无状态，每次调用都是 (plant, symptoms, enhanced, text, config) 的纯函数。
    """

    def __init__(
        self,
        diagnosis_config: DiagnosisConfig = None,
        scoring_config: ScoringConfig = None,
    ):
        self.diagnosis_config = diagnosis_config or DiagnosisConfig()
        self.scoring = scoring_config or ScoringConfig()

    def score(
        self,
        plant: PlantRecord,
        symptoms: List[SymptomMatch],
        enhanced_symptoms: List[SymptomMatch],
        text: str,
    ) -> List[Diagnosis]:
        """生成诊断列表

        Args:
            plant: 识别出的植物
            symptoms: 主症状匹配列表
            enhanced_symptoms: 增强症状匹配列表
            text: 用户输入

        Returns:
            按置信度降序排列的诊断，最多 max_diagnoses 条
        """
        if not symptoms and not enhanced_symptoms:
            return [NO_SYMPTOMS_DIAGNOSIS.model_copy(
                update={"confidence": self.scoring.no_symptom_confidence}, deep=True
            )]

        text_lower = text.lower()
        diagnoses = []

        for cause in plant.causes:
            all_matches = self._match_keywords(cause, text_lower)
            if not all_matches and not plant.is_generic:
                continue

            confidence = self.calculate_confidence(
                all_matches, len(cause.keywords), symptoms, enhanced_symptoms
            )
            if confidence < self.diagnosis_config.min_confidence_threshold:
                continue

            diagnoses.append(Diagnosis(
                cause=cause,
                confidence=confidence,
                why=self._explain(all_matches, cause, enhanced_symptoms),
                actions=self._actions_for(plant, cause.id),
                eco_tip=plant.eco_tip,
            ))

        if not diagnoses:
            fallback = self._fallback_diagnosis(text_lower, plant)
            if fallback:
                diagnoses.append(fallback)

        diagnoses.sort(key=lambda d: d.confidence, reverse=True)
        return diagnoses[:self.diagnosis_config.max_diagnoses]

    def _match_keywords(self, cause: Cause, text_lower: str) -> List[str]:
        """字面命中与部分命中的关键词并集（保持顺序、去重）"""
        matched = [kw for kw in cause.keywords if kw.lower() in text_lower]
        partial = [
            kw for kw in cause.keywords
            if any(
                len(word) >= self.scoring.partial_min_word_length and word in text_lower
                for word in kw.lower().split(" ")
            )
        ]
        return list(dict.fromkeys([*matched, *partial]))

    def symptom_score(self, symptoms: List[SymptomMatch]) -> float:
        """症状平均分，按基准症状数归一化"""
        if not symptoms:
            return 0.0
        total = sum(s.weight for s in symptoms)
        normalizer = max(len(symptoms), self.scoring.symptom_baseline_count)
        return min(total / normalizer, 1.0)

    def calculate_confidence(
        self,
        matched_keywords: List[str],
        total_keywords: int,
        symptoms: List[SymptomMatch],
        enhanced_symptoms: List[SymptomMatch],
    ) -> float:
        """计算病因置信度

        只要检测到任何模式，置信度下限为 confidence_floor。
        """
        keyword_score = len(matched_keywords) / max(total_keywords, 1)
        symptom_score = self.symptom_score(symptoms)
        enhanced_score = self.symptom_score(enhanced_symptoms)

        combined = min(
            self.diagnosis_config.plant_match_weight * keyword_score
            + self.diagnosis_config.symptom_match_weight * (symptom_score + enhanced_score) / 2,
            1.0,
        )
        return max(combined, self.scoring.confidence_floor)

    def _explain(
        self,
        matched_keywords: List[str],
        cause: Cause,
        enhanced_symptoms: List[SymptomMatch],
    ) -> str:
        label = cause.label.lower()
        if not matched_keywords and not enhanced_symptoms:
            return f"Based on general plant care patterns, this could be a {label} issue."

        keyword_list = "', '".join(matched_keywords[:self.scoring.max_why_keywords])
        symptom_list = "', '".join(
            s.symptom for s in enhanced_symptoms[:self.scoring.max_why_symptoms]
        )

        explanation = f"Detected keywords: '{keyword_list}'"
        if symptom_list:
            explanation += f" and symptoms: '{symptom_list}'"
        explanation += f" suggesting {label}."
        return explanation

    @staticmethod
    def _actions_for(plant: PlantRecord, cause_id: str) -> List[str]:
        """病因对应方案 → watering_issues 方案 → 通用检查清单"""
        actions = plant.solutions.get(cause_id) or plant.solutions.get(FALLBACK_SOLUTION_KEY)
        return list(actions) if actions else list(GENERIC_ACTIONS)

    def _fallback_diagnosis(self, text_lower: str, plant: PlantRecord) -> Optional[Diagnosis]:
        """最后兜底：常见模式检测"""
        for cause_id, keywords in FALLBACK_PATTERNS.items():
            if not any(keyword in text_lower for keyword in keywords):
                continue

            cause = Cause(id=cause_id, label=FALLBACK_LABELS[cause_id], keywords=keywords)
            found = [word for word in COMMON_SYMPTOM_WORDS if word in text_lower]
            label = cause.label.lower()
            if found:
                found_list = "', '".join(found)
                why = f"Detected common symptoms like '{found_list}' suggesting {label}."
            else:
                why = (
                    f"Based on the plant type and common issues, "
                    f"this appears to be a {label} problem."
                )

            return Diagnosis(
                cause=cause,
                confidence=self.scoring.fallback_pattern_confidence,
                why=why,
                actions=self._actions_for(plant, cause_id),
                eco_tip=plant.eco_tip,
            )
        return None
