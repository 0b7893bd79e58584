"""CauseScorer 单元测试"""
from pathlib import Path
import sys

import pytest

sys.path.insert(0, str(Path(__file__).parent.parent.parent))

from plantdoc.core.cause_scorer import GENERIC_ACTIONS, CauseScorer
from plantdoc.models import Cause, PlantRecord, SymptomMatch
from plantdoc.utils.config import DiagnosisConfig


def symptom(name="yellow leaves", weight=1.0, source="plant_specific"):
    return SymptomMatch(symptom=name, source=source, weight=weight)


@pytest.fixture
def scorer():
    return CauseScorer()


@pytest.fixture
def snake_plant():
    return PlantRecord(
        id="snake_plant",
        name="Snake Plant",
        symptoms=["mushy leaves"],
        causes=[
            Cause(id="overwatering", label="Overwatering", keywords=["mushy", "yellow leaves", "root rot"]),
            Cause(id="low_light", label="Low Light", keywords=["leaning", "pale"]),
            Cause(id="pests", label="Pests", keywords=["webbing"]),
        ],
        solutions={
            "overwatering": ["Let the soil dry out"],
            "watering_issues": ["Check soil moisture"],
        },
        eco_tip="Water less.",
    )


class TestCalculateConfidence:
    """置信度公式"""

    def test_formula(self, scorer):
        """测试: 关键词与症状加权"""
        confidence = scorer.calculate_confidence(
            ["mushy", "yellow leaves"], 4, [symptom(), symptom(weight=0.5)], [symptom()]
        )

        # 0.4 * 2/4 + 0.6 * (1.5/3 + 1/3) / 2
        assert confidence == pytest.approx(0.45)

    def test_floor(self, scorer):
        """测试: 下限 0.3"""
        assert scorer.calculate_confidence([], 5, [symptom(weight=0.3)], []) == 0.3

    def test_cap(self, scorer):
        """测试: 上限 1.0"""
        scorer = CauseScorer(DiagnosisConfig(plant_match_weight=1.0, symptom_match_weight=1.0))
        symptoms = [symptom() for _ in range(3)]

        assert scorer.calculate_confidence(["a"], 1, symptoms, symptoms) == 1.0

    def test_symptom_score_baseline(self, scorer):
        """测试: 症状数不足 3 时按 3 归一化"""
        assert scorer.symptom_score([]) == 0.0
        assert scorer.symptom_score([symptom()]) == pytest.approx(1 / 3)
        assert scorer.symptom_score([symptom() for _ in range(5)]) == 1.0


class TestScore:
    """病因打分"""

    def test_no_symptoms(self, scorer, snake_plant):
        """测试: 无症状时返回症状不明确"""
        diagnoses = scorer.score(snake_plant, [], [], "hello there")

        assert len(diagnoses) == 1
        assert diagnoses[0].cause.id == "no_symptoms"
        assert diagnoses[0].confidence == 0.2

    def test_ranking(self, scorer, snake_plant):
        """测试: 关键词命中多的病因排在前面"""
        text = "my snake plant has yellow mushy leaves and is leaning"
        diagnoses = scorer.score(snake_plant, [symptom()], [symptom("mushy leaves")], text)

        assert [d.cause.id for d in diagnoses] == ["overwatering", "low_light"]
        assert diagnoses[0].confidence > diagnoses[1].confidence
        assert diagnoses[0].actions == ["Let the soil dry out"]
        assert diagnoses[0].eco_tip == "Water less."

    def test_unmatched_causes_skipped(self, scorer, snake_plant):
        """测试: 非 generic 植物跳过未命中的病因"""
        diagnoses = scorer.score(snake_plant, [symptom()], [], "so mushy")

        assert [d.cause.id for d in diagnoses] == ["overwatering"]

    def test_generic_keeps_all_causes(self, scorer):
        """测试: generic 植物保留未命中的病因（置信度下限）"""
        generic = PlantRecord(
            id="generic",
            name="Generic Houseplant",
            causes=[
                Cause(id="a", label="A", keywords=["x1"]),
                Cause(id="b", label="B", keywords=["x2"]),
            ],
        )

        diagnoses = scorer.score(generic, [symptom(weight=0.3)], [], "crispy")

        assert {d.cause.id for d in diagnoses} == {"a", "b"}
        assert all(d.confidence == 0.3 for d in diagnoses)
        assert all("general plant care patterns" in d.why for d in diagnoses)

    def test_max_diagnoses(self, snake_plant):
        """测试: 最多输出 max_diagnoses 条"""
        scorer = CauseScorer(DiagnosisConfig(max_diagnoses=1))

        diagnoses = scorer.score(
            snake_plant, [symptom()], [], "mushy yellow leaves, leaning, webbing"
        )

        assert len(diagnoses) == 1
        assert diagnoses[0].cause.id == "pests"

    def test_min_confidence_threshold(self, snake_plant):
        """测试: 低于阈值的病因不输出"""
        scorer = CauseScorer(DiagnosisConfig(min_confidence_threshold=0.5))

        diagnoses = scorer.score(snake_plant, [symptom()], [], "leaning")

        assert all(d.confidence >= 0.5 for d in diagnoses)

    def test_why_lists_keywords_and_symptoms(self, scorer, snake_plant):
        """测试: 解释文本"""
        diagnoses = scorer.score(
            snake_plant, [symptom()], [symptom("mushy leaves")], "so mushy"
        )

        assert diagnoses[0].why == (
            "Detected keywords: 'mushy' and symptoms: 'mushy leaves' suggesting overwatering."
        )

    def test_partial_keyword_match(self, scorer, snake_plant):
        """测试: 关键词的部分词命中"""
        diagnoses = scorer.score(snake_plant, [symptom()], [], "the root is brown")

        assert diagnoses[0].cause.id == "overwatering"
        assert "'root rot'" in diagnoses[0].why


class TestActions:
    """处理建议兜底链"""

    def test_cause_solution(self, scorer, snake_plant):
        """测试: 病因对应方案"""
        assert scorer._actions_for(snake_plant, "overwatering") == ["Let the soil dry out"]

    def test_watering_issues_fallback(self, scorer, snake_plant):
        """测试: 回退到 watering_issues"""
        assert scorer._actions_for(snake_plant, "low_light") == ["Check soil moisture"]

    def test_generic_actions(self, scorer):
        """测试: 回退到通用检查清单"""
        plant = PlantRecord(id="bare", name="Bare")

        assert scorer._actions_for(plant, "anything") == GENERIC_ACTIONS


class TestFallbackPatterns:
    """常见模式兜底"""

    def test_first_matching_pattern(self, scorer, snake_plant):
        """测试: 按顺序首个命中的模式"""
        # 没有病因关键词命中，但包含 dry 和 brown
        diagnoses = scorer.score(snake_plant, [symptom()], [], "dry and brown")

        assert len(diagnoses) == 1
        assert diagnoses[0].cause.id == "underwatering"
        assert diagnoses[0].confidence == 0.4
        assert diagnoses[0].why == (
            "Detected common symptoms like 'brown', 'dry' suggesting underwatering & dehydration."
        )
        assert diagnoses[0].actions == ["Check soil moisture"]

    def test_pattern_without_common_words(self, scorer, snake_plant):
        """测试: 未出现常见症状词时的解释"""
        diagnoses = scorer.score(snake_plant, [symptom()], [], "tiny insects")

        assert diagnoses[0].cause.id == "pests"
        assert "Based on the plant type and common issues" in diagnoses[0].why

    def test_no_pattern(self, scorer, snake_plant):
        """测试: 无任何模式时返回空列表"""
        assert scorer.score(snake_plant, [symptom()], [], "quux") == []


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
