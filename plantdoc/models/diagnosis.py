"""诊断结果模型

本模块定义每次请求生成的模型：
- SymptomMatch: 症状匹配
- Diagnosis: 单条诊断
- DiagnosisResult: 诊断结果
- LogStats: 交互统计

对外 JSON 字段沿用 camelCase（plantName、plantMatchScore 等），
eco_tip 保持下划线形式。
"""
from dataclasses import dataclass
from typing import List, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field

from plantdoc.models.common import Cause


@dataclass
class SymptomMatch:
    """症状匹配

    Attributes:
        symptom: 知识库中的症状短语
        source: plant_specific / generic / enhanced_direct / enhanced_partial
        weight: 匹配权重 [0, 1]
        match_type: exact / partial / substring / semantic（增强匹配为空）
    """

    symptom: str
    source: str
    weight: float
    match_type: str = ""


class Diagnosis(BaseModel):
    """单条诊断"""

    model_config = ConfigDict(populate_by_name=True)

    cause: Cause
    confidence: float
    why: str
    actions: List[str] = []
    eco_tip: str = ""


class DiagnosisResult(BaseModel):
    """诊断结果"""

    model_config = ConfigDict(populate_by_name=True)

    plant_name: str = Field(alias="plantName")
    plant_match_score: float = Field(alias="plantMatchScore")
    diagnoses: List[Diagnosis] = []
    timestamp: str
    original_input: Optional[str] = Field(default=None, alias="originalInput")
    detected_plant: Optional[str] = Field(default=None, alias="detectedPlant")
    detection_method: Optional[str] = Field(default=None, alias="detectionMethod")

    def to_dict(self) -> dict:
        """序列化为对外 JSON 结构"""
        return self.model_dump(by_alias=True)


class LogStats(BaseModel):
    """当日交互统计"""

    model_config = ConfigDict(populate_by_name=True)

    total_interactions: int = Field(default=0, alias="totalInteractions")
    plants_detected: Dict[str, int] = Field(default_factory=dict, alias="plantsDetected")
    average_confidence: float = Field(default=0.0, alias="averageConfidence")
    most_common_issues: Dict[str, int] = Field(default_factory=dict, alias="mostCommonIssues")
