"""数据模型模块

组织结构：
- common: 知识库模型 (PlantRecord, Cause)
- diagnosis: 请求级模型 (SymptomMatch, Diagnosis, DiagnosisResult, LogStats)
"""
# 知识库模型
from plantdoc.models.common import (
    GENERIC_PLANT_ID,
    Cause,
    PlantRecord,
)

# 请求级模型
from plantdoc.models.diagnosis import (
    SymptomMatch,
    Diagnosis,
    DiagnosisResult,
    LogStats,
)

__all__ = [
    # 知识库模型
    "GENERIC_PLANT_ID",
    "Cause",
    "PlantRecord",
    # 请求级模型
    "SymptomMatch",
    "Diagnosis",
    "DiagnosisResult",
    "LogStats",
]
