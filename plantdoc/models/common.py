"""知识库领域模型

本模块定义知识库中的静态数据模型：
- Cause: 病因
- PlantRecord: 植物记录
"""
from typing import List, Dict
from pydantic import BaseModel, ConfigDict, Field

GENERIC_PLANT_ID = "generic"


class Cause(BaseModel):
    """病因"""

    model_config = ConfigDict(frozen=True)

    id: str
    label: str
    keywords: List[str] = []


class PlantRecord(BaseModel):
    """植物记录

    知识库中的一条植物数据。catalog 顺序即匹配优先级，
    因此知识库始终以列表形式保存记录。
    """

    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    aliases: List[str] = []
    symptoms: List[str] = []
    causes: List[Cause] = []
    solutions: Dict[str, List[str]] = Field(default_factory=dict)
    eco_tip: str = ""

    @property
    def is_generic(self) -> bool:
        return self.id == GENERIC_PLANT_ID
