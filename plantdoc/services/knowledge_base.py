"""知识库服务

加载植物目录（JSON），构建模糊检索索引，并提供单写者的追加操作。

知识库以不可变快照（KnowledgeBase）的形式对外提供：诊断请求在开始时
读取一次快照引用，追加植物时构建新快照后整体替换，因此并发诊断不会
读到重建到一半的索引。
"""
import json
import logging
import os
import threading
from pathlib import Path
from typing import List, Optional, Sequence, Tuple

from pydantic import ValidationError
from thefuzz import fuzz

from plantdoc.models import GENERIC_PLANT_ID, PlantRecord
from plantdoc.utils.text_utils import FUZZY_IGNORED_WORDS, symptom_vocabulary, tokenize

logger = logging.getLogger(__name__)


class KnowledgeBaseError(ValueError):
    """知识库缺失或格式错误"""


def _content_tokens(text: str) -> List[str]:
    return [t for t in tokenize(text) if t not in FUZZY_IGNORED_WORDS]


def get_default_plants_path() -> str:
    """获取默认植物目录路径

    优先从环境变量 PLANTS_PATH 读取，否则使用随包发布的 plantdoc/data/plants.json
    """
    plants_path = os.environ.get("PLANTS_PATH")
    if plants_path:
        return plants_path
    return str(Path(__file__).parent.parent / "data" / "plants.json")


class FuzzyIndex:
    """植物名称/别名的模糊检索索引

    检索键为非 generic 植物的名称和别名（小写）。检索键与输入都切分为词元，
    并去掉停用词和通用词（检索键全部被去掉时保留原词元）。输入中的症状词
    （语义分组、常见模式以及目录中所有症状和病因关键词）也不参与比较，
    只剩下可能是植物名称的词元。

    查询时用与检索键词数相同的连续词窗口逐一比较，距离 = 1 - fuzz.ratio / 100。

    Attributes:
        min_window_ratio: 窗口长度不足检索键长度该比例时跳过
        min_similarity: 窗口与检索键的 fuzz.ratio 低于该值时不算候选
    """

    def __init__(
        self,
        plants: Sequence[PlantRecord],
        min_window_ratio: float = 0.75,
        min_similarity: int = 80,
    ):
        self.min_window_ratio = min_window_ratio
        self.min_similarity = min_similarity
        self._entries: List[Tuple[str, int, PlantRecord]] = []

        phrases = []
        for plant in plants:
            phrases.extend(plant.symptoms)
            for cause in plant.causes:
                phrases.extend(cause.keywords)
        self.vocabulary = symptom_vocabulary(phrases)

        for plant in plants:
            if plant.is_generic:
                continue
            for key in [plant.name, *plant.aliases]:
                key_tokens = _content_tokens(key) or tokenize(key)
                key_lower = " ".join(key_tokens)
                if len(key_lower) < 2:
                    continue
                self._entries.append((key_lower, len(key_tokens), plant))

    def __len__(self) -> int:
        return len(self._entries)

    def candidate_tokens(self, text: str) -> List[str]:
        """参与比较的输入词元"""
        return [t for t in _content_tokens(text) if t not in self.vocabulary]

    def search(self, text: str) -> Optional[Tuple[PlantRecord, float]]:
        """检索最佳匹配

        Args:
            text: 用户输入

        Returns:
            (植物, 距离)，无候选时返回 None。距离相同时保留 catalog 顺序靠前者。
        """
        tokens = self.candidate_tokens(text)
        if not tokens:
            return None

        best: Optional[Tuple[PlantRecord, float]] = None
        for key, word_count, plant in self._entries:
            if word_count == 0 or word_count > len(tokens):
                continue
            for start in range(len(tokens) - word_count + 1):
                window = " ".join(tokens[start:start + word_count])
                if len(window) < len(key) * self.min_window_ratio:
                    continue
                similarity = fuzz.ratio(window, key)
                if similarity < self.min_similarity:
                    continue
                distance = 1 - similarity / 100
                if best is None or distance < best[1]:
                    best = (plant, distance)
        return best


class KnowledgeBase:
    """知识库快照（只读）

    Attributes:
        plants: 按 catalog 顺序排列的植物记录
        generic: id 为 generic 的兜底记录
        fuzzy_index: 名称/别名模糊检索索引
    """

    def __init__(
        self,
        plants: Sequence[PlantRecord],
        fuzzy_min_window_ratio: float = 0.75,
        fuzzy_min_similarity: int = 80,
    ):
        self.plants: Tuple[PlantRecord, ...] = tuple(plants)
        self.generic = self._validate(self.plants)
        self.fuzzy_index = FuzzyIndex(self.plants, fuzzy_min_window_ratio, fuzzy_min_similarity)

    @staticmethod
    def _validate(plants: Sequence[PlantRecord]) -> PlantRecord:
        """校验唯一 id 与唯一 generic 记录，返回 generic 记录"""
        seen = set()
        for plant in plants:
            if plant.id in seen:
                raise KnowledgeBaseError(f"植物 id 重复: {plant.id}")
            seen.add(plant.id)

        generics = [p for p in plants if p.id == GENERIC_PLANT_ID]
        if len(generics) != 1:
            raise KnowledgeBaseError(
                f"知识库必须包含且仅包含一条 id 为 '{GENERIC_PLANT_ID}' 的记录，"
                f"实际 {len(generics)} 条"
            )
        return generics[0]

    def get(self, plant_id: str) -> Optional[PlantRecord]:
        for plant in self.plants:
            if plant.id == plant_id:
                return plant
        return None

    def with_plant(self, plant: PlantRecord) -> "KnowledgeBase":
        """返回追加了一条记录的新快照（重建索引）"""
        return KnowledgeBase(
            [*self.plants, plant],
            fuzzy_min_window_ratio=self.fuzzy_index.min_window_ratio,
            fuzzy_min_similarity=self.fuzzy_index.min_similarity,
        )

    def __len__(self) -> int:
        return len(self.plants)


def parse_plants(data) -> List[PlantRecord]:
    """将 JSON 数据解析为植物记录列表

    Raises:
        KnowledgeBaseError: 数据结构不合法
    """
    if not isinstance(data, list):
        raise KnowledgeBaseError("植物目录必须是 JSON 数组")
    try:
        return [PlantRecord.model_validate(item) for item in data]
    except ValidationError as e:
        raise KnowledgeBaseError(f"植物目录格式错误: {e}") from e


def load_plants(plants_path: Optional[str] = None) -> List[PlantRecord]:
    """读取植物目录文件

    Args:
        plants_path: 文件路径，默认 plantdoc/data/plants.json（可由 PLANTS_PATH 覆盖）

    Raises:
        KnowledgeBaseError: 文件不存在或无法解析
    """
    if plants_path is None:
        plants_path = get_default_plants_path()

    path = Path(plants_path)
    if not path.exists():
        raise KnowledgeBaseError(f"植物目录文件不存在: {path}")

    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except json.JSONDecodeError as e:
        raise KnowledgeBaseError(f"植物目录无法解析: {path}: {e}") from e

    return parse_plants(data)


def save_plants(plants: Sequence[PlantRecord], plants_path: str) -> None:
    """写回植物目录文件"""
    data = [plant.model_dump() for plant in plants]
    with open(plants_path, "w", encoding="utf-8") as f:
        json.dump(data, f, ensure_ascii=False, indent=2)
        f.write("\n")


class KnowledgeBaseStore:
    """知识库持有者

    持有当前快照引用，串行化追加操作（单写者锁）。
    """

    def __init__(
        self,
        knowledge_base: KnowledgeBase,
        plants_path: Optional[str] = None,
    ):
        """初始化

        Args:
            knowledge_base: 初始快照
            plants_path: 目录文件路径，设置后追加植物会写回文件
        """
        self._snapshot = knowledge_base
        self.plants_path = plants_path
        self._write_lock = threading.Lock()

    @classmethod
    def from_file(
        cls,
        plants_path: Optional[str] = None,
        fuzzy_min_window_ratio: float = 0.75,
        fuzzy_min_similarity: int = 80,
    ) -> "KnowledgeBaseStore":
        """从目录文件加载（启动时调用，失败即抛出 KnowledgeBaseError）"""
        if plants_path is None:
            plants_path = get_default_plants_path()
        plants = load_plants(plants_path)
        knowledge_base = KnowledgeBase(plants, fuzzy_min_window_ratio, fuzzy_min_similarity)
        logger.info(f"已加载知识库: {len(knowledge_base)} 种植物 ({plants_path})")
        return cls(knowledge_base, plants_path)

    @property
    def snapshot(self) -> KnowledgeBase:
        """当前快照"""
        return self._snapshot

    def add_plant(self, plant: PlantRecord) -> KnowledgeBase:
        """追加植物并重建模糊索引

        Raises:
            KnowledgeBaseError: id 重复或试图追加第二条 generic 记录
        """
        with self._write_lock:
            new_snapshot = self._snapshot.with_plant(plant)
            if self.plants_path:
                save_plants(new_snapshot.plants, self.plants_path)
            self._snapshot = new_snapshot
            logger.info(f"已追加植物: {plant.id}（共 {len(new_snapshot)} 种）")
            return new_snapshot

    def rebuild_index(self) -> KnowledgeBase:
        """用当前记录重建模糊索引"""
        with self._write_lock:
            current = self._snapshot
            self._snapshot = KnowledgeBase(
                current.plants,
                fuzzy_min_window_ratio=current.fuzzy_index.min_window_ratio,
                fuzzy_min_similarity=current.fuzzy_index.min_similarity,
            )
            return self._snapshot
