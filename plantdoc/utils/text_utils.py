"""文本处理工具

诊断核心共用的分词与词表。
"""
import re
from typing import FrozenSet, Iterable, List

# 语义分组：用于关联措辞不同但含义相近的症状描述
SEMANTIC_GROUPS = {
    "color_problems": ["yellow", "brown", "black", "white", "pale", "faded", "discolored"],
    "texture_problems": ["crispy", "mushy", "soft", "hard", "rough", "smooth", "sticky"],
    "shape_problems": ["drooping", "wilting", "curled", "twisted", "deformed", "stunted"],
    "growth_problems": ["not growing", "slow growth", "small", "tiny", "weak", "thin"],
    "water_problems": ["dry", "wet", "soggy", "thirsty", "parched", "waterlogged"],
    "light_problems": ["pale", "stretching", "leggy", "spindly", "weak", "thin"],
    "pest_problems": ["holes", "spots", "bugs", "webs", "sticky", "powdery"],
}

# 常见模式：按顺序检测，首个命中的生效
FALLBACK_PATTERNS = {
    "underwatering": ["dry", "crispy", "brown", "wilting", "drooping", "thirsty"],
    "overwatering": ["yellow", "mushy", "wet", "soggy", "dropping", "falling"],
    "light_issues": ["pale", "stretching", "weak", "small", "not growing", "leggy"],
    "pests": ["bugs", "holes", "spots", "webs", "tiny", "insects"],
}

# 模糊匹配时忽略的词：停用词以及不区分植物种类的通用词
FUZZY_IGNORED_WORDS = frozenset([
    "a", "an", "and", "are", "as", "at", "be", "been", "but", "by", "can",
    "do", "does", "for", "from", "getting", "has", "have", "her", "his", "i",
    "i'm", "in", "is", "it", "it's", "its", "just", "me", "my", "not", "of",
    "on", "or", "our", "she", "so", "some", "that", "the", "their", "them",
    "there", "they", "this", "to", "too", "very", "was", "what", "when",
    "why", "with", "you", "your",
    "plant", "plants", "houseplant", "houseplants", "leaf", "leaves",
    "stem", "stems", "pot", "soil", "tree",
])

_TOKEN_PATTERN = re.compile(r"[a-z0-9][a-z0-9'\-]*")


def split_words(text: str) -> List[str]:
    """按空白切分（保留标点）"""
    return text.split()


def tokenize(text: str) -> List[str]:
    """切分为小写词元（字母、数字、撇号、连字符）"""
    return _TOKEN_PATTERN.findall(text.lower())


def symptom_vocabulary(phrases: Iterable[str]) -> FrozenSet[str]:
    """症状词表：语义分组、常见模式以及给定短语中的全部词元"""
    words = set()
    for keywords in [*SEMANTIC_GROUPS.values(), *FALLBACK_PATTERNS.values()]:
        for keyword in keywords:
            words.update(tokenize(keyword))
    for phrase in phrases:
        words.update(tokenize(phrase))
    return frozenset(words)


def words_covered(target_words: List[str], input_words: List[str]) -> bool:
    """每个目标词都等于或包含于某个输入词"""
    if not target_words:
        return False
    return all(
        any(word == target or target in word for word in input_words)
        for target in target_words
    )


def count_semantic_groups(symptom: str, text: str) -> int:
    """统计症状与输入同时命中的语义分组数量"""
    matches = 0
    for keywords in SEMANTIC_GROUPS.values():
        symptom_in_group = any(keyword in symptom for keyword in keywords)
        input_in_group = any(keyword in text for keyword in keywords)
        if symptom_in_group and input_in_group:
            matches += 1
    return matches
