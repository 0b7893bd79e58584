"""配置加载模块"""
import logging
import os
from pathlib import Path
from typing import Optional

import yaml
from pydantic import BaseModel

logger = logging.getLogger(__name__)


class DiagnosisConfig(BaseModel):
    """诊断配置"""
    min_confidence_threshold: float = 0.3
    max_diagnoses: int = 3
    plant_match_weight: float = 0.4
    symptom_match_weight: float = 0.6
    fuzzy_threshold: float = 0.6


class UIConfig(BaseModel):
    """前端配置"""
    tone: str = "friendly-sassy"
    max_input_length: int = 500


class ScoringConfig(BaseModel):
    """打分启发式常量

    症状抽取、植物识别与病因打分使用的全部权重和阈值。
    """
    # 植物识别
    plant_name_score: float = 1.0
    alias_score: float = 0.9
    generic_fallback_score: float = 0.1
    min_alias_length: int = 3          # 别名长度需大于 2
    fuzzy_min_window_ratio: float = 0.75
    fuzzy_min_similarity: int = 80     # 单个窗口的 fuzz.ratio 下限
    # 症状抽取
    exact_weight: float = 1.0
    partial_word_weight: float = 0.3
    partial_min_word_length: int = 3
    substring_word_weight: float = 0.5
    substring_min_word_length: int = 4
    semantic_group_weight: float = 0.4
    symptom_retain_threshold: float = 0.2
    max_symptoms: int = 10
    enhanced_direct_weight: float = 1.0
    enhanced_partial_weight: float = 0.7
    # 病因打分
    symptom_baseline_count: int = 3    # 按 3 个症状归一化
    confidence_floor: float = 0.3
    no_symptom_confidence: float = 0.2
    fallback_pattern_confidence: float = 0.4
    max_why_keywords: int = 3
    max_why_symptoms: int = 2


class ServerConfig(BaseModel):
    """Web 服务配置"""
    host: str = "127.0.0.1"
    port: int = 3000


class LoggingConfig(BaseModel):
    """交互日志配置"""
    enabled: bool = False
    directory: Optional[str] = "logs"
    max_memory_logs: int = 250


class Config(BaseModel):
    """全局配置"""
    diagnosis: DiagnosisConfig = DiagnosisConfig()
    ui: UIConfig = UIConfig()
    scoring: ScoringConfig = ScoringConfig()
    server: ServerConfig = ServerConfig()
    logging: LoggingConfig = LoggingConfig()


def get_project_root() -> Path:
    """项目根目录"""
    return Path(__file__).parent.parent.parent


def load_config(config_path: Optional[str] = None) -> Config:
    """
    加载配置文件

    Args:
        config_path: 配置文件路径，默认按以下顺序查找：
                     1. 环境变量 CONFIG_PATH
                     2. 项目根目录的 config.yaml

    Returns:
        Config: 配置对象。未显式指定且默认文件不存在时返回默认配置。

    Raises:
        FileNotFoundError: 显式指定的配置文件不存在
    """
    explicit = config_path is not None

    if config_path is None:
        # 优先从环境变量读取
        config_path = os.environ.get("CONFIG_PATH")
        explicit = config_path is not None

    if config_path is None:
        config_path = get_project_root() / "config.yaml"

    config_path = Path(config_path)

    if not config_path.exists():
        if explicit:
            raise FileNotFoundError(
                f"配置文件不存在: {config_path}\n"
                f"请复制 config.yaml.example 并修改为 config.yaml"
            )
        logger.warning(f"未找到配置文件 {config_path}，使用默认配置")
        return Config()

    with open(config_path, "r", encoding="utf-8") as f:
        config_dict = yaml.safe_load(f) or {}

    return Config(**config_dict)
