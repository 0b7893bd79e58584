"""应用上下文

启动时显式构造一次，持有配置、诊断引擎和交互日志记录器，
由 API 与 CLI 共享，避免进程级的隐式单例。
"""
from dataclasses import dataclass
from typing import Optional

from plantdoc.core.engine import DiagnosisEngine
from plantdoc.models import DiagnosisResult
from plantdoc.services.interaction_logger import InteractionLogger
from plantdoc.utils.config import Config, load_config


@dataclass
class AppContext:
    """应用上下文"""

    config: Config
    engine: DiagnosisEngine
    interaction_logger: InteractionLogger

    def diagnose(self, text: str) -> DiagnosisResult:
        """诊断并记录交互"""
        result = self.engine.diagnose(text)
        self.interaction_logger.log_interaction(result)
        return result


def build_context(
    config_path: Optional[str] = None,
    plants_path: Optional[str] = None,
    config: Optional[Config] = None,
) -> AppContext:
    """构造应用上下文

    Args:
        config_path: 配置文件路径（config 未提供时使用）
        plants_path: 植物目录路径
        config: 已加载的配置

    Raises:
        KnowledgeBaseError: 知识库缺失或格式错误
    """
    if config is None:
        config = load_config(config_path)

    engine = DiagnosisEngine.from_files(config, plants_path)
    interaction_logger = InteractionLogger(config.logging)
    return AppContext(config=config, engine=engine, interaction_logger=interaction_logger)
