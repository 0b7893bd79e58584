"""DAO 模块

提供数据访问对象，统一管理数据库操作
"""

from plantdoc.dao.base import BaseDAO
from plantdoc.dao.interaction_dao import InteractionDAO

__all__ = [
    "BaseDAO",
    "InteractionDAO",
]
