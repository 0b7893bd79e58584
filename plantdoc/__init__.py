"""plantdoc: 室内植物问题诊断助手"""

__version__ = "1.0.0"
