"""FastAPI 主应用"""
import logging
from pathlib import Path
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles
from fastapi.responses import FileResponse

from plantdoc import __version__
from plantdoc.api.diagnose import router as diagnose_router
from plantdoc.services.context import AppContext, build_context

# 配置日志
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)

# 静态文件目录
static_dir = Path(__file__).parent.parent / "web" / "static"


def create_app(context: Optional[AppContext] = None) -> FastAPI:
    """
    创建 FastAPI 应用

    Args:
        context: 应用上下文，缺省时按默认配置和植物目录构造

    Returns:
        FastAPI 应用
    """
    if context is None:
        context = build_context()

    app = FastAPI(
        title="Plant Helper API",
        description="基于启发式文本匹配的室内植物问题诊断服务",
        version=__version__,
    )
    app.state.context = context

    # 配置 CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # 注册路由
    app.include_router(diagnose_router, prefix="/api", tags=["diagnose"])

    # 静态文件服务
    if static_dir.exists():
        app.mount("/static", StaticFiles(directory=str(static_dir)), name="static")

    @app.get("/")
    async def root():
        """根路径 - 返回 Web 页面"""
        index_file = static_dir / "index.html"
        if index_file.exists():
            return FileResponse(str(index_file))
        return {
            "message": "Plant Helper API",
            "version": __version__,
            "docs": "/docs",
        }

    return app
