"""诊断 API 接口

- POST /api/diagnose: 诊断
- GET /api/health: 健康检查
- GET /api/stats: 当日交互统计
"""
import logging
import os
from datetime import datetime, timezone

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse

from plantdoc import __version__
from plantdoc.services.context import AppContext

logger = logging.getLogger(__name__)

# 创建路由
router = APIRouter()


def _error(status_code: int, error: str, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": error, "message": message})


def get_context(request: Request) -> AppContext:
    """从应用状态获取上下文"""
    return request.app.state.context


@router.post("/diagnose")
async def diagnose(request: Request):
    """
    诊断植物问题

    请求体: {"text": "My snake plant has yellow mushy leaves"}

    Returns:
        DiagnosisResult（plantName、plantMatchScore、diagnoses 等）
    """
    try:
        payload = await request.json()
    except ValueError:
        return _error(400, "invalid_json", "Unable to parse request body as JSON.")

    text = payload.get("text") if isinstance(payload, dict) else None
    if not text or not isinstance(text, str):
        return _error(
            400, "invalid_input", "Provide a text field describing your plant condition."
        )

    try:
        result = get_context(request).diagnose(text)
    except Exception:
        logger.exception("诊断失败")
        return _error(500, "internal_error", "Failed to process diagnosis request.")

    return JSONResponse(status_code=200, content=result.to_dict())


@router.get("/health")
async def health():
    """健康检查"""
    return {
        "status": "healthy",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "version": __version__,
        "environment": "vercel" if os.environ.get("VERCEL") else "python",
    }


@router.get("/stats")
async def stats(request: Request):
    """当日交互统计"""
    try:
        log_stats = get_context(request).interaction_logger.get_stats()
    except Exception:
        logger.exception("统计失败")
        return _error(500, "internal_error", "Failed to retrieve statistics.")

    return JSONResponse(status_code=200, content=log_stats.model_dump(by_alias=True))
