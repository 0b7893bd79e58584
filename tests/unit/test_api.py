"""诊断 API 单元测试"""
import asyncio
import json
from pathlib import Path
from unittest.mock import Mock
import sys

import pytest

sys.path.insert(0, str(Path(__file__).parent.parent.parent))

from plantdoc.api import diagnose as diagnose_api
from plantdoc.services.context import build_context
from plantdoc.utils.config import Config


def run_async(coro):
    """运行异步函数，兼容没有事件循环的情况"""
    try:
        loop = asyncio.get_event_loop()
    except RuntimeError:
        loop = asyncio.new_event_loop()
        asyncio.set_event_loop(loop)
    return loop.run_until_complete(coro)


def make_request(context, body=None, json_error=None):
    """构造带应用上下文的请求"""
    request = Mock()
    request.app.state.context = context

    async def _json():
        if json_error:
            raise json_error
        return body

    request.json = _json
    return request


def response_body(response):
    return json.loads(response.body)


@pytest.fixture(scope="module")
def context():
    return build_context(config=Config())


class TestDiagnoseEndpoint:
    """POST /api/diagnose"""

    def test_diagnose_success(self, context):
        """测试正常诊断"""
        request = make_request(context, {"text": "My snake plant has yellow mushy leaves"})

        response = run_async(diagnose_api.diagnose(request))
        body = response_body(response)

        assert response.status_code == 200
        assert body["plantName"] == "Snake Plant"
        assert body["detectionMethod"] == "plant_name_match"
        assert body["diagnoses"][0]["cause"]["id"] == "overwatering"

    def test_diagnose_logs_interaction(self, context):
        """测试诊断后记录交互"""
        before = len(context.interaction_logger.memory_logs)
        request = make_request(context, {"text": "my pothos is pale"})

        run_async(diagnose_api.diagnose(request))

        assert len(context.interaction_logger.memory_logs) == before + 1

    @pytest.mark.parametrize("body", [{}, {"text": ""}, {"text": 42}, ["text"], None])
    def test_invalid_input(self, context, body):
        """测试缺少 text 字段"""
        response = run_async(diagnose_api.diagnose(make_request(context, body)))

        assert response.status_code == 400
        assert response_body(response)["error"] == "invalid_input"

    def test_invalid_json(self, context):
        """测试请求体不是 JSON"""
        request = make_request(context, json_error=json.JSONDecodeError("Expecting value", "{", 0))

        response = run_async(diagnose_api.diagnose(request))

        assert response.status_code == 400
        assert response_body(response)["error"] == "invalid_json"

    def test_internal_error(self):
        """测试诊断异常"""
        broken = Mock()
        broken.diagnose.side_effect = RuntimeError("boom")

        response = run_async(diagnose_api.diagnose(make_request(broken, {"text": "yellow"})))

        assert response.status_code == 500
        assert response_body(response) == {
            "error": "internal_error",
            "message": "Failed to process diagnosis request.",
        }


class TestHealthAndStats:
    """GET /api/health 与 GET /api/stats"""

    def test_health(self, monkeypatch):
        """测试健康检查"""
        monkeypatch.delenv("VERCEL", raising=False)

        body = run_async(diagnose_api.health())

        assert body["status"] == "healthy"
        assert body["environment"] == "python"
        assert body["version"]

    def test_stats(self, context):
        """测试当日统计"""
        run_async(diagnose_api.diagnose(make_request(context, {"text": "my tulsi is dry"})))

        response = run_async(diagnose_api.stats(make_request(context)))
        body = response_body(response)

        assert response.status_code == 200
        assert body["totalInteractions"] >= 1
        assert "Tulsi" in body["plantsDetected"]
        assert set(body) == {
            "totalInteractions", "plantsDetected", "averageConfidence", "mostCommonIssues",
        }


class TestCreateApp:
    """应用构造"""

    def test_routes_registered(self, context):
        """测试路由注册"""
        from plantdoc.api.main import create_app

        app = create_app(context)

        assert app.url_path_for("diagnose") == "/api/diagnose"
        assert app.url_path_for("health") == "/api/health"
        assert app.url_path_for("stats") == "/api/stats"
        assert app.url_path_for("root") == "/"
        assert app.state.context is context


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
