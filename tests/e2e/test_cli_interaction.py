"""CLI 端到端测试脚本

模拟用户输入，测试 CLI 是否正常工作
"""
import sys
from pathlib import Path
from unittest.mock import patch

from rich.console import Console

# 添加项目根目录到 Python 路径
sys.path.insert(0, str(Path(__file__).parent.parent.parent))

from plantdoc.cli.main import CLI
from plantdoc.services.context import build_context
from plantdoc.utils.config import Config


def make_cli(width: int = 120):
    console = Console(force_terminal=False, width=width, record=True)
    return CLI(build_context(config=Config()), console=console), console


def run_with_inputs(user_inputs):
    cli, console = make_cli()
    with patch.object(console, "input", side_effect=user_inputs):
        cli.run()
    return cli, console.export_text()


def test_cli_help_command():
    """测试 /help 命令"""
    _, output = run_with_inputs(["/help", "/exit"])

    # 验证输出
    assert "/help" in output
    assert "/stats" in output
    assert "/exit" in output


def test_cli_basic_interaction():
    """测试基本交互流程"""
    # 模拟输入：问题描述 -> 统计 -> 退出
    user_inputs = [
        "My snake plant has yellow mushy leaves",
        "/stats",
        "quit",
    ]

    cli, output = run_with_inputs(user_inputs)

    # 验证欢迎信息
    assert "Welcome to Plant Helper" in output
    # 验证诊断输出
    assert "Snake Plant" in output
    assert "Overwatering & Root Rot" in output
    assert "交互次数" in output
    assert "Thanks for using Plant Helper" in output
    assert cli.round_count == 1


def test_cli_empty_and_unknown_command():
    """测试空输入与未知命令"""
    _, output = run_with_inputs(["", "/foo", "exit"])

    assert "Please describe your plant's problem" in output
    assert "未知命令: /foo" in output


def test_cli_eof_and_interrupt():
    """测试 EOF 与 Ctrl+C 退出"""
    _, output = run_with_inputs(EOFError())
    assert "Thanks for using Plant Helper" in output

    _, output = run_with_inputs(KeyboardInterrupt())
    assert "Thanks for using Plant Helper" in output
