"""CLI 主程序

使用 Rich 库美化 CLI 输出。

运行方式：
    python -m plantdoc cli
"""
from rich.console import Console
from rich.padding import Padding
from rich.text import Text

from plantdoc.cli.rendering import DiagnosisRenderer
from plantdoc.services.context import AppContext, build_context

EXIT_WORDS = ("quit", "exit", "/exit")


class CLI:
    """交互式诊断 CLI"""

    def __init__(self, context: AppContext = None, console: Console = None):
        """初始化

        Args:
            context: 应用上下文，缺省时按默认配置构造
            console: Rich Console 实例
        """
        self.console = console or Console()
        self.context = context or build_context()
        self.renderer = DiagnosisRenderer(self.console)
        self.round_count: int = 0

    def _print_indented(self, content, num_spaces: int = 2) -> None:
        """打印带缩进的 Rich 对象"""
        self.console.print(Padding(content, (0, 0, 0, num_spaces)))

    def run(self):
        """运行 CLI 主循环"""
        self.console.print()
        self.console.print(Text(self.renderer.get_logo(), style="bold green"))
        self.console.print(Text("Welcome to Plant Helper! Describe your plant problem.", style="bold green"))
        self.console.print(Text("可用命令: /help /stats /exit", style="dim"))
        self.console.print()

        try:
            while True:
                try:
                    user_input = self.console.input("[bold green]🌱 > [/bold green]").strip()
                except EOFError:
                    self._goodbye()
                    break

                if not user_input:
                    self.console.print(Text(
                        "Please describe your plant's problem or type \"quit\" to exit.",
                        style="yellow",
                    ))
                    continue

                if user_input.lower() in EXIT_WORDS:
                    self._goodbye()
                    break

                if user_input.startswith("/"):
                    self._handle_command(user_input)
                    continue

                self._handle_diagnosis(user_input)

        except KeyboardInterrupt:
            self._goodbye()

    def _goodbye(self) -> None:
        self.console.print(Text("\nThanks for using Plant Helper! Keep your plants happy!\n", style="blue"))

    def _handle_command(self, command: str) -> None:
        """处理命令"""
        command = command.lower().strip()

        if command == "/help":
            self.console.print(self.renderer.render_help())
        elif command == "/stats":
            self.console.print(self.renderer.render_stats(self.context.interaction_logger.get_stats()))
        else:
            text = Text()
            text.append(f"未知命令: {command}", style="red")
            text.append("，输入 /help 查看可用命令")
            self.console.print(text)

    def _handle_diagnosis(self, user_message: str) -> None:
        """处理诊断请求"""
        self.round_count += 1
        self.console.print()
        self._print_indented(Text("正在分析...", style="dim"))

        try:
            result = self.context.diagnose(user_message)
        except Exception as e:
            self._print_indented(Text(f"处理失败: {str(e)}", style="red"))
            return

        self.console.print()
        self._print_indented(self.renderer.render_result(result))

