"""诊断结果渲染

CLI 使用的 Rich 渲染逻辑。所有方法返回 Rich 可渲染对象，由调用方决定如何输出。
"""
from rich.console import Console, Group
from rich.markdown import Markdown
from rich.panel import Panel
from rich.text import Text

from plantdoc.models import Diagnosis, DiagnosisResult, LogStats


def format_confidence(confidence: float) -> str:
    """置信度格式化为百分比"""
    return f"{round(confidence * 100)}%"


class DiagnosisRenderer:
    """诊断结果渲染器"""

    LOGO = """
██████╗ ██╗      █████╗ ███╗   ██╗████████╗██████╗  ██████╗  ██████╗
██╔══██╗██║     ██╔══██╗████╗  ██║╚══██╔══╝██╔══██╗██╔═══██╗██╔════╝
██████╔╝██║     ███████║██╔██╗ ██║   ██║   ██║  ██║██║   ██║██║
██╔═══╝ ██║     ██╔══██║██║╚██╗██║   ██║   ██║  ██║██║   ██║██║
██║     ███████╗██║  ██║██║ ╚████║   ██║   ██████╔╝╚██████╔╝╚██████╗
╚═╝     ╚══════╝╚═╝  ╚═╝╚═╝  ╚═══╝   ╚═╝   ╚═════╝  ╚═════╝  ╚═════╝
"""

    def __init__(self, console: Console = None):
        """初始化渲染器

        Args:
            console: Rich Console 实例
        """
        self.console = console or Console()

    def get_logo(self) -> str:
        return self.LOGO.strip()

    def render_result(self, result: DiagnosisResult) -> Panel:
        """渲染诊断结果

        Args:
            result: 诊断结果

        Returns:
            Rich Panel 对象
        """
        parts = []

        header = Text()
        header.append("Plant Detected: ", style="bold")
        header.append(f"{result.plant_name}\n", style="green bold")
        header.append("Match Score: ", style="bold")
        header.append(f"{format_confidence(result.plant_match_score)}\n")
        header.append("Detection Method: ", style="bold")
        header.append(f"{result.detection_method or '-'}", style="dim")
        parts.append(header)
        parts.append(Text(""))

        if not result.diagnoses:
            parts.append(Text(
                "No specific diagnoses found. Try providing more details about "
                "your plant's symptoms.",
                style="yellow",
            ))
        else:
            parts.append(Text(f"Diagnoses ({len(result.diagnoses)} found)", style="bold"))
            parts.append(Text(""))
            for i, diagnosis in enumerate(result.diagnoses, 1):
                parts.append(self.render_diagnosis(i, diagnosis))
                parts.append(Text(""))

        parts.append(Text(
            "These are suggestions based on your description. If symptoms persist, "
            "consider consulting a local plant expert.",
            style="italic dim",
        ))

        return Panel(
            Group(*parts),
            title="诊断结果",
            title_align="left",
            border_style="green",
        )

    def render_diagnosis(self, idx: int, diagnosis: Diagnosis) -> Group:
        """渲染单条诊断"""
        title = Text()
        title.append(f"{idx}. ", style="dim")
        title.append(self._confidence_bar(diagnosis.confidence))
        title.append(f" {diagnosis.cause.label}", style="bold yellow")
        title.append(f" ({format_confidence(diagnosis.confidence)})", style="bold")

        lines = [title, Text(f"   Why: {diagnosis.why}")]
        if diagnosis.actions:
            lines.append(Text("   Actions:", style="dim"))
            for i, action in enumerate(diagnosis.actions, 1):
                lines.append(Text(f"   {i}) {action}"))
        if diagnosis.eco_tip:
            lines.append(Text(f"   Eco Tip: {diagnosis.eco_tip}", style="green"))
        return Group(*lines)

    def render_stats(self, stats: LogStats) -> Panel:
        """渲染当日统计"""
        text = Text()
        text.append("交互次数 ", style="dim")
        text.append(str(stats.total_interactions), style="bold")
        text.append("  │  ", style="dim")
        text.append("平均置信度 ", style="dim")
        text.append(format_confidence(stats.average_confidence), style="bold")

        parts = [text]
        if stats.plants_detected:
            parts.append(Text(""))
            parts.append(Text("识别的植物", style="bold"))
            for name, count in sorted(stats.plants_detected.items(), key=lambda x: -x[1]):
                parts.append(Text(f"  {name}: {count}"))
        if stats.most_common_issues:
            parts.append(Text(""))
            parts.append(Text("常见问题", style="bold"))
            for cause_id, count in sorted(stats.most_common_issues.items(), key=lambda x: -x[1]):
                parts.append(Text(f"  {cause_id}: {count}"))

        return Panel(Group(*parts), title="今日统计", title_align="left", border_style="blue")

    def render_help(self) -> Panel:
        """渲染帮助信息"""
        help_text = """
**可用命令：**
- `/help` - 显示此帮助
- `/stats` - 查看今日统计
- `/exit` 或 `quit` - 退出程序

直接描述植物的症状即可诊断，例如 `My snake plant has yellow mushy leaves`。
        """
        return Panel(
            Markdown(help_text.strip()),
            title="帮助",
            title_align="left",
            border_style="blue",
        )

    @staticmethod
    def _confidence_bar(conf: float) -> Text:
        """渲染置信度条"""
        bar_filled = int(conf * 10)
        bar_empty = 10 - bar_filled

        bar = Text()
        bar.append("█" * bar_filled, style="green")
        bar.append("░" * bar_empty, style="dim")
        return bar
