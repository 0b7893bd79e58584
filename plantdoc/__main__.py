"""plantdoc 命令行入口

使用方式：
    python -m plantdoc cli                    # 启动交互式 CLI 诊断
    python -m plantdoc diagnose "文本"         # 单次诊断
    python -m plantdoc api                    # 启动 FastAPI 服务
    python -m plantdoc stats                  # 查看今日交互统计
    python -m plantdoc add-plant plant.json   # 向植物目录追加一条记录
    python -m plantdoc init-logs              # 初始化交互日志数据库
"""
import json
import sys

import click

from plantdoc.services.knowledge_base import KnowledgeBaseError, parse_plants


def _build_context(config: str, plants: str):
    from plantdoc.services.context import build_context

    try:
        return build_context(config, plants)
    except (KnowledgeBaseError, FileNotFoundError) as e:
        click.echo(f"[ERROR] 启动失败: {e}", err=True)
        sys.exit(1)


config_option = click.option(
    "--config",
    default=None,
    help="配置文件路径（默认: config.yaml）",
)
plants_option = click.option(
    "--plants",
    default=None,
    help="植物目录路径（默认: plantdoc/data/plants.json）",
)


@click.group()
def main():
    """室内植物问题诊断助手"""
    pass


@main.command("cli")
@config_option
@plants_option
def interactive_cli(config: str, plants: str):
    """启动交互式命令行诊断"""
    from plantdoc.cli.main import CLI

    CLI(_build_context(config, plants)).run()


@main.command()
@click.argument("text")
@click.option("--json", "as_json", is_flag=True, help="输出 JSON")
@config_option
@plants_option
def diagnose(text: str, as_json: bool, config: str, plants: str):
    """诊断一段症状描述"""
    context = _build_context(config, plants)
    result = context.diagnose(text)

    if as_json:
        click.echo(json.dumps(result.to_dict(), ensure_ascii=False, indent=2))
        return

    from rich.console import Console
    from plantdoc.cli.rendering import DiagnosisRenderer

    console = Console()
    console.print(DiagnosisRenderer(console).render_result(result))


@main.command("api")
@click.option(
    "--host",
    default=None,
    help="服务监听地址（默认取配置 server.host）",
)
@click.option(
    "--port",
    default=None,
    type=int,
    help="服务监听端口（默认取配置 server.port）",
)
@config_option
@plants_option
def serve(host: str, port: int, config: str, plants: str):
    """启动 FastAPI 服务"""
    import uvicorn
    from plantdoc.api.main import create_app

    context = _build_context(config, plants)
    host = host or context.config.server.host
    port = port or context.config.server.port

    click.echo(f"正在启动服务: http://{host}:{port}")
    click.echo(f"API 文档: http://{host}:{port}/docs")
    uvicorn.run(create_app(context), host=host, port=port)


@main.command()
@config_option
@plants_option
def stats(config: str, plants: str):
    """查看今日交互统计"""
    context = _build_context(config, plants)
    click.echo(json.dumps(
        context.interaction_logger.get_stats().model_dump(by_alias=True),
        ensure_ascii=False,
        indent=2,
    ))


@main.command("add-plant")
@click.argument("plant_file", type=click.Path(exists=True))
@config_option
@plants_option
def add_plant(plant_file: str, config: str, plants: str):
    """向植物目录追加一条记录（JSON 对象）"""
    context = _build_context(config, plants)

    try:
        with open(plant_file, "r", encoding="utf-8") as f:
            data = json.load(f)
        [plant] = parse_plants([data])
        context.engine.add_plant(plant)
    except (json.JSONDecodeError, KnowledgeBaseError, OSError) as e:
        click.echo(f"\n[ERROR] 追加失败: {e}", err=True)
        sys.exit(1)

    click.echo(f"\n[OK] 已追加植物: {plant.id}（共 {len(context.engine.knowledge_base)} 种）")


@main.command("init-logs")
@config_option
@click.option(
    "--db",
    default=None,
    help="数据库文件路径（默认: <logging.directory>/interactions.db）",
)
def init_logs(config: str, db: str):
    """初始化交互日志数据库"""
    from plantdoc.dao.base import get_db_path
    from plantdoc.scripts.init_db import init_database
    from plantdoc.utils.config import load_config

    if db is None:
        try:
            db = get_db_path(load_config(config).logging.directory)
        except FileNotFoundError as e:
            click.echo(f"[ERROR] 启动失败: {e}", err=True)
            sys.exit(1)
    if db is None:
        click.echo("[ERROR] 配置中 logging.directory 为空，请使用 --db 指定路径", err=True)
        sys.exit(1)

    try:
        init_database(db)
        click.echo("\n[OK] 数据库初始化成功")
    except Exception as e:
        click.echo(f"\n[ERROR] 初始化失败: {e}", err=True)
        sys.exit(1)


if __name__ == "__main__":
    main()
