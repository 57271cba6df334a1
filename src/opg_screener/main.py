"""CLI 入口模块 - 开盘缺口筛选器命令行接口。"""

import json
import sys
from dataclasses import asdict
from datetime import datetime
from pathlib import Path

import click

from opg_screener import __version__
from opg_screener.config import get_settings
from opg_screener.data.screener import ScreenerLoadError
from opg_screener.pipeline import run_screen
from opg_screener.risk.sizing import SizingError, size_position
from opg_screener.sink.store import DeliveryError
from opg_screener.utils.logging import get_logger, setup_logging


@click.group(invoke_without_command=True)
@click.option("--version", "-v", is_flag=True, help="显示版本号")
@click.pass_context
def cli(ctx: click.Context, version: bool) -> None:
    """OPG Screener - 开盘缺口交易候选筛选器。

    读取筛选器导出，计算风险受限的交易计划，并发附加新闻后输出 JSON。
    """
    if version:
        click.echo(f"opg-screener version {__version__}")
        return

    if ctx.invoked_subcommand is None:
        click.echo(ctx.get_help())


@cli.command()
@click.option(
    "--input",
    "input_path",
    type=click.Path(path_type=Path),
    default=None,
    help="筛选器导出 CSV 路径（默认取配置 INPUT_PATH）",
)
@click.option(
    "--output",
    "output_path",
    type=click.Path(path_type=Path),
    default=None,
    help="结果 JSON 路径（默认取配置 OUTPUT_PATH）",
)
@click.option(
    "--max-concurrency",
    type=click.IntRange(min=0),
    default=None,
    help="同时进行的新闻请求上限，0 表示不限制",
)
def run(input_path: Path | None, output_path: Path | None, max_concurrency: int | None) -> None:
    """执行一次完整筛选。

    读取 CSV → 过滤缺口 → 计算仓位 + 并发拉取新闻 → 写出 JSON
    """
    settings = get_settings()
    overrides: dict[str, object] = {}
    if input_path is not None:
        overrides["input_path"] = input_path
    if output_path is not None:
        overrides["output_path"] = output_path
    if max_concurrency is not None:
        overrides["max_concurrency"] = max_concurrency
    if overrides:
        settings = settings.model_copy(update=overrides)

    setup_logging(settings)
    logger = get_logger("opg_screener.main")

    logger.info(
        "starting_screen",
        input_path=str(settings.input_path),
        output_path=str(settings.output_path),
        max_concurrency=settings.max_concurrency,
        timestamp=datetime.now().isoformat(),
    )

    missing = settings.validate_for_news()
    if missing:
        logger.error(
            "missing_required_config",
            missing_keys=missing,
            hint="请在 .env 文件中配置新闻接口",
        )
        sys.exit(1)

    try:
        result = run_screen(settings)
    except ScreenerLoadError as e:
        logger.error("screener_load_failed", error=str(e))
        sys.exit(1)
    except DeliveryError as e:
        logger.error("delivery_failed", error=str(e))
        click.echo(f"Error writing output: {e}", err=True)
        sys.exit(1)
    except KeyboardInterrupt:
        logger.info("run_interrupted", message="User interrupted")
        sys.exit(0)

    click.echo(f"Finished writing output to {result.output_path}")


@cli.command()
@click.argument("gap_percent", type=float)
@click.argument("opening_price", type=float)
def size(gap_percent: float, opening_price: float) -> None:
    """按当前风控参数计算单个缺口的交易计划。

    GAP_PERCENT 为小数形式（0.15 表示 15%）。
    """
    settings = get_settings()
    try:
        plan = size_position(gap_percent, opening_price, settings.risk_policy())
    except SizingError as e:
        raise click.BadParameter(str(e), param_hint="GAP_PERCENT") from e
    click.echo(json.dumps(asdict(plan), indent=2))


@cli.command()
def status() -> None:
    """显示配置摘要。"""
    settings = get_settings()

    click.echo("=" * 50)
    click.echo("OPG Screener - Status")
    click.echo("=" * 50)
    click.echo()

    # 风控参数
    click.echo("[Risk Policy]")
    click.echo(f"   Account balance: {settings.account_balance:.2f}")
    click.echo(f"   Loss tolerance: {settings.loss_tolerance}")
    click.echo(f"   Max risk per trade: {settings.max_risk_per_trade:.2f}")
    click.echo(f"   Profit capture: {settings.profit_capture}")
    click.echo()

    # 新闻接口
    click.echo("[News API]")
    url_status = settings.seeking_alpha_url or "[--] Not configured"
    key_status = "[OK] Configured" if settings.api_key else "[--] Not configured"
    click.echo(f"   Base URL: {url_status}")
    click.echo(f"   Auth header: {settings.api_key_header or '[--] Not configured'}")
    click.echo(f"   API key: {key_status}")
    click.echo(f"   Timeout: {settings.news_timeout}s")
    click.echo(f"   Max attempts: {settings.news_max_attempts}")
    concurrency = settings.max_concurrency or "unbounded"
    click.echo(f"   Max concurrency: {concurrency}")
    click.echo()

    # 输入输出
    click.echo("[Files]")
    click.echo(f"   Input: {settings.input_path}")
    click.echo(f"   Output: {settings.output_path}")
    click.echo(f"   Log level: {settings.log_level}")
    click.echo(f"   Log format: {settings.log_format.value}")
    click.echo()

    missing = settings.validate_for_news()
    if missing:
        click.echo("[ERROR] News API configuration incomplete, missing:")
        for key in missing:
            click.echo(f"   - {key}")
    else:
        click.echo("[OK] News API configuration complete")

    click.echo()
    click.echo("=" * 50)


# 支持 python -m opg_screener.main 调用
if __name__ == "__main__":
    cli()
