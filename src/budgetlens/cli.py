"""Command line entry points for BudgetLens."""

from __future__ import annotations

from pathlib import Path

import click

from .config import BaseConfig
from .context import AppContext, create_app_context
from .forms import MonthDataError, load_month_file
from .logging_config import get_logger, setup_logging
from .services.currency_registry import list_supported
from .services.export_csv import export_variance_csv
from .services.month_summary import analyze_month
from .services.reports import build_summary_cards, build_variance_lines, export_variance_png

logger = get_logger(__name__)


@click.group()
@click.pass_context
def cli(ctx: click.Context) -> None:
    """Budget variance reports in your chosen currency."""

    config = BaseConfig()
    setup_logging(config)
    ctx.obj = create_app_context(config)


@cli.command("currencies")
@click.pass_obj
def list_currencies(app: AppContext) -> None:
    """List supported currencies; the active one is starred."""

    active = app.formatter.get_active()
    for currency in list_supported():
        marker = "*" if currency.code == active.code else " "
        click.echo(
            f"{marker} {currency.code:<4} {currency.symbol:<4} {currency.display_name} ({currency.locale_tag})"
        )


@cli.command("currency")
@click.argument("code", required=False)
@click.pass_obj
def currency(app: AppContext, code: str | None) -> None:
    """Show the active currency, or select CODE."""

    if code is not None:
        selected = app.formatter.select(code)
        if selected.code != code:
            click.echo(f"Unknown currency '{code}'; using {selected.code}.")
    active = app.formatter.get_active()
    click.echo(f"Active currency: {active.code} ({active.display_name}) {active.symbol}")


@cli.command("analyze")
@click.argument("month_file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--csv", "csv_path", type=click.Path(dir_okay=False, path_type=Path), help="Write the variance rows to CSV.")
@click.option("--chart", "chart_path", type=click.Path(dir_okay=False, path_type=Path), help="Write a variance chart PNG.")
@click.option("--preview-limit", default=3, show_default=True, type=click.IntRange(min=0), help="Under-budget rows to list.")
@click.pass_obj
def analyze_command(
    app: AppContext,
    month_file: Path,
    csv_path: Path | None,
    chart_path: Path | None,
    preview_limit: int,
) -> None:
    """Print the budget analysis for MONTH_FILE (JSON)."""

    try:
        summary = load_month_file(month_file)
    except MonthDataError as exc:
        raise click.ClickException(str(exc)) from exc

    report = analyze_month(summary)
    formatter = app.formatter
    logger.info(
        "Variance report generated",
        extra={
            "month": summary.label,
            "currency": formatter.get_active().code,
            "on_track": report.is_on_track,
        },
    )

    click.echo(summary.label)
    for label, text in build_summary_cards(summary, formatter):
        click.echo(f"  {label:<10} {text}")
    click.echo("")
    for line in build_variance_lines(report, formatter, preview_limit=preview_limit):
        click.echo(line)

    if csv_path is not None:
        written = export_variance_csv(report=report, output_path=csv_path)
        click.echo(f"CSV written: {written}")
    if chart_path is not None:
        written = export_variance_png(report=report, formatter=formatter, output_path=chart_path)
        click.echo(f"Chart written: {written}")


def main() -> None:  # pragma: no cover - console script
    cli()
