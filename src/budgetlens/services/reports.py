"""Reporting utilities for BudgetLens."""

from __future__ import annotations

from pathlib import Path
from typing import Protocol

import matplotlib

matplotlib.use("Agg")

import matplotlib.pyplot as plt  # noqa: E402
from matplotlib.figure import Figure  # noqa: E402
from matplotlib.ticker import FuncFormatter  # noqa: E402

from .budgeting import VarianceReport  # noqa: E402
from .currency_format import CurrencyFormatter  # noqa: E402
from .month_summary import MonthSummary  # noqa: E402

OVER_COLOR = "#C2410C"
UNPLANNED_COLOR = "#D97706"
UNDER_COLOR = "#4D7C0F"


class ReportRenderer(Protocol):
    """Protocol describing renderer behavior."""

    def render(self, figure: Figure, *, output_path: Path) -> None:  # pragma: no cover - interface
        ...


def _plural(count: int) -> str:
    return "category is" if count == 1 else "categories are"


def build_variance_lines(
    report: VarianceReport,
    formatter: CurrencyFormatter,
    *,
    preview_limit: int = 3,
) -> list[str]:
    """Render the budget analysis as plain-text lines, biggest effects first."""

    fmt = formatter.format
    lines: list[str] = []

    if report.is_on_track:
        if report.net_variance < 0:
            lines.append("You're ahead of budget!")
            lines.append(
                f"You've saved {fmt(abs(report.net_variance))} more than planned across your categories."
            )
        else:
            lines.append("You're right on track!")
        if report.under_budget:
            count = len(report.under_budget)
            lines.append(f"Great discipline! {count} {_plural(count)} under budget.")
    else:
        lines.append(f"You're {fmt(report.amount_over_budget)} over budget")
        lines.append("Here's what's affecting your projected savings:")

    if report.over_budget:
        lines.append("")
        lines.append("Budget Overruns")
        for item in report.over_budget:
            lines.append(
                f"  {item.label}: +{fmt(item.variance)} ({fmt(item.spent)} / {fmt(item.allocated)})"
            )

    if report.unplanned:
        lines.append("")
        lines.append("Unplanned Spending")
        for item in report.unplanned:
            lines.append(f"  {item.label}: {fmt(item.spent)}")

    if report.income_shortfall > 0:
        lines.append("")
        lines.append("Income Shortfall")
        lines.append(
            f"  Income is {fmt(report.income_shortfall)} less than needed to cover expenses"
        )
        lines.append(f"  Income: {fmt(report.total_income)} | Needed: {fmt(report.income_needed)}")

    if report.under_budget and not report.is_on_track:
        lines.append("")
        lines.append("Under Budget (Good!)")
        for item in report.under_budget[:preview_limit]:
            lines.append(
                f"  {item.label}: -{fmt(abs(item.variance))} ({fmt(item.spent)} / {fmt(item.allocated)})"
            )
        hidden = len(report.under_budget) - preview_limit
        if hidden > 0:
            lines.append(f"  +{hidden} more categories under budget")

    net_sign = "+" if report.net_variance > 0 else "-"
    lines.append("")
    lines.append(f"Total over budget: +{fmt(report.total_over)}")
    lines.append(f"Total under budget: -{fmt(report.total_saved)}")
    lines.append(f"Net impact: {net_sign}{fmt(abs(report.net_variance))}")
    return lines


def build_summary_cards(summary: MonthSummary, formatter: CurrencyFormatter) -> list[tuple[str, str]]:
    """Return (label, text) pairs for the month's headline figures."""

    def card(value: float) -> str:
        return formatter.format(value, absolute=True)

    remaining_text = card(summary.remaining)
    if summary.remaining < 0:
        remaining_text += " deficit"

    return [
        ("Income", card(summary.total_income)),
        ("Fixed", card(summary.total_fixed)),
        ("Projected", formatter.format(summary.projected)),
        ("Spent", card(summary.total_spent)),
        ("Remaining", remaining_text),
    ]


def build_variance_chart(report: VarianceReport, formatter: CurrencyFormatter) -> Figure:
    """Create a horizontal bar chart of every classified category.

    Overruns and unplanned spend extend right, savings extend left.
    """

    rows: list[tuple[str, float, str]] = []
    rows.extend((item.label, item.variance, OVER_COLOR) for item in report.over_budget)
    rows.extend((f"{item.label} (unplanned)", item.spent, UNPLANNED_COLOR) for item in report.unplanned)
    rows.extend((item.label, item.variance, UNDER_COLOR) for item in report.under_budget)

    fig, ax = plt.subplots(figsize=(9, max(3.0, 0.45 * len(rows) + 1.5)))

    if rows:
        labels = [label for label, _, _ in rows]
        values = [value for _, value, _ in rows]
        colors = [color for _, _, color in rows]
        positions = list(range(len(rows)))

        ax.barh(positions, values, color=colors, edgecolor="white", linewidth=1)
        ax.set_yticks(positions)
        ax.set_yticklabels(labels, fontsize=9)
        ax.invert_yaxis()
        ax.axvline(0, color="#6B7280", linewidth=0.8)
        ax.xaxis.set_major_formatter(FuncFormatter(lambda x, _pos: formatter.format_compact(x)))
        ax.grid(axis="x", alpha=0.3)

        sign = "+" if report.net_variance > 0 else "-"
        ax.set_title(
            f"Budget variance (net {sign}{formatter.format(abs(report.net_variance))})",
            fontsize=13,
            fontweight="bold",
        )
    else:
        ax.text(0.5, 0.5, "No variance to report", ha="center", va="center", fontsize=14, color="#666")
        ax.axis("off")

    fig.tight_layout()
    return fig


def export_variance_png(
    *,
    report: VarianceReport,
    formatter: CurrencyFormatter,
    output_path: Path,
    renderer: ReportRenderer | None = None,
) -> Path:
    """Render the variance chart to PNG and return the path."""

    fig = build_variance_chart(report, formatter)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    if renderer is not None:
        renderer.render(fig, output_path=output_path)
    else:
        fig.savefig(output_path, bbox_inches="tight", dpi=120)
    plt.close(fig)
    return output_path


__all__ = [
    "ReportRenderer",
    "build_summary_cards",
    "build_variance_chart",
    "build_variance_lines",
    "export_variance_png",
]
