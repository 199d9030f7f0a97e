"""Budgeting domain services: allocated-vs-actual variance analysis."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable


@dataclass(frozen=True, slots=True)
class BudgetRecord:
    """One spending category for a month, as supplied by the data layer."""

    category_label: str
    allocated_amount: float
    spent_amount: float


@dataclass(frozen=True, slots=True)
class VarianceItem:
    """Lightweight DTO for reporting variance."""

    label: str
    allocated: float
    spent: float
    variance: float
    is_unplanned: bool


@dataclass(frozen=True, slots=True)
class VarianceReport:
    """Categorised variance for one month plus the aggregates derived from it."""

    over_budget: tuple[VarianceItem, ...]
    unplanned: tuple[VarianceItem, ...]
    under_budget: tuple[VarianceItem, ...]
    total_overspend: float
    total_unplanned: float
    total_saved: float
    net_variance: float
    total_income: float
    income_needed: float
    income_shortfall: float
    is_on_track: bool

    @property
    def total_over(self) -> float:
        """Overruns plus unplanned spend."""
        return self.total_overspend + self.total_unplanned

    @property
    def amount_over_budget(self) -> float:
        """Everything pushing the month over plan, including the income gap."""
        return self.total_overspend + self.total_unplanned + self.income_shortfall


def to_variance_item(record: BudgetRecord) -> VarianceItem:
    allocated = record.allocated_amount
    spent = record.spent_amount
    return VarianceItem(
        label=record.category_label,
        allocated=allocated,
        spent=spent,
        variance=spent - allocated,
        is_unplanned=allocated == 0 and spent > 0,
    )


def analyze(
    records: Iterable[BudgetRecord],
    total_income: float,
    total_fixed: float,
    total_budgeted: float,
) -> VarianceReport:
    """Classify every category and derive the month's variance aggregates.

    Buckets are exclusive and checked in priority order: unplanned (no
    allocation but some spend), over budget, under budget. Categories with zero
    variance that are not unplanned are left out of every bucket. Each bucket
    is ordered by its impact on the bottom line; ``sorted`` is stable, so ties
    keep input order.
    """

    over_budget: list[VarianceItem] = []
    unplanned: list[VarianceItem] = []
    under_budget: list[VarianceItem] = []

    for record in records:
        item = to_variance_item(record)
        if item.is_unplanned:
            unplanned.append(item)
        elif item.variance > 0:
            over_budget.append(item)
        elif item.variance < 0:
            under_budget.append(item)

    over_budget.sort(key=lambda item: item.variance, reverse=True)
    unplanned.sort(key=lambda item: item.spent, reverse=True)
    under_budget.sort(key=lambda item: item.variance)

    total_overspend = sum((item.variance for item in over_budget), 0.0)
    total_unplanned = sum((item.spent for item in unplanned), 0.0)
    total_saved = sum((abs(item.variance) for item in under_budget), 0.0)
    net_variance = total_overspend + total_unplanned - total_saved

    income_needed = total_fixed + total_budgeted
    income_shortfall = max(0.0, income_needed - total_income)

    return VarianceReport(
        over_budget=tuple(over_budget),
        unplanned=tuple(unplanned),
        under_budget=tuple(under_budget),
        total_overspend=total_overspend,
        total_unplanned=total_unplanned,
        total_saved=total_saved,
        net_variance=net_variance,
        total_income=total_income,
        income_needed=income_needed,
        income_shortfall=income_shortfall,
        is_on_track=net_variance <= 0 and income_shortfall == 0,
    )


def projected_savings(current_savings: float, remaining: float) -> float:
    """Projected month-end savings: current savings plus this month's remaining funds."""

    return current_savings + remaining


__all__ = [
    "BudgetRecord",
    "VarianceItem",
    "VarianceReport",
    "analyze",
    "projected_savings",
    "to_variance_item",
]
