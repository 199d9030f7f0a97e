"""Assemble a month's budget records and totals from its raw entries."""

from __future__ import annotations

import calendar
from dataclasses import dataclass
from datetime import date
from typing import Iterable, Optional

from .budgeting import BudgetRecord, VarianceReport, analyze, projected_savings


@dataclass(frozen=True, slots=True)
class IncomeEntry:
    label: str
    amount: float


@dataclass(frozen=True, slots=True)
class FixedExpense:
    label: str
    amount: float


@dataclass(frozen=True, slots=True)
class MonthlyBudget:
    """Allocation for one category within the month."""

    category_id: int
    category_label: str
    allocated_amount: float


@dataclass(frozen=True, slots=True)
class SpendItem:
    """A single recorded purchase charged to a category."""

    category_id: int
    description: str
    amount: float
    spent_on: Optional[date] = None


@dataclass(frozen=True, slots=True)
class MonthSummary:
    year: int
    month: int
    income_entries: tuple[IncomeEntry, ...]
    fixed_expenses: tuple[FixedExpense, ...]
    budgets: tuple[BudgetRecord, ...]
    items: tuple[SpendItem, ...]
    total_income: float
    total_fixed: float
    total_budgeted: float
    total_spent: float
    remaining: float
    savings: float = 0.0

    @property
    def label(self) -> str:
        return f"{calendar.month_name[self.month]} {self.year}"

    @property
    def projected(self) -> float:
        return projected_savings(self.savings, self.remaining)


def build_month_summary(
    *,
    year: int,
    month: int,
    income_entries: Iterable[IncomeEntry],
    fixed_expenses: Iterable[FixedExpense],
    budgets: Iterable[MonthlyBudget],
    items: Iterable[SpendItem],
    savings: float = 0.0,
) -> MonthSummary:
    """Compose spent-per-category and month totals for display.

    Spend is attributed to a budget line by ``category_id``. Items whose
    category has no line still count toward ``total_spent``.
    """

    income = tuple(income_entries)
    fixed = tuple(fixed_expenses)
    lines = tuple(budgets)
    spend = tuple(items)

    spent_by_category: dict[int, float] = {}
    for item in spend:
        spent_by_category[item.category_id] = spent_by_category.get(item.category_id, 0.0) + item.amount

    records = tuple(
        BudgetRecord(
            category_label=line.category_label,
            allocated_amount=line.allocated_amount,
            spent_amount=spent_by_category.get(line.category_id, 0.0),
        )
        for line in lines
    )

    # Newest first; undated items sink to the end in their original order.
    dated = sorted((i for i in spend if i.spent_on is not None), key=lambda i: i.spent_on, reverse=True)
    undated = [i for i in spend if i.spent_on is None]

    total_income = sum((entry.amount for entry in income), 0.0)
    total_fixed = sum((expense.amount for expense in fixed), 0.0)
    total_budgeted = sum((line.allocated_amount for line in lines), 0.0)
    total_spent = sum((item.amount for item in spend), 0.0)

    return MonthSummary(
        year=year,
        month=month,
        income_entries=income,
        fixed_expenses=fixed,
        budgets=records,
        items=tuple(dated + undated),
        total_income=total_income,
        total_fixed=total_fixed,
        total_budgeted=total_budgeted,
        total_spent=total_spent,
        remaining=total_income - total_fixed - total_spent,
        savings=savings,
    )


def analyze_month(summary: MonthSummary) -> VarianceReport:
    """Run the variance analysis over a month summary."""

    return analyze(
        summary.budgets,
        summary.total_income,
        summary.total_fixed,
        summary.total_budgeted,
    )


__all__ = [
    "FixedExpense",
    "IncomeEntry",
    "MonthSummary",
    "MonthlyBudget",
    "SpendItem",
    "analyze_month",
    "build_month_summary",
]
