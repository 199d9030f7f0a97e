"""Month payload definitions and loading."""

from __future__ import annotations

import json
from datetime import date
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from .services.month_summary import (
    FixedExpense,
    IncomeEntry,
    MonthlyBudget,
    MonthSummary,
    SpendItem,
    build_month_summary,
)


class MonthDataError(ValueError):
    """Raised when a month payload cannot be read or fails validation."""


class _Entry(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True, extra="ignore")


class LabelledAmountForm(_Entry):
    label: str = Field(max_length=100)
    amount: float


class BudgetLineForm(_Entry):
    category_id: int
    label: str = Field(max_length=100)
    allocated: float = 0.0


class SpendItemForm(_Entry):
    category_id: int
    description: str = Field(default="", max_length=255)
    amount: float
    spent_on: date | None = None


class MonthForm(_Entry):
    """One month of budget data as exchanged with the data layer.

    Amount signs and label uniqueness are left to upstream entry screens.
    """

    year: int = Field(ge=1900, le=9999)
    month: int = Field(ge=1, le=12)
    savings: float = 0.0
    income: list[LabelledAmountForm] = Field(default_factory=list)
    fixed_expenses: list[LabelledAmountForm] = Field(default_factory=list)
    budgets: list[BudgetLineForm] = Field(default_factory=list)
    items: list[SpendItemForm] = Field(default_factory=list)

    def to_summary(self) -> MonthSummary:
        return build_month_summary(
            year=self.year,
            month=self.month,
            income_entries=[IncomeEntry(e.label, e.amount) for e in self.income],
            fixed_expenses=[FixedExpense(e.label, e.amount) for e in self.fixed_expenses],
            budgets=[MonthlyBudget(b.category_id, b.label, b.allocated) for b in self.budgets],
            items=[SpendItem(i.category_id, i.description, i.amount, i.spent_on) for i in self.items],
            savings=self.savings,
        )


def _describe(exc: ValidationError) -> str:
    parts = []
    for error in exc.errors(include_url=False):
        loc = ".".join(str(p) for p in error.get("loc", ())) or "__root__"
        parts.append(f"{loc}: {error.get('msg', 'Invalid value')}")
    return "; ".join(parts)


def parse_month(payload: object) -> MonthSummary:
    """Validate a decoded payload and assemble its summary."""

    try:
        form = MonthForm.model_validate(payload)
    except ValidationError as exc:
        raise MonthDataError(f"Invalid month data: {_describe(exc)}") from exc
    return form.to_summary()


def load_month_file(path: Path) -> MonthSummary:
    """Read a JSON month payload from ``path``."""

    try:
        with Path(path).open("r", encoding="utf-8") as handle:
            payload = json.load(handle)
    except (OSError, json.JSONDecodeError) as exc:
        raise MonthDataError(f"Could not read month data from {path}: {exc}") from exc
    return parse_month(payload)


__all__ = [
    "BudgetLineForm",
    "LabelledAmountForm",
    "MonthDataError",
    "MonthForm",
    "SpendItemForm",
    "load_month_file",
    "parse_month",
]
