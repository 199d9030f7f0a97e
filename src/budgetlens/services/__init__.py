"""Service module exports."""

from . import (
    budgeting,
    currency_format,
    currency_registry,
    export_csv,
    month_summary,
    reports,
)

__all__ = [
    "budgeting",
    "currency_format",
    "currency_registry",
    "export_csv",
    "month_summary",
    "reports",
]
