"""CSV export helpers for BudgetLens."""

from __future__ import annotations

import csv
from pathlib import Path

from .budgeting import VarianceReport

HEADERS = ["bucket", "label", "allocated", "spent", "variance", "is_unplanned"]


def export_variance_csv(*, report: VarianceReport, output_path: Path) -> Path:
    """Write every classified category of ``report`` to CSV at ``output_path``.

    Rows follow report order: over_budget, unplanned, under_budget.
    Returns the path written.
    """

    output_path.parent.mkdir(parents=True, exist_ok=True)

    # Use newline='' for csv on Windows
    with output_path.open("w", newline="", encoding="utf-8") as fh:
        writer = csv.DictWriter(fh, fieldnames=HEADERS, quoting=csv.QUOTE_MINIMAL)
        writer.writeheader()
        for bucket in ("over_budget", "unplanned", "under_budget"):
            for item in getattr(report, bucket):
                writer.writerow(
                    {
                        "bucket": bucket,
                        "label": item.label,
                        "allocated": item.allocated,
                        "spent": item.spent,
                        "variance": item.variance,
                        "is_unplanned": str(item.is_unplanned).lower(),
                    }
                )

    return output_path
