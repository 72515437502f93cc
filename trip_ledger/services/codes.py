"""
Sequential document codes of the form PREFIX-YYYY-NNNN.

The next number is derived from the lexicographically last code
already stored for that prefix and year. Pending objects are not
visible to the query (autoflush is off), so callers allocating
several codes in one transaction must flush between allocations.
"""

from datetime import date

from sqlalchemy import select
from sqlalchemy.orm import Session


def next_sequential_code(
    db: Session,
    column,
    prefix: str,
    year: int | None = None,
) -> str:
    year = year or date.today().year
    stem = f"{prefix}-{year}-"

    last = db.execute(
        select(column)
        .where(column.like(f"{stem}%"))
        .order_by(column.desc())
        .limit(1)
    ).scalar_one_or_none()

    sequence = 1
    if last:
        try:
            sequence = int(last[len(stem):]) + 1
        except ValueError:
            sequence = 1

    return f"{stem}{sequence:04d}"
