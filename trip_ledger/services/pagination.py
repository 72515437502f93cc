"""Offset pagination over a select() statement."""

import math

from sqlalchemy import Select, func, select
from sqlalchemy.orm import Session


def paginate(db: Session, stmt: Select, page: int, limit: int) -> tuple[list, int]:
    """Return one page of scalar results plus the unpaginated total."""
    total = db.execute(
        select(func.count()).select_from(stmt.order_by(None).subquery())
    ).scalar_one()

    items = db.execute(
        stmt.offset((page - 1) * limit).limit(limit)
    ).scalars().all()
    return list(items), total


def page_count(total: int, limit: int) -> int:
    return math.ceil(total / limit) if limit else 0
