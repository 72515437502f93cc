"""Shared FastAPI dependencies."""

from fastapi import Header

from trip_ledger.config import get_settings


def get_actor(x_user_id: str | None = Header(default=None)) -> str:
    """The acting user, from the X-User-Id header."""
    return x_user_id or get_settings().SYSTEM_ACTOR
