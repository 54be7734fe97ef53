"""SQLAlchemy-backed repository implementations."""

from . import orders_repo_sql

__all__ = ["orders_repo_sql"]
