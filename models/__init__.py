"""
SQLAlchemy ORM models for database tables.

Models:
    base: Base declarative class, shared column types and ETLStatus
    etl_run: Job run tracking and metrics
    smartphone: Destination rows written by the batch job

Usage:
    from models import Smartphone, ETLRun
    from models.base import ETLStatus

Relationships:
    - ETLRun → Smartphone (one-to-many tracking)
"""

from models.base import Base, ETLStatus
from models.etl_run import ETLRun
from models.smartphone import Smartphone

__all__ = [
    "Base",
    "ETLStatus",
    "ETLRun",
    "Smartphone",
]
