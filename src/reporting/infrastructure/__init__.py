"""
Reporting Infrastructure Layer
===============================

SQLAlchemy read queries for reports and heat-maps.
"""

from src.reporting.infrastructure.repositories import SQLAlchemyReportRepository

__all__ = ["SQLAlchemyReportRepository"]
