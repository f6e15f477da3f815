"""
Reporting Interfaces Layer
===========================

FastAPI route handlers for analytics and heat-map endpoints.
"""

from src.reporting.interfaces.controllers import reports_router

__all__ = ["reports_router"]
