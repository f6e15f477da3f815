"""
Complaints Interfaces Layer
============================

FastAPI route handlers for lifecycle transitions and detail views.
"""

from src.complaints.interfaces.controllers import complaints_router

__all__ = ["complaints_router"]
