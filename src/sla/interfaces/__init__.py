"""
SLA Interfaces Layer
====================

Interface adapters (controllers) for configuration resolution.

This is the outermost layer - handles HTTP requests/responses and
delegates to application services.
"""

from src.sla.interfaces.controllers import config_router, get_config_resolver, get_sla_service

__all__ = ["config_router", "get_config_resolver", "get_sla_service"]
