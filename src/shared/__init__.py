"""
Shared Kernel Module
====================

Generic infrastructure shared by every bounded context (complaints, sla,
reporting): structured logging and HTTP middleware.

DO NOT add complaint, SLA or reporting business logic to the shared kernel.
"""

__version__ = "1.0.0"
