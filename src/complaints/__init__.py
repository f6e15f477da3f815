"""
Complaints Module
=================

Bounded Context for complaint lifecycle tracking.

Responsibilities:
- Enforce the complaint status graph
- Keep the append-only status log that anchors SLA clock restarts
- Serve lifecycle transitions, history and per-complaint SLA views
"""

__version__ = "1.0.0"
