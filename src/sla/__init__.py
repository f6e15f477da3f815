"""
SLA Module
==========

Bounded Context for complaint SLA computation.

Responsibilities:
- Resolve per-type SLA hours and tunables (cache -> store -> seed -> default)
- Share one complaint-type catalog across reports and detail views
- Compute the authoritative deadline of a complaint
- Classify complaints as ON_TIME / WARNING / OVERDUE / COMPLETED / N/A
"""

__version__ = "1.0.0"
