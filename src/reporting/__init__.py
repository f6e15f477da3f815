"""
Reporting Module
================

Bounded Context for complaint analytics.

Responsibilities:
- Normalize report filters and apply role scope
- Aggregate totals, SLA compliance, trends and breakdowns
- Build region x complaint-type heat-map grids
"""

__version__ = "1.0.0"
