"""
SLA Domain Layer
================

Domain layer for SLA computation.

Contains:
- Entities: SLAEvaluation
- Value Objects: ResolvedConfig, ConfigCacheEntry, ComplaintTypeConfig, TypeCatalog
- Domain Services: Stateless business logic (SLACalculator)

This layer has no dependencies on infrastructure - pure Python business logic.
"""

from src.sla.domain.entities import SLAEvaluation
from src.sla.domain.value_objects import (
    SLACalculator,
    ResolvedConfig,
    ConfigCacheEntry,
    ComplaintTypeConfig,
    TypeCatalog,
    coerce_sla_hours,
)

__all__ = [
    # Entities
    "SLAEvaluation",
    # Value Objects & Services
    "SLACalculator",
    "ResolvedConfig",
    "ConfigCacheEntry",
    "ComplaintTypeConfig",
    "TypeCatalog",
    "coerce_sla_hours",
]
