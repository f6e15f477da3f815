"""
SLA Infrastructure Layer
=========================

Infrastructure implementations for configuration resolution:
- Models: SQLAlchemy ORM models (complaint_types, system_config)
- Repositories: live config store and seed providers
"""

from src.sla.infrastructure.models import ComplaintTypeModel, SystemConfigModel
from src.sla.infrastructure.repositories import (
    SQLAlchemyConfigStore,
    StaticSeedProvider,
    YAMLSeedProvider,
)

__all__ = [
    "ComplaintTypeModel",
    "SystemConfigModel",
    "SQLAlchemyConfigStore",
    "StaticSeedProvider",
    "YAMLSeedProvider",
]
