"""
SLA Application Layer
======================

Application layer for SLA computation and configuration resolution.

Contains:
- Services: ConfigCache, ConfigurationResolver, SLAService
- Store interfaces: IConfigStore, ISeedProvider
- DTOs: Data transfer objects for API serialization

This layer depends on the domain layer and store interfaces,
but not on concrete infrastructure implementations.
"""

from src.sla.application.dto import (
    ConfigUpdateRequest,
    ConfigValueResponse,
    ComplaintTypeResponse,
    ComplaintTypeCatalogResponse,
    SLAEvaluationResponse,
)
from src.sla.application.services import (
    ConfigCache,
    ConfigurationResolver,
    SLAService,
    IConfigStore,
    ISeedProvider,
    evaluate_complaint,
)

__all__ = [
    # DTOs
    "ConfigUpdateRequest",
    "ConfigValueResponse",
    "ComplaintTypeResponse",
    "ComplaintTypeCatalogResponse",
    "SLAEvaluationResponse",
    # Services
    "ConfigCache",
    "ConfigurationResolver",
    "SLAService",
    "evaluate_complaint",
    # Store Interfaces
    "IConfigStore",
    "ISeedProvider",
]
