"""
Configuration Controllers (API Routes)
=======================================

FastAPI routes for reading and writing resolved configuration.

Controllers are thin - they delegate to the process-wide
ConfigurationResolver held on the application state.
"""

from fastapi import APIRouter, Depends, Request

from src.shared.infrastructure.logging import get_logger
from src.sla.application.dto import (
    ComplaintTypeCatalogResponse,
    ComplaintTypeResponse,
    ConfigUpdateRequest,
    ConfigValueResponse,
)
from src.sla.application.services import ConfigurationResolver, SLAService

logger = get_logger(__name__)
router = APIRouter(prefix="/config", tags=["Configuration"])


# ========== Example payloads for Swagger ==========

CONFIG_VALUE_EXAMPLE = {
    "key": "WATER_SUPPLY",
    "value": 24,
    "source": "seed"
}

CATALOG_EXAMPLE = {
    "source": "store",
    "count": 1,
    "types": [
        {"key": "WATER_SUPPLY", "name": "Water Supply", "sla_hours": 24, "priority": "HIGH", "id": None}
    ]
}


# ========== Dependencies ==========

def get_config_resolver(request: Request) -> ConfigurationResolver:
    """Shared resolver built at startup."""
    return request.app.state.config_resolver


def get_sla_service(resolver: ConfigurationResolver = Depends(get_config_resolver)) -> SLAService:
    return SLAService(resolver)


# ========== Route Handlers ==========

@router.get(
    "/complaint-types",
    response_model=ComplaintTypeCatalogResponse,
    summary="Get the complaint-type catalog",
    description="""
    Resolved complaint-type catalog with SLA hours and default priority.

    Structured catalog entries come first, legacy `COMPLAINT_TYPE_<KEY>`
    records second and seeded types last; a key already listed is not
    repeated. `source` tells which layer
    answered (cache, store, seed or default).
    """,
    responses={200: {"content": {"application/json": {"example": CATALOG_EXAMPLE}}}}
)
async def get_complaint_types(resolver: ConfigurationResolver = Depends(get_config_resolver)):
    catalog, source = await resolver.resolve_catalog()
    entries = catalog.effective_entries()
    return ComplaintTypeCatalogResponse(
        source=source.value,
        count=len(entries),
        types=[ComplaintTypeResponse.from_domain(entry) for entry in entries],
    )


@router.get(
    "/{key}",
    response_model=ConfigValueResponse,
    summary="Resolve a configuration key",
    description="""
    Resolve one key through cache -> store -> seed -> default.

    For a complaint-type key the value is that type's SLA hours. A key that
    is absent everywhere resolves to `null` with source `default`.
    """,
    responses={200: {"content": {"application/json": {"example": CONFIG_VALUE_EXAMPLE}}}}
)
async def get_config_value(key: str, resolver: ConfigurationResolver = Depends(get_config_resolver)):
    resolved = await resolver.resolve(key)
    return ConfigValueResponse.from_domain(resolved)


@router.put(
    "/{key}",
    response_model=ConfigValueResponse,
    summary="Write a configuration key",
    description="""
    Write a key to the live store and invalidate its cached value along with
    the cached type catalog.

    Returns 503 when the store is unreachable; the seed is never written.
    """,
    responses={503: {"description": "Configuration store unavailable"}}
)
async def put_config_value(
    key: str,
    request: ConfigUpdateRequest,
    resolver: ConfigurationResolver = Depends(get_config_resolver)
):
    await resolver.update(key, request.value, request.description)
    resolved = await resolver.resolve(key, request.value)
    return ConfigValueResponse.from_domain(resolved)


# Export router for inclusion in main app
config_router = router
