"""
SLA Application DTOs
=====================

Data Transfer Objects for the SLA and configuration API layer.

These Pydantic models handle serialization/deserialization and validation
for API requests and responses.
"""

from datetime import datetime
from typing import Any, List, Literal, Optional

from pydantic import BaseModel, Field

from src.sla.domain import ComplaintTypeConfig, ResolvedConfig, SLAEvaluation


# ========== Type Aliases for Literals ==========
SLAStatusStr = Literal["ON_TIME", "WARNING", "OVERDUE", "COMPLETED", "N/A"]
ConfigSourceStr = Literal["cache", "store", "seed", "default"]


# ========== Request DTOs ==========

class ConfigUpdateRequest(BaseModel):
    """Request model for writing a configuration key."""
    value: Any = Field(..., description="New value; SLA hours for a complaint-type key")
    description: Optional[str] = Field(None, max_length=500, description="Human readable note")


# ========== Response DTOs ==========

class ConfigValueResponse(BaseModel):
    """A resolved configuration value and the layer that supplied it."""
    key: str
    value: Any = None
    source: ConfigSourceStr

    @classmethod
    def from_domain(cls, resolved: ResolvedConfig) -> "ConfigValueResponse":
        return cls(key=resolved.key, value=resolved.value, source=resolved.source.value)


class ComplaintTypeResponse(BaseModel):
    """One entry of the complaint-type catalog."""
    key: str
    name: str
    sla_hours: Optional[float] = None
    priority: Optional[str] = None
    id: Optional[str] = None

    @classmethod
    def from_domain(cls, entry: ComplaintTypeConfig) -> "ComplaintTypeResponse":
        return cls(**entry.to_dict())


class ComplaintTypeCatalogResponse(BaseModel):
    """Resolved complaint-type catalog."""
    source: ConfigSourceStr
    count: int
    types: List[ComplaintTypeResponse] = Field(default_factory=list)


class SLAEvaluationResponse(BaseModel):
    """Detail-view SLA verdict for one complaint."""
    complaint_id: str
    status: SLAStatusStr = Field(..., description="Live classification")
    historical_status: SLAStatusStr = Field(..., description="Classification for history views")
    evaluated_at: datetime
    start: datetime = Field(..., description="SLA clock start (submission or latest reopen)")
    deadline: Optional[datetime] = None
    remaining_seconds: Optional[float] = Field(None, description="Negative once past the deadline")
    sla_hours: Optional[float] = None
    sla_source: Optional[ConfigSourceStr] = None

    @classmethod
    def from_domain(cls, evaluation: SLAEvaluation) -> "SLAEvaluationResponse":
        return cls(**evaluation.to_dict())
