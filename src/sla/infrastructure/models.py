"""
SLA Infrastructure Models
==========================

SQLAlchemy ORM models for the configuration store.

``complaint_types`` is the structured type catalog; ``system_config`` holds
tunables and the legacy ``COMPLAINT_TYPE_<KEY>`` JSON records.
"""

from datetime import datetime, timezone
from typing import Optional
from uuid import uuid4

from sqlalchemy import Boolean, DateTime, Float, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from src.infrastructure.database import Base


class ComplaintTypeModel(Base):
    """
    Database model for one complaint type.

    Maps to the 'complaint_types' table.
    """
    __tablename__ = "complaint_types"

    id: Mapped[str] = mapped_column(String(64), primary_key=True, default=lambda: str(uuid4()))
    key: Mapped[str] = mapped_column(String(100), unique=True, index=True, nullable=False)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    sla_hours: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    priority: Mapped[Optional[str]] = mapped_column(String(20), nullable=True)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)


class SystemConfigModel(Base):
    """
    Database model for a keyed configuration value.

    Maps to the 'system_config' table. Values are stored as text; JSON
    documents are stored serialized.
    """
    __tablename__ = "system_config"

    key: Mapped[str] = mapped_column(String(150), primary_key=True)
    value: Mapped[str] = mapped_column(Text, nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )
