"""
Complaint Infrastructure Models
================================

SQLAlchemy ORM models for wards, complaints and their status logs.

These are the database representations of the domain entities.
They belong in the infrastructure layer, not the domain layer.
"""

from datetime import datetime, timezone
from typing import List, Optional
from uuid import uuid4

from sqlalchemy import Boolean, DateTime, Float, ForeignKey, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from src.config import ComplaintStatus
from src.infrastructure.database import Base


class WardModel(Base):
    """
    Database model for a ward (top-level region).

    Maps to the 'wards' table.
    """
    __tablename__ = "wards"

    id: Mapped[str] = mapped_column(String(64), primary_key=True, default=lambda: str(uuid4()))
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    sub_zones: Mapped[List["SubZoneModel"]] = relationship(back_populates="ward")


class SubZoneModel(Base):
    """
    Database model for a sub-zone inside a ward.

    Maps to the 'sub_zones' table.
    """
    __tablename__ = "sub_zones"

    id: Mapped[str] = mapped_column(String(64), primary_key=True, default=lambda: str(uuid4()))
    ward_id: Mapped[str] = mapped_column(ForeignKey("wards.id"), index=True, nullable=False)
    name: Mapped[str] = mapped_column(String(255), nullable=False)

    ward: Mapped[WardModel] = relationship(back_populates="sub_zones")


class ComplaintModel(Base):
    """
    Database model for Complaint entity.

    Maps to the 'complaints' table.
    """
    __tablename__ = "complaints"

    id: Mapped[str] = mapped_column(String(64), primary_key=True, default=lambda: str(uuid4()))

    # Classification
    type: Mapped[Optional[str]] = mapped_column(String(100), index=True, nullable=True)
    status: Mapped[str] = mapped_column(String(20), index=True, nullable=False, default=ComplaintStatus.REGISTERED.value)
    priority: Mapped[Optional[str]] = mapped_column(String(20), nullable=True)

    # Region
    ward_id: Mapped[Optional[str]] = mapped_column(ForeignKey("wards.id"), index=True, nullable=True)
    sub_zone_id: Mapped[Optional[str]] = mapped_column(ForeignKey("sub_zones.id"), index=True, nullable=True)

    # Ownership
    submitted_by_id: Mapped[Optional[str]] = mapped_column(String(64), index=True, nullable=True)
    assigned_to_id: Mapped[Optional[str]] = mapped_column(String(64), index=True, nullable=True)

    # Timestamps
    submitted_on: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), index=True, nullable=False, default=lambda: datetime.now(timezone.utc)
    )
    resolved_on: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    closed_on: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), index=True, nullable=True)
    deadline: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)

    rating: Mapped[Optional[float]] = mapped_column(Float, nullable=True)

    status_logs: Mapped[List["StatusLogModel"]] = relationship(
        back_populates="complaint",
        order_by="StatusLogModel.timestamp",
        cascade="all, delete-orphan",
    )


class StatusLogModel(Base):
    """
    Database model for StatusLogEntry. Append-only.

    Maps to the 'status_logs' table.
    """
    __tablename__ = "status_logs"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    complaint_id: Mapped[str] = mapped_column(ForeignKey("complaints.id"), index=True, nullable=False)
    from_status: Mapped[Optional[str]] = mapped_column(String(20), nullable=True)
    to_status: Mapped[str] = mapped_column(String(20), nullable=False)
    actor_id: Mapped[Optional[str]] = mapped_column(String(64), nullable=True)
    comment: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    timestamp: Mapped[datetime] = mapped_column(DateTime(timezone=True), index=True, nullable=False)

    complaint: Mapped[ComplaintModel] = relationship(back_populates="status_logs")
