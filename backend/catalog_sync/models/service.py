"""Service ORM - one row per catalog entry in the relational store.

Invariants:
    - id is an integer autoincrement surrogate key, local to this store
    - name is unique and non-nullable (the cross-store identity)
    - details holds the serialized detail blob, regenerated on every write
    - base_price is Numeric(10, 2) and never negative

Design Decisions:
    - Flat text columns kept alongside the details blob: older consumers read either,
      the repository keeps them consistent
    - updated_at maintained by onupdate: the store records when sync last touched a row
"""

from datetime import datetime, timezone
from decimal import Decimal

from sqlalchemy import DateTime, Integer, Numeric, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from catalog_sync.core.domain_types import ON_REQUEST
from catalog_sync.db.base import Base


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Service(Base):
    """Persisted service offering."""
    __tablename__ = "services"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(200), nullable=False, unique=True)
    description: Mapped[str] = mapped_column(Text, nullable=False, default="")
    base_price: Mapped[Decimal] = mapped_column(
        Numeric(10, 2), nullable=False, default=Decimal("0.00"),
    )
    capture_duration: Mapped[str] = mapped_column(
        Text, nullable=False, default=ON_REQUEST,
    )
    treatment_duration: Mapped[str] = mapped_column(
        Text, nullable=False, default=ON_REQUEST,
    )
    deliverables: Mapped[str] = mapped_column(Text, nullable=False, default="")
    possible_add_ons: Mapped[str] = mapped_column(Text, nullable=False, default="")
    travel_fee: Mapped[str] = mapped_column(Text, nullable=False, default=ON_REQUEST)
    details: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=_utcnow,
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=_utcnow, onupdate=_utcnow,
    )
