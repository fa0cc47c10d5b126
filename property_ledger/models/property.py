"""
Property and unit models.

Owned by the property-management CRUD layer. The ledger only
reads them to join reports (rent roll, property filters).
"""

from datetime import datetime

from sqlalchemy import String, Integer, Boolean, DateTime, ForeignKey
from sqlalchemy.orm import Mapped, mapped_column, relationship

from property_ledger.models.base import Base


class Property(Base):
    __tablename__ = "properties"

    id: Mapped[int] = mapped_column(primary_key=True)
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    address: Mapped[str | None] = mapped_column(String(300), nullable=True)
    is_active: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=True
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, default=datetime.utcnow
    )

    units: Mapped[list["Unit"]] = relationship(
        back_populates="rental_property", order_by="Unit.unit_number"
    )

    def __repr__(self) -> str:
        return f"<Property {self.name}>"


class Unit(Base):
    __tablename__ = "units"

    id: Mapped[int] = mapped_column(primary_key=True)
    property_id: Mapped[int] = mapped_column(
        ForeignKey("properties.id"), nullable=False, index=True
    )
    unit_number: Mapped[str] = mapped_column(String(50), nullable=False)
    square_feet: Mapped[int | None] = mapped_column(Integer, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, default=datetime.utcnow
    )

    rental_property: Mapped["Property"] = relationship(back_populates="units")
    leases: Mapped[list["Lease"]] = relationship(back_populates="unit")

    def __repr__(self) -> str:
        return f"<Unit {self.unit_number}>"
