"""
HomeStock Backend — Stock Item SQLAlchemy Model
=================================================

What:  ORM model representing the `stock_items` table.
Why:   Maps stock records to rows for type-safe database operations.
How:   Inherits from the shared DeclarativeBase; Alembic mirrors this table in
       migration 001.
Who:   Used by StockRepository for CRUD and by the response schemas.

Table Design Rationale:
    - id: 24-hex string assigned on insert, opaque to clients
    - category / unit: plain strings guarded by CHECK constraints; the API
      validates them first with the Category / Unit enums below
    - quantity: float, CHECK quantity >= 0
    - added_date: UTC timestamp set on insert, never taken from input
    - image: URL on the media host (NULL when the item has no image)
    - user: many-to-one, loaded with selectin so responses can embed
      the owner's name and email
"""

import enum
from datetime import datetime, timezone
from typing import Optional, Type

from sqlalchemy import CheckConstraint, DateTime, Float, ForeignKey, Index, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from homestock.database import Base, generate_id
from homestock.models.user import User


class Category(str, enum.Enum):
    FRUITS = "Fruits"
    VEGETABLES = "Vegetables"
    GRAINS = "Grains"
    DAIRY = "Dairy"
    OTHER = "Other"


class Unit(str, enum.Enum):
    KG = "kg"
    GRAMS = "grams"
    LITERS = "liters"
    UNITS = "units"


def _in_clause(column: str, values: Type[enum.Enum]) -> str:
    quoted = ", ".join(f"'{member.value}'" for member in values)
    return f"{column} IN ({quoted})"


class StockItem(Base):
    """
    A quantity of a named, categorized good owned by a user.

    Lifecycle:
        1. Created by POST /api/v1/stock (id and added_date assigned here)
        2. Partially updated by PATCH (image may be replaced)
        3. Deleted by DELETE; its image is removed from the media host
    """

    __tablename__ = "stock_items"

    id: Mapped[str] = mapped_column(String(24), primary_key=True, default=generate_id)

    name: Mapped[str] = mapped_column(String(255), nullable=False)

    category: Mapped[str] = mapped_column(String(20), nullable=False)

    quantity: Mapped[float] = mapped_column(Float, nullable=False)

    unit: Mapped[str] = mapped_column(String(10), nullable=False, default=Unit.UNITS.value)

    expiration_date: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), nullable=True
    )

    added_date: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )

    notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    user_id: Mapped[str] = mapped_column(
        String(24), ForeignKey("users.id"), nullable=False
    )

    image: Mapped[Optional[str]] = mapped_column(String(1024), nullable=True)

    user: Mapped[Optional[User]] = relationship(lazy="selectin")

    __table_args__ = (
        CheckConstraint(_in_clause("category", Category), name="ck_stock_items_category"),
        CheckConstraint(_in_clause("unit", Unit), name="ck_stock_items_unit"),
        CheckConstraint("quantity >= 0", name="ck_stock_items_quantity_non_negative"),
        Index("idx_stock_items_added_date", "added_date"),
    )

    def __repr__(self) -> str:
        return (
            f"<StockItem(id={self.id}, name='{self.name}', "
            f"quantity={self.quantity} {self.unit})>"
        )
