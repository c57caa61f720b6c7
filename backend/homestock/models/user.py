"""
HomeStock Backend — User SQLAlchemy Model
===========================================

What:  ORM model for the `users` table.
Why:   Every stock item belongs to a user; listing and fetching stock resolve
       that reference to the owner's name and email.
Who:   Read by StockRepository (reference checks and eager loading).

Users are managed outside this API; there are no user endpoints.
"""

from sqlalchemy import String
from sqlalchemy.orm import Mapped, mapped_column

from homestock.database import Base, generate_id


class User(Base):
    __tablename__ = "users"

    id: Mapped[str] = mapped_column(String(24), primary_key=True, default=generate_id)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    email: Mapped[str] = mapped_column(String(320), nullable=False, unique=True)

    def __repr__(self) -> str:
        return f"<User(id={self.id}, email='{self.email}')>"
