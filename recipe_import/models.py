"""SQLAlchemy ORM models for the base-ingredient taxonomy.

Tables:
- base_ingredients: Controlled vocabulary of canonical ingredients (read-mostly)
- ingredient_base_components: Links from a product ingredient to the base ingredients it contains
"""

from __future__ import annotations

import uuid
from datetime import datetime
from typing import Optional

from sqlalchemy import Boolean, DateTime, ForeignKey, Integer, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.sql import func

from .db import Base


def generate_uuid() -> str:
    return str(uuid.uuid4())


class BaseIngredient(Base):
    """Canonical ingredient. Only approved rows are matched against."""
    __tablename__ = "base_ingredients"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=generate_uuid)
    name: Mapped[str] = mapped_column(String(200), nullable=False, index=True)
    category: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    # Comma separated alternate names, e.g. "sucrose, cane sugar"
    common_names: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    is_approved: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())


class IngredientBaseComponent(Base):
    __tablename__ = "ingredient_base_components"
    __table_args__ = (
        UniqueConstraint("ingredient_id", "base_ingredient_id", name="uq_ingredient_base_component"),
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=generate_uuid)
    ingredient_id: Mapped[str] = mapped_column(String(36), nullable=False, index=True)
    base_ingredient_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("base_ingredients.id", ondelete="CASCADE"), nullable=False
    )
    order_index: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    is_main_component: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    created_by: Mapped[Optional[str]] = mapped_column(String(36), nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())
