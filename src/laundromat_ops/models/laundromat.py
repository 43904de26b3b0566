"""Laundromat model: the directory listing rows touched by address repair."""

from datetime import datetime
from typing import Any

from sqlalchemy import DateTime, Double, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from laundromat_ops.models.base import Base, JSONDocument


class Laundromat(Base):
    """A laundromat listing. Only the columns used by operational scripts are mapped."""

    __tablename__ = "laundromats"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(Text, nullable=False)
    address: Mapped[str | None] = mapped_column(Text, nullable=True)
    city: Mapped[str | None] = mapped_column(String(100), nullable=True)
    state: Mapped[str | None] = mapped_column(String(50), nullable=True)
    zip: Mapped[str | None] = mapped_column(String(20), nullable=True)
    latitude: Mapped[float | None] = mapped_column(Double, nullable=True)
    longitude: Mapped[float | None] = mapped_column(Double, nullable=True)
    geocoded_address: Mapped[dict[str, Any] | None] = mapped_column(JSONDocument, nullable=True)
    geocoded_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
