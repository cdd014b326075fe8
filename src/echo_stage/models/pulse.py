# src/echo_stage/models/pulse.py
"""Precomputed tag popularity per city and period."""

from datetime import datetime

from sqlalchemy import DateTime, Float, Index, Integer, Text
from sqlalchemy.orm import Mapped, mapped_column

from echo_stage.db.session import Base
from echo_stage.db.time import utcnow


class PulseStat(Base):
    """Share of posts carrying ``tag`` in ``city`` over ``period`` (e.g. "7d")."""

    __tablename__ = "pulse_stat"
    __table_args__ = (Index("ix_pulse_stat_city_period", "city", "period"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    city: Mapped[str] = mapped_column(Text, nullable=False)
    period: Mapped[str] = mapped_column(Text, nullable=False)
    tag: Mapped[str] = mapped_column(Text, nullable=False)
    count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    percentage: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    calculated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow
    )
