"""Read access to precomputed tag popularity."""
from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.orm import Session

from echo_stage.models.pulse import PulseStat
from echo_stage.schemas.pulse import PulseStats, PulseTagStat


def get_pulse_stats(session: Session, city: str, period: str) -> PulseStats:
    """Return tag statistics for ``city`` over ``period``, most popular first."""
    rows = session.execute(
        select(PulseStat)
        .where(PulseStat.city == city, PulseStat.period == period)
        .order_by(PulseStat.count.desc(), PulseStat.tag.asc())
    ).scalars()
    return PulseStats(
        city=city,
        period=period,
        tags=[PulseTagStat.model_validate(row) for row in rows],
    )
