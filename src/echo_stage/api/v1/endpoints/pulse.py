# src/echo_stage/api/v1/endpoints/pulse.py
"""Tag popularity endpoint."""

from typing import Annotated

from fastapi import APIRouter, Query

from echo_stage.api.v1.dependencies import SessionDep, ViewerDep
from echo_stage.schemas.pulse import PulseStats
from echo_stage.services.pulse import get_pulse_stats

router = APIRouter(prefix="/pulse", tags=["pulse"])


@router.get("", response_model=PulseStats)
def read_pulse(
    db: SessionDep,
    ctx: ViewerDep,
    city: Annotated[str, Query(min_length=1)],
    period: Annotated[str, Query(min_length=1)],
) -> PulseStats:
    """Return tag statistics for a city over a period such as ``7d``."""
    return get_pulse_stats(db, city, period)
