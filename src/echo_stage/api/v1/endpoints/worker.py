# src/echo_stage/api/v1/endpoints/worker.py
"""Callbacks used by the audio-processing worker."""

from fastapi import APIRouter

from echo_stage.api.v1.dependencies import SessionDep, WorkerDep
from echo_stage.schemas.common import Success
from echo_stage.schemas.post import StatusUpdate, WaveformUpdate
from echo_stage.services import post_service

router = APIRouter(prefix="/worker", tags=["worker"], dependencies=[WorkerDep])


@router.put("/posts/{post_id}/waveform", response_model=Success)
def put_waveform(post_id: int, payload: WaveformUpdate, db: SessionDep) -> Success:
    post_service.update_waveform_url(db, post_id, payload.waveform_url)
    return Success()


@router.put("/posts/{post_id}/status", response_model=Success)
def put_status(post_id: int, payload: StatusUpdate, db: SessionDep) -> Success:
    post_service.update_status(db, post_id, payload.status)
    return Success()
