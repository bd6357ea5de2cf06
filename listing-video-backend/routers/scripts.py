"""
Router for the script step: generation, editing, voices and approval.
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from auth import get_current_user
from config import DEFAULT_ACCENT, DEFAULT_LANGUAGE, STATUS_GENERATING_SCRIPT
from database import get_db
from models import User
from routers.jobs import enqueue, get_user_job
from schemas import ScriptIn, ScriptOut, StepResponse, VoiceCatalogResponse
from services.errors import describe_error
from services.job_service import JobService
from services.property_service import PropertyService
from services.property_validation import validate_property
from services.routing import job_path
from services.script_service import ScriptService, ScriptValidationError
from services.voices import ACCENTS, LANGUAGES, VOICES, filter_voices
from tasks import generate_script_task, generate_video_task

router = APIRouter(tags=["scripts"])


@router.post("/jobs/{identifier}/script/generate", response_model=StepResponse)
async def generate_script(identifier: str, db: Session = Depends(get_db), user: User = Depends(get_current_user)):
    """Moves the job to script generation and queues the script stage."""
    job = get_user_job(db, identifier, user)
    prop = PropertyService.fetch_property(db, job)
    if not validate_property(prop):
        raise HTTPException(status_code=400, detail="Please add a property title before generating a script.")

    JobService.update_job_status(db, job, STATUS_GENERATING_SCRIPT, 3, detailed_status="Generating script")
    warning = enqueue(generate_script_task, job.id)
    return {
        "display_id": job.display_id,
        "status": job.status,
        "next": job_path(job, "script-generation-loading"),
        "warning": warning,
    }


@router.get("/jobs/{identifier}/script", response_model=ScriptOut)
async def get_script(identifier: str, db: Session = Depends(get_db), user: User = Depends(get_current_user)):
    job = get_user_job(db, identifier, user)
    return ScriptService.fetch_script(db, job)


@router.put("/jobs/{identifier}/script", response_model=ScriptOut)
async def save_script(
    identifier: str,
    script: ScriptIn,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    job = get_user_job(db, identifier, user)
    is_new = ScriptService.get_stored_script(db, job) is None
    try:
        return ScriptService.save_script(db, job, script.model_dump(exclude_unset=True), is_new)
    except SQLAlchemyError as e:
        db.rollback()
        raise HTTPException(status_code=500, detail=describe_error(e, "Failed to save script"))


@router.post("/jobs/{identifier}/script/approve", response_model=StepResponse)
async def approve_script(
    identifier: str,
    script: ScriptIn,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    """
    Saves and approves the script, then queues video generation.
    Counts against the user's video allowance.
    """
    job = get_user_job(db, identifier, user)
    if (user.videos_used or 0) >= (user.videos_limit or 0):
        raise HTTPException(status_code=403, detail="You have used all of your videos.")

    try:
        ScriptService.approve_and_generate(db, job, script.model_dump(exclude_unset=True))
    except ScriptValidationError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except SQLAlchemyError as e:
        db.rollback()
        raise HTTPException(status_code=500, detail=describe_error(e, "Failed to start video generation"))

    warning = enqueue(generate_video_task, job.id)
    logging.info(f"🎬 Video generation requested for job {job.display_id}")
    return {
        "display_id": job.display_id,
        "status": job.status,
        "next": job_path(job, "video-generation-loading"),
        "warning": warning,
    }


@router.get("/voices", response_model=VoiceCatalogResponse)
async def list_voices(language: Optional[str] = None, accent: Optional[str] = None):
    """The voice catalog; pass a language (and accent for English) to filter it."""
    if language is None:
        voices = VOICES
    else:
        voices = filter_voices(language, accent or DEFAULT_ACCENT)
    return {
        "voices": [voice.to_dict() for voice in voices],
        "languages": LANGUAGES,
        "accents": ACCENTS,
        "is_english": (language or DEFAULT_LANGUAGE) == DEFAULT_LANGUAGE,
    }
