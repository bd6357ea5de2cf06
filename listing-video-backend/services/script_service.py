"""
Narration script reads and writes, plus the approve-and-generate workflow.
"""

import logging
from typing import Optional

from sqlalchemy.orm import Session

from config import (
    DEFAULT_ACCENT,
    DEFAULT_LANGUAGE,
    DEFAULT_VOICE_ID,
    FALLBACK_SCRIPT_TEMPLATE,
    STATUS_GENERATING_VIDEO,
)
from models import Job, Property, Video, VideoScript
from services.job_service import JobService

SCRIPT_FIELDS = ("script_text", "language", "accent", "voice_id")


class ScriptValidationError(ValueError):
    """Raised when a script cannot be approved."""


def default_script_text(prop: Optional[Property]) -> str:
    """Narration used when script generation fails."""
    return FALLBACK_SCRIPT_TEMPLATE.format(
        bedrooms=getattr(prop, "bedrooms", None),
        bathrooms=getattr(prop, "bathrooms", None),
        location=getattr(prop, "location", None),
        area=getattr(prop, "area", None),
    )


def script_to_dict(script: VideoScript) -> dict:
    return {field: getattr(script, field) for field in SCRIPT_FIELDS}


class ScriptService:

    @staticmethod
    def get_stored_script(db: Session, job: Job) -> Optional[VideoScript]:
        return db.query(VideoScript).filter(VideoScript.job_id == job.id).first()

    @classmethod
    def fetch_script(cls, db: Session, job: Job) -> VideoScript:
        """The saved script, or an unsaved one carrying the default voice settings."""
        script = cls.get_stored_script(db, job)
        if script is not None:
            return script
        return VideoScript(
            job_id=job.id,
            script_text="",
            language=DEFAULT_LANGUAGE,
            accent=DEFAULT_ACCENT,
            voice_id=DEFAULT_VOICE_ID,
            is_approved=False,
        )

    @classmethod
    def save_script(cls, db: Session, job: Job, script_data: dict, is_new: bool) -> VideoScript:
        values = {field: script_data.get(field) for field in SCRIPT_FIELDS if field in script_data}
        if is_new:
            script = VideoScript(job_id=job.id, **values)
            db.add(script)
        else:
            script = cls.get_stored_script(db, job)
            for field, value in values.items():
                setattr(script, field, value)
        db.commit()
        db.refresh(script)
        return script

    @classmethod
    def upsert_script_text(cls, db: Session, job: Job, script_text: str) -> VideoScript:
        """Stores generated narration with the default voice settings."""
        data = {
            "script_text": script_text,
            "language": DEFAULT_LANGUAGE,
            "accent": DEFAULT_ACCENT,
            "voice_id": DEFAULT_VOICE_ID,
        }
        return cls.save_script(db, job, data, is_new=cls.get_stored_script(db, job) is None)

    @staticmethod
    def approve_script(db: Session, job: Job) -> None:
        db.query(VideoScript).filter(VideoScript.job_id == job.id).update({"is_approved": True})
        db.commit()

    @staticmethod
    def update_job_status(db: Session, job: Job, status: str, current_step: int) -> Job:
        return JobService.update_job_status(db, job, status, current_step)

    @staticmethod
    def create_video_record(db: Session, job: Job) -> Video:
        video = Video(job_id=job.id, status="processing")
        db.add(video)
        db.commit()
        db.refresh(video)
        return video

    @classmethod
    def approve_and_generate(cls, db: Session, job: Job, script_data: dict) -> Video:
        """
        Saves the script, approves it, moves the job to video generation and
        creates the pending video row. These are separate writes; a failure part
        way through leaves the earlier ones in place.
        """
        if not (script_data.get("script_text") or "").strip():
            raise ScriptValidationError("Please add a script before generating video")

        cls.save_script(db, job, script_data, is_new=cls.get_stored_script(db, job) is None)
        cls.approve_script(db, job)
        cls.update_job_status(db, job, STATUS_GENERATING_VIDEO, 4)
        video = cls.create_video_record(db, job)
        logging.info(f"Script approved for job {job.display_id}, video {video.id} pending")
        return video
