# tasks.py

import logging
import traceback
from typing import Optional

from celery import Celery

from database import SessionLocal
from models import Job, User, Video

from config import (
    CELERY_BROKER_URL,
    CELERY_RESULT_BACKEND,
    CELERY_TASK_ALWAYS_EAGER,
    MOCK_THUMBNAIL_URL,
    MOCK_VIDEO_DURATION,
    MOCK_VIDEO_FILE_SIZE,
    MOCK_VIDEO_URL,
    STATUS_COMPLETED,
    STATUS_FAILED,
    STATUS_PROGRESS,
    STATUS_REVIEWING,
    STATUS_SCRIPT_READY,
)
from services.job_service import JobService
from services.property_service import EDITABLE_FIELDS, PropertyService
from services.script_service import ScriptService, default_script_text, script_to_dict
from services.webhook_service import WebhookResponse, WebhookService

celery = Celery('tasks', broker=CELERY_BROKER_URL, backend=CELERY_RESULT_BACKEND)
celery.conf.task_always_eager = CELERY_TASK_ALWAYS_EAGER
logging.basicConfig(level=logging.INFO, format="%(asctime)s - %(levelname)s - %(message)s")


def _record_response(job: Job, stage: str, result: WebhookResponse) -> None:
    responses = dict(job.webhook_response or {})
    responses[stage] = {"success": result.success, "data": result.data, "error": result.error}
    job.webhook_response = responses


def _load_job(db, job_id: str) -> Optional[Job]:
    job = JobService.get_job_by_job_id(db, job_id)
    if job is None:
        logging.error(f"❌ Worker could not find job {job_id}")
    return job


def _mark_failed(db, job_id: str, error: Exception) -> None:
    db.rollback()
    job = JobService.get_job_by_job_id(db, job_id)
    if job:
        JobService.update_job_status(
            db, job, STATUS_FAILED,
            error_details=str(error),
            detailed_status="Processing failed",
            estimated_completion=None,
        )


@celery.task
def extract_property_task(job_id: str):
    """
    Pulls listing data for a new job and moves it to the review step.
    A failed extraction still lands on review, where the placeholder property can be edited.
    """
    db = SessionLocal()

    try:
        job = _load_job(db, job_id)
        if job is None:
            return
        logging.info(f"🏠 Worker received extraction for job {job.display_id}: {job.property_url}")

        result = WebhookService.call_property_extraction(db, job.id, job.property_url, job.user_id)
        _record_response(job, "property-extraction", result)

        if result.success:
            property_data = (result.data or {}).get("property_data") if isinstance(result.data, dict) else None
            if property_data:
                PropertyService.save_extracted_property(db, job, property_data)
            JobService.update_job_status(
                db, job, STATUS_REVIEWING, 2,
                progress_percentage=STATUS_PROGRESS[STATUS_REVIEWING],
                detailed_status="Property data extracted",
                error_details=None,
            )
            logging.info(f"✅ Worker finished extraction for job {job.display_id}")
        else:
            JobService.update_job_status(
                db, job, STATUS_REVIEWING, 2,
                progress_percentage=STATUS_PROGRESS[STATUS_REVIEWING],
                detailed_status="Property extraction failed, please review the details manually",
                error_details=result.error,
            )
            logging.warning(f"⚠️ Extraction failed for job {job.display_id}: {result.error}")

    except Exception as e:
        logging.error(f"❌ Worker failed extraction for job {job_id}. Error: {e}")
        traceback.print_exc()
        _mark_failed(db, job_id, e)
    finally:
        db.close()


@celery.task
def generate_script_task(job_id: str):
    """Generates narration from the reviewed property and marks the script ready."""
    db = SessionLocal()

    try:
        job = _load_job(db, job_id)
        if job is None:
            return
        logging.info(f"📝 Worker received script generation for job {job.display_id}")

        prop = PropertyService.fetch_property(db, job)
        property_data = {field: getattr(prop, field) for field in EDITABLE_FIELDS} if prop else {}

        result = WebhookService.call_script_generation(db, job.id, property_data, job.user_id)
        _record_response(job, "script-generation", result)

        script_text = None
        if result.success and isinstance(result.data, dict):
            script_text = result.data.get("script") or result.data.get("script_text")

        if script_text:
            detailed_status = "Script generated"
        else:
            logging.warning(f"⚠️ Script generation failed for job {job.display_id}: {result.error}")
            script_text = default_script_text(prop)
            detailed_status = "Script generated with default content"

        ScriptService.upsert_script_text(db, job, script_text)
        JobService.update_job_status(
            db, job, STATUS_SCRIPT_READY, 3,
            progress_percentage=STATUS_PROGRESS[STATUS_SCRIPT_READY],
            detailed_status=detailed_status,
            error_details=None,
        )
        logging.info(f"✅ Worker finished script for job {job.display_id}")

    except Exception as e:
        logging.error(f"❌ Worker failed script generation for job {job_id}. Error: {e}")
        traceback.print_exc()
        _mark_failed(db, job_id, e)
    finally:
        db.close()


@celery.task
def generate_video_task(job_id: str):
    """Produces the video for an approved script and completes the job."""
    db = SessionLocal()

    try:
        job = _load_job(db, job_id)
        if job is None:
            return
        logging.info(f"🎬 Worker received video generation for job {job.display_id}")

        script = ScriptService.fetch_script(db, job)
        result = WebhookService.call_video_generation(db, job.id, script_to_dict(script), job.user_id)
        _record_response(job, "video-generation", result)

        data = result.data if result.success and isinstance(result.data, dict) else {}
        if not result.success:
            logging.warning(f"⚠️ Video generation failed for job {job.display_id}: {result.error}")

        video = (
            db.query(Video)
            .filter(Video.job_id == job.id)
            .order_by(Video.created_at.desc())
            .first()
        )
        if video is None:
            video = Video(job_id=job.id)
            db.add(video)

        video.status = "completed"
        video.video_url = data.get("video_url") or MOCK_VIDEO_URL
        video.thumbnail_url = data.get("thumbnail_url") or MOCK_THUMBNAIL_URL
        video.duration = data.get("duration") or MOCK_VIDEO_DURATION
        video.file_size = data.get("file_size") or MOCK_VIDEO_FILE_SIZE

        if job.user_id:
            user = db.query(User).filter(User.id == job.user_id).first()
            if user:
                user.videos_used = (user.videos_used or 0) + 1

        JobService.update_job_status(
            db, job, STATUS_COMPLETED, 4,
            progress_percentage=100,
            detailed_status="Video ready",
            estimated_completion=None,
            error_details=None,
        )
        logging.info(f"✅ Worker finished job {job.display_id}. Video at: {video.video_url}")

    except Exception as e:
        logging.error(f"❌ Worker failed video generation for job {job_id}. Error: {e}")
        traceback.print_exc()
        _mark_failed(db, job_id, e)
    finally:
        db.close()
