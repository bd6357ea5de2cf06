"""
Router for the submit, review and result steps of the wizard.
Handles job submission, job history, property review and image uploads.
"""

import os
import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, File, HTTPException, Query, UploadFile
from fastapi.responses import FileResponse
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from auth import get_current_user
from database import get_db
from models import Job, User, Video
from schemas import (
    GuardResponse,
    ImageVisibilityUpdate,
    JobCreateRequest,
    JobHistoryItem,
    JobHistoryResponse,
    JobOut,
    JobStatusResponse,
    JobSubmitResponse,
    PropertyImageOut,
    PropertyOut,
    PropertyUpdate,
    ResultResponse,
    ReviewResponse,
    VideoOut,
)
from services.errors import describe_error
from services.job_service import JobService, JobServiceError
from services.progress import job_snapshot
from services.property_service import ImageService, PropertyService
from services.property_validation import PropertyValidationError, validate_property
from services.routing import WIZARD_STEPS, guard_redirect, job_path, next_action
from services.url_validation import normalize_url, validate_url
from tasks import extract_property_task

# Create the router
router = APIRouter(tags=["jobs"])


def get_user_job(db: Session, identifier: str, user: User) -> Job:
    """Resolves a job from the URL identifier; other users' jobs look missing."""
    job = JobService.resolve_job_identifier(db, identifier)
    if not job or job.user_id != user.id:
        raise HTTPException(status_code=404, detail="Job not found.")
    return job


def enqueue(task, job_id: str) -> Optional[str]:
    """Hands a stage to the workers; returns a warning instead of failing the request."""
    try:
        task.delay(job_id)
        return None
    except Exception as e:
        logging.error(f"Failed to submit {task.name} for job {job_id}: {e}")
        return "The job was saved but processing could not be started. Please retry from the next step."


@router.post("/jobs", response_model=JobSubmitResponse)
async def submit_job(
    request: JobCreateRequest,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    """
    Creates a job for the listing URL, queues property extraction
    and returns the review page to open.
    """
    if not validate_url(request.property_url):
        raise HTTPException(status_code=400, detail="Please enter a valid property listing URL.")

    normalized_url = normalize_url(request.property_url)
    try:
        job = JobService.create_job(db, user.id, normalized_url)
    except JobServiceError as e:
        raise HTTPException(status_code=500, detail=describe_error(e.__cause__ or e, "Failed to submit URL. Please try again."))

    warning = enqueue(extract_property_task, job.id)
    logging.info(f"✨ Job {job.display_id} submitted for URL: '{normalized_url}'")
    return {
        "job_id": job.id,
        "display_id": job.display_id,
        "status": job.status,
        "next": job_path(job, "review"),
        "warning": warning,
    }


@router.get("/jobs", response_model=JobHistoryResponse)
async def list_jobs(
    search: Optional[str] = None,
    status: str = "all",
    limit: Optional[int] = Query(default=None, ge=1),
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    """The user's job history, newest first."""
    jobs = JobService.list_jobs(db, user.id, search=search, status=status, limit=limit)

    items = []
    for job in jobs:
        prop = job.properties[0] if job.properties else None
        video = job.videos[-1] if job.videos else None
        items.append({
            "job": job,
            "title": prop.title if prop else None,
            "location": prop.location if prop else None,
            "video_url": video.video_url if video else None,
            "thumbnail_url": video.thumbnail_url if video else None,
            "video_status": video.status if video else None,
            "next_action": next_action(job),
        })
    return {"jobs": items, "total": len(items)}


@router.get("/jobs/{identifier}", response_model=JobStatusResponse)
async def get_job(identifier: str, db: Session = Depends(get_db), user: User = Depends(get_current_user)):
    """Checks the status of a job; this is what status pages poll."""
    job = get_user_job(db, identifier, user)
    return {"job": job, **job_snapshot(job)}


@router.get("/jobs/{identifier}/guard", response_model=GuardResponse)
async def check_route(
    identifier: str,
    step: str,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    """Tells the UI whether the wizard step fits the job's status."""
    if step not in WIZARD_STEPS:
        raise HTTPException(status_code=400, detail=f"Unknown step: {step}")
    job = get_user_job(db, identifier, user)
    redirect = guard_redirect(job, step)
    return {"allowed": redirect is None, "redirect": redirect}


@router.get("/jobs/{identifier}/review", response_model=ReviewResponse)
async def get_review(identifier: str, db: Session = Depends(get_db), user: User = Depends(get_current_user)):
    """Loads the review step, creating a placeholder property when extraction produced none."""
    job = get_user_job(db, identifier, user)
    try:
        prop = PropertyService.get_or_create_property(db, job)
        images = ImageService.fetch_images(db, job)
    except SQLAlchemyError as e:
        db.rollback()
        raise HTTPException(status_code=500, detail=describe_error(e, "Failed to load job data"))
    return {"job": job, "property": prop, "images": images, "is_valid": validate_property(prop)}


@router.put("/jobs/{identifier}/property", response_model=PropertyOut)
async def save_property(
    identifier: str,
    changes: PropertyUpdate,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    job = get_user_job(db, identifier, user)
    prop = PropertyService.get_or_create_property(db, job)
    try:
        return PropertyService.update_property(db, prop, changes.model_dump(exclude_unset=True))
    except PropertyValidationError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except SQLAlchemyError as e:
        db.rollback()
        raise HTTPException(status_code=500, detail=describe_error(e, "Failed to save changes"))


@router.post("/jobs/{identifier}/property/visibility/{field}", response_model=PropertyOut)
async def toggle_property_visibility(
    identifier: str,
    field: str,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    job = get_user_job(db, identifier, user)
    prop = PropertyService.get_or_create_property(db, job)
    return PropertyService.toggle_visibility(db, prop, field)


@router.post("/jobs/{identifier}/images", response_model=List[PropertyImageOut])
async def upload_images(
    identifier: str,
    files: List[UploadFile] = File(...),
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    """Receives listing photos from the review page and saves them locally."""
    job = get_user_job(db, identifier, user)
    try:
        return ImageService.add_images(db, job, [(f.filename, f.file) for f in files])
    except (OSError, SQLAlchemyError) as e:
        db.rollback()
        logging.error(f"Failed to upload images for job {job.display_id}: {e}")
        raise HTTPException(status_code=500, detail="Failed to save uploaded images.")


@router.patch("/jobs/{identifier}/images/{image_id}", response_model=PropertyImageOut)
async def set_image_visibility(
    identifier: str,
    image_id: str,
    update: ImageVisibilityUpdate,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    job = get_user_job(db, identifier, user)
    image = ImageService.set_image_visibility(db, job, image_id, update.is_visible)
    if image is None:
        raise HTTPException(status_code=404, detail="Image not found.")
    return image


@router.get("/jobs/{identifier}/images/{image_id}/file")
async def get_image_file(
    identifier: str,
    image_id: str,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    """Serves an uploaded listing photo."""
    job = get_user_job(db, identifier, user)
    image = next((img for img in ImageService.fetch_images(db, job) if img.id == image_id), None)
    if image is None or not os.path.exists(image.image_url):
        raise HTTPException(status_code=404, detail="Image file not found.")
    return FileResponse(image.image_url, filename=os.path.basename(image.image_url))


@router.get("/jobs/{identifier}/result", response_model=ResultResponse)
async def get_result(identifier: str, db: Session = Depends(get_db), user: User = Depends(get_current_user)):
    """The result step: the job and its latest video, or a processing placeholder."""
    job = get_user_job(db, identifier, user)
    video = (
        db.query(Video)
        .filter(Video.job_id == job.id)
        .order_by(Video.created_at.desc())
        .first()
    )
    if video is None:
        video = VideoOut(status="processing")
    return {"job": job, "video": video}
