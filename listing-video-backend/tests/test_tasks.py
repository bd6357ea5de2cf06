# listing-video-backend/tests/test_tasks.py

import pytest

import tasks
from config import MOCK_VIDEO_URL
from models import Property, Video, VideoScript
from services.job_service import JobService
from services.script_service import ScriptService
from services.webhook_service import WebhookResponse, WebhookService


def test_extraction_moves_job_to_review(db, job, no_outbound_http):
    """
    Tests that the extraction worker stores the property and hands the job to step 2.
    """
    tasks.extract_property_task(job.id)
    db.expire_all()

    assert job.status == "reviewing"
    assert job.current_step == 2
    assert job.progress_percentage == 40
    assert job.error_details is None
    assert job.webhook_response["property-extraction"]["success"] is True

    prop = db.query(Property).filter(Property.job_id == job.id).one()
    assert prop.title == f"Property at {job.property_url}"
    assert prop.price == 500000
    assert prop.is_visible["title"] is True


def test_failed_extraction_still_lands_on_review(db, job, monkeypatch):
    monkeypatch.setattr(
        WebhookService, "call_property_extraction",
        classmethod(lambda cls, *args: WebhookResponse(success=False, error="Scraper offline")),
    )

    tasks.extract_property_task(job.id)
    db.expire_all()

    assert job.status == "reviewing"
    assert job.error_details == "Scraper offline"
    assert db.query(Property).count() == 0


def test_unexpected_error_marks_job_failed(db, job, monkeypatch):
    def explode(*args, **kwargs):
        raise RuntimeError("disk full")

    monkeypatch.setattr(tasks.PropertyService, "save_extracted_property", explode)

    tasks.extract_property_task(job.id)
    db.expire_all()

    assert job.status == "failed"
    assert job.error_details == "disk full"
    assert job.detailed_status == "Processing failed"


def test_missing_job_is_ignored(db):
    tasks.extract_property_task("00000000-0000-4000-8000-000000000000")


def test_script_task_stores_generated_script(db, job, no_outbound_http):
    db.add(Property(job_id=job.id, title="Lake House", bedrooms=4, bathrooms=2, location="Tahoe", area=2100, price=900000))
    JobService.update_job_status(db, job, "generating_script", 3)

    tasks.generate_script_task(job.id)
    db.expire_all()

    assert job.status == "script_ready"
    assert job.current_step == 3
    script = db.query(VideoScript).filter(VideoScript.job_id == job.id).one()
    assert "4-bedroom, 2-bathroom home located at Tahoe" in script.script_text
    assert script.voice_id == "en-us-female-1"
    assert script.is_approved is False


def test_script_task_falls_back_to_default_script(db, job, monkeypatch):
    db.add(Property(job_id=job.id, title="Lake House", bedrooms=4, bathrooms=2, location="Tahoe", area=2100))
    db.commit()
    monkeypatch.setattr(
        WebhookService, "call_script_generation",
        classmethod(lambda cls, *args: WebhookResponse(success=False, error="Model busy")),
    )

    tasks.generate_script_task(job.id)
    db.expire_all()

    assert job.status == "script_ready"
    assert job.error_details is None
    assert job.detailed_status == "Script generated with default content"
    script = db.query(VideoScript).filter(VideoScript.job_id == job.id).one()
    assert script.script_text.startswith("Welcome to this stunning 4-bedroom, 2-bathroom home located in Tahoe.")


def test_video_task_completes_job_and_counts_usage(db, job, user, no_outbound_http):
    ScriptService.approve_and_generate(db, job, {"script_text": "Tour the home"})

    tasks.generate_video_task(job.id)
    db.expire_all()

    assert job.status == "completed"
    assert job.current_step == 4
    assert job.progress_percentage == 100
    video = db.query(Video).filter(Video.job_id == job.id).one()
    assert video.status == "completed"
    assert video.video_url == MOCK_VIDEO_URL
    assert video.file_size == 13000000
    assert user.videos_used == 1


@pytest.mark.parametrize("payload", [{}, {"video_url": None}])
def test_video_task_fills_missing_fields_with_placeholders(db, job, monkeypatch, payload):
    ScriptService.approve_and_generate(db, job, {"script_text": "Tour the home"})
    monkeypatch.setattr(
        WebhookService, "call_video_generation",
        classmethod(lambda cls, *args: WebhookResponse(success=True, data=payload)),
    )

    tasks.generate_video_task(job.id)
    db.expire_all()

    video = db.query(Video).filter(Video.job_id == job.id).one()
    assert video.video_url == MOCK_VIDEO_URL
    assert video.duration == 30
    assert job.status == "completed"
