# listing-video-backend/tests/test_api.py

from datetime import datetime, timezone

import pytest

import tasks

from conftest import HEADERS
from models import Video
from services import property_service
from services.job_service import JobService

OTHER_HEADERS = {"X-User-Email": "neighbor@example.com"}


def submit(client, url="https://listings.example.com/homes/42"):
    response = client.post("/api/jobs", json={"property_url": url}, headers=HEADERS)
    assert response.status_code == 200, response.text
    return response.json()


def test_root_reports_running(client):
    response = client.get("/")
    assert response.status_code == 200
    assert "running" in response.json()["status"]


def test_requests_without_user_header_are_rejected(client):
    assert client.get("/api/jobs").status_code == 401
    assert client.get("/api/jobs", headers={"X-User-Email": "nobody"}).status_code == 401


def test_submit_job_queues_extraction(client, queued):
    """
    Tests the submit step: a job is created, extraction is queued and the review page is next.
    """
    data = submit(client, "listings.example.com/homes/42")

    assert data["status"] == "analyzing"
    assert data["display_id"].startswith("JOB-")
    assert data["next"] == f"/job/{data['display_id']}/review"
    assert data["warning"] is None
    assert queued == [("tasks.extract_property_task", data["job_id"])]

    job = client.get(f"/api/jobs/{data['display_id']}", headers=HEADERS).json()
    assert job["job"]["property_url"] == "https://listings.example.com/homes/42"


@pytest.mark.parametrize("url", ["", "not a url", "ftp://example.com/home", "https://localhost/home"])
def test_submit_rejects_invalid_urls(client, queued, url):
    response = client.post("/api/jobs", json={"property_url": url}, headers=HEADERS)
    assert response.status_code == 400
    assert queued == []


def test_submit_reports_queue_failure_as_warning(client, monkeypatch):
    def broker_down(job_id):
        raise ConnectionError("broker unreachable")

    monkeypatch.setattr(tasks.extract_property_task, "delay", broker_down)

    data = submit(client)
    assert data["warning"] is not None
    assert data["status"] == "analyzing"


def test_job_status_snapshot(client):
    data = submit(client)

    response = client.get(f"/api/jobs/{data['display_id']}", headers=HEADERS)
    assert response.status_code == 200
    body = response.json()
    assert body["job"]["status"] == "analyzing"
    assert body["detailed_status"] == "Processing..."
    assert body["has_error"] is False

    # Legacy links carry the internal id
    legacy = client.get(f"/api/jobs/{data['job_id']}", headers=HEADERS)
    assert legacy.json()["job"]["display_id"] == data["display_id"]


def test_jobs_are_private_to_their_owner(client):
    data = submit(client)
    assert client.get(f"/api/jobs/{data['display_id']}", headers=OTHER_HEADERS).status_code == 404
    assert client.get("/api/jobs", headers=OTHER_HEADERS).json()["total"] == 0
    assert client.get("/api/jobs/JOB-MISSING2", headers=HEADERS).status_code == 404


def test_history_lists_next_actions(client):
    data = submit(client)
    client.get(f"/api/jobs/{data['display_id']}/review", headers=HEADERS)

    body = client.get("/api/jobs", headers=HEADERS).json()
    assert body["total"] == 1
    [item] = body["jobs"]
    assert item["title"] == "Beautiful Family Home"
    assert item["next_action"] == {"label": "Review Data", "href": f"/job/{data['display_id']}/review"}

    assert client.get("/api/jobs?status=completed", headers=HEADERS).json()["total"] == 0
    assert client.get("/api/jobs?search=family", headers=HEADERS).json()["total"] == 1
    assert client.get("/api/jobs?search=castle", headers=HEADERS).json()["total"] == 0


def test_history_shows_latest_video(client, db, job):
    # Inserted newest first so row order and creation order disagree
    db.add(Video(job_id=job.id, video_url="https://cdn.example.com/new.mp4", created_at=datetime(2026, 3, 2, tzinfo=timezone.utc)))
    db.add(Video(job_id=job.id, video_url="https://cdn.example.com/old.mp4", created_at=datetime(2026, 3, 1, tzinfo=timezone.utc)))
    db.commit()

    [item] = client.get("/api/jobs", headers=HEADERS).json()["jobs"]
    assert item["video_url"] == "https://cdn.example.com/new.mp4"


def test_history_limit_returns_most_recent(client, db, user):
    for day in (1, 3, 2):
        job = JobService.create_job(db, user.id, f"https://example.com/listing/{day}")
        job.created_at = datetime(2026, 3, day, tzinfo=timezone.utc)
    db.commit()

    body = client.get("/api/jobs?limit=2", headers=HEADERS).json()
    assert [item["job"]["property_url"] for item in body["jobs"]] == [
        "https://example.com/listing/3",
        "https://example.com/listing/2",
    ]
    assert body["total"] == 2

    assert client.get("/api/jobs?limit=0", headers=HEADERS).status_code == 422


def test_guard_redirects_by_status(client):
    data = submit(client)
    display_id = data["display_id"]

    review = client.get(f"/api/jobs/{display_id}/guard?step=review", headers=HEADERS).json()
    assert review == {"allowed": True, "redirect": None}

    result = client.get(f"/api/jobs/{display_id}/guard?step=result", headers=HEADERS).json()
    assert result == {"allowed": False, "redirect": f"/job/{display_id}/review"}

    assert client.get(f"/api/jobs/{display_id}/guard?step=settings", headers=HEADERS).status_code == 400


def test_review_creates_placeholder_property(client):
    data = submit(client)

    body = client.get(f"/api/jobs/{data['display_id']}/review", headers=HEADERS).json()
    assert body["property"]["title"] == "Beautiful Family Home"
    assert body["images"] == []
    assert body["is_valid"] is True


def test_property_edits_are_validated(client):
    data = submit(client)
    base = f"/api/jobs/{data['display_id']}"

    saved = client.put(f"{base}/property", json={"title": "Lake House", "bedrooms": "4"}, headers=HEADERS)
    assert saved.status_code == 200
    assert saved.json()["title"] == "Lake House"
    assert saved.json()["bedrooms"] == 4

    rejected = client.put(f"{base}/property", json={"price": -5}, headers=HEADERS)
    assert rejected.status_code == 400

    hidden = client.post(f"{base}/property/visibility/price", headers=HEADERS).json()
    assert hidden["is_visible"]["price"] is False


@pytest.mark.parametrize("field", ["bedrooms", "bathrooms", "price"])
def test_property_rejects_infinite_numbers(client, field):
    data = submit(client)

    response = client.put(
        f"/api/jobs/{data['display_id']}/property",
        content='{"%s": Infinity}' % field,
        headers={**HEADERS, "Content-Type": "application/json"},
    )

    assert response.status_code == 400
    assert field in response.json()["detail"]


def test_image_upload_and_visibility(client, tmp_path, monkeypatch):
    monkeypatch.setattr(property_service, "IMAGE_UPLOAD_DIR", str(tmp_path))
    data = submit(client)
    base = f"/api/jobs/{data['display_id']}"

    files = [
        ("files", ("front.jpg", b"front-bytes", "image/jpeg")),
        ("files", ("back.jpg", b"back-bytes", "image/jpeg")),
    ]
    uploaded = client.post(f"{base}/images", files=files, headers=HEADERS)
    assert uploaded.status_code == 200
    images = uploaded.json()
    assert [img["sort_order"] for img in images] == [0, 1]

    image_id = images[0]["id"]
    patched = client.patch(f"{base}/images/{image_id}", json={"is_visible": False}, headers=HEADERS)
    assert patched.json()["is_visible"] is False

    served = client.get(f"{base}/images/{image_id}/file", headers=HEADERS)
    assert served.status_code == 200
    assert served.content == b"front-bytes"

    assert client.patch(f"{base}/images/unknown", json={"is_visible": True}, headers=HEADERS).status_code == 404


def test_script_generation_requires_title(client, queued):
    data = submit(client)
    base = f"/api/jobs/{data['display_id']}"

    assert client.post(f"{base}/script/generate", headers=HEADERS).status_code == 400

    client.get(f"{base}/review", headers=HEADERS)
    response = client.post(f"{base}/script/generate", headers=HEADERS)
    assert response.status_code == 200
    body = response.json()
    assert body["status"] == "generating_script"
    assert body["next"] == f"/job/{data['display_id']}/script-generation-loading"
    assert ("tasks.generate_script_task", data["job_id"]) in queued


def test_script_defaults_then_save(client):
    data = submit(client)
    base = f"/api/jobs/{data['display_id']}"

    default = client.get(f"{base}/script", headers=HEADERS).json()
    assert default["id"] is None
    assert default["voice_id"] == "en-us-female-1"

    saved = client.put(f"{base}/script", json={"script_text": "Welcome!", "voice_id": "fr-male-1"}, headers=HEADERS)
    assert saved.status_code == 200
    assert saved.json()["id"] is not None

    again = client.get(f"{base}/script", headers=HEADERS).json()
    assert again["script_text"] == "Welcome!"
    assert again["voice_id"] == "fr-male-1"


def test_approve_script_queues_video(client, queued):
    data = submit(client)
    base = f"/api/jobs/{data['display_id']}"

    assert client.post(f"{base}/script/approve", json={"script_text": " "}, headers=HEADERS).status_code == 400

    response = client.post(f"{base}/script/approve", json={"script_text": "Tour this home"}, headers=HEADERS)
    assert response.status_code == 200
    assert response.json()["status"] == "generating_video"
    assert response.json()["next"] == f"/job/{data['display_id']}/video-generation-loading"
    assert ("tasks.generate_video_task", data["job_id"]) in queued

    result = client.get(f"{base}/result", headers=HEADERS).json()
    assert result["video"]["status"] == "processing"


def test_approve_is_blocked_when_allowance_is_used(client, db, user):
    user.videos_used = user.videos_limit
    db.commit()
    data = submit(client)

    response = client.post(
        f"/api/jobs/{data['display_id']}/script/approve", json={"script_text": "Tour"}, headers=HEADERS
    )
    assert response.status_code == 403


def test_result_without_video_is_processing(client):
    data = submit(client)
    body = client.get(f"/api/jobs/{data['display_id']}/result", headers=HEADERS).json()
    assert body["video"] == {
        "id": None,
        "video_url": None,
        "thumbnail_url": None,
        "status": "processing",
        "duration": None,
        "file_size": None,
        "created_at": None,
    }


def test_voice_catalog_filters(client):
    everything = client.get("/api/voices").json()
    assert len(everything["voices"]) == 12
    assert everything["languages"] == ["English", "Spanish", "French", "Arabic"]

    uk = client.get("/api/voices?language=English&accent=UK").json()
    assert {v["id"] for v in uk["voices"]} == {"en-uk-female-1", "en-uk-male-1"}
    assert uk["is_english"] is True

    spanish = client.get("/api/voices?language=Spanish").json()
    assert {v["id"] for v in spanish["voices"]} == {"es-female-1", "es-male-1"}
    assert spanish["is_english"] is False


def test_me_reports_remaining_videos(client):
    body = client.get("/api/me", headers=HEADERS).json()
    assert body["user"]["email"] == "agent@example.com"
    assert body["videos_remaining"] == 3


def test_webhook_settings_round_trip(client):
    empty = client.get("/api/webhook-settings", headers=HEADERS).json()
    assert empty["property_extraction_url"] is None

    saved = client.put(
        "/api/webhook-settings",
        json={"property_extraction_url": "https://hooks.example.com/extract", "video_generation_url": ""},
        headers=HEADERS,
    )
    assert saved.status_code == 200
    assert saved.json()["property_extraction_url"] == "https://hooks.example.com/extract"
    assert saved.json()["video_generation_url"] is None

    invalid = client.put("/api/webhook-settings", json={"script_generation_url": "nope"}, headers=HEADERS)
    assert invalid.status_code == 400
