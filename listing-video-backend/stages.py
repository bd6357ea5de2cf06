"""
Built-in pipeline stages.
Used for a stage whenever the user has not configured a webhook for it, so a job
can always run end to end. They produce placeholder content only.
"""

import logging

from config import (
    GENERATED_SCRIPT_TEMPLATE,
    MOCK_EXTRACTED_PROPERTY,
    MOCK_THUMBNAIL_URL,
    MOCK_VIDEO_DURATION,
    MOCK_VIDEO_FILE_SIZE,
    MOCK_VIDEO_URL,
)


def _format_price(price) -> str:
    if price is None or price == "":
        return "N/A"
    try:
        return f"{float(price):,.0f}"
    except (TypeError, ValueError):
        return str(price)


def property_extraction(job_id: str, property_url: str) -> dict:
    """Stands in for a scraper: returns listing data for ``property_url``."""
    logging.info(f"🏠 No external webhook configured, using mock property data for job {job_id}")
    property_data = {"title": f"Property at {property_url}", **MOCK_EXTRACTED_PROPERTY}
    return {"success": True, "job_id": job_id, "property_data": property_data}


def script_generation(job_id: str, property_data: dict) -> dict:
    """Writes a narration script from the reviewed property data."""
    logging.info(f"📝 No external webhook configured, generating mock script for job {job_id}")
    property_data = property_data or {}
    script_text = GENERATED_SCRIPT_TEMPLATE.format(
        bedrooms=property_data.get("bedrooms"),
        bathrooms=property_data.get("bathrooms"),
        location=property_data.get("location"),
        area=property_data.get("area"),
        price=_format_price(property_data.get("price")),
        description=property_data.get("description") or "",
    )
    return {"success": True, "job_id": job_id, "script": script_text}


def video_generation(job_id: str, script_data: dict) -> dict:
    """Returns the placeholder video produced for an approved script."""
    logging.info(f"🎬 No external webhook configured, using mock video URL for job {job_id}")
    return {
        "success": True,
        "job_id": job_id,
        "video_url": MOCK_VIDEO_URL,
        "thumbnail_url": MOCK_THUMBNAIL_URL,
        "duration": MOCK_VIDEO_DURATION,
        "file_size": MOCK_VIDEO_FILE_SIZE,
    }


BUILTIN_STAGES = {
    "property-extraction": property_extraction,
    "script-generation": script_generation,
    "video-generation": video_generation,
}
