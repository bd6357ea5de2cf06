"""
Outbound calls for the three pipeline stages.
Each stage posts to the user's configured URL, or runs the built-in stage of the
same name when no URL is set. Failures are returned, never raised.
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Optional

import requests
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from config import WEBHOOK_TIMEOUT
from models import WebhookSettings
from stages import BUILTIN_STAGES

URL_FIELDS = ("property_extraction_url", "script_generation_url", "video_generation_url")


@dataclass
class WebhookResponse:
    success: bool
    data: Any = None
    error: Optional[str] = None


class WebhookError(Exception):
    pass


class WebhookService:

    @staticmethod
    def get_user_webhook_settings(db: Session, user_id: str) -> Optional[WebhookSettings]:
        try:
            return db.query(WebhookSettings).filter(WebhookSettings.user_id == user_id).first()
        except SQLAlchemyError as e:
            logging.error(f"Error fetching webhook settings: {e}")
            return None

    @staticmethod
    def save_settings(db: Session, user_id: str, urls: dict) -> WebhookSettings:
        """Creates or updates the user's settings; blank URLs are stored as NULL."""
        settings = db.query(WebhookSettings).filter(WebhookSettings.user_id == user_id).first()
        if settings is None:
            settings = WebhookSettings(user_id=user_id)
            db.add(settings)

        for field in URL_FIELDS:
            value = (urls.get(field) or "").strip()
            setattr(settings, field, value or None)

        db.commit()
        db.refresh(settings)
        return settings

    @staticmethod
    def _post(url: str, body: dict) -> Any:
        body = {**body, "timestamp": datetime.now(timezone.utc).isoformat()}
        response = requests.post(url, json=body, timeout=WEBHOOK_TIMEOUT)
        if not response.ok:
            raise WebhookError(f"Webhook failed with status: {response.status_code}")
        return response.json()

    @classmethod
    def _call_stage(cls, db: Session, stage: str, url_field: str, user_id: str, body: dict, fallback_args: tuple) -> WebhookResponse:
        try:
            settings = cls.get_user_webhook_settings(db, user_id)
            url = getattr(settings, url_field, None) if settings else None

            if not url:
                logging.info(f"No {stage} webhook configured, using built-in fallback")
                data = BUILTIN_STAGES[stage](*fallback_args)
                return WebhookResponse(success=True, data=data)

            logging.info(f"Calling {stage} webhook: {url}")
            data = cls._post(url, body)
            return WebhookResponse(success=True, data=data)

        except Exception as e:
            logging.error(f"{stage} webhook error: {e}")
            return WebhookResponse(success=False, error=str(e) or "Unknown webhook error")

    @classmethod
    def call_property_extraction(cls, db: Session, job_id: str, property_url: str, user_id: str) -> WebhookResponse:
        body = {"job_id": job_id, "property_url": property_url, "user_id": user_id}
        return cls._call_stage(
            db, "property-extraction", "property_extraction_url", user_id, body, (job_id, property_url)
        )

    @classmethod
    def call_script_generation(cls, db: Session, job_id: str, property_data: dict, user_id: str) -> WebhookResponse:
        body = {"job_id": job_id, "property_data": property_data, "user_id": user_id}
        return cls._call_stage(
            db, "script-generation", "script_generation_url", user_id, body, (job_id, property_data)
        )

    @classmethod
    def call_video_generation(cls, db: Session, job_id: str, script_data: dict, user_id: str) -> WebhookResponse:
        body = {"job_id": job_id, "script_data": script_data, "user_id": user_id}
        return cls._call_stage(
            db, "video-generation", "video_generation_url", user_id, body, (job_id, script_data)
        )
