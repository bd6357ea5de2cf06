"""
Router for per-user settings: webhook endpoints and the video allowance.
"""

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from auth import get_current_user
from database import get_db
from models import User
from schemas import MeResponse, WebhookSettingsIn, WebhookSettingsOut
from services.errors import describe_error
from services.url_validation import validate_url
from services.webhook_service import URL_FIELDS, WebhookService

router = APIRouter(tags=["settings"])


@router.get("/me", response_model=MeResponse)
async def get_me(user: User = Depends(get_current_user)):
    remaining = max(0, (user.videos_limit or 0) - (user.videos_used or 0))
    return {"user": user, "videos_remaining": remaining}


@router.get("/webhook-settings", response_model=WebhookSettingsOut)
async def get_webhook_settings(db: Session = Depends(get_db), user: User = Depends(get_current_user)):
    settings = WebhookService.get_user_webhook_settings(db, user.id)
    if settings is None:
        return WebhookSettingsOut()
    return settings


@router.put("/webhook-settings", response_model=WebhookSettingsOut)
async def save_webhook_settings(
    payload: WebhookSettingsIn,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    """Saves the stage URLs; an empty URL sends that stage to the built-in fallback."""
    urls = payload.model_dump()
    for field in URL_FIELDS:
        value = (urls.get(field) or "").strip()
        if value and not validate_url(value):
            raise HTTPException(status_code=400, detail=f"Invalid URL for {field}.")

    try:
        return WebhookService.save_settings(db, user.id, urls)
    except SQLAlchemyError as e:
        db.rollback()
        raise HTTPException(status_code=500, detail=describe_error(e, "Failed to save webhook settings"))
