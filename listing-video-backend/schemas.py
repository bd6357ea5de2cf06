"""
Pydantic models for data validation in the Listing Video Generator.
"""

from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict


class OrmModel(BaseModel):
    model_config = ConfigDict(from_attributes=True)


class JobCreateRequest(BaseModel):
    """Request model for submitting a listing URL."""
    property_url: str


class JobSubmitResponse(BaseModel):
    """Response when a new job is accepted."""
    job_id: str
    display_id: str
    status: str
    next: str
    warning: Optional[str] = None


class JobOut(OrmModel):
    id: str
    display_id: str
    property_url: Optional[str] = None
    status: Optional[str] = None
    current_step: Optional[int] = None
    progress_percentage: Optional[int] = None
    detailed_status: Optional[str] = None
    estimated_completion: Optional[datetime] = None
    error_details: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class JobStatusResponse(BaseModel):
    """Response for checking a job, with the derived progress fields."""
    job: JobOut
    progress: float
    detailed_status: str
    estimated_completion: Optional[datetime] = None
    has_error: bool
    error_details: Optional[str] = None


class NextAction(BaseModel):
    label: str
    href: str


class JobHistoryItem(BaseModel):
    job: JobOut
    title: Optional[str] = None
    location: Optional[str] = None
    video_url: Optional[str] = None
    thumbnail_url: Optional[str] = None
    video_status: Optional[str] = None
    next_action: NextAction


class JobHistoryResponse(BaseModel):
    jobs: List[JobHistoryItem]
    total: int


class GuardResponse(BaseModel):
    allowed: bool
    redirect: Optional[str] = None


class PropertyOut(OrmModel):
    id: str
    job_id: Optional[str] = None
    title: Optional[str] = None
    description: Optional[str] = None
    price: Optional[float] = None
    location: Optional[str] = None
    bedrooms: Optional[int] = None
    bathrooms: Optional[int] = None
    area: Optional[float] = None
    additional_info: Optional[str] = None
    is_visible: Optional[Dict[str, bool]] = None


class PropertyUpdate(BaseModel):
    """Raw form values; sanitized and validated server side."""
    title: Optional[Any] = None
    description: Optional[Any] = None
    price: Optional[Any] = None
    location: Optional[Any] = None
    bedrooms: Optional[Any] = None
    bathrooms: Optional[Any] = None
    area: Optional[Any] = None
    additional_info: Optional[Any] = None


class PropertyImageOut(OrmModel):
    id: str
    image_url: str
    sort_order: Optional[int] = None
    is_visible: Optional[bool] = None
    uploaded_at: Optional[datetime] = None


class ImageVisibilityUpdate(BaseModel):
    is_visible: bool


class ReviewResponse(BaseModel):
    job: JobOut
    property: PropertyOut
    images: List[PropertyImageOut]
    is_valid: bool


class ScriptIn(BaseModel):
    script_text: Optional[str] = None
    language: Optional[str] = None
    accent: Optional[str] = None
    voice_id: Optional[str] = None


class ScriptOut(OrmModel):
    id: Optional[str] = None
    job_id: Optional[str] = None
    script_text: Optional[str] = None
    language: Optional[str] = None
    accent: Optional[str] = None
    voice_id: Optional[str] = None
    is_approved: Optional[bool] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class StepResponse(BaseModel):
    """Response for actions that move the wizard forward."""
    display_id: str
    status: str
    next: str
    warning: Optional[str] = None


class VideoOut(OrmModel):
    id: Optional[str] = None
    video_url: Optional[str] = None
    thumbnail_url: Optional[str] = None
    status: Optional[str] = None
    duration: Optional[int] = None
    file_size: Optional[int] = None
    created_at: Optional[datetime] = None


class ResultResponse(BaseModel):
    job: JobOut
    video: VideoOut


class WebhookSettingsIn(BaseModel):
    property_extraction_url: Optional[str] = None
    script_generation_url: Optional[str] = None
    video_generation_url: Optional[str] = None


class WebhookSettingsOut(OrmModel):
    id: Optional[str] = None
    property_extraction_url: Optional[str] = None
    script_generation_url: Optional[str] = None
    video_generation_url: Optional[str] = None


class VoiceOut(BaseModel):
    id: str
    name: str
    gender: str
    language: str
    accent: Optional[str] = None


class VoiceCatalogResponse(BaseModel):
    voices: List[VoiceOut]
    languages: List[str]
    accents: List[str]
    is_english: bool


class UserOut(OrmModel):
    id: str
    email: str
    name: Optional[str] = None
    videos_limit: Optional[int] = None
    videos_used: Optional[int] = None


class MeResponse(BaseModel):
    user: UserOut
    videos_remaining: int
