# models.py

import uuid
from datetime import datetime, timezone

from sqlalchemy import (
    Boolean,
    Column,
    DateTime,
    Float,
    ForeignKey,
    Integer,
    JSON,
    String,
    Text,
)
from sqlalchemy.orm import relationship

from config import DEFAULT_VIDEOS_LIMIT, STATUS_ANALYZING
from database import Base


def _uuid() -> str:
    return str(uuid.uuid4())


def _now() -> datetime:
    return datetime.now(timezone.utc)


class User(Base):
    """A person submitting listings, identified by email."""

    __tablename__ = "users"

    id = Column(String, primary_key=True, default=_uuid)
    email = Column(String, unique=True, index=True, nullable=False)
    name = Column(String, nullable=True)
    videos_limit = Column(Integer, default=DEFAULT_VIDEOS_LIMIT)
    videos_used = Column(Integer, default=0)
    created_at = Column(DateTime(timezone=True), default=_now)


class Job(Base):
    """Job model for tracking one listing URL through the video pipeline."""

    __tablename__ = "jobs"

    id = Column(String, primary_key=True, index=True, default=_uuid)
    display_id = Column(String, unique=True, index=True, nullable=False)
    user_id = Column(String, ForeignKey("users.id"), index=True, nullable=True)
    property_url = Column(String, nullable=True)
    status = Column(String, default=STATUS_ANALYZING)  # analyzing, reviewing, ..., completed, failed
    current_step = Column(Integer, default=1)
    progress_percentage = Column(Integer, nullable=True)
    detailed_status = Column(String, nullable=True)
    estimated_completion = Column(DateTime(timezone=True), nullable=True)
    error_details = Column(Text, nullable=True)
    webhook_response = Column(JSON, nullable=True)
    created_at = Column(DateTime(timezone=True), default=_now)
    updated_at = Column(DateTime(timezone=True), default=_now, onupdate=_now)

    properties = relationship("Property", back_populates="job", cascade="all, delete-orphan")
    scripts = relationship("VideoScript", back_populates="job", cascade="all, delete-orphan")
    videos = relationship("Video", back_populates="job", cascade="all, delete-orphan", order_by="Video.created_at")


class Property(Base):
    """Listing details extracted from the URL and edited on the review step."""

    __tablename__ = "properties"

    id = Column(String, primary_key=True, default=_uuid)
    job_id = Column(String, ForeignKey("jobs.id"), index=True)
    title = Column(String, nullable=True)
    description = Column(Text, nullable=True)
    price = Column(Float, nullable=True)
    location = Column(String, nullable=True)
    bedrooms = Column(Integer, nullable=True)
    bathrooms = Column(Integer, nullable=True)
    area = Column(Float, nullable=True)
    additional_info = Column(Text, nullable=True)
    is_visible = Column(JSON, nullable=True)
    created_at = Column(DateTime(timezone=True), default=_now)
    updated_at = Column(DateTime(timezone=True), default=_now, onupdate=_now)

    job = relationship("Job", back_populates="properties")
    images = relationship("PropertyImage", back_populates="property", cascade="all, delete-orphan")


class PropertyImage(Base):
    __tablename__ = "property_images"

    id = Column(String, primary_key=True, default=_uuid)
    property_id = Column(String, ForeignKey("properties.id"), index=True)
    image_url = Column(String, nullable=False)
    sort_order = Column(Integer, default=0)
    is_visible = Column(Boolean, default=True)
    uploaded_at = Column(DateTime(timezone=True), default=_now)

    property = relationship("Property", back_populates="images")


class VideoScript(Base):
    __tablename__ = "video_scripts"

    id = Column(String, primary_key=True, default=_uuid)
    job_id = Column(String, ForeignKey("jobs.id"), index=True)
    script_text = Column(Text, nullable=True)
    language = Column(String, nullable=True)
    accent = Column(String, nullable=True)
    voice_id = Column(String, nullable=True)
    is_approved = Column(Boolean, default=False)
    created_at = Column(DateTime(timezone=True), default=_now)
    updated_at = Column(DateTime(timezone=True), default=_now, onupdate=_now)

    job = relationship("Job", back_populates="scripts")


class Video(Base):
    __tablename__ = "videos"

    id = Column(String, primary_key=True, default=_uuid)
    job_id = Column(String, ForeignKey("jobs.id"), index=True)
    video_url = Column(String, nullable=True)
    thumbnail_url = Column(String, nullable=True)
    status = Column(String, default="processing")  # processing, completed
    duration = Column(Integer, nullable=True)
    file_size = Column(Integer, nullable=True)
    created_at = Column(DateTime(timezone=True), default=_now)
    updated_at = Column(DateTime(timezone=True), default=_now, onupdate=_now)

    job = relationship("Job", back_populates="videos")


class WebhookSettings(Base):
    """Per-user endpoints for the three pipeline stages."""

    __tablename__ = "webhook_settings"

    id = Column(String, primary_key=True, default=_uuid)
    user_id = Column(String, ForeignKey("users.id"), unique=True, index=True, nullable=False)
    property_extraction_url = Column(String, nullable=True)
    script_generation_url = Column(String, nullable=True)
    video_generation_url = Column(String, nullable=True)
    created_at = Column(DateTime(timezone=True), default=_now)
    updated_at = Column(DateTime(timezone=True), default=_now, onupdate=_now)
