"""
Property data and listing images edited on the review step.
"""

import os
import uuid
import shutil
import logging
from typing import BinaryIO, Iterable, List, Optional, Tuple

from sqlalchemy import func
from sqlalchemy.orm import Session

from config import DEFAULT_PROPERTY, IMAGE_UPLOAD_DIR, VISIBLE_PROPERTY_FIELDS
from models import Job, Property, PropertyImage
from services.property_validation import (
    PropertyValidationError,
    sanitize_property_value,
    validate_property_field,
)

EDITABLE_FIELDS = (
    "title",
    "description",
    "price",
    "location",
    "bedrooms",
    "bathrooms",
    "area",
    "additional_info",
)


class PropertyService:
    """Reads and writes the single property row attached to a job."""

    @staticmethod
    def fetch_property(db: Session, job: Job) -> Optional[Property]:
        prop = db.query(Property).filter(Property.job_id == job.id).first()
        if prop is not None and prop.is_visible is None:
            prop.is_visible = {}
        return prop

    @staticmethod
    def create_default_property(db: Session, job: Job) -> Property:
        prop = Property(
            job_id=job.id,
            is_visible={field: True for field in VISIBLE_PROPERTY_FIELDS},
            **DEFAULT_PROPERTY,
        )
        db.add(prop)
        db.commit()
        db.refresh(prop)
        logging.info(f"Created placeholder property for job {job.display_id}")
        return prop

    @classmethod
    def get_or_create_property(cls, db: Session, job: Job) -> Property:
        return cls.fetch_property(db, job) or cls.create_default_property(db, job)

    @staticmethod
    def update_property(db: Session, prop: Property, changes: dict) -> Property:
        """Sanitizes and validates every changed field before anything is written."""
        cleaned = {}
        for field, raw_value in changes.items():
            if field not in EDITABLE_FIELDS:
                continue
            value = sanitize_property_value(field, raw_value)
            if not validate_property_field(field, value):
                raise PropertyValidationError(field, raw_value)
            cleaned[field] = value

        for field, value in cleaned.items():
            setattr(prop, field, value)
        db.commit()
        db.refresh(prop)
        return prop

    @staticmethod
    def toggle_visibility(db: Session, prop: Property, field: str) -> Property:
        visibility = dict(prop.is_visible or {})
        visibility[field] = not visibility.get(field, False)
        # JSON columns only notice reassignment
        prop.is_visible = visibility
        db.commit()
        db.refresh(prop)
        return prop

    @staticmethod
    def save_extracted_property(db: Session, job: Job, property_data: dict) -> Property:
        """Stores extraction output, replacing the fields of an existing row."""
        prop = db.query(Property).filter(Property.job_id == job.id).first()
        if prop is None:
            prop = Property(job_id=job.id, is_visible={field: True for field in VISIBLE_PROPERTY_FIELDS})
            db.add(prop)

        for field in EDITABLE_FIELDS:
            if field not in property_data:
                continue
            value = sanitize_property_value(field, property_data[field])
            if not validate_property_field(field, value):
                logging.warning(f"Skipping invalid extracted {field} for job {job.display_id}: {property_data[field]!r}")
                continue
            setattr(prop, field, value)
        db.commit()
        db.refresh(prop)
        return prop


class ImageService:
    """Listing photos, stored on disk under the media directory."""

    @staticmethod
    def fetch_images(db: Session, job: Job) -> List[PropertyImage]:
        prop = db.query(Property).filter(Property.job_id == job.id).first()
        if prop is None:
            logging.info(f"No property found for job: {job.display_id}")
            return []
        return (
            db.query(PropertyImage)
            .filter(PropertyImage.property_id == prop.id)
            .order_by(PropertyImage.sort_order)
            .all()
        )

    @staticmethod
    def set_image_visibility(db: Session, job: Job, image_id: str, is_visible: bool) -> Optional[PropertyImage]:
        image = (
            db.query(PropertyImage)
            .join(Property, Property.id == PropertyImage.property_id)
            .filter(PropertyImage.id == image_id, Property.job_id == job.id)
            .first()
        )
        if image is None:
            return None
        image.is_visible = is_visible
        db.commit()
        db.refresh(image)
        return image

    @staticmethod
    def add_images(db: Session, job: Job, files: Iterable[Tuple[str, BinaryIO]]) -> List[PropertyImage]:
        """Saves ``(filename, fileobj)`` uploads and appends them after the existing images."""
        prop = PropertyService.get_or_create_property(db, job)
        next_order = (
            db.query(func.max(PropertyImage.sort_order))
            .filter(PropertyImage.property_id == prop.id)
            .scalar()
        )
        next_order = 0 if next_order is None else next_order + 1

        target_dir = os.path.join(IMAGE_UPLOAD_DIR, job.display_id)
        os.makedirs(target_dir, exist_ok=True)

        created = []
        for filename, fileobj in files:
            safe_name = os.path.basename(filename or "image")
            file_path = os.path.join(target_dir, f"{uuid.uuid4()}_{safe_name}")
            with open(file_path, "wb") as buffer:
                shutil.copyfileobj(fileobj, buffer)

            image = PropertyImage(
                property_id=prop.id,
                image_url=file_path,
                sort_order=next_order,
                is_visible=True,
            )
            db.add(image)
            created.append(image)
            next_order += 1

        db.commit()
        for image in created:
            db.refresh(image)
        logging.info(f"Uploaded {len(created)} images for job {job.display_id}")
        return created
