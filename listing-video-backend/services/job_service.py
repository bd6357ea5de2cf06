"""
Job lookups and writes shared by the routers and the workers.
"""

import re
import uuid
import logging
import secrets
from typing import List, Optional

from sqlalchemy import or_
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from config import STATUS_ANALYZING
from models import Job, Property

UUID_PATTERN = re.compile(
    r"^[0-9a-f]{8}-[0-9a-f]{4}-[1-5][0-9a-f]{3}-[89ab][0-9a-f]{3}-[0-9a-f]{12}$",
    re.IGNORECASE,
)

# No 0/O or 1/I so ids survive being read aloud or retyped
DISPLAY_ID_ALPHABET = "ABCDEFGHJKLMNPQRSTUVWXYZ23456789"
DISPLAY_ID_PREFIX = "JOB-"
DISPLAY_ID_LENGTH = 8


class JobServiceError(Exception):
    """Raised when a job row cannot be written."""


def is_uuid(value: str) -> bool:
    return bool(UUID_PATTERN.match(value or ""))


def get_job_identifier(job) -> str:
    """Display id when the job has one, otherwise the internal id."""
    return job.display_id or job.id


class JobService:
    """Thin CRUD helpers around the ``jobs`` table."""

    @staticmethod
    def generate_job_id() -> str:
        return str(uuid.uuid4())

    @staticmethod
    def generate_display_id() -> str:
        suffix = "".join(secrets.choice(DISPLAY_ID_ALPHABET) for _ in range(DISPLAY_ID_LENGTH))
        return DISPLAY_ID_PREFIX + suffix

    @classmethod
    def create_job(cls, db: Session, user_id: str, property_url: str, job_id: Optional[str] = None) -> Job:
        job_id = job_id or cls.generate_job_id()
        logging.info(f"Attempting to create job {job_id} for user {user_id}: {property_url}")

        display_id = cls.generate_display_id()
        while cls.get_job_by_display_id(db, display_id) is not None:
            display_id = cls.generate_display_id()

        job = Job(
            id=job_id,
            display_id=display_id,
            user_id=user_id,
            property_url=property_url,
            status=STATUS_ANALYZING,
            current_step=1,
        )
        try:
            db.add(job)
            db.commit()
            db.refresh(job)
        except SQLAlchemyError as e:
            db.rollback()
            logging.error(f"Error creating job in database: {e}")
            raise JobServiceError(f"Failed to create job: {e}") from e

        logging.info(f"Job {job.display_id} created successfully in database")
        return job

    @staticmethod
    def get_job_by_display_id(db: Session, display_id: str) -> Optional[Job]:
        try:
            return db.query(Job).filter(Job.display_id == display_id).first()
        except SQLAlchemyError as e:
            logging.error(f"Error fetching job by display ID {display_id}: {e}")
            return None

    @staticmethod
    def get_job_by_job_id(db: Session, job_id: str) -> Optional[Job]:
        try:
            return db.query(Job).filter(Job.id == job_id).first()
        except SQLAlchemyError as e:
            logging.error(f"Error fetching job by job ID {job_id}: {e}")
            return None

    @classmethod
    def resolve_job_identifier(cls, db: Session, identifier: str) -> Optional[Job]:
        """
        Finds a job from whatever identifier a URL carries.
        Display ids are tried first; UUID-shaped values also match the internal id
        so links created before display ids existed keep working.
        """
        job = cls.get_job_by_display_id(db, identifier)
        if job is None and is_uuid(identifier):
            job = cls.get_job_by_job_id(db, identifier)
        return job

    @staticmethod
    def update_job_status(db: Session, job: Job, status: str, current_step: Optional[int] = None, **fields) -> Job:
        job.status = status
        if current_step is not None:
            job.current_step = current_step
        for name, value in fields.items():
            setattr(job, name, value)
        db.commit()
        db.refresh(job)
        logging.info(f"Job {job.display_id} -> {status} (step {job.current_step})")
        return job

    @staticmethod
    def list_jobs(db: Session, user_id: str, search: Optional[str] = None, status: str = "all", limit: Optional[int] = None) -> List[Job]:
        """
        The user's jobs, newest first, narrowed by a search term and a status filter.
        ``limit`` keeps only the most recent ones (the dashboard shows five).
        """
        query = db.query(Job).filter(Job.user_id == user_id)

        if status and status != "all":
            query = query.filter(Job.status == status)

        term = (search or "").strip().lower()
        if term:
            pattern = f"%{term}%"
            query = query.outerjoin(Property, Property.job_id == Job.id).filter(
                or_(
                    Property.title.ilike(pattern),
                    Property.location.ilike(pattern),
                    Job.display_id.ilike(pattern),
                    Job.id.ilike(pattern),
                )
            ).distinct()

        query = query.order_by(Job.created_at.desc())
        if limit:
            query = query.limit(limit)
        return query.all()
