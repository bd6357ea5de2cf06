"""
Realtime job feed.
Pushes a job snapshot to the client whenever the job row changes, until the job
reaches a terminal status.
"""

import asyncio
import logging
from typing import Optional

from fastapi import APIRouter, Query, WebSocket, WebSocketDisconnect
from sqlalchemy.exc import SQLAlchemyError

from config import REALTIME_RETRY_DELAY, REALTIME_WATCH_INTERVAL, TERMINAL_STATUSES
from database import SessionLocal
from models import Job, User
from schemas import JobOut, JobStatusResponse
from services.progress import job_snapshot

router = APIRouter(tags=["realtime"])


async def _wait(seconds: float):
    await asyncio.sleep(seconds)


def _fingerprint(job) -> tuple:
    return (
        job.status,
        job.current_step,
        job.progress_percentage,
        job.detailed_status,
        job.error_details,
        job.updated_at,
    )


def _message(kind: str, job) -> dict:
    payload = JobStatusResponse(job=JobOut.model_validate(job), **job_snapshot(job)).model_dump(mode="json")
    return {"type": kind, **payload}


def _load(db, display_id: str, email: Optional[str]):
    db.expire_all()
    job = db.query(Job).filter(Job.display_id == display_id).first()
    if job is None or email is None:
        return None
    owner = db.query(User).filter(User.id == job.user_id).first()
    if owner is None or owner.email != email.strip().lower():
        return None
    return job


async def _receive_until_disconnect(websocket: WebSocket):
    # Clients never send anything we act on; this only notices them leaving
    while True:
        message = await websocket.receive()
        if message["type"] == "websocket.disconnect":
            return


async def _pause(seconds: float, disconnected: asyncio.Future) -> bool:
    """Waits ``seconds``; returns True if the client went away first."""
    sleeper = asyncio.ensure_future(_wait(seconds))
    done, _ = await asyncio.wait({sleeper, disconnected}, return_when=asyncio.FIRST_COMPLETED)
    if disconnected in done:
        sleeper.cancel()
        return True
    sleeper.result()
    return False


@router.websocket("/ws/jobs/{display_id}")
async def job_feed(websocket: WebSocket, display_id: str, email: Optional[str] = Query(default=None)):
    """
    Sends a ``snapshot`` message first, then an ``update`` message for every change.
    Browsers cannot set headers on websockets, so the caller passes ``email``.
    """
    await websocket.accept()
    db = SessionLocal()
    disconnected = None

    try:
        job = _load(db, display_id, email)
        if job is None:
            await websocket.send_json({"type": "error", "error": "Job not found"})
            await websocket.close()
            return

        last_seen = _fingerprint(job)
        await websocket.send_json(_message("snapshot", job))
        logging.info(f"Subscribed to job updates for {display_id}")
        disconnected = asyncio.ensure_future(_receive_until_disconnect(websocket))

        while job.status not in TERMINAL_STATUSES:
            if await _pause(REALTIME_WATCH_INTERVAL, disconnected):
                logging.info(f"Client left the job feed for {display_id}")
                return
            try:
                current = _load(db, display_id, email)
            except SQLAlchemyError as e:
                logging.warning(f"Job feed read failed for {display_id}, retrying: {e}")
                db.rollback()
                if await _pause(REALTIME_RETRY_DELAY, disconnected):
                    logging.info(f"Client left the job feed for {display_id}")
                    return
                continue

            if current is None:
                await websocket.send_json({"type": "error", "error": "Job not found"})
                break

            job = current
            fingerprint = _fingerprint(job)
            if fingerprint != last_seen:
                last_seen = fingerprint
                logging.info(f"Realtime job update for {display_id}: {job.status}")
                await websocket.send_json(_message("update", job))

        await websocket.close()
    except WebSocketDisconnect:
        logging.info(f"Cleaning up realtime subscription for {display_id}")
    finally:
        if disconnected is not None:
            disconnected.cancel()
        db.close()
