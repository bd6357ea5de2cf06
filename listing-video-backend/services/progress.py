"""
Progress heuristics shown while a job is being processed.
All durations are in seconds.
"""

from typing import Optional

from config import POLL_BASE_INTERVAL, POLL_MAX_DURATION, POLL_MAX_INTERVAL, STATUS_FAILED, STATUS_PROGRESS


def status_progress(status: Optional[str]) -> int:
    return STATUS_PROGRESS.get(status or "", 0)


def calculate_progress(elapsed: float, status: Optional[str], max_duration: float = POLL_MAX_DURATION) -> float:
    """
    Percentage for ``status`` after ``elapsed`` seconds of waiting.
    Time moves the bar at most 20 points past the status baseline.
    """
    base = status_progress(status)
    time_progress = min((elapsed / max_duration) * 100, 100) if max_duration > 0 else 100
    return max(base, min(base + 20, time_progress))


def estimate_time_remaining(elapsed: float, progress: float) -> Optional[float]:
    """Linear extrapolation from the progress made so far."""
    if progress <= 0:
        return None
    total_estimated = (elapsed / progress) * 100
    return max(0.0, total_estimated - elapsed)


def dynamic_interval(poll_count: int, base_interval: float = POLL_BASE_INTERVAL) -> float:
    return min(base_interval * (1.2 ** (poll_count / 5)), POLL_MAX_INTERVAL)


def job_snapshot(job) -> dict:
    """Fields a status page derives from a job row."""
    return {
        "progress": job.progress_percentage or 0,
        "detailed_status": job.detailed_status or "Processing...",
        "estimated_completion": job.estimated_completion,
        "has_error": job.status == STATUS_FAILED or bool(job.error_details),
        "error_details": job.error_details or None,
    }
