"""
Which wizard page a job belongs on.
"""

from typing import Optional

from config import (
    STATUS_ANALYZING,
    STATUS_COMPLETED,
    STATUS_GENERATING_SCRIPT,
    STATUS_GENERATING_VIDEO,
    STATUS_REVIEWING,
    STATUS_SCRIPT_READY,
)
from services.job_service import get_job_identifier

WIZARD_STEPS = ("review", "script", "result")


def job_path(job, step: str) -> str:
    return f"/job/{get_job_identifier(job)}/{step}"


def guard_redirect(job, current_step: str) -> Optional[str]:
    """
    Returns the path to send the user to when ``current_step`` does not fit the
    job's status, or None when the step may be shown.
    """
    if job is None:
        return None

    # The script can be edited again even after the video is done
    if current_step == "script":
        return None

    status = job.status
    if status == STATUS_COMPLETED:
        if current_step != "result":
            return job_path(job, "result")
    elif status == STATUS_SCRIPT_READY:
        if current_step == "review":
            return job_path(job, "script")
    elif status in (STATUS_REVIEWING, STATUS_ANALYZING):
        if current_step != "review":
            return job_path(job, "review")
    return None


NEXT_ACTIONS = {
    STATUS_ANALYZING: ("Review Data", "review"),
    STATUS_REVIEWING: ("Review Data", "review"),
    STATUS_GENERATING_SCRIPT: ("View Progress", "script-generation-loading"),
    STATUS_SCRIPT_READY: ("Edit Script", "script"),
    STATUS_GENERATING_VIDEO: ("View Progress", "video-generation-loading"),
    STATUS_COMPLETED: ("View Video", "result"),
}


def next_action(job) -> dict:
    """The call-to-action shown for a job in the history list."""
    label, step = NEXT_ACTIONS.get(job.status, ("View Details", "review"))
    return {"label": label, "href": job_path(job, step)}
