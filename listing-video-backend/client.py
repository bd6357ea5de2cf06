"""
HTTP client helpers for status pages and scripts that wait on a job.
"""

import time
import logging
from typing import Callable, Optional

import requests

from config import API_PREFIX, POLL_BASE_INTERVAL, POLL_MAX_DURATION, TERMINAL_STATUSES, USER_HEADER
from services.progress import calculate_progress, dynamic_interval, estimate_time_remaining


class PollingTimeoutError(Exception):
    pass


class JobPoller:
    """
    Polls a job until it reaches ``expected_status`` or a terminal status.

    The first poll happens immediately; later polls back off from
    ``base_interval`` up to ten seconds. Polling gives up with a
    ``PollingTimeoutError`` once ``max_duration`` seconds have passed.
    """

    def __init__(
        self,
        base_url: str,
        display_id: str,
        email: str,
        expected_status: Optional[str] = None,
        on_status_change: Optional[Callable[[dict], None]] = None,
        on_complete: Optional[Callable[[dict], None]] = None,
        on_error: Optional[Callable[[Exception], None]] = None,
        max_duration: float = POLL_MAX_DURATION,
        base_interval: float = POLL_BASE_INTERVAL,
        session=None,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], None] = time.sleep,
        timeout: float = 10,
    ):
        self.url = f"{base_url.rstrip('/')}{API_PREFIX}/jobs/{display_id}"
        self.headers = {USER_HEADER: email}
        self.expected_status = expected_status
        self.on_status_change = on_status_change
        self.on_complete = on_complete
        self.on_error = on_error
        self.max_duration = max_duration
        self.base_interval = base_interval
        self.session = session or requests.Session()
        self.clock = clock
        self.sleep = sleep
        self.timeout = timeout

        self.job: Optional[dict] = None
        self.is_polling = False
        self.progress = 0.0
        self.estimated_time_remaining: Optional[float] = None
        self.poll_count = 0
        self.start_time = 0.0

    def _report_error(self, error: Exception):
        logging.error(f"Error polling job: {error}")
        if self.on_error:
            self.on_error(error)

    def poll_once(self) -> Optional[dict]:
        try:
            response = self.session.get(self.url, headers=self.headers, timeout=self.timeout)
            response.raise_for_status()
            job = response.json()["job"]
        except (requests.RequestException, ValueError, KeyError) as e:
            self._report_error(e)
            return None

        self.job = job
        elapsed = self.clock() - self.start_time
        self.progress = calculate_progress(elapsed, job.get("status"), self.max_duration)
        self.estimated_time_remaining = estimate_time_remaining(elapsed, self.progress)

        if self.on_status_change:
            self.on_status_change(job)

        status = job.get("status")
        if (self.expected_status and status == self.expected_status) or status in TERMINAL_STATUSES:
            if self.on_complete:
                self.on_complete(job)
            self.stop()
        return job

    def start(self) -> Optional[dict]:
        """Polls until done, timed out or stopped; returns the last job seen."""
        if self.is_polling:
            return self.job

        self.is_polling = True
        self.start_time = self.clock()
        self.poll_count = 0
        self.poll_once()

        while self.is_polling:
            self.poll_count += 1
            self.sleep(dynamic_interval(self.poll_count, self.base_interval))
            if not self.is_polling:
                break
            if self.clock() - self.start_time > self.max_duration:
                self._report_error(PollingTimeoutError("Polling timeout exceeded"))
                self.stop()
                break
            self.poll_once()

        return self.job

    def stop(self):
        self.is_polling = False
