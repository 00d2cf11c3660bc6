"""Periodic driver for the lifecycle sweeps.

Jobs are plain ``func(db) -> int`` callables registered under a name, either
on a fixed interval or once a day at a UTC wall-clock time. ``start`` runs
each job in its own asyncio task; the sweep itself executes in a worker
thread with a fresh session, and a job waits for its previous run to finish
before sleeping again, so it never overlaps itself. ``run_job`` invokes a
sweep synchronously outside any timer.
"""
import asyncio
import logging
from dataclasses import dataclass
from datetime import datetime, time, timedelta, timezone
from typing import Callable, Optional

from sqlalchemy.orm import Session

from app.config import settings
from app.database import SessionLocal, utcnow
from app.services import lifecycle_service

logger = logging.getLogger(__name__)

SweepFunc = Callable[[Session], int]


@dataclass
class Job:
    name: str
    func: SweepFunc
    interval: Optional[timedelta] = None
    at: Optional[time] = None  # UTC time of day for daily jobs

    def seconds_until_next(self, now: datetime) -> float:
        if self.interval is not None:
            return self.interval.total_seconds()
        return seconds_until_daily(self.at, now)


def seconds_until_daily(at: time, now: datetime) -> float:
    """Seconds from ``now`` to the next occurrence of ``at`` (UTC)."""
    now = now.astimezone(timezone.utc)
    target = now.replace(hour=at.hour, minute=at.minute, second=at.second, microsecond=0)
    if target <= now:
        target += timedelta(days=1)
    return (target - now).total_seconds()


class SweepScheduler:
    def __init__(self, session_factory: Callable[[], Session] = SessionLocal):
        self._session_factory = session_factory
        self._jobs: dict[str, Job] = {}
        self._tasks: list[asyncio.Task] = []

    @property
    def job_names(self) -> list[str]:
        return list(self._jobs)

    def _add(self, job: Job) -> None:
        if job.name in self._jobs:
            raise ValueError(f"Job {job.name!r} is already registered")
        self._jobs[job.name] = job

    def add_interval_job(self, name: str, func: SweepFunc, seconds: float) -> None:
        if seconds <= 0:
            raise ValueError("Interval must be positive")
        self._add(Job(name=name, func=func, interval=timedelta(seconds=seconds)))

    def add_daily_job(self, name: str, func: SweepFunc, hour: int, minute: int = 0) -> None:
        self._add(Job(name=name, func=func, at=time(hour=hour, minute=minute)))

    def run_job(self, name: str) -> int:
        """Run one sweep to completion with its own session."""
        job = self._jobs[name]
        db = self._session_factory()
        try:
            count = job.func(db)
        finally:
            db.close()
        logger.debug("Job %s touched %d event(s)", name, count)
        return count

    async def _run_forever(self, job: Job) -> None:
        while True:
            await asyncio.sleep(job.seconds_until_next(utcnow()))
            try:
                await asyncio.to_thread(self.run_job, job.name)
            except Exception:
                logger.exception("Job %s failed; will retry on next tick", job.name)

    def start(self) -> None:
        if self._tasks:
            return
        for job in self._jobs.values():
            self._tasks.append(asyncio.create_task(self._run_forever(job), name=f"sweep:{job.name}"))
        logger.info("Scheduler started with jobs: %s", ", ".join(self._jobs))

    async def stop(self) -> None:
        for task in self._tasks:
            task.cancel()
        await asyncio.gather(*self._tasks, return_exceptions=True)
        self._tasks = []
        logger.info("Scheduler stopped")


def build_scheduler(session_factory: Callable[[], Session] = SessionLocal) -> SweepScheduler:
    """Scheduler wired with the lifecycle sweeps at their configured cadence."""
    scheduler = SweepScheduler(session_factory)
    interval = settings.LIFECYCLE_SWEEP_INTERVAL_SECONDS
    scheduler.add_interval_job("activate_due_events", lifecycle_service.activate_due_events, interval)
    scheduler.add_interval_job("close_finished_events", lifecycle_service.close_finished_events, interval)
    scheduler.add_daily_job(
        "enable_todays_check_ins",
        lifecycle_service.enable_todays_check_ins,
        hour=settings.CHECKIN_ENABLE_HOUR_UTC,
    )
    return scheduler
