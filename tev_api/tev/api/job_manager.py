from __future__ import annotations

import asyncio
import logging
import time
import traceback
import uuid
from dataclasses import asdict, dataclass
from typing import Any, Awaitable, Callable, Dict, List, Optional, Set

log = logging.getLogger(__name__)


@dataclass
class Job:
    job_id: str
    job_type: str
    status: str  # queued | running | succeeded | failed
    created_at: float
    blog: Optional[str] = None
    started_at: Optional[float] = None
    finished_at: Optional[float] = None
    error: Optional[str] = None
    result: Optional[Any] = None

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


class JobManager:
    """In-memory tracker for long media jobs (bulk photo fetching).

    State lives in the process: run a single Uvicorn worker.
    """

    def __init__(self) -> None:
        self._jobs: Dict[str, Job] = {}
        self._tasks: Set[asyncio.Task] = set()
        self._lock = asyncio.Lock()

    async def create(
        self,
        job_type: str,
        coro_factory: Callable[[], Awaitable[Any]],
        *,
        blog: Optional[str] = None,
    ) -> Job:
        job = Job(job_id=uuid.uuid4().hex, job_type=job_type, status="queued", created_at=time.time(), blog=blog)

        async with self._lock:
            self._jobs[job.job_id] = job

        async def _runner() -> None:
            job.status = "running"
            job.started_at = time.time()
            try:
                job.result = await coro_factory()
                job.status = "succeeded"
            except Exception:
                log.exception("Job %s (%s) failed", job.job_id, job.job_type)
                job.error = traceback.format_exc()
                job.status = "failed"
            finally:
                job.finished_at = time.time()

        # keep a reference until done, the loop only holds weak ones
        task = asyncio.create_task(_runner())
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return job

    async def get(self, job_id: str) -> Optional[Job]:
        async with self._lock:
            return self._jobs.get(job_id)

    async def list(self, limit: int = 50, blog: Optional[str] = None) -> List[Job]:
        async with self._lock:
            jobs = [j for j in self._jobs.values() if blog is None or j.blog == blog]

        jobs.sort(key=lambda j: j.created_at, reverse=True)
        return jobs[: max(1, min(int(limit), 200))]
