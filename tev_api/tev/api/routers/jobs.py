from __future__ import annotations

from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Request

from tev.api.auth import require_api_key
from tev.api.job_manager import JobManager
from tev.api.schemas import JobResponse
from tev.jobs.fetch_photos import fetch_blog_photos
from tev.settings import Settings

router = APIRouter(prefix="/api", dependencies=[Depends(require_api_key)], tags=["jobs"])


@router.post("/jobs/fetch-photos/{blog}", response_model=JobResponse)
async def job_fetch_photos(
    request: Request,
    blog: str,
    concurrency: Optional[int] = Query(default=None, ge=1, le=32),
) -> JobResponse:
    s: Settings = request.app.state.settings
    jobs: JobManager = request.app.state.jobs

    async def _run() -> Dict[str, Any]:
        return await fetch_blog_photos(settings=s, blog=blog, concurrency=concurrency)

    job = await jobs.create("fetch_photos", _run, blog=blog)
    return JobResponse(**job.to_dict())


@router.get("/jobs/{job_id}", response_model=JobResponse)
async def get_job(request: Request, job_id: str) -> JobResponse:
    jobs: JobManager = request.app.state.jobs
    job = await jobs.get(job_id)
    if not job:
        raise HTTPException(status_code=404, detail=f"Job not found: {job_id}")
    return JobResponse(**job.to_dict())


@router.get("/jobs", response_model=List[JobResponse])
async def list_jobs(
    request: Request,
    blog: Optional[str] = Query(default=None),
    limit: int = Query(default=50, ge=1, le=200),
) -> List[JobResponse]:
    jobs: JobManager = request.app.state.jobs
    items = await jobs.list(limit=int(limit), blog=blog)
    return [JobResponse(**j.to_dict()) for j in items]
