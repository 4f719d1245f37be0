"""
Learning queue endpoints.
"""
from fastapi import APIRouter, HTTPException, status
from datetime import datetime, timezone

from lexitrack.schemas.queue import QueueHealthResponse, JobStatusResponse
from lexitrack.services.queue_service import learning_queue

router = APIRouter(prefix="/queue", tags=["queue"])


@router.get("/status", response_model=QueueHealthResponse)
def get_queue_status():
    """Job counts per state."""
    return QueueHealthResponse(**learning_queue.get_health(), timestamp=datetime.now(timezone.utc))


@router.get("/jobs/{job_id}", response_model=JobStatusResponse)
def get_job_status(job_id: str):
    """Status of a single job."""
    job = learning_queue.get_job(job_id)
    if not job:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Job {job_id} not found"
        )

    return JobStatusResponse(
        job_id=job['job_id'],
        name=job['name'],
        status=job['status'],
        attempts=job['attempts'],
        result=job['result'],
        error=job['error'],
        created_at=job['created_at'],
        finished_at=job['finished_at']
    )
