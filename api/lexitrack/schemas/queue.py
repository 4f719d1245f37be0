"""
Learning job queue schemas.
"""
from pydantic import BaseModel
from typing import Optional, Dict, Any
from datetime import datetime


class JobAcceptedResponse(BaseModel):
    """Response when a job has been queued."""
    job_id: str
    name: str
    status: str
    message: str


class JobStatusResponse(BaseModel):
    """Status of a single queued job."""
    job_id: str
    name: str
    status: str  # waiting, active, completed, failed
    attempts: int
    result: Optional[Dict[str, Any]] = None
    error: Optional[str] = None
    created_at: datetime
    finished_at: Optional[datetime] = None


class QueueHealthResponse(BaseModel):
    """Job counts per state."""
    waiting: int
    active: int
    completed: int
    failed: int
    backend: str
    timestamp: datetime
