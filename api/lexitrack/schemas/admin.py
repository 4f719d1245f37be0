"""
Administrative schemas.
"""
from pydantic import BaseModel, Field
from typing import Literal, Optional


class DatabaseActionRequest(BaseModel):
    """Request for a database maintenance action."""
    action: Literal['test', 'init', 'sample', 'full'] = Field(
        ..., description="test: check connection, init: create schema, sample: insert sample lexemes, full: init + sample"
    )


class DatabaseActionResponse(BaseModel):
    success: bool
    message: str


class CleanupResponse(BaseModel):
    """Response from deleting progress records."""
    user_id: str
    language: Optional[str] = None
    deleted_count: int
