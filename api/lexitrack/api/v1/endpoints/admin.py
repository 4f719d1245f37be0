"""
Administrative endpoints: database setup and progress cleanup.
"""
from fastapi import APIRouter, Depends
from sqlmodel import Session
from typing import Optional
import logging

from lexitrack.core.database import get_session, init_db, check_connection
from lexitrack.schemas.admin import DatabaseActionRequest, DatabaseActionResponse, CleanupResponse
from lexitrack.services.maintenance_service import create_sample_data, delete_user_progress
from lexitrack.utils.text_utils import normalize_language_code
from lexitrack.api.v1.endpoints.utils import require_user_id

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/admin", tags=["admin"])


@router.post("/database", response_model=DatabaseActionResponse)
def database_action(
    request: DatabaseActionRequest,
    session: Session = Depends(get_session)
):
    """
    Run a database maintenance action.

    - test: check the connection
    - init: create tables, constraints and indexes
    - sample: insert a sample user and sample lexemes
    - full: init + sample
    """
    if request.action == 'test':
        connected = check_connection()
        return DatabaseActionResponse(
            success=connected,
            message="Database connection successful" if connected else "Database connection failed"
        )

    if request.action in ('init', 'full'):
        init_db()
        logger.info("Database schema initialized")

    if request.action in ('sample', 'full'):
        count = create_sample_data(session)
        logger.info(f"Sample data created ({count} lexemes)")

    messages = {
        'init': "Database schema initialized successfully",
        'sample': "Sample data created successfully",
        'full': "Database initialized with schema and sample data",
    }
    return DatabaseActionResponse(success=True, message=messages[request.action])


@router.delete("/progress", response_model=CleanupResponse)
def cleanup_progress(
    user_id: Optional[str] = None,
    language: Optional[str] = None,
    session: Session = Depends(get_session)
):
    """Delete a user's progress records, optionally only for one language."""
    user_id = require_user_id(user_id)
    language = normalize_language_code(language) if language else None
    deleted = delete_user_progress(session, user_id, language)
    return CleanupResponse(user_id=user_id, language=language, deleted_count=deleted)
