"""
Script to delete a user's learning progress, optionally for a single language.

Usage: python clear_progress.py <user_id> [language]
"""
import sys
from sqlmodel import Session
from lexitrack.core.database import engine
from lexitrack.services.maintenance_service import delete_user_progress
import logging

logging.basicConfig(level=logging.INFO, format='%(asctime)s - %(levelname)s - %(message)s')
logger = logging.getLogger(__name__)


def clear_progress(user_id: str, language: str = None) -> int:
    """Delete learning progress records for a user."""
    with Session(engine) as session:
        scope = f"language '{language}'" if language else "all languages"
        logger.info(f"Deleting progress for user {user_id} ({scope})...")
        deleted = delete_user_progress(session, user_id, language)
        logger.info(f"Deleted {deleted} progress record(s)")
        return deleted


if __name__ == "__main__":
    if len(sys.argv) < 2:
        print("Usage: python clear_progress.py <user_id> [language]")
        sys.exit(1)

    logger.info("Starting progress cleanup...")
    try:
        clear_progress(sys.argv[1], sys.argv[2].lower() if len(sys.argv) > 2 else None)
        logger.info("Successfully completed!")
    except Exception as e:
        logger.error("Error during progress cleanup: %s", e, exc_info=True)
        sys.exit(1)
