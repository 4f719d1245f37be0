"""
In-process learning job queue.

Jobs are registered in a task dictionary guarded by a lock and executed by FastAPI
background tasks. A failing job is retried with exponential backoff up to
max_attempts times in total; each attempt gets its own database session.
A PersistenceError is final: observations committed before the failure would be
applied a second time by a retry.
"""
import logging
import time
import uuid
from collections import OrderedDict
from threading import Lock
from typing import Any, Callable, Dict, Optional
from sqlmodel import Session

from lexitrack.core.config import settings
from lexitrack.core.database import session_scope
from lexitrack.core.exceptions import PersistenceError
from lexitrack.schemas.learning import LearningEvent, AnalyzeTurnRequest
from lexitrack.services.analysis_service import analyze_conversation_turn
from lexitrack.services.srs_service import process_learning_event
from lexitrack.utils.time_utils import utc_now

logger = logging.getLogger(__name__)

ANALYZE_TURN_JOB = 'analyze-turn'
UPDATE_PROGRESS_JOB = 'update-progress'

JobHandler = Callable[[Session, Dict[str, Any]], Dict[str, Any]]


class UnknownJobError(Exception):
    pass


class LearningQueue:
    """Named job handlers plus a bounded record of waiting, active and finished jobs."""

    def __init__(
        self,
        max_attempts: int = 3,
        backoff_seconds: float = 2.0,
        keep_completed: int = 100,
        keep_failed: int = 50,
        session_factory: Callable = session_scope,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.max_attempts = max_attempts
        self.backoff_seconds = backoff_seconds
        self.keep_completed = keep_completed
        self.keep_failed = keep_failed
        self.session_factory = session_factory
        self.sleep = sleep
        self._handlers: Dict[str, JobHandler] = {}
        self._jobs: "OrderedDict[str, Dict[str, Any]]" = OrderedDict()
        self._lock = Lock()

    def register(self, name: str, handler: JobHandler) -> None:
        self._handlers[name] = handler

    def add(self, name: str, data: Dict[str, Any]) -> str:
        """Record a waiting job and return its id. Call run() to execute it."""
        if name not in self._handlers:
            raise UnknownJobError(f"No handler registered for job '{name}'")

        job_id = str(uuid.uuid4())
        with self._lock:
            self._jobs[job_id] = {
                'job_id': job_id,
                'name': name,
                'data': data,
                'status': 'waiting',
                'attempts': 0,
                'result': None,
                'error': None,
                'created_at': utc_now(),
                'finished_at': None,
            }
        logger.info(f"Queued job {job_id} ({name})")
        return job_id

    def backoff_delay(self, attempt: int) -> float:
        """Delay after a failed attempt: backoff, 2x backoff, 4x backoff, ..."""
        return self.backoff_seconds * (2 ** (attempt - 1))

    def run(self, job_id: str) -> None:
        """Execute a queued job, retrying failures. Never raises; the outcome is recorded on the job."""
        with self._lock:
            job = self._jobs.get(job_id)
        if job is None:
            logger.warning(f"Job {job_id} not found")
            return

        handler = self._handlers[job['name']]

        for attempt in range(1, self.max_attempts + 1):
            with self._lock:
                job['status'] = 'active'
                job['attempts'] = attempt

            try:
                with self.session_factory() as session:
                    result = handler(session, job['data'])
            except Exception as e:
                logger.warning(f"Job {job_id} ({job['name']}) attempt {attempt}/{self.max_attempts} failed: {str(e)}")
                if attempt < self.max_attempts and not isinstance(e, PersistenceError):
                    self.sleep(self.backoff_delay(attempt))
                    continue

                with self._lock:
                    job['status'] = 'failed'
                    job['error'] = str(e)
                    job['finished_at'] = utc_now()
                    self._prune()
                logger.error(f"Job {job_id} ({job['name']}) failed: {str(e)}")
                return

            with self._lock:
                job['status'] = 'completed'
                job['result'] = result
                job['finished_at'] = utc_now()
                self._prune()
            logger.info(f"Job {job_id} ({job['name']}) completed: {result}")
            return

    def get_job(self, job_id: str) -> Optional[Dict[str, Any]]:
        with self._lock:
            job = self._jobs.get(job_id)
            return dict(job) if job else None

    def get_health(self) -> Dict[str, Any]:
        with self._lock:
            statuses = [job['status'] for job in self._jobs.values()]
        return {
            'waiting': statuses.count('waiting'),
            'active': statuses.count('active'),
            'completed': statuses.count('completed'),
            'failed': statuses.count('failed'),
            'backend': 'in-process',
        }

    def _prune(self) -> None:
        # Caller holds the lock
        for status, keep in (('completed', self.keep_completed), ('failed', self.keep_failed)):
            finished = [job_id for job_id, job in self._jobs.items() if job['status'] == status]
            for job_id in finished[:max(0, len(finished) - keep)]:
                del self._jobs[job_id]


def handle_update_progress(session: Session, data: Dict[str, Any]) -> Dict[str, Any]:
    event = LearningEvent.model_validate(data['learning_event'])
    processed = process_learning_event(session, event)
    return {'success': True, 'lexemes_processed': processed}


def handle_analyze_turn(session: Session, data: Dict[str, Any]) -> Dict[str, Any]:
    request = AnalyzeTurnRequest.model_validate(data)
    result = analyze_conversation_turn(
        session,
        user_id=request.user_id,
        utterance=request.utterance,
        conversation_context=request.conversation_context,
        language=request.language,
        history=request.history
    )
    return {'success': True, **result.model_dump()}


learning_queue = LearningQueue(
    max_attempts=settings.queue_max_attempts,
    backoff_seconds=settings.queue_backoff_seconds,
    keep_completed=settings.queue_keep_completed,
    keep_failed=settings.queue_keep_failed,
)
learning_queue.register(UPDATE_PROGRESS_JOB, handle_update_progress)
learning_queue.register(ANALYZE_TURN_JOB, handle_analyze_turn)
