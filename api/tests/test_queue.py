from contextlib import contextmanager

import pytest
from sqlalchemy.exc import OperationalError
from sqlmodel import select

from lexitrack.core.exceptions import AnalysisError, PersistenceError
from lexitrack.models import LearningProgress
from lexitrack.services import srs_service
from lexitrack.services.queue_service import (
    LearningQueue,
    UnknownJobError,
    UPDATE_PROGRESS_JOB,
    handle_update_progress,
)


@contextmanager
def no_session():
    yield None


def make_queue(**kwargs):
    sleeps = []
    queue = LearningQueue(session_factory=no_session, sleep=sleeps.append, **kwargs)
    return queue, sleeps


def test_successful_job_is_completed():
    queue, sleeps = make_queue()
    queue.register("echo", lambda session, data: {"echo": data["value"]})

    job_id = queue.add("echo", {"value": 42})
    assert queue.get_job(job_id)["status"] == "waiting"

    queue.run(job_id)

    job = queue.get_job(job_id)
    assert job["status"] == "completed"
    assert job["attempts"] == 1
    assert job["result"] == {"echo": 42}
    assert job["finished_at"] is not None
    assert sleeps == []


def test_failing_job_retries_with_exponential_backoff():
    queue, sleeps = make_queue(max_attempts=3, backoff_seconds=2.0)
    calls = []

    def flaky(session, data):
        calls.append(1)
        raise RuntimeError("upstream unavailable")

    queue.register("flaky", flaky)
    job_id = queue.add("flaky", {})
    queue.run(job_id)

    job = queue.get_job(job_id)
    assert len(calls) == 3
    assert sleeps == [2.0, 4.0]
    assert job["status"] == "failed"
    assert job["attempts"] == 3
    assert job["error"] == "upstream unavailable"


def test_job_succeeds_after_retry():
    queue, sleeps = make_queue()
    outcomes = [RuntimeError("first"), {"ok": True}]

    def handler(session, data):
        outcome = outcomes.pop(0)
        if isinstance(outcome, Exception):
            raise outcome
        return outcome

    queue.register("retry", handler)
    job_id = queue.add("retry", {})
    queue.run(job_id)

    job = queue.get_job(job_id)
    assert job["status"] == "completed"
    assert job["attempts"] == 2
    assert sleeps == [2.0]


def test_unknown_job_name_is_rejected():
    queue, _ = make_queue()
    with pytest.raises(UnknownJobError):
        queue.add("missing", {})


def test_health_counts_jobs_by_status():
    queue, _ = make_queue(max_attempts=1)
    queue.register("ok", lambda session, data: {})
    queue.register("bad", lambda session, data: 1 / 0)

    queue.run(queue.add("ok", {}))
    queue.run(queue.add("bad", {}))
    queue.add("ok", {})

    health = queue.get_health()
    assert health == {"waiting": 1, "active": 0, "completed": 1, "failed": 1, "backend": "in-process"}


def test_finished_jobs_are_pruned_oldest_first():
    queue, _ = make_queue(max_attempts=1, keep_completed=2, keep_failed=1)
    queue.register("ok", lambda session, data: {})
    queue.register("bad", lambda session, data: 1 / 0)

    completed = [queue.add("ok", {}) for _ in range(3)]
    for job_id in completed:
        queue.run(job_id)
    failed = [queue.add("bad", {}) for _ in range(2)]
    for job_id in failed:
        queue.run(job_id)

    assert queue.get_job(completed[0]) is None
    assert queue.get_job(completed[1]) is not None
    assert queue.get_job(completed[2]) is not None
    assert queue.get_job(failed[0]) is None
    assert queue.get_job(failed[1])["status"] == "failed"


def test_backoff_delay():
    queue, _ = make_queue(backoff_seconds=2.0)
    assert [queue.backoff_delay(attempt) for attempt in (1, 2, 3)] == [2.0, 4.0, 8.0]


def test_persistence_failure_is_not_retried():
    queue, sleeps = make_queue(max_attempts=3)
    calls = []

    def handler(session, data):
        calls.append(1)
        raise PersistenceError("Failed to update progress for 'дом'", lemma="дом")

    queue.register("persist", handler)
    job_id = queue.add("persist", {})
    queue.run(job_id)

    job = queue.get_job(job_id)
    assert len(calls) == 1
    assert sleeps == []
    assert job["status"] == "failed"
    assert job["attempts"] == 1


def test_analysis_failure_is_retried():
    queue, sleeps = make_queue(max_attempts=2)
    def handler(session, data):
        raise AnalysisError("rate limited")

    queue.register("analyze", handler)

    queue.run(queue.add("analyze", {}))
    assert sleeps == [2.0]


def test_partially_applied_event_is_not_applied_twice(session, monkeypatch):
    ensure_lexeme = srs_service.ensure_lexeme
    failures = ["кот"]

    def flaky_ensure_lexeme(session, lemma, language, pos):
        if lemma in failures:
            failures.remove(lemma)
            raise OperationalError("INSERT", {}, Exception("database is locked"))
        return ensure_lexeme(session, lemma, language, pos)

    monkeypatch.setattr(srs_service, "ensure_lexeme", flaky_ensure_lexeme)

    @contextmanager
    def test_session():
        yield session

    sleeps = []
    queue = LearningQueue(session_factory=test_session, sleep=sleeps.append)
    queue.register(UPDATE_PROGRESS_JOB, handle_update_progress)

    job_id = queue.add(UPDATE_PROGRESS_JOB, {"learning_event": {
        "user_id": "u1",
        "language": "ru",
        "lexemes": [
            {"lemma": "дом", "form": "дом", "pos": "NOUN", "performance": "correct_use"},
            {"lemma": "кот", "form": "кот", "pos": "NOUN", "performance": "correct_use"},
        ],
    }})
    queue.run(job_id)

    job = queue.get_job(job_id)
    assert job["status"] == "failed"
    assert job["attempts"] == 1
    assert "database is locked" in job["error"]
    assert sleeps == []

    progress = session.exec(select(LearningProgress)).one()
    assert progress.total_encounters == 1
    assert progress.srs_level == 2
