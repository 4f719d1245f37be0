import threading
from datetime import datetime, time, timedelta, timezone

import pytest
from sqlalchemy.exc import OperationalError
from sqlmodel import SQLModel, Session, select

from lexitrack.core.database import build_engine
from lexitrack.core.exceptions import NotFoundError, PersistenceError
from lexitrack.models import Lexeme, LearningProgress, User
from lexitrack.schemas.learning import LearningEvent, LexemeObservation
from lexitrack.services import srs_service
from lexitrack.utils.time_utils import utc_today


def observe(session, lemma, form, performance, pos="VERB", user_id="u1", language="ru", now=None, error=None):
    observation = LexemeObservation(lemma=lemma, form=form, pos=pos, performance=performance, error=error)
    return srs_service.update_user_progress(session, user_id, language, observation, now=now)


def days_ago(days):
    return datetime.combine(utc_today(), time(12, 0), tzinfo=timezone.utc) - timedelta(days=days)


def test_first_observation_creates_records(session):
    progress = observe(session, "читать", "читаю", "introduced", now=days_ago(0))

    assert session.get(User, "u1") is not None
    assert len(session.exec(select(Lexeme)).all()) == 1
    assert progress.srs_level == 1
    assert progress.total_encounters == 1
    assert progress.next_review == utc_today() + timedelta(days=1)
    assert progress.next_review >= progress.created_at.date()


def test_reading_scenario(session):
    observe(session, "читать", "читаю", "correct_use")
    progress = observe(session, "читать", "читаешь", "wrong_use")

    assert progress.success_rate == 0.5
    assert progress.total_encounters == 2
    assert progress.correct_uses == 1
    assert progress.srs_level == 1

    detail = srs_service.get_lexeme_progress(session, "u1", "ru", "читать")
    assert detail.weakest_forms == ["читаешь"]
    assert detail.form_stats["читаешь"].common_errors == ["verb form error"]
    assert detail.form_stats["читаешь"].morph_features == {"person": "2", "number": "sing", "tense": "pres"}
    assert detail.error_patterns[0].error == "verb form error"


def test_same_observation_twice_counts_twice(session):
    observe(session, "читать", "читаю", "correct_use")
    progress = observe(session, "читать", "читаю", "correct_use")

    assert progress.total_encounters == 2
    assert progress.get_form_stats()["читаю"].encounters == 2
    assert progress.srs_level == 3
    assert len(session.exec(select(LearningProgress)).all()) == 1


def test_lemma_form_has_no_morph_features(session):
    progress = observe(session, "читать", "читать", "introduced")
    assert progress.get_form_stats()["читать"].morph_features == {}


def test_observation_error_tag_wins_over_default(session):
    progress = observe(session, "книга", "книгу", "wrong_use", pos="NOUN", error="wrong case after в")
    assert progress.get_form_stats()["книгу"].common_errors == ["wrong case after в"]


def test_same_lemma_in_other_language_is_separate(session):
    observe(session, "casa", "casa", "introduced", pos="NOUN", language="es")
    observe(session, "casa", "casa", "introduced", pos="NOUN", language="ru")

    assert len(session.exec(select(Lexeme)).all()) == 2


def test_known_words_respects_min_level(session):
    observe(session, "дом", "дом", "correct_use", pos="NOUN")
    observe(session, "дом", "дом", "correct_use", pos="NOUN")
    observe(session, "кот", "кот", "correct_use", pos="NOUN")

    assert srs_service.get_known_words(session, "u1", "ru", min_level=3) == ["дом"]
    assert srs_service.get_known_words(session, "u1", "ru", min_level=2) == ["дом", "кот"]
    assert srs_service.get_known_words(session, "u1", "es", min_level=1) == []


def test_known_words_requires_success_rate_above_threshold(session):
    observe(session, "дом", "дома", "wrong_use", pos="NOUN")
    for _ in range(3):
        observe(session, "дом", "дом", "correct_use", pos="NOUN")

    # level 4 but success rate 0.75
    assert srs_service.get_known_words(session, "u1", "ru") == ["дом"]

    observe(session, "дом", "дома", "wrong_use", pos="NOUN")
    assert srs_service.get_known_words(session, "u1", "ru", min_level=1) == []


def test_review_due_ordering(session):
    observe(session, "дом", "дом", "introduced", pos="NOUN", now=days_ago(10))
    observe(session, "кот", "кот", "correct_use", pos="NOUN", now=days_ago(5))
    observe(session, "книга", "книга", "introduced", pos="NOUN", now=days_ago(4))
    observe(session, "собака", "собака", "correct_use", pos="NOUN")

    due = srs_service.get_review_due(session, "u1", "ru", today=utc_today())

    assert [item.lemma for item in due] == ["дом", "книга", "кот"]
    assert due[0].days_overdue == 9
    assert due[1].srs_level == 1
    assert due[2].srs_level == 2
    assert all(item.next_review <= utc_today() for item in due)

    assert len(srs_service.get_review_due(session, "u1", "ru", limit=2)) == 2


def test_user_progress_summary(session):
    observe(session, "дом", "дом", "correct_use", pos="NOUN", now=days_ago(10))
    observe(session, "дом", "дом", "correct_use", pos="NOUN", now=days_ago(10))
    observe(session, "кот", "коты", "wrong_use", pos="NOUN")

    summary = srs_service.get_user_progress(session, "u1", "ru")

    assert summary.total_words == 2
    assert summary.known_words == 1
    assert summary.review_due == 1
    assert summary.average_success_rate == 0.5
    assert summary.last_activity is not None


def test_user_progress_summary_empty(session):
    summary = srs_service.get_user_progress(session, "nobody", "ru")

    assert summary.total_words == 0
    assert summary.average_success_rate == 0.0
    assert summary.last_activity is None


def test_lexeme_progress_not_found(session):
    with pytest.raises(NotFoundError):
        srs_service.get_lexeme_progress(session, "u1", "ru", "читать")


def test_process_event_applies_all_observations(session):
    event = LearningEvent(
        user_id="u1",
        language="RU",
        lexemes=[
            LexemeObservation(lemma="Читать", form="читаю", pos="verb", performance="correct_use"),
            LexemeObservation(lemma="книга", form="книгу", pos="NOUN", performance="introduced"),
        ],
    )

    assert srs_service.process_learning_event(session, event) == 2
    assert {lexeme.lemma for lexeme in session.exec(select(Lexeme)).all()} == {"читать", "книга"}


def test_process_event_stops_at_first_failure(session, monkeypatch):
    ensure_lexeme = srs_service.ensure_lexeme

    def failing_ensure_lexeme(session, lemma, language, pos):
        if lemma == "кот":
            raise OperationalError("INSERT", {}, Exception("database is locked"))
        return ensure_lexeme(session, lemma, language, pos)

    monkeypatch.setattr(srs_service, "ensure_lexeme", failing_ensure_lexeme)

    event = LearningEvent(
        user_id="u1",
        language="ru",
        lexemes=[
            LexemeObservation(lemma="дом", form="дом", pos="NOUN", performance="introduced"),
            LexemeObservation(lemma="кот", form="кот", pos="NOUN", performance="introduced"),
            LexemeObservation(lemma="книга", form="книга", pos="NOUN", performance="introduced"),
        ],
    )

    with pytest.raises(PersistenceError) as exc_info:
        srs_service.process_learning_event(session, event)

    assert exc_info.value.lemma == "кот"
    assert "database is locked" in str(exc_info.value)
    assert [lexeme.lemma for lexeme in session.exec(select(Lexeme)).all()] == ["дом"]


def test_review_due_defaults_to_utc_date(session):
    observe(session, "дом", "дом", "introduced", pos="NOUN", now=days_ago(1))
    progress = observe(session, "кот", "кот", "introduced", pos="NOUN")

    assert progress.next_review == utc_today() + timedelta(days=1)
    assert progress.get_form_stats()["кот"].last_seen.tzinfo is not None

    due = srs_service.get_review_due(session, "u1", "ru")
    assert [(item.lemma, item.days_overdue) for item in due] == [("дом", 0)]
    assert srs_service.get_user_progress(session, "u1", "ru").review_due == 1


def deactivate(session, lemma):
    progress, _ = session.exec(
        select(LearningProgress, Lexeme)
        .join(Lexeme, LearningProgress.lexeme_id == Lexeme.id)
        .where(Lexeme.lemma == lemma)
    ).one()
    progress.active = False
    session.add(progress)
    session.commit()


def test_inactive_records_are_not_known_words(session):
    for lemma in ("дом", "кот"):
        observe(session, lemma, lemma, "correct_use", pos="NOUN")
        observe(session, lemma, lemma, "correct_use", pos="NOUN")

    deactivate(session, "кот")

    assert srs_service.get_known_words(session, "u1", "ru") == ["дом"]


def test_inactive_records_are_not_due(session):
    observe(session, "дом", "дом", "introduced", pos="NOUN", now=days_ago(5))
    observe(session, "кот", "кот", "introduced", pos="NOUN", now=days_ago(5))

    deactivate(session, "дом")

    assert [item.lemma for item in srs_service.get_review_due(session, "u1", "ru")] == ["кот"]


def test_inactive_records_are_left_out_of_summary(session):
    observe(session, "дом", "дом", "correct_use", pos="NOUN", now=days_ago(10))
    observe(session, "дом", "дом", "correct_use", pos="NOUN", now=days_ago(10))
    observe(session, "кот", "коты", "wrong_use", pos="NOUN", now=days_ago(3))

    deactivate(session, "дом")
    summary = srs_service.get_user_progress(session, "u1", "ru")

    assert summary.total_words == 1
    assert summary.known_words == 0
    assert summary.review_due == 1
    assert summary.average_success_rate == 0.0


def test_progress_lock_is_stable_per_key():
    lock = srs_service._progress_lock("u1", 7)

    assert srs_service._progress_lock("u1", 7) is lock
    for lexeme_id in range(1000):
        srs_service._progress_lock("u1", lexeme_id)
    assert len(srs_service._progress_locks) == srs_service.PROGRESS_LOCK_STRIPES


def test_concurrent_updates_of_one_lemma_are_not_lost(tmp_path):
    # File database so each thread gets its own connection
    engine = build_engine(f"sqlite:///{tmp_path / 'progress.db'}")
    SQLModel.metadata.create_all(engine)
    with Session(engine) as session:
        srs_service.ensure_user(session, "u1")
        srs_service.ensure_lexeme(session, "дом", "ru", "NOUN")

    workers = 8
    barrier = threading.Barrier(workers)
    errors = []

    def learner():
        barrier.wait()
        try:
            with Session(engine) as session:
                observe(session, "дом", "дома", "correct_use", pos="NOUN")
        except Exception as e:
            errors.append(e)

    threads = [threading.Thread(target=learner) for _ in range(workers)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    with Session(engine) as session:
        progress = session.exec(select(LearningProgress)).one()
        assert errors == []
        assert progress.total_encounters == workers
        assert progress.correct_uses == workers
        assert progress.get_form_stats()["дома"].encounters == workers
        assert progress.srs_level == srs_service.MAX_LEVEL
    engine.dispose()
