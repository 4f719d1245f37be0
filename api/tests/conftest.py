import os

# Settings are read at import time
os.environ["DATABASE_URL"] = "sqlite://"
os.environ.setdefault("OPENAI_API_KEY", "test-key")

from contextlib import contextmanager

import pytest
from fastapi.testclient import TestClient
from sqlmodel import SQLModel, Session

from lexitrack import models  # noqa: F401
from lexitrack.core.database import engine, get_session
from lexitrack.main import app
from lexitrack.services.queue_service import learning_queue


@pytest.fixture
def session():
    SQLModel.metadata.create_all(engine)
    with Session(engine) as session:
        yield session
    SQLModel.metadata.drop_all(engine)


@pytest.fixture
def queue_session(monkeypatch, session):
    """Route queue jobs to the test session and skip backoff sleeps."""
    sleeps = []

    @contextmanager
    def session_factory():
        yield session

    monkeypatch.setattr(learning_queue, "session_factory", session_factory)
    monkeypatch.setattr(learning_queue, "sleep", sleeps.append)
    return sleeps


@pytest.fixture
def client(session, queue_session):
    def get_session_override():
        yield session

    app.dependency_overrides[get_session] = get_session_override
    with TestClient(app) as client:
        yield client
    app.dependency_overrides.clear()


class FakeResponse:
    """Stand-in for requests.Response."""

    def __init__(self, payload, status_code=200):
        self._payload = payload
        self.status_code = status_code

    def raise_for_status(self):
        pass

    def json(self):
        return self._payload


class FakeResponsesAPI:
    """Replays queued Responses API payloads and records request bodies."""

    def __init__(self):
        self.payloads = []
        self.requests = []

    def post(self, url, json=None, headers=None, timeout=None):
        self.requests.append({"url": url, "json": json, "headers": headers})
        return FakeResponse(self.payloads.pop(0))

    def add_text(self, text):
        self.payloads.append({"output": [{"type": "message", "content": [{"type": "output_text", "text": text}]}]})

    def add_function_call(self, name, arguments="{}", call_id="call_1"):
        self.payloads.append({"output": [{"type": "function_call", "name": name, "arguments": arguments, "call_id": call_id}]})


@pytest.fixture
def responses_api(monkeypatch):
    from lexitrack.core.config import settings
    from lexitrack.services import llm_service

    fake = FakeResponsesAPI()
    monkeypatch.setattr(settings, "openai_api_key", "test-key")
    monkeypatch.setattr(llm_service.requests, "post", fake.post)
    return fake
