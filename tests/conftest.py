"""
Pytest configuration and fixtures for test isolation.
"""
import copy
import os

import pytest

from mediator.config import MediatorConfig
from mediator.service import build_mediator
from mediator.store import InMemoryStore
from mediator.utils.logging_config import logging_config
from tests.fixtures.mock_llm_responses import SUBJECT_RECORD, TARGET_RECORD, VALIDATION_HISTORY
from tests.fixtures.scripted_service import FakeClock, RecordingSink, ScriptedContentService


MEDIATOR_ENV_VARS = [
    "MEDIATOR_CACHE_CAPACITY",
    "MEDIATOR_CACHE_DECAY_SECONDS",
    "MEDIATOR_PROVIDER",
    "MEDIATOR_TRANSLATE_THRESHOLD",
    "MEDIATOR_CONTEXT_THRESHOLD",
    "MEDIATOR_RESOLUTION_THRESHOLD",
    "MEDIATOR_KEYWORD_TABLE",
    "MEDIATOR_PROMPTS_DIR",
    "MEDIATOR_LOG_LEVEL",
    "MEDIATOR_LOG_FILE",
    "API_KEY",
]


@pytest.fixture(autouse=True)
def isolate_tests(tmp_path, monkeypatch):
    """
    Automatically isolate each test by:
    1. Running from a temporary directory (no stray config or .env files)
    2. Removing mediator environment variables
    3. Resetting the global logging configuration
    """
    monkeypatch.chdir(tmp_path)
    for name in MEDIATOR_ENV_VARS:
        monkeypatch.delenv(name, raising=False)

    yield

    logging_config.reset()


@pytest.fixture(autouse=True, scope="function")
def reset_environment():
    """Reset environment variables between tests."""
    original_env = os.environ.copy()
    yield
    os.environ.clear()
    os.environ.update(original_env)


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def sink():
    return RecordingSink()


@pytest.fixture
def records():
    """Target, subject and validation history records."""
    return [copy.deepcopy(r) for r in [TARGET_RECORD, SUBJECT_RECORD, *VALIDATION_HISTORY]]


@pytest.fixture
def store(records):
    return InMemoryStore(records)


@pytest.fixture
def make_mediator(store, sink, clock):
    """Factory building a mediator around a scripted content service."""
    built = []

    def _make(script=None, content_service=None, config=None):
        service = content_service or ScriptedContentService(script)
        mediator = build_mediator(
            config or MediatorConfig.load_from_dict({}),
            content_service=service,
            store=store,
            sink=sink,
            clock=clock,
        )
        built.append(mediator)
        return mediator, service

    yield _make

    for mediator in built:
        mediator.close()
