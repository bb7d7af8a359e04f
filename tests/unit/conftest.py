"""Shared fixtures for the classroom service tests."""

import itertools

import pytest

from classpulse.domain.entities import Identity
from classpulse.domain.services import (
    Aggregator,
    ClassroomStore,
    EventLog,
    SessionRegistry,
    SnapshotRelay,
)


@pytest.fixture
def store():
    """Fresh in-memory store for each test."""
    return ClassroomStore()


@pytest.fixture
def teacher():
    return Identity(id="t1", email="teacher@example.com", role="teacher")


@pytest.fixture
def registry(store):
    """Registry issuing sess_1, sess_2, ..."""
    counter = itertools.count(1)
    return SessionRegistry(store, id_factory=lambda: f"sess_{next(counter)}")


@pytest.fixture
def event_log(store):
    return EventLog(store)


@pytest.fixture
def aggregator(registry, event_log):
    return Aggregator(registry, event_log)


@pytest.fixture
def relay(store):
    return SnapshotRelay(store, mailbox_size=4)
