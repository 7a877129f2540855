"""Pytest fixtures for the vote API tests.

The app under test runs against an in-memory stand-in for PostgreSQL and
an in-memory span exporter, so no docker stack is needed.
"""

from collections import Counter
from typing import Dict, Generator, List

import pytest
from fastapi.testclient import TestClient
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import SimpleSpanProcessor
from opentelemetry.sdk.trace.export.in_memory_span_exporter import InMemorySpanExporter

from services.vote_api.config import Settings
from services.vote_api.errors import StoreError
from services.vote_api.main import create_app


class FakeDatabase:
    """Append-only vote store kept in a list."""

    def __init__(self):
        self.votes: List[str] = []
        self.fail = False
        self.initialized = False
        self.schema_created = False
        self.closed = False
        self.retry_policy = None
        self.initialize_error = None

    async def initialize(self, retry_policy):
        if self.initialize_error:
            raise self.initialize_error
        self.initialized = True
        self.retry_policy = retry_policy

    async def ensure_schema(self):
        self.schema_created = True

    async def insert_vote(self, team: str):
        if self.fail:
            raise StoreError("Failed to record vote")
        self.votes.append(team)

    async def count_votes(self) -> Dict[str, int]:
        if self.fail:
            raise StoreError("Failed to count votes")
        return dict(Counter(self.votes))

    async def close(self):
        self.closed = True


@pytest.fixture
def settings() -> Settings:
    """Settings with trace export disabled and a short readiness wait."""
    return Settings(
        OTEL_ENABLED=False,
        DB_READY_INTERVAL_SECONDS=0.01,
        DB_READY_TIMEOUT_SECONDS=0.1,
    )


@pytest.fixture
def fake_db() -> FakeDatabase:
    return FakeDatabase()


@pytest.fixture
def span_exporter() -> InMemorySpanExporter:
    return InMemorySpanExporter()


@pytest.fixture
def tracer_provider(span_exporter: InMemorySpanExporter) -> TracerProvider:
    provider = TracerProvider()
    provider.add_span_processor(SimpleSpanProcessor(span_exporter))
    return provider


@pytest.fixture
def app(settings, fake_db, tracer_provider):
    return create_app(settings, database=fake_db, tracer_provider=tracer_provider)


@pytest.fixture
def client(app) -> Generator[TestClient, None, None]:
    """HTTP client running the app lifespan."""
    with TestClient(app) as test_client:
        yield test_client
