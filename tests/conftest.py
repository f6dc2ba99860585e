"""
Pytest Fixtures
===============

Shared fixtures for data assistant tests.
"""

import pytest
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.pool import StaticPool

from data_assistant.assistant import DataAssistant
from data_assistant.executor import QueryExecutor
from data_assistant.llm.mock import MockLLM
from data_assistant.prompts import PromptComposer
from data_assistant.schema_context import SCHEMA

PARTICIPANT_COUNT = 156


def _create_schema_tables(engine: Engine) -> None:
    """Create tables matching the schema descriptor in SQLite."""
    with engine.begin() as conn:
        for table, info in SCHEMA.items():
            columns = ", ".join(
                f'"{column}" {column_type}'
                for column, (column_type, _) in info["columns"].items()
            )
            conn.exec_driver_sql(f'CREATE TABLE "{table}" ({columns})')


def _seed(engine: Engine) -> None:
    with engine.begin() as conn:
        conn.exec_driver_sql(
            'INSERT INTO "Participant" ("ParticipantID", "ParticipantFirstName", '
            '"ParticipantCity", "ParticipantFieldOfInterest") VALUES (?, ?, ?, ?)',
            [
                (index, f"Participant {index}", "Provo" if index % 2 else "Orem", "Engineering")
                for index in range(1, PARTICIPANT_COUNT + 1)
            ],
        )
        conn.exec_driver_sql(
            'INSERT INTO "Donation" ("DonationID", "ParticipantID", "DonationDate", '
            '"DonationAmount") VALUES (?, ?, ?, ?)',
            [
                (1, 1, "2024-01-15", 250.00),
                (2, 2, "2024-03-02", 100.50),
                (3, None, "2025-06-30", 1000.00),
            ],
        )


@pytest.fixture
def engine() -> Engine:
    """In-memory SQLite database shared across pooled connections."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    _create_schema_tables(engine)
    _seed(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def executor(engine: Engine) -> QueryExecutor:
    """Create a QueryExecutor bound to the test database."""
    return QueryExecutor(engine)


@pytest.fixture
def composer() -> PromptComposer:
    """Create a PromptComposer with the default window."""
    return PromptComposer()


class CountingExecutor(QueryExecutor):
    """QueryExecutor that records every query it is asked to run."""

    def __init__(self, engine: Engine) -> None:
        super().__init__(engine)
        self.queries: list[str] = []

    def execute(self, sql: str):
        self.queries.append(sql)
        return super().execute(sql)


@pytest.fixture
def counting_executor(engine: Engine) -> CountingExecutor:
    """Executor that counts execution attempts."""
    return CountingExecutor(engine)


@pytest.fixture
def make_assistant(counting_executor: CountingExecutor):
    """Factory building an assistant around a scripted model."""

    def factory(responses: list[str]) -> tuple[DataAssistant, MockLLM]:
        llm = MockLLM(responses=responses)
        return DataAssistant(llm=llm, executor=counting_executor), llm

    return factory
