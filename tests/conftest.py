import asyncio
import os
import tempfile
from datetime import datetime, timedelta, timezone
from itertools import count
from typing import Optional

import pytest
from loguru import logger
from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.pool import NullPool

from parking_tickets.application.services.ticket_service import TicketService
from parking_tickets.domain.common import TicketStatus
from parking_tickets.domain.entities import Ticket
from parking_tickets.infrastructure.persistence.database import create_session_factory, init_db
from parking_tickets.infrastructure.persistence.memory_store import InMemoryTicketStore
from parking_tickets.infrastructure.persistence.sqlalchemy_store import SQLAlchemyTicketStore

TEST_TABLE = "testParkingTickets"
ENTRY_TIME = datetime(2024, 3, 1, 9, 0, 0, tzinfo=timezone.utc)


class FakeClock:
    """Manually advanced clock."""

    def __init__(self, start: datetime = ENTRY_TIME):
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs):
        self.now += timedelta(**kwargs)


class SequentialIds:
    def __init__(self, prefix: str = "ticket"):
        self.prefix = prefix
        self._counter = count(1)

    def __call__(self) -> str:
        return f"{self.prefix}-{next(self._counter)}"


class RecordingStore(InMemoryTicketStore):
    """In-memory store that remembers every write."""

    def __init__(self):
        super().__init__()
        self.writes = []

    async def put(self, ticket: Ticket, expected_status: Optional[TicketStatus] = None) -> None:
        self.writes.append((ticket.ticket_id, ticket.status, expected_status))
        await super().put(ticket, expected_status)


class YieldingStore(InMemoryTicketStore):
    """In-memory store whose reads give other tasks a chance to run first."""

    async def get(self, ticket_id: str) -> Optional[Ticket]:
        await asyncio.sleep(0)
        return await super().get(ticket_id)


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def ids():
    return SequentialIds()


@pytest.fixture
def memory_store():
    return RecordingStore()


@pytest.fixture
def ticket_service(memory_store, clock, ids):
    """TicketService over the recording in-memory store with a fake clock."""
    return TicketService(store=memory_store, clock=clock, id_factory=ids)


@pytest.fixture
def open_ticket():
    return Ticket(ticket_id="ticket-42", plate="ABC-123", parking_lot=5, entry_time=ENTRY_TIME)


@pytest.fixture(scope="function")
async def test_engine():
    """Create a test database with the tickets table for each test function."""
    with tempfile.NamedTemporaryFile(suffix=".db", delete=False) as tmp_file:
        test_db_path = tmp_file.name

    engine = create_async_engine(
        f"sqlite+aiosqlite:///{test_db_path}",
        poolclass=NullPool,
        echo=False
    )
    await init_db(engine, TEST_TABLE)

    yield engine

    await engine.dispose()
    os.unlink(test_db_path)


@pytest.fixture
async def sql_store(test_engine):
    return SQLAlchemyTicketStore(create_session_factory(test_engine), TEST_TABLE)


@pytest.fixture
def log_messages():
    """Collect formatted log lines emitted during the test."""
    messages = []
    handler_id = logger.add(lambda message: messages.append(str(message)), level="TRACE", format="{level}|{message}")
    yield messages
    logger.remove(handler_id)


@pytest.fixture
def entry_time():
    return ENTRY_TIME


@pytest.fixture
def yielding_store():
    return YieldingStore()
