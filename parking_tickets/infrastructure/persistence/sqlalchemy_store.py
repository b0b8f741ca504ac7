from typing import Optional

from sqlalchemy import and_, delete, insert, select, update
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from parking_tickets.application.repositories import AbstractTicketStore
from parking_tickets.domain.common import TicketStatus
from parking_tickets.domain.entities import Ticket
from parking_tickets.domain.exceptions import StoreUnavailableError, TicketConflictError
from parking_tickets.infrastructure.persistence.codec import decode_ticket, encode_ticket
from parking_tickets.infrastructure.persistence.models import build_tickets_table

# Dialects with a native INSERT ... ON CONFLICT DO UPDATE
UPSERT_INSERTS = {
    "sqlite": sqlite.insert,
    "postgresql": postgresql.insert,
}


class SQLAlchemyTicketStore(AbstractTicketStore):
    """Ticket store over a single SQL table keyed by ticket id.

    Every operation opens its own session and transaction, so one store can be
    shared between concurrent callers.
    """

    def __init__(self, session_factory: async_sessionmaker[AsyncSession], table_name: str):
        self.session_factory = session_factory
        self.table = build_tickets_table(table_name)

    async def put(self, ticket: Ticket, expected_status: Optional[TicketStatus] = None) -> None:
        values = encode_ticket(ticket, by_alias=False, json_safe=False)
        try:
            async with self.session_factory() as session:
                async with session.begin():
                    if expected_status is not None:
                        await self._compare_and_swap(session, ticket.ticket_id, values, expected_status)
                    else:
                        await self._upsert(session, ticket.ticket_id, values)
        except SQLAlchemyError as exc:
            raise StoreUnavailableError(f"Failed to write ticket {ticket.ticket_id}: {exc}") from exc

    async def _upsert(self, session: AsyncSession, ticket_id: str, values: dict) -> None:
        changes = {column: value for column, value in values.items() if column != "ticket_id"}
        dialect_insert = UPSERT_INSERTS.get(session.bind.dialect.name)
        if dialect_insert is not None:
            statement = dialect_insert(self.table).values(**values)
            await session.execute(
                statement.on_conflict_do_update(index_elements=[self.table.c.ticket_id], set_=changes)
            )
            return

        # Other dialects: insert, and on a duplicate key overwrite instead
        try:
            async with session.begin_nested():
                await session.execute(insert(self.table).values(**values))
        except IntegrityError:
            await session.execute(
                update(self.table).where(self.table.c.ticket_id == ticket_id).values(**changes)
            )

    async def _compare_and_swap(
        self, session: AsyncSession, ticket_id: str, values: dict, expected_status: TicketStatus
    ) -> None:
        key = self.table.c.ticket_id == ticket_id
        expected = TicketStatus(expected_status).value
        result = await session.execute(
            update(self.table).where(and_(key, self.table.c.status == expected)).values(**values)
        )
        if result.rowcount != 1:
            current = await session.execute(select(self.table.c.status).where(key))
            raise TicketConflictError(ticket_id, expected_status, current.scalar())

    async def get(self, ticket_id: str) -> Optional[Ticket]:
        try:
            async with self.session_factory() as session:
                result = await session.execute(
                    select(self.table).where(self.table.c.ticket_id == ticket_id)
                )
                row = result.mappings().first()
        except SQLAlchemyError as exc:
            raise StoreUnavailableError(f"Failed to read ticket {ticket_id}: {exc}") from exc

        if row is None:
            return None
        return decode_ticket(dict(row))

    async def delete(self, ticket_id: str) -> None:
        try:
            async with self.session_factory() as session:
                async with session.begin():
                    await session.execute(
                        delete(self.table).where(self.table.c.ticket_id == ticket_id)
                    )
        except SQLAlchemyError as exc:
            raise StoreUnavailableError(f"Failed to delete ticket {ticket_id}: {exc}") from exc
