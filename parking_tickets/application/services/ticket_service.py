import asyncio
from datetime import datetime
from decimal import Decimal
from typing import Awaitable, Callable, Optional, Tuple, TypeVar

from parking_tickets.application.repositories import AbstractTicketStore
from parking_tickets.domain import billing
from parking_tickets.domain.common import TicketStatus, SettlementOutcome
from parking_tickets.domain.entities import Ticket, Settlement
from parking_tickets.domain.exceptions import (
    StoreUnavailableError,
    TicketConflictError,
    TicketEncodingError,
)
from parking_tickets.shared.clock import new_ticket_id, utc_now
from parking_tickets.shared.utils import logger

T = TypeVar("T")


class TicketService:
    """Issues parking tickets on entry and settles them on exit.

    Holds no state between calls besides the store, so a single instance can
    serve concurrent requests. Double settlement is prevented by writing the
    closed ticket with a conditional put on the ``open`` status.
    """

    def __init__(
        self,
        store: AbstractTicketStore,
        clock: Callable[[], datetime] = utc_now,
        id_factory: Callable[[], str] = new_ticket_id,
        store_timeout: Optional[float] = None,
    ):
        self.store = store
        self.clock = clock
        self.id_factory = id_factory
        self.store_timeout = store_timeout

    async def _call_store(self, operation: Awaitable[T]) -> T:
        if self.store_timeout is None:
            return await operation
        try:
            return await asyncio.wait_for(operation, self.store_timeout)
        except asyncio.TimeoutError as exc:
            raise StoreUnavailableError(f"Store call timed out after {self.store_timeout}s") from exc

    async def open(self, plate: str, parking_lot: int) -> Ticket:
        ticket = Ticket(
            ticket_id=self.id_factory(),
            plate=plate,
            parking_lot=parking_lot,
            entry_time=self.clock(),
        )
        log = logger.bind(ticket_id=ticket.ticket_id, plate=plate, parking_lot=parking_lot)
        log.info("Creating parking ticket")

        try:
            await self._call_store(self.store.put(ticket))
        except (StoreUnavailableError, TicketEncodingError) as exc:
            # Entry is never refused; the ticket may not be retrievable on exit.
            log.error(f"Failed to store ticket {ticket.ticket_id}, returning it unsaved: {exc}")
            return ticket

        log.info(f"Ticket {ticket.ticket_id} issued for {plate} at lot {parking_lot}")
        return ticket

    async def settle(self, ticket_id: str) -> Settlement:
        """Close a ticket and report exactly what happened.

        An already closed ticket is returned as stored, with its original
        charge, and is not written again.
        """
        log = logger.bind(ticket_id=ticket_id)
        log.info("Settling parking ticket")

        try:
            ticket = await self._call_store(self.store.get(ticket_id))
        except StoreUnavailableError as exc:
            log.error(f"Store unavailable while reading ticket {ticket_id}: {exc}")
            return Settlement(SettlementOutcome.STORE_UNAVAILABLE)
        except TicketEncodingError as exc:
            log.error(f"Stored record for ticket {ticket_id} is corrupt: {exc}")
            return Settlement(SettlementOutcome.CORRUPT_RECORD)

        if ticket is None:
            log.warning(f"Ticket {ticket_id} not found")
            return Settlement(SettlementOutcome.NOT_FOUND)

        if ticket.is_closed:
            log.warning(f"Ticket {ticket_id} is already closed, charge {ticket.charge}")
            return Settlement(SettlementOutcome.ALREADY_CLOSED, ticket, ticket.parked_minutes)

        exit_time = self.clock()
        minutes, charge = billing.calculate_charge(ticket.entry_time, exit_time)
        log.info(f"Calculated parking charge: {minutes} minutes, {charge}")

        closed = ticket.closed(exit_time, charge)
        try:
            await self._call_store(self.store.put(closed, expected_status=TicketStatus.OPEN))
        except TicketConflictError:
            log.warning(f"Ticket {ticket_id} was settled by a concurrent request")
            return await self._stored_settlement(ticket_id)
        except (StoreUnavailableError, TicketEncodingError) as exc:
            log.error(f"Failed to store settled ticket {ticket_id}: {exc}")
            return Settlement(SettlementOutcome.STORE_UNAVAILABLE)

        log.info(f"Ticket {ticket_id} settled for {ticket.plate} at lot {ticket.parking_lot}")
        return Settlement(SettlementOutcome.SETTLED, closed, minutes)

    async def _stored_settlement(self, ticket_id: str) -> Settlement:
        log = logger.bind(ticket_id=ticket_id)
        try:
            stored = await self._call_store(self.store.get(ticket_id))
        except StoreUnavailableError as exc:
            log.error(f"Store unavailable while re-reading ticket {ticket_id}: {exc}")
            return Settlement(SettlementOutcome.STORE_UNAVAILABLE)
        except TicketEncodingError as exc:
            log.error(f"Stored record for ticket {ticket_id} is corrupt: {exc}")
            return Settlement(SettlementOutcome.CORRUPT_RECORD)

        if stored is None:
            log.warning(f"Ticket {ticket_id} disappeared during settlement")
            return Settlement(SettlementOutcome.NOT_FOUND)
        return Settlement(SettlementOutcome.ALREADY_CLOSED, stored, stored.parked_minutes)

    async def close(self, ticket_id: str) -> Tuple[Optional[Ticket], bool]:
        settlement = await self.settle(ticket_id)
        if not settlement.found:
            return None, False
        return settlement.ticket, True

    async def get(self, ticket_id: str) -> Optional[Ticket]:
        log = logger.bind(ticket_id=ticket_id)
        try:
            ticket = await self._call_store(self.store.get(ticket_id))
        except StoreUnavailableError as exc:
            log.error(f"Store unavailable while reading ticket {ticket_id}: {exc}")
            return None
        except TicketEncodingError as exc:
            log.error(f"Stored record for ticket {ticket_id} is corrupt: {exc}")
            return None

        if ticket is None:
            log.warning(f"Ticket {ticket_id} not found")
        return ticket

    async def remove(self, ticket_id: str) -> bool:
        log = logger.bind(ticket_id=ticket_id)
        log.info("Removing ticket")
        try:
            await self._call_store(self.store.delete(ticket_id))
        except StoreUnavailableError as exc:
            log.error(f"Failed to delete ticket {ticket_id}: {exc}")
            return False

        log.info(f"Ticket {ticket_id} removed")
        return True

    def calculate_charge(self, entry_time: datetime) -> Tuple[int, Decimal]:
        return billing.calculate_charge(entry_time, self.clock())
