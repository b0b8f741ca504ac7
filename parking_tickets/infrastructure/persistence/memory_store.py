"""
In-memory storage implementation for tickets.
"""
from typing import Any, Dict, Optional

from parking_tickets.application.repositories import AbstractTicketStore
from parking_tickets.domain.common import TicketStatus
from parking_tickets.domain.entities import Ticket
from parking_tickets.domain.exceptions import TicketConflictError
from parking_tickets.infrastructure.persistence.codec import decode_ticket, encode_ticket


class InMemoryTicketStore(AbstractTicketStore):
    """Ticket store backed by a dict of encoded records.

    Records are stored encoded, so callers never share state with the store.
    None of the methods await between reading and writing the dict, which makes
    each operation atomic within an event loop.
    """

    def __init__(self):
        self._items: Dict[str, Dict[str, Any]] = {}

    async def put(self, ticket: Ticket, expected_status: Optional[TicketStatus] = None) -> None:
        item = encode_ticket(ticket)
        if expected_status is not None:
            current = self._items.get(ticket.ticket_id)
            current_status = current.get("status") if current else None
            if current_status != TicketStatus(expected_status).value:
                raise TicketConflictError(ticket.ticket_id, expected_status, current_status)
        self._items[ticket.ticket_id] = item

    async def get(self, ticket_id: str) -> Optional[Ticket]:
        item = self._items.get(ticket_id)
        if item is None:
            return None
        return decode_ticket(dict(item))

    async def delete(self, ticket_id: str) -> None:
        self._items.pop(ticket_id, None)

    def count(self) -> int:
        """Number of stored records."""
        return len(self._items)

    def clear(self) -> None:
        self._items.clear()
