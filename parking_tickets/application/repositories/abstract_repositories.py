from abc import ABC, abstractmethod
from typing import Optional

from parking_tickets.domain.common import TicketStatus
from parking_tickets.domain.entities import Ticket


class AbstractTicketStore(ABC):
    """Keyed persistence of tickets, independent of the backend.

    Implementations raise ``StoreUnavailableError`` when the backend fails and
    ``TicketEncodingError`` when a stored record cannot be read back. A missing
    record is not an error.
    """

    @abstractmethod
    async def put(self, ticket: Ticket, expected_status: Optional[TicketStatus] = None) -> None:
        """Insert or overwrite the record keyed by ``ticket.ticket_id``.

        With ``expected_status`` the write only lands if a record exists whose
        current status matches; otherwise ``TicketConflictError`` is raised.
        """
        pass

    @abstractmethod
    async def get(self, ticket_id: str) -> Optional[Ticket]:
        pass

    @abstractmethod
    async def delete(self, ticket_id: str) -> None:
        pass
