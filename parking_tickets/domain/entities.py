from datetime import datetime
from decimal import Decimal
from typing import Optional

from parking_tickets.domain.billing import ZERO_CHARGE, elapsed_minutes, reported_minutes
from parking_tickets.domain.common import TicketStatus, SettlementOutcome


class Ticket:
    def __init__(
        self,
        ticket_id: str,
        plate: str,
        parking_lot: int,
        entry_time: datetime,
        status: TicketStatus = TicketStatus.OPEN,
        charge: Decimal = ZERO_CHARGE,
        exit_time: Optional[datetime] = None,
    ):
        self.ticket_id = ticket_id
        self.plate = plate
        self.parking_lot = parking_lot
        self.entry_time = entry_time
        self.status = status
        self.charge = charge
        self.exit_time = exit_time

    @property
    def is_closed(self) -> bool:
        return self.status == TicketStatus.CLOSED

    @property
    def parked_minutes(self) -> Optional[int]:
        if self.exit_time is None:
            return None
        return reported_minutes(elapsed_minutes(self.entry_time, self.exit_time))

    def closed(self, exit_time: datetime, charge: Decimal) -> "Ticket":
        """Return a settled copy of this ticket; the original is left untouched."""
        return Ticket(
            ticket_id=self.ticket_id,
            plate=self.plate,
            parking_lot=self.parking_lot,
            entry_time=self.entry_time,
            status=TicketStatus.CLOSED,
            charge=charge,
            exit_time=exit_time,
        )

    def __repr__(self) -> str:
        return (
            f"Ticket(ticket_id={self.ticket_id!r}, plate={self.plate!r}, "
            f"parking_lot={self.parking_lot}, status={self.status.value}, charge={self.charge})"
        )


class Settlement:
    """Outcome of a close attempt, with the ticket when one could be read."""

    def __init__(
        self,
        outcome: SettlementOutcome,
        ticket: Optional[Ticket] = None,
        parked_minutes: Optional[int] = None,
    ):
        self.outcome = outcome
        self.ticket = ticket
        self.parked_minutes = parked_minutes

    @property
    def found(self) -> bool:
        return self.outcome in (SettlementOutcome.SETTLED, SettlementOutcome.ALREADY_CLOSED)
