from datetime import datetime, timedelta, timezone
from decimal import Decimal

from parking_tickets.domain.common import TicketStatus, SettlementOutcome
from parking_tickets.domain.entities import Ticket, Settlement


def test_ticket_creation_defaults():
    """A new ticket is open with no charge and no exit time."""
    entry = datetime.now(timezone.utc)
    ticket = Ticket(ticket_id="t-1", plate="ABC-123", parking_lot=5, entry_time=entry)
    assert ticket.ticket_id == "t-1"
    assert ticket.plate == "ABC-123"
    assert ticket.parking_lot == 5
    assert ticket.entry_time == entry
    assert ticket.status == TicketStatus.OPEN
    assert ticket.charge == Decimal("0.00")
    assert ticket.exit_time is None
    assert ticket.is_closed is False
    assert ticket.parked_minutes is None


def test_closed_returns_settled_copy(open_ticket, entry_time):
    exit_time = entry_time + timedelta(minutes=50)
    closed = open_ticket.closed(exit_time, Decimal("10.00"))

    assert closed is not open_ticket
    assert closed.ticket_id == open_ticket.ticket_id
    assert closed.plate == open_ticket.plate
    assert closed.parking_lot == open_ticket.parking_lot
    assert closed.entry_time == open_ticket.entry_time
    assert closed.status == TicketStatus.CLOSED
    assert closed.charge == Decimal("10.00")
    assert closed.parked_minutes == 50
    assert closed.is_closed is True

    # Original left untouched
    assert open_ticket.status == TicketStatus.OPEN
    assert open_ticket.charge == Decimal("0.00")
    assert open_ticket.exit_time is None


def test_parked_minutes_never_negative(open_ticket, entry_time):
    closed = open_ticket.closed(entry_time - timedelta(minutes=3), Decimal("0.00"))
    assert closed.parked_minutes == 0


def test_ticket_repr_mentions_id_and_status(open_ticket):
    assert "ticket-42" in repr(open_ticket)
    assert "open" in repr(open_ticket)


def test_status_values():
    assert TicketStatus("open") is TicketStatus.OPEN
    assert TicketStatus.CLOSED.value == "closed"


def test_settlement_found_flags(open_ticket):
    assert Settlement(SettlementOutcome.SETTLED, open_ticket, 0).found is True
    assert Settlement(SettlementOutcome.ALREADY_CLOSED, open_ticket, 0).found is True
    assert Settlement(SettlementOutcome.NOT_FOUND).found is False
    assert Settlement(SettlementOutcome.STORE_UNAVAILABLE).found is False
    assert Settlement(SettlementOutcome.CORRUPT_RECORD).found is False


def test_settlement_defaults():
    settlement = Settlement(SettlementOutcome.NOT_FOUND)
    assert settlement.ticket is None
    assert settlement.parked_minutes is None


def test_parked_minutes_rounds_half_minutes_up(open_ticket, entry_time):
    closed = open_ticket.closed(entry_time + timedelta(minutes=2, seconds=30), Decimal("2.50"))
    assert closed.parked_minutes == 3
