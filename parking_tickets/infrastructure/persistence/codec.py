"""Conversion between Ticket entities and stored records.

Records are plain dicts. The camelCase aliases are the attribute names used by
key-value backends; the snake_case field names match the SQL columns. Decoding
accepts either. Status is always emitted as its plain string value.
"""
from datetime import datetime, timezone
from decimal import Decimal
from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from parking_tickets.domain.common import TicketStatus
from parking_tickets.domain.entities import Ticket
from parking_tickets.domain.exceptions import TicketEncodingError


class TicketRecord(BaseModel):
    model_config = ConfigDict(populate_by_name=True, use_enum_values=True)

    ticket_id: str = Field(..., min_length=1, alias="ticketId")
    plate: str = Field(..., alias="plate")
    parking_lot: int = Field(..., alias="parkingLot")
    entry_time: datetime = Field(..., alias="entryTime")
    status: TicketStatus = Field(default=TicketStatus.OPEN, alias="status", validate_default=True)
    charge: Decimal = Field(default=Decimal("0.00"), ge=0, alias="charge")
    exit_time: Optional[datetime] = Field(default=None, alias="exitTime")

    @field_validator("entry_time", "exit_time")
    def ensure_utc(cls, v):  # pylint: disable=no-self-argument
        if v is None:
            return v
        if v.tzinfo is None:
            return v.replace(tzinfo=timezone.utc)
        return v.astimezone(timezone.utc)


def encode_ticket(ticket: Ticket, by_alias: bool = True, json_safe: bool = True) -> Dict[str, Any]:
    """Encode a ticket into a record dict.

    ``json_safe`` renders timestamps and amounts as strings, which is what the
    in-memory backend stores. SQL backends want native Python values.
    """
    try:
        record = TicketRecord(
            ticket_id=ticket.ticket_id,
            plate=ticket.plate,
            parking_lot=ticket.parking_lot,
            entry_time=ticket.entry_time,
            status=ticket.status,
            charge=ticket.charge,
            exit_time=ticket.exit_time,
        )
    except ValidationError as exc:
        raise TicketEncodingError(f"Ticket {ticket.ticket_id} cannot be encoded: {exc}") from exc
    return record.model_dump(mode="json" if json_safe else "python", by_alias=by_alias)


def decode_ticket(item: Dict[str, Any]) -> Ticket:
    try:
        record = TicketRecord.model_validate(item)
    except ValidationError as exc:
        raise TicketEncodingError(f"Stored ticket record is malformed: {exc}") from exc
    return Ticket(
        ticket_id=record.ticket_id,
        plate=record.plate,
        parking_lot=record.parking_lot,
        entry_time=record.entry_time,
        status=TicketStatus(record.status),
        charge=record.charge,
        exit_time=record.exit_time,
    )
