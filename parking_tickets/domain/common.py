from enum import Enum


class TicketStatus(str, Enum):
    OPEN = "open"
    CLOSED = "closed"


class SettlementOutcome(str, Enum):
    SETTLED = "settled"
    ALREADY_CLOSED = "already_closed"
    NOT_FOUND = "not_found"
    STORE_UNAVAILABLE = "store_unavailable"
    CORRUPT_RECORD = "corrupt_record"
