class TicketError(Exception):
    """Base exception for ticket operations."""
    pass


class StoreUnavailableError(TicketError):
    """Raised when the ticket store cannot be reached or rejects an operation."""
    pass


class TicketEncodingError(TicketError):
    """Raised when a stored record cannot be converted back into a Ticket."""
    pass


class TicketConflictError(TicketError):
    """Raised when a conditional write finds the record in an unexpected state."""

    def __init__(self, ticket_id: str, expected_status, actual_status=None):
        self.ticket_id = ticket_id
        self.expected_status = expected_status
        self.actual_status = actual_status
        super().__init__(
            f"Ticket {ticket_id} expected status {expected_status}, found {actual_status}"
        )
