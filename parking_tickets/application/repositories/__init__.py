from .abstract_repositories import AbstractTicketStore

__all__ = [
    "AbstractTicketStore",
]
