from .models import metadata, build_tickets_table

__all__ = [
    "metadata",
    "build_tickets_table",
]
