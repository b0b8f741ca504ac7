from sqlalchemy import Column, Integer, MetaData, Numeric, String, Table

from parking_tickets.shared.custom_types import UTCDateTime

metadata = MetaData()


def build_tickets_table(table_name: str, table_metadata: MetaData = metadata) -> Table:
    """Return the tickets table called ``table_name``, defining it on first use.

    The name comes from configuration, so the table is declared at runtime
    rather than as a mapped class.
    """
    if table_name in table_metadata.tables:
        return table_metadata.tables[table_name]

    return Table(
        table_name,
        table_metadata,
        Column("ticket_id", String, primary_key=True),
        Column("plate", String, nullable=False),
        Column("parking_lot", Integer, nullable=False),
        Column("entry_time", UTCDateTime, nullable=False),
        Column("status", String, nullable=False, default="open", index=True),
        Column("charge", Numeric(10, 2), nullable=False, default=0),
        Column("exit_time", UTCDateTime, nullable=True),
    )
