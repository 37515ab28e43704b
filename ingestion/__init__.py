from ingestion.transactions_csv import (
    CSV_HEADERS,
    parse_amount,
    read_numbered_rows,
    read_rows,
    row_to_parsed_transaction,
    write_rows,
)

__all__ = [
    "CSV_HEADERS",
    "parse_amount",
    "read_numbered_rows",
    "read_rows",
    "row_to_parsed_transaction",
    "write_rows",
]
