from datetime import date
from typing import Optional

from erp_ledger.logger_config import logger


def parse_date(value: Optional[str], field: str) -> Optional[date]:
    """Parse an ISO date query parameter; invalid values are ignored with a warning."""
    if not value:
        return None
    try:
        return date.fromisoformat(value)
    except ValueError:
        logger.warning(f"Invalid {field} format: {value}")
        return None


def apply_date_range(query, column, start_date: Optional[str] = None, end_date: Optional[str] = None):
    start = parse_date(start_date, "start_date")
    end = parse_date(end_date, "end_date")

    if start:
        query = query.filter(column >= start)
        logger.debug(f"Filtering by start_date: {start}")

    if end:
        query = query.filter(column <= end)
        logger.debug(f"Filtering by end_date: {end}")

    return query
