"""Date parsing helpers for invoice and purchase-order dates.

Invoices carry German-style dates (DD.MM.YYYY or DD-MM-YYYY); purchase orders
and normalized service dates use ISO format.
"""

import logging
from datetime import date, datetime
from typing import List, Optional

logger = logging.getLogger(__name__)


# Order matters: DD-MM-YYYY is tried before ISO so that "05-03-2024" is read
# day-first. ISO strings never match the day-first patterns.
INVOICE_DATE_FORMATS = [
    '%d.%m.%Y',          # 05.03.2024
    '%d-%m-%Y',          # 05-03-2024
    '%Y-%m-%d',          # 2024-03-05
]


def parse_invoice_date(value: Optional[str], formats: Optional[List[str]] = None) -> Optional[date]:
    """Parse an invoice date string.

    Args:
        value: Date string (or date/datetime, returned as date)
        formats: strptime formats to try (defaults to INVOICE_DATE_FORMATS)

    Returns:
        date object, or None if the value is empty or unparseable

    Examples:
        >>> parse_invoice_date('05.03.2024')
        datetime.date(2024, 3, 5)
        >>> parse_invoice_date('05-03-2024')
        datetime.date(2024, 3, 5)
        >>> parse_invoice_date('not a date') is None
        True
    """
    if value is None:
        return None

    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value

    value = str(value).strip()
    if not value:
        return None

    for fmt in formats or INVOICE_DATE_FORMATS:
        try:
            return datetime.strptime(value, fmt).date()
        except ValueError:
            continue

    logger.debug(f"Failed to parse date: {value}")
    return None


def german_to_iso(value: str) -> Optional[str]:
    """Convert a DD.MM.YYYY string to YYYY-MM-DD, or None if malformed."""
    parsed = parse_invoice_date(value, ['%d.%m.%Y'])
    if parsed is None:
        return None
    return parsed.isoformat()


def days_between(first: Optional[str], second: Optional[str]) -> Optional[int]:
    """Absolute distance in days between two date strings.

    Returns None if either side cannot be parsed.
    """
    first_date = parse_invoice_date(first)
    second_date = parse_invoice_date(second)
    if first_date is None or second_date is None:
        return None
    return abs((first_date - second_date).days)
