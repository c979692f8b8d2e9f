# dairy_ops/services/invoice/invoice_number_generator.py
"""
Financial-year invoice numbers in the form ``YYNN-NNNNN``.

``YYNN`` is the April-to-March financial year (FY 2025-26 is ``2526``)
and ``NNNNN`` a five digit sequence that restarts every year.
"""
from __future__ import annotations

import re
from datetime import date
from typing import Optional

from sqlalchemy.orm import Session

from dairy_ops.repositories.order_repository import ProductOrderRepository

from ..common.clock import Clock, local_today

INVOICE_NUMBER_PATTERN = re.compile(r"^(\d{4})-(\d{5})$")
SEQUENCE_WIDTH = 5


def financial_year(on: date) -> str:
    start_year = on.year if on.month >= 4 else on.year - 1
    return f"{start_year % 100:02d}{(start_year + 1) % 100:02d}"


def is_valid_invoice_number(invoice_no: Optional[str]) -> bool:
    return bool(invoice_no) and INVOICE_NUMBER_PATTERN.match(invoice_no) is not None  # type: ignore[arg-type]


def sequence_of(invoice_no: str) -> Optional[int]:
    match = INVOICE_NUMBER_PATTERN.match(invoice_no or "")
    return int(match.group(2)) if match else None


class InvoiceNumberGenerator:
    """Allocates the next number of the current financial year."""

    def __init__(self, session: Session, *, clock: Optional[Clock] = None) -> None:
        self._orders = ProductOrderRepository(session)
        self._clock = clock or local_today

    def next_number(self, on: Optional[date] = None) -> str:
        year = financial_year(on or self._clock())
        latest = self._orders.latest_invoice_no(f"{year}-")
        sequence = (sequence_of(latest) or 0) + 1 if latest else 1
        return f"{year}-{sequence:0{SEQUENCE_WIDTH}d}"
