# dairy_ops/services/invoice/invoice_service.py
"""
Invoice generation for product orders.

Runs in its own transaction after the order has committed. The document
is handed to a pluggable renderer; the number and storage path are then
written back onto the order.
"""
from __future__ import annotations

import contextlib
import json
import logging
import os
from datetime import datetime, timezone
from decimal import Decimal
from pathlib import Path
from typing import Callable, List, Optional, Protocol
from uuid import UUID

from sqlalchemy.orm import Session

from dairy_ops.config.settings import Settings, settings as default_settings
from dairy_ops.models.member import DeliveryAddress, Member
from dairy_ops.models.subscription import ProductOrder
from dairy_ops.repositories.order_repository import ProductOrderRepository
from dairy_ops.schemas.invoice import InvoiceDocument, InvoiceLineItem, InvoiceParty, InvoiceResult

from ..common.clock import Clock, local_today
from ..common.errors import NotFoundError
from ..common.unit_of_work import UnitOfWork
from .invoice_number_generator import InvoiceNumberGenerator

logger = logging.getLogger(__name__)


class InvoiceRenderer(Protocol):
    def render(self, document: InvoiceDocument) -> str:
        """Persist the document and return its storage path."""
        ...

    def discard(self, path: str) -> None:
        """Remove a document whose order write-back did not commit."""
        ...


class JsonInvoiceRenderer:
    """Writes the invoice document as JSON under ``output_dir``."""

    def __init__(self, output_dir: str) -> None:
        self.output_dir = output_dir

    def render(self, document: InvoiceDocument) -> str:
        os.makedirs(self.output_dir, exist_ok=True)
        path = Path(self.output_dir) / f"{document.invoice_no}.json"
        payload = json.loads(document.model_dump_json())
        with open(path, "w", encoding="utf-8") as fh:
            json.dump(payload, fh, indent=2, sort_keys=True)
        return str(path)

    def discard(self, path: str) -> None:
        with contextlib.suppress(FileNotFoundError):
            os.remove(path)


def _address_lines(address: Optional[DeliveryAddress], member: Member) -> List[str]:
    if address is None:
        return ["-"]
    lines = [
        address.recipient_name or member.name,
        address.plot_building,
        address.street_area,
        address.landmark,
        ", ".join(p for p in (address.city, address.state, address.pincode) if p),
    ]
    return [line for line in lines if line]


class InvoiceService:
    """Builds and records invoices for orders."""

    def __init__(
        self,
        session_factory: Callable[[], Session],
        *,
        renderer: Optional[InvoiceRenderer] = None,
        settings: Optional[Settings] = None,
        clock: Optional[Clock] = None,
    ) -> None:
        self._session_factory = session_factory
        self._settings = settings or default_settings
        self._renderer = renderer or JsonInvoiceRenderer(self._settings.INVOICE_DIR)
        self._clock = clock or local_today

    def generate_for_order(self, order_id: UUID) -> InvoiceResult:
        """
        Number, render and record the invoice for ``order_id``.

        An order that already carries an invoice is returned unchanged. A
        rendered document is discarded again when the write-back does not
        commit.

        Raises:
            NotFoundError: if the order does not exist
        """
        path: Optional[str] = None
        try:
            with UnitOfWork(self._session_factory) as uow:
                orders = uow.get_repo(ProductOrderRepository)
                order = orders.get_for_update(order_id)
                if order is None:
                    raise NotFoundError("ProductOrder", order_id)

                if order.invoice_no and order.invoice_path:
                    return InvoiceResult(
                        order_id=order.id,
                        invoice_no=order.invoice_no,
                        invoice_path=order.invoice_path,
                    )

                order = orders.get_with_details(order_id)
                if order is None:
                    raise NotFoundError("ProductOrder", order_id)

                invoice_no = InvoiceNumberGenerator(uow.session, clock=self._clock).next_number()
                document = self.build_document(order, invoice_no)
                path = self._renderer.render(document)

                order.invoice_no = invoice_no
                order.invoice_path = path
                uow.flush()
                result = InvoiceResult(order_id=order.id, invoice_no=invoice_no, invoice_path=path)
        except Exception:
            if path is not None:
                self._renderer.discard(path)
                logger.warning(
                    f"Discarded invoice document {path}",
                    extra={"order_id": str(order_id)},
                )
            raise

        logger.info(
            f"Invoice {result.invoice_no} generated",
            extra={"order_id": str(order_id)},
        )
        return result

    def build_document(self, order: ProductOrder, invoice_no: str) -> InvoiceDocument:
        member = order.member
        subscriptions = sorted(order.subscriptions, key=lambda s: (s.start_date, str(s.id)))
        address = next(
            (s.delivery_address for s in subscriptions if s.delivery_address is not None),
            None,
        )

        items = [
            InvoiceLineItem(
                subscription_id=s.id,
                product_name=s.product.name,
                delivery_schedule=s.delivery_schedule,
                start_date=s.start_date,
                expiry_date=s.expiry_date,
                quantity=s.total_qty,
                unit_rate=s.rate,
                amount=s.amount,
            )
            for s in subscriptions
        ]

        total = Decimal(order.total_amount)
        wallet = Decimal(order.wallet_amount)
        received = Decimal(order.received_amount)

        return InvoiceDocument(
            invoice_no=invoice_no,
            invoice_date=self._clock(),
            order_id=order.id,
            order_no=order.order_no,
            currency=self._settings.CURRENCY,
            bill_to=InvoiceParty(
                member_id=member.id,
                name=(address.recipient_name if address else None) or member.name,
                email=member.email,
                mobile=(address.mobile if address else None) or member.mobile,
                address_lines=_address_lines(address, member),
            ),
            items=items,
            total_amount=total,
            wallet_amount=wallet,
            amount_due=max(total - wallet - received, Decimal("0.00")),
            payment_status=order.payment_status,
            generated_at=datetime.now(timezone.utc),
        )
