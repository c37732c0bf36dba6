import logging
import uuid
from datetime import date, datetime, timezone
from decimal import ROUND_HALF_UP, Decimal
from typing import Protocol

from .models import ActionState, FormSubmission, InvoiceStatus, validate_invoice_form

logger = logging.getLogger(__name__)

INVOICES_PATH = "/dashboard/invoices"


class InvoiceStore(Protocol):
    def insert_invoice(self, invoice_id: str, customer_id: str, amount: int, status: InvoiceStatus, on: date) -> None: ...

    def update_invoice(self, invoice_id: str, customer_id: str, amount: int, status: InvoiceStatus) -> None: ...

    def delete_invoice(self, invoice_id: str) -> None: ...


def to_cents(amount: Decimal) -> int:
    """Major units to integer minor units, half-cents rounded up (12.005 -> 1201)."""
    return int((amount * 100).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def today() -> date:
    return datetime.now(timezone.utc).date()


def create_invoice(store: InvoiceStore, form: FormSubmission) -> ActionState:
    validated = validate_invoice_form(form)
    if not validated.success:
        return ActionState(
            ok=False,
            errors=validated.errors,
            message="Missing Fields. Failed to Create Invoice.",
        )

    data = validated.data
    invoice_id = str(uuid.uuid4())
    # DatabaseError propagates: a failed insert must never redirect
    store.insert_invoice(invoice_id, data.customer_id, to_cents(data.amount), data.status, today())
    logger.info("Created invoice %s for customer %s", invoice_id, data.customer_id)

    return ActionState(ok=True, revalidate=[INVOICES_PATH], redirect_to=INVOICES_PATH)


def update_invoice(store: InvoiceStore, invoice_id: str, form: FormSubmission) -> ActionState:
    validated = validate_invoice_form(form)
    if not validated.success:
        return ActionState(
            ok=False,
            errors=validated.errors,
            message="Missing Fields. Failed to Update Invoice.",
        )

    data = validated.data
    store.update_invoice(invoice_id, data.customer_id, to_cents(data.amount), data.status)
    logger.info("Updated invoice %s", invoice_id)

    return ActionState(
        ok=True,
        revalidate=[f"{INVOICES_PATH}/{invoice_id}", INVOICES_PATH],
        redirect_to=INVOICES_PATH,
    )


def delete_invoice(store: InvoiceStore, invoice_id: str) -> ActionState:
    store.delete_invoice(invoice_id)
    logger.info("Deleted invoice %s", invoice_id)
    return ActionState(
        ok=True,
        message="Deleted Invoice.",
        revalidate=[f"{INVOICES_PATH}/{invoice_id}", INVOICES_PATH],
    )
