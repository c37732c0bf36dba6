import re
from datetime import datetime, timezone
from decimal import Decimal

import pytest

from invoice_dashboard.actions import create_invoice, delete_invoice, to_cents, update_invoice
from invoice_dashboard.exceptions import DatabaseError
from invoice_dashboard.models import InvoiceStatus

from .conftest import CUSTOMER_ID, SEED_INVOICE_ID


@pytest.mark.parametrize(
    "amount, cents",
    [
        ("12.005", 1201),
        ("12.004", 1200),
        ("0.015", 2),
        ("157.95", 15795),
        ("1", 100),
        ("0.001", 0),
    ],
)
def test_to_cents_rounds_half_up(amount: str, cents: int) -> None:
    assert to_cents(Decimal(amount)) == cents


def test_create_invoice_inserts_and_navigates(store) -> None:
    state = create_invoice(store, {"customerId": CUSTOMER_ID, "amount": "12.005", "status": "pending"})

    assert state.ok is True
    assert state.revalidate == ["/dashboard/invoices"]
    assert state.redirect_to == "/dashboard/invoices"

    created = [invoice for invoice_id, invoice in store.invoices.items() if invoice_id != SEED_INVOICE_ID]
    assert len(created) == 1
    invoice = created[0]
    assert invoice.amount == 1201
    assert invoice.status is InvoiceStatus.PENDING
    assert invoice.date == datetime.now(timezone.utc).date()
    assert re.fullmatch(r"[0-9a-f-]{36}", invoice.id)


def test_create_invoice_validation_failure_has_no_side_effects(store) -> None:
    state = create_invoice(store, {"customerId": CUSTOMER_ID, "amount": "0", "status": "pending"})

    assert state.ok is False
    assert state.message == "Missing Fields. Failed to Create Invoice."
    assert state.errors == {"amount": ["Please enter an amount greater than $0."]}
    assert state.revalidate == []
    assert state.redirect_to is None
    assert store.calls == []


def test_create_invoice_bad_status_never_writes(store) -> None:
    state = create_invoice(store, {"customerId": CUSTOMER_ID, "amount": "5", "status": "void"})

    assert "status" in state.errors
    assert store.calls == []


def test_create_invoice_database_failure_propagates(store) -> None:
    store.fail_with = RuntimeError("connection reset")

    with pytest.raises(DatabaseError):
        create_invoice(store, {"customerId": CUSTOMER_ID, "amount": "5", "status": "paid"})


def test_update_invoice_overwrites_fields_and_keeps_date(store) -> None:
    original_date = store.invoices[SEED_INVOICE_ID].date

    state = update_invoice(store, SEED_INVOICE_ID, {"customerId": "other", "amount": "20", "status": "paid"})

    assert state.ok is True
    assert state.revalidate[0] == f"/dashboard/invoices/{SEED_INVOICE_ID}"
    assert state.redirect_to == "/dashboard/invoices"
    invoice = store.invoices[SEED_INVOICE_ID]
    assert (invoice.customer_id, invoice.amount, invoice.status) == ("other", 2000, InvoiceStatus.PAID)
    assert invoice.date == original_date


def test_update_invoice_failure_message(store) -> None:
    state = update_invoice(store, SEED_INVOICE_ID, {"customerId": "", "amount": "20", "status": "paid"})

    assert state.ok is False
    assert state.message == "Missing Fields. Failed to Update Invoice."
    assert state.errors == {"customerId": ["Please select a customer."]}
    assert store.invoices[SEED_INVOICE_ID].amount == 15795


def test_update_missing_invoice_is_a_noop(store) -> None:
    state = update_invoice(store, "missing", {"customerId": CUSTOMER_ID, "amount": "1", "status": "paid"})

    assert state.ok is True
    assert list(store.invoices) == [SEED_INVOICE_ID]


def test_delete_invoice_is_idempotent(store) -> None:
    first = delete_invoice(store, SEED_INVOICE_ID)
    second = delete_invoice(store, SEED_INVOICE_ID)

    assert first.ok and second.ok
    assert first.revalidate == [f"/dashboard/invoices/{SEED_INVOICE_ID}", "/dashboard/invoices"]
    assert first.message == "Deleted Invoice."
    assert first.redirect_to is None
    assert store.invoices == {}


def test_delete_missing_invoice_leaves_others_alone(store) -> None:
    delete_invoice(store, "missing")

    assert list(store.invoices) == [SEED_INVOICE_ID]


def test_delete_database_failure_propagates(store) -> None:
    store.fail_with = RuntimeError("timeout")

    with pytest.raises(DatabaseError):
        delete_invoice(store, SEED_INVOICE_ID)


def test_create_invoice_rejects_amount_too_large_to_store(store) -> None:
    state = create_invoice(store, {"customerId": CUSTOMER_ID, "amount": "1e30", "status": "paid"})

    assert state.ok is False
    assert state.errors == {"amount": ["Please enter an amount greater than $0."]}
    assert store.calls == []
