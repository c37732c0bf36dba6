from datetime import date
from typing import Dict, List, Optional

import pytest
from fastapi.testclient import TestClient

from invoice_dashboard.config import Settings
from invoice_dashboard.exceptions import AuthError, DatabaseError
from invoice_dashboard.main import create_app
from invoice_dashboard.models import Customer, FormSubmission, Invoice, InvoiceRow, InvoiceStatus, SessionUser

CUSTOMER_ID = "3958dc9e-712f-4377-85e9-fec4b6a6442a"
SEED_INVOICE_ID = "cc27c14a-0acf-4f4a-a6c9-d45682c144b9"


class FakeInvoiceStore:
    """In-memory stand-in for DatabaseClient."""

    def __init__(self) -> None:
        self.invoices: Dict[str, Invoice] = {}
        self.customers = [
            Customer(id=CUSTOMER_ID, name="Delba de Oliveira", email="delba@oliveira.com"),
        ]
        self.calls: List[str] = []
        self.fail_with: Optional[Exception] = None

    def _check(self, name: str) -> None:
        self.calls.append(name)
        if self.fail_with is not None:
            raise DatabaseError(f"Database Error: {name} failed.", cause=self.fail_with)

    def insert_invoice(self, invoice_id, customer_id, amount, status, on) -> None:
        self._check("insert_invoice")
        self.invoices[invoice_id] = Invoice(
            id=invoice_id, customer_id=customer_id, amount=amount, status=status, date=on
        )

    def update_invoice(self, invoice_id, customer_id, amount, status) -> None:
        self._check("update_invoice")
        existing = self.invoices.get(invoice_id)
        if existing is None:
            return
        self.invoices[invoice_id] = existing.model_copy(
            update={"customer_id": customer_id, "amount": amount, "status": status}
        )

    def delete_invoice(self, invoice_id) -> None:
        self._check("delete_invoice")
        self.invoices.pop(invoice_id, None)

    def fetch_invoice_by_id(self, invoice_id) -> Optional[Invoice]:
        self._check("fetch_invoice_by_id")
        return self.invoices.get(invoice_id)

    def fetch_filtered_invoices(self, query: str = "") -> List[InvoiceRow]:
        self._check("fetch_filtered_invoices")
        customer = self.customers[0]
        rows = [
            InvoiceRow(**invoice.model_dump(), name=customer.name, email=customer.email)
            for invoice in self.invoices.values()
        ]
        needle = query.lower()
        return [row for row in rows if needle in row.name.lower() or needle in row.status.value]

    def fetch_customers(self) -> List[Customer]:
        self._check("fetch_customers")
        return list(self.customers)

    def ping(self) -> None:
        self._check("ping")


class FakeIdentityProvider:
    """Accepts one known user; failure mode is configurable."""

    def __init__(self) -> None:
        self.error: Optional[Exception] = None
        self.calls: List[str] = []

    def sign_in(self, provider_id: str, form: FormSubmission) -> SessionUser:
        self.calls.append(provider_id)
        if self.error is not None:
            raise self.error
        if form.get("email") == "user@nextmail.com" and form.get("password") == "123456":
            return SessionUser(id="410544b2-4001-4271-9855-fec4b6a6442a", email="user@nextmail.com")
        raise AuthError("CredentialsSignin")


@pytest.fixture
def store() -> FakeInvoiceStore:
    fake = FakeInvoiceStore()
    fake.invoices[SEED_INVOICE_ID] = Invoice(
        id=SEED_INVOICE_ID,
        customer_id=CUSTOMER_ID,
        amount=15795,
        status=InvoiceStatus.PENDING,
        date=date(2022, 12, 6),
    )
    return fake


@pytest.fixture
def provider() -> FakeIdentityProvider:
    return FakeIdentityProvider()


@pytest.fixture
def settings() -> Settings:
    return Settings(session_secret="test-secret", log_level="INFO")


@pytest.fixture
def client(settings, store, provider):
    app = create_app(settings=settings, store=store, identity_provider=provider)
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def logged_in_client(client):
    response = client.post(
        "/login",
        data={"email": "user@nextmail.com", "password": "123456"},
        follow_redirects=False,
    )
    assert response.status_code == 303
    return client
