import logging
from datetime import date, datetime
from typing import Any, Dict, List, Optional

from supabase import Client, create_client

from .exceptions import DatabaseError
from .models import Customer, Invoice, InvoiceRow, InvoiceStatus

logger = logging.getLogger(__name__)


class DatabaseClient:
    """Thin wrapper over the Supabase tables backing the dashboard.

    Every public method issues exactly one statement. Failures are logged
    and re-raised as ``DatabaseError``; nothing is retried.
    """

    def __init__(self, supabase: Client):
        self.supabase = supabase

    @classmethod
    def from_credentials(cls, url: Optional[str], key: Optional[str]) -> "DatabaseClient":
        if not url or not key:
            raise RuntimeError("SUPABASE_URL and SUPABASE_SERVICE_ROLE_KEY must be set")
        return cls(create_client(url, key))

    def insert_invoice(self, invoice_id: str, customer_id: str, amount: int, status: InvoiceStatus, on: date) -> None:
        try:
            self.supabase.table("invoices").insert({
                "id": invoice_id,
                "customer_id": customer_id,
                "amount": amount,
                "status": status.value,
                "date": on.isoformat(),
            }).execute()
        except Exception as exc:
            logger.exception("Database Error: failed to create invoice")
            raise DatabaseError("Database Error: Failed to Create Invoice.", cause=exc) from exc

    def update_invoice(self, invoice_id: str, customer_id: str, amount: int, status: InvoiceStatus) -> None:
        """Overwrite the editable columns; a missing id matches no rows."""
        try:
            self.supabase.table("invoices").update({
                "customer_id": customer_id,
                "amount": amount,
                "status": status.value,
            }).eq("id", invoice_id).execute()
        except Exception as exc:
            logger.exception("Database Error: failed to update invoice %s", invoice_id)
            raise DatabaseError("Database Error: Failed to Update Invoice.", cause=exc) from exc

    def delete_invoice(self, invoice_id: str) -> None:
        try:
            self.supabase.table("invoices").delete().eq("id", invoice_id).execute()
        except Exception as exc:
            logger.exception("Database Error: failed to delete invoice %s", invoice_id)
            raise DatabaseError("Database Error: Failed to Delete Invoice.", cause=exc) from exc

    def fetch_invoice_by_id(self, invoice_id: str) -> Optional[Invoice]:
        try:
            result = (
                self.supabase.table("invoices")
                .select("id, customer_id, amount, status, date")
                .eq("id", invoice_id)
                .execute()
            )
        except Exception as exc:
            logger.exception("Database Error: failed to fetch invoice %s", invoice_id)
            raise DatabaseError("Failed to fetch invoice.", cause=exc) from exc

        if result.data:
            return self._convert_to_invoice(result.data[0])
        return None

    def fetch_filtered_invoices(self, query: str = "") -> List[InvoiceRow]:
        """Invoices joined with their customer, newest first.

        The search term is matched case-insensitively against customer name,
        email, amount, date and status.
        """
        try:
            result = (
                self.supabase.table("invoices")
                .select("id, customer_id, amount, status, date, customers(name, email, image_url)")
                .order("date", desc=True)
                .execute()
            )
        except Exception as exc:
            logger.exception("Database Error: failed to fetch invoices")
            raise DatabaseError("Failed to fetch invoices.", cause=exc) from exc

        rows = [self._convert_to_row(invoice_data) for invoice_data in result.data]
        needle = query.strip().lower()
        if not needle:
            return rows
        return [row for row in rows if self._matches(row, needle)]

    def fetch_customers(self) -> List[Customer]:
        try:
            result = (
                self.supabase.table("customers")
                .select("id, name, email, image_url")
                .order("name")
                .execute()
            )
        except Exception as exc:
            logger.exception("Database Error: failed to fetch customers")
            raise DatabaseError("Failed to fetch all customers.", cause=exc) from exc
        return [Customer(**customer) for customer in result.data]

    def ping(self) -> None:
        """Cheapest round trip that proves the connection works."""
        try:
            self.supabase.table("invoices").select("id").limit(1).execute()
        except Exception as exc:
            logger.exception("Database Error: health check failed")
            raise DatabaseError("Database unreachable.", cause=exc) from exc

    @staticmethod
    def _matches(row: InvoiceRow, needle: str) -> bool:
        haystack = (
            row.name,
            row.email,
            str(row.amount),
            row.date.isoformat(),
            row.status.value,
        )
        return any(needle in value.lower() for value in haystack)

    def _convert_to_invoice(self, invoice_data: Dict[str, Any]) -> Invoice:
        """Convert database row to Invoice model"""
        return Invoice(
            id=str(invoice_data["id"]),
            customer_id=str(invoice_data["customer_id"]),
            amount=int(invoice_data["amount"]),
            status=InvoiceStatus(invoice_data["status"]),
            date=self._parse_date(invoice_data["date"]),
        )

    def _convert_to_row(self, invoice_data: Dict[str, Any]) -> InvoiceRow:
        customer = invoice_data.get("customers") or {}
        return InvoiceRow(
            id=str(invoice_data["id"]),
            customer_id=str(invoice_data["customer_id"]),
            amount=int(invoice_data["amount"]),
            status=InvoiceStatus(invoice_data["status"]),
            date=self._parse_date(invoice_data["date"]),
            name=customer.get("name", ""),
            email=customer.get("email", ""),
            image_url=customer.get("image_url"),
        )

    @staticmethod
    def _parse_date(value: str) -> date:
        # Postgres `date` columns come back as YYYY-MM-DD; timestamps carry a time part
        return datetime.fromisoformat(value.replace("Z", "+00:00")).date()
