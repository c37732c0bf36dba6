import datetime as dt
from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional

from pydantic import BaseModel, Field, ValidationError, field_validator
from pydantic_core import PydanticCustomError

# Raw key/value input as submitted by an HTML form
FormSubmission = Mapping[str, str]

# Amounts are stored as cents in a 32-bit integer column
MAX_AMOUNT = Decimal(2_147_483_647) / 100


class InvoiceStatus(str, Enum):
    PENDING = "pending"
    PAID = "paid"


class Customer(BaseModel):
    id: str
    name: str
    email: str
    image_url: Optional[str] = None


class Invoice(BaseModel):
    id: str
    customer_id: str
    amount: int  # cents
    status: InvoiceStatus
    date: dt.date


class InvoiceRow(BaseModel):
    """An invoice joined with the customer fields shown in the list view."""

    id: str
    customer_id: str
    amount: int
    status: InvoiceStatus
    date: dt.date
    name: str
    email: str
    image_url: Optional[str] = None


class InvoiceForm(BaseModel):
    """Validated invoice form submission.

    Used for both create and update: ``id`` and ``date`` are never taken
    from the form. The amount is kept as a ``Decimal`` built from the
    submitted text so cent conversion does not inherit float error.
    """

    customer_id: str = Field(alias="customerId")
    amount: Decimal
    status: InvoiceStatus

    @field_validator("customer_id", mode="before")
    @classmethod
    def _require_customer(cls, value: Any) -> str:
        if not isinstance(value, str) or not value.strip():
            raise PydanticCustomError("customer_id", "Please select a customer.")
        return value

    @field_validator("amount", mode="before")
    @classmethod
    def _coerce_amount(cls, value: Any) -> Decimal:
        message = "Please enter an amount greater than $0."
        try:
            amount = Decimal(str(value).strip())
        except (InvalidOperation, ValueError):
            raise PydanticCustomError("amount", message) from None
        if not amount.is_finite() or amount <= 0 or amount > MAX_AMOUNT:
            raise PydanticCustomError("amount", message)
        return amount

    @field_validator("status", mode="before")
    @classmethod
    def _check_status(cls, value: Any) -> str:
        if value not in (InvoiceStatus.PENDING.value, InvoiceStatus.PAID.value):
            raise PydanticCustomError("status", "Please select an invoice status.")
        return value


class ValidationResult(BaseModel):
    success: bool
    data: Optional[InvoiceForm] = None
    errors: Dict[str, List[str]] = Field(default_factory=dict)


def validate_invoice_form(form: FormSubmission) -> ValidationResult:
    """Check a form submission without raising.

    Missing keys are validated as ``None`` so every field reports its own
    message instead of pydantic's generic "Field required".
    """
    raw = {
        "customerId": form.get("customerId"),
        "amount": form.get("amount"),
        "status": form.get("status"),
    }
    try:
        data = InvoiceForm.model_validate(raw)
    except ValidationError as exc:
        errors: Dict[str, List[str]] = {}
        for error in exc.errors():
            field = str(error["loc"][0]) if error["loc"] else "__root__"
            errors.setdefault(field, []).append(error["msg"])
        return ValidationResult(success=False, errors=errors)
    return ValidationResult(success=True, data=data)


class ActionState(BaseModel):
    """Outcome of a mutation action.

    ``revalidate`` lists view paths whose cached output is stale and
    ``redirect_to`` tells the caller where to navigate next. Both are only
    set once the store write has succeeded.
    """

    ok: bool
    errors: Dict[str, List[str]] = Field(default_factory=dict)
    message: Optional[str] = None
    revalidate: List[str] = Field(default_factory=list)
    redirect_to: Optional[str] = None


class SessionUser(BaseModel):
    id: str
    email: str


class LoginState(BaseModel):
    message: Optional[str] = None
    user: Optional[SessionUser] = None
    redirect_to: Optional[str] = None


class APIResponse(BaseModel):
    success: bool
    message: str
    data: Optional[Any] = None


class ErrorResponse(BaseModel):
    success: bool = False
    error: str
    details: Optional[str] = None
