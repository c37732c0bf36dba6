from typing import List

from fastapi import APIRouter, Depends, HTTPException, Path, Query, Request
from fastapi.responses import JSONResponse, RedirectResponse
from starlette.concurrency import run_in_threadpool

from ..actions import create_invoice, delete_invoice, update_invoice
from ..cache import ViewCache
from ..database import DatabaseClient
from ..dependencies import get_store, get_view_cache, read_form
from ..models import ActionState, APIResponse, Customer, Invoice, InvoiceRow

router = APIRouter(
    prefix="/dashboard",
    tags=["dashboard"]
)


def apply_action(state: ActionState, cache: ViewCache):
    """Turn an action's instructions into an HTTP response.

    Stale views are dropped before navigating; failed validation is sent
    back as data for the form to show inline.
    """
    if not state.ok:
        return JSONResponse(status_code=422, content=state.model_dump())
    for path in state.revalidate:
        cache.revalidate_path(path)
    if state.redirect_to:
        return RedirectResponse(state.redirect_to, status_code=303)
    return APIResponse(success=True, message=state.message or "OK")


@router.get("")
async def dashboard_home(request: Request):
    return {"user": request.session.get("user"), "invoices": "/dashboard/invoices"}


@router.get("/invoices", response_model=List[InvoiceRow])
def list_invoices(
    query: str = Query("", description="Search by customer, amount, date or status"),
    store: DatabaseClient = Depends(get_store),
    cache: ViewCache = Depends(get_view_cache),
):
    generation = cache.generation()
    cached = cache.get("/dashboard/invoices", query)
    if cached is not None:
        return cached
    invoices = store.fetch_filtered_invoices(query)
    cache.set("/dashboard/invoices", invoices, query, generation=generation)
    return invoices


@router.get("/customers", response_model=List[Customer])
def list_customers(store: DatabaseClient = Depends(get_store)):
    return store.fetch_customers()


@router.get("/invoices/{invoice_id}", response_model=Invoice)
def get_invoice(
    invoice_id: str = Path(..., description="Invoice ID"),
    store: DatabaseClient = Depends(get_store),
    cache: ViewCache = Depends(get_view_cache),
):
    path = f"/dashboard/invoices/{invoice_id}"
    generation = cache.generation()
    cached = cache.get(path)
    if cached is not None:
        return cached
    invoice = store.fetch_invoice_by_id(invoice_id)
    if not invoice:
        raise HTTPException(
            status_code=404,
            detail=f"Invoice {invoice_id} not found"
        )
    cache.set(path, invoice, generation=generation)
    return invoice


@router.post("/invoices/create")
async def create_invoice_route(
    request: Request,
    store: DatabaseClient = Depends(get_store),
    cache: ViewCache = Depends(get_view_cache),
):
    form = await read_form(request)
    state = await run_in_threadpool(create_invoice, store, form)
    return apply_action(state, cache)


@router.post("/invoices/{invoice_id}/edit")
async def update_invoice_route(
    request: Request,
    invoice_id: str = Path(..., description="Invoice ID to update"),
    store: DatabaseClient = Depends(get_store),
    cache: ViewCache = Depends(get_view_cache),
):
    form = await read_form(request)
    state = await run_in_threadpool(update_invoice, store, invoice_id, form)
    return apply_action(state, cache)


@router.post("/invoices/{invoice_id}/delete", response_model=APIResponse)
async def delete_invoice_route(
    invoice_id: str = Path(..., description="Invoice ID to delete"),
    store: DatabaseClient = Depends(get_store),
    cache: ViewCache = Depends(get_view_cache),
):
    state = await run_in_threadpool(delete_invoice, store, invoice_id)
    return apply_action(state, cache)
