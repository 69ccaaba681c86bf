from typing import Annotated, TypeAlias

from fastapi import APIRouter, Depends, Query, Response

from cisops.api.dependencies import AdminUserDep, CurrentUserDep
from cisops.core.audit import log_audit_event
from cisops.models import schemas
from cisops.services.cis.periods import MAX_YEAR, MIN_YEAR
from cisops.services.invoice_service import InvoiceService, get_invoice_service

router = APIRouter()

InvoiceServiceDep: TypeAlias = Annotated[InvoiceService, Depends(get_invoice_service)]


@router.get("/", response_model=list[schemas.InvoiceOut])
def list_invoices(
    current_user: CurrentUserDep,
    svc: InvoiceServiceDep,
    subcontractor_id: int | None = None,
    year: Annotated[int | None, Query(ge=MIN_YEAR, le=MAX_YEAR)] = None,
    month: Annotated[int | None, Query(ge=1, le=12)] = None,
):
    return svc.list_invoices(subcontractor_id=subcontractor_id, year=year, month=month)


@router.get("/pending", response_model=list[schemas.PendingInvoiceOut])
def list_pending_invoices(current_user: CurrentUserDep, svc: InvoiceServiceDep):
    """Invoices without a submission date, ordered by Kashflow number."""
    return svc.list_pending_submission()


@router.post("/", response_model=schemas.InvoiceOut, status_code=201)
def create_invoice(payload: schemas.InvoiceCreate, current_user: CurrentUserDep, svc: InvoiceServiceDep):
    invoice = svc.create_invoice(payload)
    log_audit_event("invoice.create", user_id=current_user.id, invoice_id=invoice.id)
    return invoice


@router.get("/{invoice_id}", response_model=schemas.InvoiceOut)
def read_invoice(invoice_id: int, current_user: CurrentUserDep, svc: InvoiceServiceDep):
    return svc.get_invoice(invoice_id)


@router.put("/{invoice_id}", response_model=schemas.InvoiceOut)
def update_invoice(
    invoice_id: int,
    payload: schemas.InvoiceUpdate,
    current_user: CurrentUserDep,
    svc: InvoiceServiceDep,
):
    invoice = svc.update_invoice(invoice_id, payload)
    log_audit_event("invoice.update", user_id=current_user.id, invoice_id=invoice_id)
    return invoice


@router.delete("/{invoice_id}", status_code=204)
def delete_invoice(invoice_id: int, admin: AdminUserDep, svc: InvoiceServiceDep):
    svc.delete_invoice(invoice_id)
    log_audit_event("invoice.delete", user_id=admin.id, invoice_id=invoice_id)
    return Response(status_code=204)
