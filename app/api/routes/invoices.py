from datetime import datetime

from fastapi import APIRouter, Depends, File, Query, UploadFile, status
from fastapi.responses import FileResponse
from sqlalchemy.orm import Session

from app.core.datetime_utils import to_utc_naive
from app.core.dependencies import get_current_user, get_db
from app.models.invoice import InvoiceStatus
from app.schemas.common import Page, PageMeta, PageOptions
from app.schemas.invoice import (
    InvoiceCreate,
    InvoiceResponse,
    InvoiceSummaryResponse,
    InvoiceUpdate,
    MarkAsPaidRequest,
)
from app.services import invoice_service
from app.services.audit_service import log_action
from app.services.file_storage import LocalFileStorage, get_file_storage


router = APIRouter(prefix="/invoices", tags=["Invoices"])


# =========================
# CREATE INVOICE
# =========================
@router.post("", response_model=InvoiceResponse, status_code=status.HTTP_201_CREATED)
def create_invoice(
    payload: InvoiceCreate,
    db: Session = Depends(get_db),
    user=Depends(get_current_user),
):
    invoice = invoice_service.create_invoice(db, user.id, payload)

    log_action(
        db=db,
        user_id=user.id,
        action="CREATE_INVOICE",
        entity_type="Invoice",
        entity_id=invoice.id,
        details=f"Invoice {invoice.invoice_number} created with total {invoice.grand_total:.2f}"
    )

    return invoice


# =========================
# LIST / GET
# =========================
@router.get("", response_model=Page[InvoiceSummaryResponse])
def list_invoices(
    options: PageOptions = Depends(),
    client_id: str | None = Query(None),
    status_filter: InvoiceStatus | None = Query(None, alias="status"),
    start_date: datetime | None = Query(None),
    end_date: datetime | None = Query(None),
    db: Session = Depends(get_db),
    user=Depends(get_current_user),
):
    invoices, item_count = invoice_service.list_invoices(
        db,
        user.id,
        options,
        client_id=client_id,
        status=status_filter,
        start_date=to_utc_naive(start_date) if start_date else None,
        end_date=to_utc_naive(end_date) if end_date else None,
    )
    return {"data": invoices, "meta": PageMeta.build(options, item_count)}


@router.get("/{invoice_id}", response_model=InvoiceResponse)
def get_invoice(
    invoice_id: str,
    db: Session = Depends(get_db),
    user=Depends(get_current_user),
):
    return invoice_service.get_invoice(db, user.id, invoice_id)


# =========================
# UPDATE INVOICE
# =========================
@router.patch("/{invoice_id}", response_model=InvoiceResponse)
def update_invoice(
    invoice_id: str,
    payload: InvoiceUpdate,
    db: Session = Depends(get_db),
    user=Depends(get_current_user),
):
    invoice = invoice_service.update_invoice(db, user.id, invoice_id, payload)

    log_action(
        db=db,
        user_id=user.id,
        action="UPDATE_INVOICE",
        entity_type="Invoice",
        entity_id=invoice.id,
        details=", ".join(sorted(payload.model_dump(exclude_unset=True))) or None
    )

    return invoice


# =========================
# PAYMENT
# =========================
@router.post("/{invoice_id}/mark-as-paid", response_model=InvoiceResponse)
def mark_as_paid(
    invoice_id: str,
    payload: MarkAsPaidRequest | None = None,
    db: Session = Depends(get_db),
    user=Depends(get_current_user),
):
    payment_notes = payload.payment_notes if payload else None
    invoice = invoice_service.mark_as_paid(db, user.id, invoice_id, payment_notes)

    log_action(
        db=db,
        user_id=user.id,
        action="MARK_INVOICE_PAID",
        entity_type="Invoice",
        entity_id=invoice.id,
        details=payment_notes
    )

    return invoice


@router.post("/{invoice_id}/payment-proof", response_model=InvoiceResponse)
def upload_payment_proof(
    invoice_id: str,
    file: UploadFile = File(...),
    db: Session = Depends(get_db),
    user=Depends(get_current_user),
    storage: LocalFileStorage = Depends(get_file_storage),
):
    invoice = invoice_service.attach_payment_proof(
        db,
        user.id,
        invoice_id,
        file.filename,
        file.file.read(),
        storage,
    )

    log_action(
        db=db,
        user_id=user.id,
        action="UPLOAD_PAYMENT_PROOF",
        entity_type="Invoice",
        entity_id=invoice.id,
        details=invoice.payment_proof_filename
    )

    return invoice


@router.get("/{invoice_id}/payment-proof")
def download_payment_proof(
    invoice_id: str,
    db: Session = Depends(get_db),
    user=Depends(get_current_user),
    storage: LocalFileStorage = Depends(get_file_storage),
):
    path, filename = invoice_service.get_payment_proof(db, user.id, invoice_id, storage)
    return FileResponse(path, filename=filename)


# =========================
# DELETE INVOICE
# =========================
@router.delete("/{invoice_id}")
def delete_invoice(
    invoice_id: str,
    db: Session = Depends(get_db),
    user=Depends(get_current_user),
    storage: LocalFileStorage = Depends(get_file_storage),
):
    invoice_service.delete_invoice(db, user.id, invoice_id, storage)

    log_action(
        db=db,
        user_id=user.id,
        action="DELETE_INVOICE",
        entity_type="Invoice",
        entity_id=invoice_id,
    )

    return {"message": "Invoice deleted successfully"}
