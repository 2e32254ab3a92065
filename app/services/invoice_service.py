import logging
from datetime import datetime, timedelta
from pathlib import Path

from sqlalchemy.orm import Session, joinedload, selectinload

from app.core.config import settings
from app.core.datetime_utils import utcnow
from app.core.exceptions import ImmutableError, NotFoundError
from app.models.invoice import Invoice, InvoiceStatus
from app.schemas.common import PageOptions, SortOrder
from app.schemas.invoice import InvoiceCreate, InvoiceUpdate
from app.services.client_service import get_client_owned_by
from app.services.file_storage import LocalFileStorage
from app.services.invoice_ledger import ClaimLedger, unique_ids
from app.services.invoice_numbering import next_invoice_number
from app.services.invoice_status_service import (
    can_delete,
    can_edit,
    can_transition,
    is_nominal_transition,
    update_overdue_status,
)
from app.services.rate_calculator import InvoiceTotals, compute_invoice_totals


logger = logging.getLogger(__name__)


def _apply_totals(invoice: Invoice, totals: InvoiceTotals) -> None:
    invoice.hours_total = totals.hours_total
    invoice.earnings_total = totals.earnings_total
    invoice.hst_total = totals.hst_total
    invoice.mileage_total = totals.mileage_total
    invoice.grand_total = totals.grand_total


def _recompute_totals(invoice: Invoice) -> None:
    _apply_totals(invoice, compute_invoice_totals(invoice.shifts, invoice.mileages))


def _proof_path(owner_id: str, filename: str) -> str:
    return f"{owner_id}/{filename}"


def _owned_invoice(db: Session, owner_id: str, invoice_id: str, hydrate: bool = False) -> Invoice:
    query = db.query(Invoice).filter(Invoice.id == invoice_id, Invoice.user_id == owner_id)

    if hydrate:
        query = query.options(
            joinedload(Invoice.client),
            selectinload(Invoice.shifts),
            selectinload(Invoice.mileages),
        )

    invoice = query.first()

    if not invoice:
        raise NotFoundError(f'Invoice with ID "{invoice_id}" not found')

    return invoice


def get_invoice(db: Session, owner_id: str, invoice_id: str) -> Invoice:
    return _owned_invoice(db, owner_id, invoice_id, hydrate=True)


# =========================
# CREATE
# =========================
def create_invoice(db: Session, owner_id: str, payload: InvoiceCreate) -> Invoice:
    client = get_client_owned_by(db, owner_id, payload.client_id)
    ledger = ClaimLedger(db, owner_id)

    try:
        shifts = ledger.claim_shifts(payload.shift_ids)
        mileages = ledger.claim_mileages(payload.mileage_ids)

        invoice_number = next_invoice_number(db, owner_id)

        issue_date = payload.issue_date or utcnow()
        due_date = payload.due_date or issue_date + timedelta(days=settings.INVOICE_DUE_DAYS)

        invoice = Invoice(
            user_id=owner_id,
            client_id=client.id,
            invoice_number=invoice_number,
            issue_date=issue_date,
            due_date=due_date,
            status=InvoiceStatus.DRAFT,
            notes=payload.notes,
            shifts=shifts,
            mileages=mileages,
        )
        _apply_totals(invoice, compute_invoice_totals(shifts, mileages))

        db.add(invoice)
        db.commit()

    except Exception:
        db.rollback()
        raise

    logger.info(
        "Created invoice %s for user %s with %s shifts and %s mileage entries",
        invoice.invoice_number,
        owner_id,
        len(shifts),
        len(mileages),
    )

    return get_invoice(db, owner_id, invoice.id)


# =========================
# UPDATE
# =========================
def _reconcile(current: list, requested_ids: list[str], claim, release) -> list:
    """Swap the claim set to ``requested_ids``; returns the new record list."""
    requested = unique_ids(requested_ids)
    requested_set = set(requested)
    current_ids = {record.id for record in current}

    to_add = [record_id for record_id in requested if record_id not in current_ids]
    to_remove = [record.id for record in current if record.id not in requested_set]

    # Claim first: a rejected addition raises before anything is released
    added = claim(to_add)
    release(to_remove)

    return [record for record in current if record.id in requested_set] + added


def update_invoice(db: Session, owner_id: str, invoice_id: str, patch: InvoiceUpdate) -> Invoice:
    invoice = _owned_invoice(db, owner_id, invoice_id, hydrate=True)

    if not can_edit(invoice.status):
        raise ImmutableError("Cannot edit a paid invoice")

    changes = patch.model_dump(exclude_unset=True)
    ledger = ClaimLedger(db, owner_id)

    try:
        if changes.get("issue_date"):
            invoice.issue_date = changes["issue_date"]

        if changes.get("due_date"):
            invoice.due_date = changes["due_date"]

        if changes.get("status"):
            target = InvoiceStatus(changes["status"])
            if not can_transition(invoice.status, target):
                raise ImmutableError(
                    f"Cannot move invoice from {invoice.status.value} to {target.value}"
                )
            if not is_nominal_transition(invoice.status, target):
                logger.info(
                    "Invoice %s moved outside the usual lifecycle: %s -> %s",
                    invoice.invoice_number,
                    invoice.status.value,
                    target.value,
                )
            invoice.status = target

        if "notes" in changes:
            invoice.notes = changes["notes"]

        if "payment_notes" in changes:
            invoice.payment_notes = changes["payment_notes"]

        shift_ids = changes.get("shift_ids")
        mileage_ids = changes.get("mileage_ids")

        if shift_ids is not None:
            invoice.shifts = _reconcile(
                list(invoice.shifts), shift_ids, ledger.claim_shifts, ledger.release_shifts
            )

        if mileage_ids is not None:
            invoice.mileages = _reconcile(
                list(invoice.mileages), mileage_ids, ledger.claim_mileages, ledger.release_mileages
            )

        if shift_ids is not None or mileage_ids is not None:
            _recompute_totals(invoice)

        db.commit()

    except Exception:
        db.rollback()
        raise

    return get_invoice(db, owner_id, invoice_id)


# =========================
# PAYMENT
# =========================
def mark_as_paid(
    db: Session,
    owner_id: str,
    invoice_id: str,
    payment_notes: str | None = None,
) -> Invoice:
    invoice = _owned_invoice(db, owner_id, invoice_id)

    invoice.status = InvoiceStatus.PAID

    if payment_notes is not None:
        invoice.payment_notes = payment_notes

    try:
        db.commit()
    except Exception:
        db.rollback()
        raise

    return get_invoice(db, owner_id, invoice_id)


def attach_payment_proof(
    db: Session,
    owner_id: str,
    invoice_id: str,
    original_filename: str,
    content: bytes,
    storage: LocalFileStorage,
) -> Invoice:
    invoice = _owned_invoice(db, owner_id, invoice_id)

    extension = Path(original_filename or "").suffix.lower()
    filename = f"{invoice.id}_payment_proof{extension}"
    previous = invoice.payment_proof_filename

    # The live file is only replaced once the commit succeeds
    staged = _proof_path(owner_id, f"{filename}.upload")
    storage.save(staged, content)

    invoice.payment_proof_filename = filename
    if invoice.status != InvoiceStatus.PAID:
        invoice.status = InvoiceStatus.PAID

    try:
        db.commit()
    except Exception:
        db.rollback()
        storage.delete(staged)
        raise

    storage.move(staged, _proof_path(owner_id, filename))

    if previous and previous != filename:
        storage.delete(_proof_path(owner_id, previous))

    return get_invoice(db, owner_id, invoice_id)


def get_payment_proof(
    db: Session,
    owner_id: str,
    invoice_id: str,
    storage: LocalFileStorage,
) -> tuple[Path, str]:
    invoice = _owned_invoice(db, owner_id, invoice_id)

    if not invoice.payment_proof_filename:
        raise NotFoundError("No payment proof found for this invoice")

    relative_path = _proof_path(owner_id, invoice.payment_proof_filename)

    if not storage.exists(relative_path):
        raise NotFoundError("Payment proof file not found")

    return storage.resolve(relative_path), invoice.payment_proof_filename


# =========================
# DELETE
# =========================
def delete_invoice(
    db: Session,
    owner_id: str,
    invoice_id: str,
    storage: LocalFileStorage,
) -> None:
    invoice = _owned_invoice(db, owner_id, invoice_id, hydrate=True)

    if not can_delete(invoice.status):
        raise ImmutableError("Cannot delete an invoice that has been sent or paid")

    ledger = ClaimLedger(db, owner_id)
    proof_filename = invoice.payment_proof_filename

    try:
        ledger.release_shifts([shift.id for shift in invoice.shifts])
        ledger.release_mileages([mileage.id for mileage in invoice.mileages])

        db.delete(invoice)
        db.commit()

    except Exception:
        db.rollback()
        raise

    if proof_filename:
        storage.delete(_proof_path(owner_id, proof_filename))


# =========================
# LISTING
# =========================
def sync_overdue_statuses(db: Session, owner_id: str, now: datetime | None = None) -> int:
    """Persist Sent -> Overdue for the user's invoices past their due date."""
    now = now or utcnow()

    invoices = (
        db.query(Invoice)
        .filter(
            Invoice.user_id == owner_id,
            Invoice.status == InvoiceStatus.SENT,
            Invoice.due_date < now,
        )
        .all()
    )

    changed = sum(1 for invoice in invoices if update_overdue_status(invoice, now))

    if changed:
        db.commit()

    return changed


def list_invoices(
    db: Session,
    owner_id: str,
    options: PageOptions,
    client_id: str | None = None,
    status: InvoiceStatus | None = None,
    start_date: datetime | None = None,
    end_date: datetime | None = None,
):
    sync_overdue_statuses(db, owner_id)

    query = (
        db.query(Invoice)
        .options(joinedload(Invoice.client))
        .filter(Invoice.user_id == owner_id)
    )

    if client_id:
        query = query.filter(Invoice.client_id == client_id)

    if status:
        query = query.filter(Invoice.status == status)

    if start_date:
        query = query.filter(Invoice.issue_date >= start_date)

    if end_date:
        query = query.filter(Invoice.issue_date <= end_date)

    order_column = (
        Invoice.issue_date.asc() if options.order == SortOrder.ASC else Invoice.issue_date.desc()
    )

    item_count = query.count()
    invoices = (
        query
        .order_by(order_column, Invoice.invoice_number.asc())
        .offset(options.skip)
        .limit(options.take)
        .all()
    )

    return invoices, item_count
