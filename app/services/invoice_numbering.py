"""Per-user invoice numbers: ``INV-<first 4 chars of user id>-<0001>``.

The next value comes from a locked counter row in ``invoice_sequences``, so
concurrent creations never share a number and deleted invoices never free
theirs for reuse. The increment belongs to the caller's transaction and is
returned on rollback.
"""
import logging

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.models.invoice import Invoice, InvoiceSequence


logger = logging.getLogger(__name__)

NUMBER_PREFIX = "INV"
OWNER_PREFIX_LENGTH = 4
SEQUENCE_WIDTH = 4


def format_invoice_number(owner_id: str, sequence: int) -> str:
    owner_prefix = owner_id[:OWNER_PREFIX_LENGTH]
    return f"{NUMBER_PREFIX}-{owner_prefix}-{str(sequence).zfill(SEQUENCE_WIDTH)}"


def _locked_counter(db: Session, owner_id: str) -> InvoiceSequence | None:
    return db.execute(
        select(InvoiceSequence)
        .where(InvoiceSequence.user_id == owner_id)
        .with_for_update()
        .execution_options(populate_existing=True)
    ).scalar_one_or_none()


def next_sequence_value(db: Session, owner_id: str) -> int:
    counter = _locked_counter(db, owner_id)

    if counter is None:
        # First invoice through the counter: continue after any invoices
        # that already exist for this user.
        existing = db.query(Invoice).filter(Invoice.user_id == owner_id).count()

        savepoint = db.begin_nested()
        try:
            counter = InvoiceSequence(user_id=owner_id, current_value=existing)
            db.add(counter)
            db.flush()
            savepoint.commit()
        except IntegrityError:
            # Another transaction created the counter first
            savepoint.rollback()
            counter = _locked_counter(db, owner_id)
            if counter is None:
                raise

    counter.current_value += 1
    db.flush()

    logger.debug("Allocated invoice sequence %s for user %s", counter.current_value, owner_id)
    return counter.current_value


def next_invoice_number(db: Session, owner_id: str) -> str:
    return format_invoice_number(owner_id, next_sequence_value(db, owner_id))
