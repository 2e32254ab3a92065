"""Invoice lifecycle rules.

The nominal lifecycle is Draft -> Sent -> Paid/Overdue, with Cancelled
reachable from any open state. Only two rules are enforced: a Paid invoice
is locked except for its payment metadata, and Sent or Paid invoices cannot
be deleted. Any other status change is accepted.
"""
from datetime import datetime

from app.models.invoice import Invoice, InvoiceStatus


NOMINAL_TRANSITIONS: dict[InvoiceStatus, frozenset[InvoiceStatus]] = {
    InvoiceStatus.DRAFT: frozenset({InvoiceStatus.SENT, InvoiceStatus.CANCELLED}),
    InvoiceStatus.SENT: frozenset(
        {InvoiceStatus.PAID, InvoiceStatus.OVERDUE, InvoiceStatus.CANCELLED}
    ),
    InvoiceStatus.OVERDUE: frozenset({InvoiceStatus.PAID, InvoiceStatus.CANCELLED}),
    InvoiceStatus.PAID: frozenset(),
    InvoiceStatus.CANCELLED: frozenset(),
}

UNDELETABLE_STATUSES = frozenset({InvoiceStatus.SENT, InvoiceStatus.PAID})


def can_edit(status: InvoiceStatus) -> bool:
    return status != InvoiceStatus.PAID


def can_delete(status: InvoiceStatus) -> bool:
    return status not in UNDELETABLE_STATUSES


def can_transition(current: InvoiceStatus, target: InvoiceStatus) -> bool:
    if current == InvoiceStatus.PAID:
        return target == InvoiceStatus.PAID
    return True


def is_nominal_transition(current: InvoiceStatus, target: InvoiceStatus) -> bool:
    return target == current or target in NOMINAL_TRANSITIONS[current]


def update_overdue_status(invoice: Invoice, now: datetime | None = None) -> bool:
    """Flag a sent invoice past its due date as overdue. Returns True on change."""
    now = now or datetime.utcnow()

    if (
        invoice.status == InvoiceStatus.SENT and
        invoice.due_date and
        invoice.due_date < now
    ):
        invoice.status = InvoiceStatus.OVERDUE
        return True

    return False
