from datetime import datetime
from types import SimpleNamespace

import pytest

from app.models.invoice import InvoiceStatus
from app.services.invoice_status_service import (
    can_delete,
    can_edit,
    can_transition,
    is_nominal_transition,
    update_overdue_status,
)


def test_only_paid_invoices_are_locked_for_edits():
    assert not can_edit(InvoiceStatus.PAID)
    for status in InvoiceStatus:
        if status != InvoiceStatus.PAID:
            assert can_edit(status)


@pytest.mark.parametrize(
    "status, allowed",
    [
        (InvoiceStatus.DRAFT, True),
        (InvoiceStatus.SENT, False),
        (InvoiceStatus.PAID, False),
        (InvoiceStatus.OVERDUE, True),
        (InvoiceStatus.CANCELLED, True),
    ],
)
def test_delete_rules(status, allowed):
    assert can_delete(status) is allowed


def test_paid_cannot_move_back():
    assert can_transition(InvoiceStatus.PAID, InvoiceStatus.PAID)
    assert not can_transition(InvoiceStatus.PAID, InvoiceStatus.DRAFT)
    assert not can_transition(InvoiceStatus.PAID, InvoiceStatus.SENT)


def test_non_nominal_moves_are_still_accepted():
    assert not is_nominal_transition(InvoiceStatus.CANCELLED, InvoiceStatus.DRAFT)
    assert can_transition(InvoiceStatus.CANCELLED, InvoiceStatus.DRAFT)
    assert is_nominal_transition(InvoiceStatus.DRAFT, InvoiceStatus.SENT)


def test_sent_invoice_past_due_becomes_overdue():
    invoice = SimpleNamespace(status=InvoiceStatus.SENT, due_date=datetime(2024, 1, 31))

    assert update_overdue_status(invoice, now=datetime(2024, 2, 1)) is True
    assert invoice.status == InvoiceStatus.OVERDUE


@pytest.mark.parametrize(
    "status, due_date",
    [
        (InvoiceStatus.SENT, datetime(2024, 3, 1)),
        (InvoiceStatus.DRAFT, datetime(2024, 1, 31)),
        (InvoiceStatus.SENT, None),
    ],
)
def test_overdue_check_leaves_other_invoices_alone(status, due_date):
    invoice = SimpleNamespace(status=status, due_date=due_date)

    assert update_overdue_status(invoice, now=datetime(2024, 2, 1)) is False
    assert invoice.status == status
