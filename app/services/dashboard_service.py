from collections import defaultdict
from datetime import date, datetime, time, timedelta

from sqlalchemy.orm import Session

from app.core.datetime_utils import utcnow
from app.models.client import Client
from app.models.invoice import Invoice, InvoiceStatus
from app.models.mileage import Mileage
from app.models.shift import Shift
from app.schemas.dashboard import (
    ClientSummary,
    DashboardFilter,
    DashboardSummary,
    InvoiceStatusSummary,
    PeriodSummary,
    TimeFrame,
)


# =====================================================
# DATE RANGES
# =====================================================

def _end_of_day(day: date) -> datetime:
    return datetime.combine(day, time.max)


def get_date_range(time_frame: TimeFrame, now: datetime | None = None) -> tuple[datetime, datetime]:
    """Window for a preset time frame around ``now``. Weeks run Monday to Sunday."""
    today = (now or utcnow()).date()

    if time_frame == TimeFrame.DAY:
        first, last = today, today

    elif time_frame == TimeFrame.WEEK:
        first = today - timedelta(days=today.weekday())
        last = first + timedelta(days=6)

    elif time_frame == TimeFrame.YEAR:
        first = date(today.year, 1, 1)
        last = date(today.year, 12, 31)

    else:
        first = today.replace(day=1)
        if today.month == 12:
            next_month = date(today.year + 1, 1, 1)
        else:
            next_month = date(today.year, today.month + 1, 1)
        last = next_month - timedelta(days=1)

    return datetime.combine(first, time.min), _end_of_day(last)


def resolve_date_range(filters: DashboardFilter, now: datetime | None = None) -> tuple[datetime, datetime]:
    if filters.start_date and filters.end_date:
        return filters.start_date, filters.end_date
    return get_date_range(filters.time_frame, now)


# =====================================================
# PERIOD KEYS
# =====================================================

def get_period_key(value: datetime | date, time_frame: TimeFrame) -> str:
    if time_frame == TimeFrame.WEEK:
        iso_year, iso_week, _ = value.isocalendar()
        return f"{iso_year}-W{iso_week}"

    if time_frame == TimeFrame.MONTH:
        return f"{value.year:04d}-{value.month:02d}"

    if time_frame == TimeFrame.YEAR:
        return f"{value.year:04d}"

    return f"{value.year:04d}-{value.month:02d}-{value.day:02d}"


def generate_period_keys(start: datetime, end: datetime, time_frame: TimeFrame) -> list[str]:
    """Every period key touched by [start, end], in chronological order."""
    keys: list[str] = []
    current = start.date()
    last = end.date()

    while current <= last:
        key = get_period_key(current, time_frame)
        if not keys or keys[-1] != key:
            keys.append(key)

        if time_frame == TimeFrame.MONTH:
            current = (current.replace(day=28) + timedelta(days=4)).replace(day=1)
        elif time_frame == TimeFrame.YEAR:
            current = date(current.year + 1, 1, 1)
        else:
            current += timedelta(days=1)

    return keys


# =====================================================
# SUMMARY
# =====================================================

def _sum(records, attribute: str) -> float:
    return float(sum(getattr(record, attribute) or 0 for record in records))


def get_dashboard_summary(
    db: Session,
    owner_id: str,
    filters: DashboardFilter,
    now: datetime | None = None,
) -> DashboardSummary:
    start, end = resolve_date_range(filters, now)

    shift_query = db.query(Shift).filter(
        Shift.user_id == owner_id,
        Shift.start_time >= start,
        Shift.start_time <= end,
    )
    mileage_query = db.query(Mileage).filter(
        Mileage.user_id == owner_id,
        Mileage.date >= start,
        Mileage.date <= end,
    )
    invoice_query = db.query(Invoice).filter(
        Invoice.user_id == owner_id,
        Invoice.issue_date >= start,
        Invoice.issue_date <= end,
    )
    client_query = db.query(Client).filter(Client.user_id == owner_id)

    if filters.client_id:
        shift_query = shift_query.filter(Shift.client_id == filters.client_id)
        mileage_query = mileage_query.filter(Mileage.client_id == filters.client_id)
        invoice_query = invoice_query.filter(Invoice.client_id == filters.client_id)
        client_query = client_query.filter(Client.id == filters.client_id)

    shifts = shift_query.all()
    mileages = mileage_query.all()
    invoices = invoice_query.all()
    clients = client_query.order_by(Client.name.asc()).all()

    total_invoiced = _sum(invoices, "grand_total")
    total_paid = _sum(
        [invoice for invoice in invoices if invoice.status == InvoiceStatus.PAID],
        "grand_total",
    )

    # Client summaries
    shifts_by_client = defaultdict(list)
    mileages_by_client = defaultdict(list)

    for shift in shifts:
        shifts_by_client[shift.client_id].append(shift)

    for mileage in mileages:
        mileages_by_client[mileage.client_id].append(mileage)

    client_summaries = [
        ClientSummary(
            id=client.id,
            name=client.name,
            total_hours=_sum(shifts_by_client[client.id], "total_hours"),
            total_earnings=_sum(shifts_by_client[client.id], "earnings"),
            total_mileage=_sum(mileages_by_client[client.id], "distance"),
            total_mileage_amount=_sum(mileages_by_client[client.id], "amount"),
        )
        for client in clients
    ]

    # Period summaries
    shifts_by_period = defaultdict(list)
    mileages_by_period = defaultdict(list)

    for shift in shifts:
        shifts_by_period[get_period_key(shift.start_time, filters.time_frame)].append(shift)

    for mileage in mileages:
        mileages_by_period[get_period_key(mileage.date, filters.time_frame)].append(mileage)

    period_summaries = [
        PeriodSummary(
            period=key,
            total_hours=_sum(shifts_by_period[key], "total_hours"),
            total_earnings=_sum(shifts_by_period[key], "earnings"),
            total_mileage=_sum(mileages_by_period[key], "distance"),
            total_mileage_amount=_sum(mileages_by_period[key], "amount"),
        )
        for key in generate_period_keys(start, end, filters.time_frame)
    ]

    # Invoice status summaries
    status_summaries = []
    for status in InvoiceStatus:
        matching = [invoice for invoice in invoices if invoice.status == status]
        status_summaries.append(
            InvoiceStatusSummary(
                status=status.value,
                count=len(matching),
                total=_sum(matching, "grand_total"),
            )
        )

    return DashboardSummary(
        start_date=start,
        end_date=end,
        total_hours=_sum(shifts, "total_hours"),
        total_earnings=_sum(shifts, "earnings"),
        total_hst=_sum(shifts, "hst_amount"),
        total_mileage=_sum(mileages, "distance"),
        total_mileage_amount=_sum(mileages, "amount"),
        total_invoiced=total_invoiced,
        total_paid=total_paid,
        total_unpaid=total_invoiced - total_paid,
        client_summaries=client_summaries,
        period_summaries=period_summaries,
        invoice_status_summaries=status_summaries,
    )
