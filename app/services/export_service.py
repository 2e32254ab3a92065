"""Flat export projections of shifts, mileage and invoices.

Row builders return plain dictionaries; ``export_data`` selects the records,
turns them into an ``ExportReport`` and writes it as an Excel workbook or a
PDF document under the user's export directory.
"""
import logging
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from xml.sax.saxutils import escape

from openpyxl import Workbook
from openpyxl.styles import Alignment, Font, PatternFill
from reportlab.lib import colors
from reportlab.lib.pagesizes import letter
from reportlab.lib.styles import getSampleStyleSheet
from reportlab.lib.units import inch
from reportlab.platypus import Paragraph, SimpleDocTemplate, Spacer, Table, TableStyle
from sqlalchemy.orm import Session, joinedload, selectinload

from app.core.datetime_utils import utcnow
from app.core.exceptions import NotFoundError, ValidationError
from app.models.client import Client
from app.models.invoice import Invoice
from app.models.mileage import Mileage
from app.models.shift import Shift
from app.models.user import User
from app.schemas.export import ExportDataType, ExportRequest, ExportType
from app.services.user_service import get_user


logger = logging.getLogger(__name__)

UNKNOWN_CLIENT = "Unknown Client"

SHIFT_COLUMNS = [
    ("date", "Date"),
    ("start_time", "Start Time"),
    ("end_time", "End Time"),
    ("client", "Client"),
    ("hours", "Hours"),
    ("rate", "Rate"),
    ("earnings", "Earnings"),
    ("hst", "HST"),
]

MILEAGE_COLUMNS = [
    ("date", "Date"),
    ("client", "Client"),
    ("from_location", "From"),
    ("to_location", "To"),
    ("distance", "Distance (km)"),
    ("rate", "Rate"),
    ("amount", "Amount"),
]

CLIENT_SUMMARY_COLUMNS = [
    ("client", "Client"),
    ("hours", "Hours"),
    ("earnings", "Earnings"),
    ("hst", "HST"),
    ("distance", "Distance (km)"),
    ("mileage_amount", "Mileage Amount"),
    ("total", "Total"),
]


@dataclass
class ExportSection:
    heading: str | None
    columns: list[tuple[str, str]]
    rows: list[dict]


@dataclass
class ExportReport:
    title: str
    subtitle: list[str] = field(default_factory=list)
    sections: list[ExportSection] = field(default_factory=list)
    summary: list[tuple[str, str]] = field(default_factory=list)


def _client_name(record) -> str:
    return record.client.name if record.client else UNKNOWN_CLIENT


def _money(value: float) -> str:
    return f"${value:,.2f}"


def _full_name(user: User) -> str:
    return f"{user.first_name} {user.last_name}".strip()


# =====================================================
# ROW BUILDERS
# =====================================================

def build_shift_rows(shifts) -> list[dict]:
    return [
        {
            "date": shift.start_time.strftime("%Y-%m-%d"),
            "start_time": shift.start_time.strftime("%H:%M"),
            "end_time": shift.end_time.strftime("%H:%M"),
            "client": _client_name(shift),
            "hours": round(float(shift.total_hours or 0), 2),
            "rate": float(shift.hourly_rate or 0),
            "earnings": round(float(shift.earnings or 0), 2),
            "hst": round(float(shift.hst_amount or 0), 2),
        }
        for shift in shifts
    ]


def build_mileage_rows(mileages) -> list[dict]:
    return [
        {
            "date": mileage.date.strftime("%Y-%m-%d"),
            "client": _client_name(mileage),
            "from_location": mileage.from_location or "",
            "to_location": mileage.to_location or "",
            "distance": float(mileage.distance or 0),
            "rate": float(mileage.rate_per_km or 0),
            "amount": round(float(mileage.amount or 0), 2),
        }
        for mileage in mileages
    ]


def build_invoice_document(invoice: Invoice, user: User) -> dict:
    client = invoice.client

    return {
        "invoice_number": invoice.invoice_number,
        "status": invoice.status.value,
        "issue_date": invoice.issue_date.strftime("%Y-%m-%d"),
        "due_date": invoice.due_date.strftime("%Y-%m-%d") if invoice.due_date else "",
        "from": {"name": _full_name(user), "email": user.email},
        "bill_to": {
            "name": client.name if client else UNKNOWN_CLIENT,
            "contact_name": client.contact_name if client else None,
            "address": client.address if client else None,
        },
        "shifts": build_shift_rows(invoice.shifts),
        "mileages": build_mileage_rows(invoice.mileages),
        "totals": {
            "hours": round(float(invoice.hours_total or 0), 2),
            "earnings": round(float(invoice.earnings_total or 0), 2),
            "hst": round(float(invoice.hst_total or 0), 2),
            "mileage": round(float(invoice.mileage_total or 0), 2),
            "grand_total": round(float(invoice.grand_total or 0), 2),
        },
        "notes": invoice.notes,
    }


def build_earnings_summary(shifts, mileages, clients) -> dict:
    client_rows = []

    for client in clients:
        client_shifts = [shift for shift in shifts if shift.client_id == client.id]
        client_mileages = [mileage for mileage in mileages if mileage.client_id == client.id]

        earnings = sum(float(shift.earnings or 0) for shift in client_shifts)
        hst = sum(float(shift.hst_amount or 0) for shift in client_shifts)
        mileage_amount = sum(float(mileage.amount or 0) for mileage in client_mileages)

        client_rows.append({
            "client": client.name,
            "hours": round(sum(float(shift.total_hours or 0) for shift in client_shifts), 2),
            "earnings": round(earnings, 2),
            "hst": round(hst, 2),
            "distance": round(sum(float(mileage.distance or 0) for mileage in client_mileages), 2),
            "mileage_amount": round(mileage_amount, 2),
            "total": round(earnings + hst + mileage_amount, 2),
        })

    earnings = sum(float(shift.earnings or 0) for shift in shifts)
    hst = sum(float(shift.hst_amount or 0) for shift in shifts)
    mileage_amount = sum(float(mileage.amount or 0) for mileage in mileages)

    return {
        "clients": client_rows,
        "totals": {
            "hours": round(sum(float(shift.total_hours or 0) for shift in shifts), 2),
            "earnings": round(earnings, 2),
            "hst": round(hst, 2),
            "distance": round(sum(float(mileage.distance or 0) for mileage in mileages), 2),
            "mileage_amount": round(mileage_amount, 2),
            "total": round(earnings + hst + mileage_amount, 2),
        },
    }


# =====================================================
# REPORTS
# =====================================================

def _generated_line() -> str:
    return f"Generated on {utcnow().strftime('%Y-%m-%d')}"


def _shift_report(shifts, user: User) -> ExportReport:
    rows = build_shift_rows(shifts)
    earnings = sum(row["earnings"] for row in rows)
    hst = sum(row["hst"] for row in rows)

    return ExportReport(
        title="Shifts Report",
        subtitle=[_full_name(user), _generated_line()],
        sections=[ExportSection(None, SHIFT_COLUMNS, rows)],
        summary=[
            ("Total Hours", f"{sum(row['hours'] for row in rows):.2f}"),
            ("Total Earnings", _money(earnings)),
            ("Total HST", _money(hst)),
            ("Grand Total", _money(earnings + hst)),
        ],
    )


def _mileage_report(mileages, user: User) -> ExportReport:
    rows = build_mileage_rows(mileages)

    return ExportReport(
        title="Mileage Report",
        subtitle=[_full_name(user), _generated_line()],
        sections=[ExportSection(None, MILEAGE_COLUMNS, rows)],
        summary=[
            ("Total Distance", f"{sum(row['distance'] for row in rows):.2f} km"),
            ("Total Amount", _money(sum(row["amount"] for row in rows))),
        ],
    )


def _invoice_report(invoice: Invoice, user: User) -> ExportReport:
    document = build_invoice_document(invoice, user)
    totals = document["totals"]

    subtitle = [
        f"Invoice #{document['invoice_number']} ({document['status']})",
        f"From: {document['from']['name']}",
        f"Bill to: {document['bill_to']['name']}",
        f"Issue date: {document['issue_date']}",
    ]
    if document["due_date"]:
        subtitle.append(f"Due date: {document['due_date']}")

    sections = []
    if document["shifts"]:
        sections.append(ExportSection("Services", SHIFT_COLUMNS, document["shifts"]))
    if document["mileages"]:
        sections.append(ExportSection("Mileage", MILEAGE_COLUMNS, document["mileages"]))

    summary = [
        ("Total Hours", f"{totals['hours']:.2f}"),
        ("Subtotal", _money(totals["earnings"])),
        ("HST", _money(totals["hst"])),
        ("Mileage", _money(totals["mileage"])),
        ("Grand Total", _money(totals["grand_total"])),
    ]
    if document["notes"]:
        summary.append(("Notes", document["notes"]))

    return ExportReport(title="Invoice", subtitle=subtitle, sections=sections, summary=summary)


def _earnings_report(shifts, mileages, clients, user: User, start: datetime, end: datetime) -> ExportReport:
    summary = build_earnings_summary(shifts, mileages, clients)
    totals = summary["totals"]

    return ExportReport(
        title="Earnings Summary",
        subtitle=[
            _full_name(user),
            f"Period: {start.strftime('%Y-%m-%d')} to {end.strftime('%Y-%m-%d')}",
            _generated_line(),
        ],
        sections=[ExportSection("By client", CLIENT_SUMMARY_COLUMNS, summary["clients"])],
        summary=[
            ("Total Hours", f"{totals['hours']:.2f}"),
            ("Total Earnings", _money(totals["earnings"])),
            ("Total HST", _money(totals["hst"])),
            ("Total Mileage", _money(totals["mileage_amount"])),
            ("Grand Total", _money(totals["total"])),
        ],
    )


# =====================================================
# WRITERS
# =====================================================

HEADER_FILL = PatternFill(start_color="FFCCCCCC", end_color="FFCCCCCC", fill_type="solid")


def write_xlsx(report: ExportReport, path: Path) -> None:
    workbook = Workbook()
    sheet = workbook.active
    sheet.title = report.title[:31]

    sheet.append([report.title])
    sheet["A1"].font = Font(size=16, bold=True)
    for line in report.subtitle:
        sheet.append([line])

    for section in report.sections:
        sheet.append([])
        if section.heading:
            sheet.append([section.heading])
            sheet.cell(row=sheet.max_row, column=1).font = Font(bold=True)

        sheet.append([label for _, label in section.columns])
        header_row = sheet.max_row
        for cell in sheet[header_row]:
            cell.font = Font(bold=True)
            cell.fill = HEADER_FILL

        for row in section.rows:
            sheet.append([row[key] for key, _ in section.columns])

    sheet.append([])
    for label, value in report.summary:
        sheet.append([f"{label}:", value])
        sheet.cell(row=sheet.max_row, column=1).font = Font(bold=True)
        sheet.cell(row=sheet.max_row, column=2).alignment = Alignment(horizontal="right")

    for column in sheet.columns:
        sheet.column_dimensions[column[0].column_letter].width = 16

    workbook.save(path)


def write_pdf(report: ExportReport, path: Path) -> None:
    styles = getSampleStyleSheet()
    doc = SimpleDocTemplate(
        str(path),
        pagesize=letter,
        topMargin=0.6 * inch,
        bottomMargin=0.6 * inch,
        leftMargin=0.6 * inch,
        rightMargin=0.6 * inch,
    )

    story = [Paragraph(escape(report.title), styles["Title"])]
    for line in report.subtitle:
        story.append(Paragraph(escape(line), styles["Normal"]))
    story.append(Spacer(1, 16))

    for section in report.sections:
        if section.heading:
            story.append(Paragraph(escape(section.heading), styles["Heading3"]))

        rows = [[label for _, label in section.columns]]
        rows.extend([str(row[key]) for key, _ in section.columns] for row in section.rows)

        table = Table(rows, repeatRows=1)
        table.setStyle(TableStyle([
            ("BACKGROUND", (0, 0), (-1, 0), colors.HexColor("#cccccc")),
            ("FONTNAME", (0, 0), (-1, 0), "Helvetica-Bold"),
            ("FONTSIZE", (0, 0), (-1, -1), 8),
            ("GRID", (0, 0), (-1, -1), 0.25, colors.grey),
            ("VALIGN", (0, 0), (-1, -1), "MIDDLE"),
        ]))
        story.append(table)
        story.append(Spacer(1, 12))

    summary = Table([[f"{label}:", value] for label, value in report.summary])
    summary.setStyle(TableStyle([
        ("FONTNAME", (0, 0), (0, -1), "Helvetica-Bold"),
        ("ALIGN", (1, 0), (1, -1), "RIGHT"),
    ]))
    story.append(summary)

    doc.build(story)


# =====================================================
# EXPORT
# =====================================================

def _build_report(db: Session, owner_id: str, request: ExportRequest, user: User) -> ExportReport:
    if request.data_type == ExportDataType.SHIFTS:
        query = (
            db.query(Shift)
            .options(joinedload(Shift.client))
            .filter(Shift.user_id == owner_id)
        )
        if request.client_id:
            query = query.filter(Shift.client_id == request.client_id)
        if request.start_date and request.end_date:
            query = query.filter(
                Shift.start_time >= request.start_date,
                Shift.start_time <= request.end_date,
            )
        if request.ids:
            query = query.filter(Shift.id.in_(request.ids))

        shifts = query.order_by(Shift.start_time.asc()).all()
        if not shifts:
            raise NotFoundError("No shifts found with the specified criteria")

        return _shift_report(shifts, user)

    if request.data_type == ExportDataType.MILEAGES:
        query = (
            db.query(Mileage)
            .options(joinedload(Mileage.client))
            .filter(Mileage.user_id == owner_id)
        )
        if request.client_id:
            query = query.filter(Mileage.client_id == request.client_id)
        if request.start_date and request.end_date:
            query = query.filter(
                Mileage.date >= request.start_date,
                Mileage.date <= request.end_date,
            )
        if request.ids:
            query = query.filter(Mileage.id.in_(request.ids))

        mileages = query.order_by(Mileage.date.asc()).all()
        if not mileages:
            raise NotFoundError("No mileage entries found with the specified criteria")

        return _mileage_report(mileages, user)

    if request.data_type == ExportDataType.INVOICE:
        if not request.invoice_id:
            raise ValidationError("Invoice ID is required for invoice export")

        invoice = (
            db.query(Invoice)
            .options(
                joinedload(Invoice.client),
                selectinload(Invoice.shifts).joinedload(Shift.client),
                selectinload(Invoice.mileages).joinedload(Mileage.client),
            )
            .filter(Invoice.id == request.invoice_id, Invoice.user_id == owner_id)
            .first()
        )
        if not invoice:
            raise NotFoundError(f'Invoice with ID "{request.invoice_id}" not found')

        return _invoice_report(invoice, user)

    # Earnings summary
    if not (request.start_date and request.end_date):
        raise ValidationError("Start date and end date are required for earnings summary export")

    shift_query = db.query(Shift).filter(
        Shift.user_id == owner_id,
        Shift.start_time >= request.start_date,
        Shift.start_time <= request.end_date,
    )
    mileage_query = db.query(Mileage).filter(
        Mileage.user_id == owner_id,
        Mileage.date >= request.start_date,
        Mileage.date <= request.end_date,
    )
    client_query = db.query(Client).filter(Client.user_id == owner_id)

    if request.client_id:
        shift_query = shift_query.filter(Shift.client_id == request.client_id)
        mileage_query = mileage_query.filter(Mileage.client_id == request.client_id)
        client_query = client_query.filter(Client.id == request.client_id)

    return _earnings_report(
        shift_query.all(),
        mileage_query.all(),
        client_query.order_by(Client.name.asc()).all(),
        user,
        request.start_date,
        request.end_date,
    )


def export_data(
    db: Session,
    owner_id: str,
    request: ExportRequest,
    exports_dir: str | Path,
) -> tuple[Path, str]:
    """Write the requested export to disk; returns (path, filename)."""
    user = get_user(db, owner_id)
    report = _build_report(db, owner_id, request, user)

    extension = "pdf" if request.export_type == ExportType.PDF else "xlsx"
    timestamp = utcnow().strftime("%Y%m%dT%H%M%S%f")
    filename = f"{request.data_type.value}_{timestamp}.{extension}"

    target_dir = Path(exports_dir) / owner_id
    target_dir.mkdir(parents=True, exist_ok=True)
    path = target_dir / filename

    if request.export_type == ExportType.PDF:
        write_pdf(report, path)
    else:
        write_xlsx(report, path)

    logger.info("Exported %s as %s for user %s", request.data_type.value, extension, owner_id)

    return path, filename


def remove_export(path: str | Path) -> None:
    Path(path).unlink(missing_ok=True)
    logger.debug("Removed export %s", path)
