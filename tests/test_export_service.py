from datetime import datetime

import pytest
from openpyxl import load_workbook

from app.core.exceptions import NotFoundError, ValidationError
from app.schemas.export import ExportDataType, ExportRequest, ExportType
from app.schemas.invoice import InvoiceCreate
from app.services import invoice_service
from app.services.export_service import (
    build_earnings_summary,
    build_invoice_document,
    build_mileage_rows,
    build_shift_rows,
    export_data,
)


def test_shift_rows_are_flat_and_rounded(db, make_shift):
    shift = make_shift(datetime(2024, 3, 4, 9), datetime(2024, 3, 4, 9, 20))
    db.refresh(shift)

    rows = build_shift_rows([shift])

    assert rows == [{
        "date": "2024-03-04",
        "start_time": "09:00",
        "end_time": "09:20",
        "client": "Maple House",
        "hours": 0.33,
        "rate": 50.0,
        "earnings": 16.67,
        "hst": 2.17,
    }]


def test_mileage_rows_carry_route(db, make_mileage):
    mileage = make_mileage(datetime(2024, 3, 4), 12, from_location="Home", to_location="Maple House")
    db.refresh(mileage)

    row = build_mileage_rows([mileage])[0]

    assert row["from_location"] == "Home"
    assert row["to_location"] == "Maple House"
    assert row["amount"] == 6.0


def test_invoice_document_has_header_lines_and_totals(db, user, client_record, make_shift):
    shift = make_shift(datetime(2024, 3, 4, 9), datetime(2024, 3, 4, 13))
    invoice = invoice_service.create_invoice(
        db, user.id, InvoiceCreate(client_id=client_record.id, shift_ids=[shift.id])
    )

    document = build_invoice_document(invoice, user)

    assert document["invoice_number"] == invoice.invoice_number
    assert document["bill_to"]["name"] == "Maple House"
    assert document["from"]["email"] == user.email
    assert len(document["shifts"]) == 1
    assert document["mileages"] == []
    assert document["totals"]["grand_total"] == 226.0


def test_earnings_summary_groups_by_client(db, user, client_record, make_shift, make_mileage):
    shift = make_shift(datetime(2024, 3, 4, 9), datetime(2024, 3, 4, 13))
    mileage = make_mileage(datetime(2024, 3, 4), 20)

    summary = build_earnings_summary([shift], [mileage], [client_record])

    assert summary["clients"][0]["client"] == "Maple House"
    assert summary["clients"][0]["total"] == 236.0
    assert summary["totals"]["hours"] == 4.0


@pytest.mark.parametrize("export_type, suffix", [(ExportType.EXCEL, ".xlsx"), (ExportType.PDF, ".pdf")])
def test_shift_export_writes_file(db, user, make_shift, tmp_path, export_type, suffix):
    make_shift(datetime(2024, 3, 4, 9), datetime(2024, 3, 4, 13))

    path, filename = export_data(
        db,
        user.id,
        ExportRequest(export_type=export_type, data_type=ExportDataType.SHIFTS),
        tmp_path,
    )

    assert path.exists()
    assert path.suffix == suffix
    assert filename.startswith("shifts_")
    assert path.parent == tmp_path / user.id


def test_excel_export_contains_rows(db, user, make_shift, tmp_path):
    make_shift(datetime(2024, 3, 4, 9), datetime(2024, 3, 4, 13))

    path, _ = export_data(
        db,
        user.id,
        ExportRequest(export_type=ExportType.EXCEL, data_type=ExportDataType.SHIFTS),
        tmp_path,
    )

    values = [cell for row in load_workbook(path).active.iter_rows(values_only=True) for cell in row]
    assert "Shifts Report" in values
    assert "Maple House" in values


def test_export_without_matching_rows_is_not_found(db, user, tmp_path):
    with pytest.raises(NotFoundError):
        export_data(
            db,
            user.id,
            ExportRequest(export_type=ExportType.PDF, data_type=ExportDataType.MILEAGES),
            tmp_path,
        )


def test_invoice_export_requires_invoice_id(db, user, tmp_path):
    with pytest.raises(ValidationError):
        export_data(
            db,
            user.id,
            ExportRequest(export_type=ExportType.PDF, data_type=ExportDataType.INVOICE),
            tmp_path,
        )


def test_earnings_summary_requires_date_range(db, user, tmp_path):
    with pytest.raises(ValidationError):
        export_data(
            db,
            user.id,
            ExportRequest(
                export_type=ExportType.EXCEL,
                data_type=ExportDataType.EARNINGS_SUMMARY,
                start_date=datetime(2024, 3, 1),
            ),
            tmp_path,
        )


def test_invoice_pdf_export(db, user, client_record, make_shift, make_mileage, tmp_path):
    shift = make_shift(datetime(2024, 3, 4, 9), datetime(2024, 3, 4, 13))
    mileage = make_mileage(datetime(2024, 3, 4), 20)
    invoice = invoice_service.create_invoice(
        db,
        user.id,
        InvoiceCreate(client_id=client_record.id, shift_ids=[shift.id], mileage_ids=[mileage.id]),
    )

    path, filename = export_data(
        db,
        user.id,
        ExportRequest(export_type=ExportType.PDF, data_type=ExportDataType.INVOICE, invoice_id=invoice.id),
        tmp_path,
    )

    assert path.read_bytes().startswith(b"%PDF")
    assert filename.startswith("invoice_")
