"""Pure earnings arithmetic for shifts, mileage and invoice totals.

Values are never rounded here; presentation layers round for display.
"""
from dataclasses import dataclass
from datetime import datetime
from typing import Iterable

from app.core.exceptions import ValidationError


SECONDS_PER_HOUR = 3600


@dataclass(frozen=True)
class ShiftTotals:
    hours: float
    earnings: float
    tax: float


@dataclass(frozen=True)
class InvoiceTotals:
    hours_total: float = 0.0
    earnings_total: float = 0.0
    hst_total: float = 0.0
    mileage_total: float = 0.0

    @property
    def grand_total(self) -> float:
        return self.earnings_total + self.hst_total + self.mileage_total


def compute_shift_totals(
    start: datetime,
    end: datetime,
    hourly_rate: float,
    tax_percent: float,
) -> ShiftTotals:
    hours = (end - start).total_seconds() / SECONDS_PER_HOUR
    earnings = hours * hourly_rate
    tax = earnings * tax_percent / 100

    return ShiftTotals(hours=hours, earnings=earnings, tax=tax)


def compute_mileage_amount(distance: float, rate_per_unit: float) -> float:
    return distance * rate_per_unit


def validate_shift_span(start: datetime, end: datetime) -> None:
    if end <= start:
        raise ValidationError("Shift end time must be after its start time")


def validate_distance(distance: float) -> None:
    if distance is None or distance < 0:
        raise ValidationError("Distance cannot be negative")


def sum_shift_totals(shifts: Iterable) -> ShiftTotals:
    hours = 0.0
    earnings = 0.0
    tax = 0.0

    for shift in shifts:
        hours += float(shift.total_hours or 0)
        earnings += float(shift.earnings or 0)
        tax += float(shift.hst_amount or 0)

    return ShiftTotals(hours=hours, earnings=earnings, tax=tax)


def sum_mileage_amounts(mileages: Iterable) -> float:
    return sum(float(mileage.amount or 0) for mileage in mileages)


def compute_invoice_totals(shifts: Iterable, mileages: Iterable) -> InvoiceTotals:
    """Sum the stored per-record values of the claimed shifts and mileages."""
    shift_totals = sum_shift_totals(shifts)

    return InvoiceTotals(
        hours_total=shift_totals.hours,
        earnings_total=shift_totals.earnings,
        hst_total=shift_totals.tax,
        mileage_total=float(sum_mileage_amounts(mileages)),
    )
