from datetime import datetime
from types import SimpleNamespace

import pytest

from app.core.exceptions import ValidationError
from app.services.rate_calculator import (
    compute_invoice_totals,
    compute_mileage_amount,
    compute_shift_totals,
    sum_mileage_amounts,
    sum_shift_totals,
    validate_distance,
    validate_shift_span,
)


def test_four_hour_shift_at_fifty_with_thirteen_percent_tax():
    totals = compute_shift_totals(
        datetime(2024, 3, 4, 9, 0),
        datetime(2024, 3, 4, 13, 0),
        50,
        13,
    )

    assert totals.hours == 4
    assert totals.earnings == 200
    assert totals.tax == pytest.approx(26)


def test_partial_hours_are_not_rounded():
    totals = compute_shift_totals(
        datetime(2024, 3, 4, 9, 0),
        datetime(2024, 3, 4, 9, 20),
        30,
        0,
    )

    assert totals.hours == pytest.approx(1 / 3)
    assert totals.earnings == pytest.approx(10)
    assert totals.tax == 0


def test_mileage_amount_is_distance_times_rate():
    assert compute_mileage_amount(42.5, 0.61) == pytest.approx(25.925)


@pytest.mark.parametrize("end", [datetime(2024, 3, 4, 9, 0), datetime(2024, 3, 4, 8, 0)])
def test_shift_must_end_after_it_starts(end):
    with pytest.raises(ValidationError):
        validate_shift_span(datetime(2024, 3, 4, 9, 0), end)


def test_negative_distance_is_rejected():
    validate_distance(0)

    with pytest.raises(ValidationError):
        validate_distance(-1)


def test_invoice_totals_sum_stored_values():
    shifts = [
        SimpleNamespace(total_hours=4, earnings=200, hst_amount=26),
        SimpleNamespace(total_hours=2.5, earnings=125, hst_amount=16.25),
    ]
    mileages = [SimpleNamespace(amount=10), SimpleNamespace(amount=5.5)]

    totals = compute_invoice_totals(shifts, mileages)

    assert totals.hours_total == 6.5
    assert totals.earnings_total == 325
    assert totals.hst_total == pytest.approx(42.25)
    assert totals.mileage_total == 15.5
    assert totals.grand_total == pytest.approx(382.75)


def test_empty_invoice_totals_are_zero():
    totals = compute_invoice_totals([], [])

    assert totals.grand_total == 0
    assert totals.hours_total == 0


def test_shift_sums_treat_missing_values_as_zero():
    shifts = [
        SimpleNamespace(total_hours=4, earnings=200, hst_amount=26),
        SimpleNamespace(total_hours=None, earnings=None, hst_amount=None),
    ]

    totals = sum_shift_totals(shifts)

    assert totals.hours == 4
    assert totals.earnings == 200
    assert totals.tax == 26
    assert sum_mileage_amounts([SimpleNamespace(amount=12.5), SimpleNamespace(amount=None)]) == 12.5
