from datetime import datetime

from sqlalchemy.orm import Session, joinedload

from app.core.config import settings
from app.core.exceptions import ImmutableError, NotFoundError, ValidationError
from app.models.shift import Shift
from app.models.user import User
from app.schemas.common import PageOptions, SortOrder
from app.schemas.shift import ShiftCreate, ShiftUpdate
from app.services.client_service import get_client_owned_by
from app.services.rate_calculator import compute_shift_totals, validate_shift_span
from app.services.user_service import get_user


def _tax_percent(user: User) -> float:
    if user.hst_percentage is None:
        return float(settings.DEFAULT_HST_PERCENTAGE)
    return float(user.hst_percentage)


def _apply_totals(shift: Shift, user: User) -> None:
    validate_shift_span(shift.start_time, shift.end_time)

    totals = compute_shift_totals(
        shift.start_time,
        shift.end_time,
        shift.hourly_rate,
        _tax_percent(user),
    )
    shift.total_hours = totals.hours
    shift.earnings = totals.earnings
    shift.hst_amount = totals.tax


def get_shift(db: Session, owner_id: str, shift_id: str) -> Shift:
    shift = (
        db.query(Shift)
        .options(joinedload(Shift.client))
        .filter(Shift.id == shift_id, Shift.user_id == owner_id)
        .first()
    )

    if not shift:
        raise NotFoundError(f'Shift with ID "{shift_id}" not found')

    return shift


def list_shifts(
    db: Session,
    owner_id: str,
    options: PageOptions,
    client_id: str | None = None,
    start_date: datetime | None = None,
    end_date: datetime | None = None,
    is_invoiced: bool | None = None,
):
    query = (
        db.query(Shift)
        .options(joinedload(Shift.client))
        .filter(Shift.user_id == owner_id)
    )

    if client_id:
        query = query.filter(Shift.client_id == client_id)

    if start_date:
        query = query.filter(Shift.start_time >= start_date)

    if end_date:
        query = query.filter(Shift.start_time <= end_date)

    if is_invoiced is not None:
        query = query.filter(Shift.is_invoiced.is_(is_invoiced))

    order_column = Shift.start_time.asc() if options.order == SortOrder.ASC else Shift.start_time.desc()

    item_count = query.count()
    shifts = query.order_by(order_column).offset(options.skip).limit(options.take).all()

    return shifts, item_count


def create_shift(db: Session, owner_id: str, payload: ShiftCreate) -> Shift:
    client = get_client_owned_by(db, owner_id, payload.client_id)
    user = get_user(db, owner_id)

    hourly_rate = payload.hourly_rate if payload.hourly_rate is not None else user.hourly_rate
    if hourly_rate is None:
        raise ValidationError("Hourly rate is required when no default rate is set on the profile")

    shift = Shift(
        user_id=owner_id,
        client_id=client.id,
        start_time=payload.start_time,
        end_time=payload.end_time,
        shift_type=payload.shift_type,
        hourly_rate=hourly_rate,
        notes=payload.notes,
        location=payload.location,
    )

    if payload.use_client_location:
        shift.location = client.address or shift.location
        shift.latitude = client.latitude
        shift.longitude = client.longitude

    _apply_totals(shift, user)

    db.add(shift)
    db.commit()
    db.refresh(shift)

    return shift


def update_shift(db: Session, owner_id: str, shift_id: str, payload: ShiftUpdate) -> Shift:
    shift = get_shift(db, owner_id, shift_id)

    if shift.is_invoiced:
        raise ImmutableError("Cannot update a shift that is already invoiced")

    user = get_user(db, owner_id)
    changes = payload.model_dump(exclude_unset=True, exclude={"use_client_location"})

    if changes.get("client_id"):
        get_client_owned_by(db, owner_id, changes["client_id"])

    for field, value in changes.items():
        if value is None and field in {"client_id", "start_time", "end_time", "shift_type", "hourly_rate"}:
            continue
        setattr(shift, field, value)

    if payload.use_client_location:
        client = get_client_owned_by(db, owner_id, shift.client_id)
        shift.location = client.address or shift.location
        shift.latitude = client.latitude or shift.latitude
        shift.longitude = client.longitude or shift.longitude

    try:
        _apply_totals(shift, user)
    except ValidationError:
        db.rollback()
        raise

    db.commit()
    db.refresh(shift)

    return shift


def delete_shift(db: Session, owner_id: str, shift_id: str) -> None:
    shift = get_shift(db, owner_id, shift_id)

    if shift.is_invoiced:
        raise ImmutableError("Cannot delete a shift that is already invoiced")

    db.delete(shift)
    db.commit()
