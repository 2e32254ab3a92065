from datetime import datetime

from sqlalchemy.orm import Session, joinedload

from app.core.exceptions import ImmutableError, NotFoundError, ValidationError
from app.models.mileage import Mileage
from app.schemas.common import PageOptions, SortOrder
from app.schemas.mileage import MileageCreate, MileageUpdate
from app.services.client_service import get_client_owned_by
from app.services.rate_calculator import compute_mileage_amount, validate_distance
from app.services.user_service import get_user


def get_mileage(db: Session, owner_id: str, mileage_id: str) -> Mileage:
    mileage = (
        db.query(Mileage)
        .options(joinedload(Mileage.client))
        .filter(Mileage.id == mileage_id, Mileage.user_id == owner_id)
        .first()
    )

    if not mileage:
        raise NotFoundError(f'Mileage entry with ID "{mileage_id}" not found')

    return mileage


def list_mileages(
    db: Session,
    owner_id: str,
    options: PageOptions,
    client_id: str | None = None,
    start_date: datetime | None = None,
    end_date: datetime | None = None,
    is_invoiced: bool | None = None,
):
    query = (
        db.query(Mileage)
        .options(joinedload(Mileage.client))
        .filter(Mileage.user_id == owner_id)
    )

    if client_id:
        query = query.filter(Mileage.client_id == client_id)

    if start_date:
        query = query.filter(Mileage.date >= start_date)

    if end_date:
        query = query.filter(Mileage.date <= end_date)

    if is_invoiced is not None:
        query = query.filter(Mileage.is_invoiced.is_(is_invoiced))

    order_column = Mileage.date.asc() if options.order == SortOrder.ASC else Mileage.date.desc()

    item_count = query.count()
    mileages = query.order_by(order_column).offset(options.skip).limit(options.take).all()

    return mileages, item_count


def create_mileage(db: Session, owner_id: str, payload: MileageCreate) -> Mileage:
    client = get_client_owned_by(db, owner_id, payload.client_id)
    user = get_user(db, owner_id)

    validate_distance(payload.distance)

    rate_per_km = payload.rate_per_km if payload.rate_per_km is not None else user.mileage_rate
    if rate_per_km is None:
        raise ValidationError("Mileage rate is required when no default rate is set on the profile")

    mileage = Mileage(
        user_id=owner_id,
        client_id=client.id,
        date=payload.date,
        distance=payload.distance,
        rate_per_km=rate_per_km,
        amount=compute_mileage_amount(payload.distance, rate_per_km),
        description=payload.description,
        from_location=payload.from_location,
        to_location=payload.to_location,
    )

    db.add(mileage)
    db.commit()
    db.refresh(mileage)

    return mileage


def update_mileage(db: Session, owner_id: str, mileage_id: str, payload: MileageUpdate) -> Mileage:
    mileage = get_mileage(db, owner_id, mileage_id)

    if mileage.is_invoiced:
        raise ImmutableError("Cannot update a mileage entry that is already invoiced")

    changes = payload.model_dump(exclude_unset=True)

    if "distance" in changes:
        validate_distance(changes["distance"])

    if changes.get("client_id"):
        get_client_owned_by(db, owner_id, changes["client_id"])

    for field, value in changes.items():
        if value is None and field in {"client_id", "date", "distance", "rate_per_km"}:
            continue
        setattr(mileage, field, value)

    mileage.amount = compute_mileage_amount(mileage.distance, mileage.rate_per_km)

    db.commit()
    db.refresh(mileage)

    return mileage


def delete_mileage(db: Session, owner_id: str, mileage_id: str) -> None:
    mileage = get_mileage(db, owner_id, mileage_id)

    if mileage.is_invoiced:
        raise ImmutableError("Cannot delete a mileage entry that is already invoiced")

    db.delete(mileage)
    db.commit()
