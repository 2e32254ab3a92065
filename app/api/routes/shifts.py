from datetime import datetime

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from app.core.datetime_utils import to_utc_naive
from app.core.dependencies import get_current_user, get_db
from app.schemas.common import Page, PageMeta, PageOptions
from app.schemas.shift import ShiftCreate, ShiftResponse, ShiftUpdate
from app.services import shift_service
from app.services.audit_service import log_action


router = APIRouter(prefix="/shifts", tags=["Shifts"])


@router.post("", response_model=ShiftResponse, status_code=status.HTTP_201_CREATED)
def create_shift(
    payload: ShiftCreate,
    db: Session = Depends(get_db),
    user=Depends(get_current_user),
):
    shift = shift_service.create_shift(db, user.id, payload)

    log_action(
        db=db,
        user_id=user.id,
        action="CREATE_SHIFT",
        entity_type="Shift",
        entity_id=shift.id,
        details=f"{shift.total_hours:.2f}h for client {shift.client_id}"
    )

    return shift_service.get_shift(db, user.id, shift.id)


@router.get("", response_model=Page[ShiftResponse])
def list_shifts(
    options: PageOptions = Depends(),
    client_id: str | None = Query(None),
    start_date: datetime | None = Query(None),
    end_date: datetime | None = Query(None),
    is_invoiced: bool | None = Query(None),
    db: Session = Depends(get_db),
    user=Depends(get_current_user),
):
    shifts, item_count = shift_service.list_shifts(
        db,
        user.id,
        options,
        client_id=client_id,
        start_date=to_utc_naive(start_date) if start_date else None,
        end_date=to_utc_naive(end_date) if end_date else None,
        is_invoiced=is_invoiced,
    )
    return {"data": shifts, "meta": PageMeta.build(options, item_count)}


@router.get("/{shift_id}", response_model=ShiftResponse)
def get_shift(
    shift_id: str,
    db: Session = Depends(get_db),
    user=Depends(get_current_user),
):
    return shift_service.get_shift(db, user.id, shift_id)


@router.patch("/{shift_id}", response_model=ShiftResponse)
def update_shift(
    shift_id: str,
    payload: ShiftUpdate,
    db: Session = Depends(get_db),
    user=Depends(get_current_user),
):
    shift = shift_service.update_shift(db, user.id, shift_id, payload)

    log_action(
        db=db,
        user_id=user.id,
        action="UPDATE_SHIFT",
        entity_type="Shift",
        entity_id=shift.id,
    )

    return shift_service.get_shift(db, user.id, shift_id)


@router.delete("/{shift_id}")
def delete_shift(
    shift_id: str,
    db: Session = Depends(get_db),
    user=Depends(get_current_user),
):
    shift_service.delete_shift(db, user.id, shift_id)

    log_action(
        db=db,
        user_id=user.id,
        action="DELETE_SHIFT",
        entity_type="Shift",
        entity_id=shift_id,
    )

    return {"message": "Shift deleted successfully"}
