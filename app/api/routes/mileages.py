from datetime import datetime

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from app.core.datetime_utils import to_utc_naive
from app.core.dependencies import get_current_user, get_db
from app.schemas.common import Page, PageMeta, PageOptions
from app.schemas.mileage import MileageCreate, MileageResponse, MileageUpdate
from app.services import mileage_service
from app.services.audit_service import log_action


router = APIRouter(prefix="/mileages", tags=["Mileages"])


@router.post("", response_model=MileageResponse, status_code=status.HTTP_201_CREATED)
def create_mileage(
    payload: MileageCreate,
    db: Session = Depends(get_db),
    user=Depends(get_current_user),
):
    mileage = mileage_service.create_mileage(db, user.id, payload)

    log_action(
        db=db,
        user_id=user.id,
        action="CREATE_MILEAGE",
        entity_type="Mileage",
        entity_id=mileage.id,
        details=f"{mileage.distance} km for client {mileage.client_id}"
    )

    return mileage_service.get_mileage(db, user.id, mileage.id)


@router.get("", response_model=Page[MileageResponse])
def list_mileages(
    options: PageOptions = Depends(),
    client_id: str | None = Query(None),
    start_date: datetime | None = Query(None),
    end_date: datetime | None = Query(None),
    is_invoiced: bool | None = Query(None),
    db: Session = Depends(get_db),
    user=Depends(get_current_user),
):
    mileages, item_count = mileage_service.list_mileages(
        db,
        user.id,
        options,
        client_id=client_id,
        start_date=to_utc_naive(start_date) if start_date else None,
        end_date=to_utc_naive(end_date) if end_date else None,
        is_invoiced=is_invoiced,
    )
    return {"data": mileages, "meta": PageMeta.build(options, item_count)}


@router.get("/{mileage_id}", response_model=MileageResponse)
def get_mileage(
    mileage_id: str,
    db: Session = Depends(get_db),
    user=Depends(get_current_user),
):
    return mileage_service.get_mileage(db, user.id, mileage_id)


@router.patch("/{mileage_id}", response_model=MileageResponse)
def update_mileage(
    mileage_id: str,
    payload: MileageUpdate,
    db: Session = Depends(get_db),
    user=Depends(get_current_user),
):
    mileage = mileage_service.update_mileage(db, user.id, mileage_id, payload)

    log_action(
        db=db,
        user_id=user.id,
        action="UPDATE_MILEAGE",
        entity_type="Mileage",
        entity_id=mileage.id,
    )

    return mileage_service.get_mileage(db, user.id, mileage_id)


@router.delete("/{mileage_id}")
def delete_mileage(
    mileage_id: str,
    db: Session = Depends(get_db),
    user=Depends(get_current_user),
):
    mileage_service.delete_mileage(db, user.id, mileage_id)

    log_action(
        db=db,
        user_id=user.id,
        action="DELETE_MILEAGE",
        entity_type="Mileage",
        entity_id=mileage_id,
    )

    return {"message": "Mileage entry deleted successfully"}
