from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.core.dependencies import get_current_user, get_db
from app.schemas.user import UserResponse, UserUpdate
from app.services.audit_service import log_action
from app.services.user_service import update_profile


router = APIRouter(prefix="/users", tags=["Users"])


@router.get("/profile", response_model=UserResponse)
def get_profile(user=Depends(get_current_user)):
    return user


@router.patch("/profile", response_model=UserResponse)
def patch_profile(
    payload: UserUpdate,
    db: Session = Depends(get_db),
    user=Depends(get_current_user),
):
    updated = update_profile(db, user.id, payload)

    log_action(
        db=db,
        user_id=user.id,
        action="UPDATE_PROFILE",
        entity_type="User",
        entity_id=user.id,
        details=", ".join(sorted(payload.model_dump(exclude_unset=True))) or None
    )

    return updated
