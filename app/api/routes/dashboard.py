from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.core.dependencies import get_current_user, get_db
from app.schemas.dashboard import DashboardFilter, DashboardSummary
from app.services.dashboard_service import get_dashboard_summary


router = APIRouter(prefix="/dashboard", tags=["Dashboard"])


@router.get("/summary", response_model=DashboardSummary)
def dashboard_summary(
    filters: DashboardFilter = Depends(),
    db: Session = Depends(get_db),
    user=Depends(get_current_user),
):
    return get_dashboard_summary(db, user.id, filters)
