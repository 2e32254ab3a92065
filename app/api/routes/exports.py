from fastapi import APIRouter, BackgroundTasks, Depends
from fastapi.responses import FileResponse
from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.dependencies import get_current_user, get_db
from app.schemas.export import ExportRequest
from app.services.audit_service import log_action
from app.services.export_service import export_data, remove_export


router = APIRouter(prefix="/exports", tags=["Exports"])


@router.post("")
def create_export(
    payload: ExportRequest,
    background_tasks: BackgroundTasks,
    db: Session = Depends(get_db),
    user=Depends(get_current_user),
):
    path, filename = export_data(db, user.id, payload, settings.EXPORTS_DIR)

    log_action(
        db=db,
        user_id=user.id,
        action="EXPORT_DATA",
        entity_type="Export",
        details=f"{payload.data_type.value} as {payload.export_type.value}"
    )

    # Files are served once, then removed
    background_tasks.add_task(remove_export, path)

    return FileResponse(path, filename=filename)
