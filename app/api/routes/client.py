from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from app.core.dependencies import get_current_user, get_db
from app.schemas.client import ClientCreate, ClientResponse, ClientUpdate
from app.schemas.common import Page, PageMeta, PageOptions
from app.services import client_service
from app.services.audit_service import log_action


router = APIRouter(prefix="/clients", tags=["Clients"])


@router.post("", response_model=ClientResponse, status_code=status.HTTP_201_CREATED)
def create_client(
    payload: ClientCreate,
    db: Session = Depends(get_db),
    user=Depends(get_current_user),
):
    client = client_service.create_client(db, user.id, payload)

    log_action(
        db=db,
        user_id=user.id,
        action="CREATE_CLIENT",
        entity_type="Client",
        entity_id=client.id,
        details=f"Client {client.name} created"
    )

    return client


@router.get("", response_model=Page[ClientResponse])
def list_clients(
    options: PageOptions = Depends(),
    db: Session = Depends(get_db),
    user=Depends(get_current_user),
):
    clients, item_count = client_service.list_clients(db, user.id, options)
    return {"data": clients, "meta": PageMeta.build(options, item_count)}


@router.get("/{client_id}", response_model=ClientResponse)
def get_client(
    client_id: str,
    db: Session = Depends(get_db),
    user=Depends(get_current_user),
):
    return client_service.get_client_owned_by(db, user.id, client_id)


@router.patch("/{client_id}", response_model=ClientResponse)
def update_client(
    client_id: str,
    payload: ClientUpdate,
    db: Session = Depends(get_db),
    user=Depends(get_current_user),
):
    client = client_service.update_client(db, user.id, client_id, payload)

    log_action(
        db=db,
        user_id=user.id,
        action="UPDATE_CLIENT",
        entity_type="Client",
        entity_id=client.id,
    )

    return client


@router.delete("/{client_id}")
def delete_client(
    client_id: str,
    db: Session = Depends(get_db),
    user=Depends(get_current_user),
):
    client_service.delete_client(db, user.id, client_id)

    log_action(
        db=db,
        user_id=user.id,
        action="DELETE_CLIENT",
        entity_type="Client",
        entity_id=client_id,
    )

    return {"message": "Client deleted successfully"}
