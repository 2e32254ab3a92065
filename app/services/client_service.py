from sqlalchemy.orm import Session, selectinload

from app.core.exceptions import ImmutableError, NotFoundError
from app.models.client import Client
from app.models.invoice import Invoice
from app.models.mileage import Mileage
from app.models.shift import Shift
from app.schemas.client import ClientCreate, ClientUpdate
from app.schemas.common import PageOptions, SortOrder
from app.services.invoice_ledger import ClaimLedger
from app.services.invoice_status_service import can_delete


def get_client_owned_by(db: Session, owner_id: str, client_id: str) -> Client:
    client = (
        db.query(Client)
        .filter(Client.id == client_id, Client.user_id == owner_id)
        .first()
    )

    if not client:
        raise NotFoundError(f'Client with ID "{client_id}" not found')

    return client


def list_clients(db: Session, owner_id: str, options: PageOptions):
    order_column = Client.name.asc() if options.order == SortOrder.ASC else Client.name.desc()

    query = db.query(Client).filter(Client.user_id == owner_id)
    item_count = query.count()
    clients = query.order_by(order_column).offset(options.skip).limit(options.take).all()

    return clients, item_count


def create_client(db: Session, owner_id: str, payload: ClientCreate) -> Client:
    client = Client(user_id=owner_id, **payload.model_dump())

    db.add(client)
    db.commit()
    db.refresh(client)

    return client


def update_client(db: Session, owner_id: str, client_id: str, payload: ClientUpdate) -> Client:
    client = get_client_owned_by(db, owner_id, client_id)

    for field, value in payload.model_dump(exclude_unset=True).items():
        setattr(client, field, value)

    db.commit()
    db.refresh(client)

    return client


def _has_claimed_records(db: Session, client_id: str) -> bool:
    for model in (Shift, Mileage):
        claimed = (
            db.query(model.id)
            .filter(model.client_id == client_id, model.is_invoiced.is_(True))
            .first()
        )
        if claimed:
            return True

    return False


def delete_client(db: Session, owner_id: str, client_id: str) -> None:
    """Delete a client together with its records and draft invoices.

    Refused while the client has a sent or paid invoice, or while one of its
    shifts or mileage entries sits on another client's invoice.
    """
    client = get_client_owned_by(db, owner_id, client_id)

    invoices = (
        db.query(Invoice)
        .options(selectinload(Invoice.shifts), selectinload(Invoice.mileages))
        .filter(Invoice.client_id == client.id)
        .all()
    )

    if any(not can_delete(invoice.status) for invoice in invoices):
        raise ImmutableError("Cannot delete a client with sent or paid invoices")

    ledger = ClaimLedger(db, owner_id)

    try:
        for invoice in invoices:
            ledger.release_shifts([shift.id for shift in invoice.shifts])
            ledger.release_mileages([mileage.id for mileage in invoice.mileages])

        if _has_claimed_records(db, client.id):
            raise ImmutableError(
                "Cannot delete a client whose shifts or mileage entries are on another invoice"
            )

        db.delete(client)
        db.commit()

    except Exception:
        db.rollback()
        raise
