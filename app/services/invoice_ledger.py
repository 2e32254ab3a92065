"""Exclusive claim tracking for shifts and mileage entries.

A record is claimed while exactly one invoice holds it. Claiming is a single
conditional UPDATE guarded by ``is_invoiced = false``; the affected row count
must match the number of requested ids, otherwise the caller's transaction
is expected to roll back.
"""
import logging
from typing import Iterable, Sequence

from sqlalchemy import update
from sqlalchemy.orm import Session

from app.core.exceptions import InvalidSelectionError
from app.models.mileage import Mileage
from app.models.shift import Shift


logger = logging.getLogger(__name__)


def unique_ids(ids: Iterable[str] | None) -> list[str]:
    """Drop duplicates while keeping request order."""
    return list(dict.fromkeys(ids or []))


def try_claim(
    db: Session,
    model,
    ids: Iterable[str],
    owner_id: str,
    detail: str = "Some records were not found, don't belong to you, or are already invoiced",
) -> list:
    requested = unique_ids(ids)
    if not requested:
        return []

    result = db.execute(
        update(model)
        .where(
            model.id.in_(requested),
            model.user_id == owner_id,
            model.is_invoiced.is_(False),
        )
        .values(is_invoiced=True)
    )

    if result.rowcount != len(requested):
        logger.info(
            "Claim rejected for %s: %s of %s ids available (owner %s)",
            model.__tablename__,
            result.rowcount,
            len(requested),
            owner_id,
        )
        raise InvalidSelectionError(detail)

    return db.query(model).filter(model.id.in_(requested)).all()


def release(db: Session, model, ids: Iterable[str]) -> None:
    ids = unique_ids(ids)
    if not ids:
        return

    db.execute(
        update(model)
        .where(model.id.in_(ids))
        .values(is_invoiced=False)
    )


class ClaimLedger:
    """Claim/release operations for one owner's shifts and mileage entries."""

    def __init__(self, db: Session, owner_id: str):
        self.db = db
        self.owner_id = owner_id

    def claim_shifts(self, ids: Sequence[str]) -> list[Shift]:
        return try_claim(
            self.db,
            Shift,
            ids,
            self.owner_id,
            detail="Some shifts were not found, don't belong to you, or are already invoiced",
        )

    def claim_mileages(self, ids: Sequence[str]) -> list[Mileage]:
        return try_claim(
            self.db,
            Mileage,
            ids,
            self.owner_id,
            detail=(
                "Some mileage entries were not found, don't belong to you, "
                "or are already invoiced"
            ),
        )

    def release_shifts(self, ids: Sequence[str]) -> None:
        release(self.db, Shift, ids)

    def release_mileages(self, ids: Sequence[str]) -> None:
        release(self.db, Mileage, ids)
