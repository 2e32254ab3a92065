from sqlalchemy import func
from sqlalchemy.orm import Session

from app.core.exceptions import NotFoundError
from app.models.user import User
from app.schemas.user import UserUpdate


def get_user(db: Session, user_id: str) -> User:
    user = db.query(User).filter(User.id == user_id).first()

    if not user:
        raise NotFoundError(f'User with ID "{user_id}" not found')

    return user


def get_user_by_email(db: Session, email: str) -> User | None:
    email = (email or "").strip().lower()
    return db.query(User).filter(func.lower(User.email) == email).first()


def update_profile(db: Session, user_id: str, payload: UserUpdate) -> User:
    user = get_user(db, user_id)
    changes = payload.model_dump(exclude_unset=True)

    if "email" in changes and changes["email"]:
        changes["email"] = changes["email"].strip().lower()

    for field, value in changes.items():
        setattr(user, field, value)

    db.commit()
    db.refresh(user)

    return user
