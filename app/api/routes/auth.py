from datetime import datetime

from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.security import OAuth2PasswordRequestForm
from jose import JWTError
from sqlalchemy.orm import Session

from app.core.dependencies import get_db
from app.core.security import (
    create_access_token,
    create_refresh_token,
    decode_token,
    hash_password,
    verify_password,
)
from app.models.refresh_token import RefreshToken
from app.models.user import User
from app.schemas.user import AuthResponse, RefreshTokenRequest, UserCreate
from app.services.audit_service import log_auth_event
from app.services.user_service import get_user_by_email


router = APIRouter(prefix="/auth", tags=["Auth"])


def _issue_tokens(db: Session, user: User) -> dict:
    access_token = create_access_token(data={"sub": user.id, "email": user.email})
    refresh_token, expires_at = create_refresh_token(user.id)

    db.add(RefreshToken(user_id=user.id, token=refresh_token, expires_at=expires_at))
    db.commit()

    return {
        "access_token": access_token,
        "refresh_token": refresh_token,
        "token_type": "bearer",
        "user": user,
    }


def _active_refresh_token(db: Session, token: str) -> RefreshToken:
    try:
        payload = decode_token(token)
    except JWTError:
        raise HTTPException(status_code=401, detail="Invalid refresh token")

    if payload.get("type") != "refresh":
        raise HTTPException(status_code=401, detail="Invalid refresh token")

    stored = db.query(RefreshToken).filter(RefreshToken.token == token).first()

    if not stored or stored.is_revoked or stored.expires_at < datetime.utcnow():
        raise HTTPException(status_code=401, detail="Refresh token revoked or expired")

    return stored


@router.post("/register", response_model=AuthResponse, status_code=status.HTTP_201_CREATED)
def register(user: UserCreate, db: Session = Depends(get_db)):
    email = user.email.strip().lower()

    if get_user_by_email(db, email):
        raise HTTPException(status_code=409, detail="Email already registered")

    new_user = User(
        first_name=user.first_name.strip(),
        last_name=user.last_name.strip(),
        email=email,
        hashed_password=hash_password(user.password),
    )

    db.add(new_user)
    db.commit()
    db.refresh(new_user)

    log_auth_event(
        db=db,
        action="AUTH_REGISTER_SUCCESS",
        email=new_user.email,
        user_id=new_user.id,
    )

    return _issue_tokens(db, new_user)


@router.post("/login", response_model=AuthResponse)
def login(
    form_data: OAuth2PasswordRequestForm = Depends(),
    db: Session = Depends(get_db),
):
    email = (form_data.username or "").strip().lower()
    db_user = get_user_by_email(db, email)

    if not db_user or not verify_password(form_data.password, db_user.hashed_password):
        log_auth_event(
            db=db,
            action="AUTH_LOGIN_FAILED",
            email=email,
            details="Invalid credentials"
        )
        raise HTTPException(status_code=401, detail="Invalid credentials")

    log_auth_event(
        db=db,
        action="AUTH_LOGIN_SUCCESS",
        email=db_user.email,
        user_id=db_user.id,
    )

    return _issue_tokens(db, db_user)


@router.post("/refresh", response_model=AuthResponse)
def refresh(payload: RefreshTokenRequest, db: Session = Depends(get_db)):
    stored = _active_refresh_token(db, payload.refresh_token)
    user = stored.user

    # Rotation: the presented token is single use
    stored.is_revoked = True
    db.commit()

    log_auth_event(
        db=db,
        action="AUTH_TOKEN_REFRESHED",
        email=user.email,
        user_id=user.id,
    )

    return _issue_tokens(db, user)


@router.post("/logout")
def logout(payload: RefreshTokenRequest, db: Session = Depends(get_db)):
    stored = db.query(RefreshToken).filter(RefreshToken.token == payload.refresh_token).first()

    if stored and not stored.is_revoked:
        stored.is_revoked = True
        db.commit()

        log_auth_event(
            db=db,
            action="AUTH_LOGOUT",
            email=stored.user.email,
            user_id=stored.user_id,
        )

    return {"message": "Logged out successfully"}
