from typing import Any
from urllib.parse import quote

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from storefront.api.deps import get_db, get_current_user
from storefront.core.errors import AuthenticationError, ConflictError
from storefront.db.models import User, RefreshToken
from storefront.schemas import Envelope, RegisterPayload, LoginPayload, TokenPair, RefreshRequest, UserRead
from storefront.security.utils import (
    hash_password,
    verify_password,
    create_access_token,
    create_refresh_token,
    token_sha256,
    now_utc,
    decode_token,
)
from storefront.utils.responses import success

router = APIRouter()  # main.py mounts at /auth


def _issue_tokens(db: Session, user: User) -> TokenPair:
    access, _ = create_access_token(user.id, user.role)
    refresh, jti, exp = create_refresh_token(user.id)
    db.add(
        RefreshToken(
            user_id=user.id,
            jti=jti,
            token_hash=token_sha256(refresh),
            expires_at=exp,
            revoked=False,
            created_at=now_utc(),
        )
    )
    db.commit()
    return TokenPair(access_token=access, refresh_token=refresh)


@router.post("/register", response_model=Envelope[UserRead], status_code=status.HTTP_201_CREATED)
def register(payload: RegisterPayload, db: Session = Depends(get_db)) -> Any:
    if db.query(User).filter(User.email == str(payload.email)).first():
        raise ConflictError("User with this email already exists")

    user = User(
        name=payload.name,
        email=str(payload.email),
        password_hash=hash_password(payload.password),
        role="customer",
        image=payload.image or f"https://ui-avatars.com/api/?name={quote(payload.name)}&background=10b981&color=fff",
        created_at=now_utc(),
        updated_at=now_utc(),
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    return success(user, "User registered successfully")


@router.post("/login", response_model=TokenPair)
def login(payload: LoginPayload, db: Session = Depends(get_db)) -> TokenPair:
    user = db.query(User).filter(User.email == str(payload.email)).first()
    if not user or not verify_password(payload.password, user.password_hash):
        raise AuthenticationError("Invalid email or password")
    return _issue_tokens(db, user)


@router.post("/refresh", response_model=TokenPair)
def refresh_token(payload: RefreshRequest, db: Session = Depends(get_db)) -> TokenPair:
    claims = decode_token(payload.refresh_token, "refresh")

    rt = (
        db.query(RefreshToken)
        .filter(RefreshToken.jti == claims["jti"], RefreshToken.user_id == int(claims.get("sub", 0)))
        .first()
    )
    if not rt or rt.revoked or rt.expires_at < now_utc() or rt.token_hash != token_sha256(payload.refresh_token):
        raise AuthenticationError("Refresh token not valid")

    # single use: revoke before issuing the next pair
    rt.revoked = True
    db.add(rt)
    return _issue_tokens(db, rt.user)


@router.post("/logout")
def logout(payload: RefreshRequest, db: Session = Depends(get_db)) -> dict:
    claims = decode_token(payload.refresh_token, "refresh")
    rt = db.query(RefreshToken).filter(RefreshToken.jti == claims["jti"]).first()
    if rt and not rt.revoked:
        rt.revoked = True
        db.add(rt)
        db.commit()
    return success(None, "Logged out successfully")


@router.get("/me", response_model=Envelope[UserRead])
def me(user: User = Depends(get_current_user)):
    return success(user, "User retrieved successfully")
