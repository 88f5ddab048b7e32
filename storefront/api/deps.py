from fastapi import Depends, Header
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session
from typing import Optional
from storefront.core.config import settings
from storefront.core.errors import AuthenticationError, AuthorizationError
from storefront.db.session import SessionLocal
from storefront.db.models import User, Store, StoreStatus
from storefront.security.utils import decode_token

security = HTTPBearer(auto_error=False)

def get_db():
    db = SessionLocal()
    try: yield db
    finally: db.close()

def get_current_user(creds: HTTPAuthorizationCredentials = Depends(security), db: Session = Depends(get_db)) -> User:
    if not creds: raise AuthenticationError('You are not logged in. Please log in to access this route.')
    payload = decode_token(creds.credentials, "access")
    user = db.get(User, int(payload.get('sub', 0)))
    if not user: raise AuthenticationError('The user belonging to this token no longer exists.')
    return user

def require_role(required: str):
    def _checker(user: User = Depends(get_current_user)):
        if user.role != required:
            raise AuthorizationError('You do not have permission to perform this action')
        return user
    return _checker

require_admin = require_role('admin')

def require_active_store(user: User = Depends(get_current_user)) -> Store:
    store = user.store
    if not store:
        raise AuthorizationError('You need to create a store to access this resource')
    if not store.is_active or store.status != StoreStatus.APPROVED:
        raise AuthorizationError('Your store is not active yet. Please wait for admin approval.')
    return store

def require_internal_key(x_internal_key: Optional[str] = Header(default=None, alias="X-Internal-Key")):
    if not x_internal_key or x_internal_key != settings.SVC_INTERNAL_KEY:
        raise AuthenticationError('Unauthorized')
    return True
