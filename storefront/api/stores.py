from fastapi import APIRouter, Depends
from typing import Optional
from urllib.parse import quote
from sqlalchemy import select, func, or_
from sqlalchemy.orm import Session

from storefront.api.deps import get_db, get_current_user
from storefront.core.errors import NotFoundError, ConflictError, AuthorizationError
from storefront.db.models import Store, StoreStatus, User
from storefront.schemas import Envelope, PageEnvelope, StoreCreate, StoreUpdate, StoreRead
from storefront.security.utils import now_utc
from storefront.utils.pagination import Page, page_params, sort_clause
from storefront.utils.responses import success, paginated

router = APIRouter()

@router.get('/', response_model=PageEnvelope[StoreRead])
def list_stores(db: Session = Depends(get_db), page: Page = Depends(page_params),
                search: Optional[str] = None, sort_by: Optional[str] = None, order: Optional[str] = None):
    where = [Store.is_active.is_(True), Store.status == StoreStatus.APPROVED]
    if search:
        like = f"%{search}%"
        where.append(or_(Store.name.ilike(like), Store.username.ilike(like), Store.description.ilike(like)))
    total = db.execute(select(func.count()).select_from(Store).where(*where)).scalar_one()
    stmt = (select(Store).where(*where)
            .order_by(sort_clause(Store, sort_by, order, ['name', 'created_at', 'username']))
            .offset(page.offset).limit(page.limit))
    return paginated(db.execute(stmt).scalars().all(), page, total, 'Stores retrieved successfully')

@router.get('/my/store', response_model=Envelope[StoreRead])
def get_my_store(user: User = Depends(get_current_user)):
    if not user.store: raise NotFoundError('You do not have a store yet')
    return success(user.store, 'Store retrieved successfully')

@router.get('/username/{username}', response_model=Envelope[StoreRead])
def get_store_by_username(username: str, db: Session = Depends(get_db)):
    store = db.query(Store).filter(Store.username == username).first()
    if not store: raise NotFoundError('Store not found')
    return success(store, 'Store retrieved successfully')

@router.get('/{store_id}', response_model=Envelope[StoreRead])
def get_store(store_id: int, db: Session = Depends(get_db)):
    store = db.get(Store, store_id)
    if not store: raise NotFoundError('Store not found')
    if not store.is_active or store.status != StoreStatus.APPROVED:
        raise AuthorizationError('This store is not available')
    return success(store, 'Store retrieved successfully')

@router.post('/', response_model=Envelope[StoreRead], status_code=201)
def create_store(payload: StoreCreate, user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    if db.query(Store).filter(Store.user_id == user.id).first():
        raise ConflictError('You already have a store')
    if db.query(Store).filter(Store.username == payload.username).first():
        raise ConflictError('This username is already taken')
    data = payload.model_dump()
    data['email'] = str(payload.email)
    data['logo'] = payload.logo or f"https://ui-avatars.com/api/?name={quote(payload.name)}&background=10b981&color=fff&size=400"
    store = Store(user_id=user.id, status=StoreStatus.PENDING, is_active=False, **data)
    db.add(store); db.commit(); db.refresh(store)
    return success(store, 'Store created successfully! Waiting for admin approval.')

@router.patch('/{store_id}', response_model=Envelope[StoreRead])
def update_store(store_id: int, payload: StoreUpdate, user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    store = db.get(Store, store_id)
    if not store: raise NotFoundError('Store not found')
    if store.user_id != user.id:
        raise AuthorizationError('You do not have permission to update this store')
    for k, v in payload.model_dump(exclude_unset=True, exclude_none=True).items(): setattr(store, k, str(v) if k == 'email' else v)
    store.updated_at = now_utc()
    db.add(store); db.commit(); db.refresh(store)
    return success(store, 'Store updated successfully')
