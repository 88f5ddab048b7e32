from fastapi import APIRouter, Depends
from typing import Optional
from sqlalchemy import select, func
from sqlalchemy.orm import Session

from storefront.api.deps import get_db, get_current_user, require_active_store
from storefront.db.models import Order, OrderStatus, Store, User
from storefront.schemas import Envelope, PageEnvelope, OrderDraft, OrderRead, OrderStatusUpdate
from storefront.services import orders as order_service
from storefront.utils.pagination import Page, page_params, sort_clause
from storefront.utils.responses import success, paginated

router = APIRouter()

SORTABLE = ['created_at', 'total_cents', 'status']

def _list(db: Session, where: list, page: Page, sort_by: Optional[str], order: Optional[str]):
    total = db.execute(select(func.count()).select_from(Order).where(*where)).scalar_one()
    stmt = (select(Order).where(*where)
            .order_by(sort_clause(Order, sort_by, order, SORTABLE), Order.id.desc())
            .offset(page.offset).limit(page.limit))
    return db.execute(stmt).scalars().all(), total

@router.get('/', response_model=PageEnvelope[OrderRead])
def list_my_orders(user: User = Depends(get_current_user), db: Session = Depends(get_db), page: Page = Depends(page_params),
                   status: Optional[OrderStatus] = None, store_id: Optional[int] = None, is_paid: Optional[bool] = None,
                   sort_by: Optional[str] = None, order: Optional[str] = None):
    where = [Order.user_id == user.id]
    if status is not None: where.append(Order.status == status)
    if store_id is not None: where.append(Order.store_id == store_id)
    if is_paid is not None: where.append(Order.is_paid.is_(is_paid))
    rows, total = _list(db, where, page, sort_by, order)
    return paginated(rows, page, total, 'Orders retrieved successfully')

@router.get('/store', response_model=PageEnvelope[OrderRead])
def list_store_orders(store: Store = Depends(require_active_store), db: Session = Depends(get_db), page: Page = Depends(page_params),
                      status: Optional[OrderStatus] = None, is_paid: Optional[bool] = None,
                      sort_by: Optional[str] = None, order: Optional[str] = None):
    where = [Order.store_id == store.id]
    if status is not None: where.append(Order.status == status)
    if is_paid is not None: where.append(Order.is_paid.is_(is_paid))
    rows, total = _list(db, where, page, sort_by, order)
    return paginated(rows, page, total, 'Store orders retrieved successfully')

@router.get('/{order_id}', response_model=Envelope[OrderRead])
def get_order(order_id: int, user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    return success(order_service.get_order_for(db, order_id, user), 'Order retrieved successfully')

@router.post('/', response_model=Envelope[OrderRead], status_code=201)
def create_order(payload: OrderDraft, user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    return success(order_service.create_order(db, user, payload), 'Order created successfully')

@router.patch('/{order_id}/status', response_model=Envelope[OrderRead])
def update_order_status(order_id: int, payload: OrderStatusUpdate, store: Store = Depends(require_active_store), db: Session = Depends(get_db)):
    order = order_service.update_status(db, order_id, store, payload.status)
    return success(order, 'Order status updated successfully')
