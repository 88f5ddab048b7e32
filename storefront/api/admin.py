from fastapi import APIRouter, Depends
from typing import List
from sqlalchemy.orm import Session
import logging

from storefront.api.deps import get_db, require_admin
from storefront.core.errors import NotFoundError
from storefront.db.models import Coupon, Store, StoreStatus
from storefront.schemas import Envelope, StoreRead, StoreStatusUpdate, CouponCreate, CouponRead
from storefront.security.utils import now_utc
from storefront.services import coupons as coupon_service
from storefront.utils.responses import success

logger = logging.getLogger(__name__)

router = APIRouter(dependencies=[Depends(require_admin)])

@router.patch('/stores/{store_id}/status', response_model=Envelope[StoreRead])
def set_store_status(store_id: int, payload: StoreStatusUpdate, db: Session = Depends(get_db)):
    store = db.get(Store, store_id)
    if not store: raise NotFoundError('Store not found')
    store.status = StoreStatus(payload.status)
    store.is_active = store.status == StoreStatus.APPROVED
    store.updated_at = now_utc()
    db.add(store); db.commit(); db.refresh(store)
    logger.info("Store %s set to %s", store.id, store.status.value)
    return success(store, f'Store {payload.status}')

@router.get('/coupons', response_model=Envelope[List[CouponRead]])
def list_coupons(db: Session = Depends(get_db)):
    return success(db.query(Coupon).order_by(Coupon.created_at.desc()).all(), 'Coupons retrieved successfully')

@router.post('/coupons', response_model=Envelope[CouponRead], status_code=201)
def create_coupon(payload: CouponCreate, db: Session = Depends(get_db)):
    coupon = coupon_service.create_coupon(db, payload.code, payload.description, payload.discount, payload.expires_at, payload.is_public)
    return success(coupon, 'Coupon created successfully')
