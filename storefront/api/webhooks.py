from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from storefront.api.deps import get_db, require_internal_key
from storefront.core.errors import NotFoundError
from storefront.schemas import PaymentEvent
from storefront.services.orders import mark_paid

router = APIRouter()

@router.post("/payments")
def payment_webhook(ev: PaymentEvent, db: Session = Depends(get_db), _=Depends(require_internal_key)):
    if ev.type != "payment.succeeded":
        return {"received": True}
    if mark_paid(db, ev.order_id, ev.amount_cents) is None:
        raise NotFoundError("Order not found")
    return {"received": True}
