import logging
from typing import Sequence
from sqlalchemy import select
from sqlalchemy.orm import Session

from storefront.core.errors import ValidationError, NotFoundError, AuthorizationError
from storefront.db.models import Order, OrderItem, OrderStatus, PaymentMethod, Product, Store, StoreStatus, Address, User
from storefront.kafka import producer
from storefront.security.utils import now_utc
from storefront.services.coupons import coupon_applier
from storefront.services.pricing import DraftLine, price_order

logger = logging.getLogger(__name__)

# status -> statuses a store owner may move it to
TRANSITIONS = {
    OrderStatus.PENDING: {OrderStatus.PROCESSING, OrderStatus.CANCELLED},
    OrderStatus.PROCESSING: {OrderStatus.SHIPPED, OrderStatus.CANCELLED},
    OrderStatus.SHIPPED: {OrderStatus.DELIVERED},
    OrderStatus.DELIVERED: set(),
    OrderStatus.CANCELLED: set(),
}


def store_products_lookup(db: Session, store_id: int):
    """Catalog lookup restricted to one store; other stores' products count as missing."""
    def _find(ids: Sequence[int]):
        stmt = select(Product).where(Product.id.in_(ids), Product.store_id == store_id)
        return db.execute(stmt).scalars().all()
    return _find


def create_order(db: Session, user: User, draft) -> Order:
    """Price ``draft`` from the catalog and persist it in a single transaction.

    Nothing is written unless every line resolves; any error rolls the
    session back before propagating.
    """
    try:
        store = db.get(Store, draft.store_id)
        if not store:
            raise NotFoundError('Store not found')
        if not store.is_active or store.status != StoreStatus.APPROVED:
            raise AuthorizationError('This store is not available')
        address = db.get(Address, draft.address_id)
        if not address or address.user_id != user.id:
            raise NotFoundError('Address not found')

        priced = price_order(
            [DraftLine(product_id=it.product_id, quantity=it.quantity) for it in draft.items],
            store_products_lookup(db, store.id),
            coupon_code=draft.coupon.code if draft.coupon else None,
            apply_coupon=coupon_applier(db),
        )

        order = Order(
            user_id=user.id,
            store_id=store.id,
            address_id=address.id,
            payment_method=PaymentMethod(draft.payment_method),
            total_cents=priced.total_cents,
            # COD is settled on delivery, STRIPE by the payment callback
            is_paid=False,
            status=OrderStatus.PENDING,
            is_coupon_used=priced.is_coupon_used,
            coupon=priced.coupon,
        )
        order.items = [
            OrderItem(product_id=pl.product_id, quantity=pl.quantity, price_cents=pl.price_cents, name_snapshot=pl.name)
            for pl in priced.lines
        ]
        db.add(order)
        db.commit()
    except Exception:
        db.rollback()
        raise
    db.refresh(order)
    logger.info("Order %s created for user %s at store %s: %s cents", order.id, user.id, store.id, order.total_cents)

    try:
        producer.publish_order_created(order)
    except Exception:
        # already committed; the buyer still gets their order
        logger.exception("Failed to publish order.created for order %s", order.id)
    return order


def get_order_for(db: Session, order_id: int, user: User) -> Order:
    order = db.get(Order, order_id)
    if not order:
        raise NotFoundError('Order not found')
    store_id = user.store.id if user.store else None
    if order.user_id != user.id and order.store_id != store_id:
        raise AuthorizationError('You do not have permission to view this order')
    return order


def update_status(db: Session, order_id: int, store: Store, status: OrderStatus) -> Order:
    order = db.get(Order, order_id)
    if not order:
        raise NotFoundError('Order not found')
    if order.store_id != store.id:
        raise AuthorizationError('You do not have permission to update this order')
    current = OrderStatus(order.status)
    if status not in TRANSITIONS[current]:
        raise ValidationError(f'Cannot change order status from {current.value} to {status.value}')
    order.status = status
    if status == OrderStatus.DELIVERED and order.payment_method == PaymentMethod.COD:
        order.is_paid = True
    order.updated_at = now_utc()
    db.add(order); db.commit(); db.refresh(order)
    logger.info("Order %s moved %s -> %s", order.id, current.value, status.value)
    return order


def mark_paid(db: Session, order_id: int, amount_cents: int | None = None) -> Order | None:
    """Record a confirmed payment. Returns None for unknown orders.

    Cancelled orders are left untouched. When the provider reports an amount
    it must match the stored total.
    """
    order = db.get(Order, order_id)
    if not order:
        return None
    if amount_cents is not None and amount_cents != order.total_cents:
        raise ValidationError(f'Payment amount {amount_cents} does not match order total {order.total_cents}')
    if order.is_paid:
        return order
    if order.status == OrderStatus.CANCELLED:
        logger.warning("Ignoring payment for cancelled order %s", order.id)
        return order
    order.is_paid = True
    if order.status == OrderStatus.PENDING:
        order.status = OrderStatus.PROCESSING
    order.updated_at = now_utc()
    db.add(order); db.commit(); db.refresh(order)
    logger.info("Order %s marked paid", order.id)
    return order
