import logging
from datetime import timezone
from typing import Tuple
from sqlalchemy.orm import Session

from storefront.core.errors import ValidationError, ConflictError
from storefront.db.models import Coupon
from storefront.security.utils import now_utc
from storefront.services.pricing import discounted_total

logger = logging.getLogger(__name__)


def normalize_code(code: str) -> str:
    return code.strip().upper()


def snapshot(coupon: Coupon) -> dict:
    return {
        'code': coupon.code,
        'description': coupon.description,
        'discount': coupon.discount,
        'expires_at': coupon.expires_at.isoformat(),
    }


def create_coupon(db: Session, code: str, description: str, discount: int, expires_at, is_public: bool = False) -> Coupon:
    code = normalize_code(code)
    if expires_at.tzinfo is not None:
        expires_at = expires_at.astimezone(timezone.utc).replace(tzinfo=None)
    if db.get(Coupon, code):
        raise ConflictError('Coupon code already exists')
    coupon = Coupon(code=code, description=description, discount=discount, expires_at=expires_at, is_public=is_public)
    db.add(coupon); db.commit(); db.refresh(coupon)
    logger.info("Coupon %s created (%s%% off)", coupon.code, coupon.discount)
    return coupon


def coupon_applier(db: Session):
    """Bind a coupon lookup to ``db`` for :func:`storefront.services.pricing.price_order`."""
    def _apply(total_cents: int, code: str) -> Tuple[int, dict]:
        coupon = db.get(Coupon, normalize_code(code))
        if not coupon:
            raise ValidationError('Coupon not found')
        if coupon.expires_at < now_utc():
            raise ValidationError('Coupon has expired')
        return discounted_total(total_cents, coupon.discount), snapshot(coupon)
    return _apply
