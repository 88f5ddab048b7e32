"""Authoritative order pricing.

Totals are always rebuilt from catalog prices. Whatever the client sent as a
price or total never reaches this module: callers hand over product ids and
quantities only.
"""

from dataclasses import dataclass, field
from typing import Callable, Iterable, List, Optional, Protocol, Sequence, Tuple

from storefront.core.errors import ValidationError, NotFoundError


class PricedProduct(Protocol):
    id: int
    name: str
    price_cents: int


@dataclass(frozen=True)
class DraftLine:
    product_id: int
    quantity: int


@dataclass(frozen=True)
class PricedLine:
    product_id: int
    quantity: int
    price_cents: int
    name: str

    @property
    def line_total_cents(self) -> int:
        return self.price_cents * self.quantity


@dataclass
class PricedOrder:
    lines: List[PricedLine]
    subtotal_cents: int
    total_cents: int
    coupon: dict = field(default_factory=dict)

    @property
    def is_coupon_used(self) -> bool:
        return bool(self.coupon)


ProductLookup = Callable[[Sequence[int]], Iterable[PricedProduct]]
# (draft_total_cents, coupon_code) -> (adjusted_total_cents, coupon snapshot)
CouponApplier = Callable[[int, str], Tuple[int, dict]]


def discounted_total(total_cents: int, discount_percent: int) -> int:
    """Take ``discount_percent`` off ``total_cents``, rounding the discount half up."""
    discount = (total_cents * discount_percent + 50) // 100
    return max(0, total_cents - discount)


def price_order(
    lines: Sequence[DraftLine],
    find_products_by_ids: ProductLookup,
    coupon_code: Optional[str] = None,
    apply_coupon: Optional[CouponApplier] = None,
) -> PricedOrder:
    """Price ``lines`` against the catalog.

    Products are fetched in one batch. Lines are then walked in input order;
    the first unknown product raises :class:`NotFoundError` and nothing is
    returned, so a caller can never build a partial order.
    """
    if not lines:
        raise ValidationError('Order must contain at least one item')
    for line in lines:
        if line.quantity < 1:
            raise ValidationError('Quantity must be at least 1')

    ids = list(dict.fromkeys(line.product_id for line in lines))
    products = {p.id: p for p in find_products_by_ids(ids)}

    priced: List[PricedLine] = []
    subtotal = 0
    for line in lines:
        product = products.get(line.product_id)
        if product is None:
            raise NotFoundError(f'Product {line.product_id} not found')
        pl = PricedLine(
            product_id=product.id,
            quantity=line.quantity,
            price_cents=product.price_cents,
            name=product.name,
        )
        subtotal += pl.line_total_cents
        priced.append(pl)

    total = subtotal
    snapshot: dict = {}
    if coupon_code:
        if apply_coupon is None:
            raise ValidationError('Coupons are not accepted for this order')
        total, snapshot = apply_coupon(subtotal, coupon_code)

    return PricedOrder(lines=priced, subtotal_cents=subtotal, total_cents=total, coupon=snapshot)
