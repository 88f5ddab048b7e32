"""Session-scoped cart state.

A cart maps product identifiers to quantities. The item count shown next to
the cart icon is always derived from that mapping by :func:`cart_total`; it
is never stored or assigned on its own, so the two cannot drift apart.

Each session owns one :class:`CartState` and passes it to whatever needs it.
Nothing here does I/O; :mod:`storefront.store.cart_store` persists a snapshot
when the cart is mirrored server-side.
"""

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Dict, Mapping

from storefront.core.errors import ValidationError


def cart_total(items: Mapping[str, int]) -> int:
    """Number of units in ``items`` (sum of all quantities)."""
    return sum(items.values())


def _check_product_id(product_id: str) -> str:
    if not isinstance(product_id, str) or not product_id.strip():
        raise ValidationError('Product ID is required')
    return product_id


@dataclass
class CartState:
    _items: Dict[str, int] = field(default_factory=dict)

    @classmethod
    def from_items(cls, items: Mapping[str, int]) -> "CartState":
        """Build a cart from stored quantities, dropping anything below 1."""
        return cls({_check_product_id(str(pid)): int(qty) for pid, qty in items.items() if int(qty) >= 1})

    @property
    def items(self) -> Mapping[str, int]:
        return MappingProxyType(self._items)

    @property
    def total(self) -> int:
        return cart_total(self._items)

    def quantity(self, product_id: str) -> int:
        return self._items.get(product_id, 0)

    def add_to_cart(self, product_id: str) -> None:
        product_id = _check_product_id(product_id)
        self._items[product_id] = self._items.get(product_id, 0) + 1

    def remove_from_cart(self, product_id: str) -> None:
        qty = self._items.get(product_id)
        if qty is None:
            return
        if qty <= 1:
            del self._items[product_id]
        else:
            self._items[product_id] = qty - 1

    def delete_item_from_cart(self, product_id: str) -> None:
        self._items.pop(product_id, None)

    def clear_cart(self) -> None:
        self._items.clear()

    def to_dict(self) -> dict:
        return {'items': dict(self._items), 'total': self.total}
