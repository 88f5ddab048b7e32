import random

import pytest

from storefront.core.errors import ValidationError
from storefront.store.cart_state import CartState, cart_total


def test_add_twice_and_another_product():
    cart = CartState()
    cart.add_to_cart("p1")
    cart.add_to_cart("p1")
    cart.add_to_cart("p2")
    assert dict(cart.items) == {"p1": 2, "p2": 1}
    assert cart.total == 3


def test_remove_last_unit_drops_the_key():
    cart = CartState()
    cart.add_to_cart("p1")
    cart.remove_from_cart("p1")
    assert "p1" not in cart.items
    assert cart.total == 0


def test_remove_decrements_by_one():
    cart = CartState.from_items({"p1": 3})
    cart.remove_from_cart("p1")
    assert cart.quantity("p1") == 2


def test_remove_and_delete_are_noops_for_absent_products():
    cart = CartState.from_items({"p1": 1})
    cart.remove_from_cart("nope")
    cart.delete_item_from_cart("nope")
    assert dict(cart.items) == {"p1": 1}


def test_delete_then_add_starts_from_one():
    cart = CartState.from_items({"p1": 5})
    cart.delete_item_from_cart("p1")
    cart.add_to_cart("p1")
    assert cart.quantity("p1") == 1


def test_clear_cart():
    cart = CartState.from_items({"p1": 2, "p2": 4})
    cart.clear_cart()
    assert dict(cart.items) == {}
    assert cart.total == 0


@pytest.mark.parametrize("bad", ["", "   "])
def test_add_requires_product_id(bad):
    with pytest.raises(ValidationError):
        CartState().add_to_cart(bad)


def test_items_view_is_read_only():
    cart = CartState.from_items({"p1": 1})
    with pytest.raises(TypeError):
        cart.items["p1"] = 10


def test_from_items_drops_non_positive_quantities():
    cart = CartState.from_items({"p1": 0, "p2": 2, "p3": -1})
    assert dict(cart.items) == {"p2": 2}


def test_total_matches_sum_for_random_sequences():
    rng = random.Random(1234)
    cart = CartState()
    for _ in range(500):
        pid = rng.choice(["a", "b", "c", "d"])
        op = rng.choice([cart.add_to_cart, cart.add_to_cart, cart.remove_from_cart, cart.delete_item_from_cart])
        op(pid)
        assert cart.total == sum(cart.items.values())
        assert all(q >= 1 for q in cart.items.values())


def test_cart_total_is_pure():
    snapshot = {"x": 2, "y": 3}
    assert cart_total(snapshot) == 5
    assert snapshot == {"x": 2, "y": 3}
    assert cart_total({}) == 0
