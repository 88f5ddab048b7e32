import logging
from redis import Redis
from storefront.core.config import settings
from storefront.store.cart_state import CartState

logger = logging.getLogger(__name__)

def get_client() -> Redis:
    return Redis.from_url(settings.REDIS_URL, decode_responses=True)

def cart_key(user_id: int) -> str:
    return f"cart:{user_id}"

def load_cart(r: Redis, user_id: int) -> CartState:
    items = {}
    for pid, qty in r.hgetall(cart_key(user_id)).items():  # {product_id: qty}
        try:
            items[pid] = int(qty)
        except (TypeError, ValueError):
            logger.warning("Skipping unreadable cart entry %s=%r for user %s", pid, qty, user_id)
    return CartState.from_items(items)

def save_cart(r: Redis, user_id: int, cart: CartState):
    key = cart_key(user_id)
    # replace the whole hash in one MULTI/EXEC
    with r.pipeline() as pipe:
        pipe.delete(key)
        if cart.items:
            pipe.hset(key, mapping={pid: str(qty) for pid, qty in cart.items.items()})
        pipe.execute()

def clear_cart(r: Redis, user_id: int):
    r.delete(cart_key(user_id))
