from fastapi import APIRouter, Depends
from redis import Redis
from sqlalchemy.orm import Session

from storefront.api.deps import get_db, get_current_user
from storefront.core.errors import NotFoundError
from storefront.db.models import Product, User
from storefront.schemas import CartRead
from storefront.store import cart_store

router = APIRouter()

def get_redis() -> Redis:
    return cart_store.get_client()

@router.get("/", response_model=CartRead)
def get_my_cart(user: User = Depends(get_current_user), r: Redis = Depends(get_redis)):
    return cart_store.load_cart(r, user.id).to_dict()

@router.post("/items/{product_id}", response_model=CartRead)
def add_item(product_id: int, user: User = Depends(get_current_user), r: Redis = Depends(get_redis), db: Session = Depends(get_db)):
    if not db.get(Product, product_id):
        raise NotFoundError("Product not found")
    cart = cart_store.load_cart(r, user.id)
    cart.add_to_cart(str(product_id))
    cart_store.save_cart(r, user.id, cart)
    return cart.to_dict()

@router.post("/items/{product_id}/decrement", response_model=CartRead)
def decrement_item(product_id: int, user: User = Depends(get_current_user), r: Redis = Depends(get_redis)):
    cart = cart_store.load_cart(r, user.id)
    cart.remove_from_cart(str(product_id))
    cart_store.save_cart(r, user.id, cart)
    return cart.to_dict()

@router.delete("/items/{product_id}", response_model=CartRead)
def remove_item(product_id: int, user: User = Depends(get_current_user), r: Redis = Depends(get_redis)):
    cart = cart_store.load_cart(r, user.id)
    cart.delete_item_from_cart(str(product_id))
    cart_store.save_cart(r, user.id, cart)
    return cart.to_dict()

@router.post("/clear", response_model=CartRead)
def clear(user: User = Depends(get_current_user), r: Redis = Depends(get_redis)):
    cart_store.clear_cart(r, user.id)
    return cart_store.load_cart(r, user.id).to_dict()
