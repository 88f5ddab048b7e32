from fastapi import APIRouter, Depends
from typing import List, Optional
from sqlalchemy import select, func, or_
from sqlalchemy.orm import Session

from storefront.api.deps import get_db, require_active_store
from storefront.core.errors import NotFoundError, AuthorizationError
from storefront.db.models import Product, Store
from storefront.schemas import Envelope, PageEnvelope, ProductCreate, ProductUpdate, ProductRead
from storefront.security.utils import now_utc
from storefront.utils.pagination import Page, page_params
from storefront.utils.responses import success, paginated

router = APIRouter()

@router.get('/', response_model=PageEnvelope[ProductRead])
def list_products(db: Session = Depends(get_db), page: Page = Depends(page_params),
                  category: Optional[str] = None, search: Optional[str] = None,
                  min_price: Optional[int] = None, max_price: Optional[int] = None,
                  store_id: Optional[int] = None, in_stock: Optional[bool] = None):
    where = []
    if category: where.append(Product.category == category)
    if store_id is not None: where.append(Product.store_id == store_id)
    if in_stock: where.append(Product.in_stock.is_(True))
    if search:
        like = f"%{search}%"
        where.append(or_(Product.name.ilike(like), Product.description.ilike(like)))
    if min_price is not None: where.append(Product.price_cents >= min_price)
    if max_price is not None: where.append(Product.price_cents <= max_price)
    total = db.execute(select(func.count()).select_from(Product).where(*where)).scalar_one()
    stmt = select(Product).where(*where).order_by(Product.created_at.desc(), Product.id.desc()).offset(page.offset).limit(page.limit)
    return paginated(db.execute(stmt).scalars().all(), page, total, 'Products retrieved successfully')

@router.get('/categories', response_model=Envelope[List[str]])
def list_categories(db: Session = Depends(get_db)):
    rows = db.execute(select(Product.category).distinct().order_by(Product.category)).scalars().all()
    return success(rows, 'Categories retrieved successfully')

@router.get('/{product_id}', response_model=Envelope[ProductRead])
def get_product(product_id: int, db: Session = Depends(get_db)):
    obj = db.get(Product, product_id)
    if not obj: raise NotFoundError('Product not found')
    return success(obj, 'Product retrieved successfully')

@router.post('/', response_model=Envelope[ProductRead], status_code=201)
def create_product(payload: ProductCreate, store: Store = Depends(require_active_store), db: Session = Depends(get_db)):
    obj = Product(store_id=store.id, **payload.model_dump())
    db.add(obj); db.commit(); db.refresh(obj)
    return success(obj, 'Product created successfully')

def _owned_product(db: Session, product_id: int, store: Store, action: str) -> Product:
    obj = db.get(Product, product_id)
    if not obj: raise NotFoundError('Product not found')
    if obj.store_id != store.id:
        raise AuthorizationError(f'You are not authorized to {action} this product')
    return obj

@router.patch('/{product_id}', response_model=Envelope[ProductRead])
def update_product(product_id: int, payload: ProductUpdate, store: Store = Depends(require_active_store), db: Session = Depends(get_db)):
    obj = _owned_product(db, product_id, store, 'update')
    # explicit nulls leave a field unchanged; order items keep their own price snapshot
    for k, v in payload.model_dump(exclude_unset=True, exclude_none=True).items(): setattr(obj, k, v)
    obj.updated_at = now_utc()
    db.add(obj); db.commit(); db.refresh(obj)
    return success(obj, 'Product updated successfully')

@router.delete('/{product_id}', response_model=Envelope[None])
def delete_product(product_id: int, store: Store = Depends(require_active_store), db: Session = Depends(get_db)):
    obj = _owned_product(db, product_id, store, 'delete')
    db.delete(obj); db.commit()
    return success(None, 'Product deleted successfully')
