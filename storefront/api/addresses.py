from fastapi import APIRouter, Depends
from typing import List
from sqlalchemy.orm import Session
from storefront.api.deps import get_db, get_current_user
from storefront.db.models import Address, User
from storefront.schemas import Envelope, AddressCreate, AddressRead
from storefront.utils.responses import success

router = APIRouter()

@router.get('/', response_model=Envelope[List[AddressRead]])
def list_addresses(user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    rows = db.query(Address).filter(Address.user_id == user.id).order_by(Address.id).all()
    return success(rows, 'Addresses retrieved successfully')

@router.post('/', response_model=Envelope[AddressRead], status_code=201)
def create_address(payload: AddressCreate, user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    data = payload.model_dump()
    data['email'] = str(payload.email)
    obj = Address(user_id=user.id, **data)
    db.add(obj); db.commit(); db.refresh(obj)
    return success(obj, 'Address created successfully')
