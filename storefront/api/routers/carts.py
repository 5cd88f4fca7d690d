#storefront/api/routers/carts.py
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from storefront.api.deps import get_session_identity
from storefront.data.database import get_db
from storefront.domain.identity import SessionIdentity
from storefront.domain.schemas import CartOut, ItemIn, QuantityIn
from storefront.services.cart_service import CartService

router = APIRouter(prefix="/cart", tags=["cart"])


@router.get("", response_model=CartOut)
def get_cart(
    session: SessionIdentity = Depends(get_session_identity),
    db: Session = Depends(get_db),
):
    return CartService(db).get_cart(session)


@router.post("/items", response_model=CartOut)
def add_item(
    payload: ItemIn,
    session: SessionIdentity = Depends(get_session_identity),
    db: Session = Depends(get_db),
):
    return CartService(db).add_item(session, payload.product_id, payload.quantity)


@router.put("/items/{product_id}", response_model=CartOut)
def update_item(
    product_id: str,
    payload: QuantityIn,
    session: SessionIdentity = Depends(get_session_identity),
    db: Session = Depends(get_db),
):
    return CartService(db).update_quantity(session, product_id, payload.quantity)


@router.delete("/items/{product_id}", response_model=CartOut)
def remove_item(
    product_id: str,
    session: SessionIdentity = Depends(get_session_identity),
    db: Session = Depends(get_db),
):
    return CartService(db).remove_item(session, product_id)


@router.delete("", response_model=CartOut)
def clear_cart(
    session: SessionIdentity = Depends(get_session_identity),
    db: Session = Depends(get_db),
):
    return CartService(db).clear(session)
