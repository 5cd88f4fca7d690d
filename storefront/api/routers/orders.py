# storefront/api/routers/orders.py
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session
from storefront.api.deps import get_session_identity, get_optional_user, get_current_user, require_admin
from storefront.data.database import get_db
from storefront.domain.identity import SessionIdentity, UserIdentity
from storefront.domain.schemas import OrderCreate, OrderOut, OrderListOut, OrderStatusIn
from storefront.services.order_service import OrderService

router = APIRouter(prefix="/orders", tags=["orders"])


def get_service(db: Session):
    return OrderService(db)


@router.post("", response_model=OrderOut, status_code=201)
def create_order(
    payload: OrderCreate,
    session: SessionIdentity = Depends(get_session_identity),
    user: UserIdentity | None = Depends(get_optional_user),
    db: Session = Depends(get_db),
):
    """
    Checkout: tworzy zamówienie z koszyka sesji, zmniejsza stock i czyści koszyk.
    """
    return get_service(db).create_order(session, payload.model_dump(), user)


@router.get("", response_model=OrderListOut)
def list_orders(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    user: UserIdentity = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """
    Zamówienia zalogowanego usera, admin widzi wszystkie.
    """
    return get_service(db).list_orders(user, page, limit)


#musi być przed /{order_id}
@router.get("/latest", response_model=OrderOut)
def get_latest_order(
    session: SessionIdentity = Depends(get_session_identity),
    user: UserIdentity | None = Depends(get_optional_user),
    db: Session = Depends(get_db),
):
    return get_service(db).get_latest_order(user, session)


@router.get("/{order_id}", response_model=OrderOut)
def get_order(
    order_id: str,
    session: SessionIdentity = Depends(get_session_identity),
    user: UserIdentity | None = Depends(get_optional_user),
    db: Session = Depends(get_db),
):
    return get_service(db).get_order(order_id, user, session)


@router.put("/{order_id}/status", response_model=OrderOut)
def update_order_status(
    order_id: str,
    payload: OrderStatusIn,
    _admin: UserIdentity = Depends(require_admin),
    db: Session = Depends(get_db),
):
    return get_service(db).update_status(order_id, payload.status)
