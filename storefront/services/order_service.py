# storefront/services/order_service.py
from typing import Dict, Any
from sqlalchemy.orm import Session

from storefront.data.models.order import OrderModel, ORDER_STATUSES
from storefront.data.models.order_item import OrderItemModel
from storefront.domain.errors import EmptyCart, InsufficientStock, NotFound, Forbidden, Unauthorized, ValidationError
from storefront.domain.identity import SessionIdentity, UserIdentity
from storefront.domain.schemas import OrderOut
from storefront.repos.cart_repo import CartRepo
from storefront.repos.order_repo import OrderRepo
from storefront.repos.product_repo import ProductRepo
from storefront.services.cart_service import CartService
from storefront.services.notification_service import NotificationService
from storefront.services.pricing import compute_totals, Totals
from storefront.utils.logging import get_logger

logger = get_logger(__name__)

SHIPPING_FIELDS = ("first_name", "last_name", "email", "address", "city", "state", "zip_code", "country")


class OrderService:
    """
    Serwis odpowiedzialny za domenę zamówień.

    Zamówienie powstaje w jednej transakcji:
    insert zamówienia + warunkowe zmniejszenie stocku + czyszczenie koszyka.
    Błąd w dowolnym kroku = rollback całości.
    """

    def __init__(self, db: Session, notification_service: NotificationService | None = None):
        self.db = db
        self.repo = OrderRepo(db)
        self.carts = CartRepo(db)
        self.products = ProductRepo(db)
        self.cart_service = CartService(db)
        self.notification_service = notification_service or NotificationService()

    def quote(self, session_id: str) -> Totals:
        """Suma koszyka po aktualnych cenach, EmptyCart jeśli nie ma czego kupić."""
        cart = self.carts.get_cart_by_session(session_id)
        lines = self.cart_service.resolve_lines(cart)
        if not lines:
            raise EmptyCart("Koszyk jest pusty")
        return compute_totals((p.price, i.quantity) for i, p in lines)

    def place_order(
        self,
        session_id: str,
        user_id: str | None,
        status: str,
        shipping: Dict[str, Any] | None = None,
        payment_id: str | None = None,
        payment_method: str | None = None,
    ) -> OrderModel:
        """
        Wspólna ścieżka dla checkoutu i webhooka płatności.
        Ceny liczone z AKTUALNYCH cen produktów i zamrażane w pozycjach zamówienia.
        """
        cart = self.carts.get_cart_by_session(session_id)
        lines = self.cart_service.resolve_lines(cart)
        if not lines:
            raise EmptyCart("Koszyk jest pusty")

        totals = compute_totals((p.price, i.quantity) for i, p in lines)
        shipping = shipping or {}

        order = OrderModel(
            user_id=user_id,
            session_id=session_id,
            status=status,
            subtotal=totals.subtotal,
            shipping=totals.shipping,
            total=totals.total,
            payment_id=payment_id,
            payment_method=payment_method,
            items=[
                OrderItemModel(
                    position=pos,
                    product_id=p.id,
                    name=p.name,
                    quantity=i.quantity,
                    price=p.price,
                )
                for pos, (i, p) in enumerate(lines)
            ],
            **{k: shipping.get(k) for k in SHIPPING_FIELDS},
        )

        try:
            self.repo.add_order(order)

            for item, product in lines:
                #check-and-decrement w jednym UPDATE, 0 wierszy = ktoś wykupił w międzyczasie
                rowcount = self.products.decrement_stock(product.id, item.quantity)
                if rowcount == 0:
                    raise InsufficientStock(
                        f"Za mało produktu {product.name} na stanie",
                        product_id=product.id,
                    )

            self.carts.clear_cart_items(cart.id)
            self.repo.commit()
        except Exception:
            self.repo.rollback()
            raise

        logger.info(
            f"Order {order.id} ({status}) created from cart {cart.id}, "
            f"total {order.total}, items {len(lines)}"
        )
        self._notify(order)
        return order

    def _notify(self, order: OrderModel):
        try:
            self.notification_service.send_order_notification(order.id, order.email)
        except Exception as e:
            #zamówienie już zapisane, brak powiadomienia nie może go cofnąć
            logger.warning(f"Failed to queue notification for order {order.id}: {e}")

    def create_order(
        self,
        session: SessionIdentity,
        shipping: Dict[str, Any],
        user: UserIdentity | None = None,
    ) -> Dict[str, Any]:
        """
        Use Case: Checkout bez płatności online, status pending.
        """
        order = self.place_order(
            session_id=session.session_id,
            user_id=user.user_id if user else None,
            status="pending",
            shipping=shipping,
            payment_method=shipping.get("payment_method"),
        )
        return OrderOut.model_validate(order).model_dump()

    def get_order(
        self,
        order_id: str,
        user: UserIdentity | None,
        session: SessionIdentity | None = None,
    ) -> Dict[str, Any]:
        """
        Use Case: Pobranie zamówienia (Query).
        Dostęp: admin, właściciel albo sesja która je złożyła.
        """
        order = self.repo.get_order(order_id)

        if not order:
            raise NotFound("Zamówienie nie istnieje")

        if user and (user.is_admin or order.user_id == user.user_id):
            return OrderOut.model_validate(order).model_dump()

        if session and order.session_id == session.session_id:
            return OrderOut.model_validate(order).model_dump()

        if user is None:
            raise Unauthorized("Wymagane logowanie")
        raise Forbidden("Brak dostępu do zamówienia")

    def get_latest_order(self, user: UserIdentity | None, session: SessionIdentity) -> Dict[str, Any]:
        """
        Use Case: Ostatnie zamówienie po checkoutcie / płatności.
        Klient Stripe nie dostaje id zamówienia (tworzy je webhook),
        więc szukamy po zalogowanym userze albo po sesji koszyka.
        """
        order = self.repo.latest_for(
            user_id=user.user_id if user else None,
            session_id=session.session_id,
        )
        if not order:
            raise NotFound("Brak zamówień")
        return OrderOut.model_validate(order).model_dump()

    def list_orders(self, user: UserIdentity, page: int = 1, limit: int = 10) -> Dict[str, Any]:
        owner = None if user.is_admin else user.user_id
        orders, total = self.repo.list_orders(offset=(page - 1) * limit, limit=limit, user_id=owner)
        return {
            "orders": [OrderOut.model_validate(o).model_dump() for o in orders],
            "pagination": {
                "total": total,
                "page": page,
                "limit": limit,
                "pages": -(-total // limit),
            },
        }

    def update_status(self, order_id: str, status: str) -> Dict[str, Any]:
        if status not in ORDER_STATUSES:
            raise ValidationError(
                "Niepoprawny status zamówienia",
                fields={"status": f"dozwolone wartości: {', '.join(ORDER_STATUSES)}"},
            )

        order = self.repo.update_order_status(order_id, status)
        if not order:
            raise NotFound("Zamówienie nie istnieje")

        logger.info(f"Order {order_id} status -> {status}")
        return OrderOut.model_validate(order).model_dump()
