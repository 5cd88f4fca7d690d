# storefront/services/cart_service.py
from typing import Dict, Any, List, Tuple
from sqlalchemy.orm import Session
from storefront.data.models._common import utcnow
from storefront.data.models.cart import CartModel
from storefront.data.models.cart_item import CartItemModel
from storefront.data.models.product import ProductModel
from storefront.domain.errors import NotFound, InsufficientStock
from storefront.domain.identity import SessionIdentity, UserIdentity
from storefront.domain.schemas import ProductOut
from storefront.repos.cart_repo import CartRepo
from storefront.repos.product_repo import ProductRepo
from storefront.services.pricing import compute_totals, money
from storefront.utils.logging import get_logger

logger = get_logger(__name__)

CartLine = Tuple[CartItemModel, ProductModel]


class CartService:
    """
    Koszyk anonimowej sesji.
    commands (add, update, remove, clear, merge) modyfikuja stan
    query (get) tylko odczyt, poza usuwaniem osieroconych pozycji
    Stan magazynu jest tu tylko sprawdzany, nigdy zmniejszany.
    """

    def __init__(self, db: Session):
        self.repo = CartRepo(db)
        self.products = ProductRepo(db)

    def resolve_lines(self, cart: CartModel | None) -> List[CartLine]:
        """
        Łączy pozycje koszyka z aktualnymi produktami.
        Pozycje których produkt nie istnieje są usuwane (bez commita).
        """
        if cart is None:
            return []

        items = self.repo.get_cart_items(cart.id)
        products = self.products.get_products_by_ids(i.product_id for i in items)

        lines: List[CartLine] = []
        orphans = []
        for item in items:
            product = products.get(item.product_id)
            if product is None:
                orphans.append(item.id)
                continue
            lines.append((item, product))

        if orphans:
            logger.info(f"Usuwam {len(orphans)} osieroconych pozycji z koszyka {cart.id}")
            self.repo.delete_cart_items_by_ids(orphans)

        return lines

    def _to_dict(self, session_id: str, lines: List[CartLine]) -> Dict[str, Any]:
        totals = compute_totals((p.price, i.quantity) for i, p in lines)
        return {
            "session_id": session_id,
            "items": [
                {
                    "product": ProductOut.model_validate(p),
                    "quantity": i.quantity,
                    "line_total": money(p.price * i.quantity),
                }
                for i, p in lines
            ],
            "subtotal": totals.subtotal,
            "shipping": totals.shipping,
            "total": totals.total,
        }

    def _get_or_create_cart(self, session: SessionIdentity) -> CartModel:
        cart = self.repo.get_cart_by_session(session.session_id)
        if cart:
            return cart
        logger.info(f"Tworze nowy koszyk dla sesji {session.session_id}")
        return self.repo.create_cart(CartModel(session_id=session.session_id))

    def _touch(self, cart: CartModel):
        cart.updated_at = utcnow()

    #query
    def get_cart(self, session: SessionIdentity) -> Dict[str, Any]:
        cart = self.repo.get_cart_by_session(session.session_id)
        lines = self.resolve_lines(cart)
        self.repo.commit()
        return self._to_dict(session.session_id, lines)

    #commands
    def add_item(self, session: SessionIdentity, product_id: str, quantity: int = 1) -> Dict[str, Any]:
        product = self.products.get_product(product_id)
        if not product:
            raise NotFound("Produkt nie istnieje")

        #tylko wirtualna rezerwacja, stock zmniejsza dopiero zamówienie
        if product.stock < quantity:
            raise InsufficientStock(
                f"Za mało produktu {product.name} na stanie (dostępne: {product.stock})",
                product_id=product_id,
            )

        cart = self._get_or_create_cart(session)
        existing_item = self.repo.get_cart_item(cart.id, product_id)

        if existing_item:
            logger.info(
                f"Produkt {product_id} już jest w koszyku, zwiększam ilość "
                f"z {existing_item.quantity} do {existing_item.quantity + quantity}"
            )
            existing_item.quantity += quantity
        else:
            logger.info(f"Dodaje nowy produkt {product_id} do koszyka {cart.id}")
            self.repo.add_cart_item(
                CartItemModel(cart_id=cart.id, product_id=product_id, quantity=quantity)
            )

        self._touch(cart)
        self.repo.commit()
        return self.get_cart(session)

    def update_quantity(self, session: SessionIdentity, product_id: str, quantity: int) -> Dict[str, Any]:
        product = self.products.get_product(product_id)
        if not product:
            raise NotFound("Produkt nie istnieje")

        if quantity > product.stock:
            raise InsufficientStock(
                f"Za mało produktu {product.name} na stanie (dostępne: {product.stock})",
                product_id=product_id,
            )

        cart = self.repo.get_cart_by_session(session.session_id)
        item = self.repo.get_cart_item(cart.id, product_id) if cart else None
        if not item:
            raise NotFound("Produktu nie ma w koszyku")

        logger.info(f"Zmiana ilości produktu {product_id} w koszyku {cart.id}: {item.quantity} -> {quantity}")
        item.quantity = quantity
        self._touch(cart)
        self.repo.commit()
        return self.get_cart(session)

    def remove_item(self, session: SessionIdentity, product_id: str) -> Dict[str, Any]:
        cart = self.repo.get_cart_by_session(session.session_id)
        if cart:
            logger.info(f"Usuwanie produktu {product_id} z koszyka {cart.id}")
            self.repo.delete_cart_item(cart.id, product_id)
            self._touch(cart)
            self.repo.commit()
        return self.get_cart(session)

    def clear(self, session: SessionIdentity) -> Dict[str, Any]:
        cart = self.repo.get_cart_by_session(session.session_id)
        if cart:
            removed = self.repo.clear_cart_items(cart.id)
            self._touch(cart)
            self.repo.commit()
            logger.info(f"Wyczyszczono koszyk {cart.id} ({removed} pozycji)")
        return self._to_dict(session.session_id, [])

    def merge_into_session(self, session: SessionIdentity, user: UserIdentity) -> None:
        """
        Przy logowaniu: koszyki użytkownika z poprzednich sesji są wlewane
        do koszyka bieżącej sesji (ilości sumowane), koszyk sesji dostaje user_id.
        """
        cart = self._get_or_create_cart(session)

        merged = 0
        for old in self.repo.get_carts_by_user(user.user_id):
            if old.id == cart.id:
                continue
            for old_item in self.repo.get_cart_items(old.id):
                item = self.repo.get_cart_item(cart.id, old_item.product_id)
                if item:
                    item.quantity += old_item.quantity
                else:
                    self.repo.add_cart_item(
                        CartItemModel(
                            cart_id=cart.id,
                            product_id=old_item.product_id,
                            quantity=old_item.quantity,
                        )
                    )
                merged += 1
            self.repo.delete_cart(old)

        cart.user_id = user.user_id
        self._touch(cart)
        self.repo.commit()
        logger.info(f"Koszyk sesji {session.session_id} przypisany do {user.user_id}, scalono {merged} pozycji")
