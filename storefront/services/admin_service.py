# storefront/services/admin_service.py
from decimal import Decimal
from typing import Dict, Any
from sqlalchemy.orm import Session
from storefront.domain.schemas import OrderOut, ProductOut
from storefront.repos.order_repo import OrderRepo
from storefront.repos.product_repo import ProductRepo
from storefront.repos.user_repo import UserRepo

RECENT_ORDERS_LIMIT = 5
LOW_STOCK_THRESHOLD = 10
LOW_STOCK_LIMIT = 5


class AdminService:
    """Raporty tylko do odczytu dla panelu admina."""

    def __init__(self, db: Session):
        self.products = ProductRepo(db)
        self.orders = OrderRepo(db)
        self.users = UserRepo(db)

    def dashboard_summary(self) -> Dict[str, Any]:
        orders = self.orders.list_all()
        products = self.products.list_all()

        total_revenue = sum((o.total for o in orders), Decimal("0.00"))

        #kategoria wg AKTUALNEGO produktu, kwota wg zamrożonej ceny z pozycji
        category_of = {p.id: p.category for p in products}
        by_category: Dict[str, Decimal] = {c: Decimal("0.00") for c in sorted(set(category_of.values()))}
        for order in orders:
            for item in order.items:
                category = category_of.get(item.product_id)
                if category is not None:
                    by_category[category] += item.price * item.quantity

        return {
            "counts": {
                "products": self.products.count(),
                "orders": self.orders.count(),
                "users": self.users.count(),
            },
            "recent_orders": [
                OrderOut.model_validate(o) for o in self.orders.recent(RECENT_ORDERS_LIMIT)
            ],
            "low_stock_products": [
                ProductOut.model_validate(p)
                for p in self.products.low_stock(LOW_STOCK_THRESHOLD, LOW_STOCK_LIMIT)
            ],
            "revenue": {
                "total": total_revenue,
                "by_category": by_category,
            },
        }
