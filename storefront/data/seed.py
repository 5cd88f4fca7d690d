# storefront/data/seed.py
from decimal import Decimal
from typing import Dict, Any
from sqlalchemy import delete, select, func
from sqlalchemy.orm import Session
from storefront.data.database import SessionLocal
from storefront.data.models import (
    CartItemModel,
    CartModel,
    OrderItemModel,
    OrderModel,
    ProductModel,
    UserModel,
)
from storefront.utils.logging import get_logger

logger = get_logger(__name__)

_PLACEHOLDER = "/placeholder.svg?height=400&width=400"

SAMPLE_PRODUCTS = [
    {
        "name": "Wireless Headphones",
        "description": "Premium wireless headphones with noise cancellation and long battery life.",
        "price": Decimal("199.99"),
        "category": "Electronics",
        "featured": True,
        "stock": 50,
    },
    {
        "name": "Smart Watch",
        "description": "Track your fitness, receive notifications, and more with this stylish smart watch.",
        "price": Decimal("249.99"),
        "category": "Electronics",
        "featured": True,
        "stock": 30,
    },
    {
        "name": "Cotton T-Shirt",
        "description": "Comfortable and breathable cotton t-shirt for everyday wear.",
        "price": Decimal("24.99"),
        "category": "Clothing",
        "featured": False,
        "stock": 100,
    },
    {
        "name": "Denim Jeans",
        "description": "Classic denim jeans with a modern fit.",
        "price": Decimal("59.99"),
        "category": "Clothing",
        "featured": True,
        "stock": 75,
    },
    {
        "name": "Coffee Maker",
        "description": "Programmable coffee maker with a built-in grinder for the freshest coffee.",
        "price": Decimal("129.99"),
        "category": "Home & Kitchen",
        "featured": True,
        "stock": 25,
    },
    {
        "name": "Non-Stick Cookware Set",
        "description": "Complete set of non-stick cookware for all your cooking needs.",
        "price": Decimal("149.99"),
        "category": "Home & Kitchen",
        "featured": False,
        "stock": 20,
    },
    {
        "name": "Facial Cleanser",
        "description": "Gentle facial cleanser for all skin types.",
        "price": Decimal("19.99"),
        "category": "Beauty",
        "featured": False,
        "stock": 60,
    },
    {
        "name": "Moisturizing Cream",
        "description": "Hydrating moisturizing cream for dry skin.",
        "price": Decimal("29.99"),
        "category": "Beauty",
        "featured": False,
        "stock": 45,
    },
]


def _reset(db: Session):
    #kolejność: dzieci przed rodzicami
    for model in (OrderItemModel, OrderModel, CartItemModel, CartModel, UserModel, ProductModel):
        db.execute(delete(model))


def seed_catalog(db: Session, force: bool = False) -> Dict[str, Any]:
    if force:
        logger.warning("Force reset: removing catalog, orders, carts and users")
        _reset(db)
    elif db.execute(select(func.count()).select_from(ProductModel)).scalar_one() > 0:
        # not forcing: only seed if empty
        return {"success": True, "message": "Products already exist", "created": 0}

    db.add_all(ProductModel(image=_PLACEHOLDER, **p) for p in SAMPLE_PRODUCTS)
    db.commit()
    logger.info(f"Seeded {len(SAMPLE_PRODUCTS)} products")
    return {"success": True, "message": "Products seeded successfully", "created": len(SAMPLE_PRODUCTS)}


def seed():
    db = SessionLocal()
    try:
        seed_catalog(db)
    finally:
        db.close()


if __name__ == "__main__":
    seed()
