# storefront/api/__init__.py
from storefront.api.routers import (
    admin,
    carts,
    health,
    orders,
    payments,
    products,
    seed,
    users,
)

ROUTERS = [
    health.router,
    users.router,
    products.router,
    carts.router,
    orders.router,
    payments.router,
    admin.router,
    seed.router,
]
