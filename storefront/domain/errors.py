# storefront/domain/errors.py
from typing import Dict


class ShopError(Exception):
    """Bazowy błąd domenowy, mapowany na odpowiedź JSON w create_app."""

    status_code = 400
    code = "error"

    def __init__(self, message: str, fields: Dict[str, str] | None = None):
        super().__init__(message)
        self.message = message
        self.fields = fields


class Unauthorized(ShopError):
    status_code = 401
    code = "unauthorized"


class Forbidden(ShopError):
    status_code = 403
    code = "forbidden"


class NotFound(ShopError):
    status_code = 404
    code = "not_found"


class ValidationError(ShopError):
    status_code = 422
    code = "validation_error"


class InsufficientStock(ShopError):
    status_code = 409
    code = "insufficient_stock"

    def __init__(self, message: str, product_id: str | None = None):
        super().__init__(message)
        self.product_id = product_id


class EmptyCart(ShopError):
    status_code = 400
    code = "empty_cart"


class InvalidSignature(ShopError):
    status_code = 400
    code = "invalid_signature"


class PaymentInProgress(ShopError):
    #inny worker przetwarza ten sam event, stripe ponowi później
    status_code = 409
    code = "payment_in_progress"
