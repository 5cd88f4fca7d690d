# storefront/services/pricing.py
from dataclasses import dataclass
from decimal import Decimal, ROUND_HALF_UP
from typing import Iterable, Tuple

CENT = Decimal("0.01")
FREE_SHIPPING_THRESHOLD = Decimal("50.00")
FLAT_SHIPPING = Decimal("5.99")


@dataclass(frozen=True)
class Totals:
    subtotal: Decimal
    shipping: Decimal
    total: Decimal

    @property
    def amount_in_cents(self) -> int:
        return int((self.total * 100).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def money(value) -> Decimal:
    return Decimal(str(value)).quantize(CENT, rounding=ROUND_HALF_UP)


def shipping_for(subtotal: Decimal) -> Decimal:
    #darmowa dostawa dopiero POWYŻEJ 50, równo 50 jeszcze płaci
    return Decimal("0.00") if subtotal > FREE_SHIPPING_THRESHOLD else FLAT_SHIPPING


def compute_totals(lines: Iterable[Tuple[Decimal, int]]) -> Totals:
    """lines: pary (cena, ilość)"""
    subtotal = money(sum((Decimal(price) * qty for price, qty in lines), Decimal("0.00")))
    shipping = shipping_for(subtotal)
    return Totals(subtotal=subtotal, shipping=shipping, total=money(subtotal + shipping))
