# storefront/cart.py
from typing import Callable, Dict, List, Optional

from .models import CartLine, Product

PriceLookup = Callable[[str], Optional[float]]

class CartStore:
    """
    In-memory cart keyed by sku. Lines keep insertion order, which is also
    the order the lines are submitted in. A line never holds quantity <= 0.
    """

    def __init__(self):
        self._lines: Dict[str, int] = {}

    def add_item(self, product: Product) -> int:
        # No stock check here; the view decides whether to offer the action.
        self._lines[product.sku] = self._lines.get(product.sku, 0) + 1
        return self._lines[product.sku]

    def update_quantity(self, sku: str, delta: int) -> int:
        if sku not in self._lines:
            return 0
        new_qty = max(0, self._lines[sku] + delta)
        if new_qty == 0:
            del self._lines[sku]
        else:
            self._lines[sku] = new_qty
        return new_qty

    def remove(self, sku: str):
        self._lines.pop(sku, None)

    def clear(self):
        self._lines.clear()

    def total(self, price_lookup: PriceLookup) -> float:
        total = 0.0
        for sku, qty in self._lines.items():
            price = price_lookup(sku)
            total += (price or 0) * qty
        return total

    def quantity(self, sku: str) -> int:
        return self._lines.get(sku, 0)

    def item_count(self) -> int:
        return sum(self._lines.values())

    def lines(self) -> List[CartLine]:
        return [CartLine(sku=sku, quantity=qty) for sku, qty in self._lines.items()]

    def is_empty(self) -> bool:
        return not self._lines

    def __len__(self):
        return len(self._lines)

    def __contains__(self, sku):
        return sku in self._lines
