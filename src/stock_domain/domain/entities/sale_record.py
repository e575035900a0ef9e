"""Sale record entity."""

from dataclasses import dataclass, field
from datetime import datetime
from fractions import Fraction

from .stock_item import SaleUnit


@dataclass(frozen=True)
class SaleRecord:
    """An immutable record of one completed sale.

    ``unit_price`` is the price captured when the sale was validated, so later price
    edits never change what this sale is worth. ``total_amount`` is derived once here.
    """

    id: str
    owner_id: str
    item_id: str
    item_name: str
    unit: SaleUnit
    unit_label: str
    quantity: int
    base_units: int
    unit_price: Fraction
    sold_at: datetime
    notes: str | None = None
    total_amount: Fraction = field(init=False)

    def __post_init__(self) -> None:
        if self.quantity <= 0:
            raise ValueError("Quantity sold must be positive.")
        if self.base_units <= 0:
            raise ValueError("Base units sold must be positive.")
        if self.unit_price < 0:
            raise ValueError("Unit price cannot be negative.")
        object.__setattr__(self, "total_amount", self.quantity * Fraction(self.unit_price))
