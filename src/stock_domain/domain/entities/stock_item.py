"""Stock item entity."""

from dataclasses import dataclass, field, replace
from datetime import date, datetime
from decimal import Decimal
from enum import Enum

from src.common.utils.date_utils import utc_now
from .quantity import QuantityState


class ItemCategory(str, Enum):
    """STANDARD items split into base units (tablets); OPAQUE items are sold whole only."""

    STANDARD = "medicine"
    OPAQUE = "other"


class SaleUnit(str, Enum):
    BASE_UNIT = "base_unit"
    CONTAINER = "container"
    OPAQUE = "opaque"


VALID_UNITS = {
    ItemCategory.STANDARD: frozenset({SaleUnit.BASE_UNIT, SaleUnit.CONTAINER}),
    ItemCategory.OPAQUE: frozenset({SaleUnit.CONTAINER, SaleUnit.OPAQUE}),
}

DEFAULT_SALE_UNIT = {
    ItemCategory.STANDARD: SaleUnit.CONTAINER,
    ItemCategory.OPAQUE: SaleUnit.OPAQUE,
}


@dataclass(frozen=True)
class StockItem:
    """Represents one sellable product and the stock on hand for it.

    Instances are never changed in place. A sale or an edit produces a new
    StockItem with a bumped ``version``, which the store uses to detect lost updates.
    """

    id: str
    owner_id: str
    name: str
    category: ItemCategory
    container_count: int
    units_per_container: int
    price_per_container: Decimal
    loose_units: int = 0
    declared_sale_unit: SaleUnit | None = None
    container_label: str = "strip"
    base_unit_label: str = "tablet"
    expiry_date: date | None = None
    batch_number: str | None = None
    manufacturer: str | None = None
    description: str | None = None
    version: int = 1
    created_at: datetime = field(default_factory=utc_now)
    updated_at: datetime = field(default_factory=utc_now)

    def __post_init__(self) -> None:
        """Post-initialization for validation."""
        if not self.name or not self.name.strip():
            raise ValueError("Item name is required.")
        # Raises ValueError for any broken container/loose combination
        QuantityState(self.container_count, self.units_per_container, self.loose_units)
        if self.category == ItemCategory.OPAQUE and self.units_per_container != 1:
            raise ValueError("Opaque items are not subdivided; units per container must be 1.")
        if not isinstance(self.price_per_container, Decimal) or not self.price_per_container.is_finite():
            raise ValueError(f"Price must be a finite Decimal, got {self.price_per_container!r}.")
        if self.price_per_container < 0:
            raise ValueError("Price cannot be negative.")
        # Stored as DECIMAL(12, 2)
        if self.price_per_container.as_tuple().exponent < -2:
            raise ValueError(f"Price {self.price_per_container} has more than 2 decimal places.")
        if self.declared_sale_unit is None:
            object.__setattr__(self, "declared_sale_unit", DEFAULT_SALE_UNIT[self.category])
        elif self.declared_sale_unit not in VALID_UNITS[self.category]:
            raise ValueError(
                f"'{self.declared_sale_unit.value}' is not a valid sale unit for '{self.category.value}' items."
            )
        if self.version < 1:
            raise ValueError("Version must start at 1.")

    @property
    def quantity(self) -> QuantityState:
        return QuantityState(self.container_count, self.units_per_container, self.loose_units)

    @property
    def total_base_units(self) -> int:
        return self.quantity.total_base_units

    def with_quantity(self, state: QuantityState, updated_at: datetime | None = None) -> "StockItem":
        """Copy of this item holding ``state`` as its stock, one version later."""
        if state.units_per_container != self.units_per_container:
            raise ValueError("A quantity change cannot alter units per container.")
        return replace(
            self,
            container_count=state.container_count,
            loose_units=state.loose_units,
            version=self.version + 1,
            updated_at=updated_at or utc_now(),
        )
