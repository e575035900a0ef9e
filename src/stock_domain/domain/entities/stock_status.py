"""Stock level classification result."""

from dataclasses import dataclass
from enum import Enum


class StockLevel(str, Enum):
    GOOD = "good"
    LOW = "low"
    CRITICAL = "critical"


@dataclass(frozen=True)
class StockStatus:
    total_base_units: int
    level: StockLevel
    message: str

    @property
    def is_out_of_stock(self) -> bool:
        return self.total_base_units == 0

    @property
    def needs_restock(self) -> bool:
        return self.level in (StockLevel.LOW, StockLevel.CRITICAL)
