"""Data Transfer Objects for stock level information."""

from dataclasses import dataclass
from datetime import date


@dataclass
class StockInfoDTO:
    """Stock level of one item, ready for a list view or an alert."""

    item_id: str
    name: str
    category: str
    container_count: int
    loose_units: int
    total_base_units: int
    level: str  # good / low / critical
    message: str


@dataclass
class ExpiringItemDTO:
    item_id: str
    name: str
    expiry_date: date
    days_until_expiry: int  # negative once expired
    batch_number: str | None = None
