"""Data Transfer Objects for sales and stock reports."""

from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal

from .stock_dtos import ExpiringItemDTO, StockInfoDTO


@dataclass
class DailySalesLineDTO:
    """One item's sales within a day. Quantities are in base units so mixed units add up."""

    item_id: str
    item_name: str
    base_units_sold: int = 0
    value: Decimal = Decimal("0.00")


@dataclass
class DailySalesDTO:
    date: date
    sale_count: int = 0
    total_value: Decimal = Decimal("0.00")
    items: list[DailySalesLineDTO] = field(default_factory=list)


@dataclass
class TopSellerDTO:
    item_id: str
    item_name: str
    base_units_sold: int
    value: Decimal


@dataclass
class DashboardSummaryDTO:
    total_items: int
    total_base_units: int
    low_stock_count: int
    out_of_stock_count: int
    expiring_count: int
    today_sale_count: int
    today_revenue: Decimal


@dataclass
class DailyReportDTO:
    """Everything the end-of-day report shows for one account."""

    owner_id: str
    report_date: date
    sale_count: int
    total_revenue: Decimal
    sales: list[DailySalesLineDTO] = field(default_factory=list)
    low_stock_items: list[StockInfoDTO] = field(default_factory=list)
    expiring_items: list[ExpiringItemDTO] = field(default_factory=list)
