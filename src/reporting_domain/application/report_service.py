# src/reporting_domain/application/report_service.py
"""Application service for sales and stock reports."""

import logging
from collections import Counter
from datetime import date, datetime
from fractions import Fraction

from src.common.dtos.report_dtos import (
    DailyReportDTO,
    DailySalesDTO,
    DailySalesLineDTO,
    DashboardSummaryDTO,
    TopSellerDTO,
)
from src.common.utils.date_utils import day_bounds_utc, local_day, local_today
from src.common.utils.money_utils import to_cents
from src.stock_domain.application.inventory_service import InventoryApplicationService
from src.stock_domain.domain.entities.sale_record import SaleRecord
from src.stock_domain.domain.repositories.stock_item_repository import IStockItemRepository

logger = logging.getLogger(__name__)


def _group_lines(records: list[SaleRecord]) -> list[DailySalesLineDTO]:
    """Sums base units and exact value per item, then rounds once per line."""
    units: dict[str, int] = {}
    values: dict[str, Fraction] = {}
    names: dict[str, str] = {}
    for record in records:
        units[record.item_id] = units.get(record.item_id, 0) + record.base_units
        values[record.item_id] = values.get(record.item_id, Fraction(0)) + record.total_amount
        names.setdefault(record.item_id, record.item_name)
    return [
        DailySalesLineDTO(
            item_id=item_id,
            item_name=names[item_id],
            base_units_sold=units[item_id],
            value=to_cents(values[item_id]),
        )
        for item_id in units
    ]


class ReportApplicationService:
    """Aggregates sale records and stock levels into report figures."""

    def __init__(self, stock_repo: IStockItemRepository, inventory_service: InventoryApplicationService) -> None:
        self.stock_repo = stock_repo
        self.inventory_service = inventory_service

    def get_daily_sales(
        self, owner_id: str, start: datetime | None = None, end: datetime | None = None
    ) -> list[DailySalesDTO]:
        """Sales grouped by local calendar day, newest day first."""
        records = self.stock_repo.list_sale_records(owner_id, start=start, end=end)

        by_day: dict[date, list[SaleRecord]] = {}
        for record in records:
            by_day.setdefault(local_day(record.sold_at), []).append(record)

        daily = [
            DailySalesDTO(
                date=day,
                sale_count=len(day_records),
                total_value=to_cents(sum((r.total_amount for r in day_records), Fraction(0))),
                items=_group_lines(day_records),
            )
            for day, day_records in by_day.items()
        ]
        return sorted(daily, key=lambda d: d.date, reverse=True)

    def get_top_selling_items(
        self, owner_id: str, start: datetime | None = None, end: datetime | None = None, limit: int = 5
    ) -> list[TopSellerDTO]:
        """Best sellers by base units sold."""
        lines = _group_lines(self.stock_repo.list_sale_records(owner_id, start=start, end=end))
        lines.sort(key=lambda line: (-line.base_units_sold, line.item_name))
        return [
            TopSellerDTO(
                item_id=line.item_id,
                item_name=line.item_name,
                base_units_sold=line.base_units_sold,
                value=line.value,
            )
            for line in lines[:limit]
        ]

    def get_category_breakdown(self, owner_id: str) -> dict[str, int]:
        return dict(Counter(item.category.value for item in self.stock_repo.list_items(owner_id)))

    def get_dashboard_summary(self, owner_id: str, today: date | None = None) -> DashboardSummaryDTO:
        today = today or local_today()
        stock = [status for _, status in self.inventory_service.classify_stock(owner_id)]
        start, end = day_bounds_utc(today)
        todays_sales = self.stock_repo.list_sale_records(owner_id, start=start, end=end)

        return DashboardSummaryDTO(
            total_items=len(stock),
            total_base_units=sum(status.total_base_units for status in stock),
            low_stock_count=sum(1 for status in stock if status.needs_restock),
            out_of_stock_count=sum(1 for status in stock if status.is_out_of_stock),
            expiring_count=len(self.inventory_service.get_expiring_items(owner_id, today=today)),
            today_sale_count=len(todays_sales),
            today_revenue=to_cents(sum((r.total_amount for r in todays_sales), Fraction(0))),
        )

    def build_daily_report(self, owner_id: str, report_date: date | None = None) -> DailyReportDTO:
        """End-of-day report: that day's sales plus current low-stock and expiring items."""
        report_date = report_date or local_today()
        start, end = day_bounds_utc(report_date)
        records = self.stock_repo.list_sale_records(owner_id, start=start, end=end)

        report = DailyReportDTO(
            owner_id=owner_id,
            report_date=report_date,
            sale_count=len(records),
            total_revenue=to_cents(sum((r.total_amount for r in records), Fraction(0))),
            sales=_group_lines(records),
            low_stock_items=self.inventory_service.get_low_stock_items(owner_id),
            expiring_items=self.inventory_service.get_expiring_items(owner_id, today=report_date),
        )
        logger.info(
            f"Daily report for {owner_id} on {report_date}: {report.sale_count} sales, "
            f"{len(report.low_stock_items)} low-stock items, {len(report.expiring_items)} expiring"
        )
        return report
