# tests/test_reporting_domain/test_application/test_report_service.py
"""Tests for the Report Application Service."""

from datetime import date, datetime
from decimal import Decimal
from fractions import Fraction

import pytest
import pytz

from src.stock_domain.domain.entities.sale_record import SaleRecord
from src.stock_domain.domain.entities.stock_item import ItemCategory, SaleUnit


@pytest.fixture
def make_record():
    counter = iter(range(1, 1000))

    def _make(item_id="med-1", item_name="Paracetamol 500mg", quantity=1, base_units=None, unit_price=10, sold_at=None):
        return SaleRecord(
            id=f"rec-{next(counter)}",
            owner_id="shop-1",
            item_id=item_id,
            item_name=item_name,
            unit=SaleUnit.BASE_UNIT,
            unit_label="tablet",
            quantity=quantity,
            base_units=quantity if base_units is None else base_units,
            unit_price=Fraction(unit_price),
            sold_at=sold_at or datetime(2024, 3, 15, 6, 0, tzinfo=pytz.utc),
        )

    return _make


def test_daily_sales_grouped_by_local_day(report_service, mock_stock_repository, make_record) -> None:
    """19:00 UTC on the 14th is already the 15th in Asia/Kolkata."""
    mock_stock_repository.list_sale_records.return_value = [
        make_record(quantity=3, sold_at=datetime(2024, 3, 15, 6, 0, tzinfo=pytz.utc)),
        make_record(quantity=2, sold_at=datetime(2024, 3, 14, 19, 0, tzinfo=pytz.utc)),
        make_record(quantity=1, sold_at=datetime(2024, 3, 14, 10, 0, tzinfo=pytz.utc)),
    ]

    daily = report_service.get_daily_sales("shop-1")

    mock_stock_repository.list_sale_records.assert_called_once_with("shop-1", start=None, end=None)
    assert [d.date for d in daily] == [date(2024, 3, 15), date(2024, 3, 14)]
    assert daily[0].sale_count == 2
    assert daily[0].total_value == Decimal("50.00")
    assert daily[0].items[0].base_units_sold == 5
    assert daily[1].sale_count == 1
    assert daily[1].total_value == Decimal("10.00")


def test_daily_sales_sum_exact_values_before_rounding(report_service, mock_stock_repository, make_record) -> None:
    """Three tablets at 100/3 each are worth exactly 100.00, not 99.99."""
    mock_stock_repository.list_sale_records.return_value = [
        make_record(quantity=1, unit_price=Fraction(100, 3)) for _ in range(3)
    ]

    daily = report_service.get_daily_sales("shop-1")

    assert daily[0].total_value == Decimal("100.00")
    assert daily[0].items[0].value == Decimal("100.00")


def test_daily_sales_empty(report_service, mock_stock_repository) -> None:
    mock_stock_repository.list_sale_records.return_value = []
    assert report_service.get_daily_sales("shop-1") == []


def test_top_selling_items(report_service, mock_stock_repository, make_record) -> None:
    mock_stock_repository.list_sale_records.return_value = [
        make_record(item_id="a", item_name="Aspirin", quantity=2),
        make_record(item_id="b", item_name="Bandage", quantity=1, base_units=10, unit_price=50),
        make_record(item_id="a", item_name="Aspirin", quantity=4),
        make_record(item_id="c", item_name="Cetirizine", quantity=6),
    ]

    top = report_service.get_top_selling_items("shop-1", limit=2)

    assert [(t.item_id, t.base_units_sold) for t in top] == [("b", 10), ("a", 6)]
    assert top[0].value == Decimal("50.00")


def test_category_breakdown(report_service, mock_stock_repository, make_item, opaque_item) -> None:
    mock_stock_repository.list_items.return_value = [make_item(id="a"), make_item(id="b"), opaque_item]

    assert report_service.get_category_breakdown("shop-1") == {
        ItemCategory.STANDARD.value: 2,
        ItemCategory.OPAQUE.value: 1,
    }


def test_dashboard_summary(report_service, mock_stock_repository, make_item, make_record) -> None:
    today = date(2024, 3, 15)
    mock_stock_repository.list_items.return_value = [
        make_item(id="a", container_count=5),
        make_item(id="b", container_count=0, loose_units=3),
        make_item(id="c", container_count=0, expiry_date=date(2024, 3, 20)),
    ]
    mock_stock_repository.list_sale_records.return_value = [make_record(quantity=2), make_record(quantity=1)]

    summary = report_service.get_dashboard_summary("shop-1", today=today)

    start = datetime(2024, 3, 14, 18, 30, tzinfo=pytz.utc)
    end = datetime(2024, 3, 15, 18, 30, tzinfo=pytz.utc)
    mock_stock_repository.list_sale_records.assert_called_once_with("shop-1", start=start, end=end)
    assert summary.total_items == 3
    assert summary.total_base_units == 53
    assert summary.low_stock_count == 2
    assert summary.out_of_stock_count == 1
    assert summary.expiring_count == 1
    assert summary.today_sale_count == 2
    assert summary.today_revenue == Decimal("30.00")


def test_build_daily_report(report_service, mock_stock_repository, make_item, make_record, caplog) -> None:
    report_date = date(2024, 3, 15)
    mock_stock_repository.list_items.return_value = [
        make_item(id="a", name="Plenty", container_count=5),
        make_item(id="b", name="Nearly gone", container_count=0, loose_units=2, expiry_date=date(2024, 3, 10)),
    ]
    mock_stock_repository.list_sale_records.return_value = [
        make_record(item_id="a", item_name="Plenty", quantity=3),
        make_record(item_id="b", item_name="Nearly gone", quantity=1, unit_price=Fraction(25, 2)),
    ]

    with caplog.at_level("INFO"):
        report = report_service.build_daily_report("shop-1", report_date=report_date)

    assert report.owner_id == "shop-1"
    assert report.report_date == report_date
    assert report.sale_count == 2
    assert report.total_revenue == Decimal("42.50")
    assert {line.item_id: line.value for line in report.sales} == {"a": Decimal("30.00"), "b": Decimal("12.50")}
    assert [info.item_id for info in report.low_stock_items] == ["b"]
    assert [e.item_id for e in report.expiring_items] == ["b"]
    assert report.expiring_items[0].days_until_expiry == -5
    assert "Daily report for shop-1" in caplog.text
