# tests/test_stock_domain/test_domain/test_sale_processor.py
"""Tests for the sale processor and the sale attempt state machine."""

from decimal import Decimal
from fractions import Fraction

import pytest

from src.common.exceptions.custom_exceptions import (
    InsufficientStockError,
    InvalidQuantityError,
    InvalidUnitError,
)
from src.stock_domain.domain.entities.stock_item import SaleUnit
from src.stock_domain.domain.services.sale_processor import SaleAttempt, SaleState


def test_sell_tablets_from_full_strips(sale_processor, standard_item, fixed_now) -> None:
    processed = sale_processor.process(standard_item, SaleUnit.BASE_UNIT, 3)

    assert processed.item.container_count == 4
    assert processed.item.loose_units == 7
    assert processed.item.version == standard_item.version + 1

    record = processed.record
    assert record.id == "sale-1"
    assert record.item_id == "med-1"
    assert record.owner_id == "shop-1"
    assert record.unit == SaleUnit.BASE_UNIT
    assert record.unit_label == "tablet"
    assert record.quantity == 3
    assert record.base_units == 3
    assert record.unit_price == Fraction(10)
    assert record.total_amount == Fraction(30)
    assert record.sold_at == fixed_now


def test_sell_a_strip_takes_loose_tablets_first(sale_processor, make_item) -> None:
    item = make_item(container_count=4, loose_units=7)

    processed = sale_processor.process(item, SaleUnit.CONTAINER, 1)

    # 7 loose tablets plus 3 from one opened strip
    assert processed.item.container_count == 3
    assert processed.item.loose_units == 7
    assert processed.item.total_base_units == 37
    assert processed.record.base_units == 10
    assert processed.record.total_amount == Fraction(100)


def test_sell_last_strip(sale_processor, make_item) -> None:
    item = make_item(container_count=1)

    processed = sale_processor.process(item, SaleUnit.CONTAINER, 1)

    assert processed.item.total_base_units == 0
    assert processed.item.container_count == 0


def test_oversell_is_rejected_in_the_sale_unit(sale_processor, make_item) -> None:
    item = make_item(container_count=0, loose_units=3)

    with pytest.raises(InsufficientStockError) as exc_info:
        sale_processor.process(item, SaleUnit.BASE_UNIT, 4)

    assert exc_info.value.requested == 4
    assert exc_info.value.available == 3
    assert exc_info.value.unit_label == "tablet"
    assert item.loose_units == 3


def test_oversell_by_container_reports_whole_containers(sale_processor, make_item) -> None:
    item = make_item(container_count=2, loose_units=5)

    with pytest.raises(InsufficientStockError) as exc_info:
        sale_processor.process(item, SaleUnit.CONTAINER, 3)

    assert exc_info.value.available == 2
    assert exc_info.value.unit_label == "strip"


def test_opaque_item_sold_whole(sale_processor, opaque_item) -> None:
    processed = sale_processor.process(opaque_item, SaleUnit.OPAQUE, 2)

    assert processed.item.container_count == 1
    assert processed.record.unit_label == "bottle"
    assert processed.record.total_amount == Fraction(171)


def test_opaque_item_rejects_base_unit(sale_processor, opaque_item) -> None:
    with pytest.raises(InvalidUnitError):
        sale_processor.process(opaque_item, SaleUnit.BASE_UNIT, 1)


@pytest.mark.parametrize("quantity", [0, -2, 1.5, "3", True, None])
def test_invalid_quantities_are_rejected(sale_processor, standard_item, quantity) -> None:
    with pytest.raises(InvalidQuantityError):
        sale_processor.process(standard_item, SaleUnit.BASE_UNIT, quantity)


def test_unknown_unit_string_is_rejected(sale_processor, standard_item) -> None:
    with pytest.raises(InvalidUnitError):
        sale_processor.process(standard_item, "pallet", 1)


def test_unit_given_as_plain_string_is_accepted(sale_processor, standard_item) -> None:
    processed = sale_processor.process(standard_item, "base_unit", 2)
    assert processed.record.unit == SaleUnit.BASE_UNIT


def test_rejected_sale_leaves_item_untouched(sale_processor, standard_item) -> None:
    with pytest.raises(InsufficientStockError):
        sale_processor.process(standard_item, SaleUnit.CONTAINER, 6)

    assert standard_item.container_count == 5
    assert standard_item.version == 1


def test_sale_price_is_frozen_at_sale_time(sale_processor, make_item) -> None:
    item = make_item(price_per_container=Decimal("50.00"))
    processed = sale_processor.process(item, SaleUnit.BASE_UNIT, 2)

    # A later price edit produces a new item; the record keeps its own price
    repriced = make_item(price_per_container=Decimal("80.00"))
    assert repriced.price_per_container == Decimal("80.00")
    assert processed.record.unit_price == Fraction(5)
    assert processed.record.total_amount == Fraction(10)


def test_tablet_price_of_a_three_tablet_strip_stays_exact(sale_processor, make_item) -> None:
    item = make_item(units_per_container=3, container_count=2)

    processed = sale_processor.process(item, SaleUnit.BASE_UNIT, 3)

    assert processed.record.unit_price == Fraction(100, 3)
    assert processed.record.total_amount == Fraction(100)


def test_notes_are_kept_on_the_record(sale_processor, standard_item) -> None:
    processed = sale_processor.process(standard_item, SaleUnit.CONTAINER, 1, notes="walk-in")
    assert processed.record.notes == "walk-in"


def test_attempt_moves_through_states(standard_item, fixed_now) -> None:
    attempt = SaleAttempt(item=standard_item, unit=SaleUnit.BASE_UNIT, quantity=3)
    assert attempt.state == SaleState.REQUESTED

    attempt.validate()
    assert attempt.state == SaleState.VALIDATED
    assert attempt.base_units == 3

    processed = attempt.commit(sale_id="s-1", sold_at=fixed_now)
    assert attempt.state == SaleState.COMMITTED
    assert processed.record.id == "s-1"


def test_failed_validation_moves_to_rejected(standard_item) -> None:
    attempt = SaleAttempt(item=standard_item, unit=SaleUnit.BASE_UNIT, quantity=0)

    with pytest.raises(InvalidQuantityError):
        attempt.validate()

    assert attempt.state == SaleState.REJECTED
    assert isinstance(attempt.error, InvalidQuantityError)
    assert attempt.new_quantity is None


def test_commit_requires_validation(standard_item, fixed_now) -> None:
    attempt = SaleAttempt(item=standard_item, unit=SaleUnit.BASE_UNIT, quantity=1)

    with pytest.raises(RuntimeError):
        attempt.commit(sale_id="s-1", sold_at=fixed_now)


def test_rejected_attempt_cannot_be_validated_again(standard_item) -> None:
    attempt = SaleAttempt(item=standard_item, unit=SaleUnit.OPAQUE, quantity=1)
    with pytest.raises(InvalidUnitError):
        attempt.validate()

    with pytest.raises(RuntimeError):
        attempt.validate()


def test_rejection_is_logged(sale_processor, standard_item, caplog) -> None:
    with caplog.at_level("WARNING"):
        with pytest.raises(InsufficientStockError):
            sale_processor.process(standard_item, SaleUnit.BASE_UNIT, 51)

    assert "Paracetamol 500mg" in caplog.text
    assert "rejected" in caplog.text
