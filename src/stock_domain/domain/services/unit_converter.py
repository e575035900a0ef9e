# src/stock_domain/domain/services/unit_converter.py
"""Conversions between sale units, base units and unit prices."""

from fractions import Fraction

from src.common.exceptions.custom_exceptions import InvalidUnitError
from src.common.utils.money_utils import to_fraction
from ..entities.stock_item import VALID_UNITS, ItemCategory, SaleUnit, StockItem


def ensure_unit_allowed(item: StockItem, unit: SaleUnit) -> None:
    """Base units only exist for standard items; opaque units only for opaque ones."""
    if unit not in VALID_UNITS[item.category]:
        raise InvalidUnitError(unit, item.category)


def to_base_units(item: StockItem, unit: SaleUnit, quantity: int) -> int:
    """Number of base units that ``quantity`` of ``unit`` stands for."""
    ensure_unit_allowed(item, unit)
    if unit == SaleUnit.CONTAINER:
        return quantity * item.units_per_container
    # BASE_UNIT on a standard item, or OPAQUE where one unit is the whole item
    return quantity


def unit_price(item: StockItem, unit: SaleUnit) -> Fraction:
    """Price of one ``unit``, derived from the container price on every call."""
    ensure_unit_allowed(item, unit)
    price = to_fraction(item.price_per_container)
    if unit == SaleUnit.BASE_UNIT:
        return price / item.units_per_container
    return price


def unit_label(item: StockItem, unit: SaleUnit) -> str:
    if unit == SaleUnit.BASE_UNIT:
        return item.base_unit_label
    return item.container_label


def available_in_unit(item: StockItem, unit: SaleUnit) -> int:
    """How many whole ``unit``s the current stock can cover."""
    ensure_unit_allowed(item, unit)
    total = item.total_base_units
    if unit == SaleUnit.CONTAINER and item.category == ItemCategory.STANDARD:
        return total // item.units_per_container
    return total
