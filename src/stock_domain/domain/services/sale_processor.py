# src/stock_domain/domain/services/sale_processor.py
"""Domain service that turns a sale request into a new stock state and a sale record."""

import logging
import uuid
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from fractions import Fraction
from typing import Callable

from src.common.exceptions.custom_exceptions import (
    InsufficientStockError,
    InvalidQuantityError,
    InvalidUnitError,
    SaleError,
)
from src.common.utils.date_utils import utc_now
from ..entities.quantity import QuantityState, apply_decrement
from ..entities.sale_record import SaleRecord
from ..entities.stock_item import SaleUnit, StockItem
from . import unit_converter

logger = logging.getLogger(__name__)


class SaleState(str, Enum):
    REQUESTED = "requested"
    VALIDATED = "validated"
    COMMITTED = "committed"
    REJECTED = "rejected"


@dataclass
class SaleAttempt:
    """One pass through Requested -> Validated -> Committed (or Rejected).

    Nothing here touches the item passed in; validation works on a dry-run copy of
    the quantity, and commit hands back new values for the caller to persist.
    """

    item: StockItem
    unit: SaleUnit
    quantity: int
    state: SaleState = SaleState.REQUESTED
    base_units: int | None = None
    unit_price: Fraction | None = None
    new_quantity: QuantityState | None = None
    error: SaleError | None = None

    def validate(self) -> None:
        if self.state != SaleState.REQUESTED:
            raise RuntimeError(f"Cannot validate a sale in state {self.state.value}")
        try:
            # bool is an int subclass but never a meaningful quantity
            if isinstance(self.quantity, bool) or not isinstance(self.quantity, int) or self.quantity <= 0:
                raise InvalidQuantityError(self.quantity)
            try:
                self.unit = SaleUnit(self.unit)
            except ValueError:
                raise InvalidUnitError(self.unit, self.item.category)

            self.base_units = unit_converter.to_base_units(self.item, self.unit, self.quantity)
            self.unit_price = unit_converter.unit_price(self.item, self.unit)
            try:
                self.new_quantity = apply_decrement(self.item.quantity, self.base_units)
            except InsufficientStockError:
                label = unit_converter.unit_label(self.item, self.unit)
                raise InsufficientStockError(
                    requested=self.quantity,
                    available=unit_converter.available_in_unit(self.item, self.unit),
                    unit_label=label,
                )
        except SaleError as e:
            self.reject(e)
            raise
        self.state = SaleState.VALIDATED

    def reject(self, error: SaleError) -> None:
        self.state = SaleState.REJECTED
        self.error = error
        self.base_units = None
        self.unit_price = None
        self.new_quantity = None

    def commit(self, sale_id: str, sold_at: datetime, notes: str | None = None) -> "ProcessedSale":
        if self.state != SaleState.VALIDATED:
            raise RuntimeError(f"Cannot commit a sale in state {self.state.value}")
        new_item = self.item.with_quantity(self.new_quantity, updated_at=sold_at)
        record = SaleRecord(
            id=sale_id,
            owner_id=self.item.owner_id,
            item_id=self.item.id,
            item_name=self.item.name,
            unit=self.unit,
            unit_label=unit_converter.unit_label(self.item, self.unit),
            quantity=self.quantity,
            base_units=self.base_units,
            unit_price=self.unit_price,
            sold_at=sold_at,
            notes=notes,
        )
        self.state = SaleState.COMMITTED
        return ProcessedSale(item=new_item, record=record)


@dataclass(frozen=True)
class ProcessedSale:
    item: StockItem
    record: SaleRecord


class SaleProcessor:
    """Validates a sale against an item and produces its post-sale state."""

    def __init__(
        self,
        clock: Callable[[], datetime] = utc_now,
        id_factory: Callable[[], str] = lambda: uuid.uuid4().hex,
    ) -> None:
        self.clock = clock
        self.id_factory = id_factory

    def process(self, item: StockItem, unit: SaleUnit, quantity: int, notes: str | None = None) -> ProcessedSale:
        """
        Runs a full sale attempt against ``item``.

        Returns the updated item and the sale record on success. Raises
        InvalidQuantityError, InvalidUnitError or InsufficientStockError otherwise;
        in that case nothing was changed.
        """
        attempt = SaleAttempt(item=item, unit=unit, quantity=quantity)
        try:
            attempt.validate()
        except SaleError as e:
            logger.warning(f"Sale of {quantity!r} {getattr(unit, 'value', unit)} of '{item.name}' rejected: {e}")
            raise
        return attempt.commit(sale_id=self.id_factory(), sold_at=self.clock(), notes=notes)
