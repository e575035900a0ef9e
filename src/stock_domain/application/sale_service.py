# src/stock_domain/application/sale_service.py
"""Application service for selling stock."""

import logging
from dataclasses import dataclass

from src.common.config.settings import settings
from src.common.exceptions.custom_exceptions import ApplicationError, PersistenceError, VersionConflictError
from src.common.utils.money_utils import format_money
from src.stock_domain.application.inventory_service import resolve_thresholds
from src.stock_domain.domain.entities.sale_record import SaleRecord
from src.stock_domain.domain.entities.stock_item import SaleUnit, StockItem
from src.stock_domain.domain.entities.stock_status import StockStatus
from src.stock_domain.domain.repositories.stock_item_repository import IStockItemRepository
from src.stock_domain.domain.repositories.user_settings_repository import IUserSettingsRepository
from src.stock_domain.domain.services.sale_processor import SaleProcessor
from src.stock_domain.domain.services.stock_classifier import classify_item

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SaleOutcome:
    """Result of a completed sale.

    The stock change is always persisted when a SaleOutcome is returned. If storing
    the sale record failed afterwards, ``record_persisted`` is False and
    ``bookkeeping_error`` holds the cause so the caller can report it.
    """

    record: SaleRecord
    item: StockItem
    stock_status: StockStatus
    record_persisted: bool = True
    bookkeeping_error: PersistenceError | None = None


class SaleApplicationService:
    """Sells stock: reads the item, runs the sale, and writes the results back."""

    def __init__(
        self,
        stock_repo: IStockItemRepository,
        settings_repo: IUserSettingsRepository | None = None,
        processor: SaleProcessor | None = None,
    ) -> None:
        self.stock_repo = stock_repo
        self.settings_repo = settings_repo
        self.processor = processor or SaleProcessor()

    def sell(
        self, item_id: str, unit: SaleUnit | str | None = None, quantity: int = 1, notes: str | None = None
    ) -> SaleOutcome:
        """
        Sells ``quantity`` of ``unit`` of an item. ``unit=None`` sells in the item's declared unit.

        Raises:
            InvalidQuantityError, InvalidUnitError, InsufficientStockError: the sale was rejected.
            ItemNotFoundError: no such item.
            VersionConflictError: the item changed since it was read; re-run the whole sale.
            PersistenceError: the store could not be read or the stock could not be written.
        """
        item = self.stock_repo.read_item(item_id)
        sale_unit = item.declared_sale_unit if unit is None else unit

        processed = self.processor.process(item, sale_unit, quantity, notes=notes)

        # Stock first: correct counts matter more than a complete sales log
        self.stock_repo.write_item(item.id, processed.item.quantity, expected_version=item.version)

        record_persisted = True
        bookkeeping_error = None
        try:
            self.stock_repo.append_sale_record(processed.record)
        except PersistenceError as e:
            record_persisted = False
            bookkeeping_error = e
            logger.error(
                f"Stock for '{item.name}' was updated but sale record {processed.record.id} could not be saved: {e}"
            )

        status = classify_item(processed.item, resolve_thresholds(self.settings_repo, item.owner_id))
        logger.info(
            f"Sold {processed.record.quantity} {processed.record.unit_label}(s) of '{item.name}' "
            f"for {format_money(processed.record.total_amount)}. {status.message}"
        )
        if status.needs_restock:
            logger.warning(f"'{item.name}' needs restocking: {status.message}")
        return SaleOutcome(
            record=processed.record,
            item=processed.item,
            stock_status=status,
            record_persisted=record_persisted,
            bookkeeping_error=bookkeeping_error,
        )

    def sell_with_retry(
        self,
        item_id: str,
        unit: SaleUnit | str | None = None,
        quantity: int = 1,
        notes: str | None = None,
        max_attempts: int | None = None,
    ) -> SaleOutcome:
        """
        Calls sell, starting over from a fresh read each time another writer got in first.

        Only VersionConflictError is retried; the last one is re-raised when all
        attempts are used up.
        """
        if max_attempts is None:
            max_attempts = settings.SALE_MAX_ATTEMPTS
        if isinstance(max_attempts, bool) or not isinstance(max_attempts, int) or max_attempts < 1:
            raise ApplicationError(f"max_attempts must be a positive whole number, got {max_attempts!r}")
        for attempt in range(1, max_attempts + 1):
            try:
                return self.sell(item_id, unit, quantity, notes=notes)
            except VersionConflictError as e:
                if attempt == max_attempts:
                    logger.error(f"Giving up on sale of item {item_id} after {attempt} conflicting attempts")
                    raise
                logger.warning(f"Attempt {attempt} of {max_attempts} for item {item_id} conflicted, retrying: {e}")
