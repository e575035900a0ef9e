# src/stock_domain/application/inventory_service.py
"""Application service for managing stock items and reading their stock levels."""

import logging
import uuid
from dataclasses import replace
from datetime import date, timedelta
from decimal import Decimal

from src.common.dtos.stock_dtos import ExpiringItemDTO, StockInfoDTO
from src.common.exceptions.custom_exceptions import ApplicationError
from src.common.utils.date_utils import days_until, local_today, utc_now
from src.stock_domain.domain.entities.stock_item import ItemCategory, SaleUnit, StockItem
from src.stock_domain.domain.entities.stock_status import StockStatus
from src.stock_domain.domain.entities.threshold_config import ThresholdConfig
from src.stock_domain.domain.repositories.stock_item_repository import IStockItemRepository
from src.stock_domain.domain.repositories.user_settings_repository import IUserSettingsRepository
from src.stock_domain.domain.services.stock_classifier import classify_item

logger = logging.getLogger(__name__)

# Fields a manual edit may not touch; they are owned by the store
PROTECTED_FIELDS = {"id", "owner_id", "version", "created_at", "updated_at"}


def resolve_thresholds(settings_repo: IUserSettingsRepository | None, owner_id: str) -> ThresholdConfig:
    """Account thresholds when set, otherwise the configured defaults."""
    if settings_repo is None:
        return ThresholdConfig.defaults()
    return settings_repo.get_thresholds(owner_id) or ThresholdConfig.defaults()


def to_stock_info(item: StockItem, status: StockStatus) -> StockInfoDTO:
    return StockInfoDTO(
        item_id=item.id,
        name=item.name,
        category=item.category.value,
        container_count=item.container_count,
        loose_units=item.loose_units,
        total_base_units=status.total_base_units,
        level=status.level.value,
        message=status.message,
    )


class InventoryApplicationService:
    """Manual stock management: adding, editing and deleting items, and stock level queries."""

    def __init__(self, stock_repo: IStockItemRepository, settings_repo: IUserSettingsRepository | None = None) -> None:
        self.stock_repo = stock_repo
        self.settings_repo = settings_repo

    def add_item(
        self,
        owner_id: str,
        name: str,
        category: ItemCategory | str,
        container_count: int,
        units_per_container: int,
        price_per_container: Decimal | str,
        loose_units: int = 0,
        **details,
    ) -> StockItem:
        """Creates a new stock item. ``details`` may carry labels, expiry date, batch number etc."""
        try:
            item = StockItem(
                id=uuid.uuid4().hex,
                owner_id=owner_id,
                name=name.strip(),
                category=ItemCategory(category),
                container_count=container_count,
                units_per_container=units_per_container,
                loose_units=loose_units,
                price_per_container=Decimal(price_per_container),
                **details,
            )
        except (ValueError, TypeError, ArithmeticError) as e:
            raise ApplicationError(f"Invalid stock item '{name}': {e}", original_exception=e)

        logger.info(f"Adding stock item '{item.name}' with {item.total_base_units} base units")
        return self.stock_repo.insert_item(item)

    def update_item(self, item_id: str, expected_version: int, **changes) -> StockItem:
        """
        Replaces an item's fields with the given values (manual edit form).

        The write only succeeds if the item is still at ``expected_version``.
        Changing units per container is refused once sales exist, because past
        sales were computed with the old ratio.
        """
        protected = PROTECTED_FIELDS.intersection(changes)
        if protected:
            raise ApplicationError(f"Fields cannot be edited: {', '.join(sorted(protected))}")

        current = self.stock_repo.read_item(item_id)

        new_ratio = changes.get("units_per_container", current.units_per_container)
        if new_ratio != current.units_per_container and self.stock_repo.count_sale_records(item_id) > 0:
            raise ApplicationError(
                f"Cannot change units per container of '{current.name}': sales already recorded against it"
            )

        try:
            if "category" in changes:
                changes["category"] = ItemCategory(changes["category"])
                if "declared_sale_unit" not in changes and changes["category"] != current.category:
                    changes["declared_sale_unit"] = None  # falls back to the category default
            if changes.get("declared_sale_unit") is not None:
                changes["declared_sale_unit"] = SaleUnit(changes["declared_sale_unit"])
            if "price_per_container" in changes:
                changes["price_per_container"] = Decimal(changes["price_per_container"])
            updated = replace(current, **changes, version=expected_version + 1, updated_at=utc_now())
        except (ValueError, TypeError, ArithmeticError) as e:
            raise ApplicationError(f"Invalid changes for '{current.name}': {e}", original_exception=e)

        return self.stock_repo.replace_item(updated, expected_version)

    def delete_item(self, item_id: str) -> None:
        """Deletes an item; its sale records go with it."""
        self.stock_repo.delete_item(item_id)

    def get_item(self, item_id: str) -> StockItem:
        return self.stock_repo.read_item(item_id)

    def get_thresholds(self, owner_id: str) -> ThresholdConfig:
        return resolve_thresholds(self.settings_repo, owner_id)

    def update_thresholds(
        self, owner_id: str, low_threshold: int, critical_threshold: int, expiry_alert_days: int | None = None
    ) -> ThresholdConfig:
        if self.settings_repo is None:
            raise ApplicationError("No settings store configured; thresholds cannot be saved")
        if critical_threshold > low_threshold:
            logger.warning(
                f"Critical threshold {critical_threshold} is above low threshold {low_threshold}; "
                "no item will ever be classified as low"
            )
        current = self.get_thresholds(owner_id)
        try:
            thresholds = ThresholdConfig(
                low_threshold=low_threshold,
                critical_threshold=critical_threshold,
                expiry_alert_days=current.expiry_alert_days if expiry_alert_days is None else expiry_alert_days,
            )
        except ValueError as e:
            raise ApplicationError(f"Invalid thresholds: {e}", original_exception=e)
        self.settings_repo.save_thresholds(owner_id, thresholds)
        return thresholds

    def get_stock_info(self, item_id: str) -> StockInfoDTO:
        item = self.stock_repo.read_item(item_id)
        return to_stock_info(item, classify_item(item, self.get_thresholds(item.owner_id)))

    def classify_stock(self, owner_id: str) -> list[tuple[StockItem, StockStatus]]:
        """Every item of an account paired with its stock level, using the account thresholds."""
        thresholds = self.get_thresholds(owner_id)
        return [(item, classify_item(item, thresholds)) for item in self.stock_repo.list_items(owner_id)]

    def list_stock(self, owner_id: str) -> list[StockInfoDTO]:
        """Stock level of every item of an account."""
        return [to_stock_info(item, status) for item, status in self.classify_stock(owner_id)]

    def get_low_stock_items(self, owner_id: str) -> list[StockInfoDTO]:
        """Items at low or critical level, out-of-stock ones included."""
        return [to_stock_info(item, status) for item, status in self.classify_stock(owner_id) if status.needs_restock]

    def get_out_of_stock_items(self, owner_id: str) -> list[StockInfoDTO]:
        return [to_stock_info(item, status) for item, status in self.classify_stock(owner_id) if status.is_out_of_stock]

    def get_expiring_items(self, owner_id: str, today: date | None = None) -> list[ExpiringItemDTO]:
        """Items expiring within the account's alert window, already expired ones first."""
        today = today or local_today()
        horizon = today + timedelta(days=self.get_thresholds(owner_id).expiry_alert_days)

        expiring = [
            ExpiringItemDTO(
                item_id=item.id,
                name=item.name,
                expiry_date=item.expiry_date,
                days_until_expiry=days_until(item.expiry_date, today),
                batch_number=item.batch_number,
            )
            for item in self.stock_repo.list_items(owner_id)
            if item.expiry_date is not None and item.expiry_date <= horizon
        ]
        return sorted(expiring, key=lambda e: e.expiry_date)
