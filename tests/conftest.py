# tests/conftest.py
from datetime import datetime
from decimal import Decimal
from unittest.mock import Mock

import pytest
import pytz

from src.common.config.settings import settings
from src.reporting_domain.application.report_service import ReportApplicationService
from src.stock_domain.application.inventory_service import InventoryApplicationService
from src.stock_domain.application.sale_service import SaleApplicationService
from src.stock_domain.domain.entities.stock_item import ItemCategory, StockItem
from src.stock_domain.domain.services.sale_processor import SaleProcessor
from src.stock_domain.infrastructure.persistence.mysql_stock_item_repository import MySQLStockItemRepository
from src.stock_domain.infrastructure.persistence.mysql_user_settings_repository import (
    MySQLUserSettingsRepository,
)

FIXED_NOW = datetime(2024, 3, 15, 10, 30, 0, tzinfo=pytz.utc)


@pytest.fixture(autouse=True)
def mock_settings_defaults(mocker) -> None:
    """Pins the settings the domain reads so tests do not depend on the environment."""
    mocker.patch.object(settings, "LOW_STOCK_THRESHOLD", 10)
    mocker.patch.object(settings, "CRITICAL_STOCK_THRESHOLD", 5)
    mocker.patch.object(settings, "EXPIRY_ALERT_DAYS", 30)
    mocker.patch.object(settings, "TIMEZONE", "Asia/Kolkata")
    mocker.patch.object(settings, "CURRENCY", "INR")
    mocker.patch.object(settings, "SALE_MAX_ATTEMPTS", 3)


@pytest.fixture
def fixed_now() -> datetime:
    return FIXED_NOW


@pytest.fixture
def make_item():
    """Factory for stock items with sensible defaults; override any field by keyword."""

    def _make(**overrides) -> StockItem:
        fields = {
            "id": "med-1",
            "owner_id": "shop-1",
            "name": "Paracetamol 500mg",
            "category": ItemCategory.STANDARD,
            "container_count": 5,
            "units_per_container": 10,
            "loose_units": 0,
            "price_per_container": Decimal("100.00"),
            "created_at": FIXED_NOW,
            "updated_at": FIXED_NOW,
        }
        fields.update(overrides)
        return StockItem(**fields)

    return _make


@pytest.fixture
def standard_item(make_item) -> StockItem:
    """5 strips of 10 tablets at 100.00 per strip."""
    return make_item()


@pytest.fixture
def opaque_item(make_item) -> StockItem:
    """3 bottles of cough syrup, sold only by the bottle."""
    return make_item(
        id="syr-1",
        name="Cough Syrup 100ml",
        category=ItemCategory.OPAQUE,
        container_count=3,
        units_per_container=1,
        price_per_container=Decimal("85.50"),
        container_label="bottle",
        base_unit_label="bottle",
    )


@pytest.fixture
def sale_processor() -> SaleProcessor:
    """Processor with a fixed clock and predictable sale ids."""
    counter = iter(range(1, 1000))
    return SaleProcessor(clock=lambda: FIXED_NOW, id_factory=lambda: f"sale-{next(counter)}")


@pytest.fixture
def mock_stock_repository() -> Mock:
    """Mock for MySQLStockItemRepository."""
    return Mock(spec=MySQLStockItemRepository)


@pytest.fixture
def mock_settings_repository() -> Mock:
    """Mock for MySQLUserSettingsRepository; accounts have no saved thresholds by default."""
    repo = Mock(spec=MySQLUserSettingsRepository)
    repo.get_thresholds.return_value = None
    return repo


@pytest.fixture
def sale_service(mock_stock_repository, mock_settings_repository, sale_processor) -> SaleApplicationService:
    return SaleApplicationService(
        stock_repo=mock_stock_repository, settings_repo=mock_settings_repository, processor=sale_processor
    )


@pytest.fixture
def inventory_service(mock_stock_repository, mock_settings_repository) -> InventoryApplicationService:
    return InventoryApplicationService(stock_repo=mock_stock_repository, settings_repo=mock_settings_repository)


@pytest.fixture
def report_service(mock_stock_repository, inventory_service) -> ReportApplicationService:
    return ReportApplicationService(stock_repo=mock_stock_repository, inventory_service=inventory_service)
