# src/stock_domain/domain/repositories/stock_item_repository.py
"""Stock item and sales repository interface."""
from abc import ABC, abstractmethod
from datetime import datetime

from ..entities.quantity import QuantityState
from ..entities.sale_record import SaleRecord
from ..entities.stock_item import StockItem


class IStockItemRepository(ABC):

    @abstractmethod
    def create_tables(self) -> None:
        """Creates the backing tables if they do not exist."""
        pass

    @abstractmethod
    def read_item(self, item_id: str) -> StockItem:
        """Retrieves a stock item by id. Raises ItemNotFoundError if it does not exist."""
        pass

    @abstractmethod
    def list_items(self, owner_id: str) -> list[StockItem]:
        """Retrieves all stock items of an account, ordered by name."""
        pass

    @abstractmethod
    def insert_item(self, item: StockItem) -> StockItem:
        """Stores a new stock item."""
        pass

    @abstractmethod
    def write_item(self, item_id: str, new_state: QuantityState, expected_version: int) -> None:
        """
        Writes new stock counts for an item, only if its stored version is still
        ``expected_version``. Raises VersionConflictError otherwise.
        """
        pass

    @abstractmethod
    def replace_item(self, item: StockItem, expected_version: int) -> StockItem:
        """Replaces every field of an item (manual edit), conditioned on ``expected_version``."""
        pass

    @abstractmethod
    def delete_item(self, item_id: str) -> None:
        """Deletes an item together with its sale records."""
        pass

    @abstractmethod
    def append_sale_record(self, record: SaleRecord) -> None:
        """Appends a sale record."""
        pass

    @abstractmethod
    def count_sale_records(self, item_id: str) -> int:
        """Number of sale records referencing an item."""
        pass

    @abstractmethod
    def list_sale_records(
        self, owner_id: str, start: datetime | None = None, end: datetime | None = None
    ) -> list[SaleRecord]:
        """Retrieves sale records of an account with ``start <= sold_at < end``, newest first."""
        pass
