# src/stock_domain/infrastructure/persistence/mysql_stock_item_repository.py
"""MySQL implementation of the stock item repository."""

import logging
from datetime import datetime
from decimal import Decimal
from fractions import Fraction

import mysql.connector
from mysql.connector import Error

from src.common.config.settings import settings
from src.common.exceptions.custom_exceptions import (
    DatabaseError,
    ItemNotFoundError,
    VersionConflictError,
)
from src.common.utils.date_utils import format_datetime_for_db, parse_datetime_from_db, utc_now
from src.common.utils.money_utils import to_cents
from src.stock_domain.domain.entities.quantity import QuantityState
from src.stock_domain.domain.entities.sale_record import SaleRecord
from src.stock_domain.domain.entities.stock_item import ItemCategory, SaleUnit, StockItem
from src.stock_domain.domain.repositories.stock_item_repository import IStockItemRepository

logger = logging.getLogger(__name__)

ITEM_COLUMNS = (
    "id, owner_id, name, category, container_count, units_per_container, loose_units, "
    "price_per_container, declared_sale_unit, container_label, base_unit_label, expiry_date, "
    "batch_number, manufacturer, description, version, created_at, updated_at"
)

SALE_COLUMNS = (
    "id, owner_id, item_id, item_name, unit, unit_label, quantity, base_units, unit_price, "
    "total_amount, sold_at, notes"
)


def _row_to_item(row: dict) -> StockItem:
    return StockItem(
        id=row["id"],
        owner_id=row["owner_id"],
        name=row["name"],
        category=ItemCategory(row["category"]),
        container_count=row["container_count"],
        units_per_container=row["units_per_container"],
        loose_units=row["loose_units"],
        price_per_container=Decimal(row["price_per_container"]),
        declared_sale_unit=SaleUnit(row["declared_sale_unit"]),
        container_label=row["container_label"],
        base_unit_label=row["base_unit_label"],
        expiry_date=row["expiry_date"],
        batch_number=row["batch_number"],
        manufacturer=row["manufacturer"],
        description=row["description"],
        version=row["version"],
        created_at=parse_datetime_from_db(row["created_at"]),
        updated_at=parse_datetime_from_db(row["updated_at"]),
    )


def _row_to_sale(row: dict) -> SaleRecord:
    # unit_price is stored as exact rational text ("100/3"); total_amount is only a rounded copy
    return SaleRecord(
        id=row["id"],
        owner_id=row["owner_id"],
        item_id=row["item_id"],
        item_name=row["item_name"],
        unit=SaleUnit(row["unit"]),
        unit_label=row["unit_label"],
        quantity=row["quantity"],
        base_units=row["base_units"],
        unit_price=Fraction(row["unit_price"]),
        sold_at=parse_datetime_from_db(row["sold_at"]),
        notes=row["notes"],
    )


def _item_params(item: StockItem) -> tuple:
    return (
        item.owner_id,
        item.name,
        item.category.value,
        item.container_count,
        item.units_per_container,
        item.loose_units,
        item.price_per_container,
        item.declared_sale_unit.value,
        item.container_label,
        item.base_unit_label,
        item.expiry_date,
        item.batch_number,
        item.manufacturer,
        item.description,
    )


class MySQLStockItemRepository(IStockItemRepository):
    """MySQL implementation of the Stock Item Repository."""

    def __init__(self) -> None:
        """Initializes the repository."""
        self._connection = None

    def _get_connection(self):
        """Establishes or returns an active MySQL database connection."""
        if not self._connection or not self._connection.is_connected():
            try:
                self._connection = mysql.connector.connect(
                    host=settings.DB_HOST,
                    database=settings.DB_DATABASE,
                    user=settings.DB_USER,
                    password=settings.DB_PASSWORD,
                    autocommit=False,  # Stock writes rely on explicit transactions
                    charset="utf8mb4",
                    use_unicode=True,
                )
            except Error as e:
                raise DatabaseError(f"Failed to connect to MySQL: {e}", original_exception=e)
        return self._connection

    def create_tables(self) -> None:
        """Creates the stock item and sales tables with 'psl_' prefix."""
        create_items_table_query = """
        CREATE TABLE IF NOT EXISTS psl_stock_items (
            id VARCHAR(64) PRIMARY KEY,
            owner_id VARCHAR(64) NOT NULL,
            name VARCHAR(255) NOT NULL,
            category VARCHAR(20) NOT NULL,
            container_count INT UNSIGNED NOT NULL DEFAULT 0,
            units_per_container INT UNSIGNED NOT NULL,
            loose_units INT UNSIGNED NOT NULL DEFAULT 0,
            price_per_container DECIMAL(12, 2) NOT NULL,
            declared_sale_unit VARCHAR(20) NOT NULL,
            container_label VARCHAR(50) NOT NULL,
            base_unit_label VARCHAR(50) NOT NULL,
            expiry_date DATE,
            batch_number VARCHAR(100),
            manufacturer VARCHAR(255),
            description TEXT,
            version INT UNSIGNED NOT NULL DEFAULT 1,
            created_at DATETIME NOT NULL,
            updated_at DATETIME NOT NULL,
            CONSTRAINT chk_loose_units CHECK (loose_units < units_per_container),
            INDEX idx_owner_name (owner_id, name)
        ) ENGINE=InnoDB DEFAULT CHARSET=utf8mb4;
        """
        create_sales_table_query = """
        CREATE TABLE IF NOT EXISTS psl_sales (
            id VARCHAR(64) PRIMARY KEY,
            owner_id VARCHAR(64) NOT NULL,
            item_id VARCHAR(64) NOT NULL,
            item_name VARCHAR(255) NOT NULL,
            unit VARCHAR(20) NOT NULL,
            unit_label VARCHAR(50) NOT NULL,
            quantity INT UNSIGNED NOT NULL,
            base_units INT UNSIGNED NOT NULL,
            unit_price VARCHAR(64) NOT NULL,
            total_amount DECIMAL(14, 2) NOT NULL,
            sold_at DATETIME NOT NULL,
            notes TEXT,
            INDEX idx_owner_sold_at (owner_id, sold_at),
            CONSTRAINT fk_sales_item FOREIGN KEY (item_id) REFERENCES psl_stock_items (id) ON DELETE CASCADE
        ) ENGINE=InnoDB DEFAULT CHARSET=utf8mb4;
        """
        conn = self._get_connection()
        cursor = conn.cursor()
        try:
            cursor.execute(create_items_table_query)
            cursor.execute(create_sales_table_query)
            conn.commit()
            logger.info("PSL stock item and sales tables checked/created.")
        except Error as e:
            conn.rollback()
            raise DatabaseError(f"Error creating PSL tables: {e}", original_exception=e)
        finally:
            cursor.close()

    def read_item(self, item_id: str) -> StockItem:
        """Retrieves a stock item by id."""
        conn = self._get_connection()
        cursor = conn.cursor(dictionary=True)
        try:
            cursor.execute(f"SELECT {ITEM_COLUMNS} FROM psl_stock_items WHERE id = %s", (item_id,))
            row = cursor.fetchone()
            conn.commit()  # ends the read snapshot
        except Error as e:
            raise DatabaseError(f"Error fetching stock item {item_id}: {e}", original_exception=e)
        finally:
            cursor.close()
        if not row:
            raise ItemNotFoundError(item_id)
        return _row_to_item(row)

    def list_items(self, owner_id: str) -> list[StockItem]:
        """Retrieves all stock items of an account, ordered by name."""
        conn = self._get_connection()
        cursor = conn.cursor(dictionary=True)
        try:
            cursor.execute(
                f"SELECT {ITEM_COLUMNS} FROM psl_stock_items WHERE owner_id = %s ORDER BY name", (owner_id,)
            )
            rows = cursor.fetchall()
            conn.commit()
            return [_row_to_item(row) for row in rows]
        except Error as e:
            raise DatabaseError(f"Error fetching stock items for owner {owner_id}: {e}", original_exception=e)
        finally:
            cursor.close()

    def insert_item(self, item: StockItem) -> StockItem:
        """Stores a new stock item."""
        conn = self._get_connection()
        cursor = conn.cursor()
        insert_query = f"""
        INSERT INTO psl_stock_items ({ITEM_COLUMNS})
        VALUES (%s, %s, %s, %s, %s, %s, %s, %s, %s, %s, %s, %s, %s, %s, %s, %s, %s, %s)
        """
        params = (
            (item.id,)
            + _item_params(item)
            + (item.version, format_datetime_for_db(item.created_at), format_datetime_for_db(item.updated_at))
        )
        try:
            cursor.execute(insert_query, params)
            conn.commit()
            logger.info(f"Stored stock item '{item.name}' ({item.id})")
            return item
        except Error as e:
            conn.rollback()
            raise DatabaseError(f"Error saving stock item {item.name}: {e}", original_exception=e)
        finally:
            cursor.close()

    def _raise_for_missed_update(self, conn, cursor, item_id: str, expected_version: int) -> None:
        """Called when a versioned UPDATE matched no rows: the item is either gone or changed."""
        cursor.execute("SELECT version FROM psl_stock_items WHERE id = %s", (item_id,))
        row = cursor.fetchone()
        conn.rollback()
        if not row:
            raise ItemNotFoundError(item_id)
        raise VersionConflictError(item_id, expected_version)

    def write_item(self, item_id: str, new_state: QuantityState, expected_version: int) -> None:
        """Writes new stock counts, conditioned on the version read before the sale."""
        conn = self._get_connection()
        cursor = conn.cursor()
        update_query = """
        UPDATE psl_stock_items
        SET container_count = %s, loose_units = %s, version = version + 1, updated_at = %s
        WHERE id = %s AND version = %s AND units_per_container = %s
        """
        params = (
            new_state.container_count,
            new_state.loose_units,
            format_datetime_for_db(utc_now()),
            item_id,
            expected_version,
            new_state.units_per_container,
        )
        try:
            cursor.execute(update_query, params)
            if cursor.rowcount == 0:
                self._raise_for_missed_update(conn, cursor, item_id, expected_version)
            conn.commit()
            logger.debug(f"Stock item {item_id} updated from version {expected_version}")
        except Error as e:
            conn.rollback()
            raise DatabaseError(f"Error updating stock for item {item_id}: {e}", original_exception=e)
        finally:
            cursor.close()

    def replace_item(self, item: StockItem, expected_version: int) -> StockItem:
        """Replaces every editable field of an item, conditioned on ``expected_version``."""
        conn = self._get_connection()
        cursor = conn.cursor()
        update_query = """
        UPDATE psl_stock_items
        SET owner_id = %s, name = %s, category = %s, container_count = %s, units_per_container = %s,
            loose_units = %s, price_per_container = %s, declared_sale_unit = %s, container_label = %s,
            base_unit_label = %s, expiry_date = %s, batch_number = %s, manufacturer = %s, description = %s,
            version = version + 1, updated_at = %s
        WHERE id = %s AND version = %s
        """
        params = _item_params(item) + (format_datetime_for_db(item.updated_at), item.id, expected_version)
        try:
            cursor.execute(update_query, params)
            if cursor.rowcount == 0:
                self._raise_for_missed_update(conn, cursor, item.id, expected_version)
            conn.commit()
            logger.info(f"Stock item '{item.name}' ({item.id}) replaced")
            return item
        except Error as e:
            conn.rollback()
            raise DatabaseError(f"Error replacing stock item {item.id}: {e}", original_exception=e)
        finally:
            cursor.close()

    def delete_item(self, item_id: str) -> None:
        """Deletes an item and, with it, its sale records."""
        conn = self._get_connection()
        cursor = conn.cursor()
        try:
            cursor.execute("DELETE FROM psl_sales WHERE item_id = %s", (item_id,))
            cursor.execute("DELETE FROM psl_stock_items WHERE id = %s", (item_id,))
            if cursor.rowcount == 0:
                conn.rollback()
                raise ItemNotFoundError(item_id)
            conn.commit()
            logger.info(f"Stock item {item_id} deleted with its sales")
        except Error as e:
            conn.rollback()
            raise DatabaseError(f"Error deleting stock item {item_id}: {e}", original_exception=e)
        finally:
            cursor.close()

    def append_sale_record(self, record: SaleRecord) -> None:
        """Appends a sale record."""
        conn = self._get_connection()
        cursor = conn.cursor()
        insert_query = f"""
        INSERT INTO psl_sales ({SALE_COLUMNS})
        VALUES (%s, %s, %s, %s, %s, %s, %s, %s, %s, %s, %s, %s)
        """
        params = (
            record.id,
            record.owner_id,
            record.item_id,
            record.item_name,
            record.unit.value,
            record.unit_label,
            record.quantity,
            record.base_units,
            str(record.unit_price),
            to_cents(record.total_amount),
            format_datetime_for_db(record.sold_at),
            record.notes,
        )
        try:
            cursor.execute(insert_query, params)
            conn.commit()
        except Error as e:
            conn.rollback()
            raise DatabaseError(f"Error saving sale record {record.id}: {e}", original_exception=e)
        finally:
            cursor.close()

    def count_sale_records(self, item_id: str) -> int:
        """Number of sale records referencing an item."""
        conn = self._get_connection()
        cursor = conn.cursor()
        try:
            cursor.execute("SELECT COUNT(*) FROM psl_sales WHERE item_id = %s", (item_id,))
            row = cursor.fetchone()
            conn.commit()
            return row[0] if row else 0
        except Error as e:
            raise DatabaseError(f"Error counting sales for item {item_id}: {e}", original_exception=e)
        finally:
            cursor.close()

    def list_sale_records(
        self, owner_id: str, start: datetime | None = None, end: datetime | None = None
    ) -> list[SaleRecord]:
        """Retrieves sale records of an account in an optional [start, end) window, newest first."""
        conn = self._get_connection()
        cursor = conn.cursor(dictionary=True)

        conditions = ["owner_id = %s"]
        params: list = [owner_id]
        if start is not None:
            conditions.append("sold_at >= %s")
            params.append(format_datetime_for_db(start))
        if end is not None:
            conditions.append("sold_at < %s")
            params.append(format_datetime_for_db(end))

        query = f"SELECT {SALE_COLUMNS} FROM psl_sales WHERE {' AND '.join(conditions)} ORDER BY sold_at DESC"
        try:
            cursor.execute(query, tuple(params))
            rows = cursor.fetchall()
            conn.commit()
            return [_row_to_sale(row) for row in rows]
        except Error as e:
            raise DatabaseError(f"Error fetching sales for owner {owner_id}: {e}", original_exception=e)
        finally:
            cursor.close()

    def __del__(self) -> None:
        """Closes the database connection when the object is destroyed."""
        if self._connection and self._connection.is_connected():
            self._connection.close()
