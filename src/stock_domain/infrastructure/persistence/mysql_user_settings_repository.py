# src/stock_domain/infrastructure/persistence/mysql_user_settings_repository.py
"""MySQL implementation of the per-account settings repository."""

import logging
from typing import Optional

import mysql.connector
from mysql.connector import Error

from src.common.config.settings import settings
from src.common.exceptions.custom_exceptions import DatabaseError
from src.stock_domain.domain.entities.threshold_config import ThresholdConfig
from src.stock_domain.domain.repositories.user_settings_repository import IUserSettingsRepository

logger = logging.getLogger(__name__)


class MySQLUserSettingsRepository(IUserSettingsRepository):
    """Stores stock thresholds per account in psl_user_settings."""

    def __init__(self) -> None:
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
                    autocommit=False,
                    charset="utf8mb4",
                    use_unicode=True,
                )
            except Error as e:
                raise DatabaseError(f"Failed to connect to MySQL: {e}", original_exception=e)
        return self._connection

    def create_tables(self) -> None:
        create_settings_table_query = """
        CREATE TABLE IF NOT EXISTS psl_user_settings (
            owner_id VARCHAR(64) PRIMARY KEY,
            low_stock_threshold INT UNSIGNED NOT NULL,
            critical_stock_threshold INT UNSIGNED NOT NULL,
            expiry_alert_days INT UNSIGNED NOT NULL,
            updated_at DATETIME DEFAULT CURRENT_TIMESTAMP ON UPDATE CURRENT_TIMESTAMP
        ) ENGINE=InnoDB DEFAULT CHARSET=utf8mb4;
        """
        conn = self._get_connection()
        cursor = conn.cursor()
        try:
            cursor.execute(create_settings_table_query)
            conn.commit()
            logger.info("PSL user settings table checked/created.")
        except Error as e:
            conn.rollback()
            raise DatabaseError(f"Error creating PSL user settings table: {e}", original_exception=e)
        finally:
            cursor.close()

    def get_thresholds(self, owner_id: str) -> Optional[ThresholdConfig]:
        conn = self._get_connection()
        cursor = conn.cursor(dictionary=True)
        try:
            cursor.execute(
                """
                SELECT low_stock_threshold, critical_stock_threshold, expiry_alert_days
                FROM psl_user_settings
                WHERE owner_id = %s
                """,
                (owner_id,),
            )
            row = cursor.fetchone()
            conn.commit()  # ends the read snapshot
        except Error as e:
            raise DatabaseError(f"Error fetching settings for owner {owner_id}: {e}", original_exception=e)
        finally:
            cursor.close()
        if not row:
            return None
        return ThresholdConfig(
            low_threshold=row["low_stock_threshold"],
            critical_threshold=row["critical_stock_threshold"],
            expiry_alert_days=row["expiry_alert_days"],
        )

    def save_thresholds(self, owner_id: str, thresholds: ThresholdConfig) -> None:
        conn = self._get_connection()
        cursor = conn.cursor()
        upsert_query = """
        INSERT INTO psl_user_settings (owner_id, low_stock_threshold, critical_stock_threshold, expiry_alert_days)
        VALUES (%s, %s, %s, %s)
        ON DUPLICATE KEY UPDATE
        low_stock_threshold = VALUES(low_stock_threshold),
        critical_stock_threshold = VALUES(critical_stock_threshold),
        expiry_alert_days = VALUES(expiry_alert_days)
        """
        params = (owner_id, thresholds.low_threshold, thresholds.critical_threshold, thresholds.expiry_alert_days)
        try:
            cursor.execute(upsert_query, params)
            conn.commit()
            logger.info(f"Saved stock thresholds for owner {owner_id}")
        except Error as e:
            conn.rollback()
            raise DatabaseError(f"Error saving settings for owner {owner_id}: {e}", original_exception=e)
        finally:
            cursor.close()

    def __del__(self) -> None:
        """Closes the database connection when the object is destroyed."""
        if self._connection and self._connection.is_connected():
            self._connection.close()
