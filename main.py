# main.py
"""Main application entry point: wires the stock ledger and runs the scheduled daily report."""

import logging
import time
from datetime import datetime

import pytz
import schedule

from src.common.config.settings import settings
from src.common.dtos.report_dtos import DailyReportDTO
from src.common.exceptions.custom_exceptions import ApplicationError, DatabaseError
from src.common.logger_config import setup_logging
from src.common.utils.money_utils import format_money
from src.reporting_domain.application.report_service import ReportApplicationService
from src.stock_domain.application.inventory_service import InventoryApplicationService
from src.stock_domain.application.sale_service import SaleApplicationService
from src.stock_domain.infrastructure.persistence.mysql_stock_item_repository import MySQLStockItemRepository
from src.stock_domain.infrastructure.persistence.mysql_user_settings_repository import (
    MySQLUserSettingsRepository,
)

logger = logging.getLogger(__name__)


def setup_stock_dependencies() -> tuple[SaleApplicationService, InventoryApplicationService, ReportApplicationService]:
    """Initializes and wires up stock ledger dependencies."""
    stock_repository = MySQLStockItemRepository()
    settings_repository = MySQLUserSettingsRepository()
    sale_service = SaleApplicationService(stock_repo=stock_repository, settings_repo=settings_repository)
    inventory_service = InventoryApplicationService(stock_repo=stock_repository, settings_repo=settings_repository)
    report_service = ReportApplicationService(stock_repo=stock_repository, inventory_service=inventory_service)
    return sale_service, inventory_service, report_service


def create_stock_db_tables() -> None:
    """Creates tables for the stock ledger."""
    stock_repo = MySQLStockItemRepository()
    settings_repo = MySQLUserSettingsRepository()
    try:
        stock_repo.create_tables()
        settings_repo.create_tables()
        logger.info("✅ Database tables created/verified successfully")
    except DatabaseError as e:
        logger.error(f"❌ Error creating stock ledger database tables: {e}")
        raise
    finally:
        del stock_repo
        del settings_repo


def log_daily_report(report: DailyReportDTO) -> None:
    logger.info(
        f"Sales on {report.report_date}: {report.sale_count} sale(s), revenue {format_money(report.total_revenue)}"
    )
    for line in report.sales:
        logger.info(f"  {line.item_name}: {line.base_units_sold} unit(s), {format_money(line.value)}")
    for info in report.low_stock_items:
        logger.warning(f"  [{info.level}] {info.name}: {info.message}")
    for item in report.expiring_items:
        logger.warning(f"  {item.name} expires on {item.expiry_date} ({item.days_until_expiry} day(s))")


def run_daily_report(report_service: ReportApplicationService, owner_id: str) -> None:
    """Builds and logs the end-of-day report. Scheduled to run daily."""
    logger.info(f"--- Daily report started at {datetime.now().strftime('%Y-%m-%d %H:%M:%S')} ---")
    try:
        log_daily_report(report_service.build_daily_report(owner_id))
    except ApplicationError as e:
        logger.error(f"An error occurred while building the daily report: {e}")
    logger.info("--- Daily report finished ---")


if __name__ == "__main__":
    setup_logging()
    logger.info("Pharmacy stock ledger started.")

    create_stock_db_tables()
    _, _, report_service = setup_stock_dependencies()

    shop_tz = pytz.timezone(settings.TIMEZONE)
    logger.info(f"Scheduling the daily report for {settings.DAILY_REPORT_TIME} ({settings.TIMEZONE}).")
    schedule.every().day.at(settings.DAILY_REPORT_TIME, shop_tz).do(
        run_daily_report, report_service, settings.DEFAULT_OWNER_ID
    )

    while True:
        schedule.run_pending()
        time.sleep(1)  # Wait one second before checking again
