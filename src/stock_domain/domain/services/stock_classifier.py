"""Maps on-hand stock to a good / low / critical level for display and reports."""

from ..entities.stock_item import ItemCategory, StockItem
from ..entities.stock_status import StockLevel, StockStatus
from ..entities.threshold_config import ThresholdConfig


def _count(n: int, label: str) -> str:
    return f"{n} {label}" if n == 1 else f"{n} {label}s"


def classify(
    total_base_units: int,
    low_threshold: int,
    critical_threshold: int,
    *,
    container_count: int | None = None,
    loose_units: int = 0,
    container_label: str = "strip",
    base_unit_label: str = "tablet",
) -> StockStatus:
    """
    Classifies a total base unit count against the two thresholds.

    The bands are: 0 is out of stock, up to ``critical_threshold`` is critical, up to
    ``low_threshold`` is low, anything above is good. If critical is set above low the
    low band is simply empty.
    """
    total = total_base_units

    if total == 0:
        return StockStatus(total, StockLevel.CRITICAL, "Out of stock")
    if total <= critical_threshold:
        return StockStatus(total, StockLevel.CRITICAL, f"Only {_count(total, base_unit_label)} left")
    if total <= low_threshold:
        return StockStatus(total, StockLevel.LOW, f"Low stock: {_count(total, base_unit_label)}")

    if container_count is None:
        message = f"{_count(total, base_unit_label)} available"
    elif loose_units > 0:
        message = f"{_count(container_count, container_label)} + {_count(loose_units, base_unit_label)}"
    else:
        message = f"{_count(container_count, container_label)} ({_count(total, base_unit_label)})"
    return StockStatus(total, StockLevel.GOOD, message)


def classify_item(item: StockItem, thresholds: ThresholdConfig) -> StockStatus:
    if item.category == ItemCategory.OPAQUE:
        # No sub-unit: count in the item's own label, without a breakdown
        return classify(
            item.total_base_units,
            thresholds.low_threshold,
            thresholds.critical_threshold,
            base_unit_label=item.container_label,
        )
    return classify(
        item.total_base_units,
        thresholds.low_threshold,
        thresholds.critical_threshold,
        container_count=item.container_count,
        loose_units=item.loose_units,
        container_label=item.container_label,
        base_unit_label=item.base_unit_label,
    )
