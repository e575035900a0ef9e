"""Per-account stock alert thresholds."""

from dataclasses import dataclass

from src.common.config.settings import settings


@dataclass(frozen=True)  # Value objects are immutable
class ThresholdConfig:
    """Stock thresholds in base units. ``critical_threshold`` is expected to be <= ``low_threshold``."""

    low_threshold: int
    critical_threshold: int
    expiry_alert_days: int = 30

    def __post_init__(self) -> None:
        if self.low_threshold < 0 or self.critical_threshold < 0:
            raise ValueError("Thresholds cannot be negative.")
        if self.expiry_alert_days < 0:
            raise ValueError("Expiry alert days cannot be negative.")

    @classmethod
    def defaults(cls) -> "ThresholdConfig":
        return cls(
            low_threshold=settings.LOW_STOCK_THRESHOLD,
            critical_threshold=settings.CRITICAL_STOCK_THRESHOLD,
            expiry_alert_days=settings.EXPIRY_ALERT_DAYS,
        )
