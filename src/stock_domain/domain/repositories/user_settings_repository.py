# src/stock_domain/domain/repositories/user_settings_repository.py
"""Per-account settings repository interface."""
from abc import ABC, abstractmethod
from typing import Optional

from ..entities.threshold_config import ThresholdConfig


class IUserSettingsRepository(ABC):
    @abstractmethod
    def create_tables(self) -> None:
        """Creates the settings table if it does not exist."""
        pass

    @abstractmethod
    def get_thresholds(self, owner_id: str) -> Optional[ThresholdConfig]:
        """Retrieves an account's stock thresholds, or None when the account never set them."""
        pass

    @abstractmethod
    def save_thresholds(self, owner_id: str, thresholds: ThresholdConfig) -> None:
        """Saves or updates an account's stock thresholds."""
        pass
