"""Two-level quantity value object: whole containers plus loose base units."""

from dataclasses import dataclass

from src.common.exceptions.custom_exceptions import InsufficientStockError


@dataclass(frozen=True)  # Value objects are immutable
class QuantityState:
    """On-hand stock of one item, e.g. 4 full strips plus 7 loose tablets of 10-per-strip.

    ``loose_units`` are the tablets left in an opened strip, so there can never be
    a full container's worth of them.
    """

    container_count: int
    units_per_container: int
    loose_units: int = 0

    def __post_init__(self) -> None:
        """Post-initialization for validation."""
        for name in ("container_count", "units_per_container", "loose_units"):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, int):
                raise ValueError(f"{name} must be a whole number, got {value!r}.")
        if self.units_per_container <= 0:
            raise ValueError("Units per container must be positive.")
        if self.container_count < 0:
            raise ValueError("Container count cannot be negative.")
        if not 0 <= self.loose_units < self.units_per_container:
            raise ValueError(
                f"Loose units must be in [0, {self.units_per_container}), got {self.loose_units}."
            )

    @property
    def total_base_units(self) -> int:
        return total_base_units(self)


def total_base_units(state: QuantityState) -> int:
    """Full containers times their size, plus the loose units."""
    return state.container_count * state.units_per_container + state.loose_units


def apply_decrement(state: QuantityState, base_units_to_remove: int) -> QuantityState:
    """
    Returns the quantity left after removing ``base_units_to_remove`` base units.

    Loose units are used first, then whole containers; when the remainder is smaller
    than a container, one container is opened and what is left of it becomes the new
    loose units. All-or-nothing: raises InsufficientStockError without touching
    ``state`` if there is not enough stock.
    """
    if base_units_to_remove < 0:
        raise ValueError("Cannot remove a negative number of units.")

    available = total_base_units(state)
    if base_units_to_remove > available:
        raise InsufficientStockError(requested=base_units_to_remove, available=available)

    per_container = state.units_per_container
    containers = state.container_count
    loose = state.loose_units

    taken_from_loose = min(base_units_to_remove, loose)
    loose -= taken_from_loose
    to_remove = base_units_to_remove - taken_from_loose

    # Same result as consuming one container at a time, without looping per container
    full_containers, remainder = divmod(to_remove, per_container)
    containers -= full_containers
    if remainder:
        # Open a container; what it still holds becomes loose stock
        containers -= 1
        loose = per_container - remainder

    return QuantityState(container_count=containers, units_per_container=per_container, loose_units=loose)
