"""Custom application-wide exceptions."""


class ApplicationError(Exception):
    """Base class for application-specific errors."""

    def __init__(
        self, message: str = "An application error occurred", original_exception: Exception | None = None
    ) -> None:
        super().__init__(message)
        self.original_exception = original_exception
        self.message = message

    def __str__(self) -> str:
        if self.original_exception:
            return f"{self.message} (Original error: {self.original_exception})"
        return self.message


class SaleError(ApplicationError):
    """Base class for reasons a sale request is rejected before any stock changes."""


class InvalidQuantityError(SaleError):
    """Raised when the requested quantity is zero, negative or not an integer."""

    def __init__(self, quantity: object) -> None:
        super().__init__(f"Invalid quantity: {quantity!r}. Quantity must be a positive whole number.")
        self.quantity = quantity


class InvalidUnitError(SaleError):
    """Raised when the requested sale unit makes no sense for the item's category."""

    def __init__(self, unit: object, category: object) -> None:
        unit_name = getattr(unit, "value", unit)
        category_name = getattr(category, "value", category)
        super().__init__(f"Unit '{unit_name}' cannot be used for '{category_name}' items")
        self.unit = unit
        self.category = category


class InsufficientStockError(SaleError):
    """Raised when a sale asks for more than is on hand. Carries the available amount."""

    def __init__(self, requested: int, available: int, unit_label: str = "unit") -> None:
        super().__init__(f"Insufficient stock. Requested: {requested}, available: {available} {unit_label}(s)")
        self.requested = requested
        self.available = available
        self.unit_label = unit_label


class ItemNotFoundError(ApplicationError):
    """Raised when a stock item does not exist in the store."""

    def __init__(self, item_id: str) -> None:
        super().__init__(f"Stock item not found: {item_id}")
        self.item_id = item_id


class VersionConflictError(ApplicationError):
    """Raised when a stock item was modified by someone else since it was read.

    Recoverable: the caller should re-read the item and retry the whole sale.
    """

    def __init__(self, item_id: str, expected_version: int) -> None:
        super().__init__(f"Stock item {item_id} was modified concurrently (expected version {expected_version})")
        self.item_id = item_id
        self.expected_version = expected_version


class PersistenceError(ApplicationError):
    """Exception raised when the backing store cannot be read or written."""

    def __init__(self, message: str = "Persistence operation failed", original_exception: Exception | None = None) -> None:
        super().__init__(message, original_exception)
        self.message = f"Persistence Error: {message}"


class DatabaseError(PersistenceError):
    """Exception raised for errors during database operations."""

    def __init__(self, message: str = "Database operation failed", original_exception: Exception | None = None) -> None:
        super().__init__(message, original_exception)
        self.message = f"Database Error: {message}"
