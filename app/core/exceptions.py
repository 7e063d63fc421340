# ================================
# CUSTOM EXCEPTIONS (core/exceptions.py)
# ================================

class AppException(Exception):
    """Base Exception für Application-spezifische Fehler"""

    def __init__(self, detail: str, status_code: int = 400, error_code: str = None):
        self.detail = detail
        self.status_code = status_code
        self.error_code = error_code
        super().__init__(detail)

class AuthenticationError(AppException):
    """Authentication-spezifische Fehler"""

    def __init__(self, detail: str = "Authentication failed", error_code: str = "AUTH_FAILED"):
        super().__init__(detail, 401, error_code)

# ================================
# RESERVATION LIFECYCLE ERRORS
# ================================

class DuplicateActiveReservation(AppException):
    """Customer already holds a pending/confirmed reservation for the property"""

    def __init__(self, detail: str = "You already have an active viewing scheduled for this property"):
        super().__init__(detail, 409, "DUPLICATE_ACTIVE_RESERVATION")

class PropertyUnassigned(AppException):
    def __init__(self, detail: str = "Property has no assigned agent"):
        super().__init__(detail, 400, "PROPERTY_UNASSIGNED")

class InvalidTransition(AppException):
    def __init__(self, from_status: str, to_status: str):
        self.from_status = from_status
        self.to_status = to_status
        super().__init__(
            f"Invalid status transition from {from_status} to {to_status}",
            409,
            "INVALID_TRANSITION"
        )

class MissingRejectionReason(AppException):
    def __init__(self, detail: str = "rejection_reason is required when rejecting a pending reservation"):
        super().__init__(detail, 422, "MISSING_REJECTION_REASON")

class Unauthorized(AppException):
    """Acting profile is not allowed to touch the resource"""

    def __init__(self, detail: str = "Access denied"):
        super().__init__(detail, 403, "UNAUTHORIZED")

class CannotDeletePending(AppException):
    def __init__(self, detail: str = "Cannot delete pending reservations"):
        super().__init__(detail, 409, "CANNOT_DELETE_PENDING")

class NotFound(AppException):
    def __init__(self, detail: str = "Resource not found"):
        super().__init__(detail, 404, "NOT_FOUND")

class StorageFailure(AppException):
    """Backend I/O failed on a primary write; nothing was applied"""

    def __init__(self, detail: str = "Storage backend failure"):
        super().__init__(detail, 503, "STORAGE_FAILURE")

class NoUnitsAvailable(AppException):
    def __init__(self, detail: str = "No units available for this property"):
        super().__init__(detail, 409, "NO_UNITS_AVAILABLE")

class ConcurrentModification(AppException):
    """Row changed between read and compare-and-swap write"""

    def __init__(self, detail: str = "Resource was modified concurrently, please retry"):
        super().__init__(detail, 409, "CONCURRENT_MODIFICATION")

class InventoryOutOfBounds(AppException):
    def __init__(self, units_available: int, units_total: int):
        super().__init__(
            f"units_available must be between 0 and {units_total}, got {units_available}",
            422,
            "INVENTORY_OUT_OF_BOUNDS"
        )

class InventoryNotTracked(AppException):
    def __init__(self, detail: str = "Property does not track units; set units_total to start tracking"):
        super().__init__(detail, 422, "INVENTORY_NOT_TRACKED")
