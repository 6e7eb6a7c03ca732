# Overview: Exception taxonomy shared by the store lifecycle, ledger and reconciliation services.


class StockError(Exception):
    """Base class for errors raised by the offline stock core."""
    status_code = 400

    def __init__(self, message: str, details: dict | None = None):
        super().__init__(message)
        self.details = details or {}


class ValidationError(StockError):
    """Input rejected before any write (empty cart, missing field, quantity over stock)."""


class NotFoundError(StockError):
    """Referenced row does not exist."""
    status_code = 404


class MigrationError(StockError):
    """Schema upgrade failed; the store is in an unknown shape and startup must stop."""
    status_code = 500


class ReconciliationError(StockError):
    """
    A list transfer or restock accumulation failed on some row.

    The whole call was rolled back, so re-running it after inspection is safe.
    """
    status_code = 409
