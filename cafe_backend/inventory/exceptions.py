# inventory/exceptions.py

"""
INVENTORY SERVICE ERRORS

Shortages are NOT errors: a deduction that drives stock negative is recorded
and reported. These exceptions cover invalid requests only.
"""


class InventoryError(Exception):
    """Base exception for inventory service failures."""


class StockAdjustmentError(InventoryError):
    """Raised when a stock adjustment request is invalid."""


class UnitConversionError(InventoryError):
    """Raised for unmatched unit pairs when strict conversion is enabled."""
