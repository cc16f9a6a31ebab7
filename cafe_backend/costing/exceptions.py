# costing/exceptions.py

"""
COSTING ERRORS

Only invalid requests are errors. Shortages and data gaps are reported in
the CostingReport, not raised.
"""

from recipes.exceptions import OrderPayloadError  # noqa: F401


class CostingError(Exception):
    """Base exception for order costing failures."""
