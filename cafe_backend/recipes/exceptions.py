# recipes/exceptions.py


class RecipeError(Exception):
    """Base exception for recipe resolution failures."""


class OrderPayloadError(RecipeError, ValueError):
    """Raised when an order line payload is malformed."""
