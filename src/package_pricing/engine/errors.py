"""
Pricing errors.

Every failure is fatal to the pricing call that raised it. Exceptions coming
from the margin calculator or the rounder are not wrapped: they propagate
to the caller unchanged.
"""


class PricingError(Exception):
    """Base class for errors raised by the package pricing engine."""


class ClassificationNotFound(PricingError, LookupError):
    """A line item references an item id that is not in the catalog."""

    def __init__(self, item_id: str):
        self.item_id = item_id
        super().__init__(f"Billing classification not found for item '{item_id}'")


class InvalidInput(PricingError, ValueError):
    """An input value would produce a negative or meaningless price."""
