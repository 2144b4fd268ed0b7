"""
Package Line Item Pricer - Recalculates a package price from its items.

Each line is priced as unit price × quantity × duration multiplier, where
the multiplier is the event duration for hourly items and 1 for flat
services. Lines are summed left to right.
"""
import logging
import math
import numbers
from typing import Callable, Iterable, Optional

from .classification import BillingClassificationResolver
from .errors import InvalidInput
from .hours_match import normalize_hours
from .models import (
    BILLING_SERVICE,
    Catalog,
    LinePrice,
    PackageLineItem,
    PriceConfig,
    normalize_utility_type,
)

logger = logging.getLogger(__name__)

# (cost, expense, utility_type, config) -> unit price
MarginCalculator = Callable[[float, float, str, PriceConfig], float]


def _is_number(value) -> bool:
    return isinstance(value, numbers.Real) and math.isfinite(value)


def _validate_line(item: PackageLineItem):
    quantity = item.quantity
    if not _is_number(quantity) or int(quantity) != quantity or quantity < 1:
        raise InvalidInput(f"Quantity for item '{item.item_id}' must be an integer >= 1, got {item.quantity}")
    if not (_is_number(item.cost) and _is_number(item.expense)) or item.cost < 0 or item.expense < 0:
        raise InvalidInput(
            f"Cost and expense for item '{item.item_id}' must be finite and non-negative "
            f"(cost={item.cost}, expense={item.expense})"
        )


class PackageLineItemPricer:
    """Prices package lines with a margin calculator and sums them."""

    def __init__(self, margin_calculator: MarginCalculator):
        self.margin_calculator = margin_calculator

    def duration_multiplier(self, billing_type: str, duration_hours: Optional[float]) -> float:
        """
        Multiplier applied to a line's unit price.

        Flat services always use 1. Hourly items use the event duration,
        falling back to 1 when the duration is unset.
        """
        if billing_type == BILLING_SERVICE:
            return 1.0
        duration = normalize_hours(duration_hours)
        if duration is None:
            logger.warning("Event duration unset for an hourly item, using multiplier 1")
            return 1.0
        if duration < 0:
            raise InvalidInput(f"Event duration must be positive, got {duration}")
        return duration

    def price_lines(
        self,
        line_items: Iterable[PackageLineItem],
        duration_hours: Optional[float],
        catalog: Catalog,
        config: PriceConfig,
    ) -> list[LinePrice]:
        """Price every line; raises ClassificationNotFound for unknown items."""
        resolver = BillingClassificationResolver(catalog)
        lines = []

        for item in line_items:
            _validate_line(item)
            billing_type = resolver.classify(item.item_id)

            unit_price = self.margin_calculator(
                item.cost,
                item.expense,
                normalize_utility_type(item.utility_type),
                config,
            )
            multiplier = self.duration_multiplier(billing_type, duration_hours)

            lines.append(LinePrice(
                item_id=item.item_id,
                billing_type=billing_type,
                unit_price=unit_price,
                quantity=int(item.quantity),
                multiplier=multiplier,
                line_total=unit_price * item.quantity * multiplier,
            ))

        return lines

    def recalculate(
        self,
        line_items: Iterable[PackageLineItem],
        duration_hours: Optional[float],
        catalog: Catalog,
        config: PriceConfig,
    ) -> float:
        """Aggregate recalculated price of the package."""
        return sum_lines(self.price_lines(line_items, duration_hours, catalog, config))


def sum_lines(lines: list[LinePrice]) -> float:
    total = 0.0
    for line in lines:
        total += line.line_total
    return total
