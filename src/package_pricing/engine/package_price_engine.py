"""
Package Price Engine - Resolves the final sale price of a package.

Reconciles two sources of truth:
- The personalized price, curated by hand for the package's base hours
- A recalculation from item cost, expense and margin configuration

Decision policy:
1. Compare base hours with the event duration (both must be set to constrain)
2. Personalized price set and (hours match or no constraint) → use it verbatim
3. Otherwise recalculate from the line items and apply presentation rounding

The engine is a pure function of its inputs. It keeps no state between
calls and forwards collaborator exceptions unchanged.
"""
import logging
from typing import Callable, Iterable, Optional

from .errors import InvalidInput, PricingError
from .hours_match import HoursMatchResolver, normalize_hours
from .line_item_pricer import MarginCalculator, PackageLineItemPricer, sum_lines
from .models import (
    BILLING_HOUR,
    SOURCE_PERSONALIZED,
    SOURCE_RECALCULATED,
    Catalog,
    Package,
    PackageLineItem,
    PriceConfig,
    PriceResult,
)

logger = logging.getLogger(__name__)

# (price, strategy) -> rounded price
Rounder = Callable[[float, str], float]


class PackagePriceEngine:
    """
    Core engine that resolves a package price with full provenance.

    The margin calculator and the rounder are injectable; by default the
    engine uses pricing.margin_calculator and pricing.rounding.
    """

    def __init__(
        self,
        margin_calculator: Optional[MarginCalculator] = None,
        rounder: Optional[Rounder] = None,
        rounding_strategy: str = "charm",
    ):
        if margin_calculator is None:
            from ..pricing.margin_calculator import margin_unit_price
            margin_calculator = margin_unit_price
        if rounder is None:
            from ..pricing.rounding import round_price
            rounder = round_price

        self.rounder = rounder
        self.rounding_strategy = rounding_strategy
        self.hours_resolver = HoursMatchResolver()
        self.line_pricer = PackageLineItemPricer(margin_calculator)

    def uses_personalized_price(self, package: Package, duration_hours: Optional[float]) -> bool:
        """
        Whether price() will return the personalized price verbatim.

        Callers can check this before loading a catalog or building line
        items, since the personalized branch never reads them.
        """
        personalized_price = float(package.personalized_price or 0)
        if personalized_price <= 0:
            return False
        match = self.hours_resolver.resolve(package.base_hours, duration_hours)
        return match.hours_match or not match.constraint_set

    def price(
        self,
        package: Package,
        duration_hours: Optional[float],
        line_items: Iterable[PackageLineItem],
        catalog: Catalog,
        config: PriceConfig,
    ) -> PriceResult:
        """
        Resolve the final price of a package for an event.

        Args:
            package: Package with its personalized price and base hours
            duration_hours: Actual event duration (0 or None = unset)
            line_items: Items bundled in the package
            catalog: Catalog used to classify items as HOUR or SERVICE
            config: Margin configuration for recalculation

        Returns:
            PriceResult with the final price, its source and a trace
        """
        personalized_price = float(package.personalized_price or 0)
        if personalized_price < 0:
            raise InvalidInput(f"Personalized price of package '{package.id}' is negative ({personalized_price})")

        match = self.hours_resolver.resolve(package.base_hours, duration_hours)
        personalized_available = personalized_price > 0

        trace = []
        trace.append(("Package", f"Resolving price for package {package.id}", None))
        if personalized_available:
            trace.append(("Personalized Price", "Personalized price set", f"${personalized_price:,.2f}"))
        else:
            trace.append(("Personalized Price", "No personalized price set", None))

        if not match.constraint_set:
            trace.append((
                "Hours Check",
                "Base hours or event duration unset, no duration constraint",
                _hours_text(package.base_hours, duration_hours),
            ))
        elif match.hours_match:
            trace.append(("Hours Check", "Event duration matches base hours", _hours_text(package.base_hours, duration_hours)))
        else:
            trace.append(("Hours Check", "Event duration differs from base hours", _hours_text(package.base_hours, duration_hours)))

        if personalized_available and (match.hours_match or not match.constraint_set):
            result = PriceResult(
                final_price=personalized_price,
                base_price=personalized_price,
                recalculated_price=None,
                hours_match=match.hours_match,
                price_source=SOURCE_PERSONALIZED,
                constraint_set=match.constraint_set,
            )
            for step, desc, val in trace:
                result.add_trace(step, desc, val)
            result.add_trace("Final Price", "Using personalized price without rounding", f"${personalized_price:,.2f}")

            logger.debug("Package %s priced from personalized price %s", package.id, personalized_price)
            return result

        lines = self.line_pricer.price_lines(line_items, duration_hours, catalog, config)
        recalculated_price = sum_lines(lines)
        final_price = self.rounder(recalculated_price, self.rounding_strategy)
        if final_price < 0:
            raise PricingError(f"Rounder returned a negative price ({final_price}) for package '{package.id}'")

        result = PriceResult(
            final_price=final_price,
            base_price=personalized_price,
            recalculated_price=recalculated_price,
            hours_match=match.hours_match,
            price_source=SOURCE_RECALCULATED,
            constraint_set=match.constraint_set,
            lines=lines,
        )
        for step, desc, val in trace:
            result.add_trace(step, desc, val)

        for line in lines:
            result.add_trace(
                "Line",
                f"{line.item_id} ({line.billing_type}): ${line.unit_price:,.2f} × {line.quantity} × {line.multiplier:g}",
                f"${line.line_total:,.2f}",
            )
            if line.billing_type == BILLING_HOUR and normalize_hours(duration_hours) is None:
                result.add_warning("Event duration unset: hourly items priced for a single hour")

        result.add_trace("Recalculated", f"Sum of {len(lines)} line(s)", f"${recalculated_price:,.2f}")
        result.add_trace("Final Price", f"Rounded with '{self.rounding_strategy}' strategy", f"${final_price:,.2f}")

        logger.debug(
            "Package %s recalculated: %s -> %s (%s)",
            package.id, recalculated_price, final_price, self.rounding_strategy,
        )
        return result


def _hours_text(base_hours: Optional[float], duration_hours: Optional[float]) -> str:
    return f"base={base_hours}, event={duration_hours}"


def calculate_package_price(
    package: Package,
    duration_hours: Optional[float],
    line_items: Iterable[PackageLineItem],
    catalog: Catalog,
    config: PriceConfig,
    rounding_strategy: str = "charm",
) -> PriceResult:
    """Resolve a package price with the default calculator and rounder."""
    engine = PackagePriceEngine(rounding_strategy=rounding_strategy)
    return engine.price(package, duration_hours, line_items, catalog, config)
