"""
Price Rounder - Presentation rounding strategies for computed prices.

Strategies are looked up by name so new presentation rules can be added
with register_strategy() without touching the engine. Every strategy is
deterministic and idempotent: round_price(round_price(x, s), s) == round_price(x, s).
"""
import math
from typing import Callable

from ..engine.errors import InvalidInput

# Prices are snapped to this many decimals before stepping, so float noise
# such as 1560.0000000000002 stays on its own step
_SNAP_DECIMALS = 6

NEAREST_PREFIX = "nearest_"


def _ceil_to(price: float, step: float) -> float:
    return float(math.ceil(round(price / step, _SNAP_DECIMALS)) * step)


def _nearest(price: float, step: float) -> float:
    return float(math.floor(round(price / step, _SNAP_DECIMALS) + 0.5) * step)


def charm(price: float) -> float:
    """Round up to the next 10 below 1,000 and to the next 100 from there on."""
    if price < 1000:
        return _ceil_to(price, 10)
    return _ceil_to(price, 100)


def hundred(price: float) -> float:
    return _ceil_to(price, 100)


def thousand(price: float) -> float:
    return _ceil_to(price, 1000)


def auto(price: float) -> float:
    """Hundreds for smaller prices, thousands from 10,000 upwards."""
    if price < 10000:
        return hundred(price)
    return thousand(price)


def no_rounding(price: float) -> float:
    return float(price)


STRATEGIES: dict[str, Callable[[float], float]] = {
    "charm": charm,
    "hundred": hundred,
    "thousand": thousand,
    "auto": auto,
    "none": no_rounding,
}


def register_strategy(name: str, func: Callable[[float], float]):
    """Register an additional named rounding strategy."""
    STRATEGIES[name.strip().lower()] = func


def get_strategy(strategy: str) -> Callable[[float], float]:
    """
    Resolve a strategy name to its rounding function.

    Besides the registered names, "nearest_<N>" rounds half-up to the
    nearest multiple of N (e.g. "nearest_50").
    """
    name = str(strategy).strip().lower()
    if name in STRATEGIES:
        return STRATEGIES[name]

    if name.startswith(NEAREST_PREFIX):
        try:
            step = float(name[len(NEAREST_PREFIX):])
        except ValueError:
            step = 0
        if step > 0:
            return lambda price: _nearest(price, step)

    raise InvalidInput(f"Unknown rounding strategy '{strategy}'")


def round_price(price: float, strategy: str = "charm") -> float:
    """Apply a presentation rounding strategy to a computed price."""
    price = float(price)
    if math.isnan(price) or price < 0:
        raise InvalidInput(f"Cannot round a negative or undefined price ({price})")
    return get_strategy(strategy)(price)


def format_price(price: float, symbol: str = "$", decimals: int = 0) -> str:
    """Format an already resolved price for display; never recomputes it."""
    return f"{symbol}{price:,.{decimals}f}"
