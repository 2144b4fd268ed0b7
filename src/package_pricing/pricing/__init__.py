"""Pricing subpackage - default margin calculator and rounding strategies."""
from .margin_calculator import calculate_price, margin_unit_price, PriceBreakdown
from .rounding import round_price, format_price, register_strategy, STRATEGIES

__all__ = [
    'calculate_price', 'margin_unit_price', 'PriceBreakdown',
    'round_price', 'format_price', 'register_strategy', 'STRATEGIES',
]
