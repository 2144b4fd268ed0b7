"""
Package Pricing

Resolves the sale price of a bundled studio package. A manually curated
personalized price is used when its duration assumption still holds;
otherwise the package is recalculated from item cost, expense and margin
configuration and charm-rounded for presentation.
"""

__version__ = "1.0.0"
