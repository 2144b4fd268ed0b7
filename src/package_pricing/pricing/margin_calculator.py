"""
Margin Price Calculator - Turns item cost and expense into a sale price.

Price build-up for one unit:
1. Total cost = cost + expense
2. Base profit = total cost × margin (service or product margin)
3. Subtotal = total cost + base profit
4. Sales commission is charged on the selling price: subtotal / (1 - commission)
5. Markup is applied on top: price with commission × (1 + markup)
"""
from dataclasses import dataclass, asdict

from ..engine.errors import InvalidInput
from ..engine.models import PriceConfig, normalize_utility_type


@dataclass
class PriceBreakdown:
    """Unit price build-up for a single catalog item."""
    cost: float
    expense: float
    base_profit: float
    subtotal: float
    commission_amount: float
    markup_amount: float
    final_price: float
    profit_pct: float
    commission_pct: float
    markup_pct: float
    real_profit: float
    real_profit_pct: float

    def to_dict(self) -> dict:
        return asdict(self)


def calculate_price(cost: float, expense: float, utility_type: str, config: PriceConfig) -> PriceBreakdown:
    """
    Calculate the unit sale price of an item.

    Args:
        cost: Direct cost of the item
        expense: Additional expenses attached to the item
        utility_type: "service" or "product", selects the profit margin
        config: Margin configuration

    Returns:
        PriceBreakdown with every intermediate amount
    """
    cost = float(cost or 0)
    expense = float(expense or 0)
    if cost < 0 or expense < 0:
        raise InvalidInput(f"Cost and expense must be non-negative (cost={cost}, expense={expense})")

    margin = config.margin_for(normalize_utility_type(utility_type))

    total_cost = cost + expense
    base_profit = total_cost * margin
    subtotal = total_cost + base_profit

    price_with_commission = subtotal / (1 - config.sales_commission)
    commission_amount = price_with_commission - subtotal

    final_price = price_with_commission * (1 + config.markup)
    markup_amount = final_price - price_with_commission

    real_profit = final_price - total_cost - commission_amount
    real_profit_pct = (real_profit / final_price * 100) if final_price > 0 else 0.0

    return PriceBreakdown(
        cost=cost,
        expense=expense,
        base_profit=base_profit,
        subtotal=subtotal,
        commission_amount=commission_amount,
        markup_amount=markup_amount,
        final_price=final_price,
        profit_pct=round(margin * 100, 2),
        commission_pct=round(config.sales_commission * 100, 2),
        markup_pct=round(config.markup * 100, 2),
        real_profit=real_profit,
        real_profit_pct=round(real_profit_pct, 2),
    )


def margin_unit_price(cost: float, expense: float, utility_type: str, config: PriceConfig) -> float:
    """Unit sale price only; the default calculator used by the engine."""
    return calculate_price(cost, expense, utility_type, config).final_price
