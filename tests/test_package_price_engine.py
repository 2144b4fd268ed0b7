"""
Package price resolution: personalized price vs. recalculation.

Scenarios use a calculator that returns (cost + expense) × 1.3 and a charm
rounder that rounds up to the next hundred.
"""
import pytest

from conftest import make_catalog, simple_calculator, ceil_hundred_rounder
from package_pricing.engine import (
    PackagePriceEngine,
    calculate_package_price,
    ClassificationNotFound,
    InvalidInput,
    PricingError,
)
from package_pricing.engine.models import Package, PackageLineItem


def test_hours_match_returns_exact_personalized_price(engine, base_package, base_items, hourly_catalog, base_config):
    """Event 7h vs base 7h uses the personalized price, unrounded."""
    result = engine.price(base_package, 7, base_items, hourly_catalog, base_config)

    assert result.final_price == 18000
    assert result.base_price == 18000
    assert result.hours_match is True
    assert result.price_source == "personalized"
    assert result.recalculated_price is None


def test_hours_mismatch_recalculates_and_rounds(engine, base_package, base_items, hourly_catalog, base_config):
    """Event 8h vs base 7h: (1000 + 200) × 1.3 × 8 = 12480 → 12500."""
    result = engine.price(base_package, 8, base_items, hourly_catalog, base_config)

    assert result.recalculated_price == pytest.approx(12480)
    assert result.final_price == 12500
    assert result.hours_match is False
    assert result.price_source == "recalculated"
    assert result.base_price == 18000


def test_event_duration_unset_uses_personalized(engine, base_package, base_items, hourly_catalog, base_config):
    result = engine.price(base_package, None, base_items, hourly_catalog, base_config)

    assert result.final_price == 18000
    assert result.hours_match is False
    assert result.constraint_set is False
    assert result.price_source == "personalized"


def test_base_hours_unset_uses_personalized(engine, base_items, hourly_catalog, base_config):
    package = Package(id="test-package", personalized_price=18000, base_hours=None)
    result = engine.price(package, 7, base_items, hourly_catalog, base_config)

    assert result.final_price == 18000
    assert result.price_source == "personalized"


def test_no_personalized_price_recalculates_even_when_hours_match(engine, base_items, hourly_catalog, base_config):
    """(1000 + 200) × 1.3 × 7 = 10920 → 11000."""
    package = Package(id="test-package", personalized_price=0, base_hours=7)
    result = engine.price(package, 7, base_items, hourly_catalog, base_config)

    assert result.recalculated_price == pytest.approx(10920)
    assert result.final_price == 11000
    assert result.price_source == "recalculated"
    # hours_match reports the comparison, not which branch was taken
    assert result.hours_match is True
    assert result.base_price == 0


def test_service_item_ignores_duration(engine, base_package, base_items, service_catalog, base_config):
    """SERVICE lines are flat: (1000 + 200) × 1.3 = 1560 → 1600."""
    result = engine.price(base_package, 8, base_items, service_catalog, base_config)

    assert result.recalculated_price == pytest.approx(1560)
    assert result.final_price == 1600
    assert result.price_source == "recalculated"
    assert result.lines[0].multiplier == 1


@pytest.mark.parametrize("duration", [0, None])
def test_zero_duration_behaves_like_none(engine, base_package, base_items, hourly_catalog, base_config, duration):
    result = engine.price(base_package, duration, base_items, hourly_catalog, base_config)

    assert result.final_price == 18000
    assert result.price_source == "personalized"
    assert result.hours_match is False


@pytest.mark.parametrize("base_hours", [0, None])
def test_zero_base_hours_behaves_like_none(engine, base_items, hourly_catalog, base_config, base_hours):
    package = Package(id="test-package", personalized_price=18000, base_hours=base_hours)
    result = engine.price(package, 7, base_items, hourly_catalog, base_config)

    assert result.final_price == 18000
    assert result.price_source == "personalized"
    assert result.constraint_set is False


def test_personalized_branch_skips_collaborators(base_package, base_items, hourly_catalog, base_config):
    calls = []

    def calculator(*args):
        calls.append(("calculator", args))
        return 1.0

    def rounder(*args):
        calls.append(("rounder", args))
        return 1.0

    engine = PackagePriceEngine(margin_calculator=calculator, rounder=rounder)
    result = engine.price(base_package, 7, base_items, hourly_catalog, base_config)

    assert result.final_price == 18000
    assert calls == []


def test_personalized_price_is_not_rounded(engine, base_items, hourly_catalog, base_config):
    package = Package(id="test-package", personalized_price=17999.5, base_hours=7)
    result = engine.price(package, 7, base_items, hourly_catalog, base_config)

    assert result.final_price == 17999.5


def test_mixed_lines_sum_before_rounding(engine, base_config):
    catalog = make_catalog(("photo", "HOUR"), ("album", "SERVICE"))
    items = [
        PackageLineItem(item_id="photo", quantity=2, cost=500, expense=0),
        PackageLineItem(item_id="album", quantity=1, cost=3000, expense=400, utility_type="product"),
    ]
    package = Package(id="mixed", personalized_price=0)

    result = engine.price(package, 6, items, catalog, base_config)

    # 500 × 1.3 × 2 × 6 + 3400 × 1.3
    expected = 7800 + 4420
    assert result.recalculated_price == pytest.approx(expected)
    assert result.final_price == ceil_hundred_rounder(result.recalculated_price, "charm")
    assert [line.item_id for line in result.lines] == ["photo", "album"]


def test_unknown_item_raises(engine, base_package, base_items, base_config):
    catalog = make_catalog(("other-item", "HOUR"))

    with pytest.raises(ClassificationNotFound) as exc_info:
        engine.price(base_package, 8, base_items, catalog, base_config)
    assert exc_info.value.item_id == "item-1"


def test_unknown_item_ignored_when_personalized_applies(engine, base_package, base_items, base_config):
    catalog = make_catalog(("other-item", "HOUR"))
    result = engine.price(base_package, 7, base_items, catalog, base_config)

    assert result.price_source == "personalized"


def test_calculator_errors_propagate(base_package, base_items, hourly_catalog, base_config):
    def failing_calculator(*args):
        raise RuntimeError("margin config broken")

    engine = PackagePriceEngine(margin_calculator=failing_calculator, rounder=ceil_hundred_rounder)

    with pytest.raises(RuntimeError, match="margin config broken"):
        engine.price(base_package, 8, base_items, hourly_catalog, base_config)


def test_rounder_errors_propagate(base_package, base_items, hourly_catalog, base_config):
    def failing_rounder(price, strategy):
        raise ValueError("unknown strategy")

    engine = PackagePriceEngine(margin_calculator=simple_calculator, rounder=failing_rounder)

    with pytest.raises(ValueError, match="unknown strategy"):
        engine.price(base_package, 8, base_items, hourly_catalog, base_config)


def test_negative_rounded_price_is_rejected(base_package, base_items, hourly_catalog, base_config):
    engine = PackagePriceEngine(margin_calculator=simple_calculator, rounder=lambda price, strategy: -1.0)

    with pytest.raises(PricingError):
        engine.price(base_package, 8, base_items, hourly_catalog, base_config)


def test_negative_personalized_price_is_rejected(engine, base_items, hourly_catalog, base_config):
    package = Package(id="test-package", personalized_price=-100, base_hours=7)

    with pytest.raises(InvalidInput):
        engine.price(package, 7, base_items, hourly_catalog, base_config)


def test_unset_duration_recalculation_warns(engine, base_items, hourly_catalog, base_config):
    package = Package(id="test-package", personalized_price=0, base_hours=None)
    result = engine.price(package, None, base_items, hourly_catalog, base_config)

    assert result.recalculated_price == pytest.approx(1560)
    assert result.lines[0].multiplier == 1
    assert len(result.warnings) == 1
    assert "duration unset" in result.warnings[0]


def test_trace_records_decision(engine, base_package, base_items, hourly_catalog, base_config):
    result = engine.price(base_package, 8, base_items, hourly_catalog, base_config)
    text = result.get_trace_text()

    assert "Event duration differs from base hours" in text
    assert "Final Price" in text
    assert result.trace[-1].value == "$12,500.00"


def test_result_serializes(engine, base_package, base_items, hourly_catalog, base_config):
    data = engine.price(base_package, 8, base_items, hourly_catalog, base_config).to_dict()

    assert data["price_source"] == "recalculated"
    assert data["lines"][0]["billing_type"] == "HOUR"


def test_default_collaborators_end_to_end(base_package, base_items, hourly_catalog, base_config):
    """Default calculator: 1200 × 1.3 / 0.9 × 1.05 = 1820 per hour; 8h → 14560 → 14600."""
    result = calculate_package_price(base_package, 8, base_items, hourly_catalog, base_config)

    assert result.recalculated_price == pytest.approx(14560)
    assert result.final_price == 14600
    assert result.price_source == "recalculated"


def test_default_collaborators_with_rounding_disabled(base_package, base_items, hourly_catalog, base_config):
    result = calculate_package_price(
        base_package, 8, base_items, hourly_catalog, base_config, rounding_strategy="none"
    )

    assert result.final_price == result.recalculated_price


@pytest.mark.parametrize("personalized, base_hours, duration, expected", [
    (18000, 7, 7, True),
    (18000, 7, 8, False),
    (18000, 7, None, True),
    (18000, 0, 8, True),
    (0, 7, 7, False),
    (-5, None, None, False),
])
def test_uses_personalized_price_agrees_with_price(engine, base_items, hourly_catalog, base_config,
                                                   personalized, base_hours, duration, expected):
    package = Package(id="test-package", personalized_price=personalized, base_hours=base_hours)

    assert engine.uses_personalized_price(package, duration) is expected
    if personalized >= 0:
        result = engine.price(package, duration, base_items, hourly_catalog, base_config)
        assert (result.price_source == "personalized") is expected


def test_default_collaborators_without_personalized_price(base_items, hourly_catalog, base_config):
    """Default calculator, hours match but no personalized price: 1820 × 7 = 12740 → 12800."""
    package = Package(id="test-package", personalized_price=0, base_hours=7)
    result = calculate_package_price(package, 7, base_items, hourly_catalog, base_config)

    assert result.recalculated_price == pytest.approx(12740)
    assert result.final_price == 12800
    assert result.price_source == "recalculated"
    assert result.hours_match is True


def test_default_collaborators_service_item_is_flat(base_package, base_items, service_catalog, base_config):
    """Default calculator, SERVICE item at 8h: 1820 flat → 1900."""
    result = calculate_package_price(base_package, 8, base_items, service_catalog, base_config)

    assert result.recalculated_price == pytest.approx(1820)
    assert result.final_price == 1900
    assert result.price_source == "recalculated"
    assert result.lines[0].multiplier == 1
