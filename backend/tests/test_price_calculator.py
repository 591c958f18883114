"""Tests for the sequential price blend and its bounds."""

from dataclasses import replace

import pytest

from app.services.factor_extractor import PricingFactors
from app.services.price_calculator import PriceCalculator
from app.services.pricing_policy import round_money


def _factors(**overrides) -> PricingFactors:
    base = dict(
        base_price=100.0,
        competitor_price=100.0,
        competitor_avg_price=100.0,
        competitor_min_price=100.0,
        competitor_max_price=100.0,
        demand_level=0.5,
        seasonality_factor=1.0,
        occupancy_trend=0.0,
        day_of_week=3,
        is_weekend=False,
        is_holiday=False,
    )
    base.update(overrides)
    return PricingFactors(**base)


class TestBlend:
    def test_neutral_factors_keep_base_price(self) -> None:
        assert PriceCalculator.calculate_recommended_price(_factors()) == 100.0

    def test_every_step_applied_in_order(self) -> None:
        factors = _factors(
            competitor_avg_price=120.0,
            competitor_min_price=80.0,
            competitor_max_price=160.0,
            demand_level=0.9,
            seasonality_factor=1.2,
            is_weekend=True,
            occupancy_trend=0.3,
            weather_score=1.0,
        )
        # 106 -> x1.1 -> x1.04 -> x1.1 -> x1.03 -> x1.025
        assert PriceCalculator.calculate_recommended_price(factors) == pytest.approx(140.83)

    def test_seasonality_is_damped(self) -> None:
        factors = _factors(
            competitor_min_price=50.0,
            competitor_max_price=200.0,
            seasonality_factor=1.2,
        )
        assert PriceCalculator.calculate_recommended_price(factors) == pytest.approx(104.0)

    def test_small_trend_ignored(self) -> None:
        wide = dict(competitor_min_price=50.0, competitor_max_price=200.0)
        flat = PriceCalculator.calculate_recommended_price(_factors(occupancy_trend=0.1, **wide))
        falling = PriceCalculator.calculate_recommended_price(_factors(occupancy_trend=-0.5, **wide))

        assert flat == 100.0
        assert falling == pytest.approx(95.0)

    def test_low_demand_lowers_price(self) -> None:
        factors = _factors(competitor_min_price=50.0, competitor_max_price=200.0, demand_level=0.0)
        assert PriceCalculator.calculate_recommended_price(factors) == pytest.approx(87.5)

    def test_bad_weather_lowers_price(self) -> None:
        factors = _factors(competitor_min_price=50.0, competitor_max_price=200.0, weather_score=0.0)
        assert PriceCalculator.calculate_recommended_price(factors) == pytest.approx(97.5)


class TestBounds:
    def test_no_competitor_data_bounds(self) -> None:
        floor, ceiling = PriceCalculator.price_bounds(_factors(competitor_min_price=100.0, competitor_max_price=100.0))
        assert floor == pytest.approx(90.0)
        assert ceiling == pytest.approx(110.0)

    def test_base_price_limits_when_competitors_are_wide(self) -> None:
        floor, ceiling = PriceCalculator.price_bounds(_factors(competitor_min_price=10.0, competitor_max_price=1000.0))
        assert floor == pytest.approx(70.0)
        assert ceiling == pytest.approx(150.0)

    def test_clamped_to_ceiling(self) -> None:
        factors = _factors(competitor_avg_price=300.0, competitor_max_price=300.0, is_weekend=True, demand_level=1.0)
        assert PriceCalculator.calculate_recommended_price(factors) == 150.0

    def test_clamped_to_floor(self) -> None:
        factors = _factors(competitor_avg_price=20.0, competitor_min_price=20.0, demand_level=0.0)
        assert PriceCalculator.calculate_recommended_price(factors) == 70.0

    @pytest.mark.parametrize(
        "overrides",
        [
            dict(competitor_avg_price=140.0, competitor_min_price=120.0, competitor_max_price=160.0, is_weekend=True),
            dict(competitor_avg_price=60.0, competitor_min_price=40.0, competitor_max_price=90.0, demand_level=0.1),
            dict(demand_level=1.0, seasonality_factor=1.2, occupancy_trend=1.0, weather_score=1.0),
            dict(base_price=49.99, competitor_avg_price=55.0, competitor_min_price=45.0, competitor_max_price=70.0),
        ],
    )
    def test_result_within_floor_and_ceiling(self, overrides: dict) -> None:
        factors = _factors(**overrides)
        floor, ceiling = PriceCalculator.price_bounds(factors)
        price = PriceCalculator.calculate_recommended_price(factors)

        assert floor - 0.005 <= price <= ceiling + 0.005
        assert price == round_money(price)

    def test_pure_function(self) -> None:
        factors = _factors(competitor_avg_price=130.0, competitor_max_price=200.0, is_weekend=True)
        first = PriceCalculator.calculate_recommended_price(factors)

        assert PriceCalculator.calculate_recommended_price(replace(factors)) == first


class TestRounding:
    @pytest.mark.parametrize(
        "value, expected",
        [(2.675, 2.68), (1.005, 1.01), (99.994, 99.99), (123.20000000000002, 123.2)],
    )
    def test_round_half_up_to_cent(self, value: float, expected: float) -> None:
        assert round_money(value) == expected
