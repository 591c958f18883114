from typing import Tuple

from app.services.factor_extractor import PricingFactors
from app.services.pricing_policy import clamp, round_money


class PriceCalculator:
    """Blend pricing factors into one bounded price"""

    # Blend weights
    COMPETITOR_WEIGHT = 0.3
    DEMAND_WEIGHT = 0.25
    SEASONALITY_WEIGHT = 0.2
    SEASONALITY_BASE = 0.8
    WEEKEND_UPLIFT = 1.10
    TREND_THRESHOLD = 0.1
    TREND_WEIGHT = 0.1
    WEATHER_WEIGHT = 0.05

    # Bounds relative to base price / competitor range
    BASE_FLOOR_RATIO = 0.7
    BASE_CEILING_RATIO = 1.5
    COMPETITOR_FLOOR_RATIO = 0.9
    COMPETITOR_CEILING_RATIO = 1.1

    @staticmethod
    def calculate_recommended_price(factors: PricingFactors) -> float:
        """
        Compute the recommended price from factors.

        Each step adjusts the running price in turn (add, then a chain of
        multipliers), so the order below matters.
        """
        price = factors.base_price

        # 1. Move 30% of the way towards the competitor average
        price += (factors.competitor_avg_price - factors.base_price) * PriceCalculator.COMPETITOR_WEIGHT

        # 2. Demand: +/-12.5% at the extremes
        price *= 1 + (factors.demand_level - 0.5) * PriceCalculator.DEMAND_WEIGHT

        # 3. Damped seasonality
        price *= factors.seasonality_factor * PriceCalculator.SEASONALITY_WEIGHT + PriceCalculator.SEASONALITY_BASE

        # 4. Weekend
        if factors.is_weekend:
            price *= PriceCalculator.WEEKEND_UPLIFT

        # 5. Occupancy trend, only when it is not flat
        if abs(factors.occupancy_trend) > PriceCalculator.TREND_THRESHOLD:
            price *= 1 + factors.occupancy_trend * PriceCalculator.TREND_WEIGHT

        # 6. Weather
        if factors.weather_score is not None:
            price *= 1 + (factors.weather_score - 0.5) * PriceCalculator.WEATHER_WEIGHT

        floor, ceiling = PriceCalculator.price_bounds(factors)
        price = clamp(price, floor, ceiling)

        return round_money(price)

    @staticmethod
    def price_bounds(factors: PricingFactors) -> Tuple[float, float]:
        """Return (floor, ceiling) for the recommended price."""
        floor = max(
            factors.base_price * PriceCalculator.BASE_FLOOR_RATIO,
            factors.competitor_min_price * PriceCalculator.COMPETITOR_FLOOR_RATIO,
        )
        ceiling = min(
            factors.base_price * PriceCalculator.BASE_CEILING_RATIO,
            factors.competitor_max_price * PriceCalculator.COMPETITOR_CEILING_RATIO,
        )
        return floor, ceiling
