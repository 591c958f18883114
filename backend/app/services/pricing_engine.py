import logging
import math
from datetime import date
from typing import List, Sequence

from app.schemas.pricing import PriceRecommendation, RecommendationFactors
from app.services.factor_extractor import FactorExtractor, HistoricalRecord, PricingFactors
from app.services.price_calculator import PriceCalculator
from app.services.pricing_policy import CONFIDENCE_FULL_RECORDS, round_money

logger = logging.getLogger(__name__)


class PricingEngine:
    """Dynamic pricing recommendation: factors -> price -> explained recommendation"""

    # Label thresholds
    DEMAND_HIGH = 0.7
    DEMAND_LOW = 0.4
    TREND_UP = 0.1
    TREND_DOWN = -0.1
    SEASON_HIGH = 1.1
    SEASON_LOW = 0.9

    # Reasoning thresholds
    OPTIMAL_TOLERANCE = 1.0  # currency units
    COMPETITOR_GAP_RATIO = 0.1

    # Suggested range
    RANGE_SPREAD = 0.5

    @staticmethod
    def recommend_price(
        historical_data: Sequence[HistoricalRecord],
        target_date: date,
        current_price: float,
    ) -> PriceRecommendation:
        """
        Generate a complete price recommendation.

        Args:
            historical_data: Hotel history (may be empty)
            target_date: Date to price
            current_price: Hotel's current price, must be a positive finite number

        Returns:
            PriceRecommendation with min_price <= recommended_price <= max_price
        """
        if current_price is None or not math.isfinite(current_price) or current_price <= 0:
            raise ValueError("current_price must be a positive number")

        current_price = float(current_price)

        factors = FactorExtractor.extract_pricing_factors(historical_data, target_date, current_price)
        recommended_price = PriceCalculator.calculate_recommended_price(factors)

        data_points = sum(1 for r in historical_data if r.date <= target_date)
        confidence = PricingEngine._compute_confidence(data_points)

        min_price, max_price = PricingEngine._price_range(factors, recommended_price, current_price)

        recommendation = PriceRecommendation(
            date=target_date.isoformat(),
            current_price=round_money(current_price),
            recommended_price=recommended_price,
            min_price=min_price,
            max_price=max_price,
            confidence=confidence,
            reasoning=PricingEngine.generate_reasoning(factors, recommended_price, current_price),
            factors=RecommendationFactors(
                demand_level=PricingEngine.demand_label(factors.demand_level),
                competitor_price=round_money(factors.competitor_price),
                competitor_avg_price=round_money(factors.competitor_avg_price),
                seasonality_factor=factors.seasonality_factor,
                occupancy_trend=PricingEngine.trend_label(factors.occupancy_trend),
                day_of_week=factors.day_of_week,
                is_weekend=factors.is_weekend,
                is_holiday=factors.is_holiday,
            ),
        )

        logger.debug(
            f"Price recommendation for {recommendation.date}: current={current_price:.2f} "
            f"recommended={recommended_price:.2f} range=[{min_price:.2f}, {max_price:.2f}] "
            f"confidence={confidence:.2f}"
        )
        return recommendation

    @staticmethod
    def demand_label(demand_level: float) -> str:
        if demand_level > PricingEngine.DEMAND_HIGH:
            return "high"
        if demand_level < PricingEngine.DEMAND_LOW:
            return "low"
        return "medium"

    @staticmethod
    def trend_label(occupancy_trend: float) -> str:
        if occupancy_trend > PricingEngine.TREND_UP:
            return "increasing"
        if occupancy_trend < PricingEngine.TREND_DOWN:
            return "decreasing"
        return "stable"

    @staticmethod
    def _compute_confidence(data_points: int) -> float:
        """Linear ramp to 1.0 at 30 days of history."""
        return min(1.0, data_points / float(CONFIDENCE_FULL_RECORDS))

    @staticmethod
    def _price_range(
        factors: PricingFactors,
        recommended_price: float,
        current_price: float,
    ) -> tuple:
        """Suggested (min, max) around the recommendation.

        With a wide competitor spread the competitor bounds alone can exclude
        the recommended price, so the range is widened to always contain it.
        """
        diff = abs(recommended_price - current_price)

        min_price = max(
            factors.competitor_min_price * PriceCalculator.COMPETITOR_FLOOR_RATIO,
            recommended_price - diff * PricingEngine.RANGE_SPREAD,
        )
        max_price = min(
            factors.competitor_max_price * PriceCalculator.COMPETITOR_CEILING_RATIO,
            recommended_price + diff * PricingEngine.RANGE_SPREAD,
        )

        min_price = min(round_money(min_price), recommended_price)
        max_price = max(round_money(max_price), recommended_price)
        return min_price, max_price

    @staticmethod
    def generate_reasoning(
        factors: PricingFactors,
        recommended_price: float,
        current_price: float,
    ) -> str:
        """Human-readable explanation, one clause per active factor."""
        price_diff = recommended_price - current_price
        reasons: List[str] = []

        if abs(price_diff) < PricingEngine.OPTIMAL_TOLERANCE:
            reasons.append("Current price is already optimal")
        else:
            percent = abs(price_diff) / current_price * 100.0
            direction = "increase" if price_diff > 0 else "decrease"
            reasons.append(f"Suggested {direction} of {percent:.1f}%")

        if factors.demand_level > PricingEngine.DEMAND_HIGH:
            reasons.append("High demand expected")
        elif factors.demand_level < PricingEngine.DEMAND_LOW:
            reasons.append("Low demand expected")

        if factors.seasonality_factor > PricingEngine.SEASON_HIGH:
            reasons.append("High season period")
        elif factors.seasonality_factor < PricingEngine.SEASON_LOW:
            reasons.append("Low season period")

        if factors.is_weekend:
            reasons.append("Weekend day")

        if factors.occupancy_trend > PricingEngine.TREND_UP:
            reasons.append("Occupancy trend rising")
        elif factors.occupancy_trend < PricingEngine.TREND_DOWN:
            reasons.append("Occupancy trend falling")

        competitor_diff = factors.competitor_avg_price - current_price
        if abs(competitor_diff) > current_price * PricingEngine.COMPETITOR_GAP_RATIO:
            gap_pct = abs(competitor_diff) / current_price * 100.0
            side = "higher" if competitor_diff > 0 else "lower"
            reasons.append(f"Competitors are on average {gap_pct:.0f}% {side}")

        return ". ".join(reasons) + "."
