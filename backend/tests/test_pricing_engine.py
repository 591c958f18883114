"""Tests for the full recommendation (confidence, labels, range, reasoning)."""

from datetime import date, timedelta

import pytest

from app.services.factor_extractor import HistoricalRecord
from app.services.pricing_engine import PricingEngine


def _decimals(value: float) -> int:
    text = repr(value)
    return len(text.split(".")[1]) if "." in text else 0


class TestEmptyHistory:
    def test_neutral_recommendation(self) -> None:
        rec = PricingEngine.recommend_price([], date(2025, 4, 16), 100.0)

        assert rec.confidence == 0.0
        assert rec.factors.demand_level == "medium"
        assert rec.factors.occupancy_trend == "stable"
        assert rec.factors.competitor_price == 100.0
        assert rec.factors.competitor_avg_price == 100.0
        assert rec.recommended_price == 100.0
        assert rec.reasoning == "Current price is already optimal."


class TestConfidence:
    def test_single_record(self) -> None:
        target = date(2025, 4, 16)
        records = [HistoricalRecord(hotel_id="h", date=target, occupancy_rate=60.0)]

        rec = PricingEngine.recommend_price(records, target, 50.0)

        assert rec.confidence == pytest.approx(1 / 30)

    def test_monotonic_and_saturating(self, series_factory) -> None:
        target = date(2025, 4, 16)
        values = [
            PricingEngine.recommend_price(series_factory(target, n), target, 100.0).confidence
            for n in (0, 1, 10, 29, 30, 45)
        ]

        assert values == sorted(values)
        assert values[-2] == 1.0
        assert values[-1] == 1.0

    def test_future_records_not_counted(self, series_factory) -> None:
        target = date(2025, 4, 16)
        # Ten days starting the day after the target
        records = series_factory(target + timedelta(days=10), 10)

        rec = PricingEngine.recommend_price(records, target, 100.0)

        assert rec.confidence == 0.0


class TestScenarios:
    def test_flat_demand_without_competitors(self, series_factory) -> None:
        target = date(2025, 4, 16)  # April weekday
        rec = PricingEngine.recommend_price(series_factory(target, 30, occupancy=50.0), target, 100.0)

        assert 85.0 <= rec.recommended_price <= 115.0
        assert rec.factors.demand_level == "medium"
        assert rec.factors.seasonality_factor == 1.0
        assert rec.confidence == 1.0

    def test_weekend_with_expensive_competitors(self, series_factory) -> None:
        target = date(2025, 4, 19)  # Saturday
        records = series_factory(
            target, 30, occupancy=50.0,
            competitor_avg=140.0, competitor_min=120.0, competitor_max=160.0,
        )

        rec = PricingEngine.recommend_price(records, target, 100.0)

        assert rec.recommended_price > 100.0
        assert rec.recommended_price == pytest.approx(123.2)
        assert rec.min_price == pytest.approx(111.6)
        assert rec.max_price == pytest.approx(134.8)
        assert rec.factors.is_weekend is True
        assert rec.factors.day_of_week == 6
        assert rec.reasoning == (
            "Suggested increase of 23.2%. Weekend day. Competitors are on average 40% higher."
        )

    def test_weekend_uplift_capped_without_competitor_range(self, series_factory) -> None:
        target = date(2025, 4, 19)
        records = series_factory(target, 30, competitor_avg=140.0)

        rec = PricingEngine.recommend_price(records, target, 100.0)

        # Missing min/max default to base price -> ceiling 110
        assert rec.recommended_price == 110.0

    def test_high_season_rising_demand(self) -> None:
        target = date(2025, 7, 16)  # Wednesday in July
        start = target - timedelta(days=13)
        records = [
            HistoricalRecord(
                hotel_id="h",
                date=start + timedelta(days=i),
                occupancy_rate=70.0 if i < 7 else 95.0,
                competitor_avg_price=100.0,
                competitor_min_price=80.0,
                competitor_max_price=200.0,
            )
            for i in range(14)
        ]

        rec = PricingEngine.recommend_price(records, target, 100.0)

        assert rec.factors.demand_level == "high"
        assert rec.factors.occupancy_trend == "increasing"
        assert rec.reasoning.startswith("Suggested increase of")
        assert "High demand expected" in rec.reasoning
        assert "High season period" in rec.reasoning
        assert "Occupancy trend rising" in rec.reasoning
        assert "Weekend day" not in rec.reasoning

    def test_low_season_falling_demand(self) -> None:
        target = date(2025, 2, 12)  # Wednesday in February
        start = target - timedelta(days=13)
        records = [
            HistoricalRecord(
                hotel_id="h",
                date=start + timedelta(days=i),
                occupancy_rate=45.0 if i < 7 else 15.0,
                competitor_avg_price=80.0,
                competitor_min_price=60.0,
                competitor_max_price=120.0,
            )
            for i in range(14)
        ]

        rec = PricingEngine.recommend_price(records, target, 100.0)

        assert rec.recommended_price < 100.0
        assert rec.factors.demand_level == "low"
        assert rec.factors.occupancy_trend == "decreasing"
        assert rec.reasoning == (
            f"Suggested decrease of {(100.0 - rec.recommended_price):.1f}%. "
            "Low demand expected. Low season period. Occupancy trend falling. "
            "Competitors are on average 20% lower."
        )


class TestRange:
    def test_range_always_contains_recommendation(self, series_factory) -> None:
        target = date(2025, 4, 16)
        # Competitors far below the hotel: floor (70% of base) sits above 110% of competitor max
        records = series_factory(target, 30, competitor_avg=50.0, competitor_min=50.0, competitor_max=50.0)

        rec = PricingEngine.recommend_price(records, target, 100.0)

        assert rec.recommended_price == 70.0
        assert rec.min_price == pytest.approx(55.0)
        assert rec.max_price == 70.0
        assert rec.min_price <= rec.recommended_price <= rec.max_price

    def test_optimal_price_collapses_range(self, series_factory) -> None:
        target = date(2025, 4, 16)
        rec = PricingEngine.recommend_price(series_factory(target, 30), target, 100.0)

        assert rec.min_price == rec.recommended_price == rec.max_price == 100.0

    def test_money_fields_have_two_decimals(self, series_factory) -> None:
        target = date(2025, 8, 9)
        records = series_factory(target, 30, occupancy=83.0, competitor_avg=133.33, competitor_min=97.1, competitor_max=181.7)

        rec = PricingEngine.recommend_price(records, target, 117.77)

        for value in (rec.current_price, rec.recommended_price, rec.min_price, rec.max_price,
                      rec.factors.competitor_price, rec.factors.competitor_avg_price):
            assert _decimals(value) <= 2


class TestLabels:
    @pytest.mark.parametrize("level, label", [(0.71, "high"), (0.7, "medium"), (0.4, "medium"), (0.39, "low")])
    def test_demand_label(self, level: float, label: str) -> None:
        assert PricingEngine.demand_label(level) == label

    @pytest.mark.parametrize("trend, label", [(0.11, "increasing"), (0.1, "stable"), (-0.1, "stable"), (-0.2, "decreasing")])
    def test_trend_label(self, trend: float, label: str) -> None:
        assert PricingEngine.trend_label(trend) == label


class TestValidation:
    @pytest.mark.parametrize("price", [0.0, -10.0, float("nan"), float("inf")])
    def test_rejects_invalid_current_price(self, price: float) -> None:
        with pytest.raises(ValueError):
            PricingEngine.recommend_price([], date(2025, 4, 16), price)
