from pydantic import BaseModel, Field
from typing import List, Literal


class RecommendationFactors(BaseModel):
    """Display summary of the factors behind a recommendation"""
    demand_level: Literal["high", "medium", "low"]
    competitor_price: float
    competitor_avg_price: float
    seasonality_factor: float
    occupancy_trend: Literal["increasing", "stable", "decreasing"]
    day_of_week: int = Field(..., ge=0, le=6, description="0 = Sunday ... 6 = Saturday")
    is_weekend: bool
    is_holiday: bool


class PriceRecommendation(BaseModel):
    """Dynamic pricing recommendation for one date"""
    date: str = Field(..., description="Target date, YYYY-MM-DD")
    current_price: float
    recommended_price: float
    min_price: float
    max_price: float
    confidence: float = Field(..., ge=0.0, le=1.0)
    reasoning: str
    factors: RecommendationFactors

    model_config = {"frozen": True}


class PriceRecommendationResponse(BaseModel):
    """Envelope returned by GET /pricing/recommend"""
    recommendation: PriceRecommendation


class PredictionListItem(BaseModel):
    """Stored price prediction"""
    id: int
    hotel_id: str
    prediction_date: str
    current_price: float
    suggested_price: float
    min_price: float
    max_price: float
    confidence_score: float
    reasoning: str
    demand_level: str
    competitor_avg_price: float
    market_position: Literal["above", "below", "average"]
    created_at: str


class PredictionList(BaseModel):
    hotel_id: str
    predictions: List[PredictionListItem]
