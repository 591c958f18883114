from pydantic import BaseModel, Field
from typing import List, Literal, Optional
from datetime import date


class CompetitorPriceInput(BaseModel):
    """A competitor price extracted by the scraper"""
    competitor_name: str = Field(..., min_length=1)
    date: date
    price: float = Field(..., gt=0)
    room_type: Optional[str] = None
    source: Optional[str] = Field(None, description="booking, manual, ...")


class CompetitorPricesRequest(BaseModel):
    hotel_id: str = Field(..., min_length=1)
    prices: List[CompetitorPriceInput] = Field(..., min_length=1)


class CompetitorPricesResponse(BaseModel):
    saved: int
    historical_days_updated: int


class CompetitorPriceAlert(BaseModel):
    """Significant price move by one competitor"""
    competitor_name: str
    date: str
    previous_price: float
    current_price: float
    price_change: float
    price_change_percent: float
    severity: Literal["high", "medium"]
    alert_type: Literal["price_increase", "price_decrease"]
    message: str


class AlertPeriod(BaseModel):
    start_date: str
    end_date: str
    days_checked: int


class AlertSummary(BaseModel):
    total_alerts: int
    high_severity: int
    medium_severity: int


class CompetitorAlertsResponse(BaseModel):
    alerts: List[CompetitorPriceAlert]
    your_current_price: Optional[float] = None
    period: AlertPeriod
    summary: AlertSummary
    message: Optional[str] = None
