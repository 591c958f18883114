from pydantic import BaseModel, Field, field_validator
from typing import Any, Dict, List, Optional
from datetime import date


class HistoricalEntryInput(BaseModel):
    """One day of hotel data as submitted by the user"""
    date: date
    occupancy_rate: float = Field(0.0, ge=0, le=100, description="Occupancy percentage")
    adr: Optional[float] = Field(None, ge=0, description="Average daily rate")
    total_revenue: float = Field(0.0, ge=0)
    total_costs: float = Field(0.0, ge=0)
    rooms_sold: Optional[int] = Field(None, ge=0, description="Used to derive ADR when missing")
    competitor_avg_price: Optional[float] = Field(None, ge=0)
    competitor_min_price: Optional[float] = Field(None, ge=0)
    competitor_max_price: Optional[float] = Field(None, ge=0)
    weather_score: Optional[float] = Field(None, ge=0, le=1)
    event_impact_score: Optional[float] = Field(None, ge=0, le=1)
    is_holiday: bool = False

    @field_validator("occupancy_rate", "total_revenue", "total_costs", mode="before")
    @classmethod
    def _unrecorded_as_zero(cls, v):
        # null means unrecorded, same as an empty CSV cell
        return 0.0 if v is None else v


class SaveHistoricalRequest(BaseModel):
    """Batch of daily entries for one hotel.

    Entries are validated one by one so a bad row doesn't reject the batch.
    """
    hotel_id: str = Field(..., min_length=1)
    entries: List[Dict[str, Any]] = Field(..., min_length=1)


class SaveHistoricalResponse(BaseModel):
    success: bool
    saved: int
    errors: Optional[List[str]] = None
    message: str


class HistoricalRecordOut(BaseModel):
    """Stored historical record"""
    hotel_id: str
    date: str
    occupancy_rate: float
    adr: float
    revpar: float
    total_revenue: float
    total_costs: float
    competitor_avg_price: Optional[float]
    competitor_min_price: Optional[float]
    competitor_max_price: Optional[float]
    weather_score: Optional[float]
    event_impact_score: Optional[float]
    is_weekend: bool
    is_holiday: bool
    day_of_week: int
    month: int
