from sqlalchemy import Column, Integer, String, Float, Date, DateTime, Text, Boolean, UniqueConstraint
from sqlalchemy.orm import declarative_base
from datetime import datetime

Base = declarative_base()


class HistoricalDataRecord(Base):
    """One day of hotel history (occupancy, rates, competitor stats)"""
    __tablename__ = "historical_data"
    __table_args__ = (
        UniqueConstraint("hotel_id", "date", name="uq_historical_hotel_date"),
    )

    id = Column(Integer, primary_key=True, index=True)
    hotel_id = Column(String(128), nullable=False, index=True)
    date = Column(Date, nullable=False, index=True)

    occupancy_rate = Column(Float, nullable=False, default=0.0)  # percentage 0-100
    adr = Column(Float, nullable=False, default=0.0)
    revpar = Column(Float, nullable=False, default=0.0)
    total_revenue = Column(Float, nullable=False, default=0.0)
    total_costs = Column(Float, nullable=False, default=0.0)

    # Competitor stats for the day (optional)
    competitor_avg_price = Column(Float, nullable=True)
    competitor_min_price = Column(Float, nullable=True)
    competitor_max_price = Column(Float, nullable=True)

    # External signals, 0-1 (optional)
    weather_score = Column(Float, nullable=True)
    event_impact_score = Column(Float, nullable=True)

    is_weekend = Column(Boolean, default=False, nullable=False)
    is_holiday = Column(Boolean, default=False, nullable=False)
    day_of_week = Column(Integer, nullable=False)  # 0 = Sunday
    month = Column(Integer, nullable=False)  # 1-12

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)


class PricePrediction(Base):
    """Stored output of the dynamic pricing engine, one per hotel per date"""
    __tablename__ = "ml_predictions"
    __table_args__ = (
        UniqueConstraint("hotel_id", "prediction_date", name="uq_prediction_hotel_date"),
    )

    id = Column(Integer, primary_key=True, index=True)
    hotel_id = Column(String(128), nullable=False, index=True)
    prediction_date = Column(Date, nullable=False)
    current_price = Column(Float, nullable=False)
    suggested_price = Column(Float, nullable=False)
    min_price = Column(Float, nullable=False)
    max_price = Column(Float, nullable=False)
    confidence_score = Column(Float, nullable=False)  # 0.0 to 1.0
    reasoning = Column(Text, nullable=False)
    demand_level = Column(String(20), nullable=False)  # high, medium, low
    competitor_avg_price = Column(Float, nullable=False)
    market_position = Column(String(20), nullable=False)  # above, below, average
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)


class CompetitorPrice(Base):
    """Competitor price observed for a date (from the scraper)"""
    __tablename__ = "competitor_data"
    __table_args__ = (
        UniqueConstraint("hotel_id", "competitor_name", "date", name="uq_competitor_hotel_name_date"),
    )

    id = Column(Integer, primary_key=True, index=True)
    hotel_id = Column(String(128), nullable=False, index=True)
    competitor_name = Column(String(255), nullable=False)
    date = Column(Date, nullable=False, index=True)
    price = Column(Float, nullable=False)
    room_type = Column(String(100), nullable=True)
    source = Column(String(50), nullable=True)  # booking, manual, ...
    scraped_at = Column(DateTime, default=datetime.utcnow, nullable=False)
