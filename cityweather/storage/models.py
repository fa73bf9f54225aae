"""
ORM tables: the city list the collector reads and the weather rows it writes.
"""
from sqlalchemy import JSON, BigInteger, Boolean, Column, DateTime, Float, Integer, String, Text
from sqlalchemy.dialects.postgresql import JSONB

from .db import Base

# JSONB on PostgreSQL so date_range supports @> containment.
JsonDocument = JSON().with_variant(JSONB(), "postgresql")
PrimaryKey = BigInteger().with_variant(Integer(), "sqlite")


class City(Base):
    __tablename__ = "cities"

    id = Column(PrimaryKey, primary_key=True, autoincrement=True)
    name = Column(String(255), nullable=False)
    state = Column(String(255), nullable=True)
    state_code = Column(String(8), nullable=True)
    display_name = Column(String(255), nullable=False)
    slug = Column(String(255), nullable=True, index=True)
    latitude = Column(Float, nullable=False)
    longitude = Column(Float, nullable=False)
    timezone = Column(String(64), nullable=True)
    population = Column(Integer, nullable=True)
    active = Column(Boolean, nullable=False, default=True)


class WeatherData(Base):
    __tablename__ = "weather_data"

    id = Column(PrimaryKey, primary_key=True, autoincrement=True)
    location_name = Column(Text, nullable=False, index=True)
    latitude = Column(Text, nullable=False)
    longitude = Column(Text, nullable=False)
    historical_data = Column(JsonDocument, nullable=False)
    collected_at = Column(DateTime(timezone=True), nullable=False, index=True)
    date_range = Column(JsonDocument, nullable=False)
    station_id = Column(Text, nullable=True)
    station_name = Column(Text, nullable=True)
