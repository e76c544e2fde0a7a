"""SQLAlchemy ORM models for the persistent store."""

import uuid
from datetime import datetime

from sqlalchemy import (
    JSON,
    Boolean,
    DateTime,
    Float,
    Integer,
    String,
    func,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(DeclarativeBase):
    pass


class PropertyRecord(Base):
    __tablename__ = "properties"

    id: Mapped[str] = mapped_column(String(64), primary_key=True, default=lambda: str(uuid.uuid4()))
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )

    # Listing
    type: Mapped[str] = mapped_column(String(50))
    usage: Mapped[str | None] = mapped_column(String(20), nullable=True)  # venda | aluguel
    rental_type: Mapped[str | None] = mapped_column(String(20), nullable=True)  # mensal | diario
    bedrooms: Mapped[int] = mapped_column(Integer, default=0)
    bathrooms: Mapped[int] = mapped_column(Integer, default=0)
    size: Mapped[float] = mapped_column(Float, default=0)
    parking_spaces: Mapped[int] = mapped_column(Integer, default=0)
    furnished: Mapped[bool | None] = mapped_column(Boolean, nullable=True)
    price: Mapped[float] = mapped_column(Float, default=0)
    link: Mapped[str | None] = mapped_column(String(500), nullable=True)

    # Location
    street: Mapped[str] = mapped_column(String(255), default="")
    neighborhood: Mapped[str | None] = mapped_column(String(100), nullable=True)
    city: Mapped[str] = mapped_column(String(100), default="")
    state: Mapped[str] = mapped_column(String(2), default="")
    lat: Mapped[float | None] = mapped_column(Float, nullable=True)
    lng: Mapped[float | None] = mapped_column(Float, nullable=True)

    # Proximity snapshot
    proximity_score: Mapped[int | None] = mapped_column(Integer, nullable=True)
    has_beach_access: Mapped[bool] = mapped_column(Boolean, default=False)
    has_metro_access: Mapped[bool] = mapped_column(Boolean, default=False)
    has_shopping_access: Mapped[bool] = mapped_column(Boolean, default=False)
    has_hospital_access: Mapped[bool] = mapped_column(Boolean, default=False)
    has_school_access: Mapped[bool] = mapped_column(Boolean, default=False)
    has_park_access: Mapped[bool] = mapped_column(Boolean, default=False)
    proximity_landmarks: Mapped[list | None] = mapped_column(JSON, nullable=True)
    proximity_updated_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)


class MarketCacheRecord(Base):
    __tablename__ = "property_market_cache"

    zipcode: Mapped[str] = mapped_column(String(8), primary_key=True)

    # Stats groups in the provider's JSON shape
    zipcode_stats: Mapped[dict] = mapped_column(JSON)
    neighbourhood_stats: Mapped[dict] = mapped_column(JSON)
    city_stats: Mapped[dict] = mapped_column(JSON)
    state_stats: Mapped[dict] = mapped_column(JSON)

    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True))
