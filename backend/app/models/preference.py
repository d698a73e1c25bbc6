from __future__ import annotations

from datetime import datetime

from sqlalchemy import DateTime, ForeignKey, Integer
from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy.sql import func

from app.db.base import Base
from app.models.vehicle import VehicleBrand, VehicleCategory


class UserPreference(Base):
    __tablename__ = "user_preferences"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    brand_id: Mapped[int] = mapped_column(ForeignKey("vehicle_brands.id"), nullable=False)
    category_id: Mapped[int] = mapped_column(ForeignKey("vehicle_categories.id"), nullable=False)
    price_max: Mapped[int] = mapped_column(Integer, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())

    brand: Mapped[VehicleBrand] = relationship(lazy="joined")
    category: Mapped[VehicleCategory] = relationship(lazy="joined")
