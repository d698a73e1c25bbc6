from __future__ import annotations

from datetime import datetime

from sqlalchemy import DateTime, ForeignKey, Integer, String
from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy.sql import func

from app.db.base import Base


class VehicleBrand(Base):
    __tablename__ = "vehicle_brands"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(100), unique=True, nullable=False)


class VehicleCategory(Base):
    __tablename__ = "vehicle_categories"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(100), unique=True, nullable=False)


class VehicleModel(Base):
    __tablename__ = "vehicle_models"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    brand_id: Mapped[int] = mapped_column(ForeignKey("vehicle_brands.id"), nullable=False, index=True)
    name: Mapped[str] = mapped_column(String(100), nullable=False)


class VehicleVersion(Base):
    __tablename__ = "vehicle_versions"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    model_id: Mapped[int] = mapped_column(ForeignKey("vehicle_models.id"), nullable=False, index=True)
    name: Mapped[str] = mapped_column(String(100), nullable=False)


class Vehicle(Base):
    __tablename__ = "vehicles"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    brand_id: Mapped[int] = mapped_column(ForeignKey("vehicle_brands.id"), nullable=False, index=True)
    model_id: Mapped[int] = mapped_column(ForeignKey("vehicle_models.id"), nullable=False, index=True)
    version_id: Mapped[int] = mapped_column(ForeignKey("vehicle_versions.id"), nullable=False)
    category_id: Mapped[int] = mapped_column(ForeignKey("vehicle_categories.id"), nullable=False, index=True)
    year: Mapped[int] = mapped_column(Integer, nullable=False, index=True)
    price: Mapped[int] = mapped_column(Integer, nullable=False, index=True)
    image_url: Mapped[str | None] = mapped_column(String(500), nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())

    brand: Mapped[VehicleBrand] = relationship(lazy="joined")
    model: Mapped[VehicleModel] = relationship(lazy="joined")
    version: Mapped[VehicleVersion] = relationship(lazy="joined")
    category: Mapped[VehicleCategory] = relationship(lazy="joined")
