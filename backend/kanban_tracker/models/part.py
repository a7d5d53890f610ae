"""Детали: остаток на линии, промежуточный склад и план изготовления в цехе."""
import enum
from datetime import datetime
from typing import Optional
from sqlalchemy import String, Integer, Enum, DateTime, ForeignKey
from sqlalchemy.orm import Mapped, mapped_column

from kanban_tracker.core.database import Base, enum_values


class PartStoreStatus(str, enum.Enum):
    IDLE = "idle"
    ORDER_TO_FABRICATION = "order_to_fabrication"
    RECEIVE = "receive"


class ShopFloorStatus(str, enum.Enum):
    PENDING = "pending"
    IN_PROGRESS = "in_progress"
    FINISH = "finish"


class Part(Base):
    """Деталь и её остаток у сборочной линии (quantity) против потребности на цикл (quantity_req)."""
    __tablename__ = "parts"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    part_number: Mapped[str] = mapped_column(String(32), unique=True, nullable=False)
    part_name: Mapped[str] = mapped_column(String(255), nullable=False)
    quantity: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    quantity_req: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, default=datetime.utcnow, onupdate=datetime.utcnow
    )


class Component(Base):
    """Изделие, которое собирается на линии из деталей."""
    __tablename__ = "components"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)


class PartComponent(Base):
    """Состав изделия: какие детали ушли в компонент."""
    __tablename__ = "part_components"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    component_id: Mapped[int] = mapped_column(ForeignKey("components.id"), nullable=False)
    part_id: Mapped[int] = mapped_column(ForeignKey("parts.id"), nullable=False)


class PartStore(Base):
    """Склад сборки: одна строка на деталь, живёт дольше отдельных заказов."""
    __tablename__ = "parts_store"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    part_id: Mapped[int] = mapped_column(ForeignKey("parts.id"), unique=True, nullable=False)
    stock: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    status: Mapped[PartStoreStatus] = mapped_column(
        Enum(PartStoreStatus, values_callable=enum_values),
        default=PartStoreStatus.IDLE,
        nullable=False,
    )
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, default=datetime.utcnow, onupdate=datetime.utcnow
    )


class PartShopFloor(Base):
    """План/факт изготовления детали в цехе, одна строка на заказ изготовления."""
    __tablename__ = "parts_shop_floor"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    order_id: Mapped[int] = mapped_column(ForeignKey("orders.id"), nullable=False)
    part_id: Mapped[int] = mapped_column(ForeignKey("parts.id"), nullable=False)
    plan_start: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)
    plan_finish: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)
    actual_start: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)
    actual_finish: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)
    status: Mapped[ShopFloorStatus] = mapped_column(
        Enum(ShopFloorStatus, values_callable=enum_values),
        default=ShopFloorStatus.PENDING,
        nullable=False,
    )
    station: Mapped[str] = mapped_column(String(32), default="shop_floor", nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, default=datetime.utcnow, onupdate=datetime.utcnow
    )

    @property
    def has_plan(self) -> bool:
        return self.plan_start is not None and self.plan_finish is not None
