"""Канбан-карта: одна на заказ, статус повторяет статус цеха или сборки."""
import enum
from datetime import datetime
from typing import Optional
from sqlalchemy import String, Text, Enum, DateTime, ForeignKey
from sqlalchemy.orm import Mapped, mapped_column

from kanban_tracker.core.database import Base, enum_values


class KanbanType(str, enum.Enum):
    PRODUCTION = "production"
    WITHDRAWAL = "withdrawal"


class KanbanStatus(str, enum.Enum):
    QUEUE = "queue"
    PROGRESS = "progress"
    DONE = "done"


class Kanban(Base):
    __tablename__ = "kanbans"

    id: Mapped[str] = mapped_column(String(32), primary_key=True)
    type: Mapped[KanbanType] = mapped_column(
        Enum(KanbanType, values_callable=enum_values), nullable=False
    )
    card_id: Mapped[str] = mapped_column(String(16), nullable=False)
    status: Mapped[KanbanStatus] = mapped_column(
        Enum(KanbanStatus, values_callable=enum_values),
        default=KanbanStatus.QUEUE,
        nullable=False,
    )
    qr_code: Mapped[str] = mapped_column(Text, nullable=False)
    order_id: Mapped[int] = mapped_column(ForeignKey("orders.id"), unique=True, nullable=False)
    station_id: Mapped[int] = mapped_column(ForeignKey("stations.id"), nullable=False)
    order_date: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow, nullable=False)
    plan_start: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)
    finish_date: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, default=datetime.utcnow, onupdate=datetime.utcnow
    )


class KanbanWithdrawal(Base):
    """Маршрут карты отбора: откуда и куда уходят детали."""
    __tablename__ = "kanban_withdrawals"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    kanban_id: Mapped[str] = mapped_column(ForeignKey("kanbans.id"), nullable=False)
    prev_station_id: Mapped[int] = mapped_column(ForeignKey("stations.id"), nullable=False)
    next_station_id: Mapped[int] = mapped_column(ForeignKey("stations.id"), nullable=False)
