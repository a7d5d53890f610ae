import enum
from datetime import datetime
from sqlalchemy import Integer, Enum, DateTime, ForeignKey
from sqlalchemy.orm import Mapped, mapped_column

from kanban_tracker.core.database import Base, enum_values


class OrderStoreStatus(str, enum.Enum):
    PENDING = "pending"
    PRODUCTION = "production"
    DELIVER = "deliver"
    FINISH = "finish"


class OrderFabricationStatus(str, enum.Enum):
    PENDING = "pending"
    DELIVER = "deliver"
    FINISH = "finish"


class OrderLineStatus(str, enum.Enum):
    QUEUE = "queue"
    PROGRESS = "progress"
    DONE = "done"


class DeliverStatus(str, enum.Enum):
    DELIVER = "deliver"
    FINISH = "finish"


class Order(Base):
    """Заказ: на какой станции сейчас работа и кто её создал."""
    __tablename__ = "orders"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    station_id: Mapped[int] = mapped_column(ForeignKey("stations.id"), nullable=False)
    created_by: Mapped[int] = mapped_column(ForeignKey("users.id"), nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, default=datetime.utcnow, onupdate=datetime.utcnow
    )


class OrderStore(Base):
    """Заказ склада сборки на деталь."""
    __tablename__ = "orders_store"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    order_id: Mapped[int] = mapped_column(ForeignKey("orders.id"), nullable=False)
    part_id: Mapped[int] = mapped_column(ForeignKey("parts.id"), nullable=False)
    quantity: Mapped[int] = mapped_column(Integer, nullable=False)
    status: Mapped[OrderStoreStatus] = mapped_column(
        Enum(OrderStoreStatus, values_callable=enum_values),
        default=OrderStoreStatus.PENDING,
        nullable=False,
    )
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, default=datetime.utcnow, onupdate=datetime.utcnow
    )


class OrderFabrication(Base):
    """Заказ на изготовление детали в цехе."""
    __tablename__ = "orders_fabrication"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    order_id: Mapped[int] = mapped_column(ForeignKey("orders.id"), nullable=False)
    part_id: Mapped[int] = mapped_column(ForeignKey("parts.id"), nullable=False)
    quantity: Mapped[int] = mapped_column(Integer, nullable=False)
    status: Mapped[OrderFabricationStatus] = mapped_column(
        Enum(OrderFabricationStatus, values_callable=enum_values),
        default=OrderFabricationStatus.PENDING,
        nullable=False,
    )
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, default=datetime.utcnow, onupdate=datetime.utcnow
    )


class OrderLine(Base):
    """Сборка компонента на линии (списание деталей со склада линии)."""
    __tablename__ = "orders_line"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    order_id: Mapped[int] = mapped_column(ForeignKey("orders.id"), nullable=False)
    component_id: Mapped[int] = mapped_column(ForeignKey("components.id"), nullable=False)
    quantity: Mapped[int] = mapped_column(Integer, default=1, nullable=False)
    status: Mapped[OrderLineStatus] = mapped_column(
        Enum(OrderLineStatus, values_callable=enum_values),
        default=OrderLineStatus.PROGRESS,
        nullable=False,
    )
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)


class DeliverOrderFabrication(Base):
    """Квитанция поставки из цеха на склад; finish — принято на склад."""
    __tablename__ = "deliver_orders_fabrication"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    order_id: Mapped[int] = mapped_column(ForeignKey("orders.id"), nullable=False)
    order_fabrication_id: Mapped[int] = mapped_column(
        ForeignKey("orders_fabrication.id"), nullable=False
    )
    part_id: Mapped[int] = mapped_column(ForeignKey("parts.id"), nullable=False)
    status: Mapped[DeliverStatus] = mapped_column(
        Enum(DeliverStatus, values_callable=enum_values),
        default=DeliverStatus.DELIVER,
        nullable=False,
    )
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, default=datetime.utcnow, onupdate=datetime.utcnow
    )
