"""Станции производства: сборочная линия, склад сборки, изготовление."""
import enum

from sqlalchemy import String
from sqlalchemy.orm import Mapped, mapped_column

from kanban_tracker.core.database import Base


class StationId(enum.IntEnum):
    ASSEMBLY_LINE = 1
    ASSEMBLY_STORE = 2
    FABRICATION = 3


STATION_NAMES = {
    StationId.ASSEMBLY_LINE: "Assembly Line",
    StationId.ASSEMBLY_STORE: "Assembly Store",
    StationId.FABRICATION: "Fabrication",
}


class Station(Base):
    __tablename__ = "stations"

    id: Mapped[int] = mapped_column(primary_key=True)
    name: Mapped[str] = mapped_column(String(64), nullable=False)
