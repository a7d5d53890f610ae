"""
Доступ по ролям: оператор работает со своей станцией, менеджер — со всеми.
Станции: 1 = сборочная линия, 2 = склад сборки, 3 = изготовление.
"""
from typing import List, Optional

from kanban_tracker.models import StationId, UserRole

STATIONS_BY_ROLE = {
    UserRole.MANAGER: [StationId.ASSEMBLY_LINE, StationId.ASSEMBLY_STORE, StationId.FABRICATION],
    UserRole.ASSEMBLY_LINE_OPERATOR: [StationId.ASSEMBLY_LINE],
    UserRole.ASSEMBLY_STORE_OPERATOR: [StationId.ASSEMBLY_STORE],
    UserRole.FABRICATION_OPERATOR: [StationId.FABRICATION],
}

# Роли, которые могут работать на станции
STATION_ROLES = {
    station: [role for role, stations in STATIONS_BY_ROLE.items() if station in stations]
    for station in StationId
}


def _parse_role(role: str) -> Optional[UserRole]:
    try:
        return UserRole(role)
    except ValueError:
        return None


def allowed_stations(role: str) -> List[int]:
    r = _parse_role(role)
    if r is None:
        return []
    return [int(s) for s in STATIONS_BY_ROLE.get(r, [])]


def can_access_station(role: str, station_id: int) -> bool:
    """Может ли роль подтверждать канбаны и вести заказы станции."""
    return station_id in allowed_stations(role)
