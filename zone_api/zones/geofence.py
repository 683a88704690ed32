import math
from dataclasses import dataclass
from typing import Any, Iterable, List, Set

EARTH_RADIUS_METERS = 6371000


def is_valid_latitude(lat: float) -> bool:
    return -90 <= lat <= 90


def is_valid_longitude(lon: float) -> bool:
    return -180 <= lon <= 180


def haversine_distance(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """
    Calcula la distancia en metros entre dos puntos usando la fórmula de Haversine

    Args:
        lat1, lon1: Coordenadas del punto 1
        lat2, lon2: Coordenadas del punto 2

    Returns:
        Distancia en metros
    """
    phi1 = math.radians(lat1)
    phi2 = math.radians(lat2)
    delta_phi = math.radians(lat2 - lat1)
    delta_lambda = math.radians(lon2 - lon1)

    a = (math.sin(delta_phi / 2) ** 2 +
         math.cos(phi1) * math.cos(phi2) * math.sin(delta_lambda / 2) ** 2)
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))

    return EARTH_RADIUS_METERS * c


def _field(zone: Any, name: str):
    # Acepta tanto dicts formateados (cliente) como modelos ORM
    if isinstance(zone, dict):
        return zone[name]
    return getattr(zone, name)


def contains(zone: Any, latitude: float, longitude: float) -> bool:
    """True si el punto cae dentro del círculo de la zona (borde incluido)."""
    distance = haversine_distance(
        float(_field(zone, "latitude")), float(_field(zone, "longitude")),
        latitude, longitude
    )
    return distance <= float(_field(zone, "radius"))


@dataclass(frozen=True)
class Transition:
    zone_id: Any
    type: str  # "enter" | "exit"


class ZoneMembershipTracker:
    """
    Recuerda en qué zonas está el dispositivo y calcula las transiciones
    entrar/salir con cada nueva posición. No tiene temporizadores ni acceso
    al GPS: alguien tiene que llamar a update() con cada lectura.
    """

    def __init__(self, inside: Iterable[Any] = ()):
        self._inside: Set[Any] = set(inside)

    @property
    def inside(self) -> Set[Any]:
        return set(self._inside)

    def reset(self) -> None:
        self._inside.clear()

    def update(self, latitude: float, longitude: float, zones: Iterable[Any]) -> List[Transition]:
        zones = list(zones)
        transitions = []
        seen = set()

        for zone in zones:
            zone_id = _field(zone, "id")
            seen.add(zone_id)
            now_inside = contains(zone, latitude, longitude)
            was_inside = zone_id in self._inside

            if now_inside and not was_inside:
                self._inside.add(zone_id)
                transitions.append(Transition(zone_id, "enter"))
            elif was_inside and not now_inside:
                self._inside.discard(zone_id)
                transitions.append(Transition(zone_id, "exit"))

        # Zonas que ya no están en la lista (eliminadas): se olvidan sin
        # transición, el servidor ya no acepta actividades para ellas
        self._inside &= seen

        return transitions
