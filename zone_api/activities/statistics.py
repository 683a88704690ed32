"""
Cálculos derivados sobre la lista de actividades.

Todo aquí es puro (sin I/O ni estado): lo usan tanto el servicio del backend
como los stores del cliente.
"""
import math
import time
from datetime import datetime, tzinfo
from typing import Any, Dict, Iterable, Optional

MS_PER_SECOND = 1000
MS_PER_WEEK = 1000 * 60 * 60 * 24 * 7

WEEKDAY_NAMES = ("Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday")


def now_ms() -> int:
    return int(time.time() * MS_PER_SECOND)


def _plural(count: int, unit: str) -> str:
    return f"{count} {unit}{'s' if count > 1 else ''} ago"


def format_time_ago(timestamp_ms: int, current_ms: Optional[int] = None) -> str:
    """
    Texto relativo a "ahora": Just now / N minute(s) / N hour(s) / N day(s) ago.
    No hay semanas ni meses, los días siguen creciendo.
    """
    if current_ms is None:
        current_ms = now_ms()
    seconds = (current_ms - int(timestamp_ms)) // MS_PER_SECOND
    minutes = seconds // 60
    hours = minutes // 60
    days = hours // 24

    if days > 0:
        return _plural(days, "day")
    if hours > 0:
        return _plural(hours, "hour")
    if minutes > 0:
        return _plural(minutes, "minute")
    return "Just now"


def weekday_name(timestamp_ms: int, tz: Optional[tzinfo] = None) -> str:
    # tz=None -> zona horaria local del proceso
    moment = datetime.fromtimestamp(timestamp_ms / MS_PER_SECOND, tz=tz)
    return WEEKDAY_NAMES[moment.weekday()]


def round_half_up(value: float, digits: int = 1) -> float:
    factor = 10 ** digits
    return math.floor(value * factor + 0.5) / factor


def _get(activity: Any, key: str, attr: str):
    if isinstance(activity, dict):
        return activity[key]
    return getattr(activity, attr)


def empty_zone_statistics() -> Dict[str, Any]:
    return {
        "totalVisits": 0,
        "enterCount": 0,
        "exitCount": 0,
        "avgVisitsPerWeek": 0,
        "lastVisit": None,
        "mostActiveDay": "N/A",
    }


def compute_zone_statistics(
    zone_id: Any,
    activities: Iterable[Any],
    current_ms: Optional[int] = None,
    tz: Optional[tzinfo] = None
) -> Dict[str, Any]:
    """
    Estadísticas de una zona a partir de la lista completa de actividades.

    Acepta actividades como dicts del API (zoneId/type/timestamp) o como
    objetos con zone_id/type/timestamp. Una visita = min(entradas, salidas).
    El día más activo desempata por orden de aparición recorriendo las
    actividades de la más reciente a la más antigua.
    """
    zone_activities = [a for a in activities if _get(a, "zoneId", "zone_id") == zone_id]
    if not zone_activities:
        return empty_zone_statistics()

    enter_count = sum(1 for a in zone_activities if _get(a, "type", "type") == "enter")
    exit_count = sum(1 for a in zone_activities if _get(a, "type", "type") == "exit")
    visits = min(enter_count, exit_count)

    timestamps = sorted((int(_get(a, "timestamp", "timestamp")) for a in zone_activities), reverse=True)
    last_visit = datetime.fromtimestamp(timestamps[0] / MS_PER_SECOND, tz=tz)

    # dict conserva el orden de inserción: el primero en llegar al máximo gana
    day_counts: Dict[str, int] = {}
    for ts in timestamps:
        day = weekday_name(ts, tz)
        day_counts[day] = day_counts.get(day, 0) + 1
    most_active_day = max(day_counts.items(), key=lambda item: item[1])[0]

    if current_ms is None:
        current_ms = now_ms()
    oldest = timestamps[-1]
    weeks = max(1, (current_ms - oldest) / MS_PER_WEEK)

    return {
        "totalVisits": visits,
        "enterCount": enter_count,
        "exitCount": exit_count,
        "avgVisitsPerWeek": round_half_up(visits / weeks, 1),
        "lastVisit": last_visit,
        "mostActiveDay": most_active_day,
    }


def tally_most_visited(rows: Iterable[Any]) -> Optional[Dict[str, Any]]:
    """
    Zona con más actividades en la muestra. Empates: la primera zona que
    apareció en la muestra. rows = (zone_id, zone_name) en el orden de la muestra.
    """
    counts: Dict[Any, Dict[str, Any]] = {}
    for zone_id, zone_name in rows:
        if zone_id not in counts:
            counts[zone_id] = {"name": zone_name, "count": 0}
        counts[zone_id]["count"] += 1

    if not counts:
        return None

    zone_id, best = max(counts.items(), key=lambda item: item[1]["count"])
    return {"id": zone_id, "name": best["name"], "visitCount": best["count"]}
