import logging
import time
from typing import Optional

from sqlalchemy.orm import Session

from ..core.exceptions import NotFoundError, ValidationError
from ..database.config import settings
from ..zones.crud import get_zone
from ..zones.models import Zone
from ..zones.service import isoformat
from . import crud
from .models import Activity, ActivityType, ZoneSnapshot
from .statistics import format_time_ago

logger = logging.getLogger(__name__)


def format_activity(activity: Activity, current_ms: Optional[int] = None) -> dict:
    timestamp = int(activity.timestamp)
    return {
        "id": activity.id,
        "zoneId": activity.zone_id,
        "zoneName": activity.zone_name,
        "type": activity.type,
        # Relativo a "ahora": se recalcula en cada lectura, nunca se guarda
        "time": format_time_ago(timestamp, current_ms),
        "timestamp": timestamp,
        "icon": activity.icon,
        "createdAt": isoformat(activity.created_at),
    }


class ActivityService:
    """
    Registro de entradas/salidas y estadísticas agregadas por usuario.
    create_activity es el único punto de escritura: nada lo dispara solo.
    """

    def __init__(self, db: Session):
        self.db = db

    def _get_user_zone(self, zone_id: str, owner_id: int) -> Zone:
        zone = get_zone(self.db, zone_id)
        if not zone or zone.deleted_at is not None:
            raise NotFoundError("Zone")
        if zone.user_id != owner_id:
            raise ValidationError("Zone does not belong to user")
        return zone

    def create_activity(self, owner_id: int, zone_id: str, activity_type: str) -> dict:
        start = time.monotonic()

        zone = self._get_user_zone(zone_id, owner_id)
        if activity_type not in ActivityType.ALL:
            raise ValidationError('Type must be "enter" or "exit"', {"type": activity_type})

        activity = crud.create_activity(self.db, owner_id, ZoneSnapshot.from_zone(zone), activity_type)

        logger.info(
            f"🚩 Actividad creada activity_id={activity.id} user_id={owner_id} "
            f"zone_id={zone_id} type={activity_type} duration_ms={int((time.monotonic() - start) * 1000)}"
        )
        return format_activity(activity)

    def get_activities(
        self,
        owner_id: int,
        zone_id: str = None,
        activity_type: str = None,
        sort_by: str = "recent",
        limit: int = None,
        offset: int = None
    ) -> dict:
        start = time.monotonic()
        activities, total = crud.list_activities(
            self.db,
            owner_id,
            zone_id=zone_id,
            activity_type=activity_type,
            sort_by=sort_by or "recent",
            limit=limit or settings.default_page_size,
            offset=offset or 0,
        )
        logger.info(
            f"📋 Actividades consultadas user_id={owner_id} count={len(activities)} "
            f"duration_ms={int((time.monotonic() - start) * 1000)}"
        )
        return {"activities": [format_activity(a) for a in activities], "total": total}

    def get_statistics(self, owner_id: int, zone_id: str = None) -> dict:
        start = time.monotonic()
        if zone_id:
            self._get_user_zone(zone_id, owner_id)

        stats = crud.get_statistics(self.db, owner_id, zone_id, settings.statistics_sample_size)
        logger.info(
            f"📊 Estadísticas user_id={owner_id} zone_id={zone_id} "
            f"duration_ms={int((time.monotonic() - start) * 1000)}"
        )
        return stats
