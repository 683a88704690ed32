from typing import List, Optional, Tuple

from sqlalchemy.orm import Session

from .models import Activity, ActivityType, ZoneSnapshot
from .statistics import now_ms, tally_most_visited

ACTIVITY_ORDERING = {
    "recent": (Activity.timestamp.desc(),),
    "oldest": (Activity.timestamp.asc(),),
    "zone": (Activity.zone_name.asc(), Activity.timestamp.desc()),
}


def create_activity(
    db: Session,
    user_id: int,
    snapshot: ZoneSnapshot,
    activity_type: str,
    timestamp_ms: Optional[int] = None
) -> Activity:
    activity = Activity(
        user_id=user_id,
        zone_id=snapshot.zone_id,
        zone_name=snapshot.zone_name,
        icon=snapshot.icon,
        type=activity_type,
        timestamp=timestamp_ms if timestamp_ms is not None else now_ms(),
    )
    db.add(activity)
    db.commit()
    db.refresh(activity)
    return activity


def _base_query(db: Session, user_id: int, zone_id: str = None, activity_type: str = None):
    query = db.query(Activity).filter(Activity.user_id == user_id)
    if zone_id:
        query = query.filter(Activity.zone_id == zone_id)
    if activity_type:
        query = query.filter(Activity.type == activity_type)
    return query


def list_activities(
    db: Session,
    user_id: int,
    zone_id: str = None,
    activity_type: str = None,
    sort_by: str = "recent",
    limit: int = 100,
    offset: int = 0
) -> Tuple[List[Activity], int]:
    query = _base_query(db, user_id, zone_id, activity_type)
    total = query.count()
    activities = (
        query.order_by(*ACTIVITY_ORDERING.get(sort_by, ACTIVITY_ORDERING["recent"]))
        .offset(offset)
        .limit(limit)
        .all()
    )
    return activities, total


def get_statistics(db: Session, user_id: int, zone_id: str = None, sample_size: int = 1000) -> dict:
    """
    Conteos con tres consultas COUNT y la zona más visitada sobre una muestra
    acotada (las `sample_size` actividades más recientes), nunca la tabla completa.
    """
    total = _base_query(db, user_id, zone_id).count()
    enter_count = _base_query(db, user_id, zone_id, ActivityType.ENTER).count()
    exit_count = _base_query(db, user_id, zone_id, ActivityType.EXIT).count()

    sample = (
        _base_query(db, user_id, zone_id)
        .with_entities(Activity.zone_id, Activity.zone_name)
        .order_by(Activity.timestamp.desc())
        .limit(sample_size)
        .all()
    )

    return {
        "total": total,
        "enterCount": enter_count,
        "exitCount": exit_count,
        "mostVisitedZone": tally_most_visited(sample),
    }
