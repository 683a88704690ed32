from typing import List, Optional, Tuple

from sqlalchemy.orm import Session

from .models import Zone, utcnow

ZONE_ORDERING = {
    "name": (Zone.title.asc(),),
    "radius": (Zone.radius.asc(),),
    "date": (Zone.created_at.desc(),),
}


def create_zone(db: Session, user_id: int, data: dict) -> Zone:
    db_zone = Zone(user_id=user_id, **data)
    db.add(db_zone)
    db.commit()
    db.refresh(db_zone)
    return db_zone


def get_zone(db: Session, zone_id: str) -> Optional[Zone]:
    """Busca por id sin filtrar eliminadas; el llamador revisa deleted_at."""
    return db.query(Zone).filter(Zone.id == zone_id).first()


def list_zones(
    db: Session,
    user_id: int,
    icon: str = None,
    sort_by: str = "date",
    limit: int = 100,
    offset: int = 0
) -> Tuple[List[Zone], int]:
    query = db.query(Zone).filter(
        Zone.user_id == user_id,
        Zone.deleted_at.is_(None)
    )
    if icon:
        query = query.filter(Zone.icon == icon)

    total = query.count()
    zones = (
        query.order_by(*ZONE_ORDERING.get(sort_by, ZONE_ORDERING["date"]))
        .offset(offset)
        .limit(limit)
        .all()
    )
    return zones, total


def update_zone(db: Session, db_zone: Zone, data: dict) -> Zone:
    # Solo cambian los campos enviados
    for key, value in data.items():
        setattr(db_zone, key, value)
    db.commit()
    db.refresh(db_zone)
    return db_zone


def soft_delete_zone(db: Session, db_zone: Zone) -> Zone:
    db_zone.deleted_at = utcnow()
    db.commit()
    db.refresh(db_zone)
    return db_zone


def zone_belongs_to_user(db: Session, zone_id: str, user_id: int) -> bool:
    return db.query(Zone.id).filter(
        Zone.id == zone_id,
        Zone.user_id == user_id,
        Zone.deleted_at.is_(None)
    ).first() is not None
