from typing import Optional

from fastapi import APIRouter, Depends, Query, Request, status
from sqlalchemy.orm import Session

from ..core.responses import paginated_response, success_response
from ..database.config import settings
from ..database.database import get_db
from ..users.models import User
from ..users.security import get_current_user
from .schemas import ZoneCreate, ZoneSort, ZoneUpdate
from .service import ZoneService

router = APIRouter(
    prefix="/zones",
    tags=["Zones"]
)


@router.get("")
def list_zones(
    request: Request,
    filter: Optional[str] = Query(None, description="Filtrar por icono"),
    sort: ZoneSort = Query(ZoneSort.DATE),
    limit: Optional[int] = Query(None, ge=1, le=1000),
    offset: Optional[int] = Query(None, ge=0),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    result = ZoneService(db).get_zones(
        current_user.id, icon=filter, sort_by=sort.value, limit=limit, offset=offset
    )
    return paginated_response(
        request,
        result["zones"],
        result["total"],
        limit or settings.default_page_size,
        offset or 0,
    )


@router.get("/{zone_id}")
def get_zone(
    zone_id: str,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    return success_response(request, ZoneService(db).get_zone_by_id(zone_id, current_user.id))


@router.post("")
def create_zone(
    zone: ZoneCreate,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    created = ZoneService(db).create_zone(current_user.id, zone.model_dump(mode="json"))
    return success_response(request, created, status.HTTP_201_CREATED)


@router.put("/{zone_id}")
def update_zone(
    zone_id: str,
    data: ZoneUpdate,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    updated = ZoneService(db).update_zone(
        zone_id, current_user.id, data.model_dump(mode="json", exclude_unset=True)
    )
    return success_response(request, updated)


@router.delete("/{zone_id}")
def delete_zone(
    zone_id: str,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    return success_response(request, ZoneService(db).delete_zone(zone_id, current_user.id))
