from typing import Optional

from fastapi import APIRouter, Depends, Query, Request, status
from sqlalchemy.orm import Session

from ..core.responses import paginated_response, success_response
from ..database.config import settings
from ..database.database import get_db
from ..users.models import User
from ..users.security import get_current_user
from .schemas import ActivityCreate, ActivitySort, ActivityTypeEnum
from .service import ActivityService

router = APIRouter(
    prefix="/activities",
    tags=["Activities"]
)


@router.get("")
def list_activities(
    request: Request,
    zone_id: Optional[str] = Query(None, alias="zoneId"),
    type: Optional[ActivityTypeEnum] = Query(None),
    sort: ActivitySort = Query(ActivitySort.RECENT),
    limit: Optional[int] = Query(None, ge=1, le=1000),
    offset: Optional[int] = Query(None, ge=0),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    result = ActivityService(db).get_activities(
        current_user.id,
        zone_id=zone_id,
        activity_type=type.value if type else None,
        sort_by=sort.value,
        limit=limit,
        offset=offset,
    )
    return paginated_response(
        request,
        result["activities"],
        result["total"],
        limit or settings.default_page_size,
        offset or 0,
    )


@router.post("")
def create_activity(
    activity: ActivityCreate,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    created = ActivityService(db).create_activity(current_user.id, activity.zone_id, activity.type)
    return success_response(request, created, status.HTTP_201_CREATED)


@router.get("/statistics")
@router.get("/stats", include_in_schema=False)
def get_statistics(
    request: Request,
    zone_id: Optional[str] = Query(None, alias="zoneId"),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    return success_response(request, ActivityService(db).get_statistics(current_user.id, zone_id))
