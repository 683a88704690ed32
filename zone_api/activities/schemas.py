from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class ActivityTypeEnum(str, Enum):
    ENTER = "enter"
    EXIT = "exit"


class ActivitySort(str, Enum):
    RECENT = "recent"
    OLDEST = "oldest"
    ZONE = "zone"


class ActivityCreate(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    zone_id: str = Field(..., alias="zoneId", min_length=1)
    # El servicio valida el valor para responder con su propio mensaje
    type: str
