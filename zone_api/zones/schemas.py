from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class NotificationOption(str, Enum):
    ENTER = "enter"
    EXIT = "exit"
    BOTH = "both"


class ZoneSort(str, Enum):
    NAME = "name"
    DATE = "date"
    RADIUS = "radius"


class ZoneBase(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    title: str = Field(..., min_length=1, max_length=100, examples=["Home"])
    address: str = Field(..., min_length=1, examples=["1600 Amphitheatre Pkwy"])
    location: str = Field(..., min_length=1, examples=["Mountain View, CA"])
    latitude: float = Field(..., examples=[37.4])
    longitude: float = Field(..., examples=[-122.1])
    radius: float = Field(..., examples=[200])
    icon: str = Field(..., min_length=1, examples=["house.fill"])
    color: str = Field(..., min_length=1, examples=["#4F46E5"])
    description: Optional[str] = None
    notification_option: NotificationOption = Field(NotificationOption.BOTH, alias="notificationOption")
    notification_text: str = Field("You have entered the zone", alias="notificationText")
    image_url: Optional[str] = Field(None, alias="imageUrl")


class ZoneCreate(ZoneBase):
    pass


class ZoneUpdate(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    title: Optional[str] = Field(None, min_length=1, max_length=100)
    address: Optional[str] = Field(None, min_length=1)
    location: Optional[str] = Field(None, min_length=1)
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    radius: Optional[float] = None
    icon: Optional[str] = Field(None, min_length=1)
    color: Optional[str] = Field(None, min_length=1)
    description: Optional[str] = None
    notification_option: Optional[NotificationOption] = Field(None, alias="notificationOption")
    notification_text: Optional[str] = Field(None, alias="notificationText")
    image_url: Optional[str] = Field(None, alias="imageUrl")
