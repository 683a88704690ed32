"""
Caches locales (persistidas) del estado del servidor.

Se construyen explícitamente y tienen ciclo de vida propio:
initialize() hidrata desde el storage, dispose() persiste y libera.
Si una llamada falla se guarda el mensaje en `error` y los datos en caché
se mantienen; el error se limpia con el siguiente éxito del mismo método.
"""
import logging
from datetime import tzinfo
from typing import Any, Dict, List, Optional

from ..activities.statistics import compute_zone_statistics, format_time_ago
from .api import ApiClient, ApiResult

logger = logging.getLogger(__name__)


class BaseStore:
    storage_key = ""
    persisted_fields = ()

    def __init__(self, api: ApiClient, storage):
        self.api = api
        self.storage = storage
        self.is_loading = False
        self.error: Optional[str] = None
        self._error_source: Optional[str] = None
        self._initialized = False

    @property
    def initialized(self) -> bool:
        return self._initialized

    def initialize(self):
        if self._initialized:
            return self
        saved = self.storage.get(self.storage_key) or {}
        for name in self.persisted_fields:
            if name in saved:
                setattr(self, name, saved[name])
        self._initialized = True
        logger.debug(f"{type(self).__name__} hidratado desde '{self.storage_key}'")
        return self

    def dispose(self) -> None:
        if not self._initialized:
            return
        self.persist()
        self._initialized = False

    def persist(self) -> None:
        self.storage.set(self.storage_key, {name: getattr(self, name) for name in self.persisted_fields})

    def __enter__(self):
        return self.initialize()

    def __exit__(self, exc_type, exc, tb):
        self.dispose()

    def _ensure_ready(self) -> None:
        if not self._initialized:
            raise RuntimeError(f"{type(self).__name__} is not initialized")

    def _begin(self) -> None:
        self._ensure_ready()
        self.is_loading = True

    def _succeed(self, method: str) -> None:
        self.is_loading = False
        if self._error_source == method:
            self.error = None
            self._error_source = None
        self.persist()

    def _fail(self, method: str, result: ApiResult, fallback: str) -> None:
        self.is_loading = False
        self.error = result.error_message or fallback
        self._error_source = method
        logger.warning(f"⚠️ {type(self).__name__}.{method}: {self.error}")


class ZoneStore(BaseStore):
    storage_key = "zone-storage"
    persisted_fields = ("zones",)

    def __init__(self, api: ApiClient, storage):
        super().__init__(api, storage)
        self.zones: List[Dict[str, Any]] = []

    @staticmethod
    def _payload(data: Dict[str, Any]) -> Dict[str, Any]:
        # La app usa "image", el API espera "imageUrl"
        payload = {k: v for k, v in data.items() if k not in ("id", "createdAt", "updatedAt", "image")}
        if data.get("image") is not None:
            payload["imageUrl"] = data["image"]
        return payload

    def fetch_zones(self) -> None:
        self._begin()
        result = self.api.get("/zones")
        if not result.success:
            self._fail("fetch_zones", result, "Failed to fetch zones")
            return
        self.zones = list(result.data or [])
        self._succeed("fetch_zones")

    def refresh_zones(self) -> None:
        self.fetch_zones()

    def add_zone(self, data: Dict[str, Any]) -> bool:
        self._begin()
        result = self.api.post("/zones", self._payload(data))
        if not result.success:
            self._fail("add_zone", result, "Failed to create zone")
            return False
        self.zones = [result.data] + self.zones
        self._succeed("add_zone")
        return True

    def update_zone(self, zone_id: str, updates: Dict[str, Any]) -> bool:
        self._begin()
        result = self.api.put(f"/zones/{zone_id}", self._payload(updates))
        if not result.success:
            self._fail("update_zone", result, "Failed to update zone")
            return False
        self.zones = [result.data if z["id"] == zone_id else z for z in self.zones]
        self._succeed("update_zone")
        return True

    def delete_zone(self, zone_id: str) -> bool:
        self._begin()
        result = self.api.delete(f"/zones/{zone_id}")
        if not result.success:
            self._fail("delete_zone", result, "Failed to delete zone")
            return False
        self.zones = [z for z in self.zones if z["id"] != zone_id]
        self._succeed("delete_zone")
        return True

    def get_zone_by_id(self, zone_id: str) -> Optional[Dict[str, Any]]:
        return next((z for z in self.zones if z["id"] == zone_id), None)

    def filtered(self, icon: str = None, sort_by: str = "date") -> List[Dict[str, Any]]:
        zones = [z for z in self.zones if not icon or z.get("icon") == icon]
        if sort_by == "name":
            return sorted(zones, key=lambda z: z.get("title") or "")
        if sort_by == "radius":
            return sorted(zones, key=lambda z: z.get("radius") or 0)
        return sorted(zones, key=lambda z: z.get("createdAt") or "", reverse=True)


class ActivityStore(BaseStore):
    storage_key = "activity-storage"
    persisted_fields = ("activities",)

    def __init__(self, api: ApiClient, storage):
        super().__init__(api, storage)
        self.activities: List[Dict[str, Any]] = []

    @staticmethod
    def _with_time(activity: Dict[str, Any], current_ms: Optional[int] = None) -> Dict[str, Any]:
        return {**activity, "time": format_time_ago(activity["timestamp"], current_ms)}

    def fetch_activities(self, zone_id: str = None) -> None:
        self._begin()
        result = self.api.get("/activities", params={"zoneId": zone_id})
        if not result.success:
            self._fail("fetch_activities", result, "Failed to fetch activities")
            return
        self.activities = list(result.data or [])
        self._succeed("fetch_activities")

    def add_activity(self, zone_id: str, activity_type: str) -> bool:
        self._begin()
        result = self.api.post("/activities", {"zoneId": zone_id, "type": activity_type})
        if not result.success:
            self._fail("add_activity", result, "Failed to create activity")
            return False
        self.activities = [result.data] + self.activities
        self._succeed("add_activity")
        return True

    def get_recent_activities(self, limit: int = 10, current_ms: Optional[int] = None) -> List[Dict[str, Any]]:
        return [self._with_time(a, current_ms) for a in self.activities[:limit]]

    def get_activities_by_zone_id(self, zone_id: str, current_ms: Optional[int] = None) -> List[Dict[str, Any]]:
        return [self._with_time(a, current_ms) for a in self.activities if a["zoneId"] == zone_id]

    def zone_statistics(
        self,
        zone_id: str,
        current_ms: Optional[int] = None,
        tz: Optional[tzinfo] = None
    ) -> Dict[str, Any]:
        return compute_zone_statistics(zone_id, self.activities, current_ms=current_ms, tz=tz)
