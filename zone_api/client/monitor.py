import logging
from typing import List, Optional

from ..zones.geofence import Transition, ZoneMembershipTracker
from .stores import ActivityStore, ZoneStore

logger = logging.getLogger(__name__)


class GeofenceMonitor:
    """
    Conecta lecturas de posición con el registro de actividades.

    No escucha al sistema operativo ni tiene un loop propio: quien tenga
    acceso al GPS llama a on_location() con cada lectura.
    """

    def __init__(
        self,
        zone_store: ZoneStore,
        activity_store: ActivityStore,
        tracker: Optional[ZoneMembershipTracker] = None
    ):
        self.zone_store = zone_store
        self.activity_store = activity_store
        self.tracker = tracker or ZoneMembershipTracker()

    def on_location(self, latitude: float, longitude: float) -> List[Transition]:
        """Devuelve las transiciones que se registraron correctamente."""
        recorded = []
        for transition in self.tracker.update(latitude, longitude, self.zone_store.zones):
            if self.activity_store.add_activity(transition.zone_id, transition.type):
                recorded.append(transition)
            else:
                logger.warning(
                    f"⚠️ No se registró {transition.type} en zona {transition.zone_id}: "
                    f"{self.activity_store.error}"
                )
        return recorded
