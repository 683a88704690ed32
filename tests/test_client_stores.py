import json

import httpx
import pytest

from zone_api.client.api import ApiClient
from zone_api.client.monitor import GeofenceMonitor
from zone_api.client.storage import JsonFileStorage, MemoryStorage
from zone_api.client.stores import ActivityStore, ZoneStore

NOW_MS = 1_700_000_000_000


def envelope(data, status_code=200):
    return httpx.Response(status_code, json={"success": True, "data": data, "requestId": "r-1"})


def failure(code, message, status_code):
    return httpx.Response(
        status_code,
        json={"success": False, "error": {"code": code, "message": message}, "requestId": "r-1"},
    )


def zone(zone_id, title="Home", **extra):
    data = {
        "id": zone_id,
        "title": title,
        "latitude": 37.4,
        "longitude": -122.1,
        "radius": 200,
        "icon": "house.fill",
        "createdAt": "2024-01-01T00:00:00+00:00",
    }
    data.update(extra)
    return data


class FakeServer:
    """Responde según una tabla (método, ruta) -> respuesta y guarda las peticiones."""

    def __init__(self):
        self.routes = {}
        self.requests = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        handler = self.routes.get((request.method, request.url.path))
        if handler is None:
            return failure("HTTP_404", "Not found", 404)
        return handler(request) if callable(handler) else handler


@pytest.fixture
def server():
    return FakeServer()


@pytest.fixture
def api(server):
    api = ApiClient("http://test/api", token="tkn", transport=httpx.MockTransport(server))
    yield api
    api.close()


def test_api_client_sends_token_and_drops_empty_params(api, server):
    server.routes[("GET", "/api/activities")] = envelope([])

    result = api.get("/activities", params={"zoneId": None, "type": "enter"})

    assert result.success
    request = server.requests[0]
    assert request.headers["Authorization"] == "Bearer tkn"
    assert dict(request.url.params) == {"type": "enter"}


def test_api_client_parses_error_envelope(api, server):
    server.routes[("GET", "/api/zones/z1")] = failure("NOT_FOUND", "Zone not found", 404)

    result = api.get("/zones/z1")

    assert not result.success
    assert result.status_code == 404
    assert result.error.code == "NOT_FOUND"
    assert result.error_message == "Zone not found"


def test_api_client_non_json_body(api, server):
    server.routes[("GET", "/api/zones")] = httpx.Response(502, text="Bad gateway")

    result = api.get("/zones")

    assert result.error.code == "HTTP_502"
    assert result.error_message == "Bad gateway"


def test_api_client_network_error():
    def boom(request):
        raise httpx.ConnectError("connection refused", request=request)

    api = ApiClient("http://test/api", transport=httpx.MockTransport(boom))

    result = api.get("/zones")

    assert not result.success
    assert result.error.code == "NETWORK_ERROR"


def test_store_requires_initialize(api):
    store = ZoneStore(api, MemoryStorage())

    with pytest.raises(RuntimeError):
        store.fetch_zones()


def test_store_hydrates_from_storage(api):
    storage = MemoryStorage({"zone-storage": {"zones": [zone("z1")]}})

    store = ZoneStore(api, storage).initialize()

    assert store.get_zone_by_id("z1")["title"] == "Home"
    assert store.get_zone_by_id("missing") is None


def test_fetch_zones_persists(api, server):
    server.routes[("GET", "/api/zones")] = envelope([zone("z1"), zone("z2", "Work")])
    storage = MemoryStorage()

    with ZoneStore(api, storage) as store:
        store.fetch_zones()
        assert not store.is_loading
        assert len(store.zones) == 2

    assert [z["id"] for z in storage.get("zone-storage")["zones"]] == ["z1", "z2"]
    assert not store.initialized


def test_failed_fetch_keeps_cache_and_sets_error(api, server):
    server.routes[("GET", "/api/zones")] = failure("INTERNAL_ERROR", "Internal server error", 500)
    store = ZoneStore(api, MemoryStorage({"zone-storage": {"zones": [zone("z1")]}})).initialize()

    store.fetch_zones()

    assert store.error == "Internal server error"
    assert [z["id"] for z in store.zones] == ["z1"]
    assert not store.is_loading


def test_error_cleared_only_by_same_method(api, server):
    server.routes[("GET", "/api/zones")] = failure("INTERNAL_ERROR", "Internal server error", 500)
    server.routes[("DELETE", "/api/zones/z1")] = envelope({"message": "Zone deleted successfully"})
    store = ZoneStore(api, MemoryStorage({"zone-storage": {"zones": [zone("z1")]}})).initialize()

    store.fetch_zones()
    store.delete_zone("z1")
    assert store.error == "Internal server error"

    server.routes[("GET", "/api/zones")] = envelope([])
    store.fetch_zones()
    assert store.error is None


def test_add_zone_prepends_and_maps_image(api, server):
    created = zone("z2", "Work", image="https://img.example.com/w.png")
    server.routes[("POST", "/api/zones")] = envelope(created, 201)
    store = ZoneStore(api, MemoryStorage({"zone-storage": {"zones": [zone("z1")]}})).initialize()

    assert store.add_zone({"title": "Work", "image": "https://img.example.com/w.png"})

    body = json.loads(server.requests[0].content)
    assert body == {"title": "Work", "imageUrl": "https://img.example.com/w.png"}
    assert [z["id"] for z in store.zones] == ["z2", "z1"]


def test_update_and_delete_zone(api, server):
    server.routes[("PUT", "/api/zones/z1")] = envelope(zone("z1", "Office"))
    server.routes[("DELETE", "/api/zones/z1")] = envelope({"message": "Zone deleted successfully"})
    store = ZoneStore(api, MemoryStorage({"zone-storage": {"zones": [zone("z1"), zone("z2")]}})).initialize()

    assert store.update_zone("z1", {"title": "Office"})
    assert store.get_zone_by_id("z1")["title"] == "Office"

    assert store.delete_zone("z1")
    assert [z["id"] for z in store.zones] == ["z2"]


def test_failed_update_returns_false(api, server):
    server.routes[("PUT", "/api/zones/z1")] = failure("FORBIDDEN", "You do not have permission to update this zone", 403)
    store = ZoneStore(api, MemoryStorage({"zone-storage": {"zones": [zone("z1")]}})).initialize()

    assert store.update_zone("z1", {"title": "Office"}) is False
    assert store.get_zone_by_id("z1")["title"] == "Home"
    assert "permission" in store.error


def test_filtered_zones(api):
    zones = [
        zone("a", "Gym", radius=50, icon="dumbbell", createdAt="2024-01-02T00:00:00+00:00"),
        zone("b", "Home", radius=300, createdAt="2024-01-03T00:00:00+00:00"),
        zone("c", "Cafe", radius=100, createdAt="2024-01-01T00:00:00+00:00"),
    ]
    store = ZoneStore(api, MemoryStorage({"zone-storage": {"zones": zones}})).initialize()

    assert [z["id"] for z in store.filtered()] == ["b", "a", "c"]
    assert [z["id"] for z in store.filtered(sort_by="name")] == ["c", "a", "b"]
    assert [z["id"] for z in store.filtered(sort_by="radius")] == ["a", "c", "b"]
    assert [z["id"] for z in store.filtered(icon="dumbbell")] == ["a"]


def activity(activity_id, zone_id, activity_type, timestamp):
    return {"id": activity_id, "zoneId": zone_id, "zoneName": "Home", "type": activity_type, "timestamp": timestamp}


def test_activity_store_views(api):
    activities = [
        activity("a3", "z1", "exit", NOW_MS - 30_000),
        activity("a2", "z2", "enter", NOW_MS - 2 * 3600_000),
        activity("a1", "z1", "enter", NOW_MS - 3 * 86_400_000),
    ]
    store = ActivityStore(api, MemoryStorage({"activity-storage": {"activities": activities}})).initialize()

    recent = store.get_recent_activities(limit=2, current_ms=NOW_MS)
    assert [a["time"] for a in recent] == ["Just now", "2 hours ago"]

    by_zone = store.get_activities_by_zone_id("z1", current_ms=NOW_MS)
    assert [a["id"] for a in by_zone] == ["a3", "a1"]
    assert by_zone[1]["time"] == "3 days ago"

    stats = store.zone_statistics("z1", current_ms=NOW_MS)
    assert stats["totalVisits"] == 1


def test_fetch_activities_with_zone_filter(api, server):
    server.routes[("GET", "/api/activities")] = envelope([activity("a1", "z1", "enter", NOW_MS)])
    store = ActivityStore(api, MemoryStorage()).initialize()

    store.fetch_activities("z1")

    assert server.requests[0].url.params["zoneId"] == "z1"
    assert len(store.activities) == 1


def test_geofence_monitor_records_transitions(api, server):
    def create_activity(request):
        body = json.loads(request.content)
        return envelope(activity(f"a{len(server.requests)}", body["zoneId"], body["type"], NOW_MS), 201)

    server.routes[("POST", "/api/activities")] = create_activity
    zones = ZoneStore(api, MemoryStorage({"zone-storage": {"zones": [zone("z1")]}})).initialize()
    activities = ActivityStore(api, MemoryStorage()).initialize()
    monitor = GeofenceMonitor(zones, activities)

    entered = monitor.on_location(37.4, -122.1)
    assert [(t.zone_id, t.type) for t in entered] == [("z1", "enter")]
    assert monitor.on_location(37.4001, -122.1) == []

    exited = monitor.on_location(38.0, -122.1)
    assert [(t.zone_id, t.type) for t in exited] == [("z1", "exit")]
    assert [a["type"] for a in activities.activities] == ["exit", "enter"]


def test_geofence_monitor_skips_failed_writes(api, server):
    server.routes[("POST", "/api/activities")] = failure("NOT_FOUND", "Zone not found", 404)
    zones = ZoneStore(api, MemoryStorage({"zone-storage": {"zones": [zone("z1")]}})).initialize()
    activities = ActivityStore(api, MemoryStorage()).initialize()

    assert GeofenceMonitor(zones, activities).on_location(37.4, -122.1) == []
    assert activities.error == "Zone not found"


def test_json_file_storage_round_trip(tmp_path, api, server):
    path = tmp_path / "state" / "store.json"
    server.routes[("GET", "/api/zones")] = envelope([zone("z1")])

    with ZoneStore(api, JsonFileStorage(str(path))) as store:
        store.fetch_zones()

    reloaded = ZoneStore(api, JsonFileStorage(str(path))).initialize()
    assert reloaded.get_zone_by_id("z1")["title"] == "Home"


def test_json_file_storage_ignores_corrupt_file(tmp_path):
    path = tmp_path / "store.json"
    path.write_text("{not json", encoding="utf-8")

    storage = JsonFileStorage(str(path))

    assert storage.get("zone-storage") is None
    storage.set("zone-storage", {"zones": []})
    assert json.loads(path.read_text(encoding="utf-8")) == {"zone-storage": {"zones": []}}


def test_geofence_monitor_ignores_deleted_zone(api, server):
    server.routes[("POST", "/api/activities")] = lambda request: envelope(
        activity("a1", "z1", "enter", NOW_MS), 201
    )
    server.routes[("DELETE", "/api/zones/z1")] = envelope({"message": "Zone deleted successfully"})
    zones = ZoneStore(api, MemoryStorage({"zone-storage": {"zones": [zone("z1")]}})).initialize()
    activities = ActivityStore(api, MemoryStorage()).initialize()
    monitor = GeofenceMonitor(zones, activities)

    monitor.on_location(37.4, -122.1)
    zones.delete_zone("z1")
    requests_before = len(server.requests)

    assert monitor.on_location(37.4, -122.1) == []
    assert len(server.requests) == requests_before
    assert activities.error is None
    assert monitor.tracker.inside == set()


@pytest.mark.parametrize(
    "payload, message",
    [
        ({"success": False, "error": "Service unavailable"}, "Service unavailable"),
        ({"success": False, "error": ["unexpected"]}, "Request failed"),
        (["not", "an", "object"], "Request failed"),
    ],
)
def test_api_client_tolerates_malformed_error_payload(api, server, payload, message):
    server.routes[("GET", "/api/zones")] = httpx.Response(503, json=payload)
    store = ZoneStore(api, MemoryStorage()).initialize()

    store.fetch_zones()

    assert store.error == message
    assert store.zones == []
