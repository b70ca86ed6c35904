"""Room fan-out: hub behaviour, tenant isolation, the /ws protocol."""

from types import SimpleNamespace

from fastapi.testclient import TestClient

from app.main import app as fastapi_app
from app.models.customer.order import OrderStatus
from app.services.notifications import (
    NotificationHub,
    RealtimeMessage,
    emit_order_status,
    get_notification_hub,
    hub,
    order_room,
    tenant_room,
)
from tests.conftest import order_payload


class FakeSocket:
    def __init__(self, fail=False):
        self.sent = []
        self.fail = fail
        self.accepted = False

    async def accept(self):
        self.accepted = True

    async def send_json(self, data):
        if self.fail:
            raise RuntimeError("connection reset")
        self.sent.append(data)

    def events(self):
        return [frame["event"] for frame in self.sent]


async def test_connect_greets_and_registers():
    notifier = NotificationHub()
    ws = FakeSocket()

    await notifier.connect(ws)

    assert ws.accepted
    assert ws.events() == ["connected"]
    assert notifier.get_stats()["active_connections"] == 1


async def test_publish_reaches_only_room_members():
    notifier = NotificationHub()
    a, b = FakeSocket(), FakeSocket()
    notifier.join(a, tenant_room("t1"))
    notifier.join(b, tenant_room("t2"))

    delivered = await notifier.publish(tenant_room("t1"), RealtimeMessage(event="new-order", data={"x": 1}))

    assert delivered == 1
    assert a.sent[0]["event"] == "new-order"
    assert a.sent[0]["data"] == {"x": 1}
    assert "timestamp" in a.sent[0]
    assert b.sent == []


async def test_failed_send_drops_socket_and_does_not_raise():
    notifier = NotificationHub()
    good, bad = FakeSocket(), FakeSocket(fail=True)
    notifier.join(good, tenant_room("t1"))
    notifier.join(bad, tenant_room("t1"))

    delivered = await notifier.publish(tenant_room("t1"), RealtimeMessage(event="new-order", data={}))

    assert delivered == 1
    assert notifier.members(tenant_room("t1")) == {good}
    assert bad not in notifier.connection_info
    assert notifier.get_stats()["messages_dropped"] == 1


async def test_leave_and_disconnect_clean_up_rooms():
    notifier = NotificationHub()
    ws = FakeSocket()
    notifier.join(ws, tenant_room("t1"))
    notifier.join(ws, order_room("o1"))

    notifier.leave(ws, order_room("o1"))
    assert order_room("o1") not in notifier.rooms

    notifier.disconnect(ws)
    assert notifier.rooms == {}
    assert notifier.connection_info == {}


async def test_status_change_goes_to_tenant_and_order_rooms():
    notifier = NotificationHub()
    dashboard, tracker, stranger = FakeSocket(), FakeSocket(), FakeSocket()
    notifier.join(dashboard, tenant_room("t1"))
    notifier.join(tracker, order_room("o1"))
    notifier.join(stranger, order_room("o2"))

    order = SimpleNamespace(
        id="o1", tenant_id="t1", order_number="PIZZAMARIO-0001",
        estimated_time=25, status=OrderStatus.READY,
    )

    await emit_order_status(notifier, order, "Your order is now ready")

    assert dashboard.sent[0]["event"] == "order-status-updated"
    assert dashboard.sent[0]["data"]["order_number"] == "PIZZAMARIO-0001"
    assert tracker.sent[0] == {
        "event": "status-update",
        "data": {"status": "READY", "estimated_time": 25, "message": "Your order is now ready"},
        "timestamp": tracker.sent[0]["timestamp"],
    }
    assert stranger.sent == []


async def test_new_order_reaches_own_tenant_room_only(client, margherita, other_tenant, tenant):
    mine, theirs = FakeSocket(), FakeSocket()
    hub.join(mine, tenant_room(tenant.id))
    hub.join(theirs, tenant_room(other_tenant.id))

    resp = await client.post("/orders", json=order_payload(margherita.id), headers={"X-Tenant": "pizzamario"})
    assert resp.status_code == 201

    assert mine.events() == ["new-order"]
    data = mine.sent[0]["data"]
    assert data["order_number"] == "PIZZAMARIO-0001"
    assert data["total"] == 30.25
    assert data["type"] == "PICKUP"
    assert data["estimated_time"] == 25
    assert theirs.sent == []


async def test_status_update_over_http_notifies_tracker(client, margherita, employee_headers, tenant):
    created = (await client.post(
        "/orders", json=order_payload(margherita.id), headers={"X-Tenant": "pizzamario"}
    )).json()["data"]
    tracker = FakeSocket()
    hub.join(tracker, order_room(created["id"]))

    resp = await client.put(f"/orders/{created['id']}/status", json={"status": "PREPARING"}, headers=employee_headers)
    assert resp.status_code == 200

    assert tracker.sent[0]["event"] == "status-update"
    assert tracker.sent[0]["data"]["message"] == "Your order is now preparing"


def test_websocket_protocol():
    notifier = NotificationHub()
    fastapi_app.dependency_overrides[get_notification_hub] = lambda: notifier
    # no context manager: the lifespan and its DB setup are not needed here
    client = TestClient(fastapi_app)
    try:
        with client.websocket_connect("/ws") as ws:
            assert ws.receive_json()["event"] == "connected"

            ws.send_json({"event": "join-tenant", "data": "abc"})
            joined = ws.receive_json()
            assert joined["event"] == "joined"
            assert joined["data"] == {"room": "tenant-abc"}

            ws.send_json({"event": "join-order", "data": {"order_id": "o-1"}})
            assert ws.receive_json()["data"] == {"room": "order-o-1"}
            assert notifier.get_stats()["active_rooms"] == 2

            ws.send_json({"event": "leave-order", "data": "o-1"})
            assert ws.receive_json()["event"] == "left"

            ws.send_json({"event": "ping"})
            assert ws.receive_json()["event"] == "pong"

            ws.send_json({"event": "join-tenant"})
            assert ws.receive_json()["event"] == "error"

            ws.send_text("not json")
            assert ws.receive_json()["data"] == {"message": "Invalid JSON"}
    finally:
        fastapi_app.dependency_overrides.clear()
