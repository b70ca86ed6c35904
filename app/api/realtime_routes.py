import json
import logging
from typing import Any, Optional

from fastapi import APIRouter, Depends, WebSocket, WebSocketDisconnect

from app.services.notifications import (
    EventType,
    NotificationHub,
    RealtimeMessage,
    get_notification_hub,
    order_room,
    tenant_room,
)

log = logging.getLogger(__name__)

router = APIRouter()


def _room_target(data: Any, key: str) -> Optional[str]:
    """Accepts either a bare id or {"<key>": id}."""
    if isinstance(data, dict):
        data = data.get(key)
    if isinstance(data, (str, int)) and str(data).strip():
        return str(data).strip()
    return None


async def _send_error(notifier: NotificationHub, websocket: WebSocket, message: str):
    await notifier.send_personal(websocket, RealtimeMessage(event=EventType.ERROR, data={"message": message}))


@router.websocket("/ws")
async def realtime_socket(
    websocket: WebSocket,
    notifier: NotificationHub = Depends(get_notification_hub),
):
    """
    Live order updates for dashboards, POS terminals and tracking pages.

    Clients join ``tenant-<id>`` for new orders and status changes of a
    restaurant, and ``order-<id>`` to follow a single order.
    """
    await notifier.connect(websocket)
    try:
        while True:
            raw = await websocket.receive_text()
            try:
                frame = json.loads(raw)
            except ValueError:
                await _send_error(notifier, websocket, "Invalid JSON")
                continue
            if not isinstance(frame, dict):
                await _send_error(notifier, websocket, "Invalid message")
                continue

            event = frame.get("event")
            data = frame.get("data")

            if event == EventType.PING.value:
                await notifier.send_personal(websocket, RealtimeMessage(event=EventType.PONG, data={}))

            elif event == EventType.JOIN_TENANT.value:
                tenant_id = _room_target(data, "tenant_id")
                if not tenant_id:
                    await _send_error(notifier, websocket, "tenant id required")
                    continue
                room = tenant_room(tenant_id)
                notifier.join(websocket, room)
                await notifier.send_personal(websocket, RealtimeMessage(event=EventType.JOINED, data={"room": room}))

            elif event == EventType.JOIN_ORDER.value:
                order_id = _room_target(data, "order_id")
                if not order_id:
                    await _send_error(notifier, websocket, "order id required")
                    continue
                room = order_room(order_id)
                notifier.join(websocket, room)
                await notifier.send_personal(websocket, RealtimeMessage(event=EventType.JOINED, data={"room": room}))

            elif event == EventType.LEAVE_ORDER.value:
                order_id = _room_target(data, "order_id")
                if order_id:
                    room = order_room(order_id)
                    notifier.leave(websocket, room)
                    await notifier.send_personal(websocket, RealtimeMessage(event=EventType.LEFT, data={"room": room}))

            else:
                await _send_error(notifier, websocket, f"Unknown event: {event}")

    except WebSocketDisconnect:
        pass
    finally:
        notifier.disconnect(websocket)
