"""
Real-time order notifications.

Every connected dashboard, POS or tracking page holds one WebSocket. After
connecting, the client joins a tenant room and, for single-order tracking,
an order room. Delivery is best effort and at most once: nothing is queued
for absent clients and a failed send just drops that socket. Clients recover
by reloading their lists.
"""
import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, Set

from fastapi import WebSocket

logger = logging.getLogger(__name__)


class EventType(str, Enum):
    """WebSocket event types"""
    # Connection events
    CONNECTED = "connected"
    JOINED = "joined"
    LEFT = "left"
    PING = "ping"
    PONG = "pong"
    ERROR = "error"

    # Client commands
    JOIN_TENANT = "join-tenant"
    JOIN_ORDER = "join-order"
    LEAVE_ORDER = "leave-order"

    # Order events
    NEW_ORDER = "new-order"
    ORDER_STATUS_UPDATED = "order-status-updated"
    STATUS_UPDATE = "status-update"


@dataclass
class RealtimeMessage:
    """Standard WebSocket frame"""
    event: str
    data: Dict[str, Any]
    timestamp: str = field(default_factory=lambda: datetime.now(timezone.utc).isoformat())

    def to_dict(self) -> Dict[str, Any]:
        event = self.event.value if isinstance(self.event, EventType) else self.event
        return {"event": event, "data": self.data, "timestamp": self.timestamp}


def tenant_room(tenant_id: str) -> str:
    return f"tenant-{tenant_id}"


def order_room(order_id: str) -> str:
    return f"order-{order_id}"


class NotificationHub:
    """Tracks sockets per room and fans messages out to them."""

    def __init__(self):
        self.rooms: Dict[str, Set[WebSocket]] = {}
        self.connection_info: Dict[WebSocket, Dict[str, Any]] = {}
        self.stats = {"total_connections": 0, "messages_sent": 0, "messages_dropped": 0}

    async def connect(self, websocket: WebSocket):
        await websocket.accept()
        self.register(websocket)
        await self.send_personal(websocket, RealtimeMessage(
            event=EventType.CONNECTED,
            data={"message": "Connected to real-time updates"},
        ))

    def register(self, websocket: WebSocket):
        self.connection_info[websocket] = {
            "rooms": set(),
            "connected_at": datetime.now(timezone.utc).isoformat(),
        }
        self.stats["total_connections"] += 1

    def join(self, websocket: WebSocket, room: str):
        if websocket not in self.connection_info:
            self.register(websocket)
        self.rooms.setdefault(room, set()).add(websocket)
        self.connection_info[websocket]["rooms"].add(room)
        logger.info("socket joined room=%s", room)

    def leave(self, websocket: WebSocket, room: str):
        members = self.rooms.get(room)
        if members is not None:
            members.discard(websocket)
            if not members:
                del self.rooms[room]
        info = self.connection_info.get(websocket)
        if info:
            info["rooms"].discard(room)

    def disconnect(self, websocket: WebSocket):
        info = self.connection_info.pop(websocket, None)
        if not info:
            return
        for room in list(info["rooms"]):
            members = self.rooms.get(room)
            if members is not None:
                members.discard(websocket)
                if not members:
                    del self.rooms[room]
        logger.info("socket disconnected rooms=%s", sorted(info["rooms"]))

    def members(self, room: str) -> Set[WebSocket]:
        return set(self.rooms.get(room, ()))

    async def send_personal(self, websocket: WebSocket, message: RealtimeMessage) -> bool:
        try:
            await websocket.send_json(message.to_dict())
        except Exception as e:
            logger.warning("dropping socket after failed send: %s", e)
            self.stats["messages_dropped"] += 1
            self.disconnect(websocket)
            return False
        self.stats["messages_sent"] += 1
        return True

    async def publish(self, room: str, message: RealtimeMessage) -> int:
        """Send to every socket in ``room``; returns how many got it."""
        delivered = 0
        for websocket in self.members(room):
            if await self.send_personal(websocket, message):
                delivered += 1
        logger.debug("published event=%s room=%s delivered=%s", message.to_dict()["event"], room, delivered)
        return delivered

    def get_stats(self) -> Dict[str, Any]:
        return {
            **self.stats,
            "active_connections": len(self.connection_info),
            "active_rooms": len(self.rooms),
        }

    def reset(self):
        self.rooms.clear()
        self.connection_info.clear()


# Global hub instance; one per process
hub = NotificationHub()


def get_notification_hub() -> NotificationHub:
    return hub


# =============================================================================
# EVENT EMITTERS
# =============================================================================

async def emit_new_order(notifier: NotificationHub, order) -> int:
    return await notifier.publish(tenant_room(order.tenant_id), RealtimeMessage(
        event=EventType.NEW_ORDER,
        data={
            "order_id": order.id,
            "order_number": order.order_number,
            "total": float(order.total),
            "type": order.type.value,
            "estimated_time": order.estimated_time,
        },
    ))


async def emit_order_status(notifier: NotificationHub, order, message: str) -> int:
    delivered = await notifier.publish(tenant_room(order.tenant_id), RealtimeMessage(
        event=EventType.ORDER_STATUS_UPDATED,
        data={
            "order_id": order.id,
            "order_number": order.order_number,
            "status": order.status.value,
            "estimated_time": order.estimated_time,
        },
    ))
    delivered += await notifier.publish(order_room(order.id), RealtimeMessage(
        event=EventType.STATUS_UPDATE,
        data={
            "status": order.status.value,
            "estimated_time": order.estimated_time,
            "message": message,
        },
    ))
    return delivered
