"""
Notification WebSocket Hub

Keeps the open notification sockets of every connected user and pushes
`notification` events to them. Delivery is best effort: users that are not
connected simply miss the push and read the persisted row later.
"""

import asyncio
from typing import Any, Dict, Set
from datetime import datetime
from fastapi import WebSocket

from contest_portal.core.logging_config import logger


class NotificationHub:
    """
    Manages per-user WebSocket connections.

    A user may hold several sockets at once (multiple tabs); each one gets
    every push addressed to that user.
    """

    def __init__(self):
        # user_id -> open sockets
        self._connections: Dict[int, Set[WebSocket]] = {}
        self._lock = asyncio.Lock()

    async def connect(self, websocket: WebSocket, user_id: int) -> None:
        """Accept the socket and join the user's private channel"""
        await websocket.accept()

        async with self._lock:
            self._connections.setdefault(user_id, set()).add(websocket)

        logger.info(f"Notification socket connected: user {user_id}")

        await websocket.send_json({
            "event": "connected",
            "data": {"userId": user_id},
            "timestamp": datetime.utcnow().isoformat(),
        })

    async def disconnect(self, websocket: WebSocket, user_id: int) -> None:
        async with self._lock:
            sockets = self._connections.get(user_id)
            if sockets is not None:
                sockets.discard(websocket)
                if not sockets:
                    del self._connections[user_id]

        logger.info(f"Notification socket disconnected: user {user_id}")

    async def send_to_user(self, user_id: int, event: str, data: Dict[str, Any]) -> int:
        """Send an event to every socket of one user; returns how many received it"""
        async with self._lock:
            sockets = list(self._connections.get(user_id, ()))

        if not sockets:
            return 0

        message = {"event": event, "data": data}
        delivered = 0
        dead = []

        for websocket in sockets:
            try:
                await websocket.send_json(message)
                delivered += 1
            except Exception as e:
                logger.warning(f"Error sending to user {user_id}: {e}")
                dead.append(websocket)

        for websocket in dead:
            await self.disconnect(websocket, user_id)

        return delivered

    def is_online(self, user_id: int) -> bool:
        return bool(self._connections.get(user_id))

    def connection_count(self) -> int:
        return sum(len(sockets) for sockets in self._connections.values())


notification_hub = NotificationHub()
