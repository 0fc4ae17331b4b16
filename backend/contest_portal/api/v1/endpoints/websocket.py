"""
Notification WebSocket endpoint.

Connect with: ws://host/ws/notifications?token=<jwt_token>

The channel is bound to the user in the verified token. Server events:
- connected: {"userId": ...}
- notification: {"id", "type", "title", "content", "createdAt"}
- pong: reply to a client {"event": "ping"}
"""

from fastapi import APIRouter, Query, WebSocket, WebSocketDisconnect

from contest_portal.core.database import get_session_local
from contest_portal.core.exceptions import PortalError
from contest_portal.core.logging_config import logger
from contest_portal.modules.auth.dependencies import get_user_from_token
from contest_portal.services.notification_hub import notification_hub

router = APIRouter()

WS_POLICY_VIOLATION = 1008


@router.websocket("/ws/notifications")
async def notifications_websocket(websocket: WebSocket, token: str = Query(...)):
    # Authenticate with a short-lived session; none is held while connected
    try:
        async with get_session_local()() as db:
            user = await get_user_from_token(token, db)
            user_id = user.id
    except PortalError as e:
        logger.warning(f"Notification socket rejected: {e.message}")
        await websocket.close(code=WS_POLICY_VIOLATION, reason=e.message)
        return

    await notification_hub.connect(websocket, user_id)

    try:
        while True:
            message = await websocket.receive_json()
            if isinstance(message, dict) and message.get("event") == "ping":
                await websocket.send_json({"event": "pong"})
    except WebSocketDisconnect:
        pass
    except ValueError as e:
        # Non-JSON frame
        logger.warning(f"Closing notification socket of user {user_id}: {e}")
        await websocket.close(code=WS_POLICY_VIOLATION)
    finally:
        await notification_hub.disconnect(websocket, user_id)
