"""Live event channel: GET /ws (websocket).

Inbound:  {"type": "auth", "token": "<access token>"}
          {"type": "subscribe" | "unsubscribe", "tournamentId": 7}
          {"type": "ping"}
Outbound: tournament_update / transaction_update events pushed by the hub,
          plus auth_ok / subscribed / unsubscribed / pong / error replies.

Tournament rooms need no authentication; per-user transaction events are
only delivered after a successful auth message.
"""

import logging

from fastapi import APIRouter, WebSocket, WebSocketDisconnect
from pydantic import ValidationError

from src.tw_common.errors import InvalidCredentialsError
from src.tw_gateway.auth.jwt_handler import user_id_from_token
from src.tw_realtime.api.schemas import ClientMessage
from src.tw_realtime.domain.hub import NotificationHub

logger = logging.getLogger(__name__)

router = APIRouter(tags=["realtime"])


@router.websocket("/ws")
async def live_channel(websocket: WebSocket) -> None:
    hub: NotificationHub = websocket.app.state.hub
    await websocket.accept()
    hub.register(websocket)
    try:
        while True:
            raw = await websocket.receive_text()
            await handle_client_message(hub, websocket, raw)
    except WebSocketDisconnect:
        logger.debug("Live connection closed (user=%s)", hub.user_of(websocket))
    finally:
        hub.remove(websocket)


async def handle_client_message(hub: NotificationHub, websocket: WebSocket, raw: str) -> None:
    try:
        msg = ClientMessage.model_validate_json(raw)
    except ValidationError:
        logger.warning("Ignoring malformed live-channel message: %.200s", raw)
        await websocket.send_json({"type": "error", "message": "Invalid message"})
        return

    if msg.type == "ping":
        await websocket.send_json({"type": "pong"})
        return

    if msg.type == "auth":
        try:
            user_id = user_id_from_token(msg.token or "")
        except InvalidCredentialsError:
            await websocket.send_json({"type": "error", "message": "Invalid or expired token"})
            return
        hub.bind_user(websocket, user_id)
        await websocket.send_json({"type": "auth_ok", "userId": user_id})
        return

    if msg.tournament_id is None:
        await websocket.send_json({"type": "error", "message": "tournamentId is required"})
        return

    if msg.type == "subscribe":
        hub.subscribe(websocket, msg.tournament_id)
        await websocket.send_json({"type": "subscribed", "tournamentId": msg.tournament_id})
    else:
        hub.unsubscribe(websocket, msg.tournament_id)
        await websocket.send_json({"type": "unsubscribed", "tournamentId": msg.tournament_id})
