# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
Realtime channel: one WebSocket per client at ``/ws``.

Every frame in either direction is ``{"event": <name>, "data": <payload>}``.

Inbound events:
    join_project   data = projectId        -> acked with ``joined_project``
    leave_project  data = projectId
    send_message   data = {projectId, ...} -> ``receive_message`` to the room

Outbound domain events (ticket_created, ticket_updated, ticket_deleted,
comment_added) are pushed by the relay as tickets change.
"""
import uuid
from typing import Any, Optional

from fastapi import APIRouter, WebSocket, WebSocketDisconnect

from devtrack.core.dependencies import get_relay
from devtrack.core.logging import get_logger
from devtrack.services.event_relay import Channel

logger = get_logger(__name__)

router = APIRouter(tags=["Realtime"])


class WebSocketChannel(Channel):
    def __init__(self, websocket: WebSocket):
        super().__init__(uuid.uuid4().hex)
        self.websocket = websocket

    async def send(self, event: str, payload: Any) -> None:
        await self.websocket.send_json({"event": event, "data": payload})


def _project_id(data: Any) -> Optional[str]:
    if isinstance(data, str) and data.strip():
        return data.strip()
    if isinstance(data, dict):
        value = data.get("projectId")
        if isinstance(value, str) and value.strip():
            return value.strip()
    return None


@router.websocket("/ws")
async def realtime_endpoint(websocket: WebSocket):
    await websocket.accept()
    relay = get_relay()
    channel = WebSocketChannel(websocket)
    relay.register(channel)

    try:
        while True:
            try:
                frame = await websocket.receive_json()
            except ValueError:
                await channel.send("error", {"message": "Frames must be JSON objects"})
                continue
            if not isinstance(frame, dict) or not isinstance(frame.get("event"), str):
                await channel.send("error", {"message": "Frames must carry an event name"})
                continue

            event, data = frame["event"], frame.get("data")

            if event == "join_project":
                project_id = _project_id(data)
                if project_id is None:
                    await channel.send("error", {"message": "join_project requires a projectId"})
                    continue
                relay.join(channel.id, project_id)
                await channel.send("joined_project", project_id)

            elif event == "leave_project":
                project_id = _project_id(data)
                if project_id is None:
                    await channel.send("error", {"message": "leave_project requires a projectId"})
                    continue
                relay.leave(channel.id, project_id)

            elif event == "send_message":
                project_id = _project_id(data) if isinstance(data, dict) else None
                if project_id is None:
                    await channel.send("error", {"message": "send_message requires a projectId"})
                    continue
                await relay.broadcast(project_id, "receive_message", data)

            else:
                await channel.send("error", {"message": f"Unknown event: {event}"})
    except WebSocketDisconnect as exc:
        logger.debug("Channel %s closed code=%s", channel.id, exc.code)
    finally:
        relay.disconnect(channel.id)
