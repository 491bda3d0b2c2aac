# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
Event relay: in-process project rooms for realtime fan-out.

Membership is kept in two arena-indexed maps (room -> channels and
channel -> rooms) so a disconnect costs O(rooms joined). Delivery is
at-most-once and best effort: nothing is buffered for channels that join
late or are gone at broadcast time.

All mutation happens on the event loop; no locking.
"""
from abc import ABC, abstractmethod
from typing import Any, Dict, Set

from devtrack.core.logging import get_logger
from devtrack.metrics import RELAY_BROADCASTS, RELAY_CONNECTIONS, RELAY_DELIVERIES

logger = get_logger(__name__)


class Channel(ABC):
    """A connected client the relay can push events to."""

    def __init__(self, channel_id: str):
        self.id = channel_id

    @abstractmethod
    async def send(self, event: str, payload: Any) -> None:
        """Deliver one frame; raising marks the channel as dead."""


class EventRelay:
    def __init__(self) -> None:
        self._channels: Dict[str, Channel] = {}
        self._rooms: Dict[str, Set[str]] = {}
        self._memberships: Dict[str, Set[str]] = {}

    # ── Connection lifecycle ──

    def register(self, channel: Channel) -> None:
        self._channels[channel.id] = channel
        self._memberships.setdefault(channel.id, set())
        RELAY_CONNECTIONS.set(len(self._channels))
        logger.info("Channel connected id=%s", channel.id)

    def disconnect(self, channel_id: str) -> Set[str]:
        """Drop the channel from every room it joined. Safe to call twice."""
        rooms = self._memberships.pop(channel_id, set())
        for room_id in rooms:
            members = self._rooms.get(room_id)
            if members is None:
                continue
            members.discard(channel_id)
            if not members:
                del self._rooms[room_id]
        if self._channels.pop(channel_id, None) is not None:
            RELAY_CONNECTIONS.set(len(self._channels))
            logger.info("Channel disconnected id=%s rooms=%d", channel_id, len(rooms))
        return rooms

    # ── Rooms ──

    def join(self, channel_id: str, project_id: str) -> None:
        """Add a registered channel to a project's room.

        No authorization here: clients only learn project ids through the
        authenticated HTTP API.
        """
        if channel_id not in self._channels:
            raise KeyError(f"Channel {channel_id} is not connected")
        self._rooms.setdefault(project_id, set()).add(channel_id)
        self._memberships[channel_id].add(project_id)
        logger.info("Channel %s joined project %s", channel_id, project_id)

    def leave(self, channel_id: str, project_id: str) -> None:
        members = self._rooms.get(project_id)
        if members is not None:
            members.discard(channel_id)
            if not members:
                del self._rooms[project_id]
        self._memberships.get(channel_id, set()).discard(project_id)
        logger.debug("Channel %s left project %s", channel_id, project_id)

    def rooms_of(self, channel_id: str) -> Set[str]:
        return set(self._memberships.get(channel_id, set()))

    def members_of(self, project_id: str) -> Set[str]:
        return set(self._rooms.get(project_id, set()))

    @property
    def channel_count(self) -> int:
        return len(self._channels)

    # ── Fan-out ──

    async def broadcast(self, project_id: str, event: str, payload: Any) -> int:
        """Send ``event`` to every channel in the room; returns deliveries."""
        RELAY_BROADCASTS.labels(event=event).inc()
        recipients = sorted(self._rooms.get(project_id, ()))
        delivered = 0
        for channel_id in recipients:
            channel = self._channels.get(channel_id)
            if channel is None:
                # disconnected while an earlier send was in flight
                continue
            try:
                await channel.send(event, payload)
            except Exception as exc:
                RELAY_DELIVERIES.labels(status="failed").inc()
                logger.warning("Delivery to %s failed, dropping channel: %s", channel_id, exc)
                self.disconnect(channel_id)
                continue
            RELAY_DELIVERIES.labels(status="delivered").inc()
            delivered += 1
        logger.debug("Broadcast %s to project %s delivered=%d", event, project_id, delivered)
        return delivered
