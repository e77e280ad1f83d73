"""Connection bookkeeping and event fan-out for the realtime websocket."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple
from uuid import uuid4

from fastapi import WebSocket

LOGGER = logging.getLogger(__name__)


class Audience(str, Enum):
	ORIGIN = "origin"
	OTHERS = "others"
	EVERYONE = "everyone"


# Delivery policy is fixed per event type.
EVENT_AUDIENCE: Dict[str, Audience] = {
	"user-joined": Audience.OTHERS,
	"user-left": Audience.OTHERS,
	"video-frame": Audience.OTHERS,
	"stop-video-stream": Audience.OTHERS,
	"new-detection": Audience.EVERYONE,
	"session-joined": Audience.ORIGIN,
	"users-list": Audience.ORIGIN,
	"error": Audience.ORIGIN,
	"discord-notifications-toggled": Audience.ORIGIN,
	"pong": Audience.ORIGIN,
}


class NotInSessionError(RuntimeError):
	"""Raised when an event needs an identity the connection never announced."""

	def __init__(self) -> None:
		super().__init__("User not in session")


@dataclass
class Connection:
	"""One open websocket plus the identity it announced at join time."""

	connection_id: str
	websocket: WebSocket
	user_id: Optional[str] = None
	user_name: Optional[str] = None

	@property
	def identified(self) -> bool:
		return bool(self.user_id and self.user_name)

	def require_identity(self) -> Tuple[str, str]:
		"""Return `(user_id, user_name)` or raise NotInSessionError."""
		if not self.identified:
			raise NotInSessionError()
		return self.user_id, self.user_name


class ConnectionManager:
	"""Own the connection side table and deliver events by audience."""

	def __init__(self) -> None:
		self._connections: Dict[str, Connection] = {}

	def register(self, websocket: WebSocket) -> Connection:
		connection = Connection(connection_id=uuid4().hex, websocket=websocket)
		self._connections[connection.connection_id] = connection
		return connection

	def unregister(self, connection_id: str) -> Optional[Connection]:
		return self._connections.pop(connection_id, None)

	def get(self, connection_id: str) -> Optional[Connection]:
		return self._connections.get(connection_id)

	def __len__(self) -> int:
		return len(self._connections)

	def recipients(self, event: str, origin: Connection) -> List[Connection]:
		"""Return the connections that should receive `event` from `origin`."""
		audience = EVENT_AUDIENCE.get(event)
		if audience is None:
			raise ValueError(f"No delivery policy for event '{event}'")
		if audience is Audience.ORIGIN:
			return [origin]
		snapshot = list(self._connections.values())
		if audience is Audience.OTHERS:
			return [conn for conn in snapshot if conn.connection_id != origin.connection_id]
		return snapshot

	async def emit(self, event: str, data: Any, origin: Connection) -> int:
		"""Send `event` to its audience and return how many deliveries succeeded."""
		message = json.dumps({"type": event, "data": data})
		delivered = 0
		for connection in self.recipients(event, origin):
			if await self._deliver(connection, message):
				delivered += 1
		return delivered

	async def _deliver(self, connection: Connection, message: str) -> bool:
		try:
			await connection.websocket.send_text(message)
		except Exception as exc:
			LOGGER.warning("Dropping message for connection %s: %s", connection.connection_id, exc)
			return False
		return True
