"""Dispatch realtime websocket events to the appropriate handlers."""
from __future__ import annotations

import logging
from typing import Any, Dict, Optional

from pydantic import ValidationError

from models.event_payloads import JoinSessionPayload, ToggleNotificationsPayload
from models.session_models import Session
from services.realtime.connection_manager import Connection
from services.realtime.relay_context import RelayContext
from services.realtime.ws_detection import DetectionMessageHandler
from services.realtime.ws_video import VideoMessageHandler

LOGGER = logging.getLogger(__name__)


class RealtimeSessionHandler:
	"""Route websocket events for every connection of the relay."""

	def __init__(self, context: RelayContext) -> None:
		self.context = context
		self.detection_handler = DetectionMessageHandler(context)
		self.video_handler = VideoMessageHandler(context)

	async def handle(self, connection: Connection, payload: Dict[str, Any]) -> None:
		"""Process a single inbound `{"type": ..., "data": {...}}` message."""
		event = payload.get("type")
		data = payload.get("data")
		if data is None:
			data = {}
		try:
			if not isinstance(data, dict):
				raise ValueError("Event data must be a JSON object.")
			if event == "join-session":
				await self.join(connection, data)
			elif event == "detection":
				await self.detection_handler.detect(connection, data)
			elif event == "video-frame":
				await self.video_handler.relay_frame(connection, data)
			elif event == "stop-video-stream":
				await self.video_handler.stop_stream(connection, data)
			elif event == "request-users-list":
				await self._send_users_list(connection)
			elif event == "toggle-discord-notifications":
				await self._toggle_notifications(connection, data)
			elif event == "ping":
				await self.context.connections.emit("pong", {"timestamp": self._timestamp()}, connection)
			else:
				raise ValueError(f"Unsupported event type: {event}")
		except ValidationError as exc:
			await self._send_error(connection, _describe_validation_error(event, exc))
		except Exception as exc:
			LOGGER.warning("Rejected %s from connection %s: %s", event, connection.connection_id, exc)
			await self._send_error(connection, str(exc))

	async def join(self, connection: Connection, data: Dict[str, Any]) -> Session:
		"""Register the connection's identity and announce it."""
		request = JoinSessionPayload.model_validate(data)
		# Without an explicit id, a connection keeps the identity it already has.
		user_id = request.userId or connection.user_id
		if connection.user_id and connection.user_id != user_id:
			await self.release(connection)
		self._take_over(user_id, connection)

		session = self.context.sessions.join(
			user_id, request.userName, connection.connection_id, now=self.context.clock()
		)
		connection.user_id = session.id
		connection.user_name = session.display_name
		LOGGER.info("User joined: %s (%s)", session.display_name, session.id)

		await self.context.connections.emit(
			"user-joined",
			{"userId": session.id, "userName": session.display_name, "timestamp": self._timestamp()},
			connection,
		)
		await self.context.connections.emit(
			"session-joined",
			{
				"userId": session.id,
				"userName": session.display_name,
				"connectedUsers": self.context.sessions.count(),
			},
			connection,
		)
		await self._send_users_list(connection)
		return session

	def _take_over(self, user_id: Optional[str], connection: Connection) -> None:
		"""Detach the identity from whichever other connection held it."""
		if not user_id:
			return
		current = self.context.sessions.get(user_id)
		if current is None or current.connection_id == connection.connection_id:
			return
		previous = self.context.connections.get(current.connection_id)
		if previous is not None and previous.user_id == user_id:
			previous.user_id = None
			previous.user_name = None
			LOGGER.info("Identity %s moved from connection %s", user_id, previous.connection_id)

	async def release(self, connection: Connection) -> Optional[Session]:
		"""Drop the connection's identity and everything keyed by it.

		Only the connection that currently owns the registry entry clears it.
		"""
		user_id, user_name = connection.user_id, connection.user_name
		connection.user_id = None
		connection.user_name = None
		if not user_id:
			return None
		session = self.context.sessions.get(user_id)
		if session is None or session.connection_id != connection.connection_id:
			return None

		self.context.sessions.leave(user_id)
		if self.context.engine.discard(user_id):
			LOGGER.info("Cleared detection window for %s", user_name)
		if self.context.frames.evict(user_id):
			LOGGER.info("Cleared latest frame for %s", user_name)
		LOGGER.info("User left: %s (%s)", user_name, user_id)

		await self.context.connections.emit(
			"user-left",
			{"userId": user_id, "userName": user_name, "timestamp": self._timestamp()},
			connection,
		)
		return session

	async def disconnect(self, connection: Connection) -> None:
		await self.release(connection)
		LOGGER.info("Client disconnected: %s", connection.connection_id)

	async def _send_users_list(self, connection: Connection) -> None:
		users = [session.to_payload() for session in self.context.sessions.list()]
		await self.context.connections.emit("users-list", users, connection)
		LOGGER.debug("Sent users list to %s: %d users", connection.connection_id, len(users))

	async def _toggle_notifications(self, connection: Connection, data: Dict[str, Any]) -> None:
		request = ToggleNotificationsPayload.model_validate(data)
		self.context.notifier.set_notifications_enabled(request.enabled)
		state = "enabled" if request.enabled else "disabled"
		LOGGER.info("%s %s Discord notifications", connection.user_name or connection.connection_id, state)
		await self.context.connections.emit(
			"discord-notifications-toggled",
			{"enabled": request.enabled, "message": f"Discord notifications {state}"},
			connection,
		)

	async def _send_error(self, connection: Connection, message: str) -> None:
		await self.context.connections.emit("error", {"message": message}, connection)

	def _timestamp(self) -> str:
		return self.context.clock().isoformat()


def _describe_validation_error(event: Any, exc: ValidationError) -> str:
	errors = exc.errors()
	if not errors:
		return f"Invalid {event} payload"
	first = errors[0]
	location = ".".join(str(part) for part in first.get("loc", ())) or "payload"
	return f"Invalid {event} payload: {location}: {first.get('msg', 'invalid value')}"
