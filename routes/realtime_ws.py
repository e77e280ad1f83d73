"""WebSocket endpoint for the detection relay."""

from __future__ import annotations

import json
import logging

from fastapi import APIRouter, Depends, HTTPException, WebSocket
from starlette.websockets import WebSocketDisconnect, WebSocketState

from services.realtime.relay_context import RelayContext
from services.realtime.ws_session import RealtimeSessionHandler

router = APIRouter()
LOGGER = logging.getLogger(__name__)


def _require_relay(websocket: WebSocket) -> RelayContext:
	relay = getattr(websocket.app.state, "relay", None)
	if relay is None:
		raise HTTPException(status_code=500, detail="Relay unavailable")
	return relay


@router.websocket("/ws")
async def realtime_socket(websocket: WebSocket, relay: RelayContext = Depends(_require_relay)):
	"""Run one client connection: read events in order until it disconnects."""
	await websocket.accept()
	connection = relay.connections.register(websocket)
	LOGGER.info("Client connected: %s", connection.connection_id)

	handler = RealtimeSessionHandler(relay)
	try:
		while True:
			try:
				raw = await websocket.receive_text()
			except WebSocketDisconnect:
				break
			except Exception:
				if websocket.client_state != WebSocketState.CONNECTED:
					break
				await relay.connections.emit("error", {"message": "Invalid websocket frame"}, connection)
				continue
			try:
				payload = json.loads(raw)
			except ValueError:
				await relay.connections.emit("error", {"message": "Payload must be JSON"}, connection)
				continue
			if not isinstance(payload, dict):
				await relay.connections.emit("error", {"message": "Payload must be a JSON object"}, connection)
				continue
			await handler.handle(connection, payload)
	finally:
		try:
			await handler.disconnect(connection)
		finally:
			relay.connections.unregister(connection.connection_id)
