"""Relay raw video frames between realtime websocket clients."""
from __future__ import annotations

import logging
from typing import Any, Dict

from models.event_payloads import VideoFramePayload
from services.realtime.connection_manager import Connection
from services.realtime.relay_context import RelayContext

LOGGER = logging.getLogger(__name__)


class VideoMessageHandler:
	"""Cache each client's latest frame and fan frames out to everyone else."""

	def __init__(self, context: RelayContext) -> None:
		self.context = context

	async def relay_frame(self, connection: Connection, payload: Dict[str, Any]) -> int:
		"""Store the frame for alert attachments and broadcast it to the other clients."""
		user_id, user_name = connection.require_identity()
		frame = VideoFramePayload.model_validate(payload)
		self.context.frames.put(user_id, frame.frameData)
		return await self.context.connections.emit(
			"video-frame",
			{
				"userId": user_id,
				"userName": user_name,
				"frameData": frame.frameData,
				"timestamp": self.context.clock().isoformat(),
			},
			connection,
		)

	async def stop_stream(self, connection: Connection, payload: Dict[str, Any]) -> int:
		user_id, user_name = connection.require_identity()
		LOGGER.info("Video stream stopped from %s", user_name)
		return await self.context.connections.emit(
			"stop-video-stream",
			{"userId": user_id, "userName": user_name},
			connection,
		)
