"""Handle per-frame detection events coming over the realtime websocket."""
from __future__ import annotations

import logging
from typing import Any, Dict, Optional

from models.detection_record import ConfirmedDetection
from models.event_payloads import DetectionPayload
from services.realtime.connection_manager import Connection
from services.realtime.relay_context import RelayContext

LOGGER = logging.getLogger(__name__)


class DetectionMessageHandler:
	"""Feed detections to the confirmation engine and act on confirmations."""

	def __init__(self, context: RelayContext) -> None:
		self.context = context

	async def detect(self, connection: Connection, payload: Dict[str, Any]) -> Optional[ConfirmedDetection]:
		"""Apply one detection; returns the confirmation when this event fired one."""
		user_id, user_name = connection.require_identity()
		detection = DetectionPayload.model_validate(payload)
		confirmed = self.context.engine.observe(user_id, user_name, detection.objectClass, self.context.clock())
		if confirmed is None:
			return None

		# The engine has already reset; nothing below can make it fire again.
		frame = self.context.frames.get(user_id)
		await self._record(confirmed)
		await self.context.connections.emit("new-detection", confirmed.to_payload(), connection)
		await self._alert(confirmed, frame)
		return confirmed

	async def _record(self, confirmed: ConfirmedDetection) -> None:
		try:
			await self.context.detections.add(confirmed)
		except Exception:
			LOGGER.exception("Failed to store detection %s", confirmed.id)

	async def _alert(self, confirmed: ConfirmedDetection, frame: Optional[str]) -> None:
		try:
			await self.context.notifier.send_detection_alert(confirmed, frame)
		except Exception:
			LOGGER.exception("Alert dispatch raised for detection %s", confirmed.id)
