"""Debounce noisy per-frame classifications into confirmed detections."""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Dict, Optional
from uuid import uuid4

from models.detection_record import ConfirmedDetection
from models.session_models import DetectionWindow

LOGGER = logging.getLogger(__name__)

REQUIRED_DETECTIONS = 10
TIME_WINDOW_SECONDS = 10.0
TRACKING_OBJECT = "person"


class ConfirmationEngine:
	"""Per-identity counter over a time window for one tracked class.

	An identity with no window is idle. The first tracked detection opens a
	window; each further one increments it. The window confirms when the
	count reaches `required_count` no later than `window_seconds` after the
	first detection, and restarts from the current detection once it is
	older than that.
	"""

	def __init__(
		self,
		required_count: int = REQUIRED_DETECTIONS,
		window_seconds: float = TIME_WINDOW_SECONDS,
		tracked_class: str = TRACKING_OBJECT,
	) -> None:
		if required_count < 1:
			raise ValueError("required_count must be at least 1")
		if window_seconds < 0:
			raise ValueError("window_seconds must not be negative")
		self.required_count = required_count
		self.window_seconds = window_seconds
		self.tracked_class = tracked_class
		self._windows: Dict[str, DetectionWindow] = {}

	def observe(
		self,
		user_id: str,
		user_name: str,
		object_class: str,
		now: datetime,
	) -> Optional[ConfirmedDetection]:
		"""Apply one detection event and return a confirmation if it fired."""
		if object_class != self.tracked_class:
			LOGGER.debug("Ignoring %s detection from %s", object_class, user_name)
			return None

		window = self._windows.get(user_id)
		if window is None:
			self._windows[user_id] = DetectionWindow(count=1, window_start=now)
			LOGGER.info("Started counting %s detections for %s", self.tracked_class, user_name)
			return None

		elapsed = (now - window.window_start).total_seconds()
		window.count += 1
		LOGGER.debug(
			"%s detection #%d from %s (%.1fs)", self.tracked_class, window.count, user_name, elapsed
		)

		if window.count >= self.required_count and elapsed <= self.window_seconds:
			# Drop the window before anyone sees the confirmation so it cannot fire twice.
			del self._windows[user_id]
			LOGGER.info(
				"%s confirmed for %s: %d detections in %.1fs",
				self.tracked_class,
				user_name,
				window.count,
				elapsed,
			)
			return ConfirmedDetection(
				id=str(uuid4()),
				user_id=user_id,
				user_name=user_name,
				object_class=object_class,
				timestamp_initial=window.window_start,
				timestamp_final=now,
			)

		if elapsed > self.window_seconds:
			LOGGER.info("Time window exceeded for %s, resetting counter", user_name)
			self._windows[user_id] = DetectionWindow(count=1, window_start=now)
		return None

	def window(self, user_id: str) -> Optional[DetectionWindow]:
		return self._windows.get(user_id)

	def discard(self, user_id: str) -> bool:
		"""Forget any run in progress for `user_id`; returns whether one existed."""
		return self._windows.pop(user_id, None) is not None

	def __len__(self) -> int:
		return len(self._windows)
