"""Latest raw video frame per identity."""

from __future__ import annotations

from typing import Dict, Optional


class FrameCache:
	"""Hold the most recent frame each identity streamed.

	Entries are overwritten on every frame and evicted on disconnect, so the
	cache never holds more than one frame per connected identity.
	"""

	def __init__(self) -> None:
		self._frames: Dict[str, str] = {}

	def put(self, user_id: str, payload: str) -> None:
		self._frames[user_id] = payload

	def get(self, user_id: str) -> Optional[str]:
		return self._frames.get(user_id)

	def evict(self, user_id: str) -> bool:
		"""Drop the cached frame; returns whether one was present."""
		return self._frames.pop(user_id, None) is not None

	def __len__(self) -> int:
		return len(self._frames)
