"""Session domain models for the realtime relay."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict


def utcnow() -> datetime:
	return datetime.now(timezone.utc)


@dataclass
class Session:
	"""A connected, identified client.

	Presence in the registry means active; `active` is kept for the
	users-list payload that clients already render.
	"""

	id: str
	display_name: str
	connection_id: str
	active: bool = True
	joined_at: datetime = field(default_factory=utcnow)

	def to_payload(self) -> Dict[str, Any]:
		"""Return the public view sent in users-list and the HTTP API."""
		return {
			"id": self.id,
			"name": self.display_name,
			"isActive": self.active,
			"joinedAt": self.joined_at.isoformat(),
		}


@dataclass
class DetectionWindow:
	"""A run of tracked-class detections being accumulated for one identity."""

	count: int
	window_start: datetime
