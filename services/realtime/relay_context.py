"""Per-application container for the relay's state and collaborators."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Callable

from dal.detection_dal import DetectionDAL
from models.session_models import utcnow
from services.alerts.discord_notifier import DiscordNotifier
from services.realtime.confirmation_engine import ConfirmationEngine
from services.realtime.connection_manager import ConnectionManager
from services.realtime.frame_cache import FrameCache
from services.realtime.session_store import SessionStore


@dataclass
class RelayContext:
	"""Everything an event handler may read or mutate, built once per app."""

	sessions: SessionStore
	engine: ConfirmationEngine
	frames: FrameCache
	connections: ConnectionManager
	notifier: DiscordNotifier
	detections: DetectionDAL
	clock: Callable[[], datetime] = field(default=utcnow)
