"""Read-only views over the relay's sessions and confirmed detections."""

from __future__ import annotations

from typing import Any, Dict, List

from fastapi import HTTPException, Request

from services.realtime.relay_context import RelayContext


def _relay(request: Request) -> RelayContext:
	relay = getattr(request.app.state, "relay", None)
	if relay is None:
		raise HTTPException(status_code=500, detail="Relay not initialized.")
	return relay


async def health(request: Request) -> Dict[str, Any]:
	"""Report liveness with the current session and detection counts."""
	relay = _relay(request)
	return {
		"status": "OK",
		"timestamp": relay.clock().isoformat(),
		"connectedUsers": relay.sessions.count(),
		"totalDetections": await relay.detections.count(),
	}


async def list_users(request: Request) -> List[Dict[str, Any]]:
	"""Return every connected session."""
	return [session.to_payload() for session in _relay(request).sessions.list()]


async def recent_detections(request: Request, limit: int = 100) -> List[Dict[str, Any]]:
	"""Return up to `limit` confirmed detections, newest first."""
	detections = await _relay(request).detections.list_recent(limit)
	return [detection.to_payload() for detection in detections]


async def stats(request: Request) -> Dict[str, Any]:
	relay = _relay(request)
	return {
		"connectedUsers": relay.sessions.count(),
		"totalDetections": await relay.detections.count(),
		"activeWindows": len(relay.engine),
		"cachedFrames": len(relay.frames),
		"notificationsEnabled": relay.notifier.notifications_enabled,
		"timestamp": relay.clock().isoformat(),
	}
