"""Simple in-memory registry of connected sessions."""

from __future__ import annotations

from datetime import datetime
from typing import Dict, List, Optional
from uuid import uuid4

from models.session_models import Session, utcnow


class SessionStore:
	"""Track the identified users currently connected to the relay."""

	def __init__(self) -> None:
		self._sessions: Dict[str, Session] = {}

	def join(
		self,
		user_id: Optional[str],
		display_name: str,
		connection_id: str,
		now: Optional[datetime] = None,
	) -> Session:
		"""Store a session for `user_id`, minting an id when none is supplied.

		An existing session for the same identity is replaced.
		"""
		session = Session(
			id=user_id or str(uuid4()),
			display_name=display_name,
			connection_id=connection_id,
			joined_at=now or utcnow(),
		)
		self._sessions[session.id] = session
		return session

	def leave(self, user_id: str) -> Optional[Session]:
		"""Remove and return the session, or None if it is not present."""
		return self._sessions.pop(user_id, None)

	def get(self, user_id: str) -> Optional[Session]:
		return self._sessions.get(user_id)

	def list(self) -> List[Session]:
		"""Return a snapshot of all sessions."""
		return list(self._sessions.values())

	def count(self) -> int:
		return len(self._sessions)

	def contains(self, user_id: str) -> bool:
		return user_id in self._sessions
