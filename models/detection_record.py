from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict


@dataclass
class ConfirmedDetection:
    """A confirmed run of tracked-class detections for one identity.

    Attributes:
        id: Unique id (uuid4 string) minted when the confirmation fires.
        user_id: Identity of the client whose stream produced the run.
        user_name: Display name of that client at confirmation time.
        object_class: The tracked class that was confirmed (e.g. "person").
        timestamp_initial: Time of the first detection in the run.
        timestamp_final: Time of the detection that reached the threshold.
    """

    id: str
    user_id: str
    user_name: str
    object_class: str
    timestamp_initial: datetime
    timestamp_final: datetime

    def to_payload(self) -> Dict[str, Any]:
        """Return the JSON-ready form broadcast as `new-detection`."""
        return {
            "id": self.id,
            "userId": self.user_id,
            "userName": self.user_name,
            "objectClass": self.object_class,
            "timestampInitial": self.timestamp_initial.isoformat(),
            "timestampFinal": self.timestamp_final.isoformat(),
        }
