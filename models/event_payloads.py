"""Inbound websocket event payloads."""

from typing import Optional

from pydantic import BaseModel, ConfigDict, field_validator


class _Payload(BaseModel):
	model_config = ConfigDict(extra="ignore")


class JoinSessionPayload(_Payload):
	userId: Optional[str] = None
	userName: str

	@field_validator("userName")
	@classmethod
	def _name_not_blank(cls, value: str) -> str:
		value = value.strip()
		if not value:
			raise ValueError("userName is required")
		return value


class DetectionPayload(_Payload):
	objectClass: str


class VideoFramePayload(_Payload):
	frameData: str


class ToggleNotificationsPayload(_Payload):
	enabled: bool
