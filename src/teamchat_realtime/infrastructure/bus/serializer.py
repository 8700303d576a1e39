"""Envelope for presence events crossing process boundaries."""
from __future__ import annotations

from typing import Any

from pydantic import BaseModel


class BusEnvelope(BaseModel):
    event: str
    data: dict[str, Any]


def serialize_event(event_type: str, payload: dict[str, Any]) -> str:
    return BusEnvelope(event=event_type, data=payload).model_dump_json()


def deserialize_event(raw: str | bytes) -> tuple[str, dict[str, Any]]:
    envelope = BusEnvelope.model_validate_json(raw)
    return envelope.event, envelope.data
