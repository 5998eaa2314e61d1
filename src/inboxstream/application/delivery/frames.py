"""Server-Sent Events framing for delivery events."""

from __future__ import annotations

import json

from pydantic import TypeAdapter

from inboxstream.domain.models import DeliveryEvent

_event_adapter: TypeAdapter[DeliveryEvent] = TypeAdapter(DeliveryEvent)


def encode_frame(event: DeliveryEvent) -> str:
    """Render one event as ``event: <name>\\ndata: <json>\\n\\n``."""
    data = event.model_dump_json(by_alias=True, exclude={"event"})
    return f"event: {event.event}\ndata: {data}\n\n"


def decode_frames(payload: str) -> list[DeliveryEvent]:
    """Parse a complete SSE body back into events, in wire order."""
    events: list[DeliveryEvent] = []
    for record in payload.split("\n\n"):
        if not record.strip():
            continue
        name = None
        data = None
        for line in record.splitlines():
            if line.startswith("event:"):
                name = line[len("event:"):].strip()
            elif line.startswith("data:"):
                data = line[len("data:"):].strip()
        if name is None or data is None:
            raise ValueError(f"Malformed SSE record: {record!r}")
        events.append(_event_adapter.validate_python({"event": name, **json.loads(data)}))
    return events
