from __future__ import annotations

from collections import deque
from typing import Any

from auditflow.context import get_correlation_id
from auditflow.core.config import get_settings
from auditflow.core.events import event_bus

# most recent envelopes only; subscribers on event_bus see every event
published_events: deque[dict[str, Any]] = deque(maxlen=get_settings().event_retention)


def publish(envelope: dict[str, Any]) -> None:
    if envelope.get("correlation_id") is None:
        envelope["correlation_id"] = get_correlation_id()

    published_events.append(envelope)
    event_type = envelope.get("event_type")
    if isinstance(event_type, str) and event_type:
        event_bus.publish(event_type, envelope)


def publish_status_changed(
    *,
    entity_type: str,
    operation: str,
    tenant_id: str,
    entity_id: str,
    actor_id: str,
    from_status: str,
    to_status: str,
) -> None:
    publish(
        {
            "event_type": f"{entity_type}.{operation}",
            "tenant_id": tenant_id,
            "entity_type": entity_type,
            "entity_id": entity_id,
            "actor_id": actor_id,
            "payload": {"from_status": from_status, "to_status": to_status},
        }
    )
