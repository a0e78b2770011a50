"""
Page Builder Kernel -- Event Construction

Factory functions for creating well-formed events.
Used by the coordinator to wrap UI interactions before feeding them to the
reducer, and by tests to build events concisely.
"""

from __future__ import annotations

from typing import Any

from pagebuilder.kernel.types import Event, now_iso


def make_event(
    seq: int,
    type: str,
    payload: dict[str, Any],
    *,
    source: str = "web",
    timestamp: str | None = None,
    event_id: str | None = None,
) -> Event:
    """
    Build a complete Event from minimal inputs.

    seq is required; it determines both the event ID and sequence number.
    Everything else has sensible defaults for testing.
    """
    ts = timestamp or now_iso()
    eid = event_id or f"evt_{ts[:10].replace('-', '')}_{seq:03d}"

    return Event(
        id=eid,
        sequence=seq,
        timestamp=ts,
        source=source,
        type=type,
        payload=payload,
    )
