"""Summary: Event source interfaces and implementations.

Importance: Encapsulates how conversations reach the analytics core.
Alternatives: Read provider APIs directly inside the matcher.
"""

from __future__ import annotations

import json
from abc import ABC, abstractmethod
from datetime import datetime
from pathlib import Path
from typing import Any

from replypilot.models import Conversation, Direction, MessageEvent, Platform


class EventSource(ABC):
    """Summary: Abstract supplier of point-in-time conversation snapshots.

    Importance: Keeps fetching and storage outside the pure analytics core.
    Alternatives: Pass provider clients into the analytics services.
    """

    @abstractmethod
    def load_conversations(self) -> list[Conversation]:
        """Summary: Return conversations with timestamp-ordered events.

        Importance: Drives matching for every supported platform.
        Alternatives: Stream events one at a time.
        """


class JsonEventSource(EventSource):
    """Summary: Loads conversations from a local JSON fixture.

    Importance: Supports offline analysis, tests, and demos.
    Alternatives: Use SQLite fixtures or generate synthetic events.
    """

    def __init__(self, fixture_path: Path) -> None:
        self._fixture_path = fixture_path

    def load_conversations(self) -> list[Conversation]:
        """Summary: Parse the fixture file into conversations.

        Importance: Provides predictable data for the CLI and tests.
        Alternatives: Return an empty list when no fixture is present.
        """

        if not self._fixture_path.exists():
            raise FileNotFoundError(f"Event fixture not found: {self._fixture_path}")
        data = json.loads(self._fixture_path.read_text(encoding="utf-8"))
        return [parse_conversation(item) for item in data.get("conversations", [])]


def parse_conversation(item: dict[str, Any]) -> Conversation:
    """Summary: Build a conversation from a plain mapping.

    Importance: Shared by the fixture source and the HTTP layer.
    Alternatives: Require callers to construct dataclasses themselves.
    """

    conversation_id = str(item["id"])
    try:
        platform = Platform(item["platform"])
    except ValueError as exc:
        raise ValueError(f"Unknown platform for conversation {conversation_id}: {item['platform']}") from exc
    events = [parse_event(raw, conversation_id) for raw in item.get("events", [])]
    events.sort(key=lambda event: (event.timestamp, event.id))
    return Conversation(
        id=conversation_id,
        platform=platform,
        subject=item.get("subject"),
        events=tuple(events),
    )


def local_timestamp(value: datetime | str) -> datetime:
    """Summary: Normalise a timestamp to naive local wall-clock time.

    Importance: Offset-aware and naive datetimes cannot be compared, so every
    timestamp entering the core uses one convention.
    Alternatives: Convert everything to aware UTC instead.
    """

    if isinstance(value, str):
        text = value.strip()
        if text.endswith(("Z", "z")):
            text = f"{text[:-1]}+00:00"
        value = datetime.fromisoformat(text)
    if value.tzinfo is not None:
        return value.astimezone().replace(tzinfo=None)
    return value


def parse_event(raw: dict[str, Any], conversation_id: str) -> MessageEvent:
    try:
        direction = Direction(raw["direction"])
    except ValueError as exc:
        raise ValueError(f"Unknown direction for event {raw.get('id')}: {raw['direction']}") from exc
    return MessageEvent(
        id=str(raw["id"]),
        timestamp=local_timestamp(raw["timestamp"]),
        direction=direction,
        participant_id=raw["participant_id"],
        conversation_id=conversation_id,
        excluded=bool(raw.get("excluded", False)),
    )
