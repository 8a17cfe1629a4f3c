"""Summary: In-memory repository for conversations, windows, and pending replies.

Importance: Provides identifier-based lookups and the matched-inbound ledger for re-sync.
Alternatives: Persist the same records in SQLite.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from replypilot.models import Conversation, MessageEvent, Platform, ResponseWindow


@dataclass
class InMemoryRepository:
    """Summary: Caller-owned store keyed by conversation and event identifiers.

    Importance: Keeps foreign keys instead of object graphs, so windows never own events.
    Alternatives: Embed events and windows inside conversation objects.
    """

    _conversations: dict[str, Conversation] = field(default_factory=dict)
    _windows: dict[str, ResponseWindow] = field(default_factory=dict)
    _pending: dict[str, tuple[MessageEvent, ...]] = field(default_factory=dict)

    def upsert_conversation(self, conversation: Conversation) -> Conversation:
        """Summary: Store a conversation, appending unseen events to an existing one."""

        existing = self._conversations.get(conversation.id)
        merged = conversation if existing is None else existing.with_events(list(conversation.events))
        self._conversations[conversation.id] = merged
        return merged

    def get_conversation(self, conversation_id: str) -> Conversation | None:
        return self._conversations.get(conversation_id)

    def list_conversations(self) -> list[Conversation]:
        return [self._conversations[key] for key in sorted(self._conversations)]

    def platform_for(self, conversation_id: str) -> Platform | None:
        conversation = self._conversations.get(conversation_id)
        return conversation.platform if conversation else None

    def save_windows(self, windows: list[ResponseWindow] | tuple[ResponseWindow, ...]) -> int:
        """Summary: Store windows keyed by inbound event id, ignoring ones already present.

        Importance: Guarantees one window per inbound event across repeated syncs.
        Alternatives: Enforce uniqueness with a database constraint.
        """

        added = 0
        for window in windows:
            if window.inbound_event_id in self._windows:
                continue
            self._windows[window.inbound_event_id] = window
            added += 1
        return added

    def list_windows(self, conversation_id: str | None = None) -> list[ResponseWindow]:
        windows = sorted(
            self._windows.values(),
            key=lambda window: (window.inbound_timestamp, window.inbound_event_id),
        )
        if conversation_id is None:
            return windows
        return [window for window in windows if window.conversation_id == conversation_id]

    def matched_inbound_ids(self, conversation_id: str) -> set[str]:
        return {window.inbound_event_id for window in self.list_windows(conversation_id)}

    def consumed_outbound_ids(self, conversation_id: str) -> set[str]:
        return {
            window.outbound_event_id
            for window in self.list_windows(conversation_id)
            if window.outbound_event_id is not None
        }

    def replace_pending(self, conversation_id: str, pending: tuple[MessageEvent, ...]) -> None:
        self._pending[conversation_id] = pending

    def list_pending(self) -> list[tuple[str, MessageEvent]]:
        return [
            (conversation_id, event)
            for conversation_id in sorted(self._pending)
            for event in self._pending[conversation_id]
        ]

    def count_windows(self) -> int:
        return len(self._windows)

    def reset_windows(self) -> None:
        """Summary: Drop all windows and pending state so analytics can be recomputed."""

        self._windows.clear()
        self._pending.clear()
