"""Summary: FastAPI application for ReplyPilot.

Importance: Exposes response-time analytics to dashboards, widgets, and digests.
Alternatives: Use a CLI-only workflow or a different web framework.
"""

from __future__ import annotations

import logging
from dataclasses import asdict
from datetime import date, datetime
from enum import Enum
from typing import Any

from fastapi import Depends, FastAPI, Header, HTTPException, Query
from pydantic import BaseModel, Field

from replypilot.app import build_services
from replypilot.config import AppConfig
from replypilot.formatting import format_duration
from replypilot.models import Platform, ResponseGoal, TimeRange
from replypilot.sources import local_timestamp, parse_conversation


logger = logging.getLogger(__name__)


class EventPayload(BaseModel):
    """Summary: One timestamped message event inside a conversation snapshot."""

    id: str
    timestamp: datetime
    direction: str
    participant_id: str
    excluded: bool = False


class ConversationPayload(BaseModel):
    """Summary: Request payload for syncing a conversation snapshot.

    Importance: Lets connectors push events without sharing storage.
    Alternatives: Poll connectors from the server.
    """

    id: str
    platform: str
    subject: str | None = None
    events: list[EventPayload] = Field(default_factory=list)


class GoalPayload(BaseModel):
    """Summary: Request payload describing a response-time goal.

    Importance: Keeps goal inputs explicit for API clients.
    Alternatives: Store goals server-side and reference them by id.
    """

    target_latency_seconds: float = Field(gt=0)
    platform: str | None = None
    enabled: bool = True
    current_streak: int = Field(default=0, ge=0)
    longest_streak: int = Field(default=0, ge=0)
    last_streak_date: date | None = None


class StreakRequest(BaseModel):
    """Summary: Request payload for streak evaluation."""

    goals: list[GoalPayload] = Field(default_factory=list)
    today: date | None = None
    platform: str | None = None


def _parse_platform(value: str | None) -> Platform | None:
    if not value:
        return None
    try:
        return Platform(value)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=f"Unknown platform: {value}") from exc


def _parse_range(name: str, now: datetime | None) -> TimeRange:
    try:
        return TimeRange.preset(name, local_timestamp(now) if now else datetime.now())
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc


def _to_goal(payload: GoalPayload) -> ResponseGoal:
    return ResponseGoal(
        target_latency_seconds=payload.target_latency_seconds,
        platform=_parse_platform(payload.platform),
        enabled=payload.enabled,
        current_streak=payload.current_streak,
        longest_streak=payload.longest_streak,
        last_streak_date=payload.last_streak_date,
    )


def _serialize(value: Any) -> Any:
    """Summary: Convert dataclass output into JSON-friendly structures."""

    if isinstance(value, dict):
        return {key: _serialize(item) for key, item in value.items()}
    if isinstance(value, (list, tuple)):
        return [_serialize(item) for item in value]
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if isinstance(value, Enum):
        return value.value
    return value


def create_app(config: AppConfig) -> FastAPI:
    """Summary: Create a FastAPI app with ReplyPilot routes.

    Importance: Provides API access for dashboards and integrations.
    Alternatives: Use Flask or a serverless function framework.
    """

    app = FastAPI(title="ReplyPilot API", version="0.1.0")
    services = build_services(config)

    def require_api_key(x_api_key: str | None = Header(default=None)) -> None:
        """Summary: Enforce API key authentication when configured.

        Importance: Adds a minimal security layer for local and private deployments.
        Alternatives: Use OAuth or session-based authentication.
        """

        if not config.api_key:
            return
        if x_api_key != config.api_key:
            raise HTTPException(status_code=401, detail="Invalid API key")

    @app.get("/health")
    def health() -> dict[str, str]:
        """Summary: Health check endpoint."""

        return {"status": "ok"}

    @app.post("/conversations", dependencies=[Depends(require_api_key)])
    def sync_conversation(payload: ConversationPayload) -> dict[str, Any]:
        """Summary: Merge a conversation snapshot and match new events.

        Importance: The single write path for analytics data.
        Alternatives: Accept flat event batches without conversation grouping.
        """

        try:
            conversation = parse_conversation(
                {
                    "id": payload.id,
                    "platform": payload.platform,
                    "subject": payload.subject,
                    "events": [
                        {
                            "id": event.id,
                            "timestamp": event.timestamp.isoformat(),
                            "direction": event.direction,
                            "participant_id": event.participant_id,
                            "excluded": event.excluded,
                        }
                        for event in payload.events
                    ],
                }
            )
        except ValueError as exc:
            raise HTTPException(status_code=400, detail=str(exc)) from exc
        summary = services.sync.sync_conversation(conversation)
        return asdict(summary)

    @app.get("/windows", dependencies=[Depends(require_api_key)])
    def list_windows(conversation_id: str | None = None) -> list[dict[str, Any]]:
        """Summary: List stored response windows in timestamp order."""

        if conversation_id is not None and services.repository.get_conversation(conversation_id) is None:
            raise HTTPException(status_code=404, detail="Conversation not found")
        return [_serialize(asdict(window)) for window in services.analytics.windows(conversation_id)]

    @app.delete("/windows", dependencies=[Depends(require_api_key)])
    def reset_windows() -> dict[str, int]:
        """Summary: Drop computed windows and rematch stored conversations.

        Importance: Recomputes analytics after settings or matching changes.
        Alternatives: Require a process restart to recompute.
        """

        summaries = services.sync.rebuild()
        return {"windows": sum(summary.new_windows for summary in summaries)}

    @app.get("/pending", dependencies=[Depends(require_api_key)])
    def list_pending(now: datetime | None = None, platform: str | None = None) -> list[dict[str, Any]]:
        """Summary: List inbound messages still awaiting a reply."""

        moment = local_timestamp(now) if now else datetime.now()
        responses = services.analytics.pending(moment, _parse_platform(platform))
        return [_serialize(asdict(response)) for response in responses]

    @app.get("/metrics", dependencies=[Depends(require_api_key)])
    def metrics(
        range_name: str = Query(default="week", alias="range"),
        now: datetime | None = None,
        platform: str | None = None,
    ) -> dict[str, Any]:
        """Summary: Aggregate latency metrics for a preset range.

        Importance: Primary dashboard payload.
        Alternatives: Return raw windows and aggregate client-side.
        """

        time_range = _parse_range(range_name, now)
        result = services.analytics.metrics(_parse_platform(platform), time_range)
        payload = _serialize(asdict(result))
        payload["trend_direction"] = result.trend_direction.value
        payload["median_display"] = format_duration(result.median_latency)
        return payload

    @app.get("/metrics/daily", dependencies=[Depends(require_api_key)])
    def daily(
        range_name: str = Query(default="week", alias="range"),
        now: datetime | None = None,
        platform: str | None = None,
    ) -> list[dict[str, Any]]:
        time_range = _parse_range(range_name, now)
        return [_serialize(asdict(item)) for item in services.analytics.daily(_parse_platform(platform), time_range)]

    @app.get("/metrics/hourly", dependencies=[Depends(require_api_key)])
    def hourly(
        range_name: str = Query(default="week", alias="range"),
        now: datetime | None = None,
        platform: str | None = None,
    ) -> list[dict[str, Any]]:
        time_range = _parse_range(range_name, now)
        return [_serialize(asdict(item)) for item in services.analytics.hourly(_parse_platform(platform), time_range)]

    @app.get("/metrics/platforms", dependencies=[Depends(require_api_key)])
    def platforms(
        range_name: str = Query(default="week", alias="range"),
        now: datetime | None = None,
        goal_seconds: float | None = None,
    ) -> list[dict[str, Any]]:
        """Summary: Per-platform medians, with progress when a goal is supplied."""

        time_range = _parse_range(range_name, now)
        goals = [ResponseGoal(target_latency_seconds=goal_seconds)] if goal_seconds else []
        return [_serialize(asdict(item)) for item in services.analytics.platforms(time_range, goals)]

    @app.get("/insights", dependencies=[Depends(require_api_key)])
    def insights(
        range_name: str = Query(default="week", alias="range"),
        now: datetime | None = None,
        platform: str | None = None,
    ) -> list[dict[str, Any]]:
        """Summary: Ranked insights for a preset range.

        Importance: Feeds digest and dashboard insight cards.
        Alternatives: Precompute insights on a schedule.
        """

        time_range = _parse_range(range_name, now)
        results = services.insights.insights(time_range, _parse_platform(platform))
        return [_serialize(asdict(item)) for item in results]

    @app.post("/goals/streak", dependencies=[Depends(require_api_key)])
    def streak(payload: StreakRequest) -> dict[str, Any]:
        """Summary: Evaluate goal compliance and streaks for the supplied goals."""

        goals = [_to_goal(goal) for goal in payload.goals]
        today = payload.today or date.today()
        state = services.goals.streak(goals, today, _parse_platform(payload.platform))
        return _serialize(asdict(state))

    @app.get("/score", dependencies=[Depends(require_api_key)])
    def score(
        range_name: str = Query(default="week", alias="range"),
        now: datetime | None = None,
        platform: str | None = None,
        goal_seconds: float | None = Query(default=None, gt=0),
    ) -> dict[str, Any]:
        time_range = _parse_range(range_name, now)
        return asdict(services.analytics.score(_parse_platform(platform), time_range, goal_seconds))

    logger.info("ReplyPilot API ready with %s stored windows.", services.repository.count_windows())
    return app


def build_default_app() -> FastAPI:
    """Summary: Build the app from environment configuration for ASGI servers."""

    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")
    return create_app(AppConfig.from_env())
