"""Summary: Application factory wiring core services.

Importance: Centralizes dependency creation for the CLI and API layers.
Alternatives: Instantiate services manually in each entrypoint.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from replypilot.config import AppConfig
from replypilot.insights import InsightGenerator
from replypilot.matcher import ResponseMatcher
from replypilot.repository import InMemoryRepository
from replypilot.services import AnalyticsService, GoalService, InsightService, SyncService
from replypilot.sources import JsonEventSource


@dataclass(frozen=True)
class AppServices:
    """Summary: Bundle of core services for ReplyPilot.

    Importance: Simplifies passing dependencies to CLI or API layers.
    Alternatives: Use a dependency injection container.
    """

    sync: SyncService
    analytics: AnalyticsService
    insights: InsightService
    goals: GoalService
    repository: InMemoryRepository
    config: AppConfig


def build_services(config: AppConfig, repository: InMemoryRepository | None = None) -> AppServices:
    """Summary: Build core services from configuration.

    Importance: Provides a single construction path for the application.
    Alternatives: Instantiate services directly within each entrypoint.
    """

    store = repository if repository is not None else InMemoryRepository()
    settings = config.analytics
    return AppServices(
        sync=SyncService(repository=store, matcher=ResponseMatcher(settings)),
        analytics=AnalyticsService(repository=store, settings=settings),
        insights=InsightService(repository=store, generator=InsightGenerator(settings)),
        goals=GoalService(repository=store, settings=settings),
        repository=store,
        config=config,
    )


def load_fixture(services: AppServices, fixture_path: str | None = None) -> int:
    """Summary: Sync a JSON event fixture into the services' repository.

    Importance: Gives the stateless CLI a populated store per invocation.
    Alternatives: Persist windows between CLI runs.
    """

    path = Path(fixture_path or services.config.events_path)
    summaries = services.sync.sync_source(JsonEventSource(path))
    return sum(summary.new_windows for summary in summaries)
