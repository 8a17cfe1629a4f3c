"""Summary: Command-line interface for ReplyPilot.

Importance: Provides a local-first entry point for response-time analytics.
Alternatives: Build a web UI or desktop client first.
"""

from __future__ import annotations

import argparse
import logging
from datetime import datetime

from replypilot.app import build_services, load_fixture
from replypilot.config import AppConfig
from replypilot.formatting import format_duration, format_duration_short, format_hour
from replypilot.models import Platform, ResponseGoal, TimeRange
from replypilot.sources import local_timestamp


def build_parser() -> argparse.ArgumentParser:
    """Summary: Build the CLI argument parser.

    Importance: Defines supported commands for local operation.
    Alternatives: Use a CLI framework like Typer or Click.
    """

    parser = argparse.ArgumentParser(description="ReplyPilot CLI")
    parser.add_argument("--fixture", type=str, default=None, help="JSON event fixture")
    parser.add_argument("--now", type=str, default=None, help="ISO timestamp used as the current time")
    subparsers = parser.add_subparsers(dest="command", required=True)

    subparsers.add_parser("sync", help="Match the fixture and report window counts")

    windows = subparsers.add_parser("windows", help="List response windows")
    windows.add_argument("--conversation", type=str, default=None)
    windows.add_argument("--limit", type=int, default=20)

    pending = subparsers.add_parser("pending", help="List messages awaiting a reply")
    pending.add_argument("--platform", type=str, default=None)

    for name, help_text in (
        ("metrics", "Show aggregate latency metrics"),
        ("daily", "Show per-day metrics"),
        ("hourly", "Show per-hour metrics"),
        ("platforms", "Show per-platform medians"),
        ("insights", "Generate insights"),
        ("score", "Show the responsiveness score"),
    ):
        command = subparsers.add_parser(name, help=help_text)
        command.add_argument("--range", dest="range_name", type=str, default="week", choices=TimeRange.PRESETS)
        if name != "platforms":
            command.add_argument("--platform", type=str, default=None)
        if name in {"platforms", "score"}:
            command.add_argument("--goal", type=float, default=None, help="Target latency in seconds")

    streak = subparsers.add_parser("streak", help="Evaluate the goal streak")
    streak.add_argument("--goal", type=float, default=None, help="Target latency in seconds")
    streak.add_argument("--platform", type=str, default=None)
    return parser


def parse_platform(value: str | None) -> Platform | None:
    return Platform(value) if value else None


def parse_now(value: str | None) -> datetime:
    return local_timestamp(value) if value else datetime.now()


def run_cli() -> None:
    """Summary: Execute the CLI command.

    Importance: Enables local workflows without a UI.
    Alternatives: Use a REPL or notebook-based workflow.
    """

    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")
    parser = build_parser()
    args = parser.parse_args()
    config = AppConfig.from_env()
    services = build_services(config)
    added = load_fixture(services, args.fixture)
    now = parse_now(args.now)

    if args.command == "sync":
        print(f"Matched {added} response windows.")
        print(f"Pending replies: {len(services.analytics.pending(now))}")
        return

    if args.command == "windows":
        for window in services.analytics.windows(args.conversation)[: args.limit]:
            print(
                f"{window.inbound_event_id}: {window.platform.display_name} "
                f"{format_duration(window.latency_seconds)} "
                f"(confidence {window.confidence:.1f}, {window.inbound_timestamp.isoformat()})"
            )
        return

    if args.command == "pending":
        for response in services.analytics.pending(now, parse_platform(args.platform)):
            print(
                f"{response.inbound_event_id}: {response.participant_id} "
                f"waiting {format_duration(response.waiting_seconds)}"
            )
        return

    if args.command == "streak":
        goals = [ResponseGoal(target_latency_seconds=args.goal)] if args.goal else []
        state = services.goals.streak(goals, now.date(), parse_platform(args.platform))
        print(f"target: {format_duration(state.target_latency_seconds)}")
        print(f"current_streak: {state.current_streak}")
        print(f"longest_streak: {state.longest_streak}")
        return

    time_range = TimeRange.preset(args.range_name, now)

    if args.command == "metrics":
        metrics = services.analytics.metrics(parse_platform(args.platform), time_range)
        print(f"range: {time_range.label}")
        print(f"samples: {metrics.sample_count}")
        print(f"median: {format_duration(metrics.median_latency)}")
        print(f"mean: {format_duration(metrics.mean_latency)}")
        print(f"p90: {format_duration(metrics.p90_latency)}")
        print(f"p95: {format_duration(metrics.p95_latency)}")
        print(f"trend: {metrics.trend_direction.value}")
        return

    if args.command == "daily":
        for day in services.analytics.daily(parse_platform(args.platform), time_range):
            print(f"{day.day.isoformat()}: {day.response_count} replies, median {format_duration(day.median_latency)}")
        return

    if args.command == "hourly":
        for hour in services.analytics.hourly(parse_platform(args.platform), time_range):
            if hour.response_count:
                print(f"{format_hour(hour.hour)}: {hour.response_count} replies, median {format_duration_short(hour.median_latency)}")
        return

    if args.command == "platforms":
        goals = [ResponseGoal(target_latency_seconds=args.goal)] if args.goal else []
        for entry in services.analytics.platforms(time_range, goals):
            name = entry.platform.display_name if entry.platform else "All"
            progress = "" if entry.goal_progress is None else f", goal {entry.goal_progress:.0%}"
            print(f"{name}: median {format_duration(entry.median_latency)} ({entry.sample_count} samples{progress})")
        return

    if args.command == "insights":
        for insight in services.insights.insights(time_range, parse_platform(args.platform)):
            print(f"[{insight.type.value}] {insight.title}: {insight.description}")
        return

    if args.command == "score":
        score = services.analytics.score(parse_platform(args.platform), time_range, args.goal)
        print(f"score: {score.overall} ({score.grade})")
        print(f"speed: {score.speed_score}")
        print(f"consistency: {score.consistency_score}")
        print(f"coverage: {score.coverage_score}")
        return


if __name__ == "__main__":
    run_cli()
