"""Summary: Human-readable formatting helpers for latencies and labels.

Importance: Keeps metric and insight text consistent across CLI and API output.
Alternatives: Format durations ad hoc in each presentation layer.
"""

from __future__ import annotations

DAY_NAMES = ("", "Sunday", "Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday")
DAY_SHORT = ("", "Sun", "Mon", "Tue", "Wed", "Thu", "Fri", "Sat")


def format_duration(seconds: float) -> str:
    """Summary: Format a latency as the two most significant units.

    Importance: Shared by metrics output and insight descriptions.
    Alternatives: Always print raw seconds.
    """

    if seconds < 60:
        return f"{int(seconds)}s"
    if seconds < 3600:
        return f"{int(seconds // 60)}m"
    if seconds < 86400:
        hours = int(seconds // 3600)
        minutes = int((seconds % 3600) // 60)
        return f"{hours}h" if minutes == 0 else f"{hours}h {minutes}m"
    days = int(seconds // 86400)
    hours = int((seconds % 86400) // 3600)
    return f"{days}d" if hours == 0 else f"{days}d {hours}h"


def format_duration_short(seconds: float) -> str:
    """Summary: Format a latency using only the largest unit."""

    if seconds < 60:
        return f"{int(seconds)}s"
    if seconds < 3600:
        return f"{int(seconds // 60)}m"
    if seconds < 86400:
        return f"{int(seconds // 3600)}h"
    return f"{int(seconds // 86400)}d"


def format_hour(hour: int) -> str:
    if hour == 0:
        return "12 AM"
    if hour < 12:
        return f"{hour} AM"
    if hour == 12:
        return "12 PM"
    return f"{hour - 12} PM"


def format_contact_name(participant_id: str) -> str:
    """Summary: Shorten an email address to its local part; handles pass through."""

    if "@" in participant_id:
        return participant_id.split("@", 1)[0] or participant_id
    return participant_id
