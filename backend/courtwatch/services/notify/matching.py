"""
Watch matching: does a newly available slot fall inside a user's watch?

Preferences are a per-day map {"monday": ["6pm", ...], ...}. Watches saved before per-day
preferences only carry a weekday list and a weekend list; expand_legacy_times turns that pair into
the per-day map so matching only ever sees one shape.
"""
import json
from datetime import date

from courtwatch.core.constants import DAY_NAMES, WEEKDAY_NAMES, WEEKEND_NAMES
from courtwatch.models.watch import Watch
from courtwatch.services.differ import SlotChange


def _normalize_time(label: str) -> str:
    return (label or "").strip().lower()


def _parse_time_list(js: str | None) -> list[str]:
    """JSON array of time labels. Raises ValueError if the value is not one."""
    if not js:
        return []
    try:
        data = json.loads(js)
    except (TypeError, json.JSONDecodeError) as e:
        raise ValueError(f"invalid JSON: {e}") from e
    if not isinstance(data, list):
        raise ValueError("expected a JSON array of time labels")
    return [str(t) for t in data if t is not None]


def expand_legacy_times(weekday_times: list[str], weekend_times: list[str]) -> dict[str, list[str]]:
    """Weekday list for Mon–Fri, weekend list for Sat–Sun."""
    out = {name: list(weekday_times) for name in WEEKDAY_NAMES}
    out.update({name: list(weekend_times) for name in WEEKEND_NAMES})
    return out


def canonical_day_times(watch: Watch) -> dict[str, list[str]]:
    """
    Per-day preferences for a watch. day_times_json wins; otherwise the legacy weekday/weekend
    pair is expanded. Raises ValueError on malformed JSON.
    """
    if watch.day_times_json:
        try:
            data = json.loads(watch.day_times_json)
        except (TypeError, json.JSONDecodeError) as e:
            raise ValueError(f"invalid day_times JSON: {e}") from e
        if not isinstance(data, dict):
            raise ValueError("day_times must be a JSON object")
        out: dict[str, list[str]] = {}
        for day, times in data.items():
            if not isinstance(times, list):
                raise ValueError(f"day_times[{day!r}] must be a list")
            out[str(day).strip().lower()] = [str(t) for t in times if t is not None]
        return out
    if watch.weekday_times_json or watch.weekend_times_json:
        return expand_legacy_times(
            _parse_time_list(watch.weekday_times_json),
            _parse_time_list(watch.weekend_times_json),
        )
    return {}


def day_name(date_str: str) -> str:
    """'2025-06-10' -> 'tuesday'."""
    return DAY_NAMES[date.fromisoformat(date_str).weekday()]


def matches_watch(
    change: SlotChange,
    watch_venue_id: int | None,
    day_times: dict[str, list[str]],
    venue_ids: dict[str, int],
) -> bool:
    """
    True if the change passes the watch's venue filter (None = all venues) and its time label is
    one of the watch's times for that day of week. Exact match after trim + lowercase; no ranges.
    """
    if watch_venue_id is not None and venue_ids.get(change.venue) != watch_venue_id:
        return False
    preferred = day_times.get(day_name(change.date)) or []
    if not preferred:
        return False
    wanted = _normalize_time(change.time)
    return any(_normalize_time(t) == wanted for t in preferred)
