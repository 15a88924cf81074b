"""Recency buckets for the unfiled chat list."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Iterable

    from healthyai.chat.models import ChatSession

TODAY = "Today"
YESTERDAY = "Yesterday"
LAST_7_DAYS = "Last 7 Days"
LAST_30_DAYS = "Last 30 Days"
OLDER = "Older"

BUCKET_ORDER = (TODAY, YESTERDAY, LAST_7_DAYS, LAST_30_DAYS, OLDER)


@dataclass
class SessionGroup:
    """A labelled, non-empty run of sessions for the navigation list."""

    label: str
    sessions: list[ChatSession] = field(default_factory=list)


def _start_of_day(now: datetime) -> datetime:
    return now.replace(hour=0, minute=0, second=0, microsecond=0)


def bucket_for(created_at: datetime, now: datetime) -> str:
    """Return the bucket label for a creation time.

    Lower bounds are inclusive, upper bounds exclusive, all anchored to the
    start of *now*'s day in *now*'s timezone.
    """
    today = _start_of_day(now)
    if created_at >= today:
        return TODAY
    if created_at >= today - timedelta(days=1):
        return YESTERDAY
    if created_at >= today - timedelta(days=7):
        return LAST_7_DAYS
    if created_at >= today - timedelta(days=30):
        return LAST_30_DAYS
    return OLDER


def group_for_display(sessions: Iterable[ChatSession], now: datetime) -> list[SessionGroup]:
    """Group unfiled sessions into recency buckets.

    Sessions that belong to a folder are skipped (they are listed under the
    folder). Each bucket is sorted newest first; empty buckets are omitted.
    """
    buckets: dict[str, list[ChatSession]] = {label: [] for label in BUCKET_ORDER}
    for session in sessions:
        if session.folder_id is not None:
            continue
        buckets[bucket_for(session.created_at, now)].append(session)

    groups = []
    for label in BUCKET_ORDER:
        members = buckets[label]
        if not members:
            continue
        members.sort(key=lambda s: s.created_at, reverse=True)
        groups.append(SessionGroup(label=label, sessions=members))
    return groups
