"""
Snapshot parser — turns an uploaded tracker export into a typed Snapshot.

Favors graceful degradation: the only hard failure is a file that is not JSON
at all (MalformedSnapshot). Every other missing or odd field is defaulted, so
downstream code never sees optional or untyped values.
"""
import json
import logging
import math
from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from typing import Any, Dict, List, Optional

from mission_control.config import DEFAULT_TARGETS, UNKNOWN_WEEK
from mission_control.errors import MalformedSnapshot
from mission_control.models.enums import ActivityType, Stage

logger = logging.getLogger('services.snapshot')

# Owner name keys, highest priority first
OWNER_KEYS = ('userName', 'exportedBy', 'name')


@dataclass(frozen=True)
class SnapshotActivity:
    type: ActivityType
    name: str = ''
    notes: str = ''
    timestamp: Optional[datetime] = None
    week_of: Optional[str] = None      # None = live, otherwise archived week marker


@dataclass(frozen=True)
class SnapshotProspect:
    company: str = ''
    contact: str = ''
    email: str = ''
    phone: str = ''
    stage: Stage = Stage.COLD
    deal_value: float = 0.0
    created_at: Optional[datetime] = None
    last_touch: Optional[datetime] = None
    won_at: Optional[datetime] = None


@dataclass(frozen=True)
class Snapshot:
    """Canonical, fully-defaulted view of one export."""
    owner_name: str
    exported_at: datetime
    week_start: Optional[date]
    targets: Dict[str, int]
    activities: List[SnapshotActivity] = field(default_factory=list)
    archived_activities: List[SnapshotActivity] = field(default_factory=list)
    prospects: List[SnapshotProspect] = field(default_factory=list)
    raw: Any = field(default_factory=dict, compare=False, repr=False)


def load_snapshot(data, filename='upload.json') -> Snapshot:
    """Decode file contents (bytes or str) and parse them into a Snapshot."""
    try:
        if isinstance(data, bytes):
            data = data.decode('utf-8-sig')
        document = json.loads(data, parse_constant=_reject_constant)
    except (UnicodeDecodeError, ValueError) as e:
        logger.warning("Rejected %s: %s", filename, e, extra={'upload_name': filename})
        raise MalformedSnapshot(filename, reason=str(e)) from e
    return parse_snapshot(document)


def parse_snapshot(document, now=None) -> Snapshot:
    """
    Normalize a decoded JSON document.

    A top-level value that is not an object is treated as an empty export but
    is still kept verbatim in ``raw`` for replay.
    """
    now = now or datetime.now(timezone.utc)
    doc = document if isinstance(document, dict) else {}

    week_start = parse_date(doc.get('currentWeekStart'))
    fallback_week = week_start.isoformat() if week_start else UNKNOWN_WEEK

    live, skipped_live = _parse_activities(doc.get('activities'), archived_week=None)
    archived, skipped_archived = _parse_activities(
        doc.get('archivedActivities'), archived_week=fallback_week,
    )
    skipped = skipped_live + skipped_archived
    if skipped:
        logger.warning("Skipped %d activities with an unknown type", skipped)

    return Snapshot(
        owner_name=_owner_name(doc, now),
        exported_at=parse_timestamp(doc.get('exportedAt')) or now,
        week_start=week_start,
        targets=_parse_targets(doc.get('targets')),
        activities=live,
        archived_activities=archived,
        prospects=[_parse_prospect(p) for p in _as_list(doc.get('prospects')) if isinstance(p, dict)],
        raw=document,
    )


# ── Field helpers ────────────────────────────────────────────────────────────

def parse_timestamp(value) -> Optional[datetime]:
    """
    Lenient timestamp parsing.

    Accepts datetimes, ISO-8601 strings (with a trailing 'Z'), and numbers as
    epoch milliseconds (what JavaScript's Date.now() exports). Anything else
    yields None. Results are always normalized to UTC.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, datetime):
        return _as_utc(value)
    if isinstance(value, (int, float)):
        if not math.isfinite(value):
            return None
        try:
            return datetime.fromtimestamp(value / 1000, tz=timezone.utc)
        except (OverflowError, OSError, ValueError):
            return None
    if isinstance(value, str) and value.strip():
        try:
            dt = datetime.fromisoformat(value.strip().replace('Z', '+00:00'))
        except ValueError:
            return None
        return _as_utc(dt)
    return None


def parse_date(value) -> Optional[date]:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str) and value.strip():
        text = value.strip()
        try:
            return date.fromisoformat(text[:10])
        except ValueError:
            dt = parse_timestamp(text)
            return dt.date() if dt else None
    return None


def _as_utc(dt):
    # SQLite DateTime columns drop the offset on write
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def _reject_constant(name):
    """NaN and Infinity are not JSON; refuse them rather than store them."""
    raise ValueError(f"invalid JSON constant {name}")


def _owner_name(doc, now):
    for key in OWNER_KEYS:
        value = doc.get(key)
        if isinstance(value, str) and value.strip():
            return value.strip()
    return f"Import {now.strftime('%Y-%m-%d %H:%M')}"


def _as_list(value):
    return value if isinstance(value, list) else []


def _text(value):
    if value is None:
        return ''
    return value if isinstance(value, str) else str(value)


def _parse_targets(value):
    targets = dict(DEFAULT_TARGETS)
    if not isinstance(value, dict):
        return targets
    for activity_type in ActivityType:
        goal = value.get(activity_type.value)
        if isinstance(goal, bool):
            continue
        if isinstance(goal, int):
            targets[activity_type.value] = goal
        elif isinstance(goal, float) and goal.is_integer():
            targets[activity_type.value] = int(goal)
    return targets


def _parse_activities(items, archived_week):
    """Return (activities, skipped_count). archived_week=None means live items."""
    activities = []
    skipped = 0
    for item in _as_list(items):
        if not isinstance(item, dict):
            skipped += 1
            continue
        activity_type = ActivityType.parse(item.get('type'))
        if activity_type is None:
            skipped += 1
            continue
        week_of = None
        if archived_week is not None:
            week_of = _text(item.get('weekOf')).strip() or archived_week
        activities.append(SnapshotActivity(
            type=activity_type,
            name=_text(item.get('name')),
            notes=_text(item.get('notes')),
            timestamp=parse_timestamp(item.get('timestamp')),
            week_of=week_of,
        ))
    return activities, skipped


def _deal_value(value):
    if isinstance(value, bool):
        return 0.0
    if isinstance(value, str):
        try:
            value = float(value.replace(',', '').replace('$', '').strip())
        except ValueError:
            return 0.0
    if not isinstance(value, (int, float)) or not math.isfinite(value) or value < 0:
        return 0.0
    return float(value)


def _parse_prospect(item):
    stage = Stage.parse(item.get('stage')) or Stage.COLD
    last_touch = parse_timestamp(item.get('lastTouch'))
    won_at = None
    if stage is Stage.WON:
        won_at = parse_timestamp(item.get('wonAt')) or last_touch
    return SnapshotProspect(
        company=_text(item.get('company')),
        contact=_text(item.get('contact')),
        email=_text(item.get('email')),
        phone=_text(item.get('phone')),
        stage=stage,
        deal_value=_deal_value(item.get('dealValue')),
        created_at=parse_timestamp(item.get('createdAt')),
        last_touch=last_touch,
        won_at=won_at,
    )
