"""
Aggregate reporter — team-wide rollups folded from current imports and prospects.

Nothing here is cached: every call re-reads the store and recomputes, so the
numbers can never drift from the underlying rows. The fold functions take
plain dicts so they can be tested without a database.
"""
import logging
from collections import OrderedDict
from typing import Any, Dict, List, Optional

from sqlalchemy.exc import SQLAlchemyError

from mission_control.config import DEFAULT_TARGETS, PROGRESS_GREEN_PCT, PROGRESS_YELLOW_PCT
from mission_control.database import get_session
from mission_control.errors import StoreFailure
from mission_control.models.enums import ActivityType, Stage
from mission_control.models.prospect import Prospect
from mission_control.services.imports import list_current_imports
from mission_control.services.summary import activity_total, sum_deal_values

logger = logging.getLogger('services.reports')


# ── Pure folds ───────────────────────────────────────────────────────────────

def fold_team_stats(imports: List[Dict[str, Any]]) -> Dict[str, Any]:
    """Sum the cached summaries of the given (current) imports."""
    totals = {activity_type.value: 0 for activity_type in ActivityType}
    totals.update(prospects=0, won_deals=0, won_revenue=0.0, member_count=len(imports))
    for imp in imports:
        counts = imp.get('activity_count') or {}
        for activity_type in ActivityType:
            totals[activity_type.value] += int(counts.get(activity_type.value) or 0)
        totals['prospects'] += imp.get('prospect_count') or 0
        totals['won_deals'] += imp.get('won_count') or 0
        totals['won_revenue'] += float(imp.get('won_revenue') or 0)
    return totals


def fold_leaderboard(imports: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    """One row per import ranked by total activity; ties keep their input order."""
    rows = []
    for imp in imports:
        counts = imp.get('activity_count') or {}
        row = {
            'team_member_id': imp.get('team_member_id'),
            'name': imp.get('team_member_name') or 'Unknown',
            'import_id': imp.get('id'),
        }
        for activity_type in ActivityType:
            row[activity_type.value] = int(counts.get(activity_type.value) or 0)
        row['total'] = activity_total(counts)
        row['won_deals'] = imp.get('won_count') or 0
        row['won_revenue'] = float(imp.get('won_revenue') or 0)
        rows.append(row)

    # sorted() is stable, reverse=True included
    ranked = sorted(rows, key=lambda r: r['total'], reverse=True)
    for rank, row in enumerate(ranked, start=1):
        row['rank'] = rank
    return ranked


def fold_pipeline_summary(prospects: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    """Count and value per stage, every stage present, in pipeline order."""
    summary = []
    for stage in Stage:
        in_stage = [p for p in prospects if _stage_value(p.get('stage')) == stage.value]
        summary.append({
            'stage': stage.value,
            'count': len(in_stage),
            'value': sum_deal_values(p.get('deal_value') for p in in_stage),
        })
    return summary


def fold_pipeline_board(prospects: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    """Kanban columns: the pipeline summary plus the prospects in each column."""
    columns = fold_pipeline_summary(prospects)
    for column in columns:
        column['prospects'] = [p for p in prospects if _stage_value(p.get('stage')) == column['stage']]
    return columns


def progress_band(pct):
    if pct >= PROGRESS_GREEN_PCT:
        return 'green'
    if pct >= PROGRESS_YELLOW_PCT:
        return 'yellow'
    return 'red'


def fold_member_progress(imports: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    """Per member and activity type: count against the weekly target."""
    cards = []
    for imp in imports:
        counts = imp.get('activity_count') or {}
        targets = imp.get('targets') or DEFAULT_TARGETS
        activities = []
        for activity_type in ActivityType:
            count = int(counts.get(activity_type.value) or 0)
            target = int(targets.get(activity_type.value) or 0)
            pct = min(100.0, count / (target or 1) * 100)
            activities.append({
                'type': activity_type.value,
                'count': count,
                'target': target,
                'pct': round(pct, 1),
                'band': progress_band(pct),
            })
        cards.append({
            'team_member_id': imp.get('team_member_id'),
            'name': imp.get('team_member_name') or 'Unknown',
            'imported_at': imp.get('imported_at'),
            'prospect_count': imp.get('prospect_count') or 0,
            'won_count': imp.get('won_count') or 0,
            'won_revenue': float(imp.get('won_revenue') or 0),
            'activities': activities,
        })
    return cards


def company_key(company):
    return (company or '').strip().lower()


def find_duplicate_companies(prospects: List[Dict[str, Any]]) -> Dict[str, Dict[str, Any]]:
    """
    Group prospects by normalized company name.

    A company is a duplicate when it maps to more than one prospect row or to
    rows from more than one team member. Blank names are never grouped.
    """
    groups = OrderedDict()
    for p in prospects:
        key = company_key(p.get('company'))
        if not key:
            continue
        group = groups.setdefault(key, {'company': key, 'prospect_ids': [], 'team_member_ids': []})
        group['prospect_ids'].append(p.get('id'))
        if p.get('team_member_id') not in group['team_member_ids']:
            group['team_member_ids'].append(p.get('team_member_id'))

    return OrderedDict(
        (key, group) for key, group in groups.items()
        if len(group['prospect_ids']) > 1 or len(group['team_member_ids']) > 1
    )


# ── Store-backed reports ─────────────────────────────────────────────────────

def load_prospects(member_id: Optional[int] = None):
    session = get_session()
    try:
        query = session.query(Prospect).order_by(Prospect.id)
        if member_id is not None:
            query = query.filter(Prospect.team_member_id == member_id)
        return [p.to_dict() for p in query.all()]
    except SQLAlchemyError as e:
        logger.error("Failed to load prospects", exc_info=True)
        raise StoreFailure(str(e)) from e
    finally:
        session.close()


def get_team_stats():
    return fold_team_stats(list_current_imports())


def get_leaderboard():
    return fold_leaderboard(list_current_imports())


def get_member_progress():
    return fold_member_progress(list_current_imports())


def get_pipeline_summary():
    return fold_pipeline_summary(load_prospects())


def get_pipeline_board(member_id: Optional[int] = None):
    return fold_pipeline_board(load_prospects(member_id))


def _stage_value(stage):
    return stage.value if isinstance(stage, Stage) else stage
