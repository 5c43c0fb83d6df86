"""
Import reconciler — makes a snapshot the member's current dataset.

Per member the state is either NoCurrent or HasCurrent(import_id). Every
transition (import, restore, delete) happens inside a single transaction:

  1. lock the member row
  2. demote the existing current import
  3. insert the new import carrying the raw document and its summary
  4. replace the member's activity and prospect rows wholesale
  5. commit

A failure at any step rolls the whole thing back, so the previous current
import and its rows survive untouched. Two imports for the same member
serialize on the row lock and the last one to commit stays current; the
partial unique index on imports(team_member_id) WHERE is_current backs this up.
"""
import logging
from datetime import datetime, timezone
from typing import List, Optional

from sqlalchemy.exc import SQLAlchemyError

from mission_control.database import get_session
from mission_control.errors import MalformedSnapshot, NotFound, StoreFailure
from mission_control.models.activity import Activity
from mission_control.models.import_record import ImportRecord
from mission_control.models.prospect import Prospect
from mission_control.models.team_member import TeamMember
from mission_control.services.members import resolve_member
from mission_control.services.snapshot import Snapshot, load_snapshot, parse_snapshot
from mission_control.services.summary import compute_summary

logger = logging.getLogger('services.imports')


def import_snapshot(member_id, snapshot: Snapshot) -> ImportRecord:
    """Replace the member's current dataset with this snapshot. Returns the new import."""
    summary = compute_summary(snapshot)

    session = get_session()
    try:
        member = session.query(TeamMember).filter_by(id=member_id).with_for_update().first()
        if member is None or not member.is_active:
            raise NotFound('Team member', member_id)
        member_name = member.name

        demoted = session.query(ImportRecord).filter(
            ImportRecord.team_member_id == member_id,
            ImportRecord.is_current.is_(True),
        ).update({'is_current': False}, synchronize_session=False)

        record = ImportRecord(
            team_member_id=member_id,
            exported_at=snapshot.exported_at,
            week_start=snapshot.week_start,
            raw_snapshot=snapshot.raw,
            is_current=True,
            targets=dict(snapshot.targets),
            activity_count=dict(summary.activity_count),
            prospect_count=summary.prospect_count,
            won_count=summary.won_count,
            won_revenue=summary.won_revenue,
            imported_at=datetime.now(timezone.utc),
        )
        session.add(record)
        session.flush()  # get record.id

        _clear_member_rows(session, member_id)
        session.add_all(_activity_rows(record, snapshot))
        session.add_all(_prospect_rows(record, snapshot))

        session.commit()

        # Reload with the member joined in so callers can use it detached
        record = session.query(ImportRecord).filter_by(id=record.id).one()
        session.expunge(record)

        logger.info(
            "Imported snapshot for %r: %d activities, %d archived, %d prospects (%d demoted)",
            member_name, len(snapshot.activities), len(snapshot.archived_activities),
            summary.prospect_count, demoted,
            extra={'team_member_id': member_id, 'import_id': record.id},
        )
        return record
    except SQLAlchemyError as e:
        session.rollback()
        logger.error("Import failed for team member %s", member_id, exc_info=True,
                     extra={'team_member_id': member_id})
        raise StoreFailure(str(e)) from e
    finally:
        session.close()


def import_document(member_id, document) -> ImportRecord:
    """importSnapshot for an already-decoded JSON document."""
    return import_snapshot(member_id, parse_snapshot(document))


def restore_import(import_id) -> ImportRecord:
    """
    Replay a stored snapshot as a brand-new current import.

    The restored-from row is left in place (no longer current), so history
    grows by one on every restore.
    """
    session = get_session()
    try:
        source = session.get(ImportRecord, import_id)
        if source is None:
            raise NotFound('Import', import_id)
        member_id = source.team_member_id
        raw = source.raw_snapshot
    except SQLAlchemyError as e:
        logger.error("Failed to load import %s for restore", import_id, exc_info=True)
        raise StoreFailure(str(e)) from e
    finally:
        session.close()

    record = import_snapshot(member_id, parse_snapshot(raw))
    logger.info("Restored import %s as %s", import_id, record.id,
                extra={'team_member_id': member_id, 'import_id': record.id})
    return record


def delete_import(import_id):
    """
    Remove an import row.

    If it was current, its activity and prospect rows go with it and the
    member is left with no current import until the next upload or restore.
    """
    session = get_session()
    try:
        record = session.get(ImportRecord, import_id)
        if record is None:
            raise NotFound('Import', import_id)
        was_current = record.is_current
        member_id = record.team_member_id

        session.query(Activity).filter_by(import_id=import_id).delete(synchronize_session=False)
        session.query(Prospect).filter_by(import_id=import_id).delete(synchronize_session=False)
        session.delete(record)
        session.commit()

        logger.info("Deleted import %s (was current: %s)", import_id, was_current,
                    extra={'team_member_id': member_id, 'import_id': import_id})
    except SQLAlchemyError as e:
        session.rollback()
        logger.error("Failed to delete import %s", import_id, exc_info=True)
        raise StoreFailure(str(e)) from e
    finally:
        session.close()


def import_files(files) -> List[ImportRecord]:
    """
    Import a batch of uploaded files, in order.

    ``files`` is a sequence of (filename, bytes). Names not ending in .json are
    ignored. Stops at the first failure; earlier files stay imported.
    """
    json_files = [(name, data) for name, data in files if (name or '').lower().endswith('.json')]
    if not json_files:
        raise MalformedSnapshot('upload', reason='no .json files in request')

    records = []
    for filename, data in json_files:
        snapshot = load_snapshot(data, filename)
        member = resolve_member(snapshot.owner_name)
        records.append(import_snapshot(member.id, snapshot))
    logger.info("Imported %d file(s)", len(records))
    return records


# ── Listings ─────────────────────────────────────────────────────────────────

def list_imports(member_id: Optional[int] = None):
    """Import history, newest first."""
    session = get_session()
    try:
        query = session.query(ImportRecord).order_by(
            ImportRecord.imported_at.desc(), ImportRecord.id.desc(),
        )
        if member_id is not None:
            query = query.filter(ImportRecord.team_member_id == member_id)
        return [record.to_dict() for record in query.all()]
    except SQLAlchemyError as e:
        logger.error("Failed to list imports", exc_info=True)
        raise StoreFailure(str(e)) from e
    finally:
        session.close()


def get_import(import_id, include_snapshot=True):
    session = get_session()
    try:
        record = session.get(ImportRecord, import_id)
        if record is None:
            raise NotFound('Import', import_id)
        return record.to_dict(include_snapshot=include_snapshot)
    except SQLAlchemyError as e:
        logger.error("Failed to load import %s", import_id, exc_info=True)
        raise StoreFailure(str(e)) from e
    finally:
        session.close()


def current_imports(session):
    """Current imports of active members, in the order they were imported."""
    return session.query(ImportRecord).join(
        TeamMember, ImportRecord.team_member_id == TeamMember.id,
    ).filter(
        ImportRecord.is_current.is_(True),
        TeamMember.is_active.is_(True),
    ).order_by(ImportRecord.imported_at, ImportRecord.id).all()


def list_current_imports():
    session = get_session()
    try:
        return [record.to_dict() for record in current_imports(session)]
    except SQLAlchemyError as e:
        logger.error("Failed to list current imports", exc_info=True)
        raise StoreFailure(str(e)) from e
    finally:
        session.close()


# ── Private helpers ──────────────────────────────────────────────────────────

def _clear_member_rows(session, member_id):
    """Old rows may belong to any earlier import; the member scope catches them all."""
    session.query(Activity).filter_by(team_member_id=member_id).delete(synchronize_session=False)
    session.query(Prospect).filter_by(team_member_id=member_id).delete(synchronize_session=False)


def _activity_rows(record, snapshot):
    rows = []
    for activity in list(snapshot.activities) + list(snapshot.archived_activities):
        rows.append(Activity(
            import_id=record.id,
            team_member_id=record.team_member_id,
            type=activity.type,
            name=activity.name,
            notes=activity.notes,
            timestamp=activity.timestamp,
            week_of=activity.week_of,
        ))
    return rows


def _prospect_rows(record, snapshot):
    return [
        Prospect(
            import_id=record.id,
            team_member_id=record.team_member_id,
            company=p.company,
            contact=p.contact,
            email=p.email,
            phone=p.phone,
            stage=p.stage,
            deal_value=p.deal_value,
            created_at=p.created_at,
            last_touch=p.last_touch,
            won_at=p.won_at,
        )
        for p in snapshot.prospects
    ]
