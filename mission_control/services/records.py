"""
Record queries — filtered activity/prospect listings and contact search.
"""
import logging
from typing import Optional

from sqlalchemy import or_
from sqlalchemy.exc import SQLAlchemyError

from mission_control.database import get_session
from mission_control.errors import StoreFailure
from mission_control.models.activity import Activity
from mission_control.models.enums import ActivityType, Stage
from mission_control.models.prospect import Prospect
from mission_control.services.reports import company_key, find_duplicate_companies, load_prospects

logger = logging.getLogger('services.records')


def list_activities(member_id: Optional[int] = None,
                    activity_type: Optional[ActivityType] = None,
                    limit: Optional[int] = None):
    """Activities newest first; rows without a timestamp sort last."""
    session = get_session()
    try:
        query = session.query(Activity).order_by(
            Activity.timestamp.is_(None), Activity.timestamp.desc(), Activity.id.desc(),
        )
        if member_id is not None:
            query = query.filter(Activity.team_member_id == member_id)
        if activity_type is not None:
            query = query.filter(Activity.type == activity_type)
        if limit:
            query = query.limit(limit)
        return [a.to_dict() for a in query.all()]
    except SQLAlchemyError as e:
        logger.error("Failed to list activities", exc_info=True)
        raise StoreFailure(str(e)) from e
    finally:
        session.close()


def list_prospects(member_id: Optional[int] = None, stage: Optional[Stage] = None):
    """Prospects by most recent touch first."""
    session = get_session()
    try:
        query = session.query(Prospect).order_by(
            Prospect.last_touch.is_(None), Prospect.last_touch.desc(), Prospect.id.desc(),
        )
        if member_id is not None:
            query = query.filter(Prospect.team_member_id == member_id)
        if stage is not None:
            query = query.filter(Prospect.stage == stage)
        return [p.to_dict() for p in query.all()]
    except SQLAlchemyError as e:
        logger.error("Failed to list prospects", exc_info=True)
        raise StoreFailure(str(e)) from e
    finally:
        session.close()


def search_contacts(query: Optional[str] = None, member_id: Optional[int] = None):
    """
    Contacts view: prospects matching a free-text query, each flagged when its
    company also appears elsewhere in the team's pipeline.

    Duplicates are judged against every prospect, not just the filtered ones.
    """
    duplicates = find_duplicate_companies(load_prospects())

    session = get_session()
    try:
        q = session.query(Prospect).order_by(Prospect.company, Prospect.id)
        if member_id is not None:
            q = q.filter(Prospect.team_member_id == member_id)
        term = (query or '').strip()
        if term:
            pattern = f'%{_escape_like(term)}%'
            q = q.filter(or_(
                Prospect.company.ilike(pattern, escape='\\'),
                Prospect.contact.ilike(pattern, escape='\\'),
                Prospect.email.ilike(pattern, escape='\\'),
                Prospect.phone.ilike(pattern, escape='\\'),
            ))
        contacts = []
        for p in q.all():
            row = p.to_dict()
            row['is_duplicate'] = company_key(p.company) in duplicates
            contacts.append(row)
    except SQLAlchemyError as e:
        logger.error("Failed to search contacts", exc_info=True)
        raise StoreFailure(str(e)) from e
    finally:
        session.close()

    return {
        'contacts': contacts,
        'duplicates': list(duplicates.values()),
    }


def _escape_like(term):
    """Make % and _ in user input match literally."""
    return term.replace('\\', '\\\\').replace('%', '\\%').replace('_', '\\_')
