"""
Member resolver — maps export owner names to TeamMember rows.

Deleting a member cascades: its imports, activities and prospects are removed
and the member is deactivated (kept so the name can be reactivated later).
"""
import logging

from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from mission_control.database import get_session
from mission_control.errors import NotFound, StoreFailure
from mission_control.models.activity import Activity
from mission_control.models.import_record import ImportRecord
from mission_control.models.prospect import Prospect
from mission_control.models.team_member import TeamMember

logger = logging.getLogger('services.members')


def resolve_member(name):
    """
    Find the member with this exact name, creating or reactivating it.

    Two uploads racing to create the same new name both end up with the one
    row that won the unique constraint.
    """
    session = get_session()
    try:
        member = session.query(TeamMember).filter_by(name=name).first()
        if member is None:
            member = TeamMember(name=name, is_active=True)
            session.add(member)
            try:
                session.commit()
            except IntegrityError:
                session.rollback()
                member = session.query(TeamMember).filter_by(name=name).one()
            else:
                logger.info("Created team member %r", name, extra={'team_member_id': member.id})
        elif not member.is_active:
            member.is_active = True
            session.commit()
            logger.info("Reactivated team member %r", name, extra={'team_member_id': member.id})
        session.refresh(member)
        session.expunge(member)
        return member
    except SQLAlchemyError as e:
        session.rollback()
        logger.error("Failed to resolve team member %r", name, exc_info=True)
        raise StoreFailure(str(e)) from e
    finally:
        session.close()


def list_team_members():
    """Active members ordered by name."""
    session = get_session()
    try:
        members = session.query(TeamMember).filter_by(is_active=True).order_by(TeamMember.name).all()
        return [m.to_dict() for m in members]
    except SQLAlchemyError as e:
        logger.error("Failed to list team members", exc_info=True)
        raise StoreFailure(str(e)) from e
    finally:
        session.close()


def delete_team_member(member_id):
    """Remove everything the member imported and deactivate them, in one transaction."""
    session = get_session()
    try:
        member = session.get(TeamMember, member_id)
        if member is None:
            raise NotFound('Team member', member_id)

        activities = session.query(Activity).filter_by(team_member_id=member_id).delete(synchronize_session=False)
        prospects = session.query(Prospect).filter_by(team_member_id=member_id).delete(synchronize_session=False)
        imports = session.query(ImportRecord).filter_by(team_member_id=member_id).delete(synchronize_session=False)
        member.is_active = False
        session.commit()

        logger.info(
            "Deleted team member %r (%d imports, %d activities, %d prospects)",
            member.name, imports, activities, prospects,
            extra={'team_member_id': member_id},
        )
    except SQLAlchemyError as e:
        session.rollback()
        logger.error("Failed to delete team member %s", member_id, exc_info=True)
        raise StoreFailure(str(e)) from e
    finally:
        session.close()
