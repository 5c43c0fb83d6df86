"""
Activity model — exploded from the current import's snapshot.

week_of is NULL for live activities and holds the week marker for archived ones.
"""
from sqlalchemy import Column, Integer, Text, DateTime, Enum, ForeignKey
from sqlalchemy.orm import relationship

from mission_control.database import Base
from mission_control.models.team_member import TeamMember
from mission_control.models.enums import ActivityType


class Activity(Base):
    __tablename__ = 'activities'

    id = Column(Integer, primary_key=True, autoincrement=True)
    import_id = Column(Integer, ForeignKey('imports.id'), nullable=False, index=True)
    team_member_id = Column(Integer, ForeignKey('team_members.id'), nullable=False, index=True)
    type = Column(Enum(ActivityType, name='activity_type', values_callable=lambda e: [m.value for m in e]),
                  nullable=False)
    name = Column(Text, default='')
    notes = Column(Text, default='')
    timestamp = Column(DateTime(timezone=True), nullable=True)
    week_of = Column(Text, nullable=True)

    team_member = relationship(TeamMember, lazy='joined')

    def to_dict(self):
        return {
            'id': self.id,
            'import_id': self.import_id,
            'team_member_id': self.team_member_id,
            'team_member_name': self.team_member.name if self.team_member else None,
            'type': self.type.value,
            'name': self.name,
            'notes': self.notes,
            'timestamp': self.timestamp.isoformat() if self.timestamp else None,
            'week_of': self.week_of,
        }
