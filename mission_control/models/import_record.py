"""
ImportRecord model — one row per uploaded (or restored) snapshot.

The raw document is kept verbatim so any past import can be replayed. At most
one row per team member is current; the partial unique index enforces it.
"""
from sqlalchemy import (
    Column, Integer, Float, Text, Boolean, Date, DateTime, JSON, ForeignKey, Index, text,
)
from sqlalchemy.orm import relationship

from mission_control.database import Base
from mission_control.models.team_member import TeamMember


class ImportRecord(Base):
    __tablename__ = 'imports'
    __table_args__ = (
        Index(
            'uq_imports_one_current_per_member',
            'team_member_id',
            unique=True,
            sqlite_where=text('is_current'),
            postgresql_where=text('is_current'),
        ),
        Index('ix_imports_team_member_id', 'team_member_id'),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    team_member_id = Column(Integer, ForeignKey('team_members.id'), nullable=False)
    exported_at = Column(DateTime(timezone=True), nullable=False)
    week_start = Column(Date, nullable=True)
    raw_snapshot = Column(JSON, nullable=False)
    is_current = Column(Boolean, nullable=False, default=False)
    targets = Column(JSON, nullable=False, default=dict)
    activity_count = Column(JSON, nullable=False, default=dict)  # {emails, calls, meetings, proposals}
    prospect_count = Column(Integer, nullable=False, default=0)
    won_count = Column(Integer, nullable=False, default=0)
    won_revenue = Column(Float, nullable=False, default=0.0)
    imported_at = Column(DateTime(timezone=True), nullable=False)

    team_member = relationship(TeamMember, lazy='joined')

    def to_dict(self, include_snapshot=False):
        data = {
            'id': self.id,
            'team_member_id': self.team_member_id,
            'team_member_name': self.team_member.name if self.team_member else None,
            'exported_at': self.exported_at.isoformat() if self.exported_at else None,
            'week_start': self.week_start.isoformat() if self.week_start else None,
            'is_current': self.is_current,
            'targets': self.targets or {},
            'activity_count': self.activity_count or {},
            'prospect_count': self.prospect_count,
            'won_count': self.won_count,
            'won_revenue': self.won_revenue,
            'imported_at': self.imported_at.isoformat() if self.imported_at else None,
        }
        if include_snapshot:
            data['raw_snapshot'] = self.raw_snapshot
        return data
