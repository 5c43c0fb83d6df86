"""
Prospect model — one pipeline entry from the current import's snapshot.
"""
from sqlalchemy import Column, Integer, Float, Text, DateTime, Enum, ForeignKey
from sqlalchemy.orm import relationship

from mission_control.database import Base
from mission_control.models.team_member import TeamMember
from mission_control.models.enums import Stage


class Prospect(Base):
    __tablename__ = 'prospects'

    id = Column(Integer, primary_key=True, autoincrement=True)
    import_id = Column(Integer, ForeignKey('imports.id'), nullable=False, index=True)
    team_member_id = Column(Integer, ForeignKey('team_members.id'), nullable=False, index=True)
    company = Column(Text, default='')
    contact = Column(Text, default='')
    email = Column(Text, default='')
    phone = Column(Text, default='')
    stage = Column(Enum(Stage, name='prospect_stage', values_callable=lambda e: [m.value for m in e]),
                   nullable=False, default=Stage.COLD)
    deal_value = Column(Float, nullable=False, default=0.0)
    created_at = Column(DateTime(timezone=True), nullable=True)
    last_touch = Column(DateTime(timezone=True), nullable=True)
    won_at = Column(DateTime(timezone=True), nullable=True)  # set iff stage == won

    team_member = relationship(TeamMember, lazy='joined')

    def to_dict(self):
        return {
            'id': self.id,
            'import_id': self.import_id,
            'team_member_id': self.team_member_id,
            'team_member_name': self.team_member.name if self.team_member else None,
            'company': self.company,
            'contact': self.contact,
            'email': self.email,
            'phone': self.phone,
            'stage': self.stage.value,
            'deal_value': self.deal_value,
            'created_at': self.created_at.isoformat() if self.created_at else None,
            'last_touch': self.last_touch.isoformat() if self.last_touch else None,
            'won_at': self.won_at.isoformat() if self.won_at else None,
        }
