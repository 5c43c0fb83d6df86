"""
Closed enumerations shared by the parser, models and reports.
"""
from enum import Enum


class ActivityType(str, Enum):
    """Kinds of outreach a team member logs in the tracker."""

    EMAILS = 'emails'
    CALLS = 'calls'
    MEETINGS = 'meetings'
    PROPOSALS = 'proposals'

    @classmethod
    def parse(cls, value):
        """Return the member for a raw value, or None if it is not one of ours."""
        try:
            return cls(value)
        except ValueError:
            return None


class Stage(str, Enum):
    """Prospect position in the sales pipeline, in board order."""

    COLD = 'cold'
    CONTACTED = 'contacted'
    MEETING = 'meeting'
    PROPOSAL = 'proposal'
    WON = 'won'
    LOST = 'lost'

    @classmethod
    def parse(cls, value):
        try:
            return cls(value)
        except ValueError:
            return None
