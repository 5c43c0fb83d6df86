"""
Query-string parsing shared by the API blueprints.

Invalid values are a client error (400), never silently ignored.
"""
from flask import request
from werkzeug.exceptions import BadRequest

from mission_control.models.enums import ActivityType, Stage


def int_arg(name, minimum=None):
    raw = request.args.get(name)
    if raw in (None, ''):
        return None
    try:
        value = int(raw)
    except ValueError:
        raise BadRequest(f"'{name}' must be an integer")
    if minimum is not None and value < minimum:
        raise BadRequest(f"'{name}' must be at least {minimum}")
    return value


def activity_type_arg(name='type'):
    raw = request.args.get(name)
    if not raw:
        return None
    activity_type = ActivityType.parse(raw)
    if activity_type is None:
        choices = ', '.join(t.value for t in ActivityType)
        raise BadRequest(f"'{name}' must be one of: {choices}")
    return activity_type


def stage_arg(name='stage'):
    raw = request.args.get(name)
    if not raw:
        return None
    stage = Stage.parse(raw)
    if stage is None:
        choices = ', '.join(s.value for s in Stage)
        raise BadRequest(f"'{name}' must be one of: {choices}")
    return stage
