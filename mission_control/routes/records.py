"""
Record routes — activity feed, prospect list and contact search.
"""
from flask import Blueprint, jsonify, request

from mission_control.routes.params import activity_type_arg, int_arg, stage_arg
from mission_control.services import records

bp = Blueprint('records', __name__)


@bp.route('/api/activities')
def list_activities():
    return jsonify(records.list_activities(
        member_id=int_arg('team_member_id'),
        activity_type=activity_type_arg('type'),
        limit=int_arg('limit', minimum=1),
    ))


@bp.route('/api/prospects')
def list_prospects():
    return jsonify(records.list_prospects(
        member_id=int_arg('team_member_id'),
        stage=stage_arg('stage'),
    ))


@bp.route('/api/contacts')
def search_contacts():
    """Free-text contact search with duplicate-company flags."""
    return jsonify(records.search_contacts(
        query=request.args.get('q'),
        member_id=int_arg('team_member_id'),
    ))
