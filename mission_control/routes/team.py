"""
Team routes — member list and member removal.
"""
from flask import Blueprint, jsonify

from mission_control.services import members

bp = Blueprint('team', __name__)


@bp.route('/api/team-members')
def list_team_members():
    return jsonify(members.list_team_members())


@bp.route('/api/team-members/<int:member_id>', methods=['DELETE'])
def delete_team_member(member_id):
    """Deactivate a member and remove their imports, activities and prospects."""
    members.delete_team_member(member_id)
    return jsonify({'status': 'deleted', 'id': member_id})
