"""
Dashboard routes — health check, team totals and report APIs.
"""
import logging

from flask import Blueprint, jsonify

from mission_control import __version__
from mission_control.routes.params import int_arg
from mission_control.services import reports

logger = logging.getLogger('routes.dashboard')

bp = Blueprint('dashboard', __name__)


@bp.route('/health')
def health_check():
    """Health check endpoint."""
    return jsonify({'status': 'healthy', 'version': __version__}), 200


@bp.route('/api/stats')
def get_stats():
    """Team totals across every member's current import."""
    return jsonify(reports.get_team_stats())


@bp.route('/api/reports/leaderboard')
def leaderboard():
    return jsonify(reports.get_leaderboard())


@bp.route('/api/reports/pipeline')
def pipeline_summary():
    """Count and deal value per stage over all prospects."""
    return jsonify(reports.get_pipeline_summary())


@bp.route('/api/reports/progress')
def member_progress():
    """Per-member progress bars against weekly targets."""
    return jsonify(reports.get_member_progress())


@bp.route('/api/pipeline')
def pipeline_board():
    """Kanban board, optionally for a single member."""
    return jsonify(reports.get_pipeline_board(int_arg('team_member_id')))
