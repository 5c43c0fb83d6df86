"""
Import routes — upload snapshots, browse history, restore and delete.
"""
import logging

from flask import Blueprint, jsonify, request
from werkzeug.exceptions import BadRequest

from mission_control.routes.params import int_arg
from mission_control.services import imports

logger = logging.getLogger('routes.imports')

bp = Blueprint('imports', __name__)


@bp.route('/api/imports', methods=['POST'])
def upload_imports():
    """
    Multipart upload of one or more tracker exports (field name ``files``).

    Each file's owner is resolved from its contents. Files are imported in
    order and the first failure stops the batch.
    """
    uploads = request.files.getlist('files')
    if not uploads:
        raise BadRequest("No files uploaded (expected multipart field 'files')")
    files = [(upload.filename, upload.read()) for upload in uploads]
    records = imports.import_files(files)
    return jsonify({
        'imported': len(records),
        'imports': [record.to_dict() for record in records],
    }), 201


@bp.route('/api/team-members/<int:member_id>/imports', methods=['POST'])
def import_for_member(member_id):
    """importSnapshot(memberId, json) with the export as the request body."""
    document = request.get_json(silent=True)
    if document is None:
        raise BadRequest('Request body must be a JSON export')
    record = imports.import_document(member_id, document)
    return jsonify(record.to_dict()), 201


@bp.route('/api/imports')
def list_imports():
    """Import history, optionally for one member."""
    return jsonify(imports.list_imports(int_arg('team_member_id')))


@bp.route('/api/imports/current')
def list_current_imports():
    return jsonify(imports.list_current_imports())


@bp.route('/api/imports/<int:import_id>')
def get_import(import_id):
    """A single import including its raw snapshot."""
    return jsonify(imports.get_import(import_id))


@bp.route('/api/imports/<int:import_id>/restore', methods=['POST'])
def restore_import(import_id):
    record = imports.restore_import(import_id)
    return jsonify(record.to_dict()), 201


@bp.route('/api/imports/<int:import_id>', methods=['DELETE'])
def delete_import(import_id):
    imports.delete_import(import_id)
    return jsonify({'status': 'deleted', 'id': import_id})
