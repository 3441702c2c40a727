"""
Project Routes Blueprint

Owner-scoped project management:
- GET    /api/projects       - caller's projects
- POST   /api/projects       - create a project owned by the caller
- GET    /api/projects/<id>  - owner only
- PATCH  /api/projects/<id>  - partial update, owner only
- DELETE /api/projects/<id>  - owner only; removes the project's quotes too
"""

import logging
from flask import Blueprint, request, jsonify, current_app
from werkzeug.exceptions import NotFound

from auth import login_required, get_current_user, load_authorized_project
from validators import validate_payload, ProjectCreate, ProjectUpdate

logger = logging.getLogger(__name__)

# Create blueprint
projects_bp = Blueprint('projects_bp', __name__)


def get_storage():
    return current_app.storage


@projects_bp.route('/api/projects', methods=['GET'])
@login_required
def list_projects():
    user = get_current_user()
    return jsonify(get_storage().get_projects_by_user_id(user['id']))


@projects_bp.route('/api/projects/<project_id>', methods=['GET'])
@login_required
def get_project(project_id):
    return jsonify(load_authorized_project(project_id, 'read'))


@projects_bp.route('/api/projects', methods=['POST'])
@login_required
def create_project():
    user = get_current_user()
    payload = validate_payload(ProjectCreate, request.get_json(silent=True))

    data = payload.to_api()
    data['userId'] = user['id']
    project = get_storage().create_project(data)
    return jsonify(project), 201


@projects_bp.route('/api/projects/<project_id>', methods=['PATCH'])
@login_required
def update_project(project_id):
    load_authorized_project(project_id, 'update')
    payload = validate_payload(ProjectUpdate, request.get_json(silent=True))

    project = get_storage().update_project(project_id, payload.to_api(partial=True))
    if project is None:
        raise NotFound("Project not found")
    return jsonify(project)


@projects_bp.route('/api/projects/<project_id>', methods=['DELETE'])
@login_required
def delete_project(project_id):
    load_authorized_project(project_id, 'delete')
    if not get_storage().delete_project(project_id):
        raise NotFound("Project not found")
    return jsonify({'success': True})
