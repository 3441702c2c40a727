"""
Design Inspiration Routes Blueprint

- POST /api/design/inspiration  - generate and save an inspiration for the caller
- GET  /api/design/inspirations - the caller's saved inspirations
"""

import logging
from flask import Blueprint, request, jsonify, current_app

from auth import login_required, get_current_user
from services.design_service import DesignService
from validators import validate_payload, DesignInspirationRequest

logger = logging.getLogger(__name__)

# Create blueprint
design_bp = Blueprint('design_bp', __name__)


def get_design_service():
    return DesignService(current_app.ai_service, current_app.storage)


@design_bp.route('/api/design/inspiration', methods=['POST'])
@login_required
def create_inspiration():
    user = get_current_user()
    payload = validate_payload(DesignInspirationRequest, request.get_json(silent=True))
    inspiration = get_design_service().create_inspiration(
        user['id'], payload.room, payload.style, payload.description
    )
    return jsonify(inspiration), 201


@design_bp.route('/api/design/inspirations', methods=['GET'])
@login_required
def list_inspirations():
    user = get_current_user()
    return jsonify(current_app.storage.get_design_inspirations_by_user_id(user['id']))
