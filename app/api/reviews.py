"""
Review Routes Blueprint

- POST /api/reviews - review a contractor; the contractor's rating is recomputed
"""

import logging
from flask import Blueprint, request, jsonify, current_app
from werkzeug.exceptions import NotFound

from auth import login_required, get_current_user, load_authorized_project
from validators import validate_payload, ReviewCreate

logger = logging.getLogger(__name__)

# Create blueprint
reviews_bp = Blueprint('reviews_bp', __name__)


@reviews_bp.route('/api/reviews', methods=['POST'])
@login_required
def create_review():
    storage = current_app.storage
    user = get_current_user()
    payload = validate_payload(ReviewCreate, request.get_json(silent=True))

    if storage.get_contractor(payload.contractor_id) is None:
        raise NotFound("Contractor not found")
    if payload.project_id:
        # A review may only point at one of the reviewer's own projects
        load_authorized_project(payload.project_id, 'read')

    data = payload.to_api()
    data['userId'] = user['id']
    review = storage.create_review(data)
    return jsonify(review), 201
