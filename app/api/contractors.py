"""
Contractor Directory Routes Blueprint

Public, read-only directory endpoints:
- /api/contractors                 - list, search (?search=) or filter (?specialty=)
- /api/contractors/<id>            - single contractor
- /api/contractors/<id>/reviews    - reviews for a contractor, newest first
"""

import logging
from flask import Blueprint, request, jsonify, current_app
from werkzeug.exceptions import NotFound

logger = logging.getLogger(__name__)

# Create blueprint
contractors_bp = Blueprint('contractors_bp', __name__)


def get_storage():
    return current_app.storage


@contractors_bp.route('/api/contractors', methods=['GET'])
def list_contractors():
    """List contractors, optionally searched or filtered by specialty"""
    storage = get_storage()
    search = (request.args.get('search') or '').strip()
    specialty = (request.args.get('specialty') or '').strip()

    if search:
        contractors = storage.search_contractors(search)
    elif specialty:
        contractors = storage.get_contractors_by_specialty(specialty)
    else:
        contractors = storage.get_all_contractors()

    return jsonify(contractors)


@contractors_bp.route('/api/contractors/<contractor_id>', methods=['GET'])
def get_contractor(contractor_id):
    contractor = get_storage().get_contractor(contractor_id)
    if contractor is None:
        raise NotFound("Contractor not found")
    return jsonify(contractor)


@contractors_bp.route('/api/contractors/<contractor_id>/reviews', methods=['GET'])
def get_contractor_reviews(contractor_id):
    storage = get_storage()
    if storage.get_contractor(contractor_id) is None:
        raise NotFound("Contractor not found")
    return jsonify(storage.get_reviews_by_contractor_id(contractor_id))
